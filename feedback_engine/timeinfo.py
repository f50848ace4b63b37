"""Current-time annotation appended to tool responses."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone as dt_timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

TIME_FORMATS = ("full", "iso", "date", "time", "unix")


@dataclass
class TimeInfo:
    formatted: str
    details: dict[str, Any] = field(default_factory=dict)

    def details_text(self) -> str:
        return "\n".join(f"{key}: {value}" for key, value in self.details.items())


def _resolve_zone(name: str | None) -> tuple[tzinfo, str]:
    if name:
        try:
            return ZoneInfo(name), name
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Invalid timezone: %s. Using local timezone.", name)
    local = datetime.now().astimezone().tzinfo or dt_timezone.utc
    return local, str(local)


def get_time_info(fmt: str = "full", timezone: str | None = None, now: datetime | None = None) -> TimeInfo:
    zone, zone_name = _resolve_zone(timezone)
    moment = (now or datetime.now(dt_timezone.utc)).astimezone(zone)
    details: dict[str, Any] = {"timezone": zone_name}
    unix_s = int(moment.timestamp())
    kind = (fmt or "full").strip().lower()
    if kind == "iso":
        return TimeInfo(moment.isoformat(), details)
    if kind == "date":
        return TimeInfo(moment.strftime("%Y-%m-%d"), details)
    if kind == "time":
        return TimeInfo(moment.strftime("%H:%M:%S"), details)
    if kind == "unix":
        details["milliseconds"] = int(moment.timestamp() * 1000)
        return TimeInfo(str(unix_s), details)
    details["date"] = moment.strftime("%Y-%m-%d")
    details["time"] = moment.strftime("%H:%M:%S")
    details["iso"] = moment.astimezone(dt_timezone.utc).isoformat()
    details["unix"] = unix_s
    return TimeInfo(moment.strftime("%Y-%m-%d %H:%M:%S %Z").strip(), details)
