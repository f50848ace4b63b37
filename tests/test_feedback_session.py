from __future__ import annotations

from pathlib import Path

import pytest

from feedback_engine.errors import CapacityExceededError, InvalidImageFormatError, SessionClosedError
from feedback_engine.session.messages import (
    AI_DECIDE_MESSAGE,
    APPROVAL_MESSAGE,
    AUTO_CLOSE_MESSAGE,
    NO_FEEDBACK_MESSAGE,
    REJECTION_MESSAGE,
    ActionType,
)
from feedback_engine.session.state import FeedbackSession


def _image(tmp_path: Path, name: str) -> Path:
    path = tmp_path / name
    path.write_bytes(b"not-really-an-image")
    return path


def test_submit_with_text_keeps_literal_text() -> None:
    session = FeedbackSession()
    session.set_text("fix the bug")
    assert session.submit() is True
    assert session.action_type is ActionType.SUBMIT
    assert session.text == "fix the bug"
    assert session.terminal and session.succeeded


def test_submit_with_whitespace_uses_no_feedback_message() -> None:
    session = FeedbackSession()
    session.set_text("   \n\t ")
    session.submit()
    assert session.action_type is ActionType.NO_FEEDBACK
    assert session.text == NO_FEEDBACK_MESSAGE
    assert session.succeeded


@pytest.mark.parametrize(
    ("action", "expected_type", "expected_text"),
    [
        ("approve", ActionType.APPROVE, APPROVAL_MESSAGE),
        ("reject", ActionType.REJECT, REJECTION_MESSAGE),
        ("ai_decide", ActionType.AI_DECIDE, AI_DECIDE_MESSAGE),
        ("timer_expired", ActionType.NO_FEEDBACK, AUTO_CLOSE_MESSAGE),
    ],
)
def test_empty_text_actions_use_canned_messages(action: str, expected_type: ActionType, expected_text: str) -> None:
    session = FeedbackSession()
    getattr(session, action)()
    assert session.action_type is expected_type
    assert session.text == expected_text
    assert session.succeeded


def test_approve_keeps_user_text() -> None:
    session = FeedbackSession()
    session.set_text("looks good, ship it")
    session.approve()
    assert session.text == "looks good, ship it"
    assert session.action_type is ActionType.APPROVE


def test_canned_messages_are_distinct() -> None:
    messages = {NO_FEEDBACK_MESSAGE, AUTO_CLOSE_MESSAGE, APPROVAL_MESSAGE, REJECTION_MESSAGE, AI_DECIDE_MESSAGE}
    assert len(messages) == 5


@pytest.mark.parametrize("first", ["submit", "approve", "reject", "ai_decide", "cancel", "timer_expired"])
@pytest.mark.parametrize("second", ["submit", "approve", "reject", "ai_decide", "cancel", "timer_expired"])
def test_second_terminal_action_is_ignored(first: str, second: str) -> None:
    session = FeedbackSession()
    session.set_text("first words")
    assert getattr(session, first)() is True
    recorded = (session.action_type, session.text, session.succeeded)

    assert getattr(session, second)() is False
    assert (session.action_type, session.text, session.succeeded) == recorded


def test_cancel_does_not_succeed() -> None:
    session = FeedbackSession()
    session.set_text("never mind")
    session.cancel()
    assert session.terminal is True
    assert session.succeeded is False


def test_attach_beyond_capacity_fails_and_keeps_list(tmp_path: Path) -> None:
    session = FeedbackSession()
    for idx in range(5):
        session.attach(_image(tmp_path, f"shot{idx}.png"))

    with pytest.raises(CapacityExceededError) as excinfo:
        session.attach(_image(tmp_path, "extra.png"))
    assert excinfo.value.max_images == 5
    assert excinfo.value.available == 0
    assert len(session.images) == 5


def test_attach_rejects_unsupported_extension(tmp_path: Path) -> None:
    session = FeedbackSession()
    with pytest.raises(InvalidImageFormatError):
        session.attach(_image(tmp_path, "notes.txt"))
    assert session.images == []


def test_attach_derives_mime_type_from_extension(tmp_path: Path) -> None:
    session = FeedbackSession()
    attachment = session.attach(_image(tmp_path, "photo.JPEG"))
    assert attachment.mime_type == "image/jpeg"
    assert attachment.size_bytes == len(b"not-really-an-image")


def test_attach_many_filters_invalid_and_fills_available_slots(tmp_path: Path) -> None:
    session = FeedbackSession(max_images=3)
    session.attach(_image(tmp_path, "a.png"))
    dropped = [
        _image(tmp_path, "b.gif"),
        _image(tmp_path, "readme.md"),
        _image(tmp_path, "c.bmp"),
        _image(tmp_path, "d.jpg"),
    ]
    added = session.attach_many(dropped)
    assert [item.file_path.name for item in added] == ["b.gif", "c.bmp"]
    assert len(session.images) == 3

    with pytest.raises(CapacityExceededError):
        session.attach_many([_image(tmp_path, "e.png")])


def test_image_operations_rejected_after_terminal(tmp_path: Path) -> None:
    session = FeedbackSession()
    attachment = session.attach(_image(tmp_path, "a.png"))
    session.submit()
    with pytest.raises(SessionClosedError):
        session.attach(_image(tmp_path, "b.png"))
    with pytest.raises(SessionClosedError):
        session.remove(attachment)
    with pytest.raises(SessionClosedError):
        session.set_text("late edit")


def test_remove_attachment_only_once(tmp_path: Path) -> None:
    session = FeedbackSession()
    kept = session.attach(_image(tmp_path, "kept.png"))
    pasted = session.attach(_image(tmp_path, "pasted.png"), temporary=True)
    assert session.remove(pasted) is True
    assert session.remove(pasted) is False
    assert session.images == [kept]


def test_insert_snippet_appends_on_new_line() -> None:
    session = FeedbackSession()
    session.set_text("Context:")
    session.insert_snippet("Please add tests.")
    assert session.text == "Context:\nPlease add tests."
    assert session.terminal is False
