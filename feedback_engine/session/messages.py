"""Action types and the canned messages substituted for empty feedback."""

from __future__ import annotations

from enum import Enum


class ActionType(str, Enum):
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    AI_DECIDE = "ai_decide"
    NO_FEEDBACK = "no_feedback"


NO_FEEDBACK_MESSAGE = (
    "User did not provide any feedback. Please continue without human guidance. "
    "Use your best judgment to proceed safely."
)
AUTO_CLOSE_MESSAGE = (
    "User did not provide any feedback. You are now given the free will to judge and decide. "
    "Use your best judgment to proceed safely."
)
APPROVAL_MESSAGE = "I approve. Please continue."
REJECTION_MESSAGE = "I reject. Please think of a better solution."
AI_DECIDE_MESSAGE = (
    "I want you to judge your own decision and decide, I give you free will to judge and decide. "
    "Please consider all implications and potential risks before proceeding."
)
WINDOW_CLOSED_MESSAGE = "User closed the feedback window without submitting."

MAX_IMAGES_MESSAGE = "You can attach a maximum of {max_images} images."
MAX_IMAGES_NO_MORE_MESSAGE = "You can attach a maximum of {max_images} images. No more images can be added."
PARTIAL_DROP_MESSAGE = "Added {added} image(s); {skipped} skipped. You can attach a maximum of {max_images} images."
