"""Services package for request dispatch"""

from .actions import (
    ActionResult,
    ActionStatus,
    MessageAction,
    MessageActionKind,
    UserAction,
    UserActionKind,
    handle_message_action,
    handle_user_action,
)

__all__ = [
    "ActionResult",
    "ActionStatus",
    "MessageAction",
    "MessageActionKind",
    "UserAction",
    "UserActionKind",
    "handle_message_action",
    "handle_user_action",
]
