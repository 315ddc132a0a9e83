"""Button action identifiers and resolution outcomes.

A preview message carries four buttons whose ids are
``<action-tag>:<ui-message-id>``.  :func:`parse_action_id` splits on the
first ``:``; an unknown tag is not an error, it resolves to
``ResolutionOutcome.UNRECOGNIZED`` and is only logged.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from src.models.chat import MessageView

ACTION_PREFIX = "calendar_"


class ActionTag(str, Enum):  # noqa: UP042
    CREATE_EVENT = "calendar_event"
    CREATE_TASK = "calendar_task"
    STORE_ONLY = "calendar_notion"
    CANCEL = "calendar_cancel"

    def custom_id(self, ui_message_id: str) -> str:
        return f"{self.value}:{ui_message_id}"


class ResolutionOutcome(str, Enum):  # noqa: UP042
    """Terminal and non-terminal results of a button click.

    EVENT_CREATED, TASK_CREATED, STORED and CANCELLED are terminal and
    delete the pending entry.  SERVICE_UNAVAILABLE and FAILED keep it so
    the user can pick another action.  EXPIRED, IN_PROGRESS and
    UNRECOGNIZED have no side effects.
    """

    EVENT_CREATED = "event_created"
    TASK_CREATED = "task_created"
    STORED = "stored"
    CANCELLED = "cancelled"
    SERVICE_UNAVAILABLE = "service_unavailable"
    FAILED = "failed"
    EXPIRED = "expired"
    IN_PROGRESS = "in_progress"
    UNRECOGNIZED = "unrecognized"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL = frozenset(
    {
        ResolutionOutcome.EVENT_CREATED,
        ResolutionOutcome.TASK_CREATED,
        ResolutionOutcome.STORED,
        ResolutionOutcome.CANCELLED,
    }
)


class Resolution(BaseModel):
    """What the chat adapter should do after a click.

    ``ephemeral`` views are sent privately to the clicker; others replace
    the preview message (and clear its buttons).
    """

    model_config = ConfigDict(frozen=True)

    outcome: ResolutionOutcome
    view: MessageView | None = None
    ephemeral: bool = False


def is_calendar_action(custom_id: str) -> bool:
    return custom_id.startswith(ACTION_PREFIX)


def parse_action_id(custom_id: str) -> tuple[ActionTag | None, str]:
    """Split ``<tag>:<id>`` on the first ``:``; unknown tags give ``None``."""
    tag, _, ui_message_id = custom_id.partition(":")
    try:
        return ActionTag(tag), ui_message_id
    except ValueError:
        return None, ui_message_id
