"""Cyclone domain models, re-exported for ``from src.models import ...``.

Submodules by concern:
    - extraction.py  : AI extraction result and its enums
    - content.py     : URL categories and fetched link content
    - records.py     : Notion records and Google event/task references
    - chat.py        : platform-neutral views and inbound messages
    - interaction.py : button action ids and resolution outcomes
"""

from __future__ import annotations

from src.models.chat import (
    ActionStyle,
    Attachment,
    IncomingMessage,
    MessageView,
    ViewAction,
    ViewField,
    ViewTone,
)
from src.models.content import FetchedContent, UrlCategory
from src.models.extraction import (
    Contact,
    ContentSource,
    ExtractionResult,
    ItemKind,
    Priority,
    Reminder,
    ReminderMode,
)
from src.models.interaction import (
    ActionTag,
    Resolution,
    ResolutionOutcome,
    is_calendar_action,
    parse_action_id,
)
from src.models.records import (
    CalendarEventRef,
    CalendarItem,
    CalendarRecord,
    EventWindow,
    InfoRecord,
    StoreRecordRef,
    TaskRef,
)

__all__ = [
    "ActionStyle",
    "ActionTag",
    "Attachment",
    "CalendarEventRef",
    "CalendarItem",
    "CalendarRecord",
    "Contact",
    "ContentSource",
    "EventWindow",
    "ExtractionResult",
    "FetchedContent",
    "IncomingMessage",
    "InfoRecord",
    "ItemKind",
    "MessageView",
    "Priority",
    "Reminder",
    "ReminderMode",
    "Resolution",
    "ResolutionOutcome",
    "StoreRecordRef",
    "TaskRef",
    "UrlCategory",
    "ViewAction",
    "ViewField",
    "ViewTone",
    "is_calendar_action",
    "parse_action_id",
]
