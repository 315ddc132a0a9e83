"""Calendar extraction models produced by the AI extractor.

An :class:`ExtractionResult` is the fully-defaulted value that the
extractor builds from the AI's JSON reply.  It is cached under the
preview message id (see src/pipeline/interaction_cache.py) and later
consumed by the button resolver to create a Google event, a Google task
or a Notion-only record.

All models are frozen; the helpers that "change" a result return a copy.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ItemKind(str, Enum):  # noqa: UP042
    """Whether the item happens at a time (event) or is due by a time (task)."""

    EVENT = "event"
    TASK = "task"


class Priority(str, Enum):  # noqa: UP042
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def label(self) -> str:
        """Select-option label used by the Notion calendar database."""
        return _PRIORITY_LABELS[self]


_PRIORITY_LABELS = {Priority.HIGH: "高", Priority.MEDIUM: "中", Priority.LOW: "低"}


class ReminderMode(str, Enum):  # noqa: UP042
    EXACT = "exact"
    BEFORE = "before"


class ContentSource(str, Enum):  # noqa: UP042
    """Which input path produced an extraction."""

    TEXT = "text"
    IMAGE = "image"
    PDF = "pdf"
    COMMAND = "ai-command"


class Contact(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str | None = None
    phone: str | None = None
    email: str | None = None

    def is_empty(self) -> bool:
        return not (self.name or self.phone or self.email)


class Reminder(BaseModel):
    """Reminder hint parsed from phrases like "remind me 1 hour before"."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    mode: ReminderMode = ReminderMode.BEFORE
    exact_time: str | None = None
    before_minutes: int | None = None
    description: str | None = None


class ExtractionResult(BaseModel):
    """Structured calendar/task data extracted from a message, image or PDF."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1)
    kind: ItemKind = ItemKind.EVENT
    start_date: str | None = None  # YYYY-MM-DD
    end_date: str | None = None
    start_time: str | None = None  # HH:MM
    end_time: str | None = None
    location: str | None = None
    deadline: str | None = None
    deadline_description: str | None = None
    contact: Contact = Field(default_factory=Contact)
    priority: Priority = Priority.MEDIUM
    summary: str | None = None
    description: str | None = None
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    reminder: Reminder = Field(default_factory=Reminder)
    source: ContentSource = ContentSource.TEXT

    @property
    def is_usable(self) -> bool:
        """True when downstream actions have a title and some date to work with."""
        return bool(self.title.strip()) and bool(self.start_date or self.deadline)

    @property
    def effective_start_date(self) -> str | None:
        return self.start_date or self.deadline

    def with_deadline_fallback(self) -> ExtractionResult:
        """Copy with ``start_date`` filled from ``deadline`` when missing."""
        if self.start_date or not self.deadline:
            return self
        return self.model_copy(update={"start_date": self.deadline})

    def display_title(self, max_length: int = 256) -> str:
        if len(self.title) <= max_length:
            return self.title
        return self.title[: max_length - 1] + "…"
