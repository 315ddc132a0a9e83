"""Downstream record models: Notion pages and Google Calendar/Tasks objects."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

from pydantic import BaseModel, ConfigDict, Field

from src.models.content import FetchedContent
from src.models.extraction import ContentSource, ExtractionResult, ItemKind, Priority


class StoreRecordRef(BaseModel):
    """Identity of a created Notion page."""

    model_config = ConfigDict(frozen=True)

    id: str
    url: str


class CalendarEventRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    link: str | None = None


class TaskRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str


class CalendarRecord(BaseModel):
    """Fields written to the Notion calendar database.

    ``back_link`` points at the Google event when the record is created
    alongside one.  ``record_type`` is ``"note"`` for store-only saves.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    kind: ItemKind = ItemKind.EVENT
    record_type: str = "event"
    start_date: str | None = None
    end_date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    location: str | None = None
    deadline: str | None = None
    deadline_description: str | None = None
    priority: Priority = Priority.MEDIUM
    summary: str | None = None
    contact_lines: list[str] = Field(default_factory=list)
    source: ContentSource = ContentSource.TEXT
    back_link: str | None = None

    @classmethod
    def from_extraction(
        cls,
        result: ExtractionResult,
        record_type: str,
        back_link: str | None = None,
    ) -> CalendarRecord:
        contact = result.contact
        contact_lines = [
            f"{label}: {value}"
            for label, value in (("Name", contact.name), ("Phone", contact.phone), ("Email", contact.email))
            if value
        ]
        return cls(
            title=result.title,
            kind=result.kind,
            record_type=record_type,
            start_date=result.effective_start_date,
            end_date=result.end_date,
            start_time=result.start_time,
            end_time=result.end_time,
            location=result.location,
            deadline=result.deadline,
            deadline_description=result.deadline_description,
            priority=result.priority,
            summary=result.summary,
            contact_lines=contact_lines,
            source=result.source,
            back_link=back_link,
        )


class InfoRecord(BaseModel):
    """Fields written to the Notion info database for a collected link."""

    model_config = ConfigDict(frozen=True)

    content: FetchedContent
    saved_on: str  # ISO timestamp with offset, operating time zone


class EventWindow(BaseModel):
    """Start/end of a calendar event in the operating time zone.

    ``datetime`` values are naive local times; ``date`` values mean an
    all-day event whose ``end`` is exclusive (the day after the last day).
    """

    model_config = ConfigDict(frozen=True)

    start: datetime | date
    end: datetime | date

    @property
    def all_day(self) -> bool:
        return not isinstance(self.start, datetime)

    @classmethod
    def from_extraction(cls, result: ExtractionResult) -> EventWindow:
        start_day = date.fromisoformat(result.effective_start_date or "")
        end_day = date.fromisoformat(result.end_date) if result.end_date else start_day
        if end_day < start_day:
            end_day = start_day

        if not result.start_time:
            return cls(start=start_day, end=end_day + timedelta(days=1))

        start = datetime.combine(start_day, time.fromisoformat(result.start_time))
        if result.end_time:
            end = datetime.combine(end_day, time.fromisoformat(result.end_time))
            if end <= start:
                end = start + timedelta(hours=1)
        else:
            end = start + timedelta(hours=1)
        return cls(start=start, end=end)


class CalendarItem(BaseModel):
    """A row read back from the Notion calendar database for ``/today``.

    ``on`` is the ISO date of the item (an event's day, a task's due
    date); ``time`` is set only for timed events.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    kind: ItemKind = ItemKind.EVENT
    on: str | None = None
    time: str | None = None
    priority: Priority = Priority.MEDIUM
    in_progress: bool = False
