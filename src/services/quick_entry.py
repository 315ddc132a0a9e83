"""Validated quick entries from ``/add-event`` and ``/add-task``.

Both commands write straight to the Notion calendar database without an
AI step, so their arguments are checked here and rejected with
:class:`InvalidInputError` before anything is sent.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, time

from src.interfaces.document_store_provider import IDocumentStoreProvider
from src.models.extraction import ContentSource, ItemKind, Priority
from src.models.records import CalendarRecord, StoreRecordRef
from src.utils.errors import InvalidInputError
from src.utils.logging import get_logger

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^\d{2}:\d{2}$")


@dataclass(frozen=True)
class QuickEntry:
    """A saved quick entry and the record it produced."""

    record: CalendarRecord
    ref: StoreRecordRef


def validate_date(value: str, field_name: str = "date") -> str:
    if not _DATE_RE.match(value):
        raise InvalidInputError(message=f"Invalid {field_name}: use YYYY-MM-DD (e.g. 2026-02-15)")
    try:
        date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidInputError(message=f"Invalid {field_name}: {value} is not a calendar date") from exc
    return value


def validate_time(value: str) -> str:
    if not _TIME_RE.match(value):
        raise InvalidInputError(message="Invalid time: use HH:MM (e.g. 14:30)")
    try:
        time.fromisoformat(value)
    except ValueError as exc:
        raise InvalidInputError(message=f"Invalid time: {value} is not a clock time") from exc
    return value


class QuickEntryService:
    def __init__(self, document_store: IDocumentStoreProvider) -> None:
        self._document_store = document_store
        self._logger = get_logger(__name__)

    async def add_event(
        self,
        title: str,
        on: str,
        at: str | None = None,
        location: str | None = None,
        description: str | None = None,
    ) -> QuickEntry:
        """Create an event record; no time means an all-day event."""
        title = self._require_title(title)
        record = CalendarRecord(
            title=title,
            kind=ItemKind.EVENT,
            record_type="event",
            start_date=validate_date(on),
            start_time=validate_time(at) if at else None,
            location=location or None,
            summary=description or None,
            priority=Priority.MEDIUM,
            source=ContentSource.COMMAND,
        )
        return await self._save(record)

    async def add_task(
        self,
        title: str,
        deadline: str | None = None,
        priority: Priority = Priority.MEDIUM,
        description: str | None = None,
    ) -> QuickEntry:
        title = self._require_title(title)
        due = validate_date(deadline, "deadline") if deadline else None
        record = CalendarRecord(
            title=title,
            kind=ItemKind.TASK,
            record_type="task",
            start_date=due,
            deadline=due,
            summary=description or None,
            priority=priority,
            source=ContentSource.COMMAND,
        )
        return await self._save(record)

    async def _save(self, record: CalendarRecord) -> QuickEntry:
        ref = await self._document_store.create_record(record)
        self._logger.info(
            "quick_entry_saved",
            record_type=record.record_type,
            title=record.title,
            record_id=ref.id,
        )
        return QuickEntry(record=record, ref=ref)

    @staticmethod
    def _require_title(title: str) -> str:
        title = (title or "").strip()
        if not title:
            raise InvalidInputError(message="Title must not be empty")
        return title
