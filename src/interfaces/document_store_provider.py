"""Abstract base class for the document store (Notion).

Two databases are written: the calendar database receives items created
from extraction results and quick-entry commands, and the info database
receives collected links.  Writes must fail loudly; a dropped record is
worse than an error message in the channel.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from src.models.records import CalendarItem, CalendarRecord, InfoRecord, StoreRecordRef


# Concrete implementation: NotionDocumentStore (src/providers/document_store/)
class IDocumentStoreProvider(ABC):
    """Contract for services that persist calendar items and links."""

    @abstractmethod
    async def create_record(self, record: CalendarRecord) -> StoreRecordRef:
        """Create a page in the calendar database.

        Raises
        ------
        src.utils.errors.ServiceNotConfiguredError
            If the calendar database is not configured.
        src.utils.errors.DownstreamWriteError
            If the store rejected the write.
        """

    @abstractmethod
    async def create_info_record(self, record: InfoRecord) -> StoreRecordRef:
        """Create a page in the info database for a collected link."""

    @abstractmethod
    async def query_calendar_items(self, day: date) -> list[CalendarItem]:
        """Return the events on *day* and every open task in the calendar database.

        Open tasks are returned regardless of due date so callers can
        tell overdue ones apart from those due on *day*.

        Raises
        ------
        src.utils.errors.ServiceNotConfiguredError
            If the calendar database is not configured.
        src.utils.errors.ProviderUnavailableError
            If the query failed.
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if credentials are configured."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"notion"``."""
