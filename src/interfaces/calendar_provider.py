"""Abstract base class for the external calendar and task service.

Callers must be able to tell "not configured" from "failed": the first
raises :class:`ServiceNotConfiguredError` (and can be checked upfront
with :meth:`is_configured`), the second :class:`DownstreamWriteError`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from src.models.records import CalendarEventRef, EventWindow, TaskRef


# Concrete implementation: GoogleWorkspaceProvider (src/providers/calendar/)
class ICalendarProvider(ABC):
    """Contract for services that create calendar events and to-do tasks."""

    @abstractmethod
    async def create_event(
        self,
        title: str,
        window: EventWindow,
        description: str | None = None,
        location: str | None = None,
    ) -> CalendarEventRef:
        """Create a calendar event and return its id and web link."""

    @abstractmethod
    async def create_task(
        self,
        title: str,
        notes: str | None = None,
        due: date | None = None,
    ) -> TaskRef:
        """Create a task in the user's first task list."""

    @abstractmethod
    def is_configured(self) -> bool:
        """Return ``True`` if credentials are present (no network call)."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"google"``."""
