"""Today's agenda read back from the Notion calendar database (``/today``)."""

from __future__ import annotations

from src.interfaces.document_store_provider import IDocumentStoreProvider
from src.models.chat import MessageView
from src.services import view_formatter
from src.utils.clock import OperatingClock
from src.utils.logging import get_logger


class AgendaService:
    """Builds the ``/today`` overview for the operating time zone's current day."""

    def __init__(self, document_store: IDocumentStoreProvider, clock: OperatingClock) -> None:
        self._document_store = document_store
        self._clock = clock
        self._logger = get_logger(__name__)

    async def today(self) -> MessageView:
        """Raises ``ServiceNotConfiguredError`` or ``ProviderUnavailableError`` from the store."""
        day = self._clock.today()
        items = await self._document_store.query_calendar_items(day)
        self._logger.info("agenda_built", day=day.isoformat(), items=len(items))
        return view_formatter.today_view(day.isoformat(), self._clock.weekday_name(), items)
