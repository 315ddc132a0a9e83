"""Unit tests for the /today agenda service."""

from __future__ import annotations

from datetime import date
from unittest.mock import MagicMock

import pytest

from src.models.chat import ViewTone
from src.models.extraction import ItemKind
from src.models.records import CalendarItem
from src.services.agenda_service import AgendaService
from src.utils.clock import OperatingClock
from src.utils.errors import ServiceNotConfiguredError


class TestToday:
    @pytest.mark.asyncio
    async def test_queries_operating_day(self, mock_document_store: MagicMock, clock: OperatingClock) -> None:
        mock_document_store.query_calendar_items.return_value = [
            CalendarItem(title="Standup", on="2025-06-10", time="09:30"),
            CalendarItem(title="Report", kind=ItemKind.TASK, on="2025-06-10"),
        ]

        view = await AgendaService(mock_document_store, clock).today()

        mock_document_store.query_calendar_items.assert_awaited_once_with(date(2025, 6, 10))
        assert view.title == "📅 Today | 2025-06-10 (Tuesday)"
        assert view.tone is ViewTone.WARNING
        assert view.fields[0].value == "• 09:30  Standup"

    @pytest.mark.asyncio
    async def test_store_errors_propagate(self, mock_document_store: MagicMock, clock: OperatingClock) -> None:
        mock_document_store.query_calendar_items.side_effect = ServiceNotConfiguredError("Notion calendar database")

        with pytest.raises(ServiceNotConfiguredError):
            await AgendaService(mock_document_store, clock).today()
