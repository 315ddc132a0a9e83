"""Unit tests for the preview button resolver."""

from __future__ import annotations

from datetime import date, datetime
from unittest.mock import MagicMock

import pytest

from src.models.extraction import ExtractionResult, ItemKind
from src.models.interaction import ActionTag, ResolutionOutcome
from src.models.records import CalendarRecord, EventWindow
from src.pipeline.button_resolver import ButtonResolver
from src.pipeline.interaction_cache import InteractionCache
from src.utils.errors import DownstreamWriteError, ServiceNotConfiguredError

UI_ID = "900000000000000001"


@pytest.fixture
def resolver(
    interaction_cache: InteractionCache,
    mock_calendar: MagicMock,
    mock_document_store: MagicMock,
) -> ButtonResolver:
    return ButtonResolver(interaction_cache, mock_calendar, mock_document_store)



# ======================================================================
# Terminal outcomes
# ======================================================================


class TestTerminalOutcomes:
    @pytest.mark.asyncio
    async def test_event_creates_event_and_record(
        self,
        resolver: ButtonResolver,
        interaction_cache: InteractionCache,
        mock_calendar: MagicMock,
        mock_document_store: MagicMock,
        sample_result: ExtractionResult,
    ) -> None:
        await interaction_cache.put_analysis(UI_ID, sample_result)

        resolution = await resolver.resolve(ActionTag.CREATE_EVENT.custom_id(UI_ID))

        assert resolution.outcome is ResolutionOutcome.EVENT_CREATED
        assert resolution.ephemeral is False
        window = mock_calendar.create_event.call_args.kwargs["window"]
        assert window == EventWindow(start=datetime(2025, 6, 11, 14, 0), end=datetime(2025, 6, 11, 15, 0))
        record: CalendarRecord = mock_document_store.create_record.call_args.args[0]
        assert record.record_type == "event"
        assert record.back_link == "https://calendar.google.com/event?eid=evt-1"
        assert await interaction_cache.get_analysis(UI_ID) is None
        assert await interaction_cache.get_record(UI_ID) == "page-1"

    @pytest.mark.asyncio
    async def test_task_uses_deadline_as_due_date(
        self,
        resolver: ButtonResolver,
        interaction_cache: InteractionCache,
        mock_calendar: MagicMock,
        mock_document_store: MagicMock,
    ) -> None:
        result = ExtractionResult(
            title="繳交報告", kind=ItemKind.TASK, deadline="2025-06-20", confidence=0.8
        )
        await interaction_cache.put_analysis(UI_ID, result)

        resolution = await resolver.resolve(ActionTag.CREATE_TASK.custom_id(UI_ID))

        assert resolution.outcome is ResolutionOutcome.TASK_CREATED
        assert mock_calendar.create_task.call_args.kwargs["due"] == date(2025, 6, 20)
        assert mock_document_store.create_record.call_args.args[0].record_type == "task"
        assert await interaction_cache.get_analysis(UI_ID) is None

    @pytest.mark.asyncio
    async def test_store_only_skips_calendar(
        self,
        resolver: ButtonResolver,
        interaction_cache: InteractionCache,
        mock_calendar: MagicMock,
        mock_document_store: MagicMock,
        sample_result: ExtractionResult,
    ) -> None:
        await interaction_cache.put_analysis(UI_ID, sample_result)

        resolution = await resolver.resolve(ActionTag.STORE_ONLY.custom_id(UI_ID))

        assert resolution.outcome is ResolutionOutcome.STORED
        mock_calendar.create_event.assert_not_called()
        mock_calendar.create_task.assert_not_called()
        assert mock_document_store.create_record.call_args.args[0].record_type == "note"
        assert await interaction_cache.get_record(UI_ID) == "page-1"

    @pytest.mark.asyncio
    async def test_cancel_deletes_entry_without_writes(
        self,
        resolver: ButtonResolver,
        interaction_cache: InteractionCache,
        mock_calendar: MagicMock,
        mock_document_store: MagicMock,
        sample_result: ExtractionResult,
    ) -> None:
        await interaction_cache.put_analysis(UI_ID, sample_result)

        resolution = await resolver.resolve(ActionTag.CANCEL.custom_id(UI_ID))

        assert resolution.outcome is ResolutionOutcome.CANCELLED
        assert resolution.view is not None
        mock_calendar.create_event.assert_not_called()
        mock_document_store.create_record.assert_not_called()
        assert await interaction_cache.get_analysis(UI_ID) is None

    @pytest.mark.asyncio
    async def test_second_click_after_terminal_is_expired(
        self,
        resolver: ButtonResolver,
        interaction_cache: InteractionCache,
        mock_document_store: MagicMock,
        sample_result: ExtractionResult,
    ) -> None:
        await interaction_cache.put_analysis(UI_ID, sample_result)
        await resolver.resolve(ActionTag.STORE_ONLY.custom_id(UI_ID))

        resolution = await resolver.resolve(ActionTag.STORE_ONLY.custom_id(UI_ID))

        assert resolution.outcome is ResolutionOutcome.EXPIRED
        assert mock_document_store.create_record.await_count == 1


# ======================================================================
# Non-terminal outcomes
# ======================================================================


class TestNonTerminalOutcomes:
    @pytest.mark.asyncio
    async def test_unconfigured_calendar_keeps_entry(
        self,
        resolver: ButtonResolver,
        interaction_cache: InteractionCache,
        mock_calendar: MagicMock,
        mock_document_store: MagicMock,
        sample_result: ExtractionResult,
    ) -> None:
        mock_calendar.is_configured.return_value = False
        await interaction_cache.put_analysis(UI_ID, sample_result)

        resolution = await resolver.resolve(ActionTag.CREATE_EVENT.custom_id(UI_ID))

        assert resolution.outcome is ResolutionOutcome.SERVICE_UNAVAILABLE
        assert resolution.ephemeral is True
        assert "Google Calendar" in resolution.view.title
        mock_document_store.create_record.assert_not_called()
        assert await interaction_cache.get_analysis(UI_ID) == sample_result

    @pytest.mark.asyncio
    async def test_unconfigured_store_keeps_entry(
        self,
        resolver: ButtonResolver,
        interaction_cache: InteractionCache,
        mock_document_store: MagicMock,
        sample_result: ExtractionResult,
    ) -> None:
        mock_document_store.create_record.side_effect = ServiceNotConfiguredError(
            "Notion is not configured", provider_name="Notion"
        )
        await interaction_cache.put_analysis(UI_ID, sample_result)

        resolution = await resolver.resolve(ActionTag.STORE_ONLY.custom_id(UI_ID))

        assert resolution.outcome is ResolutionOutcome.SERVICE_UNAVAILABLE
        assert "Notion" in resolution.view.title
        assert await interaction_cache.get_analysis(UI_ID) == sample_result

    @pytest.mark.asyncio
    async def test_downstream_failure_keeps_entry_and_releases_claim(
        self,
        resolver: ButtonResolver,
        interaction_cache: InteractionCache,
        mock_calendar: MagicMock,
        sample_result: ExtractionResult,
    ) -> None:
        mock_calendar.create_event.side_effect = DownstreamWriteError("quota exceeded", provider_name="google")
        await interaction_cache.put_analysis(UI_ID, sample_result)

        resolution = await resolver.resolve(ActionTag.CREATE_EVENT.custom_id(UI_ID))

        assert resolution.outcome is ResolutionOutcome.FAILED
        assert resolution.ephemeral is True
        assert "quota exceeded" in resolution.view.description
        assert await interaction_cache.get_analysis(UI_ID) == sample_result
        assert await interaction_cache.claim(UI_ID) is True

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_failed(
        self,
        resolver: ButtonResolver,
        interaction_cache: InteractionCache,
        mock_document_store: MagicMock,
        sample_result: ExtractionResult,
    ) -> None:
        mock_document_store.create_record.side_effect = RuntimeError("boom")
        await interaction_cache.put_analysis(UI_ID, sample_result)

        resolution = await resolver.resolve(ActionTag.STORE_ONLY.custom_id(UI_ID))

        assert resolution.outcome is ResolutionOutcome.FAILED
        assert await interaction_cache.get_analysis(UI_ID) == sample_result

    @pytest.mark.asyncio
    async def test_missing_entry_is_expired(self, resolver: ButtonResolver, mock_calendar: MagicMock) -> None:
        resolution = await resolver.resolve(ActionTag.CREATE_EVENT.custom_id(UI_ID))

        assert resolution.outcome is ResolutionOutcome.EXPIRED
        assert resolution.ephemeral is True
        mock_calendar.create_event.assert_not_called()

    @pytest.mark.asyncio
    async def test_claim_held_is_in_progress(
        self,
        resolver: ButtonResolver,
        interaction_cache: InteractionCache,
        mock_calendar: MagicMock,
        sample_result: ExtractionResult,
    ) -> None:
        await interaction_cache.put_analysis(UI_ID, sample_result)
        assert await interaction_cache.claim(UI_ID) is True

        resolution = await resolver.resolve(ActionTag.CREATE_EVENT.custom_id(UI_ID))

        assert resolution.outcome is ResolutionOutcome.IN_PROGRESS
        assert resolution.ephemeral is True
        mock_calendar.create_event.assert_not_called()
        assert await interaction_cache.get_analysis(UI_ID) == sample_result

    @pytest.mark.parametrize("custom_id", ["calendar_delete:123", "other_button", "calendar_event:"])
    @pytest.mark.asyncio
    async def test_unrecognized_actions(self, resolver: ButtonResolver, custom_id: str) -> None:
        resolution = await resolver.resolve(custom_id)

        assert resolution.outcome is ResolutionOutcome.UNRECOGNIZED
        assert resolution.view is None
