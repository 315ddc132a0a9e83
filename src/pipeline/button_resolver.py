"""Resolve a preview button click into a downstream write.

State of one pending interaction, keyed by the preview message id::

    PENDING --calendar_event--> EVENT_CREATED   (Google event + Notion record)
            --calendar_task---> TASK_CREATED    (Google task + Notion record)
            --calendar_notion-> STORED          (Notion record only)
            --calendar_cancel-> CANCELLED       (no writes)

Terminal outcomes delete the ``analysis:`` entry, so any later click
finds nothing and is told the data expired.  ``SERVICE_UNAVAILABLE``
and ``FAILED`` leave the entry in place so the user can choose again.

Clicks on the same preview are serialised by a ``claim:`` marker taken
before the entry is read and released when the click is done.  A second
click arriving while the first is still writing gets ``IN_PROGRESS``
instead of repeating the write.
"""

from __future__ import annotations

from datetime import date

import structlog

from src.interfaces.calendar_provider import ICalendarProvider
from src.interfaces.document_store_provider import IDocumentStoreProvider
from src.models.extraction import ExtractionResult
from src.models.interaction import ActionTag, Resolution, ResolutionOutcome, parse_action_id
from src.models.records import CalendarRecord, EventWindow
from src.pipeline.interaction_cache import InteractionCache
from src.services import view_formatter
from src.utils.errors import CycloneError, ServiceNotConfiguredError
from src.utils.logging import get_logger

_CALENDAR_SERVICE = "Google Calendar"
_TASK_SERVICE = "Google Tasks"


class ButtonResolver:
    """Maps ``<action-tag>:<ui-message-id>`` clicks onto :class:`Resolution` values."""

    def __init__(
        self,
        cache: InteractionCache,
        calendar: ICalendarProvider,
        document_store: IDocumentStoreProvider,
    ) -> None:
        self._cache = cache
        self._calendar = calendar
        self._document_store = document_store
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def resolve(self, custom_id: str) -> Resolution:
        tag, ui_message_id = parse_action_id(custom_id)
        if tag is None or not ui_message_id:
            self._logger.warning("button_action_unrecognized", custom_id=custom_id)
            return Resolution(outcome=ResolutionOutcome.UNRECOGNIZED)

        if await self._cache.get_analysis(ui_message_id) is None:
            self._logger.info("button_data_expired", action=tag.value, ui_message_id=ui_message_id)
            return self._expired()

        if not await self._cache.claim(ui_message_id):
            return Resolution(
                outcome=ResolutionOutcome.IN_PROGRESS,
                view=view_formatter.in_progress_view(),
                ephemeral=True,
            )

        try:
            # A click that held the claim may have just resolved this entry.
            result = await self._cache.get_analysis(ui_message_id)
            if result is None:
                return self._expired()
            resolution = await self._dispatch(tag, ui_message_id, result)
        finally:
            await self._cache.release(ui_message_id)

        self._logger.info(
            "button_resolved",
            action=tag.value,
            ui_message_id=ui_message_id,
            outcome=resolution.outcome.value,
        )
        return resolution

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def _dispatch(self, tag: ActionTag, ui_message_id: str, result: ExtractionResult) -> Resolution:
        if tag is ActionTag.CANCEL:
            await self._cache.delete_analysis(ui_message_id)
            return Resolution(outcome=ResolutionOutcome.CANCELLED, view=view_formatter.cancelled_view())

        try:
            if tag is ActionTag.CREATE_EVENT:
                return await self._create_event(ui_message_id, result)
            if tag is ActionTag.CREATE_TASK:
                return await self._create_task(ui_message_id, result)
            return await self._store_only(ui_message_id, result)
        except ServiceNotConfiguredError as exc:
            return self._unavailable(exc.provider_name or "Service")
        except CycloneError as exc:
            self._logger.error(
                "button_action_failed",
                action=tag.value,
                ui_message_id=ui_message_id,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return self._failed(exc.message)
        except Exception as exc:
            self._logger.exception("button_action_crashed", action=tag.value, ui_message_id=ui_message_id)
            return self._failed(str(exc))

    async def _create_event(self, ui_message_id: str, result: ExtractionResult) -> Resolution:
        if not self._calendar.is_configured():
            return self._unavailable(_CALENDAR_SERVICE)

        event = await self._calendar.create_event(
            title=result.title,
            window=EventWindow.from_extraction(result),
            description=result.description,
            location=result.location,
        )
        record = await self._document_store.create_record(
            CalendarRecord.from_extraction(result, record_type="event", back_link=event.link)
        )
        await self._finish(ui_message_id, record.id)
        return Resolution(
            outcome=ResolutionOutcome.EVENT_CREATED,
            view=view_formatter.event_created_view(result, event.link, record),
        )

    async def _create_task(self, ui_message_id: str, result: ExtractionResult) -> Resolution:
        if not self._calendar.is_configured():
            return self._unavailable(_TASK_SERVICE)

        due_text = result.deadline or result.effective_start_date
        await self._calendar.create_task(
            title=result.title,
            notes=result.description,
            due=date.fromisoformat(due_text) if due_text else None,
        )
        record = await self._document_store.create_record(
            CalendarRecord.from_extraction(result, record_type="task")
        )
        await self._finish(ui_message_id, record.id)
        return Resolution(
            outcome=ResolutionOutcome.TASK_CREATED,
            view=view_formatter.task_created_view(result, record),
        )

    async def _store_only(self, ui_message_id: str, result: ExtractionResult) -> Resolution:
        record = await self._document_store.create_record(
            CalendarRecord.from_extraction(result, record_type="note")
        )
        await self._finish(ui_message_id, record.id)
        return Resolution(
            outcome=ResolutionOutcome.STORED,
            view=view_formatter.stored_view(result, record),
        )

    async def _finish(self, ui_message_id: str, record_id: str) -> None:
        await self._cache.delete_analysis(ui_message_id)
        await self._cache.put_record(ui_message_id, record_id)

    # ------------------------------------------------------------------
    # Non-terminal resolutions
    # ------------------------------------------------------------------

    def _unavailable(self, service_name: str) -> Resolution:
        self._logger.info("button_service_unavailable", service=service_name)
        return Resolution(
            outcome=ResolutionOutcome.SERVICE_UNAVAILABLE,
            view=view_formatter.service_unavailable_view(service_name),
            ephemeral=True,
        )

    @staticmethod
    def _failed(reason: str) -> Resolution:
        return Resolution(
            outcome=ResolutionOutcome.FAILED,
            view=view_formatter.operation_failed_view(reason),
            ephemeral=True,
        )

    @staticmethod
    def _expired() -> Resolution:
        return Resolution(
            outcome=ResolutionOutcome.EXPIRED,
            view=view_formatter.expired_view(),
            ephemeral=True,
        )
