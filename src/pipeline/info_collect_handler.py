"""Info-collect orchestrator: save every link in a message as a Notion record.

Each URL is handled on its own; one failing link does not stop the
others.  A short ``processing:<url>`` claim keeps the same link from
being collected twice when it is posted again while still in flight.
"""

from __future__ import annotations

import structlog

from src.interfaces.chat_surface import IConversation
from src.interfaces.document_store_provider import IDocumentStoreProvider
from src.models.chat import IncomingMessage
from src.models.content import UrlCategory
from src.models.records import InfoRecord
from src.pipeline.interaction_cache import InteractionCache
from src.services import view_formatter
from src.services.content_fetch_service import ContentFetchService
from src.utils.clock import OperatingClock
from src.utils.errors import CycloneError
from src.utils.logging import get_logger
from src.utils.url_classifier import classify_url, extract_urls

SUCCESS_REACTION = "✅"
FAILURE_REACTION = "❌"


class InfoCollectHandler:
    """Fetches link metadata and writes one info record per URL."""

    def __init__(
        self,
        fetch_service: ContentFetchService,
        document_store: IDocumentStoreProvider,
        cache: InteractionCache,
        clock: OperatingClock,
    ) -> None:
        self._fetch_service = fetch_service
        self._document_store = document_store
        self._cache = cache
        self._clock = clock
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @staticmethod
    def should_handle(message: IncomingMessage) -> bool:
        return bool(extract_urls(message.content))

    async def handle(self, message: IncomingMessage, conversation: IConversation) -> int:
        """Process every URL in *message*; returns how many were saved."""
        saved = 0
        for url in extract_urls(message.content):
            if await self._process_url(url, conversation):
                saved += 1
        return saved

    async def _process_url(self, url: str, conversation: IConversation) -> bool:
        category = classify_url(url)
        if category is UrlCategory.NONE:
            self._logger.debug("info_collect_unparseable_url", url=url)
            return False

        if not await self._cache.mark_url_processing(url):
            self._logger.info("info_collect_duplicate_skipped", url=url)
            return False

        try:
            handle = await conversation.reply(view_formatter.link_processing_view(url, category))
            try:
                content = await self._fetch_service.fetch(url, category)
                record = await self._document_store.create_info_record(
                    InfoRecord(content=content, saved_on=self._clock.now().isoformat())
                )
                await self._cache.put_record(handle.message_id, record.id)
                await handle.edit(view_formatter.link_saved_view(content, record))
            except CycloneError as exc:
                self._logger.warning(
                    "info_collect_failed",
                    url=url,
                    category=category.value,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                await handle.edit(view_formatter.link_failed_view(url, exc.message))
                await conversation.react(FAILURE_REACTION)
                return False
            except Exception as exc:
                self._logger.exception("info_collect_crashed", url=url)
                await handle.edit(view_formatter.link_failed_view(url, str(exc)))
                await conversation.react(FAILURE_REACTION)
                return False

            self._logger.info(
                "info_collect_saved",
                url=url,
                category=category.value,
                record_id=record.id,
                fetched_by=content.fetched_by,
                degraded=content.degraded,
            )
            await conversation.react(SUCCESS_REACTION)
            return True
        finally:
            await self._cache.mark_url_done(url)
