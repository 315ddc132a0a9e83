"""Namespaced view over the cache for pending chat interactions.

Key layout in the shared store:

    analysis:<ui-message-id>   -> ExtractionResult awaiting a button click
    record:<ui-message-id>     -> Notion page id created for that message
    claim:<ui-message-id>      -> advisory lock held while a click is handled
    processing:<url>           -> duplicate guard for links being collected

One instance is built by the composition root and injected into the
handlers; nothing else holds a reference to pending results.
"""

from __future__ import annotations

from src.interfaces.cache_provider import ICacheProvider
from src.models.extraction import ExtractionResult
from src.utils.logging import get_logger

ANALYSIS_PREFIX = "analysis:"
RECORD_PREFIX = "record:"
CLAIM_PREFIX = "claim:"
PROCESSING_PREFIX = "processing:"


class InteractionCache:
    """Pending-interaction state keyed by the preview message id."""

    def __init__(
        self,
        store: ICacheProvider,
        analysis_ttl: float = 3600,
        record_ttl: float = 86400,
        claim_ttl: float = 120,
        url_processing_ttl: float = 60,
    ) -> None:
        self._store = store
        self._analysis_ttl = analysis_ttl
        self._record_ttl = record_ttl
        self._claim_ttl = claim_ttl
        self._url_processing_ttl = url_processing_ttl
        self._logger = get_logger(__name__)

    # -- Extraction results --------------------------------------------------

    async def put_analysis(self, ui_message_id: str, result: ExtractionResult) -> None:
        await self._store.put(ANALYSIS_PREFIX + ui_message_id, result, self._analysis_ttl)

    async def get_analysis(self, ui_message_id: str) -> ExtractionResult | None:
        return await self._store.get(ANALYSIS_PREFIX + ui_message_id)

    async def delete_analysis(self, ui_message_id: str) -> None:
        await self._store.delete(ANALYSIS_PREFIX + ui_message_id)

    # -- Record mappings -----------------------------------------------------

    async def put_record(self, ui_message_id: str, record_id: str) -> None:
        await self._store.put(RECORD_PREFIX + ui_message_id, record_id, self._record_ttl)

    async def get_record(self, ui_message_id: str) -> str | None:
        return await self._store.get(RECORD_PREFIX + ui_message_id)

    # -- Advisory locks ------------------------------------------------------

    async def claim(self, ui_message_id: str) -> bool:
        """Take the per-message lock; ``False`` means another click holds it."""
        claimed = await self._store.claim(CLAIM_PREFIX + ui_message_id, self._claim_ttl)
        if not claimed:
            self._logger.info("interaction_already_claimed", ui_message_id=ui_message_id)
        return claimed

    async def release(self, ui_message_id: str) -> None:
        await self._store.delete(CLAIM_PREFIX + ui_message_id)

    async def mark_url_processing(self, url: str) -> bool:
        """Return ``False`` if *url* is already being collected."""
        return await self._store.claim(PROCESSING_PREFIX + url, self._url_processing_ttl)

    async def mark_url_done(self, url: str) -> None:
        await self._store.delete(PROCESSING_PREFIX + url)
