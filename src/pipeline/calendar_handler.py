"""Calendar orchestrator: message in, cached preview with four actions out.

Flow for one message:

    detect_content_type()      PDF attachment > image attachment > text
        -> reply "processing"  (the reply's id becomes the cache key)
        -> CalendarExtractor   (text / image / PDF strategies)
        -> usability check     (confidence 0 or no date -> NoDateFoundError)
        -> InteractionCache.put_analysis()
        -> edit reply into the preview with four buttons

The cache write always finishes before the edit that renders the
buttons, so a click can never arrive ahead of its own entry.  Every
failure is caught here and rendered as an error view without actions.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import PurePosixPath

import structlog

from src.interfaces.chat_surface import IConversation, IMessageHandle
from src.models.chat import Attachment, IncomingMessage
from src.models.extraction import ContentSource, ExtractionResult
from src.pipeline.interaction_cache import InteractionCache
from src.services import view_formatter
from src.services.calendar_extractor import CalendarExtractor
from src.utils.errors import CycloneError, NoDateFoundError
from src.utils.logging import get_logger

_IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"})


@dataclass(frozen=True)
class DetectedContent:
    """The single input path chosen for a message."""

    source: ContentSource
    attachment: Attachment | None = None
    text: str = ""
    mime_type: str | None = None


def _is_pdf(attachment: Attachment) -> bool:
    content_type = (attachment.content_type or "").lower()
    return content_type == "application/pdf" or attachment.filename.lower().endswith(".pdf")


def _is_image(attachment: Attachment) -> bool:
    content_type = (attachment.content_type or "").lower()
    if content_type.startswith("image/"):
        return True
    return PurePosixPath(attachment.filename.lower()).suffix in _IMAGE_EXTENSIONS


def _image_mime_type(attachment: Attachment) -> str:
    content_type = (attachment.content_type or "").split(";")[0].strip().lower()
    if content_type.startswith("image/"):
        return content_type
    guessed, _ = mimetypes.guess_type(attachment.filename)
    return guessed or "image/jpeg"


class CalendarHandler:
    """Runs the calendar extraction flow for calendar-channel messages and ``/ai``."""

    def __init__(
        self,
        extractor: CalendarExtractor,
        cache: InteractionCache,
        min_text_length: int = 10,
    ) -> None:
        self._extractor = extractor
        self._cache = cache
        self._min_text_length = min_text_length
        self._logger: structlog.BoundLogger = get_logger(__name__)

    def detect_content_type(self, message: IncomingMessage) -> DetectedContent | None:
        """Pick exactly one input path; attachments win over body text."""
        for attachment in message.attachments:
            if _is_pdf(attachment):
                return DetectedContent(source=ContentSource.PDF, attachment=attachment)
        for attachment in message.attachments:
            if _is_image(attachment):
                return DetectedContent(
                    source=ContentSource.IMAGE,
                    attachment=attachment,
                    mime_type=_image_mime_type(attachment),
                )
        text = message.content.strip()
        if len(text) >= self._min_text_length:
            return DetectedContent(source=ContentSource.TEXT, text=text)
        return None

    async def handle(self, message: IncomingMessage, conversation: IConversation) -> bool:
        """Process *message*; returns ``False`` when it carries nothing to analyse."""
        detected = self.detect_content_type(message)
        if detected is None:
            return False

        self._logger.info(
            "calendar_message_received",
            message_id=message.message_id,
            source=detected.source.value,
        )
        handle = await conversation.reply(view_formatter.processing_view(detected.source))
        try:
            result = await self._extract(detected, conversation)
            await self.present(result, handle)
        except CycloneError as exc:
            self._logger.warning(
                "calendar_extraction_failed",
                message_id=message.message_id,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            await handle.edit(view_formatter.extraction_failed_view(exc.message))
        except Exception as exc:
            self._logger.exception("calendar_handler_crashed", message_id=message.message_id)
            await handle.edit(view_formatter.extraction_failed_view(f"Unexpected error: {exc}"))
        return True

    async def analyze_text(self, text: str) -> ExtractionResult:
        """Extract from command text; raises ``NoDateFoundError`` if unusable."""
        result = await self._extractor.extract_from_text(text, source=ContentSource.COMMAND)
        self._require_usable(result)
        return result

    async def present(
        self,
        result: ExtractionResult,
        handle: IMessageHandle,
        quoted_text: str | None = None,
    ) -> None:
        """Cache *result* under the handle's message id, then render the preview."""
        await self._cache.put_analysis(handle.message_id, result)
        await handle.edit(view_formatter.calendar_preview_view(result, handle.message_id, quoted_text))
        self._logger.info(
            "calendar_preview_rendered",
            ui_message_id=handle.message_id,
            title=result.title,
            kind=result.kind.value,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _extract(self, detected: DetectedContent, conversation: IConversation) -> ExtractionResult:
        if detected.attachment is None:
            result = await self._extractor.extract_from_text(detected.text)
        else:
            data = await conversation.read_attachment(detected.attachment)
            if detected.source is ContentSource.PDF:
                result = await self._extractor.extract_from_pdf(data)
            else:
                result = await self._extractor.extract_from_image(data, detected.mime_type or "image/jpeg")
        self._require_usable(result)
        return result

    @staticmethod
    def _require_usable(result: ExtractionResult) -> None:
        if result.confidence == 0 or not result.is_usable:
            raise NoDateFoundError()
