"""Unit tests for the calendar orchestrator."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.models.chat import Attachment, IncomingMessage, ViewTone
from src.models.extraction import ContentSource, ExtractionResult
from src.pipeline.calendar_handler import CalendarHandler
from src.pipeline.interaction_cache import InteractionCache
from src.services.calendar_extractor import CalendarExtractor
from src.utils.clock import OperatingClock
from src.utils.errors import NoDateFoundError
from tests.conftest import FakeConversation, FakeMessageHandle

FIRST_REPLY_ID = "900000000000000001"
PDF_URL = "https://cdn.discordapp.com/attachments/1/2/notice.pdf"
IMAGE_URL = "https://cdn.discordapp.com/attachments/1/3/poster.png"


@pytest.fixture
def handler(
    mock_llm: MagicMock,
    mock_pdf_text: MagicMock,
    clock: OperatingClock,
    interaction_cache: InteractionCache,
) -> CalendarHandler:
    extractor = CalendarExtractor(mock_llm, mock_pdf_text, clock, timeout=5)
    return CalendarHandler(extractor, interaction_cache, min_text_length=10)


def _message(content: str = "", attachments: list[Attachment] | None = None) -> IncomingMessage:
    return IncomingMessage(
        message_id="111",
        channel_id="calendar",
        author_id="42",
        content=content,
        attachments=attachments or [],
    )


def _pdf() -> Attachment:
    return Attachment(filename="notice.pdf", url=PDF_URL, content_type="application/pdf", size=2048)


def _image(content_type: str | None = "image/png") -> Attachment:
    return Attachment(filename="poster.png", url=IMAGE_URL, content_type=content_type, size=1024)


# ======================================================================
# Content detection
# ======================================================================


class TestDetectContentType:
    def test_pdf_wins_over_image_and_text(self, handler: CalendarHandler) -> None:
        detected = handler.detect_content_type(_message("明天下午兩點在三樓開會", [_image(), _pdf()]))
        assert detected is not None
        assert detected.source is ContentSource.PDF
        assert detected.attachment.url == PDF_URL

    def test_image_wins_over_text(self, handler: CalendarHandler) -> None:
        detected = handler.detect_content_type(_message("明天下午兩點在三樓開會", [_image()]))
        assert detected.source is ContentSource.IMAGE
        assert detected.mime_type == "image/png"

    def test_image_detected_by_extension(self, handler: CalendarHandler) -> None:
        detected = handler.detect_content_type(_message("", [_image(content_type=None)]))
        assert detected.source is ContentSource.IMAGE
        assert detected.mime_type == "image/png"

    def test_pdf_detected_by_extension(self, handler: CalendarHandler) -> None:
        attachment = Attachment(filename="公文.PDF", url=PDF_URL, content_type="application/octet-stream")
        detected = handler.detect_content_type(_message("", [attachment]))
        assert detected.source is ContentSource.PDF

    def test_text_at_minimum_length(self, handler: CalendarHandler) -> None:
        detected = handler.detect_content_type(_message("0123456789"))
        assert detected.source is ContentSource.TEXT
        assert detected.text == "0123456789"

    def test_short_text_is_ignored(self, handler: CalendarHandler) -> None:
        assert handler.detect_content_type(_message("ok thanks")) is None

    def test_other_attachments_fall_through_to_text(self, handler: CalendarHandler) -> None:
        attachment = Attachment(filename="notes.docx", url="https://cdn/x.docx", content_type="application/msword")
        assert handler.detect_content_type(_message("hi", [attachment])) is None


# ======================================================================
# Message handling
# ======================================================================


class TestHandle:
    @pytest.mark.asyncio
    async def test_usable_text_is_cached_before_preview(
        self,
        handler: CalendarHandler,
        mock_llm: MagicMock,
        interaction_cache: InteractionCache,
        conversation: FakeConversation,
        llm_reply: dict[str, Any],
    ) -> None:
        mock_llm.generate.return_value = json.dumps(llm_reply)

        handled = await handler.handle(_message("明天下午兩點在三樓開會"), conversation)

        assert handled is True
        handle = conversation.handles[0]
        assert handle.views[0].tone is ViewTone.PROCESSING
        preview = handle.last_view
        assert [action.custom_id for action in preview.actions] == [
            f"calendar_event:{FIRST_REPLY_ID}",
            f"calendar_task:{FIRST_REPLY_ID}",
            f"calendar_notion:{FIRST_REPLY_ID}",
            f"calendar_cancel:{FIRST_REPLY_ID}",
        ]
        cached = await interaction_cache.get_analysis(FIRST_REPLY_ID)
        assert cached is not None
        assert cached.start_date == "2025-06-11"
        assert cached.start_time == "14:00"
        assert cached.source is ContentSource.TEXT

    @pytest.mark.asyncio
    async def test_confidence_zero_renders_error_without_actions(
        self,
        handler: CalendarHandler,
        mock_llm: MagicMock,
        interaction_cache: InteractionCache,
        conversation: FakeConversation,
        llm_reply: dict[str, Any],
    ) -> None:
        mock_llm.generate.return_value = json.dumps({**llm_reply, "confidence": 0})

        await handler.handle(_message("明天下午兩點在三樓開會"), conversation)

        view = conversation.handles[0].last_view
        assert view.tone is ViewTone.ERROR
        assert view.actions == []
        assert await interaction_cache.get_analysis(FIRST_REPLY_ID) is None

    @pytest.mark.asyncio
    async def test_missing_dates_renders_error(
        self,
        handler: CalendarHandler,
        mock_llm: MagicMock,
        interaction_cache: InteractionCache,
        conversation: FakeConversation,
    ) -> None:
        mock_llm.generate.return_value = '{"title": "閒聊", "confidence": 0.7}'

        await handler.handle(_message("今天天氣真好，大家午安"), conversation)

        assert conversation.handles[0].last_view.tone is ViewTone.ERROR
        assert await interaction_cache.get_analysis(FIRST_REPLY_ID) is None

    @pytest.mark.asyncio
    async def test_deadline_only_result_is_usable(
        self,
        handler: CalendarHandler,
        mock_llm: MagicMock,
        interaction_cache: InteractionCache,
        conversation: FakeConversation,
    ) -> None:
        mock_llm.generate.return_value = json.dumps(
            {"title": "繳交報告", "type": "task", "deadline": "2025-06-20", "confidence": 0.8}
        )

        await handler.handle(_message("請於六月二十日前繳交報告"), conversation)

        cached = await interaction_cache.get_analysis(FIRST_REPLY_ID)
        assert cached.start_date == "2025-06-20"
        assert len(conversation.handles[0].last_view.actions) == 4

    @pytest.mark.asyncio
    async def test_image_attachment_is_sent_inline(
        self,
        handler: CalendarHandler,
        mock_llm: MagicMock,
        interaction_cache: InteractionCache,
        llm_reply: dict[str, Any],
    ) -> None:
        conversation = FakeConversation(attachments={IMAGE_URL: b"\x89PNG"})
        mock_llm.generate.return_value = json.dumps(llm_reply)

        await handler.handle(_message("", [_image()]), conversation)

        parts = mock_llm.generate.call_args.args[0]
        assert parts[1].data == b"\x89PNG"
        assert parts[1].mime_type == "image/png"
        cached = await interaction_cache.get_analysis(FIRST_REPLY_ID)
        assert cached.source is ContentSource.IMAGE

    @pytest.mark.asyncio
    async def test_unreadable_pdf_is_not_cached(
        self,
        handler: CalendarHandler,
        mock_llm: MagicMock,
        mock_pdf_text: MagicMock,
        interaction_cache: InteractionCache,
    ) -> None:
        conversation = FakeConversation(attachments={PDF_URL: b"%PDF-1.4"})
        mock_llm.supports_mime_type.return_value = False
        mock_pdf_text.extract_text.return_value = "   "

        await handler.handle(_message("", [_pdf()]), conversation)

        view = conversation.handles[0].last_view
        assert view.tone is ViewTone.ERROR
        assert "readable text" in view.description
        mock_llm.generate.assert_not_called()
        assert await interaction_cache.get_analysis(FIRST_REPLY_ID) is None

    @pytest.mark.asyncio
    async def test_unexpected_error_is_rendered(
        self,
        handler: CalendarHandler,
        mock_llm: MagicMock,
        conversation: FakeConversation,
    ) -> None:
        mock_llm.generate.side_effect = RuntimeError("boom")

        handled = await handler.handle(_message("明天下午兩點在三樓開會"), conversation)

        assert handled is True
        assert "Unexpected error: boom" in conversation.handles[0].last_view.description

    @pytest.mark.asyncio
    async def test_nothing_to_analyse(
        self,
        handler: CalendarHandler,
        mock_llm: MagicMock,
        conversation: FakeConversation,
    ) -> None:
        assert await handler.handle(_message("ok"), conversation) is False
        assert conversation.handles == []
        mock_llm.generate.assert_not_called()


# ======================================================================
# /ai support
# ======================================================================


class TestCommandSupport:
    @pytest.mark.asyncio
    async def test_analyze_text_marks_command_source(
        self,
        handler: CalendarHandler,
        mock_llm: MagicMock,
        llm_reply: dict[str, Any],
    ) -> None:
        mock_llm.generate.return_value = json.dumps(llm_reply)

        result = await handler.analyze_text("明天下午兩點開會")

        assert result.source is ContentSource.COMMAND

    @pytest.mark.asyncio
    async def test_analyze_text_rejects_unusable(
        self,
        handler: CalendarHandler,
        mock_llm: MagicMock,
        llm_reply: dict[str, Any],
    ) -> None:
        mock_llm.generate.return_value = json.dumps({**llm_reply, "confidence": 0.0})

        with pytest.raises(NoDateFoundError):
            await handler.analyze_text("明天下午兩點開會")

    @pytest.mark.asyncio
    async def test_present_quotes_command_text(
        self,
        handler: CalendarHandler,
        interaction_cache: InteractionCache,
        sample_result: ExtractionResult,
    ) -> None:
        handle = FakeMessageHandle("555")

        await handler.present(sample_result, handle, quoted_text="明天下午兩點開會")

        assert handle.last_view.description.startswith("> 明天下午兩點開會")
        assert handle.last_view.actions[0].custom_id == "calendar_event:555"
        assert await interaction_cache.get_analysis("555") == sample_result

    @pytest.mark.asyncio
    async def test_present_writes_cache_before_edit(
        self,
        handler: CalendarHandler,
        interaction_cache: InteractionCache,
        sample_result: ExtractionResult,
    ) -> None:
        handle = FakeMessageHandle("556")
        seen: list[ExtractionResult | None] = []

        async def record_cache_state(view: Any) -> None:
            seen.append(await interaction_cache.get_analysis("556"))

        handle.edit = AsyncMock(side_effect=record_cache_state)

        await handler.present(sample_result, handle)

        assert seen == [sample_result]
