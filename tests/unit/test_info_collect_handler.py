"""Unit tests for the info-collect orchestrator."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.models.chat import IncomingMessage, ViewTone
from src.models.content import FetchedContent, UrlCategory
from src.models.records import InfoRecord
from src.pipeline.info_collect_handler import FAILURE_REACTION, SUCCESS_REACTION, InfoCollectHandler
from src.pipeline.interaction_cache import InteractionCache
from src.services.content_fetch_service import ContentFetchService
from src.utils.clock import OperatingClock
from src.utils.errors import ContentFetchError, DownstreamWriteError
from tests.conftest import FakeConversation

YT_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
WEB_URL = "https://example.com/article"


def _content(url: str, category: UrlCategory) -> FetchedContent:
    return FetchedContent(
        url=url,
        category=category,
        title=f"Title for {url}",
        description="Some description",
        fetched_by="test",
    )


@pytest.fixture
def fetch_service() -> MagicMock:
    service = MagicMock(spec=ContentFetchService)

    async def _fetch(url: str, category: UrlCategory) -> FetchedContent:
        return _content(url, category)

    service.fetch = AsyncMock(side_effect=_fetch)
    return service


@pytest.fixture
def handler(
    fetch_service: MagicMock,
    mock_document_store: MagicMock,
    interaction_cache: InteractionCache,
    clock: OperatingClock,
) -> InfoCollectHandler:
    return InfoCollectHandler(fetch_service, mock_document_store, interaction_cache, clock)


def _message(content: str) -> IncomingMessage:
    return IncomingMessage(message_id="222", channel_id="info", author_id="42", content=content)


class TestShouldHandle:
    def test_message_with_link(self) -> None:
        assert InfoCollectHandler.should_handle(_message(f"look {WEB_URL}")) is True

    def test_message_without_link(self) -> None:
        assert InfoCollectHandler.should_handle(_message("no links here")) is False


class TestHandle:
    @pytest.mark.asyncio
    async def test_each_link_becomes_a_record(
        self,
        handler: InfoCollectHandler,
        fetch_service: MagicMock,
        mock_document_store: MagicMock,
        interaction_cache: InteractionCache,
        conversation: FakeConversation,
    ) -> None:
        saved = await handler.handle(_message(f"{YT_URL} and {WEB_URL}"), conversation)

        assert saved == 2
        assert [call.args for call in fetch_service.fetch.call_args_list] == [
            (YT_URL, UrlCategory.YOUTUBE),
            (WEB_URL, UrlCategory.WEB),
        ]
        record: InfoRecord = mock_document_store.create_info_record.call_args_list[0].args[0]
        assert record.content.url == YT_URL
        assert record.saved_on == "2025-06-10T09:30:00+08:00"
        assert conversation.reactions == [SUCCESS_REACTION, SUCCESS_REACTION]
        assert len(conversation.handles) == 2
        assert conversation.handles[0].views[0].tone is ViewTone.PROCESSING
        assert conversation.handles[0].last_view.tone is ViewTone.SUCCESS
        assert await interaction_cache.get_record(conversation.handles[0].message_id) == "page-2"

    @pytest.mark.asyncio
    async def test_one_failure_does_not_stop_the_rest(
        self,
        handler: InfoCollectHandler,
        fetch_service: MagicMock,
        conversation: FakeConversation,
    ) -> None:
        async def _fetch(url: str, category: UrlCategory) -> FetchedContent:
            if category is UrlCategory.YOUTUBE:
                raise ContentFetchError("oEmbed returned 404", provider_name="youtube_oembed")
            return _content(url, category)

        fetch_service.fetch.side_effect = _fetch

        saved = await handler.handle(_message(f"{YT_URL} {WEB_URL}"), conversation)

        assert saved == 1
        assert conversation.reactions == [FAILURE_REACTION, SUCCESS_REACTION]
        failed = conversation.handles[0].last_view
        assert failed.tone is ViewTone.ERROR
        assert "oEmbed returned 404" in failed.description

    @pytest.mark.asyncio
    async def test_store_failure_is_reported(
        self,
        handler: InfoCollectHandler,
        mock_document_store: MagicMock,
        conversation: FakeConversation,
    ) -> None:
        mock_document_store.create_info_record.side_effect = DownstreamWriteError("Notion 500", provider_name="notion")

        saved = await handler.handle(_message(WEB_URL), conversation)

        assert saved == 0
        assert conversation.reactions == [FAILURE_REACTION]

    @pytest.mark.asyncio
    async def test_link_in_flight_is_skipped(
        self,
        handler: InfoCollectHandler,
        fetch_service: MagicMock,
        interaction_cache: InteractionCache,
        conversation: FakeConversation,
    ) -> None:
        assert await interaction_cache.mark_url_processing(WEB_URL) is True

        saved = await handler.handle(_message(WEB_URL), conversation)

        assert saved == 0
        assert conversation.handles == []
        fetch_service.fetch.assert_not_called()

    @pytest.mark.asyncio
    async def test_guard_is_released_after_processing(
        self,
        handler: InfoCollectHandler,
        interaction_cache: InteractionCache,
        conversation: FakeConversation,
    ) -> None:
        await handler.handle(_message(WEB_URL), conversation)

        assert await interaction_cache.mark_url_processing(WEB_URL) is True

    @pytest.mark.asyncio
    async def test_repeated_link_in_one_message_is_saved_twice(
        self,
        handler: InfoCollectHandler,
        mock_document_store: MagicMock,
        conversation: FakeConversation,
    ) -> None:
        saved = await handler.handle(_message(f"{WEB_URL} {WEB_URL}"), conversation)

        assert saved == 2
        assert mock_document_store.create_info_record.await_count == 2
