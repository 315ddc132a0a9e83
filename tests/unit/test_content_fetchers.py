"""Unit tests for link content fetchers and the fallback chain service."""

from __future__ import annotations

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from src.interfaces.content_fetcher import IContentFetcher
from src.models.content import FetchedContent, UrlCategory
from src.providers.content.social_provider import ApifySocialFetcher, MetaTagFetcher, author_from_url
from src.providers.content.web_page_provider import WebPageFetcher, parse_page_metadata
from src.providers.content.youtube_provider import DEGRADED_TITLE, YouTubeOEmbedFetcher
from src.services.content_fetch_service import ContentFetchService
from src.utils.errors import ContentFetchError

YT_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
IG_URL = "https://www.instagram.com/p/Cabc123/"
THREADS_URL = "https://www.threads.net/@someone/post/C1xyz"

ARTICLE_HTML = """
<html><head>
<title>Fallback title</title>
<meta property="og:title" content="OG Title">
<meta property="og:description" content="OG description">
<meta property="og:image" content="/img/cover.png">
<meta property="og:site_name" content="Example News">
<meta name="author" content="Jane Doe">
</head><body><p>Body</p></body></html>
"""


def _client(handler) -> httpx.AsyncClient:  # noqa: ANN001
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# ======================================================================
# Page metadata
# ======================================================================


class TestParsePageMetadata:
    def test_open_graph_tags(self) -> None:
        meta = parse_page_metadata(ARTICLE_HTML, "https://example.com/news/1")

        assert meta.title == "OG Title"
        assert meta.description == "OG description"
        assert meta.image == "https://example.com/img/cover.png"
        assert meta.site_name == "Example News"
        assert meta.author == "Jane Doe"
        assert meta.page_title == "Fallback title"

    def test_meta_name_fallback(self) -> None:
        html = '<html><head><meta name="description" content="plain"></head></html>'
        meta = parse_page_metadata(html, "https://example.com")

        assert meta.title == ""
        assert meta.description == "plain"
        assert meta.image is None


# ======================================================================
# YouTube
# ======================================================================


class TestYouTubeOEmbedFetcher:
    @pytest.mark.asyncio
    async def test_oembed_success(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["url"] == YT_URL
            return httpx.Response(200, json={"title": "Never Gonna", "author_name": "Rick"})

        content = await YouTubeOEmbedFetcher(_client(handler)).fetch(YT_URL)

        assert content.title == "Never Gonna"
        assert content.author == "Rick"
        assert content.video_id == "dQw4w9WgXcQ"
        assert content.thumbnail.endswith("/dQw4w9WgXcQ/maxresdefault.jpg")
        assert content.degraded is False

    @pytest.mark.asyncio
    async def test_oembed_failure_is_degraded(self) -> None:
        content = await YouTubeOEmbedFetcher(_client(lambda request: httpx.Response(404))).fetch(YT_URL)

        assert content.title == DEGRADED_TITLE
        assert content.degraded is True
        assert content.thumbnail.endswith("hqdefault.jpg")

    @pytest.mark.asyncio
    async def test_non_video_url_raises(self) -> None:
        fetcher = YouTubeOEmbedFetcher(_client(lambda request: httpx.Response(200, json={})))
        with pytest.raises(ContentFetchError):
            await fetcher.fetch("https://www.youtube.com/channel/abc")


# ======================================================================
# Web pages
# ======================================================================


class TestWebPageFetcher:
    @pytest.mark.asyncio
    async def test_metadata_from_open_graph(self) -> None:
        fetcher = WebPageFetcher(_client(lambda request: httpx.Response(200, html=ARTICLE_HTML)))

        content = await fetcher.fetch("https://example.com/news/1")

        assert content.category is UrlCategory.WEB
        assert content.title == "OG Title"
        assert content.description == "OG description"
        assert content.site_name == "Example News"
        assert content.fetched_by == "web_page"

    @pytest.mark.asyncio
    async def test_domain_used_when_no_title(self) -> None:
        fetcher = WebPageFetcher(_client(lambda request: httpx.Response(200, html="<html></html>")))

        content = await fetcher.fetch("https://www.example.org/x")

        assert content.title == "example.org"
        assert content.site_name == "example.org"

    @pytest.mark.asyncio
    async def test_http_error_raises(self) -> None:
        fetcher = WebPageFetcher(_client(lambda request: httpx.Response(503)))

        with pytest.raises(ContentFetchError, match="HTTP 503"):
            await fetcher.fetch("https://example.com/down")


# ======================================================================
# Social
# ======================================================================


class TestAuthorFromUrl:
    def test_threads(self) -> None:
        assert author_from_url(THREADS_URL, UrlCategory.THREADS) == "someone"

    def test_instagram_reserved_segment(self) -> None:
        assert author_from_url(IG_URL, UrlCategory.INSTAGRAM) is None

    def test_instagram_profile_segment(self) -> None:
        assert author_from_url("https://instagram.com/someone/p/abc", UrlCategory.INSTAGRAM) == "someone"


class TestApifySocialFetcher:
    @pytest.mark.asyncio
    async def test_instagram_post(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json=[{"caption": "Sunset at the beach", "ownerUsername": "photog", "displayUrl": "https://i/1.jpg"}],
            )

        fetcher = ApifySocialFetcher("token", {"instagram": "apify/instagram-scraper"}, _client(handler))

        content = await fetcher.fetch(IG_URL, UrlCategory.INSTAGRAM)

        assert seen[0].url.path == "/v2/acts/apify~instagram-scraper/run-sync-get-dataset-items"
        assert seen[0].url.params["token"] == "token"
        assert json.loads(seen[0].content) == {"startUrls": [{"url": IG_URL}], "resultsLimit": 1}
        assert content.title == "Sunset at the beach"
        assert content.author == "photog"
        assert content.thumbnail == "https://i/1.jpg"

    @pytest.mark.asyncio
    async def test_threads_input_shape_and_author(self) -> None:
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json=[{"text": "hello threads"}])

        fetcher = ApifySocialFetcher("token", {"threads": "someone/threads-scraper"}, _client(handler))

        content = await fetcher.fetch(THREADS_URL, UrlCategory.THREADS)

        assert bodies == [{"url": THREADS_URL}]
        assert content.author == "someone"

    @pytest.mark.asyncio
    async def test_empty_dataset_raises(self) -> None:
        fetcher = ApifySocialFetcher(
            "token", {"facebook": "apify/facebook-posts-scraper"}, _client(lambda request: httpx.Response(200, json=[]))
        )
        with pytest.raises(ContentFetchError, match="no items"):
            await fetcher.fetch("https://www.facebook.com/page/posts/1", UrlCategory.FACEBOOK)

    @pytest.mark.asyncio
    async def test_auth_failure_raises(self) -> None:
        fetcher = ApifySocialFetcher(
            "bad", {"facebook": "apify/facebook-posts-scraper"}, _client(lambda request: httpx.Response(401))
        )
        with pytest.raises(ContentFetchError, match="failed"):
            await fetcher.fetch("https://www.facebook.com/page/posts/1", UrlCategory.FACEBOOK)

    def test_unavailable_without_key(self) -> None:
        assert ApifySocialFetcher("", {}).is_available() is False


class TestMetaTagFetcher:
    @pytest.mark.asyncio
    async def test_threads_author_from_title(self) -> None:
        html = (
            '<meta property="og:title" content="Some Person on Threads">'
            '<meta property="og:description" content="post body">'
        )
        fetcher = MetaTagFetcher(_client(lambda request: httpx.Response(200, html=html)))

        content = await fetcher.fetch("https://www.threads.net/t/abc", UrlCategory.THREADS)

        assert content.author == "Some Person"
        assert content.description == "post body"
        assert content.degraded is True

    @pytest.mark.asyncio
    async def test_no_tags_raises(self) -> None:
        fetcher = MetaTagFetcher(_client(lambda request: httpx.Response(200, html="<html></html>")))
        with pytest.raises(ContentFetchError):
            await fetcher.fetch(IG_URL, UrlCategory.INSTAGRAM)


# ======================================================================
# Fallback chains
# ======================================================================


def _fetcher(name: str, *, available: bool = True, error: Exception | None = None) -> MagicMock:
    fetcher = MagicMock(spec=IContentFetcher)
    fetcher.get_provider_name.return_value = name
    fetcher.is_available.return_value = available
    if error is not None:
        fetcher.fetch = AsyncMock(side_effect=error)
    else:
        fetcher.fetch = AsyncMock(
            return_value=FetchedContent(url=IG_URL, category=UrlCategory.INSTAGRAM, title=name, fetched_by=name)
        )
    return fetcher


class TestContentFetchService:
    @pytest.mark.asyncio
    async def test_first_success_wins(self) -> None:
        first = _fetcher("apify")
        second = _fetcher("meta_tags")
        service = ContentFetchService({UrlCategory.INSTAGRAM: [first, second]})

        content = await service.fetch(IG_URL, UrlCategory.INSTAGRAM)

        assert content.fetched_by == "apify"
        second.fetch.assert_not_called()

    @pytest.mark.asyncio
    async def test_falls_back_and_skips_unavailable(self) -> None:
        skipped = _fetcher("apify", available=False)
        failing = _fetcher("meta_tags", error=ContentFetchError("no tags"))
        last = _fetcher("web_page")
        service = ContentFetchService({UrlCategory.INSTAGRAM: [skipped, failing, last]})

        content = await service.fetch(IG_URL, UrlCategory.INSTAGRAM)

        assert content.fetched_by == "web_page"
        skipped.fetch.assert_not_called()

    @pytest.mark.asyncio
    async def test_last_error_is_raised(self) -> None:
        service = ContentFetchService(
            {
                UrlCategory.INSTAGRAM: [
                    _fetcher("apify", error=ContentFetchError("first")),
                    _fetcher("web_page", error=ContentFetchError("second")),
                ]
            }
        )

        with pytest.raises(ContentFetchError, match="second"):
            await service.fetch(IG_URL, UrlCategory.INSTAGRAM)

    @pytest.mark.asyncio
    async def test_no_chain_raises(self) -> None:
        service = ContentFetchService({})
        with pytest.raises(ContentFetchError, match="No fetcher"):
            await service.fetch(IG_URL, UrlCategory.INSTAGRAM)

    @pytest.mark.asyncio
    async def test_timeout_moves_to_next(self) -> None:
        async def _hang(url: str, category: UrlCategory) -> FetchedContent:
            await asyncio.sleep(10)
            raise AssertionError("unreachable")

        slow = _fetcher("apify")
        slow.fetch = AsyncMock(side_effect=_hang)
        service = ContentFetchService({UrlCategory.INSTAGRAM: [slow, _fetcher("meta_tags")]}, timeout=0.01)

        content = await service.fetch(IG_URL, UrlCategory.INSTAGRAM)

        assert content.fetched_by == "meta_tags"

    def test_providers_for(self) -> None:
        service = ContentFetchService({UrlCategory.WEB: [_fetcher("web_page")]})
        assert service.providers_for(UrlCategory.WEB) == ["web_page"]
        assert service.providers_for(UrlCategory.YOUTUBE) == []
