"""YouTube metadata via the public oEmbed endpoint (no API key).

When oEmbed fails the fetcher still returns a degraded result built from
the video id alone, so the link is saved rather than dropped.
"""

from __future__ import annotations

import httpx
import structlog

from src.interfaces.content_fetcher import IContentFetcher
from src.models.content import FetchedContent, UrlCategory
from src.utils.errors import ContentFetchError
from src.utils.url_classifier import extract_youtube_id

logger = structlog.get_logger(logger_name=__name__)

_OEMBED_URL = "https://www.youtube.com/oembed"
_THUMBNAIL_URL = "https://img.youtube.com/vi/{video_id}/{variant}.jpg"
DEGRADED_TITLE = "Unable to fetch title"


class YouTubeOEmbedFetcher(IContentFetcher):
    def __init__(self, http_client: httpx.AsyncClient | None = None) -> None:
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(10.0))

    async def fetch(self, url: str, category: UrlCategory = UrlCategory.YOUTUBE) -> FetchedContent:
        video_id = extract_youtube_id(url)
        if not video_id:
            raise ContentFetchError(
                message=f"Not a YouTube video URL: {url}",
                provider_name=self.get_provider_name(),
            )

        try:
            response = await self._client.get(_OEMBED_URL, params={"url": url, "format": "json"})
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("youtube_oembed_failed", url=url, error=str(exc))
            return FetchedContent(
                url=url,
                category=UrlCategory.YOUTUBE,
                title=DEGRADED_TITLE,
                thumbnail=_THUMBNAIL_URL.format(video_id=video_id, variant="hqdefault"),
                video_id=video_id,
                site_name="YouTube",
                fetched_by=self.get_provider_name(),
                degraded=True,
            )

        return FetchedContent(
            url=url,
            category=UrlCategory.YOUTUBE,
            title=data.get("title") or DEGRADED_TITLE,
            author=data.get("author_name"),
            thumbnail=_THUMBNAIL_URL.format(video_id=video_id, variant="maxresdefault"),
            video_id=video_id,
            site_name="YouTube",
            fetched_by=self.get_provider_name(),
        )

    def is_available(self) -> bool:
        return True

    def get_provider_name(self) -> str:
        return "youtube_oembed"
