"""Social post fetchers: Apify actors first, OpenGraph meta tags second.

Facebook, Instagram and Threads serve little to anonymous scrapers, so
the primary strategy runs a platform-specific Apify actor through the
synchronous run endpoint.  Each platform's dataset item uses different
field names; ``_normalize_post`` picks the first populated one.

:class:`MetaTagFetcher` is the fallback: it reads ``og:*`` tags from the
public page and guesses the author from the URL or title.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

import httpx
import structlog

from src.interfaces.content_fetcher import IContentFetcher
from src.models.content import FetchedContent, UrlCategory
from src.providers.content.web_page_provider import DEFAULT_HEADERS, fetch_html, parse_page_metadata
from src.utils.errors import ContentFetchError
from src.utils.retry import with_retry

logger = structlog.get_logger(logger_name=__name__)

_APIFY_BASE_URL = "https://api.apify.com/v2"
_UNKNOWN_AUTHOR = "Unknown"
_TITLE_LENGTH = 100

_THREADS_AUTHOR_RE = re.compile(r"threads\.(?:com|net)/@([^/?#]+)")
_INSTAGRAM_AUTHOR_RE = re.compile(r"instagram\.com/([^/?#]+)")
_INSTAGRAM_RESERVED = frozenset({"p", "reels", "reel", "stories", "tv"})


def _first(post: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = post.get(key)
        if value:
            return value
    return None


def author_from_url(url: str, category: UrlCategory) -> str | None:
    if category is UrlCategory.THREADS:
        match = _THREADS_AUTHOR_RE.search(url)
        return match.group(1) if match else None
    if category is UrlCategory.INSTAGRAM:
        match = _INSTAGRAM_AUTHOR_RE.search(url)
        if match and match.group(1) not in _INSTAGRAM_RESERVED:
            return match.group(1)
    return None


def _post_title(text: str, category: UrlCategory) -> str:
    return text[:_TITLE_LENGTH] or f"{category.display_name} post"


class ApifySocialFetcher(IContentFetcher):
    """Runs a per-platform Apify actor and normalizes its first item.

    Parameters
    ----------
    api_key:
        Apify API token; empty disables the fetcher.
    actors:
        Mapping of platform name (``"facebook"``...) to actor id
        (``"apify/facebook-posts-scraper"``).
    """

    def __init__(
        self,
        api_key: str,
        actors: Mapping[str, str],
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._api_key = api_key
        self._actors = dict(actors)
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    # ------------------------------------------------------------------
    # IContentFetcher implementation
    # ------------------------------------------------------------------

    async def fetch(self, url: str, category: UrlCategory) -> FetchedContent:
        actor_id = self._actors.get(category.value)
        if not actor_id:
            raise ContentFetchError(
                message=f"No Apify actor for {category.value}",
                provider_name=self.get_provider_name(),
            )

        run_input: dict[str, Any]
        if category is UrlCategory.THREADS:
            run_input = {"url": url}
        else:
            run_input = {"startUrls": [{"url": url}], "resultsLimit": 1}

        endpoint = f"{_APIFY_BASE_URL}/acts/{actor_id.replace('/', '~')}/run-sync-get-dataset-items"

        async def _call() -> httpx.Response:
            response = await self._client.post(
                endpoint,
                params={"token": self._api_key},
                json=run_input,
            )
            response.raise_for_status()
            return response

        try:
            response = await with_retry(_call, max_retries=2, operation="apify_actor_run")
            items = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise ContentFetchError(
                message=f"Apify actor {actor_id} failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not isinstance(items, list) or not items or not isinstance(items[0], dict):
            raise ContentFetchError(
                message=f"Apify actor {actor_id} returned no items",
                provider_name=self.get_provider_name(),
            )

        logger.info("apify_post_fetched", platform=category.value, fields=sorted(items[0])[:20])
        return self._normalize_post(items[0], url, category)

    def is_available(self) -> bool:
        return bool(self._api_key)

    def get_provider_name(self) -> str:
        return "apify"

    # ------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------

    def _normalize_post(self, post: Mapping[str, Any], url: str, category: UrlCategory) -> FetchedContent:
        if category is UrlCategory.FACEBOOK:
            author = _first(post, "pageName", "userName", "name", "user", "groupTitle")
            text = _first(post, "text", "message", "postText", "description", "story", "content", "seo_title")
            thumbnail = _first(post, "imageUrl", "thumbnailUrl", "image", "photoUrl")
        elif category is UrlCategory.INSTAGRAM:
            owner = post.get("owner") if isinstance(post.get("owner"), Mapping) else {}
            author = (
                _first(post, "ownerUsername", "username")
                or owner.get("username")
                or post.get("ownerFullName")
                or owner.get("fullName")
                or author_from_url(url, category)
            )
            text = _first(post, "caption", "text", "description")
            thumbnail = _first(post, "displayUrl", "thumbnailUrl", "imageUrl")
        else:
            author = author_from_url(url, category) or _first(
                post, "ownerUsername", "username", "author", "user"
            )
            text = _first(post, "text", "caption", "content", "postText")
            thumbnail = _first(post, "imageUrl", "thumbnailUrl", "displayUrl")

        text = text if isinstance(text, str) else ""
        return FetchedContent(
            url=url,
            category=category,
            title=_post_title(text, category),
            description=text,
            content=text,
            thumbnail=thumbnail if isinstance(thumbnail, str) else None,
            author=author if isinstance(author, str) else _UNKNOWN_AUTHOR,
            site_name=category.display_name,
            fetched_by=self.get_provider_name(),
        )


class MetaTagFetcher(IContentFetcher):
    """Reads OpenGraph tags from a public post page."""

    def __init__(self, http_client: httpx.AsyncClient | None = None) -> None:
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(15.0),
            headers=DEFAULT_HEADERS,
            follow_redirects=True,
        )

    async def fetch(self, url: str, category: UrlCategory) -> FetchedContent:
        html = await fetch_html(self._client, url, self.get_provider_name())
        meta = parse_page_metadata(html, url)
        if not meta.title and not meta.description:
            raise ContentFetchError(
                message=f"No OpenGraph title or description at {url}",
                provider_name=self.get_provider_name(),
            )

        author = author_from_url(url, category)
        if author is None and category is UrlCategory.THREADS and " on Threads" in meta.title:
            author = meta.title.split(" on Threads")[0]
        if author is None and category is UrlCategory.FACEBOOK and "Facebook" not in meta.title:
            dash = meta.title.find(" - ")
            if dash > 0:
                author = meta.title[:dash]

        text = meta.description or meta.title
        return FetchedContent(
            url=url,
            category=category,
            title=_post_title(text, category),
            description=text,
            content=meta.description,
            thumbnail=meta.image,
            author=author or _UNKNOWN_AUTHOR,
            site_name=category.display_name,
            fetched_by=self.get_provider_name(),
            degraded=True,
        )

    def is_available(self) -> bool:
        return True

    def get_provider_name(self) -> str:
        return "meta_tags"
