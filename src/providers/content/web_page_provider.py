"""Generic web page fetcher using httpx, BeautifulSoup and trafilatura.

Title and description come from OpenGraph tags, then ``<meta name=...>``
tags, then the ``<title>`` element.  The readable body text is pulled
out by trafilatura and capped so a long article does not blow past the
Notion block limits.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urljoin, urlparse

import httpx
import structlog
import trafilatura
from bs4 import BeautifulSoup

from src.interfaces.content_fetcher import IContentFetcher
from src.models.content import FetchedContent, UrlCategory
from src.utils.errors import ContentFetchError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_TIMEOUT = 15.0
DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "zh-TW,zh;q=0.9,en-US;q=0.8,en;q=0.7",
}


@dataclass(frozen=True)
class PageMetadata:
    """Head-of-document metadata shared by the web and social fetchers."""

    title: str = ""
    description: str = ""
    image: str | None = None
    site_name: str | None = None
    author: str | None = None
    page_title: str = ""


def parse_page_metadata(html: str, url: str) -> PageMetadata:
    """Read OpenGraph and ``<meta name>`` tags from *html*."""
    soup = BeautifulSoup(html, "html.parser")

    def meta(attr: str, key: str) -> str:
        tag = soup.find("meta", attrs={attr: key})
        content = tag.get("content") if tag else None
        return content.strip() if isinstance(content, str) else ""

    image = meta("property", "og:image") or None
    if image and not image.startswith("http"):
        image = urljoin(url, image)

    title_tag = soup.find("title")
    return PageMetadata(
        title=meta("property", "og:title") or meta("name", "title"),
        description=meta("property", "og:description") or meta("name", "description"),
        image=image,
        site_name=meta("property", "og:site_name") or None,
        author=meta("name", "author") or None,
        page_title=title_tag.get_text(strip=True) if title_tag else "",
    )


def domain_of(url: str) -> str | None:
    host = urlparse(url).hostname
    if not host:
        return None
    return host.removeprefix("www.")


async def fetch_html(client: httpx.AsyncClient, url: str, provider_name: str) -> str:
    """GET *url* and return its body, mapping httpx errors to ContentFetchError."""
    try:
        response = await client.get(url)
        response.raise_for_status()
    except httpx.TimeoutException as exc:
        raise ContentFetchError(
            message=f"Timeout fetching {url}: {exc}",
            provider_name=provider_name,
        ) from exc
    except httpx.HTTPStatusError as exc:
        raise ContentFetchError(
            message=f"HTTP {exc.response.status_code} for {url}",
            provider_name=provider_name,
        ) from exc
    except httpx.HTTPError as exc:
        raise ContentFetchError(
            message=f"HTTP error fetching {url}: {exc}",
            provider_name=provider_name,
        ) from exc
    return response.text


class WebPageFetcher(IContentFetcher):
    """Article metadata and body text for arbitrary web pages."""

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        max_content_length: int = 5000,
    ) -> None:
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(_DEFAULT_TIMEOUT),
            headers=DEFAULT_HEADERS,
            follow_redirects=True,
        )
        self._max_content_length = max_content_length

    # ------------------------------------------------------------------
    # IContentFetcher implementation
    # ------------------------------------------------------------------

    async def fetch(self, url: str, category: UrlCategory = UrlCategory.WEB) -> FetchedContent:
        html = await fetch_html(self._client, url, self.get_provider_name())
        meta = parse_page_metadata(html, url)

        text = trafilatura.extract(html, include_comments=False, include_tables=False) or ""
        if not text:
            logger.debug("trafilatura_extraction_empty", url=url)

        title = meta.title or meta.page_title or domain_of(url) or url
        logger.info("web_page_fetched", url=url, title=title, text_length=len(text))
        return FetchedContent(
            url=url,
            category=category,
            title=title,
            description=meta.description or text[:200],
            content=text[: self._max_content_length],
            thumbnail=meta.image,
            author=meta.author,
            site_name=meta.site_name or domain_of(url),
            fetched_by=self.get_provider_name(),
        )

    def is_available(self) -> bool:
        """Always available -- no external credentials required."""
        return True

    def get_provider_name(self) -> str:
        return "web_page"
