"""Abstract base class for link content fetchers.

Each fetcher turns a URL into :class:`FetchedContent` (title, text,
thumbnail, author).  Fetchers for one category are arranged as an
ordered fallback chain by ``ContentFetchService``: every fetcher has the
same contract, so the chain just tries them in turn.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.content import FetchedContent, UrlCategory


# Concrete implementations: YouTubeOEmbedFetcher, WebPageFetcher,
# ApifySocialFetcher, MetaTagFetcher (src/providers/content/)
class IContentFetcher(ABC):
    """Contract for services that fetch metadata for one link."""

    @abstractmethod
    async def fetch(self, url: str, category: UrlCategory) -> FetchedContent:
        """Fetch *url* and return its metadata.

        Raises
        ------
        src.utils.errors.ContentFetchError
            If nothing usable could be retrieved.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"apify"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the fetcher is configured (no network call)."""
