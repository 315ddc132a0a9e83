"""Link content fetching with per-category fallback chains.

Each URL category maps to an ordered list of fetchers that share the
``IContentFetcher`` contract.  The service tries them in order, skipping
unconfigured ones, and returns the first success.  If every fetcher
fails, the error from the last one attempted is raised.

Default chains (assembled in main.py):

    youtube                      -> oEmbed
    facebook/instagram/threads   -> Apify actor -> OpenGraph tags -> web page
    web                          -> web page

Social scraping is the slowest path in the bot, so every attempt runs
under an explicit deadline.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from src.interfaces.content_fetcher import IContentFetcher
from src.models.content import FetchedContent, UrlCategory
from src.utils.errors import ContentFetchError, CycloneError
from src.utils.logging import get_logger
from src.utils.retry import with_timeout


class ContentFetchService:
    """Orchestrates content fetching across fallback chains.

    Parameters
    ----------
    chains:
        Fetchers per category, in priority order.
    timeout:
        Seconds allowed for each fetch attempt.
    """

    def __init__(
        self,
        chains: Mapping[UrlCategory, Sequence[IContentFetcher]],
        timeout: float = 30.0,
    ) -> None:
        self._chains = {category: list(fetchers) for category, fetchers in chains.items()}
        self._timeout = timeout
        self._logger = get_logger(__name__)

    async def fetch(self, url: str, category: UrlCategory) -> FetchedContent:
        """Fetch *url* with the chain registered for *category*.

        Raises
        ------
        ContentFetchError
            If the category has no chain, or every fetcher failed.
        """
        fetchers = [fetcher for fetcher in self._chains.get(category, []) if fetcher.is_available()]
        if not fetchers:
            raise ContentFetchError(message=f"No fetcher configured for {category.value} links")

        errors: list[CycloneError] = []
        for fetcher in fetchers:
            name = fetcher.get_provider_name()
            try:
                self._logger.info("content_fetch_attempting", provider=name, url=url)
                return await with_timeout(
                    fetcher.fetch(url, category),
                    self._timeout,
                    lambda name=name: ContentFetchError(
                        message=f"Timed out after {self._timeout:.0f}s",
                        provider_name=name,
                    ),
                )
            except CycloneError as exc:
                errors.append(exc)
                self._logger.warning("content_fetch_failed", provider=name, url=url, error=str(exc))

        raise errors[-1]

    def providers_for(self, category: UrlCategory) -> list[str]:
        return [fetcher.get_provider_name() for fetcher in self._chains.get(category, [])]
