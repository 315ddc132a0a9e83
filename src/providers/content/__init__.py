"""Link content fetchers used by the info-collect flow."""

from src.providers.content.social_provider import ApifySocialFetcher, MetaTagFetcher
from src.providers.content.web_page_provider import WebPageFetcher
from src.providers.content.youtube_provider import YouTubeOEmbedFetcher

__all__ = ["ApifySocialFetcher", "MetaTagFetcher", "WebPageFetcher", "YouTubeOEmbedFetcher"]
