"""Link-classification and fetched-content models for the info-collect flow."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class UrlCategory(str, Enum):  # noqa: UP042
    """Source category of a URL, decided purely from its shape."""

    YOUTUBE = "youtube"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    THREADS = "threads"
    WEB = "web"
    NONE = "none"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES.get(self, self.value)

    @property
    def record_type(self) -> str:
        """Select-option value used by the Notion info database."""
        return _RECORD_TYPES.get(self, "網路文章")

    @property
    def is_social(self) -> bool:
        return self in (UrlCategory.FACEBOOK, UrlCategory.INSTAGRAM, UrlCategory.THREADS)


_DISPLAY_NAMES = {
    UrlCategory.YOUTUBE: "YouTube",
    UrlCategory.FACEBOOK: "Facebook",
    UrlCategory.INSTAGRAM: "Instagram",
    UrlCategory.THREADS: "Threads",
    UrlCategory.WEB: "Web article",
}

_RECORD_TYPES = {
    UrlCategory.YOUTUBE: "YT",
    UrlCategory.FACEBOOK: "FB",
    UrlCategory.INSTAGRAM: "IG",
    UrlCategory.THREADS: "TH",
    UrlCategory.WEB: "網路文章",
}


class FetchedContent(BaseModel):
    """Metadata and text pulled from a link by one of the content fetchers.

    ``degraded`` marks a best-effort result (e.g. oEmbed failed, or only
    the URL itself is known); it is still worth saving as a record.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    category: UrlCategory
    title: str
    description: str = ""
    content: str = ""
    thumbnail: str | None = None
    author: str | None = None
    site_name: str | None = None
    video_id: str | None = None
    fetched_by: str = ""
    degraded: bool = False
