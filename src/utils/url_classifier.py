"""Pure URL extraction and classification.

No network access and no state: ``extract_urls`` pulls http(s) links out
of free text in first-occurrence order (duplicates kept), and
``classify_url`` maps a link to a :class:`UrlCategory` by matching known
host/path shapes.
"""

from __future__ import annotations

import re

from src.models.content import UrlCategory

_HOST = r"(?:https?://)?(?:www\.)?"

_PATTERNS: dict[UrlCategory, list[re.Pattern[str]]] = {
    UrlCategory.YOUTUBE: [
        re.compile(_HOST + r"youtube\.com/watch\?v=([a-zA-Z0-9_-]+)"),
        re.compile(_HOST + r"youtu\.be/([a-zA-Z0-9_-]+)"),
        re.compile(_HOST + r"youtube\.com/shorts/([a-zA-Z0-9_-]+)"),
        re.compile(_HOST + r"youtube\.com/embed/([a-zA-Z0-9_-]+)"),
    ],
    UrlCategory.FACEBOOK: [
        re.compile(_HOST + r"facebook\.com/[^/]+/(?:posts|videos|photos)/\S+"),
        re.compile(_HOST + r"facebook\.com/(?:watch|reel|share)/\S+"),
        re.compile(_HOST + r"fb\.watch/\S+"),
        re.compile(_HOST + r"fb\.com/\S+"),
        re.compile(r"(?:https?://)?(?:m\.)?facebook\.com/story\.php\S+"),
    ],
    UrlCategory.INSTAGRAM: [
        re.compile(_HOST + r"instagram\.com/p/([a-zA-Z0-9_-]+)"),
        re.compile(_HOST + r"instagram\.com/reel/([a-zA-Z0-9_-]+)"),
        re.compile(_HOST + r"instagram\.com/tv/([a-zA-Z0-9_-]+)"),
    ],
    UrlCategory.THREADS: [
        re.compile(_HOST + r"threads\.net/@?[\w.]+/post/([a-zA-Z0-9_-]+)"),
    ],
}

_URL_IN_TEXT_RE = re.compile(r"https?://[^\s<>\"{}|\\^`\[\]]+", re.IGNORECASE)
_TRAILING_PUNCTUATION_RE = re.compile(r"[.,;:!?'\")\]]+$")
_HTTP_URL_RE = re.compile(r"^https?://.+", re.IGNORECASE)


def extract_urls(text: str | None) -> list[str]:
    """Return every http(s) URL in *text*, trailing punctuation trimmed."""
    if not text:
        return []
    return [_TRAILING_PUNCTUATION_RE.sub("", match) for match in _URL_IN_TEXT_RE.findall(text)]


def classify_url(url: str | None) -> UrlCategory:
    if not url:
        return UrlCategory.NONE
    url = url.strip()
    for category, patterns in _PATTERNS.items():
        if any(pattern.search(url) for pattern in patterns):
            return category
    if _HTTP_URL_RE.match(url):
        return UrlCategory.WEB
    return UrlCategory.NONE


def extract_youtube_id(url: str) -> str | None:
    for pattern in _PATTERNS[UrlCategory.YOUTUBE]:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None
