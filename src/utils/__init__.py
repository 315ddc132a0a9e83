"""Utility modules for Cyclone.

- **errors** -- exception hierarchy rooted at CycloneError.
- **logging** -- structlog setup (console in development, JSON in production).
- **retry** -- backoff retry and explicit timeouts for slow external calls.
- **clock** -- operating-time-zone "today" and ROC-year helpers.
- **url_classifier** -- URL extraction and category matching.
"""

from src.utils.clock import ROC_YEAR_OFFSET, OperatingClock
from src.utils.errors import (
    ConfigurationError,
    ContentFetchError,
    CycloneError,
    DownstreamWriteError,
    ExtractionError,
    InvalidInputError,
    LLMError,
    MalformedResponseError,
    NoDateFoundError,
    ProviderUnavailableError,
    ServiceNotConfiguredError,
    UnreadableDocumentError,
)
from src.utils.logging import configure_logging, get_logger
from src.utils.retry import is_retryable, is_safe_to_resend, with_retry, with_timeout
from src.utils.url_classifier import classify_url, extract_urls, extract_youtube_id

__all__ = [
    "ROC_YEAR_OFFSET",
    "ConfigurationError",
    "ContentFetchError",
    "CycloneError",
    "DownstreamWriteError",
    "ExtractionError",
    "InvalidInputError",
    "LLMError",
    "MalformedResponseError",
    "NoDateFoundError",
    "OperatingClock",
    "ProviderUnavailableError",
    "ServiceNotConfiguredError",
    "UnreadableDocumentError",
    "classify_url",
    "configure_logging",
    "extract_urls",
    "extract_youtube_id",
    "get_logger",
    "is_retryable",
    "is_safe_to_resend",
    "with_retry",
    "with_timeout",
]
