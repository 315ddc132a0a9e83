"""Custom exception hierarchy for the Cyclone bot.

All application exceptions inherit from :class:`CycloneError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "gemini", "notion", "google_calendar") caused the
failure.

The hierarchy is organized by where the failure surfaces to the user:

    CycloneError  (base -- catch-all for any bot error)
    +-- ConfigurationError         (startup / missing config)
    +-- LLMError                   (any AI API call failure)
    +-- ExtractionError            (AI output unusable for this message)
    |   +-- MalformedResponseError (no parseable JSON object in the reply)
    |   +-- NoDateFoundError       (confidence 0 or no start date / deadline)
    |   +-- UnreadableDocumentError (PDF has no extractable text)
    +-- ServiceNotConfiguredError  (integration credentials absent)
    +-- DownstreamWriteError       (Notion / Google write failed)
    +-- ContentFetchError          (link metadata could not be fetched)
    +-- ProviderUnavailableError   (external service down / unreachable)
    +-- InvalidInputError          (slash-command argument validation)

Orchestrators catch these at their boundary and turn them into a
rendered failure view; ``ServiceNotConfiguredError`` is kept distinct so
the button resolver can show "service unavailable" and keep the pending
entry alive.
"""


class CycloneError(Exception):
    """Base exception for all bot errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  ``__str__`` prefixes the provider name in brackets for
    structured log output, e.g. ``[notion] 400 validation_error``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------

class ConfigurationError(CycloneError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# AI extraction
# ---------------------------------------------------------------------------

class LLMError(CycloneError):
    """Raised when an AI API call fails or times out."""

    def __init__(
        self,
        message: str = "AI API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ExtractionError(CycloneError):
    """Raised when AI output cannot become a usable calendar item."""

    def __init__(
        self,
        message: str = "Calendar extraction failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class MalformedResponseError(ExtractionError):
    """Raised when the AI reply contains no parseable JSON object."""

    def __init__(
        self,
        message: str = "AI response was not valid JSON",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class NoDateFoundError(ExtractionError):
    """Raised when the extraction carries no date (confidence 0 or no start/deadline)."""

    def __init__(
        self,
        message: str = "No date or time information found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class UnreadableDocumentError(ExtractionError):
    """Raised when a PDF yields no text after every extraction strategy."""

    def __init__(
        self,
        message: str = "The PDF contains no readable text",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Downstream services
# ---------------------------------------------------------------------------

class ServiceNotConfiguredError(CycloneError):
    """Raised when an integration is called without credentials.

    Distinct from :class:`DownstreamWriteError` so callers can tell
    "never set up" apart from "failed at request time".
    """

    def __init__(
        self,
        message: str = "Service is not configured",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class DownstreamWriteError(CycloneError):
    """Raised when creating a Notion page or Google event/task fails."""

    def __init__(
        self,
        message: str = "Downstream write failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ContentFetchError(CycloneError):
    """Raised when link content could not be fetched or scraped."""

    def __init__(
        self,
        message: str = "Content fetch failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ProviderUnavailableError(CycloneError):
    """Raised when an external service is unreachable.

    Fallback chains catch this to try the next strategy in order.
    """

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# User input
# ---------------------------------------------------------------------------

class InvalidInputError(CycloneError):
    """Raised when slash-command arguments fail validation."""

    def __init__(
        self,
        message: str = "Invalid input",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
