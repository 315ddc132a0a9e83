"""Abstract base class for AI model providers.

Defines the contract for any model backend used to read messages,
images and PDFs and answer with calendar JSON.  Implementations wrap
Gemini, Anthropic or OpenAI; the adapter pattern keeps the extractor
provider-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class PromptPart:
    """One piece of a multi-part prompt: plain text or an inline file."""

    text: str | None = None
    data: bytes | None = None
    mime_type: str | None = None

    @classmethod
    def from_text(cls, text: str) -> PromptPart:
        return cls(text=text)

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: str) -> PromptPart:
        return cls(data=data, mime_type=mime_type)

    @property
    def is_text(self) -> bool:
        return self.text is not None


# Concrete implementations: GeminiLLMProvider, AnthropicLLMProvider, OpenAILLMProvider
# Located in: src/providers/llm/
class ILLMProvider(ABC):
    """Contract for AI models used by the calendar extractor.

    Every provider accepts text parts; which binary types it accepts is
    declared via :meth:`supports_mime_type`.
    """

    @abstractmethod
    async def generate(
        self,
        parts: list[PromptPart],
        temperature: float = 0.2,
        max_tokens: int = 2048,
    ) -> str:
        """Send an ordered list of prompt parts and return the raw reply text.

        Parameters
        ----------
        parts:
            Text and inline binary parts, in the order the model sees them.
        temperature:
            Sampling temperature (0.0 = deterministic).
        max_tokens:
            Upper bound on the number of tokens in the response.

        Raises
        ------
        src.utils.errors.LLMError
            If the API call fails, times out or returns no text.
        """

    @abstractmethod
    def supports_mime_type(self, mime_type: str) -> bool:
        """Return ``True`` if inline parts of *mime_type* are accepted."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"gemini"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if credentials are configured (no network call)."""

    @abstractmethod
    async def validate_credentials(self) -> bool:
        """Perform a lightweight API call to confirm credentials are valid."""
