"""Anthropic provider adapter.

Wraps the ``anthropic`` async client to implement :class:`ILLMProvider`.

Key differences from the Gemini adapter:
    - Binary parts become typed content blocks with a base64 source:
      ``image`` blocks for pictures, ``document`` blocks for PDFs
    - Response content is a list of blocks, so text blocks are joined
"""

from __future__ import annotations

import base64
from typing import Any

import anthropic
import structlog

from src.config.settings import Settings
from src.interfaces.llm_provider import ILLMProvider, PromptPart
from src.utils.errors import LLMError

logger = structlog.get_logger(logger_name=__name__)

_IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"})


class AnthropicLLMProvider(ILLMProvider):
    """AI provider backed by the Anthropic Claude API."""

    def __init__(self, settings: Settings, request_timeout: float = 60.0) -> None:
        self._api_key = settings.anthropic_api_key
        self._client = anthropic.AsyncAnthropic(api_key=self._api_key, timeout=request_timeout)
        self._model = settings.anthropic_model

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def generate(
        self,
        parts: list[PromptPart],
        temperature: float = 0.2,
        max_tokens: int = 2048,
    ) -> str:
        content = [self._to_block(part) for part in parts]
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=[{"role": "user", "content": content}],
            )
        except anthropic.APITimeoutError as exc:
            raise LLMError(
                message="Anthropic request timed out",
                provider_name=self.get_provider_name(),
            ) from exc
        except anthropic.APIError as exc:
            raise LLMError(
                message=f"Anthropic API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        text = "".join(block.text for block in response.content if block.type == "text")
        if not text:
            raise LLMError(
                message="Anthropic returned empty response",
                provider_name=self.get_provider_name(),
            )
        logger.info(
            "anthropic_completion",
            model=self._model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
        return text

    def supports_mime_type(self, mime_type: str) -> bool:
        return mime_type in _IMAGE_TYPES or mime_type == "application/pdf"

    def is_available(self) -> bool:
        """Return ``True`` if an Anthropic API key is configured."""
        return bool(self._api_key)

    async def validate_credentials(self) -> bool:
        """Try a minimal completion to verify the API key works."""
        if not self.is_available():
            return False
        try:
            await self._client.messages.create(
                model=self._model,
                max_tokens=10,
                messages=[{"role": "user", "content": "hi"}],
            )
            return True
        except anthropic.APIError:
            return False

    def get_provider_name(self) -> str:
        return "anthropic"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _to_block(self, part: PromptPart) -> dict[str, Any]:
        if part.is_text:
            return {"type": "text", "text": part.text}
        mime_type = part.mime_type or "application/octet-stream"
        if not self.supports_mime_type(mime_type):
            raise LLMError(
                message=f"Unsupported attachment type {mime_type}",
                provider_name=self.get_provider_name(),
            )
        block_type = "document" if mime_type == "application/pdf" else "image"
        return {
            "type": block_type,
            "source": {
                "type": "base64",
                "media_type": mime_type,
                "data": base64.b64encode(part.data or b"").decode("utf-8"),
            },
        }
