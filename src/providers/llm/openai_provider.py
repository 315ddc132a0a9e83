"""OpenAI provider adapter.

Wraps the ``openai`` async client to implement :class:`ILLMProvider`.
Images are sent as base64 data URIs in ``image_url`` parts and PDFs as
``file`` parts, both inside one user message of the chat completions
API.
"""

from __future__ import annotations

import base64
from typing import Any

import openai
import structlog

from src.config.settings import Settings
from src.interfaces.llm_provider import ILLMProvider, PromptPart
from src.utils.errors import LLMError

logger = structlog.get_logger(logger_name=__name__)


class OpenAILLMProvider(ILLMProvider):
    """AI provider backed by the OpenAI chat completions API."""

    def __init__(self, settings: Settings, request_timeout: float = 60.0) -> None:
        self._api_key = settings.openai_api_key
        self._client = openai.AsyncOpenAI(
            api_key=self._api_key,
            timeout=openai.Timeout(request_timeout, connect=5.0),
        )
        self._model = settings.openai_model
        self._request_timeout = request_timeout

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def generate(
        self,
        parts: list[PromptPart],
        temperature: float = 0.2,
        max_tokens: int = 2048,
    ) -> str:
        content = [self._to_content(part) for part in parts]
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": content}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.APITimeoutError as exc:
            raise LLMError(
                message=f"OpenAI timed out after {self._request_timeout:.0f}s",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIError as exc:
            raise LLMError(
                message=f"OpenAI API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        text = response.choices[0].message.content
        if not text:
            raise LLMError(
                message="OpenAI returned empty response",
                provider_name=self.get_provider_name(),
            )
        logger.info(
            "openai_completion",
            model=self._model,
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return text

    def supports_mime_type(self, mime_type: str) -> bool:
        return mime_type.startswith("image/") or mime_type == "application/pdf"

    def is_available(self) -> bool:
        """Return ``True`` if an OpenAI API key is configured."""
        return bool(self._api_key)

    async def validate_credentials(self) -> bool:
        if not self.is_available():
            return False
        try:
            await self._client.models.list()
            return True
        except openai.APIError:
            return False

    def get_provider_name(self) -> str:
        return "openai"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _to_content(self, part: PromptPart) -> dict[str, Any]:
        if part.is_text:
            return {"type": "text", "text": part.text}
        mime_type = part.mime_type or "application/octet-stream"
        encoded = base64.b64encode(part.data or b"").decode("utf-8")
        data_uri = f"data:{mime_type};base64,{encoded}"
        if mime_type == "application/pdf":
            return {"type": "file", "file": {"filename": "document.pdf", "file_data": data_uri}}
        if mime_type.startswith("image/"):
            return {"type": "image_url", "image_url": {"url": data_uri}}
        raise LLMError(
            message=f"Unsupported attachment type {mime_type}",
            provider_name=self.get_provider_name(),
        )
