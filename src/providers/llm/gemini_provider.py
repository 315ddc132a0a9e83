"""Google Gemini provider adapter.

Wraps ``google.generativeai`` to implement :class:`ILLMProvider`.  Gemini
is the primary model for the bot because it accepts images and whole
PDFs inline, so a flyer or a school notice can be read in one call.

Prompt parts map directly onto Gemini content: text parts become
strings and binary parts become ``{"mime_type", "data"}`` blobs.
"""

from __future__ import annotations

from typing import Any

import google.generativeai as genai
import structlog
from google.api_core import exceptions as google_exceptions

from src.config.settings import Settings
from src.interfaces.llm_provider import ILLMProvider, PromptPart
from src.utils.errors import LLMError

logger = structlog.get_logger(logger_name=__name__)

_SUPPORTED_PREFIXES = ("image/", "application/pdf", "text/", "audio/", "video/")


class GeminiLLMProvider(ILLMProvider):
    """AI provider backed by the Gemini API.

    Parameters
    ----------
    settings:
        Supplies ``gemini_api_key`` and ``gemini_model``.
    request_timeout:
        Per-request deadline in seconds passed to the client.
    """

    def __init__(self, settings: Settings, request_timeout: float = 60.0) -> None:
        self._api_key = settings.gemini_api_key
        self._model_name = settings.gemini_model
        self._request_timeout = request_timeout
        if self._api_key:
            genai.configure(api_key=self._api_key)
        self._model = genai.GenerativeModel(model_name=self._model_name)

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def generate(
        self,
        parts: list[PromptPart],
        temperature: float = 0.2,
        max_tokens: int = 2048,
    ) -> str:
        contents = [self._to_content(part) for part in parts]
        try:
            response = await self._model.generate_content_async(
                contents,
                generation_config={"temperature": temperature, "max_output_tokens": max_tokens},
                request_options={"timeout": self._request_timeout},
            )
            text = response.text
        except google_exceptions.DeadlineExceeded as exc:
            raise LLMError(
                message=f"Gemini timed out after {self._request_timeout:.0f}s",
                provider_name=self.get_provider_name(),
            ) from exc
        except google_exceptions.GoogleAPIError as exc:
            raise LLMError(
                message=f"Gemini API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except ValueError as exc:
            # response.text raises ValueError when the candidate was blocked.
            raise LLMError(
                message=f"Gemini returned no text: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not text:
            raise LLMError(
                message="Gemini returned empty response",
                provider_name=self.get_provider_name(),
            )
        logger.info(
            "gemini_completion",
            model=self._model_name,
            parts=len(parts),
            binary_parts=sum(1 for part in parts if not part.is_text),
        )
        return text

    def supports_mime_type(self, mime_type: str) -> bool:
        return mime_type.startswith(_SUPPORTED_PREFIXES)

    def is_available(self) -> bool:
        return bool(self._api_key)

    async def validate_credentials(self) -> bool:
        if not self.is_available():
            return False
        try:
            await self._model.generate_content_async(
                "hi",
                generation_config={"max_output_tokens": 5},
                request_options={"timeout": self._request_timeout},
            )
            return True
        except google_exceptions.GoogleAPIError:
            return False

    def get_provider_name(self) -> str:
        return "gemini"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _to_content(part: PromptPart) -> Any:
        if part.is_text:
            return part.text
        return {"mime_type": part.mime_type, "data": part.data}
