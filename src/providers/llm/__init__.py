"""AI model provider adapters.

Three concrete implementations of ILLMProvider (src/interfaces/llm_provider.py):
    - GeminiLLMProvider   : gemini-2.5-flash by default; images and PDFs inline
    - AnthropicLLMProvider: Claude (image and document blocks)
    - OpenAILLMProvider   : gpt-4o (image_url and file parts)

main.py picks the first one whose API key is configured, in that order.
"""

from src.providers.llm.anthropic_provider import AnthropicLLMProvider
from src.providers.llm.gemini_provider import GeminiLLMProvider
from src.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["AnthropicLLMProvider", "GeminiLLMProvider", "OpenAILLMProvider"]
