"""Abstract interfaces for every external collaborator.

Orchestrators depend only on these; concrete adapters live in
``src/providers/`` (and ``src/bot/`` for the chat surface) and are
wired together in ``src/main.py``.

    Interface               ->  Implementation
    ----------------------------------------------------------------
    ICacheProvider          ->  MemoryCacheProvider
    ILLMProvider            ->  GeminiLLMProvider, AnthropicLLMProvider,
                                OpenAILLMProvider
    IPdfTextProvider        ->  PyMuPDFTextProvider
    IContentFetcher         ->  YouTubeOEmbedFetcher, ApifySocialFetcher,
                                MetaTagFetcher, WebPageFetcher
    IDocumentStoreProvider  ->  NotionDocumentStore
    ICalendarProvider       ->  GoogleWorkspaceProvider
    IConversation           ->  DiscordConversation
    IMessageHandle          ->  DiscordMessageHandle, InteractionMessageHandle
"""

from src.interfaces.cache_provider import ICacheProvider
from src.interfaces.calendar_provider import ICalendarProvider
from src.interfaces.chat_surface import IConversation, IMessageHandle
from src.interfaces.content_fetcher import IContentFetcher
from src.interfaces.document_store_provider import IDocumentStoreProvider
from src.interfaces.llm_provider import ILLMProvider, PromptPart
from src.interfaces.pdf_text_provider import IPdfTextProvider

__all__ = [
    "ICacheProvider",
    "ICalendarProvider",
    "IContentFetcher",
    "IConversation",
    "IDocumentStoreProvider",
    "ILLMProvider",
    "IMessageHandle",
    "IPdfTextProvider",
    "PromptPart",
]
