"""Cyclone bot entry point and composition root.

Builds every provider and service once, injects them into the handlers,
then runs the Discord client and the uvicorn health server side by side
on one event loop.  SIGINT/SIGTERM close the bot, stop uvicorn, cancel
the cache sweeper and close the shared HTTP client.

Run with ``python -m src.main``.
"""

from __future__ import annotations

import asyncio
import contextlib
import signal
from dataclasses import dataclass
from typing import Any

import httpx
import structlog
import uvicorn

from src.api import create_app
from src.bot.client import BotComponents, CycloneBot
from src.config.loader import load_config
from src.config.settings import Settings
from src.interfaces.content_fetcher import IContentFetcher
from src.interfaces.llm_provider import ILLMProvider
from src.models.content import UrlCategory
from src.pipeline.button_resolver import ButtonResolver
from src.pipeline.calendar_handler import CalendarHandler
from src.pipeline.info_collect_handler import InfoCollectHandler
from src.pipeline.interaction_cache import InteractionCache
from src.pipeline.message_router import MessageRouter
from src.providers.cache.memory_cache import MemoryCacheProvider
from src.providers.calendar.google_provider import GoogleWorkspaceProvider
from src.providers.content import (
    ApifySocialFetcher,
    MetaTagFetcher,
    WebPageFetcher,
    YouTubeOEmbedFetcher,
)
from src.providers.content.web_page_provider import DEFAULT_HEADERS
from src.providers.document_store.notion_provider import NotionDocumentStore
from src.providers.llm.anthropic_provider import AnthropicLLMProvider
from src.providers.llm.gemini_provider import GeminiLLMProvider
from src.providers.llm.openai_provider import OpenAILLMProvider
from src.providers.pdf.pymupdf_provider import PyMuPDFTextProvider
from src.services.agenda_service import AgendaService
from src.services.calendar_extractor import CalendarExtractor
from src.services.content_fetch_service import ContentFetchService
from src.services.quick_entry import QuickEntryService
from src.services.status_service import StatusService
from src.utils.clock import OperatingClock
from src.utils.errors import ConfigurationError
from src.utils.logging import configure_logging, get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------


_LLM_FACTORIES = {
    "gemini": GeminiLLMProvider,
    "anthropic": AnthropicLLMProvider,
    "openai": OpenAILLMProvider,
}


def _build_llm_provider(app_settings: Settings, timeout: float) -> ILLMProvider:
    """Return the first configured AI provider: Gemini -> Anthropic -> OpenAI."""
    available = app_settings.get_available_llm_providers()
    if not available:
        raise ConfigurationError(message="No AI provider API key is configured")
    return _LLM_FACTORIES[available[0]](settings=app_settings, request_timeout=timeout)


def _build_fetch_chains(
    app_settings: Settings,
    config: dict[str, Any],
    http_client: httpx.AsyncClient,
) -> dict[UrlCategory, list[IContentFetcher]]:
    web_page = WebPageFetcher(
        http_client=http_client,
        max_content_length=config["scraper"]["max_content_length"],
    )
    meta_tags = MetaTagFetcher(http_client=http_client)

    social: list[IContentFetcher] = []
    if app_settings.is_apify_configured():
        social.append(
            ApifySocialFetcher(
                api_key=app_settings.apify_api_key,
                actors=config["apify"]["actors"],
                http_client=http_client,
                timeout=config["timeouts"]["scrape"],
            )
        )
    social.extend([meta_tags, web_page])

    return {
        UrlCategory.YOUTUBE: [YouTubeOEmbedFetcher(http_client=http_client)],
        UrlCategory.FACEBOOK: list(social),
        UrlCategory.INSTAGRAM: list(social),
        UrlCategory.THREADS: list(social),
        UrlCategory.WEB: [web_page],
    }


# ---------------------------------------------------------------------------
# Full DI assembly
# ---------------------------------------------------------------------------


@dataclass
class Application:
    """Long-lived objects owned by the process."""

    settings: Settings
    config: dict[str, Any]
    http_client: httpx.AsyncClient
    cache_store: MemoryCacheProvider
    components: BotComponents


def build_components(app_settings: Settings, config: dict[str, Any]) -> Application:
    """Construct every provider, service and handler.

    Nothing here touches the network; clients connect lazily.
    """
    timeouts = config["timeouts"]
    cache_config = config["cache"]

    # -- Shared resources --
    clock = OperatingClock(timezone=app_settings.google_timezone)
    http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(timeouts["http"]),
        headers=DEFAULT_HEADERS,
        follow_redirects=True,
    )
    cache_store = MemoryCacheProvider(
        default_ttl=cache_config["analysis_ttl"],
        check_period=cache_config["check_period"],
        max_size=cache_config["max_entries"],
    )
    interaction_cache = InteractionCache(
        cache_store,
        analysis_ttl=cache_config["analysis_ttl"],
        record_ttl=cache_config["record_ttl"],
        claim_ttl=cache_config["claim_ttl"],
        url_processing_ttl=cache_config["url_processing_ttl"],
    )

    # -- AI extraction --
    llm = _build_llm_provider(app_settings, timeouts["ai_extraction"])
    extractor = CalendarExtractor(
        llm_provider=llm,
        pdf_text_provider=PyMuPDFTextProvider(),
        clock=clock,
        timeout=timeouts["ai_extraction"],
    )

    # -- Downstream services --
    document_store = NotionDocumentStore(
        api_key=app_settings.notion_api_key,
        info_database_id=app_settings.notion_database_id_info,
        calendar_database_id=app_settings.notion_database_id_calendar,
        clock=clock,
        http_client=http_client,
        timeout=timeouts["http"],
    )
    calendar = GoogleWorkspaceProvider(
        client_id=app_settings.google_client_id,
        client_secret=app_settings.google_client_secret,
        refresh_token=app_settings.google_refresh_token,
        timezone=app_settings.google_timezone,
    )

    # -- Orchestrators --
    fetch_service = ContentFetchService(
        _build_fetch_chains(app_settings, config, http_client),
        timeout=timeouts["scrape"],
    )
    calendar_handler = CalendarHandler(
        extractor,
        interaction_cache,
        min_text_length=config["calendar"]["min_text_length"],
    )
    info_collect_handler = InfoCollectHandler(fetch_service, document_store, interaction_cache, clock)
    router = MessageRouter(
        calendar_handler,
        info_collect_handler,
        info_collect_channel_id=app_settings.discord_info_collect_channel_id,
        calendar_channel_id=app_settings.discord_calendar_channel_id,
    )

    components = BotComponents(
        router=router,
        calendar_handler=calendar_handler,
        resolver=ButtonResolver(interaction_cache, calendar, document_store),
        quick_entry=QuickEntryService(document_store),
        status=StatusService(app_settings, cache_store),
        agenda=AgendaService(document_store, clock),
    )

    _logger.info(
        "components_built",
        llm=llm.get_provider_name(),
        google_configured=calendar.is_configured(),
        apify_configured=app_settings.is_apify_configured(),
        timezone=clock.timezone_name,
    )
    return Application(
        settings=app_settings,
        config=config,
        http_client=http_client,
        cache_store=cache_store,
        components=components,
    )


# ---------------------------------------------------------------------------
# Runtime
# ---------------------------------------------------------------------------


async def run(app_settings: Settings | None = None) -> None:
    app_settings = app_settings or Settings()
    config = load_config(settings=app_settings)
    configure_logging(log_level=app_settings.log_level, app_env=app_settings.app_env)

    missing = app_settings.missing_required()
    if missing:
        raise ConfigurationError(message=f"Missing required environment variables: {', '.join(missing)}")

    application = build_components(app_settings, config)
    bot = CycloneBot(application.components, guild_id=app_settings.discord_guild_id)
    server = uvicorn.Server(
        uvicorn.Config(
            create_app(application.components.status),
            host=app_settings.app_host,
            port=app_settings.app_port,
            log_config=None,
        )
    )
    # The default handlers would stop uvicorn alone; shutdown is driven below.
    server.install_signal_handlers = lambda: None  # type: ignore[method-assign]

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    application.cache_store.start_sweeper()
    tasks = [
        asyncio.create_task(bot.start(app_settings.discord_token), name="discord"),
        asyncio.create_task(server.serve(), name="health"),
        asyncio.create_task(stop.wait(), name="signal"),
    ]
    _logger.info("cyclone_starting", port=app_settings.app_port, env=app_settings.app_env)

    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            if task.get_name() != "signal" and task.exception() is not None:
                _logger.error("task_failed", task=task.get_name(), error=str(task.exception()))
    finally:
        _logger.info("cyclone_shutting_down")
        server.should_exit = True
        await bot.close()
        await application.cache_store.close()
        await application.http_client.aclose()
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        _logger.info("cyclone_stopped")


def main() -> None:
    asyncio.run(run())


if __name__ == "__main__":
    main()
