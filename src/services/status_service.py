"""Runtime status shared by ``/status`` and the health endpoint."""

from __future__ import annotations

import time
from typing import Callable

from src.config.settings import Settings
from src.models.chat import MessageView
from src.providers.cache.memory_cache import MemoryCacheProvider
from src.services import view_formatter


def format_uptime(seconds: float) -> str:
    seconds = int(seconds)
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours}h {minutes}m {secs}s"


class StatusService:
    """Uptime, configuration checklist and cache statistics."""

    def __init__(
        self,
        settings: Settings,
        cache: MemoryCacheProvider,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings
        self._cache = cache
        self._timer = timer
        self._started_at = timer()
        self._ready = False

    def mark_ready(self) -> None:
        self._ready = True

    @property
    def is_ready(self) -> bool:
        return self._ready

    def uptime_seconds(self) -> float:
        return self._timer() - self._started_at

    def checks(self) -> dict[str, bool]:
        settings = self._settings
        return {
            "Discord token": bool(settings.discord_token),
            "Info-collect channel": bool(settings.discord_info_collect_channel_id),
            "Calendar channel": bool(settings.discord_calendar_channel_id),
            "Notion API": settings.is_notion_configured(),
            "Notion info database": bool(settings.notion_database_id_info),
            "Notion calendar database": bool(settings.notion_database_id_calendar),
            "AI provider": bool(settings.get_available_llm_providers()),
            "Apify scraper": settings.is_apify_configured(),
            "Google services": settings.is_google_configured(),
        }

    def cache_stats(self) -> dict[str, int]:
        return self._cache.stats()

    def report(self) -> MessageView:
        return view_formatter.status_view(
            self.checks(),
            format_uptime(self.uptime_seconds()),
            self.cache_stats(),
        )

    def health(self) -> dict:
        return {
            "status": "ok",
            "uptime_seconds": round(self.uptime_seconds(), 1),
            "bot_ready": self._ready,
            "cache_keys": self.cache_stats().get("keys", 0),
        }
