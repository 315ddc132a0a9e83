"""Orchestrators for channel messages and preview button clicks."""

from src.pipeline.button_resolver import ButtonResolver
from src.pipeline.calendar_handler import CalendarHandler
from src.pipeline.info_collect_handler import InfoCollectHandler
from src.pipeline.interaction_cache import InteractionCache
from src.pipeline.message_router import MessageRouter, RouteOutcome

__all__ = [
    "ButtonResolver",
    "CalendarHandler",
    "InfoCollectHandler",
    "InteractionCache",
    "MessageRouter",
    "RouteOutcome",
]
