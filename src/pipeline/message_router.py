"""Route channel messages to the info-collect or calendar orchestrator."""

from __future__ import annotations

from enum import Enum

import structlog

from src.interfaces.chat_surface import IConversation
from src.models.chat import IncomingMessage
from src.pipeline.calendar_handler import CalendarHandler
from src.pipeline.info_collect_handler import InfoCollectHandler
from src.services import view_formatter
from src.utils.logging import get_logger
from src.utils.url_classifier import extract_urls

# Calendar-channel text this close to its URLs' combined length is a
# bare link post, not something to put on the calendar.
LINK_ONLY_SLACK = 20


class RouteOutcome(str, Enum):  # noqa: UP042
    IGNORED = "ignored"
    INFO_COLLECT = "info_collect"
    CALENDAR = "calendar"
    FAILED = "failed"


class MessageRouter:
    """Dispatches one inbound message; never lets a handler error escape."""

    def __init__(
        self,
        calendar_handler: CalendarHandler,
        info_collect_handler: InfoCollectHandler,
        info_collect_channel_id: str | None,
        calendar_channel_id: str | None,
    ) -> None:
        self._calendar = calendar_handler
        self._info_collect = info_collect_handler
        self._info_channel = info_collect_channel_id or None
        self._calendar_channel = calendar_channel_id or None
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def route(self, message: IncomingMessage, conversation: IConversation) -> RouteOutcome:
        if message.author_is_bot:
            return RouteOutcome.IGNORED

        in_info = self._info_channel is not None and message.channel_id == self._info_channel
        in_calendar = self._calendar_channel is not None and message.channel_id == self._calendar_channel
        if not (in_info or in_calendar):
            return RouteOutcome.IGNORED

        self._logger.debug(
            "message_received",
            channel_id=message.channel_id,
            author_id=message.author_id,
            attachments=len(message.attachments),
            content_length=len(message.content),
        )

        try:
            if in_info and self._info_collect.should_handle(message):
                await self._info_collect.handle(message, conversation)
                return RouteOutcome.INFO_COLLECT

            if in_calendar and not self._is_link_only(message):
                if await self._calendar.handle(message, conversation):
                    return RouteOutcome.CALENDAR
        except Exception:
            self._logger.exception("message_routing_failed", message_id=message.message_id)
            await self._report_failure(conversation)
            return RouteOutcome.FAILED

        return RouteOutcome.IGNORED

    @staticmethod
    def _is_link_only(message: IncomingMessage) -> bool:
        urls = extract_urls(message.content)
        if not urls:
            return False
        return len(message.content) <= sum(len(url) for url in urls) + LINK_ONLY_SLACK

    async def _report_failure(self, conversation: IConversation) -> None:
        try:
            await conversation.reply(
                view_formatter.extraction_failed_view("Something went wrong while handling this message.")
            )
        except Exception:
            self._logger.exception("failure_reply_failed")
