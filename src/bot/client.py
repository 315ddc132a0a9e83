"""The discord.py client: event hooks, dynamic buttons and command sync."""

from __future__ import annotations

from dataclasses import dataclass

import discord
import structlog
from discord.ext import commands

from src.bot.adapters import DiscordConversation, to_incoming
from src.bot.buttons import CalendarActionButton
from src.bot.commands import register_commands
from src.pipeline.button_resolver import ButtonResolver
from src.pipeline.calendar_handler import CalendarHandler
from src.pipeline.message_router import MessageRouter
from src.services.agenda_service import AgendaService
from src.services.quick_entry import QuickEntryService
from src.services.status_service import StatusService
from src.utils.logging import get_logger


@dataclass(frozen=True)
class BotComponents:
    """Everything the Discord layer calls into; built by the composition root."""

    router: MessageRouter
    calendar_handler: CalendarHandler
    resolver: ButtonResolver
    quick_entry: QuickEntryService
    status: StatusService
    agenda: AgendaService


class CycloneBot(commands.Bot):
    def __init__(self, components: BotComponents, guild_id: str | None = None) -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(command_prefix="!", intents=intents)
        self.components = components
        self._guild_id = guild_id or None
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def setup_hook(self) -> None:
        self.add_dynamic_items(CalendarActionButton)
        register_commands(self)
        if self._guild_id:
            guild = discord.Object(id=int(self._guild_id))
            self.tree.copy_global_to(guild=guild)
            synced = await self.tree.sync(guild=guild)
        else:
            synced = await self.tree.sync()
        self._logger.info("commands_synced", count=len(synced), guild_id=self._guild_id)

    async def on_ready(self) -> None:
        self.components.status.mark_ready()
        self._logger.info(
            "bot_ready",
            user=str(self.user),
            guilds=len(self.guilds),
        )

    async def on_message(self, message: discord.Message) -> None:
        await self.components.router.route(to_incoming(message), DiscordConversation(message))

    async def on_error(self, event_method: str, /, *args: object, **kwargs: object) -> None:
        self._logger.exception("discord_event_error", event=event_method)
