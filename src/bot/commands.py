"""Slash commands: ``/ai``, ``/add-event``, ``/add-task``, ``/today`` and ``/status``."""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord
from discord import app_commands

from src.bot.adapters import InteractionMessageHandle
from src.bot.embeds import render_embed
from src.models.extraction import Priority
from src.services import view_formatter
from src.utils.errors import CycloneError, InvalidInputError
from src.utils.logging import get_logger

if TYPE_CHECKING:
    from src.bot.client import CycloneBot

_logger = get_logger(__name__)

PRIORITY_CHOICES = [
    app_commands.Choice(name="🔴 High", value=Priority.HIGH.value),
    app_commands.Choice(name="🟡 Medium", value=Priority.MEDIUM.value),
    app_commands.Choice(name="⚪ Low", value=Priority.LOW.value),
]


def register_commands(bot: CycloneBot) -> None:
    """Attach every slash command to ``bot.tree``."""
    components = bot.components

    @bot.tree.command(name="ai", description="Let the AI read a date out of your text and pick event or task")
    @app_commands.describe(text="What is happening, e.g. 明天下午兩點開會")
    async def ai_command(interaction: discord.Interaction, text: str) -> None:
        await interaction.response.defer()
        handle = await InteractionMessageHandle.from_interaction(interaction)
        try:
            result = await components.calendar_handler.analyze_text(text)
            await components.calendar_handler.present(result, handle, quoted_text=text)
        except CycloneError as exc:
            _logger.warning("ai_command_failed", error_type=type(exc).__name__, error=str(exc))
            await handle.edit(view_formatter.extraction_failed_view(exc.message))
        except Exception as exc:
            _logger.exception("ai_command_crashed")
            await handle.edit(view_formatter.extraction_failed_view(f"Unexpected error: {exc}"))

    @bot.tree.command(name="add-event", description="Add an event to the Notion calendar")
    @app_commands.describe(
        title="Event name",
        date="Date (YYYY-MM-DD)",
        time="Time (HH:MM); leave empty for an all-day event",
        location="Location",
        description="Notes",
    )
    async def add_event_command(
        interaction: discord.Interaction,
        title: str,
        date: str,
        time: str | None = None,
        location: str | None = None,
        description: str | None = None,
    ) -> None:
        await interaction.response.defer(ephemeral=True)
        try:
            entry = await components.quick_entry.add_event(title, date, time, location, description)
        except CycloneError as exc:
            await _send_error(interaction, exc)
            return
        view = view_formatter.quick_entry_view(
            "✅ Event added",
            entry.record.title,
            entry.ref,
            [
                ("📅 Date", f"{date} {time}" if time else f"{date} (all day)"),
                ("📍 Location", location),
            ]
            + ([("📝 Notes", description)] if description else []),
        )
        await interaction.followup.send(embed=render_embed(view), ephemeral=True)

    @bot.tree.command(name="add-task", description="Add a task to the Notion calendar")
    @app_commands.describe(
        title="Task name",
        deadline="Due date (YYYY-MM-DD)",
        priority="Priority",
        description="Notes",
    )
    @app_commands.choices(priority=PRIORITY_CHOICES)
    async def add_task_command(
        interaction: discord.Interaction,
        title: str,
        deadline: str | None = None,
        priority: app_commands.Choice[str] | None = None,
        description: str | None = None,
    ) -> None:
        await interaction.response.defer(ephemeral=True)
        chosen = Priority(priority.value) if priority else Priority.MEDIUM
        try:
            entry = await components.quick_entry.add_task(title, deadline, chosen, description)
        except CycloneError as exc:
            await _send_error(interaction, exc)
            return
        view = view_formatter.quick_entry_view(
            "✅ Task added",
            entry.record.title,
            entry.ref,
            [
                ("⏰ Deadline", deadline),
                ("📊 Priority", priority.name if priority else PRIORITY_CHOICES[1].name),
            ]
            + ([("📝 Notes", description)] if description else []),
        )
        await interaction.followup.send(embed=render_embed(view), ephemeral=True)

    @bot.tree.command(name="today", description="Show today's events and open tasks")
    async def today_command(interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True)
        try:
            view = await components.agenda.today()
        except CycloneError as exc:
            _logger.error("today_command_failed", error_type=type(exc).__name__, error=str(exc))
            view = view_formatter.query_failed_view(exc.message)
        await interaction.followup.send(embed=render_embed(view), ephemeral=True)

    @bot.tree.command(name="status", description="Show bot status and configuration")
    async def status_command(interaction: discord.Interaction) -> None:
        await interaction.response.send_message(
            embed=render_embed(components.status.report()),
            ephemeral=True,
        )


async def _send_error(interaction: discord.Interaction, exc: CycloneError) -> None:
    if isinstance(exc, InvalidInputError):
        view = view_formatter.input_error_view(exc.message)
    else:
        _logger.error("quick_entry_failed", error_type=type(exc).__name__, error=str(exc))
        view = view_formatter.operation_failed_view(exc.message)
    await interaction.followup.send(embed=render_embed(view), ephemeral=True)
