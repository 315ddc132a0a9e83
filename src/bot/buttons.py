"""Persistent preview buttons.

``CalendarActionButton`` is a ``DynamicItem``: discord.py matches any
clicked custom id against its template, so buttons on previews posted
before a restart still reach the resolver (and get "data expired").
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import discord

from src.bot.embeds import render_embed
from src.models.interaction import Resolution, ResolutionOutcome
from src.utils.logging import get_logger

if TYPE_CHECKING:
    from src.bot.client import CycloneBot

_logger = get_logger(__name__)


class CalendarActionButton(
    discord.ui.DynamicItem[discord.ui.Button],
    template=r"(?P<tag>calendar_[a-z]+):(?P<ui_message_id>\d+)",
):
    def __init__(self, button: discord.ui.Button) -> None:
        super().__init__(button)

    @classmethod
    def from_action(
        cls,
        custom_id: str,
        label: str,
        style: discord.ButtonStyle,
        emoji: str | None = None,
    ) -> CalendarActionButton:
        return cls(discord.ui.Button(custom_id=custom_id, label=label, style=style, emoji=emoji))

    @classmethod
    async def from_custom_id(
        cls,
        interaction: discord.Interaction,
        item: discord.ui.Button,
        match: re.Match[str],
    ) -> CalendarActionButton:
        return cls(discord.ui.Button(custom_id=item.custom_id, label=item.label, style=item.style))

    async def callback(self, interaction: discord.Interaction) -> None:
        bot: CycloneBot = interaction.client  # type: ignore[assignment]
        custom_id = self.item.custom_id or ""
        _logger.info(
            "button_clicked",
            custom_id=custom_id,
            user_id=interaction.user.id if interaction.user else None,
        )
        # Downstream writes can exceed the 3 s acknowledgement window.
        await interaction.response.defer()
        resolution = await bot.components.resolver.resolve(custom_id)
        await deliver_resolution(interaction, resolution)


async def deliver_resolution(interaction: discord.Interaction, resolution: Resolution) -> None:
    """Send a resolution after the interaction was deferred."""
    if resolution.outcome is ResolutionOutcome.UNRECOGNIZED or resolution.view is None:
        return
    embed = render_embed(resolution.view)
    if resolution.ephemeral:
        await interaction.followup.send(embed=embed, ephemeral=True)
    else:
        await interaction.edit_original_response(embed=embed, view=None)
