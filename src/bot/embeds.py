"""MessageView -> discord.Embed."""

from __future__ import annotations

import discord

from src.models.chat import MessageView, ViewTone

TONE_COLOURS: dict[ViewTone, int] = {
    ViewTone.INFO: 0x4285F4,
    ViewTone.PROCESSING: 0xFFA500,
    ViewTone.SUCCESS: 0x00D26A,
    ViewTone.WARNING: 0xFFCC00,
    ViewTone.ERROR: 0xFF4444,
    ViewTone.MUTED: 0x808080,
}

# Discord embed limits.
_TITLE_LIMIT = 256
_DESCRIPTION_LIMIT = 4096
_FIELD_VALUE_LIMIT = 1024
_MAX_FIELDS = 25


def render_embed(view: MessageView) -> discord.Embed:
    embed = discord.Embed(
        title=view.title[:_TITLE_LIMIT],
        description=view.description[:_DESCRIPTION_LIMIT] or None,
        colour=TONE_COLOURS[view.tone],
        url=view.url,
        timestamp=discord.utils.utcnow(),
    )
    for field in view.fields[:_MAX_FIELDS]:
        embed.add_field(
            name=field.name,
            value=field.value[:_FIELD_VALUE_LIMIT] or "-",
            inline=field.inline,
        )
    if view.thumbnail:
        embed.set_thumbnail(url=view.thumbnail)
    if view.footer:
        embed.set_footer(text=view.footer)
    return embed
