"""MessageView actions -> discord.ui.View."""

from __future__ import annotations

import discord

from src.bot.buttons import CalendarActionButton
from src.models.chat import ActionStyle, MessageView
from src.models.interaction import is_calendar_action

BUTTON_STYLES: dict[ActionStyle, discord.ButtonStyle] = {
    ActionStyle.PRIMARY: discord.ButtonStyle.primary,
    ActionStyle.SECONDARY: discord.ButtonStyle.secondary,
    ActionStyle.SUCCESS: discord.ButtonStyle.success,
    ActionStyle.DANGER: discord.ButtonStyle.danger,
}


def render_components(view: MessageView) -> discord.ui.View | None:
    """Buttons for *view*, or ``None`` so an edit clears old buttons.

    Needs a running event loop (``discord.ui.View`` creates a future).
    """
    if not view.actions:
        return None
    components = discord.ui.View(timeout=None)
    for action in view.actions:
        style = BUTTON_STYLES[action.style]
        if is_calendar_action(action.custom_id):
            components.add_item(
                CalendarActionButton.from_action(action.custom_id, action.label, style, action.emoji)
            )
        else:
            components.add_item(
                discord.ui.Button(
                    custom_id=action.custom_id,
                    label=action.label,
                    style=style,
                    emoji=action.emoji,
                )
            )
    return components
