"""Discord adapter: renders MessageViews and feeds events to the orchestrators."""

from src.bot.client import BotComponents, CycloneBot

__all__ = ["BotComponents", "CycloneBot"]
