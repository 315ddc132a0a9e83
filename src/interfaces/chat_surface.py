"""Abstract chat surface the orchestrators render into.

Handlers never import discord.py.  They reply to a conversation, keep the
returned :class:`IMessageHandle` and edit it as work progresses; the
handle's ``message_id`` is the UI message identity that pending
interactions are cached under.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.chat import Attachment, MessageView


class IMessageHandle(ABC):
    """A message the bot posted and may edit later."""

    @property
    @abstractmethod
    def message_id(self) -> str:
        """Platform id of the posted message."""

    @abstractmethod
    async def edit(self, view: MessageView) -> None:
        """Replace the message content (and action buttons) with *view*."""


class IConversation(ABC):
    """The channel context of one inbound message."""

    @abstractmethod
    async def reply(self, view: MessageView) -> IMessageHandle:
        """Post *view* as a reply and return a handle to it."""

    @abstractmethod
    async def react(self, emoji: str) -> None:
        """Add a reaction to the inbound message."""

    @abstractmethod
    async def read_attachment(self, attachment: Attachment) -> bytes:
        """Download the bytes of one of the inbound message's attachments."""
