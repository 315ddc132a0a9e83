"""discord.py implementations of the chat-surface interfaces."""

from __future__ import annotations

import discord

from src.bot.embeds import render_embed
from src.bot.views import render_components
from src.interfaces.chat_surface import IConversation, IMessageHandle
from src.models.chat import Attachment, IncomingMessage, MessageView
from src.utils.errors import ContentFetchError


def to_incoming(message: discord.Message) -> IncomingMessage:
    return IncomingMessage(
        message_id=str(message.id),
        channel_id=str(message.channel.id),
        author_id=str(message.author.id),
        author_is_bot=message.author.bot,
        content=message.content or "",
        attachments=[
            Attachment(
                filename=attachment.filename,
                url=attachment.url,
                content_type=attachment.content_type,
                size=attachment.size,
            )
            for attachment in message.attachments
        ],
    )


class DiscordMessageHandle(IMessageHandle):
    """A message the bot sent in a channel."""

    def __init__(self, message: discord.Message) -> None:
        self._message = message

    @property
    def message_id(self) -> str:
        return str(self._message.id)

    async def edit(self, view: MessageView) -> None:
        self._message = await self._message.edit(
            embed=render_embed(view),
            view=render_components(view),
        )


class InteractionMessageHandle(IMessageHandle):
    """The original response of a deferred slash-command interaction."""

    def __init__(self, interaction: discord.Interaction, message: discord.InteractionMessage) -> None:
        self._interaction = interaction
        self._message_id = str(message.id)

    @classmethod
    async def from_interaction(cls, interaction: discord.Interaction) -> InteractionMessageHandle:
        return cls(interaction, await interaction.original_response())

    @property
    def message_id(self) -> str:
        return self._message_id

    async def edit(self, view: MessageView) -> None:
        await self._interaction.edit_original_response(
            embed=render_embed(view),
            view=render_components(view),
        )


class DiscordConversation(IConversation):
    """Replies, reactions and attachment downloads for one inbound message."""

    def __init__(self, message: discord.Message) -> None:
        self._message = message

    async def reply(self, view: MessageView) -> IMessageHandle:
        sent = await self._message.reply(
            embed=render_embed(view),
            view=render_components(view) or discord.utils.MISSING,
            mention_author=False,
        )
        return DiscordMessageHandle(sent)

    async def react(self, emoji: str) -> None:
        await self._message.add_reaction(emoji)

    async def read_attachment(self, attachment: Attachment) -> bytes:
        for candidate in self._message.attachments:
            if candidate.url == attachment.url:
                try:
                    return await candidate.read()
                except discord.HTTPException as exc:
                    raise ContentFetchError(
                        message=f"Could not download {attachment.filename}: {exc}",
                        provider_name="discord",
                    ) from exc
        raise ContentFetchError(
            message=f"Attachment {attachment.filename} is not on this message",
            provider_name="discord",
        )
