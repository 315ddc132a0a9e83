"""Platform-neutral chat models.

Handlers build :class:`MessageView` values and hand them to an
``IConversation``/``IMessageHandle`` (src/interfaces/chat_surface.py);
only the Discord adapter in src/bot/ knows how a view becomes an embed
with buttons.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ViewTone(str, Enum):  # noqa: UP042
    """Semantic colour of a rendered view."""

    INFO = "info"
    PROCESSING = "processing"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    MUTED = "muted"


class ActionStyle(str, Enum):  # noqa: UP042
    PRIMARY = "primary"
    SECONDARY = "secondary"
    SUCCESS = "success"
    DANGER = "danger"


class ViewField(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: str
    inline: bool = True


class ViewAction(BaseModel):
    """A clickable action; ``custom_id`` is ``<action-tag>:<ui-message-id>``."""

    model_config = ConfigDict(frozen=True)

    custom_id: str
    label: str
    style: ActionStyle = ActionStyle.SECONDARY
    emoji: str | None = None


class MessageView(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    description: str = ""
    tone: ViewTone = ViewTone.INFO
    fields: list[ViewField] = Field(default_factory=list)
    actions: list[ViewAction] = Field(default_factory=list)
    url: str | None = None
    thumbnail: str | None = None
    footer: str | None = None


class Attachment(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename: str
    url: str
    content_type: str | None = None
    size: int = 0


class IncomingMessage(BaseModel):
    """A channel message as the handlers see it."""

    model_config = ConfigDict(frozen=True)

    message_id: str
    channel_id: str
    author_id: str = ""
    author_is_bot: bool = False
    content: str = ""
    attachments: list[Attachment] = Field(default_factory=list)
