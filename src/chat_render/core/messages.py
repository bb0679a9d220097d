"""Chat message model consumed by the message renderer.

Messages are immutable snapshots handed over by the host's state layer.
Client-generated pseudo messages (date and new-message transitions, errors)
use the same type so one renderer handles the whole channel listing.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from enum import Enum
from typing import Union

from chat_render.core.cursor import CURSOR_SENTINEL
from chat_render.core.document import Block, para, words
from chat_render.core.markdown_parse import parse_markdown


class MessageType(Enum):
    # Server posts
    NORMAL_POST = "normal_post"
    EMOTE = "emote"
    JOIN = "join"
    LEAVE = "leave"
    TOPIC_CHANGE = "topic_change"
    # Client-side
    INFORMATIVE = "informative"
    ERROR = "error"
    DATE_TRANSITION = "date_transition"
    NEW_MESSAGES_TRANSITION = "new_messages_transition"


# Message types rendered without the "user: " prefix.
OMIT_USERNAME_TYPES = frozenset({MessageType.JOIN, MessageType.LEAVE, MessageType.TOPIC_CHANGE})

TRANSITION_TYPES = frozenset({MessageType.DATE_TRANSITION, MessageType.NEW_MESSAGES_TRANSITION})

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class NotAReply:
    pass


@dataclass(frozen=True)
class ParentNotLoaded:
    post_id: str


@dataclass(frozen=True)
class ParentLoaded:
    post_id: str
    parent: Message


ReplyState = Union[NotAReply, ParentNotLoaded, ParentLoaded]


@dataclass(frozen=True)
class Message:
    blocks: tuple[Block, ...]
    user_name: str | None = None
    date: datetime = EPOCH
    type: MessageType = MessageType.NORMAL_POST
    pending: bool = False
    deleted: bool = False
    attachments: tuple[str, ...] = ()
    in_reply_to: ReplyState = field(default_factory=NotAReply)
    post_id: str | None = None


def reply_parent(msg: Message) -> Message | None:
    match msg.in_reply_to:
        case ParentLoaded(parent=parent):
            return parent
        case _:
            return None


def client_message(text: str, msg_type: MessageType, date: datetime = EPOCH) -> Message:
    """A user-less message carrying plain text (no markdown parsing)."""
    return Message(blocks=(para(*words(text)),), date=date, type=msg_type)


def preview_from_input(user_name: str, text: str) -> Message | None:
    """Build the message the preview pane shows for the editor contents.

    Slash commands have no preview, except ``/me`` which previews as an emote.
    The date is irrelevant to preview rendering and stays at the epoch.
    """
    if text == CURSOR_SENTINEL:
        return None
    is_command = text.startswith("/")
    is_emote = text.startswith("/me ")
    if is_command and not is_emote:
        return None
    content = text[3:].lstrip() if is_emote else text
    return Message(
        blocks=parse_markdown(content),
        user_name=user_name,
        type=MessageType.EMOTE if is_emote else MessageType.NORMAL_POST,
    )


def insert_transitions(
    messages: Iterable[Message],
    date_format: str,
    tz: tzinfo,
    cutoff: datetime | None = None,
) -> list[Message]:
    """Interleave date-change and new-message markers into a listing.

    Deleted messages after the first are dropped and never count as the
    previous message.
    """
    out: list[Message] = []
    prev: Message | None = None
    for msg in messages:
        if prev is None:
            out.append(msg)
            prev = msg
            continue
        if msg.deleted:
            continue
        if cutoff is not None and prev.date < cutoff <= msg.date:
            out.append(client_message("New Messages", MessageType.NEW_MESSAGES_TRANSITION, cutoff))
        if msg.date.astimezone(tz).date() != prev.date.astimezone(tz).date():
            label = msg.date.astimezone(tz).strftime(date_format)
            out.append(client_message(label, MessageType.DATE_TRANSITION, msg.date))
        out.append(msg)
        prev = msg
    return out
