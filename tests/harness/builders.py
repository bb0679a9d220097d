"""Shared builders for messages and channel histories in tests."""

from datetime import datetime, timedelta, timezone

from chat_render.core.markdown_parse import parse_markdown
from chat_render.core.messages import Message, MessageType, ParentLoaded


def make_message(
    text="Hello world",
    user_name="alice",
    date=None,
    msg_type=MessageType.NORMAL_POST,
    **kwargs,
):
    """Create a message whose body is ``text`` parsed as markdown."""
    return Message(
        blocks=parse_markdown(text),
        user_name=user_name,
        date=date or datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc),
        type=msg_type,
        **kwargs,
    )


def make_reply(text, parent_text, user_name="bob", parent_user="alice"):
    """Create a reply whose parent is loaded."""
    parent = make_message(parent_text, user_name=parent_user)
    return make_message(
        text,
        user_name=user_name,
        in_reply_to=ParentLoaded(post_id="p1", parent=parent),
    )


def make_history(n=3, start=None, step=timedelta(hours=1), **kwargs):
    """Create N messages spaced ``step`` apart, numbered "Message i".

    Args:
        n: Number of messages to create
        start: Date of the first message (default 2024-03-01 12:00 UTC)
        step: Gap between consecutive messages
        **kwargs: Arguments passed to make_message() for customization
    """
    start = start or datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
    return [
        make_message(f"Message {i}", date=start + i * step, **kwargs)
        for i in range(n)
    ]
