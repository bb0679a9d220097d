"""Message-level rendering: username framing, reply chains, history, preview.

Builds on tui.assembler. A message renders as its username prefix beside its
markdown body; a reply additionally gets a one-row, ellipsized rendering of
its parent above it. The parent is rendered with reply expansion turned off,
so chains are expanded exactly one level deep.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Sequence
from datetime import tzinfo

from rich.cells import cell_len
from rich.style import Style

from chat_render.core.cursor import insert_cursor_at_eol
from chat_render.core.messages import (
    OMIT_USERNAME_TYPES,
    TRANSITION_TYPES,
    Message,
    MessageType,
    preview_from_input,
    reply_parent,
)
from chat_render.tui.assembler import (
    RenderedLines,
    Row,
    StyledRun,
    beside,
    force_style,
    render_blocks,
    row_width,
    text_lines,
    truncate_ellipsis,
    vstack,
    with_default_style,
)
from chat_render.tui.theme import ThemeColors, get_theme_colors

logger = logging.getLogger(__name__)

REPLY_MARKER = " \u250c\u25b8"  # " ┌▸"
RULE_CHAR = "\u2500"  # ─
NO_PREVIEW = "(No preview)"
DEFAULT_TIME_FORMAT = "%H:%M"


def _username_prefix(msg: Message, theme: ThemeColors) -> Row:
    user = msg.user_name
    if not user or msg.type in OMIT_USERNAME_TYPES:
        return ()
    name = StyledRun(user, theme.username_style(user))
    if msg.type is MessageType.EMOTE:
        return (StyledRun("*"), name, StyledRun(" "))
    return (name, StyledRun(": "))


def render_message(
    msg: Message,
    render_reply_parent: bool,
    users: Collection[str],
    width: int,
    theme: ThemeColors | None = None,
) -> RenderedLines:
    """Render one message, with its reply parent when requested and loaded."""
    theme = theme or get_theme_colors()
    prefix = _username_prefix(msg, theme)
    if prefix:
        body = render_blocks(msg.blocks, users, width - row_width(prefix), theme)
        mine = beside(prefix, body)
    else:
        mine = render_blocks(msg.blocks, users, width, theme)

    parent = reply_parent(msg) if render_reply_parent else None
    if parent is None:
        return mine
    parent_width = width - cell_len(REPLY_MARKER)
    parent_rows = render_message(parent, False, users, parent_width, theme)
    parent_rows = truncate_ellipsis(
        force_style(Style.parse(theme.reply_parent_style), parent_rows), parent_width
    )
    return vstack([beside((StyledRun(REPLY_MARKER),), parent_rows), mine])


def labelled_rule(label: RenderedLines, width: int, style: Style) -> RenderedLines:
    """A full-width horizontal rule with the label's first row centered in it."""
    row = label.rows[0] if label.rows else ()
    free = max(width - row_width(row), 0)
    left = free // 2
    rule = (StyledRun(RULE_CHAR * left),) + row + (StyledRun(RULE_CHAR * (free - left)),)
    return with_default_style(style, RenderedLines((rule,)))


def render_chat_message(
    msg: Message,
    users: Collection[str],
    width: int,
    time_format: str = DEFAULT_TIME_FORMAT,
    tz: tzinfo | None = None,
    theme: ThemeColors | None = None,
) -> RenderedLines:
    """Render a message as it appears in the channel: time, body, attachments."""
    theme = theme or get_theme_colors()

    if msg.type in TRANSITION_TYPES:
        label = render_message(msg, True, users, width, theme)
        style = (
            theme.date_transition_style
            if msg.type is MessageType.DATE_TRANSITION
            else theme.new_message_transition_style
        )
        return labelled_rule(label, width, Style.parse(style))

    stamp = msg.date.astimezone(tz).strftime(time_format)
    time_prefix: Row = (StyledRun(f"[{stamp}]", Style.parse(theme.time_style)), StyledRun(" "))
    inner_width = width - row_width(time_prefix)

    rendered = render_message(msg, True, users, inner_width, theme)
    client_style = Style.parse(theme.client_message_style)
    if msg.user_name:
        if msg.type in (MessageType.JOIN, MessageType.LEAVE):
            rendered = with_default_style(client_style, rendered)
    elif msg.type is MessageType.ERROR:
        rendered = with_default_style(Style.parse(theme.error_message_style), rendered)
    else:
        rendered = with_default_style(client_style, rendered)

    attachments = vstack(
        text_lines(f"  [attached: `{name}`]", client_style) for name in msg.attachments
    )
    return beside(time_prefix, vstack([rendered, attachments]))


def render_last_messages(
    messages: Sequence[Message],
    users: Collection[str],
    width: int,
    height: int,
    time_format: str = DEFAULT_TIME_FORMAT,
    tz: tzinfo | None = None,
    theme: ThemeColors | None = None,
) -> RenderedLines:
    """Render the tail of a listing that fits in ``height`` rows.

    Works newest to oldest and stops once the rows are filled, so long
    histories cost only what is on screen. Deleted messages are skipped.
    """
    rows: list[Row] = []
    for msg in reversed(messages):
        if len(rows) >= height:
            break
        if msg.deleted:
            continue
        rendered = render_chat_message(msg, users, width, time_format, tz, theme)
        rows[:0] = rendered.rows
    return RenderedLines(tuple(rows[max(len(rows) - height, 0):]))


def preview_window(rendered: RenderedLines, max_height: int) -> RenderedLines:
    """Clip to ``max_height`` rows, scrolled just far enough to show the cursor."""
    if rendered.height <= max_height:
        return rendered
    cursor = rendered.cursor_row
    top = 0 if cursor is None else max(cursor - max_height + 1, 0)
    top = min(top, rendered.height - max_height)
    return RenderedLines(rendered.rows[top : top + max_height])


def render_preview(
    lines: Sequence[str],
    cursor_row: int,
    user_name: str,
    users: Collection[str],
    width: int,
    max_height: int | None = None,
    theme: ThemeColors | None = None,
) -> RenderedLines:
    """Render the live preview of the editor contents.

    The sentinel goes at the end of the cursor's line; the rendered row that
    still holds it is the one a viewport must keep visible.
    """
    text = "\n".join(insert_cursor_at_eol(list(lines), cursor_row))
    preview = preview_from_input(user_name, text)
    if preview is None:
        rendered = text_lines(NO_PREVIEW)
    else:
        rendered = render_message(preview, True, users, width, theme)
    logger.debug("preview rendered to %d rows, cursor row %s", rendered.height, rendered.cursor_row)
    if max_height is None:
        return rendered
    return preview_window(rendered, max_height)
