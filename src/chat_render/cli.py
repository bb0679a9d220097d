"""CLI entry point for chat-render."""

import argparse
import json
import logging
import shutil
import sys
from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console
from rich.text import Text

import chat_render.io.logging_setup
import chat_render.io.settings
import chat_render.palette
from chat_render.core.markdown_parse import parse_markdown
from chat_render.core.messages import (
    EPOCH,
    Message,
    MessageType,
    NotAReply,
    ParentLoaded,
    insert_transitions,
)
from chat_render.core.urls import blocks_get_urls
from chat_render.tui.app import PreviewApp
from chat_render.tui.assembler import RenderedLines
from chat_render.tui.message_render import render_last_messages, render_message

logger = logging.getLogger(__name__)


def _read_source(path: str | None) -> str:
    if path is None or path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _build_message(args, text: str) -> Message:
    reply = NotAReply()
    if args.reply_to is not None:
        parent = Message(blocks=parse_markdown(_read_source(args.reply_to)), user_name=args.reply_user)
        reply = ParentLoaded(post_id="parent", parent=parent)
    return Message(blocks=parse_markdown(text), user_name=args.user, in_reply_to=reply)


def _entry_str(entry: dict, key: str, default: str | None) -> str | None:
    value = entry.get(key, default)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"history {key} is not a string: {value!r}")
    return value


def _entry_date(entry: dict) -> datetime:
    if "date" not in entry:
        return EPOCH
    return datetime.fromisoformat(_entry_str(entry, "date", None) or "")


def _entry_attachments(entry: dict) -> tuple[str, ...]:
    names = entry.get("attachments", [])
    if not isinstance(names, list) or not all(isinstance(name, str) for name in names):
        raise ValueError(f"history attachments must be a list of strings: {names!r}")
    return tuple(names)


def load_history(raw: str) -> list[Message]:
    """Messages from a JSON array of {user, date, text, type} objects.

    Raises ValueError on malformed input.
    """
    entries = json.loads(raw)
    if not isinstance(entries, list):
        raise ValueError("history must be a JSON array")
    messages = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError(f"history entry is not an object: {entry!r}")
        date = _entry_date(entry)
        if date.tzinfo is None:
            date = date.replace(tzinfo=timezone.utc)
        messages.append(
            Message(
                blocks=parse_markdown(_entry_str(entry, "text", "") or ""),
                user_name=_entry_str(entry, "user", None),
                date=date,
                type=MessageType(entry.get("type", MessageType.NORMAL_POST.value)),
                deleted=bool(entry.get("deleted", False)),
                attachments=_entry_attachments(entry),
            )
        )
    return messages


def _local_tz():
    return datetime.now().astimezone().tzinfo


def _print_rendered(console: Console, rendered: RenderedLines) -> None:
    for strip in rendered.to_strips():
        console.print(Text.assemble(*((seg.text, seg.style) for seg in strip)), soft_wrap=True)


def main():
    parser = argparse.ArgumentParser(description="Render chat markdown as terminal widgets")
    parser.add_argument(
        "file",
        nargs="?",
        default=None,
        help="Markdown message to render (default: stdin)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help="Render width in cells (default: terminal width)",
    )
    parser.add_argument(
        "--users",
        type=str,
        default="",
        help="Comma-separated usernames to highlight as mentions",
    )
    parser.add_argument("--user", type=str, default=None, help="Author shown as the username prefix")
    parser.add_argument(
        "--reply-to",
        type=str,
        default=None,
        help="Markdown file holding the parent message; rendered as a one-line reply header",
    )
    parser.add_argument(
        "--reply-user", type=str, default=None, help="Author of the --reply-to parent"
    )
    parser.add_argument(
        "--urls", action="store_true", default=False, help="List the message's links and exit"
    )
    parser.add_argument(
        "--history",
        action="store_true",
        default=False,
        help="Treat input as a JSON array of {user, date, text, type} and render the channel tail",
    )
    parser.add_argument(
        "--height", type=int, default=None, help="Rows of history to show (default: terminal height)"
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        default=False,
        help="Open the interactive editor with a live preview",
    )
    parser.add_argument(
        "--seed-hue",
        type=float,
        default=None,
        help="Seed hue (0-360) for username colors (default: 190, cyan). Env: CHAT_RENDER_SEED_HUE",
    )
    args = parser.parse_args()

    # [LAW:single-enforcer] Runtime logger configuration is centralized in io.logging_setup.
    log_runtime = chat_render.io.logging_setup.configure(stream=not args.preview)
    logger.debug("logging to %s at %s", log_runtime.file_path, log_runtime.level_name)

    settings = chat_render.io.settings.load_render_settings()
    seed_hue = args.seed_hue if args.seed_hue is not None else settings.seed_hue
    chat_render.palette.init_palette(seed_hue)

    users = frozenset(name.strip() for name in args.users.split(",") if name.strip())

    try:
        if args.preview:
            initial = _read_source(args.file) if args.file else ""
        elif args.history:
            history = load_history(_read_source(args.file))
        else:
            msg = _build_message(args, _read_source(args.file))
    except (OSError, ValueError) as exc:
        logger.error("cannot read input: %s", exc)
        print(f"chat-render: {exc}", file=sys.stderr)
        return 1

    if args.preview:
        PreviewApp(args.user or "me", users, settings, initial).run()
        return 0

    console = Console(highlight=False)
    width = args.width if args.width is not None else shutil.get_terminal_size().columns
    if args.history:
        listing = insert_transitions(history, settings.date_format, _local_tz())
        height = args.height or shutil.get_terminal_size().lines
        rendered = render_last_messages(
            listing, users, width, height, settings.time_format, _local_tz()
        )
        _print_rendered(console, rendered)
        return 0

    if args.urls:
        for url, label in blocks_get_urls(msg.blocks):
            console.print(f"{url}\t{label}", markup=False)
        return 0

    _print_rendered(console, render_message(msg, True, users, width))
    return 0


if __name__ == "__main__":
    sys.exit(main())
