"""URL extraction for the "open link" picker. Independent of layout."""

from __future__ import annotations

from collections.abc import Iterable

from chat_render.core.document import (
    Block,
    Blockquote,
    Code,
    Emph,
    Entity,
    Header,
    Image,
    Inline,
    LineBreak,
    Link,
    ListBlock,
    Paragraph,
    RawHtml,
    SoftBreak,
    Space,
    Str,
    Strong,
)
from chat_render.core.fragments import IMAGE_PLACEHOLDER


def inlines_to_text(inlines: Iterable[Inline]) -> str:
    """Flatten inlines to plain text; every kind of break becomes one space."""
    return "".join(_inline_text(node) for node in inlines)


def _inline_text(node: Inline) -> str:
    match node:
        case Str(text=text) | Code(text=text) | Entity(text=text) | RawHtml(text=text):
            return text
        case Space() | SoftBreak() | LineBreak():
            return " "
        case Emph(inlines=inner) | Strong(inlines=inner):
            return inlines_to_text(inner)
        case Link(label=label):
            return inlines_to_text(label)
        case Image():
            return IMAGE_PLACEHOLDER
        case _:
            return ""


def block_get_urls(block: Block) -> list[tuple[str, str]]:
    """(url, label) pairs in document order, links nested in labels included."""
    match block:
        case Paragraph(inlines=inlines) | Header(inlines=inlines):
            return _inlines_get_urls(inlines)
        case Blockquote(blocks=blocks):
            return blocks_get_urls(blocks)
        case ListBlock(items=items):
            return [pair for item in items for pair in blocks_get_urls(item)]
        case _:
            return []


def blocks_get_urls(blocks: Iterable[Block]) -> list[tuple[str, str]]:
    return [pair for block in blocks for pair in block_get_urls(block)]


def _inlines_get_urls(inlines: Iterable[Inline]) -> list[tuple[str, str]]:
    out: list[tuple[str, str]] = []
    for node in inlines:
        match node:
            case Emph(inlines=inner) | Strong(inlines=inner):
                out.extend(_inlines_get_urls(inner))
            case Link(label=label, url=url):
                out.append((url, inlines_to_text(label) or url))
                out.extend(_inlines_get_urls(label))
            case Image(alt=alt):
                out.extend(_inlines_get_urls(alt))
    return out
