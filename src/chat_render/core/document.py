"""Document model: parsed rich text as immutable block/inline trees.

The node kinds are closed: a commonmark parser produces exactly these, and
every consumer (fragment builder, assembler, URL extraction) dispatches over
them with ``match``. Nodes are frozen so one tree can be rendered repeatedly
(every repaint) without defensive copies.

// [LAW:one-source-of-truth] THE representation of parsed message text.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


# ─── Inlines ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Str:
    text: str


@dataclass(frozen=True)
class Space:
    pass


@dataclass(frozen=True)
class SoftBreak:
    pass


@dataclass(frozen=True)
class LineBreak:
    pass


@dataclass(frozen=True)
class Emph:
    inlines: tuple[Inline, ...]


@dataclass(frozen=True)
class Strong:
    inlines: tuple[Inline, ...]


@dataclass(frozen=True)
class Code:
    text: str


@dataclass(frozen=True)
class Link:
    label: tuple[Inline, ...]
    url: str
    title: str = ""


@dataclass(frozen=True)
class Image:
    alt: tuple[Inline, ...]
    url: str
    title: str = ""


@dataclass(frozen=True)
class Entity:
    text: str


@dataclass(frozen=True)
class RawHtml:
    text: str


Inline = Union[
    Str, Space, SoftBreak, LineBreak, Emph, Strong, Code, Link, Image, Entity, RawHtml
]


# ─── Blocks ──────────────────────────────────────────────────────────────────


class ListKind(Enum):
    BULLET = "bullet"
    NUMBERED = "numbered"


@dataclass(frozen=True)
class Paragraph:
    inlines: tuple[Inline, ...]


@dataclass(frozen=True)
class Header:
    level: int  # 1..6
    inlines: tuple[Inline, ...]


@dataclass(frozen=True)
class Blockquote:
    blocks: tuple[Block, ...]


@dataclass(frozen=True)
class ListBlock:
    """Bulleted or numbered list. ``start`` is only meaningful for NUMBERED."""

    kind: ListKind
    items: tuple[tuple[Block, ...], ...]
    start: int = 1


@dataclass(frozen=True)
class CodeBlock:
    text: str
    info: str = ""


@dataclass(frozen=True)
class HtmlBlock:
    text: str


@dataclass(frozen=True)
class HorizontalRule:
    pass


Block = Union[Paragraph, Header, Blockquote, ListBlock, CodeBlock, HtmlBlock, HorizontalRule]


def para(*inlines: Inline) -> Paragraph:
    """Shorthand used by hosts that synthesize messages (transitions, errors)."""
    return Paragraph(tuple(inlines))


def words(text: str) -> tuple[Inline, ...]:
    """Split plain text into Str/Space inlines on single spaces."""
    out: list[Inline] = []
    for i, word in enumerate(text.split(" ")):
        if i:
            out.append(Space())
        if word:
            out.append(Str(word))
    return tuple(out)
