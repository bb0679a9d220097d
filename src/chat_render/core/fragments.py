"""Fragment builder: flattens inline trees into a linear, wrappable sequence.

Markdown nests emphasis and links, but word wrapping wants a flat run of
atoms it can break between. Each Fragment is one atom (word, space, break,
link text, raw html) carrying exactly one style tag; nesting is resolved by
threading the current style down the recursion, so the outer style resumes
automatically once a sub-tree is done.

// [LAW:dataflow-not-control-flow] Style is a parameter, never shared mutable state.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from rich.cells import cell_len

from chat_render.core.cursor import remove_cursor
from chat_render.core.document import (
    Code,
    Emph,
    Entity,
    Image,
    Inline,
    LineBreak,
    Link,
    RawHtml,
    SoftBreak,
    Space,
    Str,
    Strong,
)

IMAGE_PLACEHOLDER = "[img]"


class TextKind(Enum):
    STR = "str"
    SPACE = "space"
    SOFT_BREAK = "soft_break"
    LINE_BREAK = "line_break"
    LINK = "link"
    RAW_HTML = "raw_html"


class FragmentStyle(Enum):
    NORMAL = "normal"
    EMPH = "emph"
    STRONG = "strong"
    CODE = "code"
    USER = "user"
    LINK = "link"
    EMOJI = "emoji"


BREAK_KINDS = frozenset({TextKind.SOFT_BREAK, TextKind.LINE_BREAK})


@dataclass(frozen=True)
class Fragment:
    kind: TextKind
    text: str = ""
    style: FragmentStyle = FragmentStyle.NORMAL

    @property
    def is_break(self) -> bool:
        return self.kind in BREAK_KINDS


def fragment_text(frag: Fragment) -> str:
    """Text the fragment contributes to a rendered run (sentinel kept)."""
    if frag.kind is TextKind.SPACE:
        return " "
    if frag.is_break:
        return ""
    return frag.text


def fragment_width(frag: Fragment) -> int:
    """Display cells occupied by the fragment; the cursor sentinel is free."""
    if frag.kind is TextKind.SPACE:
        return 1
    if frag.is_break:
        return 0
    return cell_len(remove_cursor(frag.text))


def build_fragments(inlines: Iterable[Inline]) -> list[Fragment]:
    return list(_walk(inlines, FragmentStyle.NORMAL))


def _walk(inlines: Iterable[Inline], style: FragmentStyle) -> Iterator[Fragment]:
    for node in inlines:
        match node:
            case Str(text=text):
                yield Fragment(TextKind.STR, text, style)
            case Space():
                yield Fragment(TextKind.SPACE)
            case SoftBreak():
                yield Fragment(TextKind.SOFT_BREAK)
            case LineBreak():
                yield Fragment(TextKind.LINE_BREAK)
            case Link(label=label, url=url):
                if len(label) == 1 and isinstance(label[0], Str) and label[0].text == url:
                    yield Fragment(TextKind.LINK, url, FragmentStyle.LINK)
                else:
                    yield from _walk(label, FragmentStyle.LINK)
            case RawHtml(text=text):
                yield Fragment(TextKind.RAW_HTML, text, style)
            case Code(text=text):
                yield from _code_fragments(text)
            case Emph(inlines=inner):
                yield from _walk(inner, FragmentStyle.EMPH)
            case Strong(inlines=inner):
                yield from _walk(inner, FragmentStyle.STRONG)
            case Image():
                yield Fragment(TextKind.STR, IMAGE_PLACEHOLDER, FragmentStyle.LINK)
            case Entity(text=text):
                # Entities render in link style.
                yield Fragment(TextKind.STR, text, FragmentStyle.LINK)
            case _:
                continue


def _code_fragments(text: str) -> list[Fragment]:
    """Split inline code on single spaces so it can wrap between words.

    Every piece is preceded by a space; empty pieces (runs of spaces) become
    a bare space. The space in front of the very first piece is an artifact
    of the split and is dropped.
    """
    out: list[Fragment] = []
    for word in text.split(" "):
        out.append(Fragment(TextKind.SPACE, "", FragmentStyle.CODE))
        if word:
            out.append(Fragment(TextKind.STR, word, FragmentStyle.CODE))
    if out and out[0].kind is TextKind.SPACE:
        out.pop(0)
    return out
