"""Greedy line wrapping of reclassified fragments.

One pass, O(n) in fragments, state is just (lines, current column):

- a SOFT/LINE break closes the current line, even an empty one;
- a fragment that fits is appended;
- a SPACE that does not fit closes the line and is dropped (spaces are the
  preferred break points and never start a line);
- anything else that does not fit starts a new line on its own (or stays
  put when the current line is still empty). A single fragment wider than
  the target is never split, which is what guarantees progress when the
  width is tiny or non-positive.

Widths come from fragment_width(): east-asian aware cell widths with the
cursor sentinel excluded.
"""

from __future__ import annotations

from collections.abc import Sequence

from chat_render.core.fragments import Fragment, TextKind, fragment_width
from chat_render.core.reclassify import UserSet, reclassify

Line = list[Fragment]


class LayoutInvariantError(RuntimeError):
    """The wrapper reached a state its construction rules out."""


def _append(lines: list[Line], frag: Fragment) -> None:
    if not lines:
        raise LayoutInvariantError("wrap accumulator has no open line")
    lines[-1].append(frag)


def wrap_fragments(fragments: Sequence[Fragment], width: int) -> list[Line]:
    lines: list[Line] = [[]]
    col = 0
    for frag in fragments:
        if frag.is_break:
            lines.append([])
            col = 0
            continue
        size = fragment_width(frag)
        if width - col >= size:
            _append(lines, frag)
            col += size
        elif frag.kind is TextKind.SPACE:
            lines.append([])
            col = 0
        elif not lines[-1]:
            # Already at the start of a line: overflow in place.
            _append(lines, frag)
            col = size
        else:
            lines.append([frag])
            col = size
    return lines


def split_lines(fragments: Sequence[Fragment], width: int, users: UserSet) -> list[Line]:
    """Reclassify then wrap; the order matters because merged runs are wider."""
    return wrap_fragments(reclassify(fragments, users), width)
