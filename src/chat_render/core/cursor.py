"""Cursor sentinel: marks the live edit cursor inside preview text.

The host appends CURSOR_SENTINEL to the end of the line being edited before
parsing. The character rides through fragment building, reclassification and
wrapping glued to its neighbour; width and username tests always look at the
stripped text. Whichever rendered run still holds it is the run the preview
viewport must keep on screen.

Appending at end-of-line (not at the exact column) keeps the sentinel from
splitting a markdown token mid-word while the cursor moves around.
"""

from __future__ import annotations

# U+E000, first code point of the Private Use Area. Never produced by a
# keyboard or by the chat server.
CURSOR_SENTINEL = "\ue000"


def remove_cursor(text: str) -> str:
    return text.replace(CURSOR_SENTINEL, "")


def has_cursor(text: str) -> bool:
    return CURSOR_SENTINEL in text


def insert_cursor_at_eol(lines: list[str], row: int) -> list[str]:
    """Return a copy of ``lines`` with the sentinel appended to line ``row``.

    ``row`` is clamped into range; an empty editor becomes a single line
    holding only the sentinel.
    """
    if not lines:
        return [CURSOR_SENTINEL]
    row = max(0, min(row, len(lines) - 1))
    out = list(lines)
    out[row] = out[row] + CURSOR_SENTINEL
    return out
