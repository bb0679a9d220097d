"""Semantic reclassification: username and emoji detection over fragments.

Parsers split text at punctuation, so "@alice!" arrives as three STR
fragments. This pass glues adjacent same-style STR fragments back together
and retags the glued run when it names a known user or looks like emoji
shorthand. Gluing stops as soon as the accumulated text names a user, which
is what keeps the "!" out of the mention. Fragments already tagged USER or
EMOJI are never glued again, so a second pass leaves the output unchanged.

Runs before wrapping: merged runs are wider atoms and change where lines
break.
"""

from __future__ import annotations

from collections.abc import Collection, Sequence

from rich.cells import cell_len

from chat_render.core.cursor import remove_cursor
from chat_render.core.fragments import Fragment, FragmentStyle, TextKind

UserSet = Collection[str]

_RETAGGED = frozenset({FragmentStyle.USER, FragmentStyle.EMOJI})


def names_user(text: str, users: UserSet) -> bool:
    """True for ``name`` or ``@name`` where name is a known user."""
    return text in users or (text.startswith("@") and text[1:] in users)


def is_emoji_shorthand(text: str) -> bool:
    return text.startswith(":") and text.endswith(":") and cell_len(text) > 2


def classify(text: str, style: FragmentStyle, users: UserSet) -> FragmentStyle:
    """Style for an accumulated STR run; the cursor sentinel is ignored."""
    bare = remove_cursor(text)
    if is_emoji_shorthand(bare):
        return FragmentStyle.EMOJI
    if names_user(bare, users):
        return FragmentStyle.USER
    return style


def reclassify(fragments: Sequence[Fragment], users: UserSet) -> list[Fragment]:
    out: list[Fragment] = []
    acc: list[str] = []
    acc_style = FragmentStyle.NORMAL

    def flush() -> None:
        if acc:
            text = "".join(acc)
            out.append(Fragment(TextKind.STR, text, classify(text, acc_style, users)))
            acc.clear()

    for frag in fragments:
        if frag.kind is not TextKind.STR or frag.style in _RETAGGED:
            flush()
            out.append(frag)
            continue
        if acc and (frag.style is not acc_style or names_user(remove_cursor("".join(acc)), users)):
            flush()
        if not acc:
            acc_style = frag.style
        acc.append(frag.text)
    flush()
    return out
