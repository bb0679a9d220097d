"""Widget assembly: wrapped fragment lines to styled rows.

Turns the document model into RenderedLines: rows of StyledRun, each run a
(text, rich Style) pair ready for the host to paint. Inline content goes
through build → reclassify → wrap → gather; block constructs are composed
from those pieces with a handful of layout combinators (vstack, beside,
pad_left, default/forced styles).

The cursor sentinel is kept in run text all the way through. It is removed
only when runs become Segments (to_strips / plain_lines), at which point the
row that held it is reported as ``cursor_row``.

// [LAW:dataflow-not-control-flow] Every renderer is a pure function of
// (blocks, users, width, theme); nothing is cached across calls.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass, field

from rich.cells import cell_len, get_character_cell_size
from rich.segment import Segment
from rich.style import Style
from textual.strip import Strip

from chat_render.core.cursor import CURSOR_SENTINEL, has_cursor, remove_cursor
from chat_render.core.document import (
    Block,
    Blockquote,
    CodeBlock,
    Header,
    HorizontalRule,
    HtmlBlock,
    Inline,
    ListBlock,
    ListKind,
    Paragraph,
)
from chat_render.core.fragments import Fragment, FragmentStyle, build_fragments, fragment_text
from chat_render.core.markdown_parse import parse_markdown
from chat_render.core.wrap import split_lines
from chat_render.tui.theme import ThemeColors, get_theme_colors

BLOCKQUOTE_INDENT = 4
BULLET_MARKER = "• "
CODE_GUTTER = " | "
HRULE_CHAR = "*"
ELLIPSIS = "..."


# ─── Output model ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class StyledRun:
    """A maximal same-style span of one row. ``text`` may hold the sentinel."""

    text: str
    style: Style = field(default_factory=Style.null)

    @property
    def display_text(self) -> str:
        return remove_cursor(self.text)

    @property
    def visible(self) -> bool:
        """True when this run must stay inside a scrolling viewport."""
        return has_cursor(self.text)

    @property
    def cell_width(self) -> int:
        return cell_len(self.display_text)


Row = tuple[StyledRun, ...]


def row_width(row: Row) -> int:
    return sum(run.cell_width for run in row)


@dataclass(frozen=True)
class RenderedLines:
    rows: tuple[Row, ...] = ()

    @property
    def height(self) -> int:
        return len(self.rows)

    @property
    def width(self) -> int:
        return max((row_width(row) for row in self.rows), default=0)

    @property
    def cursor_row(self) -> int | None:
        for y, row in enumerate(self.rows):
            if any(run.visible for run in row):
                return y
        return None

    def plain_lines(self) -> list[str]:
        return ["".join(run.display_text for run in row) for row in self.rows]

    def to_strips(self, width: int | None = None) -> list[Strip]:
        """Paint rows as Textual strips, padded or cropped to ``width``."""
        strips = []
        for row in self.rows:
            strip = Strip([Segment(run.display_text, run.style) for run in row if run.text])
            if width is not None:
                strip = strip.adjust_cell_length(max(width, 0))
            strips.append(strip)
        return strips


# ─── Combinators ─────────────────────────────────────────────────────────────


def vstack(parts: Iterable[RenderedLines]) -> RenderedLines:
    return RenderedLines(tuple(row for part in parts for row in part.rows))


def text_lines(text: str, style: Style | None = None) -> RenderedLines:
    """Literal text, one row per newline-separated line, no wrapping."""
    run_style = style or Style.null()
    return RenderedLines(tuple((StyledRun(line, run_style),) for line in text.split("\n")))


def beside(prefix: Row, body: RenderedLines) -> RenderedLines:
    """Place ``prefix`` left of the first body row; indent the rest under it."""
    if not body.rows:
        return RenderedLines((prefix,))
    indent = (StyledRun(" " * row_width(prefix)),)
    rows = [prefix + body.rows[0]]
    rows.extend(indent + row for row in body.rows[1:])
    return RenderedLines(tuple(rows))


def pad_left(columns: int, body: RenderedLines) -> RenderedLines:
    pad = (StyledRun(" " * columns),)
    return RenderedLines(tuple(pad + row for row in body.rows))


def with_default_style(style: Style, body: RenderedLines) -> RenderedLines:
    """Layer ``style`` under every run; a run's own attributes win."""
    return RenderedLines(
        tuple(tuple(StyledRun(run.text, style + run.style) for run in row) for row in body.rows)
    )


def force_style(style: Style, body: RenderedLines) -> RenderedLines:
    """Replace every run's style outright."""
    return RenderedLines(
        tuple(tuple(StyledRun(run.text, style) for run in row) for row in body.rows)
    )


def _crop_text(text: str, cells: int) -> tuple[str, int]:
    out: list[str] = []
    used = 0
    for ch in text:
        size = 0 if ch == CURSOR_SENTINEL else get_character_cell_size(ch)
        if used + size > cells:
            break
        out.append(ch)
        used += size
    return "".join(out), used


def crop_row(row: Row, cells: int) -> Row:
    out: list[StyledRun] = []
    remaining = max(cells, 0)
    for run in row:
        text, used = _crop_text(run.text, remaining)
        if text:
            out.append(StyledRun(text, run.style))
        remaining -= used
        if used < run.cell_width:
            break
    return tuple(out)


def truncate_ellipsis(body: RenderedLines, width: int) -> RenderedLines:
    """Force ``body`` onto one row, ending in an ellipsis when it overflows.

    Overflow means more than one row, or a row that reaches ``width``. The
    kept row is cropped to ``width`` minus the ellipsis so the result never
    exceeds ``width``.
    """
    if not body.rows:
        return body
    if body.height == 1 and body.width < width:
        return body
    first = crop_row(body.rows[0], width - cell_len(ELLIPSIS))
    return RenderedLines((first + (StyledRun(ELLIPSIS),),))


# ─── Inline and block rendering ──────────────────────────────────────────────


@dataclass(frozen=True)
class _Ctx:
    users: Collection[str]
    theme: ThemeColors


def gather_runs(line: Sequence[Fragment], theme: ThemeColors) -> Row:
    """Merge adjacent same-style fragments of one wrapped line into runs."""
    runs: list[StyledRun] = []
    i = 0
    while i < len(line):
        style = line[i].style
        parts = []
        while i < len(line) and line[i].style is style:
            parts.append(fragment_text(line[i]))
            i += 1
        text = "".join(parts)
        runs.append(StyledRun(text, _resolve(style, text, theme)))
    return tuple(runs)


def _resolve(tag: FragmentStyle, text: str, theme: ThemeColors) -> Style:
    if tag is FragmentStyle.USER:
        return theme.username_style(remove_cursor(text).removeprefix("@"))
    return theme.style_for(tag)


def _inline_rows(inlines: Sequence[Inline], width: int, ctx: _Ctx) -> RenderedLines:
    fragments = build_fragments(inlines)
    if not fragments:
        return RenderedLines()
    lines = split_lines(fragments, width, ctx.users)
    return RenderedLines(tuple(gather_runs(line, ctx.theme) for line in lines))


def _block_rows(block: Block, width: int, ctx: _Ctx) -> RenderedLines:
    match block:
        case Paragraph(inlines=inlines):
            return _inline_rows(inlines, width, ctx)
        case Header(level=level, inlines=inlines):
            prefix = "#" * level + " "
            body = _inline_rows(inlines, width - cell_len(prefix), ctx)
            return with_default_style(
                Style.parse(ctx.theme.header_style), beside((StyledRun(prefix),), body)
            )
        case Blockquote(blocks=blocks):
            return pad_left(BLOCKQUOTE_INDENT, _blocks_rows(blocks, width - BLOCKQUOTE_INDENT, ctx))
        case ListBlock(kind=kind, items=items, start=start):
            return vstack(
                beside((StyledRun(marker),), _blocks_rows(item, width - cell_len(marker), ctx))
                for marker, item in zip(list_markers(kind, start, len(items)), items)
            )
        case CodeBlock(text=text):
            code = Style.parse(ctx.theme.code_style)
            lines = text.split("\n") if text else []
            return RenderedLines(
                tuple((StyledRun(CODE_GUTTER, code), StyledRun(line, code)) for line in lines)
            )
        case HtmlBlock(text=text):
            return text_lines(text)
        case HorizontalRule():
            return RenderedLines(((StyledRun(HRULE_CHAR * max(width, 0)),),))
        case _:
            return RenderedLines()


def _blocks_rows(blocks: Iterable[Block], width: int, ctx: _Ctx) -> RenderedLines:
    return vstack(_block_rows(block, width, ctx) for block in blocks)


def list_markers(kind: ListKind, start: int, count: int) -> list[str]:
    if kind is ListKind.BULLET:
        return [BULLET_MARKER] * count
    return [f"{n}. " for n in range(start, start + count)]


def render_inlines(
    inlines: Sequence[Inline],
    users: Collection[str],
    width: int,
    theme: ThemeColors | None = None,
) -> RenderedLines:
    return _inline_rows(inlines, width, _Ctx(users, theme or get_theme_colors()))


def render_blocks(
    blocks: Iterable[Block],
    users: Collection[str],
    width: int,
    theme: ThemeColors | None = None,
) -> RenderedLines:
    """Render a document top to bottom at ``width`` columns."""
    return _blocks_rows(blocks, width, _Ctx(users, theme or get_theme_colors()))


def render_text(text: str, width: int, theme: ThemeColors | None = None) -> RenderedLines:
    """Parse and render markdown without username highlighting."""
    return render_blocks(parse_markdown(text), frozenset(), width, theme)
