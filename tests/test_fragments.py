"""Tests for chat_render.core.fragments: inline tree flattening."""

from chat_render.core.document import (
    Code,
    Emph,
    Entity,
    Image,
    LineBreak,
    Link,
    RawHtml,
    SoftBreak,
    Space,
    Str,
    Strong,
)
from chat_render.core.fragments import (
    IMAGE_PLACEHOLDER,
    Fragment,
    FragmentStyle,
    TextKind,
    build_fragments,
    fragment_text,
    fragment_width,
)
from chat_render.core.cursor import CURSOR_SENTINEL
from chat_render.core.markdown_parse import parse_markdown


def shape(fragments):
    """(kind, text, style) value triples for compact assertions."""
    return [(f.kind.value, f.text, f.style.value) for f in fragments]


# ─── Test 1: Plain words and breaks ──────────────────────────────────────────


class TestPlain:
    def test_words_and_spaces(self):
        frags = build_fragments([Str("hello"), Space(), Str("world")])
        assert shape(frags) == [
            ("str", "hello", "normal"),
            ("space", "", "normal"),
            ("str", "world", "normal"),
        ]

    def test_breaks_are_kept_in_order(self):
        frags = build_fragments([Str("a"), SoftBreak(), Str("b"), LineBreak(), Str("c")])
        assert [f.kind for f in frags] == [
            TextKind.STR,
            TextKind.SOFT_BREAK,
            TextKind.STR,
            TextKind.LINE_BREAK,
            TextKind.STR,
        ]
        assert frags[1].is_break and frags[3].is_break
        assert not frags[0].is_break

    def test_empty_input(self):
        assert build_fragments([]) == []


# ─── Test 2: Style threading ─────────────────────────────────────────────────


class TestStyleThreading:
    def test_emph_applies_to_subtree_only(self):
        frags = build_fragments([Str("a"), Emph((Str("b"),)), Str("c")])
        assert [f.style for f in frags] == [
            FragmentStyle.NORMAL,
            FragmentStyle.EMPH,
            FragmentStyle.NORMAL,
        ]

    def test_innermost_style_wins(self):
        frags = build_fragments([Strong((Str("x"), Emph((Str("y"),)), Str("z")))])
        assert [f.style for f in frags] == [
            FragmentStyle.STRONG,
            FragmentStyle.EMPH,
            FragmentStyle.STRONG,
        ]

    def test_spaces_inside_emphasis_stay_normal(self):
        frags = build_fragments([Emph((Str("a"), Space(), Str("b")))])
        assert frags[1] == Fragment(TextKind.SPACE)

    def test_raw_html_inherits_current_style(self):
        frags = build_fragments([Strong((RawHtml("<br>"),))])
        assert shape(frags) == [("raw_html", "<br>", "strong")]


# ─── Test 3: Links, images, entities ─────────────────────────────────────────


class TestLinks:
    def test_bare_url_is_one_link_fragment(self):
        url = "https://example.com/a?b=c"
        frags = build_fragments([Link((Str(url),), url)])
        assert shape(frags) == [("link", url, "link")]

    def test_bare_url_in_text_becomes_one_link_fragment(self):
        (block,) = parse_markdown("see https://example.com/a-b now")
        links = [f for f in build_fragments(block.inlines) if f.kind is TextKind.LINK]
        assert links == [Fragment(TextKind.LINK, "https://example.com/a-b", FragmentStyle.LINK)]

    def test_labelled_link_walks_label_in_link_style(self):
        frags = build_fragments([Link((Str("click"), Space(), Str("here")), "https://x.y")])
        assert shape(frags) == [
            ("str", "click", "link"),
            ("space", "", "normal"),
            ("str", "here", "link"),
        ]

    def test_image_is_placeholder(self):
        frags = build_fragments([Image((Str("cat"),), "https://x.y/cat.png")])
        assert shape(frags) == [("str", IMAGE_PLACEHOLDER, "link")]

    def test_entity_text_in_link_style(self):
        frags = build_fragments([Entity("&")])
        assert shape(frags) == [("str", "&", "link")]


# ─── Test 4: Inline code ─────────────────────────────────────────────────────


class TestInlineCode:
    def test_single_word(self):
        assert shape(build_fragments([Code("x")])) == [("str", "x", "code")]

    def test_words_are_separated_by_code_spaces(self):
        frags = build_fragments([Code("a b")])
        assert shape(frags) == [
            ("str", "a", "code"),
            ("space", "", "code"),
            ("str", "b", "code"),
        ]

    def test_space_runs_are_preserved(self):
        frags = build_fragments([Code("a  b")])
        assert [f.kind for f in frags] == [
            TextKind.STR,
            TextKind.SPACE,
            TextKind.SPACE,
            TextKind.STR,
        ]

    def test_leading_space_piece_is_dropped(self):
        frags = build_fragments([Code(" a")])
        assert shape(frags) == [("space", "", "code"), ("str", "a", "code")]


# ─── Test 5: Text and width ──────────────────────────────────────────────────


class TestWidth:
    def test_space_is_one_cell(self):
        assert fragment_width(Fragment(TextKind.SPACE)) == 1
        assert fragment_text(Fragment(TextKind.SPACE)) == " "

    def test_breaks_are_zero_width_and_empty(self):
        for kind in (TextKind.SOFT_BREAK, TextKind.LINE_BREAK):
            assert fragment_width(Fragment(kind)) == 0
            assert fragment_text(Fragment(kind)) == ""

    def test_cursor_is_free(self):
        frag = Fragment(TextKind.STR, "ab" + CURSOR_SENTINEL)
        assert fragment_width(frag) == 2
        assert fragment_text(frag) == "ab" + CURSOR_SENTINEL

    def test_wide_characters_count_two_cells(self):
        assert fragment_width(Fragment(TextKind.STR, "日本")) == 4
