"""Markdown text → document model, via markdown-it-py.

markdown-it-py is the commonmark parser Rich's own Markdown renderer sits
on; here its syntax tree is mapped onto the closed Block/Inline types. Bare
"scheme://" URLs in running text are linkified (linkify-it-py) and come out
as Links labelled with the URL itself.

Text tokens are split the way a word-at-a-time inline parser would emit
them: word characters form one Str, every other non-space character is its
own Str, whitespace runs collapse to a single Space. The reclassifier depends
on that granularity to cut "@alice!" after the mention.
"""

from __future__ import annotations

import logging
import re

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from chat_render.core.cursor import CURSOR_SENTINEL
from chat_render.core.document import (
    Block,
    Blockquote,
    Code,
    CodeBlock,
    Emph,
    Entity,
    Header,
    HorizontalRule,
    HtmlBlock,
    Image,
    Inline,
    LineBreak,
    Link,
    ListBlock,
    ListKind,
    Paragraph,
    RawHtml,
    SoftBreak,
    Space,
    Str,
    Strong,
)

logger = logging.getLogger(__name__)

# The sentinel counts as a word character so it stays glued to its token.
_TOKEN_RE = re.compile(r"[\w" + CURSOR_SENTINEL + r"]+|\s+|.", re.DOTALL)

# text_join would fold entities back into plain text. Only bare URLs with a
# scheme are linkified; "example.com" and email addresses stay plain text.
_MD = MarkdownIt("commonmark", {"linkify": True}).enable("linkify").disable("text_join")
_MD.linkify.set({"fuzzy_link": False, "fuzzy_email": False, "fuzzy_ip": False})


def parse_markdown(text: str) -> tuple[Block, ...]:
    root = SyntaxTreeNode(_MD.parse(text))
    return _blocks(root.children)


def split_text(text: str) -> tuple[Inline, ...]:
    out: list[Inline] = []
    for tok in _TOKEN_RE.findall(text):
        if tok.isspace():
            out.append(Space())
        else:
            out.append(Str(tok))
    return tuple(out)


# ─── Blocks ──────────────────────────────────────────────────────────────────


def _blocks(nodes) -> tuple[Block, ...]:
    out: list[Block] = []
    for node in nodes:
        block = _block(node)
        if block is not None:
            out.append(block)
    return tuple(out)


def _block(node: SyntaxTreeNode) -> Block | None:
    kind = node.type
    if kind == "paragraph":
        return Paragraph(_inline_container(node))
    if kind == "heading":
        return Header(int(node.tag[1:]), _inline_container(node))
    if kind == "blockquote":
        return Blockquote(_blocks(node.children))
    if kind in ("bullet_list", "ordered_list"):
        items = tuple(_blocks(item.children) for item in node.children)
        if kind == "bullet_list":
            return ListBlock(ListKind.BULLET, items)
        start = node.attrs.get("start", 1)
        return ListBlock(ListKind.NUMBERED, items, int(start))
    if kind in ("fence", "code_block"):
        return CodeBlock(node.content.removesuffix("\n"), node.info.strip())
    if kind == "html_block":
        return HtmlBlock(node.content.removesuffix("\n"))
    if kind == "hr":
        return HorizontalRule()
    logger.debug("dropping unsupported block node %r", kind)
    return None


def _inline_container(node: SyntaxTreeNode) -> tuple[Inline, ...]:
    if not node.children:
        return ()
    return _inlines(node.children[0].children)


# ─── Inlines ─────────────────────────────────────────────────────────────────


def _inlines(nodes) -> tuple[Inline, ...]:
    out: list[Inline] = []
    for node in nodes:
        out.extend(_inline(node))
    return tuple(out)


def _inline(node: SyntaxTreeNode) -> tuple[Inline, ...]:
    kind = node.type
    if kind == "text":
        return split_text(node.content)
    if kind == "text_special":
        if node.info == "entity":
            return (Entity(node.content),)
        return (Str(node.content),)
    if kind == "softbreak":
        return (SoftBreak(),)
    if kind == "hardbreak":
        return (LineBreak(),)
    if kind == "em":
        return (Emph(_inlines(node.children)),)
    if kind == "strong":
        return (Strong(_inlines(node.children)),)
    if kind == "code_inline":
        return (Code(node.content),)
    if kind == "link":
        url = str(node.attrs.get("href", ""))
        title = str(node.attrs.get("title", ""))
        if node.markup in ("autolink", "linkify"):
            label: tuple[Inline, ...] = (Str("".join(c.content for c in node.children)),)
        else:
            label = _inlines(node.children)
        return (Link(label, url, title),)
    if kind == "image":
        url = str(node.attrs.get("src", ""))
        title = str(node.attrs.get("title", ""))
        return (Image(_inlines(node.children), url, title),)
    if kind == "html_inline":
        return (RawHtml(node.content),)
    logger.debug("dropping unsupported inline node %r", kind)
    return ()
