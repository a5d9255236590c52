"""Markdown parsing into a mutable syntax tree."""

from __future__ import annotations

from typing import Iterator

from markdown_it import MarkdownIt
from markdown_it.token import Token
from markdown_it.tree import SyntaxTreeNode

LIST_TYPES = frozenset({"bullet_list", "ordered_list"})


def create_parser() -> MarkdownIt:
    """CommonMark plus GFM tables, strikethrough and bare URL autolinks."""
    return MarkdownIt("commonmark", {"linkify": True}).enable(
        ["table", "strikethrough", "linkify"]
    )


def parse_markdown(text: str, parser: MarkdownIt | None = None) -> SyntaxTreeNode:
    md = parser or create_parser()
    return SyntaxTreeNode(md.parse(text))


def iter_links(node: SyntaxTreeNode) -> Iterator[SyntaxTreeNode]:
    """Yield link nodes below ``node`` in document order.

    Code spans and code blocks never produce link nodes, so links written
    inside them are not visited.
    """
    for child in node.walk():
        if child.type == "link":
            yield child


def iter_lists(node: SyntaxTreeNode) -> Iterator[SyntaxTreeNode]:
    for child in node.walk():
        if child.type in LIST_TYPES:
            yield child


def link_href(node: SyntaxTreeNode) -> str:
    href = node.attrs.get("href", "")
    return href if isinstance(href, str) else str(href)


def make_text_node(content: str) -> SyntaxTreeNode:
    """Create a detached inline text node."""
    return SyntaxTreeNode([Token("text", "", 0, content=content)], create_root=False)


def plain_text(node: SyntaxTreeNode) -> str:
    """Concatenate the visible text of ``node`` and its descendants."""
    if node.type in {"text", "code_inline", "html_inline"}:
        return node.content
    if node.type in {"softbreak", "hardbreak"}:
        return " "
    if node.type == "image":
        return "".join(plain_text(child) for child in node.children)
    parts = [plain_text(child) for child in node.children]
    return "".join(parts)


__all__ = [
    "LIST_TYPES",
    "create_parser",
    "iter_links",
    "iter_lists",
    "link_href",
    "make_text_node",
    "parse_markdown",
    "plain_text",
]
