"""Render a markdown-it syntax tree back to markdown text."""

from __future__ import annotations

import re
from typing import List, Optional, Sequence

from markdown_it.tree import SyntaxTreeNode

from .parser import LIST_TYPES, plain_text

_BACKSLASH = re.compile(r"\\(?=[!-/:-@\[-`{-~]|$)")
_ENTITY_LIKE = re.compile(r"&(?=#?[0-9A-Za-z]+;)")
_HTML_LIKE = re.compile(r"<(?=[A-Za-z/!?])")
_BACKTICK_RUN = re.compile(r"`+")
_LINE_START_ORDERED = re.compile(r"^(\d{1,9})([.)])(?=\s|$)")
_LINE_START_HEADING = re.compile(r"^#{1,6}(?=\s|$)")
_LINE_START_MARKER = re.compile(r"^[-+](?=\s|$)|^[-=]+\s*$")
_ALIGN_RULES = {"left": ":---", "center": ":---:", "right": "---:"}


class MarkdownRenderer:
    """Turns a :class:`SyntaxTreeNode` tree back into markdown.

    Structure follows the tree; list markers come from the source tokens so
    a rewritten list keeps its ``*``/``-``/``+`` style. Inline text is
    escaped only where a character could otherwise start markup.
    """

    def render(self, root: SyntaxTreeNode) -> str:
        body = self._render_blocks(root.children, tight=False)
        return f"{body}\n" if body else ""

    # -- blocks -----------------------------------------------------------

    def _render_blocks(self, nodes: Sequence[SyntaxTreeNode], *, tight: bool) -> str:
        rendered = [self._render_block(node) for node in nodes]
        separator = "\n" if tight else "\n\n"
        return separator.join(part for part in rendered if part is not None)

    def _render_block(self, node: SyntaxTreeNode) -> Optional[str]:
        kind = node.type
        if kind == "paragraph":
            return self._render_container_inline(node)
        if kind == "heading":
            level = int(node.tag[1:]) if node.tag[1:].isdigit() else 1
            text = self._render_container_inline(node)
            return f"{'#' * level} {text}" if text else "#" * level
        if kind in LIST_TYPES:
            return self._render_list(node)
        if kind == "blockquote":
            inner = self._render_blocks(node.children, tight=False)
            return "\n".join(f"> {line}" if line else ">" for line in inner.split("\n"))
        if kind == "fence":
            markup = node.markup or "```"
            content = node.content
            if content and not content.endswith("\n"):
                content += "\n"
            return f"{markup}{node.info}\n{content}{markup}"
        if kind == "code_block":
            lines = node.content.rstrip("\n").split("\n")
            return "\n".join(f"    {line}" if line else "" for line in lines)
        if kind == "html_block":
            return node.content.rstrip("\n")
        if kind == "hr":
            return (node.markup[:1] or "-") * 3
        if kind == "table":
            return self._render_table(node)
        if kind == "inline":
            return self._render_inline(node.children)
        if node.children:
            return self._render_blocks(node.children, tight=False)
        return node.content or None

    def _render_container_inline(self, node: SyntaxTreeNode) -> str:
        return "".join(
            self._render_inline(child.children) for child in node.children if child.type == "inline"
        )

    def _render_list(self, node: SyntaxTreeNode) -> str:
        tight = not any(
            child.type == "paragraph" and not child.hidden
            for item in node.children
            for child in item.children
        )
        ordered = node.type == "ordered_list"
        start = _as_int(node.attrs.get("start"), 1) if ordered else 1
        items: List[str] = []
        for index, item in enumerate(node.children):
            if ordered:
                marker = f"{start + index}{item.markup or '.'}"
            else:
                marker = item.markup or "-"
            body = self._render_blocks(item.children, tight=tight)
            items.append(_indent_item(marker, body))
        return ("\n" if tight else "\n\n").join(items)

    def _render_table(self, node: SyntaxTreeNode) -> str:
        header: List[str] = []
        aligns: List[str] = []
        body: List[List[str]] = []
        for section in node.children:
            for row in section.children:
                cells = [
                    self._render_container_inline(cell).replace("|", "\\|") for cell in row.children
                ]
                if section.type == "thead":
                    header = cells
                    aligns = [_cell_alignment(cell) for cell in row.children]
                else:
                    body.append(cells)
        lines = [_table_row(header), _table_row([_ALIGN_RULES.get(a, "---") for a in aligns])]
        lines.extend(_table_row(cells) for cells in body)
        return "\n".join(lines)

    # -- inline -----------------------------------------------------------

    def _render_inline(self, nodes: Sequence[SyntaxTreeNode], *, line_start: bool = True) -> str:
        parts: List[str] = []
        at_line_start = line_start
        for index, node in enumerate(nodes):
            following = nodes[index + 1] if index + 1 < len(nodes) else None
            parts.append(self._render_inline_node(node, at_line_start, following))
            at_line_start = node.type in {"softbreak", "hardbreak"}
        return "".join(parts)

    def _render_inline_node(
        self,
        node: SyntaxTreeNode,
        line_start: bool,
        following: Optional[SyntaxTreeNode],
    ) -> str:
        kind = node.type
        if kind == "text":
            text = escape_text(node.content, line_start=line_start)
            if text.endswith("!") and following is not None and following.type == "link":
                text = text[:-1] + "\\!"
            return text
        if kind == "softbreak":
            return "\n"
        if kind == "hardbreak":
            return "\\\n"
        if kind == "code_inline":
            return _code_span(node.content, node.markup)
        if kind == "html_inline":
            return node.content
        if kind in {"em", "strong", "s"}:
            markup = node.markup or {"em": "*", "strong": "**", "s": "~~"}[kind]
            inner = self._render_inline(node.children, line_start=False)
            return f"{markup}{inner}{markup}"
        if kind == "link":
            return self._render_link(node)
        if kind == "image":
            alt = self._render_inline(node.children, line_start=False)
            src = str(node.attrs.get("src", ""))
            return f"![{alt}]({_destination(src)}{_title(node.attrs.get('title'))})"
        if node.children:
            return self._render_inline(node.children, line_start=False)
        return node.content

    def _render_link(self, node: SyntaxTreeNode) -> str:
        href = str(node.attrs.get("href", ""))
        if node.markup == "linkify":
            return plain_text(node)
        if node.markup == "autolink":
            return f"<{plain_text(node)}>"
        text = self._render_inline(node.children, line_start=False)
        return f"[{text}]({_destination(href)}{_title(node.attrs.get('title'))})"


def escape_text(text: str, *, line_start: bool = False) -> str:
    """Escape characters in plain text that would otherwise be read as markup."""
    text = _BACKSLASH.sub(r"\\\\", text)
    text = text.replace("[", "\\[").replace("]", "\\]").replace("`", "\\`")
    text = _HTML_LIKE.sub(r"\\<", text)
    text = _ENTITY_LIKE.sub(r"\\&", text)
    text = text.replace("~~", "\\~\\~")
    text = _escape_emphasis(text)
    if line_start:
        text = _escape_line_start(text)
    return text


def _escape_emphasis(text: str) -> str:
    out: List[str] = []
    for index, char in enumerate(text):
        if char in "*_":
            before = text[index - 1] if index > 0 else ""
            after = text[index + 1] if index + 1 < len(text) else ""
            spaced = before.isspace() and after.isspace()
            intraword = char == "_" and before.isalnum() and after.isalnum()
            if not (spaced or intraword):
                out.append("\\")
        out.append(char)
    return "".join(out)


def _escape_line_start(text: str) -> str:
    if _LINE_START_HEADING.match(text) or text.startswith(">"):
        return "\\" + text
    if _LINE_START_MARKER.match(text):
        return "\\" + text
    match = _LINE_START_ORDERED.match(text)
    if match:
        return f"{match.group(1)}\\{match.group(2)}{text[match.end():]}"
    return text


def _code_span(content: str, markup: str) -> str:
    runs = {len(run) for run in _BACKTICK_RUN.findall(content)}
    fence = markup or "`"
    if len(fence) in runs:
        fence = "`" * (max(runs) + 1)
    if content.startswith("`") or content.endswith("`") or (
        content.startswith(" ") and content.endswith(" ") and content.strip()
    ):
        content = f" {content} "
    return f"{fence}{content}{fence}"


def _destination(url: str) -> str:
    if not url or re.search(r"[\s<>]", url) or url.count("(") != url.count(")"):
        return "<" + url.replace("<", "\\<").replace(">", "\\>") + ">"
    return url


def _title(title: object) -> str:
    if not title:
        return ""
    escaped = str(title).replace("\\", "\\\\").replace('"', '\\"')
    return f' "{escaped}"'


def _indent_item(marker: str, body: str) -> str:
    if not body:
        return marker
    padding = " " * (len(marker) + 1)
    lines = body.split("\n")
    rendered = [f"{marker} {lines[0]}" if lines[0] else marker]
    rendered.extend(f"{padding}{line}" if line else "" for line in lines[1:])
    return "\n".join(rendered)


def _cell_alignment(cell: SyntaxTreeNode) -> str:
    style = str(cell.attrs.get("style", ""))
    return style.split(":", 1)[1].strip() if style.startswith("text-align:") else ""


def _table_row(cells: Sequence[str]) -> str:
    return "| " + " | ".join(cells) + " |"


def _as_int(value: object, default: int) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


def render_markdown(root: SyntaxTreeNode) -> str:
    return MarkdownRenderer().render(root)


def match_trailing_newline(content: str, original: str) -> str:
    """Force ``content`` to follow the trailing-newline convention of ``original``.

    An empty original counts as newline-terminated.
    """
    wants_newline = original.endswith("\n") or original == ""
    body = content.rstrip("\n")
    return f"{body}\n" if wants_newline else body


def serialize(root: SyntaxTreeNode, original: str) -> str:
    return match_trailing_newline(render_markdown(root), original)


__all__ = [
    "MarkdownRenderer",
    "escape_text",
    "match_trailing_newline",
    "render_markdown",
    "serialize",
]
