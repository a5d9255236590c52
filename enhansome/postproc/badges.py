"""Inline repository badges inserted after GitHub links."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Tuple

from markdown_it.tree import SyntaxTreeNode

from ..logging import get_logger
from ..markdown.parser import iter_links, link_href, make_text_node
from ..models import RepoInfo

ARCHIVED_MARKER = "⚠️ Archived"
STARS_MARKER = "⭐"

# Matches a badge previously written by BadgeWriter at the start of a text run.
BADGE_PATTERN = re.compile(
    r"^\s*(?:"
    + re.escape(ARCHIVED_MARKER)
    + r"|⭐ [\d,]+ \| 🐛 [\d,]+"
    r"(?: \| 🌐 [^|]+?(?= \| 📅|\s+[-–—:]\s|\s*$))?"
    r"(?: \| 📅 \d{4}-\d{2}-\d{2})?)"
)


def format_badge(info: RepoInfo) -> str:
    """Badge text for ``info``, including its leading space."""
    if info.archived:
        return f" {ARCHIVED_MARKER}"
    parts = [f"⭐ {info.stars:,}", f"🐛 {info.open_issues:,}"]
    if info.language:
        parts.append(f"🌐 {info.language}")
    if info.pushed_date:
        parts.append(f"📅 {info.pushed_date}")
    return " " + " | ".join(parts)


def has_badge(node: SyntaxTreeNode | None) -> bool:
    """True when ``node`` is text that already starts with a badge marker."""
    if node is None or node.type != "text":
        return False
    content = node.content.lstrip()
    return content.startswith(ARCHIVED_MARKER) or content.startswith(STARS_MARKER)


def strip_badge(text: str) -> str:
    return BADGE_PATTERN.sub("", text, count=1)


@dataclass
class BadgeWriter:
    """Adds a metrics badge after every link with fetched metadata.

    Links already followed by a badge are left alone, so running the writer
    over its own output changes nothing.
    """

    def apply(self, root: SyntaxTreeNode, infos: Mapping[str, RepoInfo]) -> int:
        logger = get_logger("badges")
        planned: Dict[int, Tuple[SyntaxTreeNode, List[Tuple[int, str]]]] = {}

        for link in iter_links(root):
            info = infos.get(link_href(link))
            parent = link.parent
            if info is None or parent is None:
                continue
            index = _index_of(parent, link)
            following = parent.children[index + 1] if index + 1 < len(parent.children) else None
            if has_badge(following):
                logger.debug("Badge already present for %s", link_href(link))
                continue
            _, changes = planned.setdefault(id(parent), (parent, []))
            changes.append((index + 1, format_badge(info)))

        count = 0
        for parent, changes in planned.values():
            children = list(parent.children)
            for index, text in sorted(changes, key=lambda change: change[0], reverse=True):
                badge = make_text_node(text)
                badge.parent = parent
                children.insert(index, badge)
                count += 1
            parent.children = children
        return count


def _index_of(parent: SyntaxTreeNode, node: SyntaxTreeNode) -> int:
    for index, child in enumerate(parent.children):
        if child is node:
            return index
    raise ValueError("node is not a child of its parent")


def add_badges(root: SyntaxTreeNode, infos: Mapping[str, RepoInfo]) -> int:
    """Insert badges in place and return how many were added."""
    return BadgeWriter().apply(root, infos)


__all__ = [
    "ARCHIVED_MARKER",
    "BADGE_PATTERN",
    "BadgeWriter",
    "add_badges",
    "format_badge",
    "has_badge",
    "strip_badge",
]
