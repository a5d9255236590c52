"""Section/item hierarchy exported alongside the rewritten markdown."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Dict, List, Mapping, Optional

from markdown_it.tree import SyntaxTreeNode

from ..extractor import count_reference_items
from ..github.urls import parse_github_url
from ..logging import get_logger
from ..markdown.parser import LIST_TYPES, iter_links, link_href, plain_text
from ..models import JsonItem, JsonOutput, JsonSection, RepoInfo
from .badges import strip_badge

_BACK_TO_TOP = re.compile(r"back to top", re.IGNORECASE)
_LEADING_SEPARATOR = re.compile(r"^[-–—:]\s*")
_TITLE_SLOT = "\x00"


@dataclass
class _PendingSection:
    title: str
    paragraphs: List[str]


class SectionBuilder:
    """Turns headings and the lists under them into :class:`JsonSection` entries.

    Only the first list after a heading is exported, and only when it has at
    least ``min_links`` repository items. The builder reads the tree without
    modifying it, so run it before any reordering to keep source order.
    """

    def __init__(self, min_links: int = 2) -> None:
        self.min_links = min_links
        self.logger = get_logger("sections")

    def build(
        self,
        root: SyntaxTreeNode,
        infos: Mapping[str, RepoInfo],
        *,
        source_repository: Optional[str] = None,
        source_file: Optional[str] = None,
        generated_at: Optional[datetime] = None,
    ) -> JsonOutput:
        title = ""
        sections: List[JsonSection] = []
        pending: Optional[_PendingSection] = None

        for block in root.children:
            if block.type == "heading":
                text = plain_text(block).strip()
                if block.tag == "h1":
                    title = title or text
                    pending = None
                else:
                    pending = _PendingSection(title=text, paragraphs=[])
            elif block.type == "paragraph" and pending is not None:
                text = plain_text(block).strip()
                if text and not _BACK_TO_TOP.search(text):
                    pending.paragraphs.append(text)
            elif block.type in LIST_TYPES and pending is not None:
                if count_reference_items(block) >= self.min_links:
                    sections.append(
                        JsonSection(
                            title=pending.title,
                            description="\n".join(pending.paragraphs),
                            items=self.build_items(block, infos),
                        )
                    )
                else:
                    self.logger.debug(
                        "Skipping section '%s': not enough repository links", pending.title
                    )
                pending = None

        stamp = (generated_at or datetime.now(UTC)).astimezone(UTC)
        metadata: Dict[str, Any] = {
            "title": title,
            "source_repository": source_repository,
            "source_file": source_file,
            "last_updated": stamp.strftime("%Y-%m-%dT%H:%M:%SZ"),
        }
        return JsonOutput(metadata=metadata, items=sections)

    def build_items(
        self, list_node: SyntaxTreeNode, infos: Mapping[str, RepoInfo]
    ) -> List[JsonItem]:
        return [self._build_item(item, infos) for item in list_node.children]

    def _build_item(self, item: SyntaxTreeNode, infos: Mapping[str, RepoInfo]) -> JsonItem:
        paragraphs = [child for child in item.children if child.type == "paragraph"]
        links = [link for paragraph in paragraphs for link in iter_links(paragraph)]
        title_link = links[0] if links else None

        text = " ".join(_text_around(paragraph, title_link) for paragraph in paragraphs)
        if title_link is not None and _TITLE_SLOT in text:
            before, after = text.split(_TITLE_SLOT, 1)
            title = _collapse(plain_text(title_link))
            description = _collapse(before + strip_badge(after))
        else:
            title = _collapse(strip_badge(text))
            description = ""

        children: List[JsonItem] = []
        for child in item.children:
            if child.type in LIST_TYPES:
                children.extend(self.build_items(child, infos))

        return JsonItem(
            title=title,
            description=_LEADING_SEPARATOR.sub("", description),
            children=children,
            repo_info=_repo_info(links, infos),
        )


def _text_around(node: SyntaxTreeNode, target: Optional[SyntaxTreeNode]) -> str:
    """Plain text of ``node`` with ``target`` replaced by a placeholder."""
    if target is not None and node is target:
        return _TITLE_SLOT
    if not node.children:
        return plain_text(node)
    return "".join(_text_around(child, target) for child in node.children)


def _collapse(text: str) -> str:
    return " ".join(text.split())


def _repo_info(
    links: List[SyntaxTreeNode], infos: Mapping[str, RepoInfo]
) -> Optional[Dict[str, Any]]:
    for link in links:
        url = link_href(link)
        ref = parse_github_url(url)
        info = infos.get(url)
        if ref is None or info is None:
            continue
        return {
            "owner": ref.owner,
            "repo": ref.name,
            "stars": info.stars,
            "language": info.language,
            "archived": info.archived,
            "last_commit": info.pushed_at.isoformat() if info.pushed_at else None,
        }
    return None


def build_json(
    root: SyntaxTreeNode,
    infos: Mapping[str, RepoInfo],
    *,
    min_links: int = 2,
    **metadata: Any,
) -> JsonOutput:
    return SectionBuilder(min_links).build(root, infos, **metadata)


__all__ = ["SectionBuilder", "build_json"]
