"""Reorder qualifying lists by repository popularity or recency."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from markdown_it.tree import SyntaxTreeNode

from ..extractor import count_reference_items, first_reference_url
from ..logging import get_logger
from ..markdown.parser import iter_lists
from ..models import SORT_CHOICES, RepoInfo, SortOptions


@dataclass
class ListSorter:
    """Sorts every list that has at least ``min_links`` repository items.

    Each list is judged on its own direct items, so nested lists are sorted
    independently and travel with the item that owns them. Items without
    metadata sink to the bottom in their original order.
    """

    options: SortOptions = field(default_factory=SortOptions)

    def __post_init__(self) -> None:
        if self.options.by and self.options.by not in SORT_CHOICES:
            raise ValueError(f"Unsupported sort key: {self.options.by}")

    def apply(self, root: SyntaxTreeNode, infos: Mapping[str, RepoInfo]) -> int:
        """Sort lists in place and return how many changed order."""
        if not self.options.by:
            return 0
        logger = get_logger("sorter")
        changed = 0
        for list_node in list(iter_lists(root)):
            qualifying = count_reference_items(list_node)
            if qualifying < self.options.min_links:
                logger.debug(
                    "Leaving list with %d repository items unsorted (minimum %d)",
                    qualifying,
                    self.options.min_links,
                )
                continue
            items = list(list_node.children)
            ordered = sorted(items, key=lambda item: self._sort_key(item, infos))
            if any(a is not b for a, b in zip(items, ordered)):
                list_node.children = ordered
                changed += 1
        if changed:
            logger.debug("Reordered %d list(s) by %s", changed, self.options.by)
        return changed

    def _sort_key(
        self, item: SyntaxTreeNode, infos: Mapping[str, RepoInfo]
    ) -> Tuple[int, float]:
        info = _item_info(item, infos)
        if info is None:
            return (1, 0.0)
        if self.options.by == "stars":
            return (0, -float(info.stars))
        return (0, -info.pushed_timestamp())


def _item_info(item: SyntaxTreeNode, infos: Mapping[str, RepoInfo]) -> Optional[RepoInfo]:
    url = first_reference_url(item)
    return infos.get(url) if url is not None else None


def sort_lists(
    root: SyntaxTreeNode, infos: Mapping[str, RepoInfo], options: SortOptions
) -> int:
    return ListSorter(options).apply(root, infos)


__all__ = ["ListSorter", "sort_lists"]
