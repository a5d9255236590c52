"""Locate GitHub repository references in a parsed document."""

from __future__ import annotations

from typing import Dict, Optional

from markdown_it.tree import SyntaxTreeNode

from .github.urls import parse_github_url
from .markdown.parser import iter_links, link_href
from .models import RepoRef


def collect_references(root: SyntaxTreeNode) -> Dict[str, RepoRef]:
    """Return every GitHub repository link below ``root`` keyed by its literal URL.

    Two spellings of the same repository stay separate entries; only an
    identical URL string is deduplicated.
    """
    refs: Dict[str, RepoRef] = {}
    for link in iter_links(root):
        url = link_href(link)
        if url in refs:
            continue
        ref = parse_github_url(url)
        if ref is not None:
            refs[url] = ref
    return refs


def first_reference_url(node: SyntaxTreeNode) -> Optional[str]:
    """URL of the first GitHub repository link inside ``node``, if any."""
    for link in iter_links(node):
        url = link_href(link)
        if parse_github_url(url) is not None:
            return url
    return None


def count_reference_items(list_node: SyntaxTreeNode) -> int:
    """Number of direct items of ``list_node`` that carry a repository link."""
    return sum(1 for item in list_node.children if first_reference_url(item) is not None)


__all__ = ["collect_references", "count_reference_items", "first_reference_url"]
