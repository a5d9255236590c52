"""Relative link rewriting for documents moved to another directory depth."""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass

from markdown_it.tree import SyntaxTreeNode

from ..logging import get_logger

_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")
_LINK_ATTRS = {"link": "href", "image": "src"}


@dataclass
class RelativeLinkRewriter:
    """Prefixes relative link and image targets with ``prefix``.

    Absolute URLs, root-relative paths and in-page fragments are untouched.
    """

    prefix: str

    def apply(self, root: SyntaxTreeNode) -> int:
        if not self.prefix:
            return 0
        rewritten = 0
        for node in root.walk():
            attr = _LINK_ATTRS.get(node.type)
            if attr is None:
                continue
            target = node.attrs.get(attr)
            if not isinstance(target, str):
                continue
            updated = self.rewrite(target)
            if updated != target:
                node.attrs[attr] = updated
                rewritten += 1
        if rewritten:
            get_logger("links").debug(
                "Rewrote %d relative link(s) with prefix '%s'", rewritten, self.prefix
            )
        return rewritten

    def rewrite(self, target: str) -> str:
        if not target or target.startswith(("/", "#")) or _SCHEME.match(target):
            return target
        cuts = [index for index in (target.find("?"), target.find("#")) if index >= 0]
        split = min(cuts, default=len(target))
        path, suffix = target[:split], target[split:]
        if not path:
            return target
        prefix = self.prefix.replace("\\", "/")
        return posixpath.normpath(posixpath.join(prefix, path)) + suffix


def rewrite_relative_links(root: SyntaxTreeNode, prefix: str) -> int:
    """Rewrite relative destinations in place and return how many changed."""
    return RelativeLinkRewriter(prefix).apply(root)


__all__ = ["RelativeLinkRewriter", "rewrite_relative_links"]
