"""GitHub repository URL recognition."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlparse

from ..models import RepoRef

GITHUB_HOST = "github.com"


def parse_github_url(url: str) -> Optional[RepoRef]:
    """Resolve a link to its owner/name pair, or ``None`` for non-repository links.

    Accepts ``https://github.com/owner/repo`` with optional trailing slash,
    ``.git`` suffix, or deeper paths such as ``/issues/1``.
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if parsed.scheme not in {"http", "https"}:
        return None
    if (parsed.hostname or "").lower() != GITHUB_HOST:
        return None
    parts = [part for part in parsed.path.split("/") if part]
    if len(parts) < 2:
        return None
    owner = parts[0]
    name = parts[1].removesuffix(".git")
    if not name:
        return None
    return RepoRef(url=url, owner=owner, name=name)


__all__ = ["GITHUB_HOST", "parse_github_url"]
