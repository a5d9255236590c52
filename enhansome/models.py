"""Core data models shared across enhansome components."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Dict, List, Literal, Optional

SortBy = Literal["stars", "last_commit", ""]
RuleKind = Literal["literal", "regex", "branding"]

SORT_CHOICES = ("stars", "last_commit")


@dataclass(frozen=True)
class RepoRef:
    """A link resolved to a GitHub owner/name pair."""

    url: str
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass
class RepoInfo:
    """Repository facts fetched from the GitHub API."""

    stars: int
    open_issues: int
    language: Optional[str]
    archived: bool
    pushed_at: Optional[datetime]

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "RepoInfo":
        """Build a record from a ``GET /repos/{owner}/{repo}`` payload.

        Raises ``ValueError`` when the payload lacks the counters.
        """
        stars = payload.get("stargazers_count")
        issues = payload.get("open_issues_count")
        if not isinstance(stars, int) or not isinstance(issues, int):
            raise ValueError("repository payload is missing star or issue counts")
        language = payload.get("language")
        return cls(
            stars=max(stars, 0),
            open_issues=max(issues, 0),
            language=language if isinstance(language, str) and language else None,
            archived=bool(payload.get("archived", False)),
            pushed_at=parse_timestamp(payload.get("pushed_at")),
        )

    @property
    def pushed_date(self) -> Optional[str]:
        if self.pushed_at is None:
            return None
        return self.pushed_at.astimezone(UTC).strftime("%Y-%m-%d")

    def pushed_timestamp(self) -> float:
        """Seconds since the epoch, or 0 when the push date is unknown."""
        return self.pushed_at.timestamp() if self.pushed_at is not None else 0.0


@dataclass(frozen=True)
class ReplacementRule:
    """A raw-text substitution applied before parsing."""

    kind: RuleKind
    find: str = ""
    replace: str = ""

    @classmethod
    def branding(cls) -> "ReplacementRule":
        return cls(kind="branding")


@dataclass
class SortOptions:
    """How qualifying lists are reordered."""

    by: SortBy = ""
    min_links: int = 2


@dataclass
class JsonItem:
    """A list entry in the structured export."""

    title: str
    description: str = ""
    children: List["JsonItem"] = field(default_factory=list)
    repo_info: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "title": self.title,
            "description": self.description,
            "children": [child.to_dict() for child in self.children],
        }
        if self.repo_info is not None:
            data["repo_info"] = dict(self.repo_info)
        return data


@dataclass
class JsonSection:
    """A heading and the qualifying list that follows it."""

    title: str
    description: str = ""
    items: List[JsonItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "items": [item.to_dict() for item in self.items],
        }


@dataclass
class JsonOutput:
    """Structured export of an enriched list."""

    metadata: Dict[str, Any]
    items: List[JsonSection] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metadata": dict(self.metadata),
            "items": [section.to_dict() for section in self.items],
        }


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp as returned by the GitHub API."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


__all__ = [
    "JsonItem",
    "JsonOutput",
    "JsonSection",
    "RepoInfo",
    "RepoRef",
    "ReplacementRule",
    "SORT_CHOICES",
    "SortBy",
    "SortOptions",
    "parse_timestamp",
]
