"""Configuration loading for enhansome (.enhansome.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .models import SORT_CHOICES, SortOptions

CONFIG_FILENAME = ".enhansome.yml"
DEFAULT_API_URL = "https://api.github.com"
TOKEN_ENV_VARS = ("ENHANSOME_GITHUB_TOKEN", "GITHUB_TOKEN", "INPUT_GITHUB_TOKEN")


class ConfigError(RuntimeError):
    """Raised when the configuration file or an option value is invalid."""


@dataclass
class GitHubConfig:
    """GitHub API access and fetch pool settings."""

    api_url: str = DEFAULT_API_URL
    concurrency: int = 10
    max_retries: int = 3
    max_wait_seconds: float = 300.0
    request_timeout: float = 30.0


@dataclass
class SortConfig:
    """List reordering settings."""

    by: str = ""
    min_links: int = 2

    def to_options(self) -> SortOptions:
        return SortOptions(by=self.by, min_links=self.min_links)  # type: ignore[arg-type]


@dataclass
class ReplacementConfig:
    """Raw find/replace rules in ``find:::replace`` line format."""

    find_and_replace: str = ""
    regex_find_and_replace: str = ""
    disable_branding: bool = False


@dataclass
class EnhansomeConfig:
    """Represents the settings defined in .enhansome.yml."""

    root: Path
    github: GitHubConfig = field(default_factory=GitHubConfig)
    sort: SortConfig = field(default_factory=SortConfig)
    replacements: ReplacementConfig = field(default_factory=ReplacementConfig)
    relative_link_prefix: str = ""
    write_json: bool = False
    source_repository: Optional[str] = None
    files: List[str] = field(default_factory=list)


def load_config(config_path: Path) -> EnhansomeConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return EnhansomeConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    github = GitHubConfig()
    github_data = _as_dict(data.get("github"))
    if github_data:
        github.api_url = (_as_str(github_data.get("api_url")) or DEFAULT_API_URL).rstrip("/")
        github.concurrency = _as_int(github_data.get("concurrency"), github.concurrency)
        github.max_retries = _as_int(github_data.get("max_retries"), github.max_retries)
        github.max_wait_seconds = _as_float(
            github_data.get("max_wait_seconds"), github.max_wait_seconds
        )
        github.request_timeout = _as_float(
            github_data.get("request_timeout"), github.request_timeout
        )

    sort = SortConfig()
    sort_data = _as_dict(data.get("sort"))
    if sort_data:
        sort.by = _as_str(sort_data.get("by")) or ""
        sort.min_links = _as_int(sort_data.get("min_links"), sort.min_links)

    replacements = ReplacementConfig()
    replacement_data = _as_dict(data.get("replacements"))
    if replacement_data:
        replacements.find_and_replace = _as_rule_lines(replacement_data.get("find_and_replace"))
        replacements.regex_find_and_replace = _as_rule_lines(
            replacement_data.get("regex_find_and_replace")
        )
        replacements.disable_branding = (
            _as_bool(replacement_data.get("disable_branding")) or False
        )

    config = EnhansomeConfig(
        root=root,
        github=github,
        sort=sort,
        replacements=replacements,
        relative_link_prefix=_as_str(data.get("relative_link_prefix")) or "",
        write_json=_as_bool(data.get("write_json")) or False,
        source_repository=_as_str(data.get("source_repository")),
        files=_as_str_list(data.get("files")),
    )
    validate_config(config)
    return config


def validate_config(config: EnhansomeConfig) -> None:
    """Reject option values the engine cannot honour."""
    validate_sort(config.sort.by, config.sort.min_links)
    if config.github.concurrency < 1:
        raise ConfigError("github.concurrency must be at least 1")
    if config.github.max_retries < 1:
        raise ConfigError("github.max_retries must be at least 1")
    if config.github.max_wait_seconds < 0:
        raise ConfigError("github.max_wait_seconds must not be negative")
    if config.github.request_timeout <= 0:
        raise ConfigError("github.request_timeout must be positive")


def validate_sort(by: str, min_links: int) -> None:
    if by and by not in SORT_CHOICES:
        raise ConfigError(
            f"Unknown sort key '{by}'; expected one of: {', '.join(SORT_CHOICES)}"
        )
    if min_links < 0:
        raise ConfigError("sort.min_links must not be negative")


def resolve_token(explicit: Optional[str] = None) -> Optional[str]:
    """Pick the GitHub token from ``explicit`` or the first non-empty env variable."""
    if explicit:
        return explicit
    for name in TOKEN_ENV_VARS:
        value = os.getenv(name, "").strip()
        if value:
            return value
    return None


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.suffix not in {".yml", ".yaml"}:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as exc:
            raise ConfigError(f"Expected an integer, got '{value}'") from exc
    return default


def _as_float(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as exc:
            raise ConfigError(f"Expected a number, got '{value}'") from exc
    return default


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


def _as_rule_lines(value: Any) -> str:
    """Accept either a block string or a YAML list of ``find:::replace`` lines."""
    if isinstance(value, str):
        return value
    if isinstance(value, Sequence):
        return "\n".join(str(item) for item in value if isinstance(item, str))
    return ""


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "EnhansomeConfig",
    "GitHubConfig",
    "ReplacementConfig",
    "SortConfig",
    "TOKEN_ENV_VARS",
    "load_config",
    "resolve_token",
    "validate_config",
    "validate_sort",
]
