"""Tests for enhansome.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from enhansome.config import (
    ConfigError,
    EnhansomeConfig,
    GitHubConfig,
    load_config,
    resolve_token,
)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, EnhansomeConfig)
    assert config.root == tmp_path.resolve()
    assert config.github == GitHubConfig()
    assert config.github.concurrency == 10
    assert config.github.max_retries == 3
    assert config.github.max_wait_seconds == 300.0
    assert config.sort.by == ""
    assert config.sort.min_links == 2
    assert config.replacements.find_and_replace == ""
    assert config.replacements.disable_branding is False
    assert config.relative_link_prefix == ""
    assert config.write_json is False
    assert config.source_repository is None
    assert config.files == []


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".enhansome.yml"
    config_file.write_text(
        """
github:
  api_url: "https://github.example.com/api/v3/"
  concurrency: 4
  max_retries: "5"
  max_wait_seconds: 60
  request_timeout: 12.5
sort:
  by: last_commit
  min_links: 3
replacements:
  find_and_replace:
    - "__VERSION__:::1.5.0"
    - "foo:::bar"
  regex_find_and_replace: |
    ^Updated: .*$:::Updated: TBD
  disable_branding: "yes"
relative_link_prefix: origin
write_json: true
source_repository: owner/awesome
files:
  - README.md
  - docs/LIST.md
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.github.api_url == "https://github.example.com/api/v3"
    assert config.github.concurrency == 4
    assert config.github.max_retries == 5
    assert config.github.max_wait_seconds == 60.0
    assert config.github.request_timeout == 12.5
    assert config.sort.to_options().by == "last_commit"
    assert config.sort.min_links == 3
    assert config.replacements.find_and_replace == "__VERSION__:::1.5.0\nfoo:::bar"
    assert config.replacements.regex_find_and_replace.strip() == "^Updated: .*$:::Updated: TBD"
    assert config.replacements.disable_branding is True
    assert config.relative_link_prefix == "origin"
    assert config.write_json is True
    assert config.source_repository == "owner/awesome"
    assert config.files == ["README.md", "docs/LIST.md"]


def test_load_config_accepts_directory_or_sibling_path(tmp_path: Path) -> None:
    (tmp_path / ".enhansome.yml").write_text("sort:\n  by: stars\n", encoding="utf-8")
    assert load_config(tmp_path).sort.by == "stars"
    assert load_config(tmp_path / "README.md").sort.by == "stars"


@pytest.mark.parametrize(
    "body, message",
    [
        ("sort:\n  by: forks\n", "Unknown sort key"),
        ("sort:\n  min_links: -1\n", "min_links"),
        ("github:\n  concurrency: 0\n", "concurrency"),
        ("github:\n  max_retries: many\n", "Expected an integer"),
        ("- just\n- a list\n", "mapping"),
        ("github: [unclosed\n", "Failed to parse"),
    ],
)
def test_load_config_rejects_invalid_values(tmp_path: Path, body: str, message: str) -> None:
    (tmp_path / ".enhansome.yml").write_text(body, encoding="utf-8")
    with pytest.raises(ConfigError, match=message):
        load_config(tmp_path)


def test_resolve_token_prefers_explicit_then_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ENHANSOME_GITHUB_TOKEN", raising=False)
    monkeypatch.setenv("GITHUB_TOKEN", "from-github")
    monkeypatch.setenv("INPUT_GITHUB_TOKEN", "from-action")

    assert resolve_token("explicit") == "explicit"
    assert resolve_token() == "from-github"

    monkeypatch.setenv("ENHANSOME_GITHUB_TOKEN", "  ")
    assert resolve_token() == "from-github"

    monkeypatch.delenv("GITHUB_TOKEN")
    assert resolve_token() == "from-action"

    monkeypatch.delenv("INPUT_GITHUB_TOKEN")
    assert resolve_token(None) is None
