"""Tests for GitHub repository URL recognition."""

from __future__ import annotations

import pytest

from enhansome.github.urls import parse_github_url


@pytest.mark.parametrize(
    "url, owner, name",
    [
        ("https://github.com/user/repo", "user", "repo"),
        ("https://github.com/user/repo/", "user", "repo"),
        ("https://github.com/user/repo.git", "user", "repo"),
        ("https://github.com/user/repo/tree/main/docs", "user", "repo"),
        ("http://GitHub.com/user/repo", "user", "repo"),
    ],
)
def test_parse_github_url_accepts_repository_links(url: str, owner: str, name: str) -> None:
    ref = parse_github_url(url)
    assert ref is not None
    assert (ref.owner, ref.name) == (owner, name)
    assert ref.url == url
    assert ref.full_name == f"{owner}/{name}"


@pytest.mark.parametrize(
    "url",
    [
        "https://github.com/user",
        "https://github.com/",
        "https://gitlab.com/user/repo",
        "https://gist.github.com/user/abc",
        "./docs/README.md",
        "#section",
        "mailto:someone@example.com",
        "http://[invalid",
    ],
)
def test_parse_github_url_rejects_other_links(url: str) -> None:
    assert parse_github_url(url) is None
