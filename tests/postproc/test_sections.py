"""Tests for the section/item JSON hierarchy."""

from __future__ import annotations

from datetime import UTC, datetime

from enhansome.markdown.parser import parse_markdown
from enhansome.postproc.sections import SectionBuilder, build_json
from tests._fixtures.github_stub import make_info

COMPLEX_LIST = """
# My Awesome List

Intro paragraph that belongs to no section.

### First Section

Description for the first section.

* [Repo C](https://github.com/user/repo-c) - 200 stars
* [Repo B](https://github.com/user/repo-b) - 300 stars
  * [Nested 1](https://github.com/user/nested-1) - 50 stars.
* [Repo A](https://github.com/user/repo-a) - 100 stars

**[⬆ back to top](#my-awesome-list)**

### Second Section (Not enough links)
* [Single Repo](https://github.com/user/single-link-repo)

### Third Section
Another valid section.
* [Repo A](https://github.com/user/repo-a) - 100 stars.
* [Repo C](https://github.com/user/repo-c) - 200 stars.
"""

INFOS = {
    "https://github.com/user/repo-a": make_info(100, language="Go", pushed="2025-01-01"),
    "https://github.com/user/repo-b": make_info(300, language="Rust", pushed="2025-03-01"),
    "https://github.com/user/repo-c": make_info(200, language="Python"),
    "https://github.com/user/nested-1": make_info(50, language="JS", archived=True),
}


def _build(content: str, min_links: int = 2):
    return SectionBuilder(min_links).build(
        parse_markdown(content),
        INFOS,
        source_repository="owner/awesome",
        source_file="README.md",
        generated_at=datetime(2025, 7, 1, 12, 0, tzinfo=UTC),
    )


def test_sections_follow_headings_and_skip_small_lists() -> None:
    output = _build(COMPLEX_LIST)

    assert output.metadata == {
        "title": "My Awesome List",
        "source_repository": "owner/awesome",
        "source_file": "README.md",
        "last_updated": "2025-07-01T12:00:00Z",
    }
    assert [section.title for section in output.items] == ["First Section", "Third Section"]
    assert output.items[0].description == "Description for the first section."
    assert output.items[1].description == "Another valid section."


def test_items_carry_titles_descriptions_children_and_repo_info() -> None:
    first = _build(COMPLEX_LIST).items[0]

    assert [item.title for item in first.items] == ["Repo C", "Repo B", "Repo A"]
    assert [item.description for item in first.items] == ["200 stars", "300 stars", "100 stars"]

    repo_b = first.items[1]
    assert repo_b.repo_info == {
        "owner": "user",
        "repo": "repo-b",
        "stars": 300,
        "language": "Rust",
        "archived": False,
        "last_commit": "2025-03-01T00:00:00+00:00",
    }
    assert len(repo_b.children) == 1
    nested = repo_b.children[0]
    assert nested.title == "Nested 1"
    assert nested.description == "50 stars."
    assert nested.repo_info is not None
    assert nested.repo_info["language"] == "JS"
    assert nested.repo_info["archived"] is True
    assert first.items[0].repo_info is not None
    assert first.items[0].repo_info["last_commit"] is None


def test_threshold_applies_to_sections() -> None:
    assert [s.title for s in _build(COMPLEX_LIST, min_links=1).items] == [
        "First Section",
        "Second Section (Not enough links)",
        "Third Section",
    ]
    assert _build(COMPLEX_LIST, min_links=4).items == []


def test_items_without_links_or_metadata() -> None:
    content = (
        "## Tools\n\n"
        "- [Known](https://github.com/user/repo-a) - tracked\n"
        "- [Unknown](https://github.com/user/missing): not fetched\n"
        "- Just some text\n"
    )
    items = _build(content).items[0].items

    assert items[1].title == "Unknown"
    assert items[1].description == "not fetched"
    assert items[1].repo_info is None
    assert items[2].title == "Just some text"
    assert items[2].description == ""


def test_existing_badges_are_left_out_of_descriptions() -> None:
    content = (
        "## Tools\n\n"
        "- [A](https://github.com/user/repo-a) ⭐ 100 | 🐛 1 | 🌐 Go | 📅 2025-01-01 - tracked\n"
        "- [B](https://github.com/user/repo-b) ⚠️ Archived - retired\n"
    )
    items = _build(content).items[0].items
    assert [item.description for item in items] == ["tracked", "retired"]


def test_only_first_list_after_heading_is_exported() -> None:
    content = (
        "## Tools\n\n"
        "- [A](https://github.com/user/repo-a)\n- [B](https://github.com/user/repo-b)\n\n"
        "Between lists.\n\n"
        "- [C](https://github.com/user/repo-c)\n- [A](https://github.com/user/repo-a)\n"
    )
    sections = _build(content).items
    assert len(sections) == 1
    assert [item.title for item in sections[0].items] == ["A", "B"]


def test_back_to_top_paragraphs_are_not_descriptions() -> None:
    content = (
        "## Tools\n\n"
        "**[⬆ back to top](#top)**\n\n"
        "Real description.\n\n"
        "- [A](https://github.com/user/repo-a)\n- [B](https://github.com/user/repo-b)\n"
    )
    assert _build(content).items[0].description == "Real description."


def test_build_json_serialises_to_plain_dicts() -> None:
    output = build_json(parse_markdown(COMPLEX_LIST), INFOS, min_links=2)
    data = output.to_dict()

    assert data["metadata"]["title"] == "My Awesome List"
    assert data["metadata"]["source_repository"] is None
    first_item = data["items"][0]["items"][0]
    assert set(first_item) == {"title", "description", "children", "repo_info"}
    nested = data["items"][0]["items"][1]["children"][0]
    assert nested["repo_info"]["repo"] == "nested-1"
    assert nested["children"] == []
