"""Tests for recursive list sorting."""

from __future__ import annotations

from typing import Dict, List

import pytest

from enhansome.markdown.parser import iter_links, link_href, parse_markdown
from enhansome.markdown.render import serialize
from enhansome.models import RepoInfo, SortOptions
from enhansome.postproc.sorter import ListSorter, sort_lists
from tests._fixtures.github_stub import make_info


def _url(name: str) -> str:
    return f"https://github.com/user/{name}"


def _order(tree) -> List[str]:
    return [link_href(link).rsplit("/", 1)[-1] for link in iter_links(tree)]


def _sort(content: str, infos: Dict[str, RepoInfo], **options) -> tuple[List[str], int]:
    tree = parse_markdown(content)
    changed = sort_lists(tree, infos, SortOptions(**options))
    return _order(tree), changed


def test_sorts_by_stars_descending() -> None:
    content = "".join(f"- [{n}]({_url(n)})\n" for n in ("x", "y", "z"))
    infos = {_url("x"): make_info(300), _url("y"): make_info(100), _url("z"): make_info(200)}

    order, changed = _sort(content, infos, by="stars")

    assert order == ["x", "z", "y"]
    assert changed == 1


def test_sorts_by_last_commit_with_missing_dates_last_among_known() -> None:
    content = "".join(f"- [{n}]({_url(n)})\n" for n in ("old", "undated", "new"))
    infos = {
        _url("old"): make_info(1, pushed="2020-01-01"),
        _url("undated"): make_info(1),
        _url("new"): make_info(1, pushed="2025-01-01"),
    }
    order, _ = _sort(content, infos, by="last_commit")
    assert order == ["new", "old", "undated"]


def test_items_without_metadata_sink_in_original_order() -> None:
    names = ("m1", "a", "m2", "b", "m3")
    content = "".join(f"- [{n}]({_url(n)})\n" for n in names)
    infos = {_url("a"): make_info(1), _url("b"): make_info(2)}

    order, _ = _sort(content, infos, by="stars")

    assert order == ["b", "a", "m1", "m2", "m3"]


def test_equal_metrics_keep_source_order() -> None:
    content = "".join(f"- [{n}]({_url(n)})\n" for n in ("first", "second", "third"))
    infos = {_url(n): make_info(10) for n in ("first", "second", "third")}
    order, changed = _sort(content, infos, by="stars")
    assert order == ["first", "second", "third"]
    assert changed == 0


def test_lists_below_threshold_are_untouched() -> None:
    content = f"- [low]({_url('low')})\n- plain entry\n- [high]({_url('high')})\n"
    infos = {_url("low"): make_info(1), _url("high"): make_info(9)}

    order, changed = _sort(content, infos, by="stars", min_links=3)
    assert order == ["low", "high"]
    assert changed == 0

    order, changed = _sort(content, infos, by="stars", min_links=2)
    assert order == ["high", "low"]
    assert changed == 1


def test_nested_lists_are_sorted_independently_and_stay_attached() -> None:
    content = (
        f"- [repo-a]({_url('repo-a')})\n"
        f"  - [nested-1]({_url('nested-1')})\n"
        f"  - [nested-2]({_url('nested-2')})\n"
        f"- [repo-b]({_url('repo-b')})\n"
    )
    infos = {
        _url("repo-a"): make_info(100),
        _url("repo-b"): make_info(300),
        _url("nested-1"): make_info(50),
        _url("nested-2"): make_info(75),
    }
    tree = parse_markdown(content)
    assert sort_lists(tree, infos, SortOptions(by="stars")) == 2

    assert serialize(tree, content) == (
        f"- [repo-b]({_url('repo-b')})\n"
        f"- [repo-a]({_url('repo-a')})\n"
        f"  - [nested-2]({_url('nested-2')})\n"
        f"  - [nested-1]({_url('nested-1')})\n"
    )


def test_ordered_lists_are_renumbered_from_their_start() -> None:
    content = f"3. [a]({_url('a')})\n4. [b]({_url('b')})\n"
    tree = parse_markdown(content)
    sort_lists(tree, {_url("a"): make_info(1), _url("b"): make_info(2)}, SortOptions(by="stars"))
    assert serialize(tree, content) == f"3. [b]({_url('b')})\n4. [a]({_url('a')})\n"


def test_sorting_disabled_when_no_key() -> None:
    content = f"- [a]({_url('a')})\n- [b]({_url('b')})\n"
    infos = {_url("a"): make_info(1), _url("b"): make_info(2)}
    order, changed = _sort(content, infos, by="")
    assert order == ["a", "b"]
    assert changed == 0


def test_unknown_sort_key_is_rejected() -> None:
    with pytest.raises(ValueError):
        ListSorter(SortOptions(by="forks"))  # type: ignore[arg-type]
