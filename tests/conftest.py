from __future__ import annotations

from datetime import UTC, datetime
from typing import Callable

import pytest

from tests._fixtures.github_stub import StubRepoSource, make_info


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """A clock frozen at a known instant for JSON metadata assertions."""
    return lambda: datetime(2025, 7, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def stub_source() -> StubRepoSource:
    """Metadata for the repositories used across the list fixtures."""
    return StubRepoSource(
        {
            "repo-a": make_info(100, open_issues=1, language="Go", pushed="2025-01-01"),
            "repo-b": make_info(300, open_issues=2, language="Rust", pushed="2025-03-01"),
            "repo-c": make_info(200, open_issues=3, language="Python", pushed="2025-02-01"),
            "nested-1": make_info(50, open_issues=4, language="JS", pushed="2025-01-15"),
            "nested-2": make_info(75, open_issues=0, pushed="2024-12-01"),
        }
    )
