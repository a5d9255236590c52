"""Tests for the FastAPI service mode."""

from __future__ import annotations

import pytest

try:
    from fastapi.testclient import TestClient
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    pytest.skip("fastapi not installed", allow_module_level=True)

from enhansome.config import EnhansomeConfig
from enhansome.orchestrator import Orchestrator
from enhansome.service import create_app
from tests._fixtures.github_stub import StubRepoSource, make_info


@pytest.fixture
def client(tmp_path, fixed_clock) -> TestClient:
    source = StubRepoSource(
        {
            "repo-a": make_info(100, open_issues=1, language="Go"),
            "repo-b": make_info(300, open_issues=2, archived=True),
        }
    )

    def factory() -> Orchestrator:
        config = EnhansomeConfig(root=tmp_path)
        return Orchestrator(config, token="t", client=source, clock=fixed_clock)

    return TestClient(create_app(factory))


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_enhance_endpoint_returns_content_and_json(client: TestClient) -> None:
    content = (
        "# Awesome Things\n\n"
        "## Tools\n\n"
        "- [A](https://github.com/user/repo-a) - first\n"
        "- [B](https://github.com/user/repo-b) - second\n"
    )
    response = client.post("/enhance", json={"content": content, "sort_by": "stars"})

    assert response.status_code == 200
    data = response.json()
    assert data["is_changed"] is True
    assert data["final_content"] == (
        "# Awesome Things with stars\n\n"
        "## Tools\n\n"
        "- [B](https://github.com/user/repo-b) ⚠️ Archived - second\n"
        "- [A](https://github.com/user/repo-a) ⭐ 100 | 🐛 1 | 🌐 Go - first\n"
    )
    section = data["json_data"]["items"][0]
    assert data["json_data"]["metadata"]["title"] == "Awesome Things with stars"
    assert section["title"] == "Tools"
    assert [item["title"] for item in section["items"]] == ["A", "B"]
    assert section["items"][1]["repo_info"]["archived"] is True


def test_enhance_endpoint_honours_disable_branding(client: TestClient) -> None:
    response = client.post(
        "/enhance", json={"content": "# Awesome Things\n", "disable_branding": True}
    )
    assert response.status_code == 200
    assert response.json()["final_content"] == "# Awesome Things\n"
    assert response.json()["is_changed"] is False


def test_invalid_sort_key_maps_to_bad_request(client: TestClient) -> None:
    response = client.post("/enhance", json={"content": "text", "sort_by": "forks"})
    assert response.status_code == 400
    assert "Unknown sort key" in response.json()["detail"]
