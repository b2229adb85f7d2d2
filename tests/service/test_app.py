"""Tests for the FastAPI service mode."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from aiready.config import AiReadyConfig
from aiready.engine import AnalysisEngine
from aiready.service import create_app
from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def configs() -> list[AiReadyConfig]:
    return []


@pytest.fixture
def client(configs: list[AiReadyConfig]) -> TestClient:
    def factory(config: AiReadyConfig) -> AnalysisEngine:
        configs.append(config)
        return AnalysisEngine.from_config(config)

    return TestClient(create_app(factory))


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_scan_endpoint_returns_risk_payload(
    client: TestClient, repo_builder: RepoBuilder, configs: list[AiReadyConfig]
) -> None:
    repo_builder.write(
        {
            "src/core.ts": "export const core = 1;\n",
            "src/core.test.ts": "expect(core).toBe(1);\n",
        }
    )

    response = client.post("/scan", json={"path": str(repo_builder.path())})

    assert response.status_code == 200
    data = response.json()
    assert data["files"][0]["file"] == "src/core.ts"
    assert data["files"][0]["risk_level"] == "low"
    assert data["summary"] == "1 file analyzed. all clear, safe to start."
    assert data["exit_code"] == 0
    assert configs[0].root == repo_builder.path()


def test_scan_endpoint_score_policy_with_top(client: TestClient, repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "src/one.ts": "export const one = 1;\n",
            "src/two.ts": "export const two = 2;\n",
        }
    )

    response = client.post(
        "/scan",
        json={"path": str(repo_builder.path()), "policy": "score", "top": 1},
    )

    assert response.status_code == 200
    data = response.json()
    assert len(data["files"]) == 1
    assert data["overall"] == 66


def test_scan_endpoint_missing_path(client: TestClient, tmp_path: Path) -> None:
    response = client.post("/scan", json={"path": str(tmp_path / "missing")})
    assert response.status_code == 404
    assert "path not found" in response.json()["detail"]


def test_scan_endpoint_bad_policy(client: TestClient, repo_builder: RepoBuilder) -> None:
    response = client.post("/scan", json={"path": str(repo_builder.path()), "policy": "vibes"})
    assert response.status_code == 400


def test_scan_endpoint_bad_config(client: TestClient, repo_builder: RepoBuilder) -> None:
    repo_builder.write({".aiready.yml": "report:\n  format: html\n"})

    response = client.post("/scan", json={"path": str(repo_builder.path())})

    assert response.status_code == 400
    assert "Unknown report format" in response.json()["detail"]
