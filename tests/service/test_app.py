"""Tests for the FastAPI service mode."""

from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

try:
    from fastapi.testclient import TestClient
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    pytest.skip("fastapi not installed", allow_module_level=True)

from shaderaudit.auditor import Auditor
from shaderaudit.config import AuditConfig
from shaderaudit.service import create_app
from tests._fixtures.projects import EXPECTED_ORDER, write_demo_project
from tests._fixtures.tree_builder import TreeBuilder


class _RecordingFactory:
    def __init__(self) -> None:
        self.configs: List[AuditConfig] = []

    def __call__(self, config: AuditConfig) -> Auditor:
        self.configs.append(config)
        return Auditor(config)


@pytest.fixture
def factory() -> _RecordingFactory:
    return _RecordingFactory()


@pytest.fixture
def client(factory: _RecordingFactory) -> TestClient:
    return TestClient(create_app(factory))


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_audit_endpoint_returns_report(
    client: TestClient, factory: _RecordingFactory, source_tree: TreeBuilder
) -> None:
    write_demo_project(source_tree)

    response = client.post("/audit", json={"path": str(source_tree.path())})

    assert response.status_code == 200
    data = response.json()
    assert [pattern["name"] for pattern in data["patterns"]] == EXPECTED_ORDER
    assert data["summary"]["total"] == 4
    assert len(factory.configs) == 1


def test_audit_endpoint_only_unused(client: TestClient, source_tree: TreeBuilder) -> None:
    write_demo_project(source_tree)

    response = client.post(
        "/audit", json={"path": str(source_tree.path()), "only_unused": True}
    )

    assert response.status_code == 200
    assert all(pattern["unused"] for pattern in response.json()["patterns"])


def test_audit_endpoint_applies_overrides(
    client: TestClient, factory: _RecordingFactory, source_tree: TreeBuilder
) -> None:
    source_tree.write({"glsl/solo.fs": "#pragma auto\n"})

    response = client.post(
        "/audit", json={"path": str(source_tree.path()), "shader_dir": "glsl"}
    )

    assert response.status_code == 200
    assert factory.configs[0].shader_dir == source_tree.path("glsl")
    assert [pattern["name"] for pattern in response.json()["patterns"]] == ["solo"]


def test_audit_endpoint_missing_path_is_404(client: TestClient, tmp_path: Path) -> None:
    response = client.post("/audit", json={"path": str(tmp_path / "missing")})
    assert response.status_code == 404


def test_audit_endpoint_missing_shader_dir_is_400(
    client: TestClient, source_tree: TreeBuilder
) -> None:
    source_tree.shader_dir.rmdir()

    response = client.post("/audit", json={"path": str(source_tree.path())})

    assert response.status_code == 400
    assert "Shader directory not found" in response.json()["detail"]


def test_audit_endpoint_bad_config_is_400(client: TestClient, source_tree: TreeBuilder) -> None:
    source_tree.write({".shaderaudit.yml": "catalog: nope\n"})

    response = client.post("/audit", json={"path": str(source_tree.path())})

    assert response.status_code == 400
