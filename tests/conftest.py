"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from depgraph.config import ENV_OVERRIDES
from depgraph.models import AnalysisRequest
from tests.fixtures.graph_fixtures import make_diamond_snapshot, make_triangle_snapshot


@pytest.fixture(autouse=True)
def clear_depgraph_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep DEPGRAPH_* variables from the developer's shell out of the tests."""
    for env_var in ENV_OVERRIDES.values():
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.delenv("DEPGRAPH_CONFIG", raising=False)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def acyclic_snapshot() -> AnalysisRequest:
    """Diamond snapshot with a single critical chain A -> B -> D."""
    return make_diamond_snapshot()


@pytest.fixture
def cyclic_snapshot() -> AnalysisRequest:
    """Three-item loop closed by a ``blocks`` connection."""
    return make_triangle_snapshot()


@pytest.fixture
def acyclic_request_file(tmp_path: Path, acyclic_snapshot: AnalysisRequest) -> Path:
    """The diamond snapshot written as a camelCase JSON request."""
    path = tmp_path / "diamond.json"
    path.write_text(json.dumps(acyclic_snapshot.model_dump(mode="json", by_alias=True)))
    return path


@pytest.fixture
def cyclic_request_file(tmp_path: Path, cyclic_snapshot: AnalysisRequest) -> Path:
    """The triangle snapshot written as a camelCase JSON request."""
    path = tmp_path / "triangle.json"
    path.write_text(json.dumps(cyclic_snapshot.model_dump(mode="json", by_alias=True)))
    return path
