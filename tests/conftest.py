# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides a fake graph store keyed on query fragments, row builders mirroring
what the Cypher queries return, and sample settings. No external
dependencies — all I/O is faked.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from lexgraph.config.settings import Settings
from tests.fakes import FakeGraphStore


# === FIXTURES: Stores and settings ===


@pytest.fixture
def make_store() -> Callable[..., FakeGraphStore]:
    """Factory for FakeGraphStore instances."""
    def _make(responses: dict[str, Any] | None = None) -> FakeGraphStore:
        return FakeGraphStore(responses)
    return _make


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None, project_id="proj-a")


# === FIXTURES: Row builders ===


@pytest.fixture
def rank_row() -> Callable[..., dict[str, Any]]:
    """Row shape returned by the native PageRank query."""
    def _row(node_id: str, rank: float = 0.5, type: str = "FILE") -> dict[str, Any]:
        return {
            "nodeId": node_id,
            "rank": rank,
            "type": type,
            "filePath": f"src/{node_id}.ts",
            "name": node_id,
        }
    return _row


@pytest.fixture
def edge_row() -> Callable[..., dict[str, Any]]:
    """Row shape returned by the project edge query."""
    def _row(from_id: str, to_id: str, rel_type: str = "IMPORTS") -> dict[str, Any]:
        return {
            "fromId": from_id,
            "toId": to_id,
            "relType": rel_type,
            "fromType": "FILE",
            "toType": "FILE",
            "fromPath": f"src/{from_id}.ts",
            "toPath": f"src/{to_id}.ts",
            "fromName": from_id,
            "toName": to_id,
        }
    return _row


@pytest.fixture
def member_row() -> Callable[..., dict[str, Any]]:
    """Row shape returned by the project member query."""
    def _row(
        node_id: str, file_path: str, type: str = "FILE", name: str | None = None
    ) -> dict[str, Any]:
        return {
            "id": node_id,
            "filePath": file_path,
            "type": type,
            "name": name or node_id,
        }
    return _row
