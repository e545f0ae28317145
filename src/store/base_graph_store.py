# src/store/base_graph_store.py — v1
"""Abstract graph store interface.

The analytics engines only need an opaque request/response RPC: a
parameterized Cypher query goes in, a ``{"data": [row, ...]}`` payload
comes out. Adapters signal failure by raising, or by returning a payload
carrying an ``"error"`` key.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

QueryPayload = dict[str, Any]


class GraphStoreError(Exception):
    """Raised when the graph store rejects or fails a query."""


class BaseGraphStore(ABC):
    """Unified interface for graph store backends."""

    @abstractmethod
    async def execute(
        self, query: str, params: dict[str, Any] | None = None
    ) -> QueryPayload:
        """Run a parameterized query and return ``{"data": [row, ...]}``."""

    async def close(self) -> None:
        """Release connections held by the adapter."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (memgraph, neo4j)."""


def payload_error(payload: Any) -> str | None:
    """Return the error reported in a payload, or None when it looks valid."""
    if not isinstance(payload, dict):
        return f"unexpected payload type {type(payload).__name__}"
    error = payload.get("error")
    if error:
        return str(error)
    if not isinstance(payload.get("data", []), list):
        return "payload 'data' is not a list"
    return None


def rows_of(payload: QueryPayload) -> list[Any]:
    """Extract the row list from a payload already checked by payload_error."""
    return list(payload.get("data") or [])


async def fetch_rows(
    store: BaseGraphStore, query: str, params: dict[str, Any] | None = None
) -> list[Any]:
    """Run a query that has no degradation path and return its rows.

    Raises:
        GraphStoreError: If the store returns an error payload. Exceptions
            raised by the adapter propagate unchanged.
    """
    payload = await store.execute(query, params or {})
    error = payload_error(payload)
    if error is not None:
        raise GraphStoreError(error)
    return rows_of(payload)
