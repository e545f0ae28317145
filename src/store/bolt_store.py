# src/store/bolt_store.py — v1
"""Bolt graph store adapter for Memgraph and Neo4j.

Uses the async driver of the official neo4j Python package; Memgraph speaks
the same Bolt protocol. Requires: pip install neo4j.
"""

from __future__ import annotations

import logging
from typing import Any

from lexgraph.store.base_graph_store import BaseGraphStore, GraphStoreError, QueryPayload

logger = logging.getLogger(__name__)


class BoltGraphStore(BaseGraphStore):
    """Graph store reached over Bolt (Memgraph or Neo4j)."""

    def __init__(
        self,
        uri: str = "bolt://localhost:7687",
        user: str = "",
        password: str = "",
        database: str = "",
        provider: str = "memgraph",
    ) -> None:
        try:
            from neo4j import AsyncGraphDatabase
        except ImportError as e:
            raise ImportError(
                "neo4j package required: pip install neo4j"
            ) from e

        auth = (user, password) if user else None
        self._driver = AsyncGraphDatabase.driver(uri, auth=auth)
        self._database = database or None
        self._provider = provider

    async def execute(
        self, query: str, params: dict[str, Any] | None = None
    ) -> QueryPayload:
        """Execute a Cypher query and return its records as dicts."""
        from neo4j.exceptions import DriverError, Neo4jError

        try:
            async with self._driver.session(database=self._database) as session:
                result = await session.run(query, params or {})
                records = await result.data()
        except (Neo4jError, DriverError) as e:
            logger.debug("%s query failed: %s", self._provider, e)
            raise GraphStoreError(str(e)) from e
        return {"data": records}

    async def close(self) -> None:
        """Close the driver connection."""
        await self._driver.close()

    @property
    def provider_name(self) -> str:
        return self._provider
