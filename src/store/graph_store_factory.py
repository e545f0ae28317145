# src/store/graph_store_factory.py — v1
"""Factory: instantiate graph store from configuration."""

from __future__ import annotations

import logging

from lexgraph.config.settings import Settings
from lexgraph.store.base_graph_store import BaseGraphStore

logger = logging.getLogger(__name__)


class UnsupportedGraphStoreError(ValueError):
    """Raised when a graph store type is not supported."""


def create_graph_store(settings: Settings) -> BaseGraphStore:
    """Instantiate the configured graph store.

    Args:
        settings: Application settings (GRAPH_DB_TYPE, GRAPH_DB_URI ...).

    Returns:
        Configured BaseGraphStore instance.

    Raises:
        UnsupportedGraphStoreError: If type is not supported.
    """
    db_type = settings.graph_db_type

    if db_type in ("memgraph", "neo4j"):
        from lexgraph.store.bolt_store import BoltGraphStore

        logger.debug("Connecting to %s at %s", db_type, settings.graph_db_uri)
        return BoltGraphStore(
            uri=settings.graph_db_uri,
            user=settings.graph_db_user,
            password=settings.graph_db_password,
            database=settings.graph_db_database,
            provider=db_type,
        )

    raise UnsupportedGraphStoreError(
        f"Unsupported graph store type: {db_type!r}. "
        f"Available: memgraph, neo4j"
    )
