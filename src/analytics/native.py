# src/analytics/native.py — v1
"""Native analytics extension probing.

Each engine first asks the store's analytics extension (Memgraph MAGE) to do
the work. Availability is never declared up front: the outcome of the
specialised query is classified as ``Delegated(rows)`` or ``Unavailable``.
Nothing raised here reaches the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from lexgraph.store.base_graph_store import BaseGraphStore, payload_error, rows_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Delegated:
    """The extension answered with at least one row."""

    rows: list[Any] = field(default_factory=list)


@dataclass(frozen=True)
class Unavailable:
    """The extension is missing, failed, or had nothing to say."""

    reason: str


NativeOutcome = Delegated | Unavailable


async def try_native(
    store: BaseGraphStore, query: str, params: dict[str, Any] | None = None
) -> NativeOutcome:
    """Run an extension query and classify its outcome."""
    try:
        payload = await store.execute(query, params or {})
    except Exception as e:  # any adapter failure means "no extension"
        logger.info("Native analytics unavailable: %s", e)
        return Unavailable(reason=f"raised: {e}")

    error = payload_error(payload)
    if error is not None:
        logger.info("Native analytics unavailable: %s", error)
        return Unavailable(reason=f"error: {error}")

    rows = rows_of(payload)
    if not rows:
        logger.debug("Native analytics returned no rows")
        return Unavailable(reason="empty")
    return Delegated(rows=rows)
