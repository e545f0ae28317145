# src/analytics/ppr.py — v1
"""Relevance engine — Personalized PageRank over the code graph.

Tries the store's native PageRank (MAGE ``pagerank.get()``) blended with
hop proximity to the seeds first. When the extension is unavailable, falls
back to an in-process power iteration over the project's raw edge set,
biased towards the seeds through a personalization vector.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any

import networkx as nx
from pydantic import ValidationError

from lexgraph.analytics import queries
from lexgraph.analytics.native import Delegated, try_native
from lexgraph.core.models import (
    DEFAULT_EDGE_WEIGHTS,
    UNKNOWN_EDGE_WEIGHT,
    GraphEdge,
    RelevanceOptions,
    RelevanceResult,
)
from lexgraph.logging.context import set_engine_context
from lexgraph.store.base_graph_store import BaseGraphStore, fetch_rows

logger = logging.getLogger(__name__)

SEED_PROXIMITY = 2.0
DEFAULT_HOP_RADIUS = 3
OUT_WEIGHT_EPSILON = 1e-9


def normalize_seeds(seed_ids: Iterable[Any]) -> list[str]:
    """Drop blank ids and duplicates, keeping first-seen order."""
    seen: dict[str, None] = {}
    for seed in seed_ids:
        if isinstance(seed, str) and seed.strip():
            seen.setdefault(seed, None)
    return list(seen)


def merge_edge_weights(overrides: Mapping[str, Any] | None = None) -> dict[str, float]:
    """Overlay caller weights on the default table.

    Keys are upper-cased; weights outside (0, 1] are ignored.
    """
    weights = dict(DEFAULT_EDGE_WEIGHTS)
    for rel, raw in (overrides or {}).items():
        try:
            weight = float(raw)
        except (TypeError, ValueError):
            weight = math.nan
        if not (math.isfinite(weight) and 0.0 < weight <= 1.0):
            logger.warning("Ignoring edge weight %r for relation %r", raw, rel)
            continue
        weights[str(rel).upper()] = weight
    return weights


def proximity(hops: int | None) -> float:
    """Proximity bonus for a non-seed node ``hops`` steps away from a seed."""
    if hops is None or hops < 1:
        return 0.0
    return 1.0 / hops


def _finite(score: float) -> float:
    return score if math.isfinite(score) and score > 0.0 else 0.0


def _rank_results(results: list[RelevanceResult], max_results: int) -> list[RelevanceResult]:
    # sorted() is stable, so equal scores keep discovery order
    return sorted(results, key=lambda r: r.score, reverse=True)[:max_results]


class RelevanceEngine:
    """Ranks project entities by personalized relevance to a seed set.

    Stateless: every call allocates and discards its own working graph.
    """

    def __init__(
        self, store: BaseGraphStore, hop_radius: int = DEFAULT_HOP_RADIUS
    ) -> None:
        """Raises ValueError if ``hop_radius`` is below 1."""
        self._store = store
        self._hop_query = queries.seed_hop_distances(hop_radius)

    async def compute_relevance(
        self,
        seed_ids: Iterable[str],
        project_id: str,
        options: RelevanceOptions | None = None,
    ) -> list[RelevanceResult]:
        """Rank entities of ``project_id`` by relevance to ``seed_ids``.

        Args:
            seed_ids: Entity ids to personalize on. Blank and duplicate ids
                are discarded.
            project_id: Project scope of the graph.
            options: Result cap, iteration count, damping and edge weights.

        Returns:
            Results sorted by score descending, tagged with the path used.

        Raises:
            GraphStoreError: If the fallback edge fetch fails.
        """
        seeds = normalize_seeds(seed_ids)
        if not seeds:
            return []
        options = options or RelevanceOptions()

        set_engine_context("relevance", "native")
        results = await self._native_relevance(seeds, project_id, options)
        if results is not None:
            logger.info(
                "Native relevance for %d seed(s): %d result(s)", len(seeds), len(results),
            )
            return results

        set_engine_context("relevance", "fallback")
        edges = await self._fetch_edges(project_id)
        results = fallback_relevance(
            seeds,
            edges,
            iterations=options.iterations,
            damping=options.damping,
            edge_weights=merge_edge_weights(options.edge_weights),
            max_results=options.max_results,
        )
        logger.info(
            "Fallback relevance over %d edge(s) for %d seed(s): %d result(s)",
            len(edges), len(seeds), len(results),
        )
        return results

    # --- Native path ---

    async def _native_relevance(
        self, seeds: list[str], project_id: str, options: RelevanceOptions
    ) -> list[RelevanceResult] | None:
        """Blend native PageRank with seed proximity. None means unavailable."""
        rank_outcome, hop_outcome = await asyncio.gather(
            try_native(self._store, queries.NATIVE_PAGERANK, {"projectId": project_id}),
            try_native(
                self._store,
                self._hop_query,
                {"projectId": project_id, "seedIds": seeds},
            ),
        )
        if not isinstance(rank_outcome, Delegated):
            return None

        hops = _parse_hops(hop_outcome.rows) if isinstance(hop_outcome, Delegated) else {}
        seed_set = set(seeds)
        damping = options.damping
        results: list[RelevanceResult] = []
        seen: set[str] = set()
        skipped = 0
        for row in rank_outcome.rows:
            parsed = _parse_rank_row(row)
            if parsed is None or parsed[0] in seen:
                skipped += 1
                continue
            node_id, rank = parsed
            seen.add(node_id)
            prox = SEED_PROXIMITY if node_id in seed_set else proximity(hops.get(node_id))
            results.append(RelevanceResult(
                node_id=node_id,
                score=_finite(rank * (1.0 - damping) + prox * damping),
                mode="native",
                type=_text(row.get("type")),
                file_path=_text(row.get("filePath")),
                name=_text(row.get("name")),
            ))
        if skipped:
            logger.debug("Skipped %d malformed native rank row(s)", skipped)
        if not results:
            logger.info("Native rank rows were all malformed; using fallback")
            return None
        return _rank_results(results, options.max_results)

    # --- Fallback path ---

    async def _fetch_edges(self, project_id: str) -> list[GraphEdge]:
        rows = await fetch_rows(
            self._store, queries.PROJECT_EDGES, {"projectId": project_id},
        )
        edges: list[GraphEdge] = []
        for row in rows:
            try:
                edges.append(GraphEdge.model_validate(row))
            except ValidationError:
                logger.debug("Skipping malformed edge row: %r", row)
        return edges


def build_weighted_graph(
    seeds: list[str],
    edges: Iterable[GraphEdge],
    edge_weights: Mapping[str, float],
) -> nx.DiGraph:
    """Directed weighted working graph; seeds are present even when isolated.

    Parallel relations between the same pair accumulate their weights.
    """
    graph = nx.DiGraph()
    for seed in seeds:
        graph.add_node(seed, type="", file_path="", name="")
    for edge in edges:
        _add_endpoint(graph, edge.from_id, edge.from_type, edge.from_path, edge.from_name)
        _add_endpoint(graph, edge.to_id, edge.to_type, edge.to_path, edge.to_name)
        weight = edge_weights.get(edge.rel_type.upper(), UNKNOWN_EDGE_WEIGHT)
        if graph.has_edge(edge.from_id, edge.to_id):
            graph[edge.from_id][edge.to_id]["weight"] += weight
        else:
            graph.add_edge(edge.from_id, edge.to_id, weight=weight)
    return graph


def personalized_pagerank(
    graph: nx.DiGraph,
    seeds: list[str],
    iterations: int,
    damping: float,
) -> dict[str, float]:
    """Power iteration of PPR with a seed-concentrated personalization vector.

      rank'(v) = (1 - d) * p(v) + d * sum(rank(u) * w(u->v) / out_weight(u))

    Dangling nodes keep their mass out of the sum (their out-weight is floored
    at a small epsilon), so no NaN or infinity can appear. The rank vector
    starts equal to the personalization vector.
    """
    nodes = list(graph.nodes())
    if not nodes or not seeds:
        return {}

    seed_set = set(seeds)
    mass = 1.0 / len(seed_set)
    personalization = {v: (mass if v in seed_set else 0.0) for v in nodes}
    out_weight = {
        u: max(graph.out_degree(u, weight="weight"), OUT_WEIGHT_EPSILON) for u in nodes
    }

    ranks = dict(personalization)
    for _iteration in range(iterations):
        new_ranks = {v: (1.0 - damping) * personalization[v] for v in nodes}
        for u, v, w in graph.edges(data="weight"):
            new_ranks[v] += damping * ranks[u] * w / out_weight[u]
        ranks = new_ranks

    return {v: _finite(score) for v, score in ranks.items()}


def fallback_relevance(
    seeds: list[str],
    edges: list[GraphEdge],
    iterations: int,
    damping: float,
    edge_weights: Mapping[str, float],
    max_results: int,
) -> list[RelevanceResult]:
    """In-process relevance ranking over a raw edge list."""
    graph = build_weighted_graph(seeds, edges, edge_weights)
    ranks = personalized_pagerank(graph, seeds, iterations, damping)
    results = [
        RelevanceResult(
            node_id=node_id,
            score=score,
            mode="fallback",
            type=graph.nodes[node_id].get("type", ""),
            file_path=graph.nodes[node_id].get("file_path", ""),
            name=graph.nodes[node_id].get("name", ""),
        )
        for node_id, score in ranks.items()
    ]
    return _rank_results(results, max_results)


# --- Row helpers ---


def _add_endpoint(
    graph: nx.DiGraph, node_id: str, node_type: str, path: str, name: str
) -> None:
    """Add a node, filling metadata that earlier rows left blank."""
    if node_id not in graph:
        graph.add_node(node_id, type=node_type, file_path=path, name=name)
        return
    attrs = graph.nodes[node_id]
    for key, value in (("type", node_type), ("file_path", path), ("name", name)):
        if value and not attrs.get(key):
            attrs[key] = value


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _parse_rank_row(row: Any) -> tuple[str, float] | None:
    if not isinstance(row, Mapping):
        return None
    node_id = row.get("nodeId")
    if not isinstance(node_id, str) or not node_id:
        return None
    try:
        rank = float(row.get("rank"))
    except (TypeError, ValueError):
        return None
    if not math.isfinite(rank) or rank < 0.0:
        return None
    return node_id, rank


def _parse_hops(rows: list[Any]) -> dict[str, int]:
    """Minimum hop count per node id."""
    hops: dict[str, int] = {}
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        node_id = row.get("nodeId")
        try:
            count = int(row.get("hops"))
        except (TypeError, ValueError):
            continue
        if not isinstance(node_id, str) or not node_id or count < 1:
            continue
        hops[node_id] = min(count, hops.get(node_id, count))
    return hops
