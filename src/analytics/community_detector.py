# src/analytics/community_detector.py — v1
"""Community detection over a project's code entities.

Delegates to the store's community detection procedure (MAGE
``community_detection.get()``) when available. Falls back to a directory
heuristic that groups entities by the folder right below the source root.
Detected clusters are persisted as COMMUNITY nodes with BELONGS_TO edges.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Mapping
from typing import Any

from pydantic import ValidationError

from lexgraph.analytics import queries
from lexgraph.analytics.labels import (
    DEFAULT_ROOT_MARKER,
    central_node,
    community_label,
    label_for_group,
)
from lexgraph.analytics.native import Delegated, try_native
from lexgraph.analytics.result_writer import ResultWriter, community_id
from lexgraph.core.models import (
    Community,
    CommunityAlgorithm,
    CommunityRunResult,
    Entity,
)
from lexgraph.logging.context import set_engine_context
from lexgraph.store.base_graph_store import BaseGraphStore, fetch_rows

logger = logging.getLogger(__name__)


class CommunityDetector:
    """Partitions project entities into labelled, persisted communities."""

    def __init__(
        self,
        store: BaseGraphStore,
        root_marker: str = DEFAULT_ROOT_MARKER,
        writer: ResultWriter | None = None,
    ) -> None:
        self._store = store
        self._root_marker = root_marker
        self._writer = writer or ResultWriter(store)

    async def detect_communities(self, project_id: str) -> CommunityRunResult:
        """Detect, label and persist communities for ``project_id``.

        Returns:
            Number of communities, number of assigned members and the mode
            that produced them.

        Raises:
            GraphStoreError: If the member fetch or a community write fails.
        """
        set_engine_context("communities", "members")
        members = await self._fetch_members(project_id)
        if not members:
            logger.info("No members for project %s; nothing to detect", project_id)
            return CommunityRunResult(
                communities=0, members=0, mode="directory_heuristic",
            )

        set_engine_context("communities", "native")
        outcome = await try_native(
            self._store, queries.NATIVE_COMMUNITIES, {"projectId": project_id},
        )
        clusters = None
        if isinstance(outcome, Delegated):
            clusters = group_by_cluster_id(members, _parse_assignments(outcome.rows))

        if clusters:
            algorithm: CommunityAlgorithm = "native"
            mode = "native"
            communities = self._build_communities(project_id, clusters, algorithm)
        else:
            set_engine_context("communities", "directory_heuristic")
            algorithm = "dir"
            mode = "directory_heuristic"
            clusters = group_by_directory(members, self._root_marker)
            communities = self._build_communities(project_id, clusters, algorithm)

        for community in communities:
            await self._writer.write_community(community, project_id)

        assigned = sum(c.member_count for c in communities)
        logger.info(
            "Detected %d communities over %d of %d members (%s)",
            len(communities), assigned, len(members), mode,
        )
        return CommunityRunResult(
            communities=len(communities), members=assigned, mode=mode,
        )

    def _build_communities(
        self,
        project_id: str,
        clusters: Mapping[Hashable, list[Entity]],
        algorithm: CommunityAlgorithm,
    ) -> list[Community]:
        communities: list[Community] = []
        for index, (key, group) in enumerate(clusters.items()):
            if algorithm == "dir":
                label = str(key)
            else:
                label = label_for_group((m.path for m in group), self._root_marker)
            communities.append(Community(
                id=community_id(project_id, algorithm, index),
                label=label,
                central_node=central_node(group),
                member_count=len(group),
                algorithm=algorithm,
                member_ids=[m.id for m in group],
            ))
        return communities

    async def _fetch_members(self, project_id: str) -> list[Entity]:
        rows = await fetch_rows(
            self._store, queries.PROJECT_MEMBERS, {"projectId": project_id},
        )
        members: list[Entity] = []
        seen: set[str] = set()
        for row in rows:
            try:
                entity = Entity.model_validate(row)
            except ValidationError:
                logger.debug("Skipping malformed member row: %r", row)
                continue
            if entity.id in seen:
                continue
            seen.add(entity.id)
            members.append(entity)
        return members


def group_by_cluster_id(
    members: list[Entity], assignments: Mapping[str, Hashable]
) -> dict[Hashable, list[Entity]]:
    """Group mapped members by cluster id; unmapped members are dropped.

    Clusters are ordered by first appearance in the member list.
    """
    clusters: dict[Hashable, list[Entity]] = {}
    for member in members:
        if member.id not in assignments:
            continue
        clusters.setdefault(assignments[member.id], []).append(member)
    return clusters


def group_by_directory(
    members: list[Entity], root_marker: str = DEFAULT_ROOT_MARKER
) -> dict[str, list[Entity]]:
    """Group every member by the path label below the root marker."""
    clusters: dict[str, list[Entity]] = {}
    for member in members:
        clusters.setdefault(community_label(member.path, root_marker), []).append(member)
    return clusters


def _parse_assignments(rows: list[Any]) -> dict[str, Hashable]:
    """node id -> cluster id; first assignment of a node wins."""
    assignments: dict[str, Hashable] = {}
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        node_id = row.get("nodeId")
        cid = row.get("cid")
        if not isinstance(node_id, str) or not node_id:
            continue
        if cid is None or not isinstance(cid, Hashable):
            continue
        assignments.setdefault(node_id, cid)
    return assignments
