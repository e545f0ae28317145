# src/analytics/result_writer.py — v1
"""Idempotent persistence of derived analytics results.

Every write is a MERGE keyed by id, so re-running a detection with the same
inputs updates existing COMMUNITY nodes and BELONGS_TO edges instead of
duplicating them.
"""

from __future__ import annotations

import logging

from lexgraph.analytics import queries
from lexgraph.core.models import Community, CommunityAlgorithm, Membership
from lexgraph.store.base_graph_store import BaseGraphStore, fetch_rows

logger = logging.getLogger(__name__)


def community_id(project_id: str, algorithm: CommunityAlgorithm, index: int) -> str:
    """Deterministic community id: ``<project>::community::<algorithm>::<index>``."""
    return f"{project_id}::community::{algorithm}::{index}"


def memberships_for(community: Community) -> list[Membership]:
    """BELONGS_TO edges implied by a community's member list."""
    return [
        Membership(member_id=member_id, community_id=community.id)
        for member_id in community.member_ids
    ]


class ResultWriter:
    """Writes COMMUNITY nodes and their BELONGS_TO edges back to the store."""

    def __init__(self, store: BaseGraphStore) -> None:
        self._store = store

    async def upsert_community(self, community: Community, project_id: str) -> None:
        """Merge one COMMUNITY node keyed by its id."""
        await fetch_rows(self._store, queries.UPSERT_COMMUNITY, {
            "id": community.id,
            "label": community.label,
            "centralNode": community.central_node,
            "memberCount": community.member_count,
            "projectId": project_id,
            "algorithm": community.algorithm,
        })

    async def write_memberships(self, community: Community, project_id: str) -> int:
        """Merge all BELONGS_TO edges of a community in a single batched write.

        Returns:
            Number of memberships submitted.
        """
        memberships = memberships_for(community)
        if not memberships:
            return 0
        await fetch_rows(self._store, queries.MERGE_MEMBERSHIPS, {
            "memberIds": [m.member_id for m in memberships],
            "communityId": community.id,
            "projectId": project_id,
        })
        return len(memberships)

    async def write_community(self, community: Community, project_id: str) -> None:
        """Upsert the node, then its memberships."""
        await self.upsert_community(community, project_id)
        count = await self.write_memberships(community, project_id)
        logger.debug(
            "Wrote community %s (%s, %d members)", community.id, community.label, count,
        )
