# tests/integration/store/test_int_memgraph_analytics.py — v1
"""Integration tests for the analytics engines against Memgraph MAGE.

Container: session-scoped via conftest.memgraph_container
Isolation: per-test unique projectId; nodes are deleted after each test.
"""

from __future__ import annotations

import pytest

from lexgraph.analytics.community_detector import CommunityDetector
from lexgraph.analytics.ppr import RelevanceEngine
from lexgraph.core.models import RelevanceOptions
from lexgraph.store.base_graph_store import GraphStoreError, fetch_rows
from lexgraph.store.bolt_store import BoltGraphStore

pytestmark = [pytest.mark.memgraph]

SEED_GRAPH = """
CREATE (a:FILE {id: 'file:a', projectId: $projectId, path: 'src/engines/a.ts', name: 'a.ts'}),
       (b:FILE {id: 'file:b', projectId: $projectId, path: 'src/engines/b.ts', name: 'b.ts'}),
       (c:FILE {id: 'file:c', projectId: $projectId, path: 'src/tools/c.ts', name: 'c.ts'}),
       (f:FUNCTION {id: 'fn:run', projectId: $projectId, path: 'src/engines/a.ts', name: 'run'}),
       (a)-[:IMPORTS]->(b),
       (b)-[:IMPORTS]->(c),
       (a)-[:DEFINES]->(f),
       (f)-[:CALLS]->(b)
"""


async def _seed(store: BoltGraphStore, project_id: str) -> None:
    await store.execute(SEED_GRAPH, {"projectId": project_id})


async def _cleanup(store: BoltGraphStore, project_id: str) -> None:
    await store.execute(
        "MATCH (n {projectId: $projectId}) DETACH DELETE n", {"projectId": project_id},
    )
    await store.close()


class TestBoltStore:
    @pytest.mark.asyncio
    async def test_roundtrip_rows(self, memgraph_uri, project_id):
        store = BoltGraphStore(uri=memgraph_uri)
        try:
            await _seed(store, project_id)
            rows = await fetch_rows(
                store,
                "MATCH (n {projectId: $projectId}) RETURN n.id AS id ORDER BY id",
                {"projectId": project_id},
            )
            assert [r["id"] for r in rows] == ["file:a", "file:b", "file:c", "fn:run"]
        finally:
            await _cleanup(store, project_id)

    @pytest.mark.asyncio
    async def test_syntax_error_wrapped(self, memgraph_uri):
        store = BoltGraphStore(uri=memgraph_uri)
        try:
            with pytest.raises(GraphStoreError):
                await store.execute("MATCH (n RETURN n")
        finally:
            await store.close()


class TestRelevance:
    @pytest.mark.asyncio
    async def test_native_relevance(self, memgraph_uri, project_id):
        store = BoltGraphStore(uri=memgraph_uri)
        try:
            await _seed(store, project_id)
            results = await RelevanceEngine(store).compute_relevance(
                ["file:a"], project_id, RelevanceOptions(max_results=10),
            )
            assert results
            assert {r.mode for r in results} == {"native"}
            assert results[0].node_id == "file:a"
            assert {r.node_id for r in results} == {"file:a", "file:b", "file:c", "fn:run"}
        finally:
            await _cleanup(store, project_id)


class TestCommunities:
    @pytest.mark.asyncio
    async def test_native_communities_persisted(self, memgraph_uri, project_id):
        store = BoltGraphStore(uri=memgraph_uri)
        try:
            await _seed(store, project_id)
            result = await CommunityDetector(store).detect_communities(project_id)
            assert result.mode == "native"
            assert result.members == 4

            rows = await fetch_rows(
                store,
                "MATCH (n)-[:BELONGS_TO]->(c:COMMUNITY {projectId: $projectId}) "
                "RETURN count(DISTINCT n) AS members, count(DISTINCT c) AS communities",
                {"projectId": project_id},
            )
            assert rows[0]["members"] == 4
            assert rows[0]["communities"] == result.communities
        finally:
            await _cleanup(store, project_id)
