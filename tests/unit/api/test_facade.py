# tests/unit/api/test_facade.py — v1
"""Tests for api/facade.py — project resolution, store lifecycle, defaults."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from lexgraph.api.facade import (
    compute_relevance,
    default_relevance_options,
    detect_communities,
)
from lexgraph.config.settings import Settings
from lexgraph.core.models import RelevanceOptions
from lexgraph.logging.context import get_context
from tests.fakes import EDGES, HOPS, LEIDEN, MEMBERS, PAGERANK, FakeGraphStore


class TestProjectResolution:
    @pytest.mark.asyncio
    async def test_missing_project_raises(self, make_store):
        s = Settings(_env_file=None)
        with pytest.raises(ValueError, match="project_id"):
            await compute_relevance(["file:a"], settings=s, graph_store=make_store())

    @pytest.mark.asyncio
    async def test_blank_project_raises(self, make_store):
        s = Settings(_env_file=None)
        with pytest.raises(ValueError):
            await detect_communities(project_id="  ", settings=s, graph_store=make_store())

    @pytest.mark.asyncio
    async def test_argument_overrides_setting(self, settings, make_store, rank_row):
        store = make_store({PAGERANK: [rank_row("file:a")]})
        await compute_relevance(
            ["file:a"], project_id="proj-b", settings=settings, graph_store=store,
        )
        assert store.calls_matching(PAGERANK)[0][1] == {"projectId": "proj-b"}

    @pytest.mark.asyncio
    async def test_setting_used_by_default(self, settings, make_store, rank_row):
        store = make_store({PAGERANK: [rank_row("file:a")]})
        await compute_relevance(["file:a"], settings=settings, graph_store=store)
        assert store.calls_matching(HOPS)[0][1]["projectId"] == "proj-a"


class TestRelevance:
    @pytest.mark.asyncio
    async def test_native_results(self, settings, make_store, rank_row):
        store = make_store({
            PAGERANK: [rank_row("file:a", 0.2), rank_row("file:b", 0.1)],
            HOPS: [{"nodeId": "file:b", "hops": 1}],
        })
        results = await compute_relevance(["file:a"], settings=settings, graph_store=store)
        assert [r.node_id for r in results] == ["file:a", "file:b"]
        assert all(r.mode == "native" for r in results)

    @pytest.mark.asyncio
    async def test_fallback_uses_settings_defaults(self, make_store, edge_row):
        s = Settings(_env_file=None, project_id="proj-a", ppr_max_results=1)
        store = make_store({
            PAGERANK: RuntimeError("no mage"),
            EDGES: [edge_row("file:a", "file:b"), edge_row("file:a", "file:c")],
        })
        results = await compute_relevance(["file:a"], settings=s, graph_store=store)
        assert len(results) == 1
        assert results[0].node_id == "file:a"
        assert results[0].mode == "fallback"

    @pytest.mark.asyncio
    async def test_explicit_options_win(self, settings, make_store, rank_row):
        store = make_store({PAGERANK: [rank_row(f"file:{i}") for i in range(5)]})
        results = await compute_relevance(
            ["file:0"],
            settings=settings,
            options=RelevanceOptions(max_results=2),
            graph_store=store,
        )
        assert len(results) == 2

    @pytest.mark.asyncio
    async def test_injected_store_not_closed(self, settings, make_store):
        store = make_store()
        await compute_relevance(["file:a"], settings=settings, graph_store=store)
        assert store.closed is False

    @pytest.mark.asyncio
    async def test_context_cleared(self, settings, make_store, rank_row):
        store = make_store({PAGERANK: [rank_row("file:a")]})
        await compute_relevance(["file:a"], settings=settings, graph_store=store)
        assert get_context().project_id is None


class TestStoreLifecycle:
    @pytest.mark.asyncio
    async def test_created_store_closed(self, settings):
        store = FakeGraphStore()
        with patch("lexgraph.api.facade.create_graph_store", return_value=store) as make:
            await detect_communities(settings=settings)
        make.assert_called_once_with(settings)
        assert store.closed is True

    @pytest.mark.asyncio
    async def test_created_store_closed_on_error(self, settings):
        store = FakeGraphStore({MEMBERS: RuntimeError("down")})
        with patch("lexgraph.api.facade.create_graph_store", return_value=store):
            with pytest.raises(RuntimeError, match="down"):
                await detect_communities(settings=settings)
        assert store.closed is True


class TestCommunities:
    @pytest.mark.asyncio
    async def test_root_marker_from_settings(self, make_store, member_row):
        s = Settings(_env_file=None, project_id="proj-a", community_root_marker="lib")
        store = make_store({
            MEMBERS: [
                member_row("file:a", "lib/net/http.py"),
                member_row("file:b", "lib/net/socket.py"),
                member_row("file:c", "lib/db/pool.py"),
            ],
            LEIDEN: RuntimeError("procedure not found"),
        })
        result = await detect_communities(settings=s, graph_store=store)
        assert result.mode == "directory_heuristic"
        assert result.communities == 2
        assert result.members == 3


class TestDefaultOptions:
    def test_from_settings(self):
        s = Settings(
            _env_file=None, ppr_max_results=7, ppr_iterations=3, ppr_damping=0.5,
        )
        options = default_relevance_options(s)
        assert options.max_results == 7
        assert options.iterations == 3
        assert options.damping == 0.5
        assert options.edge_weights == {}
