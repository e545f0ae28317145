# src/api/facade.py — v1
"""Public API facade — entry points for relevance and community queries.

Usage:
    from lexgraph.api.facade import compute_relevance, detect_communities
    results = await compute_relevance(["file:src/app.ts"], project_id="web")
    summary = await detect_communities(project_id="web")
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from lexgraph.analytics.community_detector import CommunityDetector
from lexgraph.analytics.ppr import RelevanceEngine
from lexgraph.config.settings import Settings
from lexgraph.core.models import CommunityRunResult, RelevanceOptions, RelevanceResult
from lexgraph.logging.context import clear_context, set_project_context
from lexgraph.store.graph_store_factory import create_graph_store

if TYPE_CHECKING:
    from lexgraph.store.base_graph_store import BaseGraphStore

logger = logging.getLogger(__name__)


async def compute_relevance(
    seed_ids: Iterable[str],
    project_id: str | None = None,
    options: RelevanceOptions | None = None,
    settings: Settings | None = None,
    graph_store: BaseGraphStore | None = None,
) -> list[RelevanceResult]:
    """Rank project entities by relevance to the seed entities.

    Args:
        seed_ids: Entity ids to personalize on.
        project_id: Project scope. Defaults to settings.project_id.
        options: Relevance options. Defaults come from settings.
        settings: Global settings. Loaded from .env if None.
        graph_store: Store adapter. Created from settings (and closed) if None.

    Raises:
        ValueError: If no project id is given or configured.
        GraphStoreError: If the fallback edge fetch fails.
    """
    settings = settings or Settings()
    project = _resolve_project(project_id, settings)
    options = options or default_relevance_options(settings)

    async with _store_scope(settings, graph_store) as store:
        set_project_context(project, _generate_run_id())
        try:
            engine = RelevanceEngine(store, hop_radius=settings.ppr_hop_radius)
            return await engine.compute_relevance(seed_ids, project, options)
        finally:
            clear_context()


async def detect_communities(
    project_id: str | None = None,
    settings: Settings | None = None,
    graph_store: BaseGraphStore | None = None,
) -> CommunityRunResult:
    """Detect and persist communities for a project.

    Raises:
        ValueError: If no project id is given or configured.
        GraphStoreError: If the member fetch or a community write fails.
    """
    settings = settings or Settings()
    project = _resolve_project(project_id, settings)

    async with _store_scope(settings, graph_store) as store:
        set_project_context(project, _generate_run_id())
        try:
            detector = CommunityDetector(store, root_marker=settings.community_root_marker)
            return await detector.detect_communities(project)
        finally:
            clear_context()


def default_relevance_options(settings: Settings) -> RelevanceOptions:
    """Relevance options populated from configured defaults."""
    return RelevanceOptions(
        max_results=settings.ppr_max_results,
        iterations=settings.ppr_iterations,
        damping=settings.ppr_damping,
    )


@asynccontextmanager
async def _store_scope(
    settings: Settings, graph_store: BaseGraphStore | None
) -> AsyncIterator[BaseGraphStore]:
    """Yield the injected store, or a fresh one that is closed on exit."""
    if graph_store is not None:
        yield graph_store
        return
    store = create_graph_store(settings)
    try:
        yield store
    finally:
        await store.close()


def _resolve_project(project_id: str | None, settings: Settings) -> str:
    project = (project_id or settings.project_id).strip()
    if not project:
        raise ValueError("project_id is required (argument or PROJECT_ID setting)")
    return project


def _generate_run_id() -> str:
    return uuid.uuid4().hex[:12]
