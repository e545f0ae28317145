# src/logging/context.py — v1
"""Contextual logging support — attach project_id, run_id, engine to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per analytics call.
_project_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "project_id", default=None
)
_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_engine: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "engine", default=None
)
_step: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "step", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    project_id: str | None = None
    run_id: str | None = None
    engine: str | None = None
    step: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        project_id=_project_id.get(),
        run_id=_run_id.get(),
        engine=_engine.get(),
        step=_step.get(),
    )


def set_project_context(project_id: str, run_id: str) -> None:
    """Set project-level context (called once per facade call)."""
    _project_id.set(project_id)
    _run_id.set(run_id)


def set_engine_context(engine: str, step: str | None = None) -> None:
    """Set engine-level context (relevance / communities, native / fallback)."""
    _engine.set(engine)
    _step.set(step)


def clear_context() -> None:
    """Reset all context variables."""
    _project_id.set(None)
    _run_id.set(None)
    _engine.set(None)
    _step.set(None)
