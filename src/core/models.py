# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

Row-facing models accept the camelCase keys returned by Cypher queries
(``fromId``, ``filePath`` ...) through aliases and expose snake_case fields.
"""

from __future__ import annotations

import math
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

RelevanceMode = Literal["native", "fallback"]
CommunityMode = Literal["native", "directory_heuristic"]
CommunityAlgorithm = Literal["native", "dir"]

MAX_RESULTS_CAP = 500
MAX_ITERATIONS_CAP = 100
DEFAULT_MAX_RESULTS = 100
DEFAULT_ITERATIONS = 20
DEFAULT_DAMPING = 0.85

# Structural relations propagate more relevance than test or reference links.
DEFAULT_EDGE_WEIGHTS: dict[str, float] = {
    "IMPORTS": 0.9,
    "CALLS": 0.9,
    "EXTENDS": 0.8,
    "IMPLEMENTS": 0.8,
    "CONTAINS": 0.7,
    "DEFINES": 0.7,
    "REFERENCES": 0.6,
    "TESTS": 0.4,
}
UNKNOWN_EDGE_WEIGHT = 0.5


def _blank_if_none(v: object) -> object:
    return "" if v is None else v


# === GRAPH INPUTS ===


class Entity(BaseModel):
    """Code entity owned by the graph store (FILE, FUNCTION, CLASS ...)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(min_length=1)
    type: str = ""
    path: str = Field(default="", alias="filePath")
    name: str = ""

    @field_validator("type", "path", "name", mode="before")
    @classmethod
    def _none_to_blank(cls, v: object) -> object:
        return _blank_if_none(v)


class GraphEdge(BaseModel):
    """Directed typed relationship with optional endpoint metadata."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_id: str = Field(min_length=1, alias="fromId")
    to_id: str = Field(min_length=1, alias="toId")
    rel_type: str = Field(default="", alias="relType")
    from_type: str = Field(default="", alias="fromType")
    to_type: str = Field(default="", alias="toType")
    from_path: str = Field(default="", alias="fromPath")
    to_path: str = Field(default="", alias="toPath")
    from_name: str = Field(default="", alias="fromName")
    to_name: str = Field(default="", alias="toName")

    @field_validator(
        "rel_type", "from_type", "to_type", "from_path", "to_path",
        "from_name", "to_name", mode="before",
    )
    @classmethod
    def _none_to_blank(cls, v: object) -> object:
        return _blank_if_none(v)


# === RELEVANCE ===


class RelevanceOptions(BaseModel):
    """Caller options for a relevance query. Out-of-range values are clamped.

    ``None`` falls back to the field default. Edge weights are kept as given
    and filtered when merged with the default table, so an unusable weight
    only drops that relation.
    """

    max_results: int = DEFAULT_MAX_RESULTS
    iterations: int = DEFAULT_ITERATIONS
    damping: float = DEFAULT_DAMPING
    edge_weights: dict[str, Any] = Field(default_factory=dict)

    @field_validator("max_results", mode="before")
    @classmethod
    def _clamp_max_results(cls, v: object) -> int:
        if v is None:
            return DEFAULT_MAX_RESULTS
        return min(max(_as_number(v, int, "max_results"), 1), MAX_RESULTS_CAP)

    @field_validator("iterations", mode="before")
    @classmethod
    def _clamp_iterations(cls, v: object) -> int:
        if v is None:
            return DEFAULT_ITERATIONS
        return min(max(_as_number(v, int, "iterations"), 1), MAX_ITERATIONS_CAP)

    @field_validator("damping", mode="before")
    @classmethod
    def _clamp_damping(cls, v: object) -> float:
        if v is None:
            return DEFAULT_DAMPING
        value = _as_number(v, float, "damping")
        if not math.isfinite(value):
            return DEFAULT_DAMPING
        return min(max(value, 0.0), 1.0)

    @field_validator("edge_weights", mode="before")
    @classmethod
    def _none_to_empty(cls, v: object) -> object:
        return {} if v is None else v


def _as_number(v: object, cast: type, field: str) -> Any:
    # ValueError lets pydantic report a ValidationError for the field
    try:
        return cast(v)
    except (TypeError, ValueError, OverflowError) as e:
        raise ValueError(f"{field} must be numeric, got {v!r}") from e


class RelevanceResult(BaseModel):
    """One ranked entity returned by the relevance engine."""

    node_id: str
    score: float = Field(ge=0.0)
    mode: RelevanceMode
    type: str = ""
    file_path: str = ""
    name: str = ""


# === COMMUNITIES ===


class Community(BaseModel):
    """Derived COMMUNITY node grouping related entities."""

    id: str
    label: str
    central_node: str
    member_count: int
    algorithm: CommunityAlgorithm
    member_ids: list[str] = Field(default_factory=list)


class Membership(BaseModel):
    """Derived BELONGS_TO edge from a member entity to its community."""

    member_id: str
    community_id: str


class CommunityRunResult(BaseModel):
    """Summary of one community detection run."""

    communities: int = 0
    members: int = 0
    mode: CommunityMode = "directory_heuristic"
