# src/analytics/labels.py — v1
"""Path-derived community labels and central-node selection.

Pure functions, no store access.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence

from lexgraph.core.models import Entity

DEFAULT_ROOT_MARKER = "src"
MISC_LABEL = "misc"
CENTRAL_NODE_TYPE = "FUNCTION"


def community_label(path: str, root_marker: str = DEFAULT_ROOT_MARKER) -> str:
    """Label a path by the directory directly below the root marker.

    ``src/engines/a.ts`` -> ``engines``; ``/abs/repo/src/graph/c.ts`` ->
    ``graph``; ``src/index.ts`` (file directly under the marker) -> ``src``;
    empty path or no marker -> ``misc``.
    """
    if not path:
        return MISC_LABEL
    segments = [s for s in path.replace("\\", "/").split("/") if s]
    try:
        idx = segments.index(root_marker)
    except ValueError:
        return MISC_LABEL
    # marker is last, or only a file name follows it
    if idx >= len(segments) - 2:
        return root_marker
    return segments[idx + 1]


def label_for_group(
    paths: Iterable[str], root_marker: str = DEFAULT_ROOT_MARKER
) -> str:
    """Most frequent community_label among paths; ties go to first seen."""
    counts = Counter(community_label(p, root_marker) for p in paths)
    if not counts:
        return MISC_LABEL
    # most_common keeps first-encountered order for equal counts
    return counts.most_common(1)[0][0]


def central_node(members: Sequence[Entity]) -> str:
    """First FUNCTION member, else the first member."""
    if not members:
        raise ValueError("central_node() needs at least one member")
    for member in members:
        if member.type.upper() == CENTRAL_NODE_TYPE:
            return member.id
    return members[0].id
