# src/analytics/queries.py — v1
"""Cypher queries issued by the analytics engines.

Native queries call Memgraph MAGE procedures; the rest is plain Cypher
understood by both Memgraph and Neo4j. Every entity carries ``id`` and
``projectId`` properties set by the graph builder.
"""

from __future__ import annotations

# --- Relevance ---

NATIVE_PAGERANK = """
CALL pagerank.get() YIELD node, rank
WITH node, rank
WHERE node.projectId = $projectId
RETURN node.id AS nodeId, rank, labels(node)[0] AS type,
       node.path AS filePath, node.name AS name
"""


def seed_hop_distances(hop_radius: int) -> str:
    """Hop distance from any seed to reachable neighbours within the radius.

    Variable-length bounds cannot be parameterized, hence the int guard.
    """
    radius = int(hop_radius)
    if radius < 1:
        raise ValueError(f"hop_radius must be >= 1, got {hop_radius!r}")
    return f"""
UNWIND $seedIds AS seedId
MATCH path = (s {{id: seedId, projectId: $projectId}})-[*1..{radius}]-(n)
WHERE n.projectId = $projectId AND NOT n.id IN $seedIds
RETURN n.id AS nodeId, min(length(path)) AS hops
"""


PROJECT_EDGES = """
MATCH (a)-[r]->(b)
WHERE a.projectId = $projectId AND b.projectId = $projectId
RETURN a.id AS fromId, b.id AS toId, type(r) AS relType,
       labels(a)[0] AS fromType, labels(b)[0] AS toType,
       a.path AS fromPath, b.path AS toPath,
       a.name AS fromName, b.name AS toName
"""

# --- Communities ---

PROJECT_MEMBERS = """
MATCH (n)
WHERE n.projectId = $projectId AND (n:FILE OR n:FUNCTION OR n:CLASS)
RETURN n.id AS id, n.path AS filePath, labels(n)[0] AS type, n.name AS name
"""

NATIVE_COMMUNITIES = """
CALL community_detection.get() YIELD node, community_id
WITH node, community_id
WHERE node.projectId = $projectId
RETURN node.id AS nodeId, community_id AS cid
"""

UPSERT_COMMUNITY = """
MERGE (c:COMMUNITY {id: $id})
SET c.label = $label,
    c.centralNode = $centralNode,
    c.memberCount = $memberCount,
    c.projectId = $projectId,
    c.algorithm = $algorithm
"""

MERGE_MEMBERSHIPS = """
UNWIND $memberIds AS memberId
MATCH (n {id: memberId, projectId: $projectId})
MATCH (c:COMMUNITY {id: $communityId})
MERGE (n)-[:BELONGS_TO]->(c)
"""
