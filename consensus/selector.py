from __future__ import annotations

from consensus.config import RECENCY_PENALTY, RECENCY_WINDOW_S, SPECIALTY_BOOSTS
from consensus.errors import InvalidRequest, NoNodesAvailable
from consensus.schemas import ConsensusRequest, EvaluatorNode, RequestType, Specialty


def specialty_multiplier(request_type: RequestType, specialty: Specialty) -> float:
    return SPECIALTY_BOOSTS.get(request_type.value, {}).get(specialty.value, 1.0)


def recency_penalty(node: EvaluatorNode, now: float) -> float:
    if node.last_used_at is not None and now - node.last_used_at < RECENCY_WINDOW_S:
        return RECENCY_PENALTY
    return 1.0


def score_node(node: EvaluatorNode, request: ConsensusRequest, now: float) -> float:
    """Relevance of a node for this request (higher is better)."""
    return (
        node.reliability
        * node.weight
        * specialty_multiplier(request.type, node.specialty)
        * recency_penalty(node, now)
    )


def select(nodes: list[EvaluatorNode], request: ConsensusRequest, now: float) -> list[EvaluatorNode]:
    """Return the top ``request.max_nodes`` nodes by score, ties broken by id.

    Pure function of the snapshot, the request and ``now``.
    """
    if request.max_nodes <= 0:
        raise InvalidRequest(f"max_nodes must be positive, got {request.max_nodes}")
    if not nodes:
        raise NoNodesAvailable("Node registry is empty")

    ranked = sorted(nodes, key=lambda n: (-score_node(n, request, now), n.id))
    selected = ranked[: min(request.max_nodes, len(ranked))]
    if not selected:
        raise NoNodesAvailable("No nodes selected")
    return selected
