from __future__ import annotations

from itertools import combinations

import numpy as np

from consensus.config import (
    CONFIDENCE_FLOOR,
    HIGH_AGREEMENT_VARIANCE,
    MEDIUM_AGREEMENT_VARIANCE,
    PAIR_AGREEMENT_DELTA,
    QUALITY_AGREEMENT_WEIGHT,
    QUALITY_CONFIDENCE_WEIGHT,
    QUALITY_PARTICIPATION_WEIGHT,
    REASONING_BOOST,
    SELF_REPORT_BLEND,
    TARGET_NODE_COUNT,
)
from consensus.errors import NoConsensusReached
from consensus.schemas import (
    AgreementLevel,
    ConsensusMetadata,
    ConsensusResult,
    EvaluatorNode,
    NodeResponse,
    clamp,
)


# ── Confidence normalisation ────────────────────────────────────────

def normalize_confidence(response: NodeResponse, node: EvaluatorNode) -> float:
    """Blend node reliability with the executor's own score.

    With no self-report the node's reliability stands in for it. Responses
    that carry reasoning are boosted before clamping.
    """
    reported = node.reliability if response.self_reported_score is None else response.self_reported_score
    confidence = (1 - SELF_REPORT_BLEND) * node.reliability + SELF_REPORT_BLEND * reported
    if response.reasoning_text.strip():
        confidence *= REASONING_BOOST
    return clamp(confidence, CONFIDENCE_FLOOR, 1.0)


# ── Agreement ───────────────────────────────────────────────────────

def agreement_level(variance: float) -> AgreementLevel:
    if variance < HIGH_AGREEMENT_VARIANCE:
        return AgreementLevel.HIGH
    if variance < MEDIUM_AGREEMENT_VARIANCE:
        return AgreementLevel.MEDIUM
    return AgreementLevel.LOW


def agreement_score(confidences: list[float]) -> float:
    """Fraction of response pairs whose confidences sit within the agreement delta."""
    if len(confidences) <= 1:
        return 1.0
    pairs = list(combinations(confidences, 2))
    agreeing = sum(1 for a, b in pairs if abs(a - b) < PAIR_AGREEMENT_DELTA)
    return agreeing / len(pairs)


def quality_score(average_confidence: float, agreement: float, n: int) -> float:
    participation = min(1.0, n / TARGET_NODE_COUNT)
    return clamp(
        QUALITY_CONFIDENCE_WEIGHT * average_confidence
        + QUALITY_AGREEMENT_WEIGHT * agreement
        + QUALITY_PARTICIPATION_WEIGHT * participation
    )


# ── Explanation ─────────────────────────────────────────────────────

def explain(responses: list[NodeResponse], nodes: dict[str, EvaluatorNode], level: AgreementLevel, average: float) -> str:
    specialties = sorted({nodes[r.node_id].specialty.value for r in responses})
    return (
        f"Consensus reached with {len(responses)} AI nodes ({level.value} agreement). "
        f"Average confidence: {average * 100:.1f}%. "
        f"Perspectives from: {', '.join(specialties)} specialists."
    )


# ── Reduction ───────────────────────────────────────────────────────

def aggregate(responses: list[NodeResponse], nodes: list[EvaluatorNode]) -> ConsensusResult:
    """Reduce one round's responses to a single ConsensusResult.

    ``nodes`` is the snapshot the round was dispatched with; it supplies the
    weight and reliability of every responding node.
    """
    if not responses:
        raise NoConsensusReached("No valid responses received")

    by_id = {n.id: n for n in nodes}
    normalized = [
        r.model_copy(update={"confidence": normalize_confidence(r, by_id[r.node_id])})
        for r in responses
    ]

    confidences = np.array([r.confidence for r in normalized])
    weights = np.array([by_id[r.node_id].weight for r in normalized])
    weighted = confidences * weights
    n = len(normalized)

    weighted_score = float(weighted.sum() / n)
    average = float(confidences.mean())
    variance = float(confidences.var())                  # population variance
    level = agreement_level(variance)
    agreement = agreement_score(confidences.tolist())

    # highest confidence*weight wins, lowest node id on ties
    winner = min(range(n), key=lambda i: (-weighted[i], normalized[i].node_id))

    return ConsensusResult(
        final_result=normalized[winner].raw_result,
        confidence=min(1.0, weighted_score),
        agreement_score=agreement,
        participating_node_count=n,
        per_node_responses=normalized,
        explanation=explain(normalized, by_id, level, average),
        metadata=ConsensusMetadata(
            agreement_level=level,
            average_confidence=average,
            quality_score=quality_score(average, agreement, n),
        ),
    )
