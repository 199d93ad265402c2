"""Post-round trust adjustment."""
from __future__ import annotations

import logging

from consensus.config import ADJUSTMENT_RATE
from consensus.registry import NodeRegistry
from consensus.schemas import ConsensusResult

logger = logging.getLogger(__name__)


def reliability_deltas(result: ConsensusResult, adjustment_rate: float = ADJUSTMENT_RATE) -> dict[str, float]:
    """Per-node reliability change: ``(confidence * agreement - 0.5) * rate``."""
    return {
        r.node_id: (r.confidence * result.agreement_score - 0.5) * adjustment_rate
        for r in result.per_node_responses
    }


class ReliabilityUpdater:
    def __init__(self, adjustment_rate: float = ADJUSTMENT_RATE, enabled: bool = True):
        self.adjustment_rate = adjustment_rate
        self.enabled = enabled

    def update(self, registry: NodeRegistry, result: ConsensusResult) -> dict[str, float]:
        """Apply one round's adjustment to the registry and return the deltas used."""
        if not self.enabled:
            return {}
        deltas = reliability_deltas(result, self.adjustment_rate)
        registry.apply_reliability(deltas)
        logger.debug("Reliability deltas: %s", deltas)
        return deltas
