"""Node pool and its mutable trust state."""
from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping

from consensus.config import RELIABILITY_FLOOR
from consensus.schemas import EvaluatorNode, Specialty, clamp

logger = logging.getLogger(__name__)


DEFAULT_NODES: list[EvaluatorNode] = [
    EvaluatorNode(id="creative_specialist", name="Creative AI Specialist",
                  specialty=Specialty.CREATIVE, weight=1.2, reliability=0.95),
    EvaluatorNode(id="technical_analyst", name="Technical Analysis Engine",
                  specialty=Specialty.TECHNICAL, weight=1.0, reliability=0.92),
    EvaluatorNode(id="aesthetic_validator", name="Aesthetic Quality Validator",
                  specialty=Specialty.AESTHETIC, weight=1.1, reliability=0.88),
    EvaluatorNode(id="balanced_reasoner", name="Balanced AI Reasoner",
                  specialty=Specialty.BALANCED, weight=1.0, reliability=0.90),
    EvaluatorNode(id="quality_assurance", name="Quality Assurance Engine",
                  specialty=Specialty.TECHNICAL, weight=0.9, reliability=0.93),
]


class NodeRegistry:
    """Holds the fixed node pool.

    Nodes are never added or removed after construction. Reliability and
    last-use timestamps are written only through ``apply_reliability`` and
    ``mark_used``, both of which take the same lock so a round's update is
    applied as a unit.
    """

    def __init__(self, nodes: Iterable[EvaluatorNode] | None = None, reliability_floor: float = RELIABILITY_FLOOR):
        self.reliability_floor = reliability_floor
        self._lock = threading.Lock()
        self._nodes: dict[str, EvaluatorNode] = {}
        for node in (DEFAULT_NODES if nodes is None else nodes):
            if node.id in self._nodes:
                raise ValueError(f"Duplicate node id: {node.id}")
            seeded = node.model_copy(deep=True)
            seeded.reliability = clamp(seeded.reliability, reliability_floor, 1.0)
            self._nodes[node.id] = seeded

    def __len__(self) -> int:
        return len(self._nodes)

    def list_nodes(self) -> list[EvaluatorNode]:
        """Snapshot copy of every node, in registration order."""
        with self._lock:
            return [n.model_copy(deep=True) for n in self._nodes.values()]

    def get(self, node_id: str) -> EvaluatorNode | None:
        with self._lock:
            node = self._nodes.get(node_id)
            return node.model_copy(deep=True) if node else None

    def apply_reliability(self, deltas: Mapping[str, float]) -> None:
        """Add each delta to its node's reliability, clamped to [floor, 1.0]."""
        with self._lock:
            for node_id, delta in deltas.items():
                node = self._nodes.get(node_id)
                if node is None:
                    logger.warning("Reliability update for unknown node %s ignored", node_id)
                    continue
                node.reliability = clamp(node.reliability + delta, self.reliability_floor, 1.0)

    def mark_used(self, node_ids: Iterable[str], at: float) -> None:
        with self._lock:
            for node_id in node_ids:
                if node_id in self._nodes:
                    self._nodes[node_id].last_used_at = at
