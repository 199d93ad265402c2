from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping

from consensus.aggregator import aggregate
from consensus.dispatcher import Dispatcher
from consensus.errors import InvalidRequest, RoundFailed
from consensus.fallback import FallbackController
from consensus.history import ConsensusHistory, fingerprint
from consensus.models import TaskExecutor
from consensus.registry import NodeRegistry
from consensus.reliability import ReliabilityUpdater
from consensus.schemas import ConsensusRequest, ConsensusResult, EvaluatorNode, RoundTiming, Specialty
from consensus.selector import select
from consensus.specialties import PayloadTransform

logger = logging.getLogger(__name__)


def validate_request(request: ConsensusRequest) -> None:
    if request.max_nodes <= 0:
        raise InvalidRequest(f"max_nodes must be positive, got {request.max_nodes}")
    if request.timeout_ms <= 0:
        raise InvalidRequest(f"timeout_ms must be positive, got {request.timeout_ms}")
    if not 0.0 <= request.required_confidence <= 1.0:
        raise InvalidRequest(f"required_confidence must be in [0, 1], got {request.required_confidence}")


class ConsensusEngine:
    """Select → dispatch → aggregate → update, with a one-shot fallback.

    Everything stateful is injected: the registry holds node trust, the
    history records results, and the executor is the only thing that talks to
    the outside world.
    """

    def __init__(
        self,
        executor: TaskExecutor,
        registry: NodeRegistry | None = None,
        transforms: Mapping[Specialty, PayloadTransform] | None = None,
        history: ConsensusHistory | None = None,
        reliability_updater: ReliabilityUpdater | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.registry = registry if registry is not None else NodeRegistry()
        self.history = history if history is not None else ConsensusHistory()
        self.reliability_updater = reliability_updater or ReliabilityUpdater()
        self.clock = clock
        self.dispatcher = Dispatcher(executor, self.registry, transforms, clock)
        self.fallback = FallbackController(executor)

    async def _run_round(self, request: ConsensusRequest) -> ConsensusResult:
        nodes = select(self.registry.list_nodes(), request, now=self.clock())
        logger.info("Selected %d node(s): %s", len(nodes), ", ".join(n.id for n in nodes))

        responses = await self.dispatcher.dispatch(nodes, request)
        result = aggregate(responses, nodes)
        self.reliability_updater.update(self.registry, result)
        return result

    async def run_consensus(self, request: ConsensusRequest) -> ConsensusResult:
        """Run one consensus round, falling back to a single call if it fails.

        Raises InvalidRequest before any dispatch for malformed requests and
        ConsensusUnavailable when the fallback call fails too.
        """
        validate_request(request)
        started_at = self.clock()
        start = time.perf_counter()
        logger.info("Starting %s consensus with %d registered nodes", request.type.value, len(self.registry))

        try:
            result = await self._run_round(request)
        except RoundFailed as exc:
            logger.warning("Consensus round failed: %s", exc)
            result = await self.fallback.run(request, cause=exc)
        except Exception as exc:
            logger.exception("Unexpected error during consensus round")
            result = await self.fallback.run(request, cause=exc)

        total_ms = (time.perf_counter() - start) * 1000
        result.timing = RoundTiming(started_at=started_at, total_ms=round(total_ms, 2))
        result.metadata.meets_required_confidence = result.confidence >= request.required_confidence

        self.history.put(fingerprint(request.type, request.payload), result)
        logger.info(
            "Completed in %.0fms (confidence=%.3f agreement=%.3f nodes=%d)",
            total_ms, result.confidence, result.agreement_score, result.participating_node_count,
        )
        return result

    def get_node_stats(self) -> list[EvaluatorNode]:
        return self.registry.list_nodes()

    def get_history(self) -> dict[str, ConsensusResult]:
        return self.history.snapshot()
