from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

from consensus.errors import NoConsensusReached, NodeError, NodeFailure, NodeTimeout
from consensus.models import TaskExecutor
from consensus.registry import NodeRegistry
from consensus.schemas import ConsensusRequest, EvaluatorNode, NodeResponse, Specialty, clamp
from consensus.specialties import DEFAULT_TRANSFORMS, PayloadTransform, transform_for

logger = logging.getLogger(__name__)


def _field(raw: Any, name: str) -> Any:
    if isinstance(raw, Mapping):
        return raw.get(name)
    return getattr(raw, name, None)


def self_reported_score(raw: Any) -> float | None:
    """The executor's own quality signal: ``confidence``, else ``quality_score``."""
    for name in ("confidence", "quality_score"):
        value = _field(raw, name)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return clamp(float(value))
    return None


def reasoning_text(raw: Any) -> str:
    for name in ("reasoning", "explanation", "analysis"):
        value = _field(raw, name)
        if isinstance(value, str) and value.strip():
            return value
    return ""


class Dispatcher:
    """Fans a request out to the selected nodes and joins what comes back.

    Every branch runs concurrently and is bounded by ``request.timeout_ms``.
    Failed or expired branches are dropped; the join always waits for every
    branch to settle.
    """

    def __init__(
        self,
        executor: TaskExecutor,
        registry: NodeRegistry,
        transforms: Mapping[Specialty, PayloadTransform] | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.executor = executor
        self.registry = registry
        self.transforms = DEFAULT_TRANSFORMS if transforms is None else transforms
        self.clock = clock

    async def _call_node(self, node: EvaluatorNode, request: ConsensusRequest) -> NodeResponse:
        start = time.perf_counter()
        try:
            payload = transform_for(node.specialty, self.transforms)(request.payload)
            raw = await asyncio.wait_for(
                self.executor.execute(payload, request.type),
                timeout=request.timeout_ms / 1000,
            )
        except asyncio.TimeoutError as exc:
            raise NodeTimeout(node.id, f"no answer within {request.timeout_ms}ms") from exc
        except Exception as exc:
            raise NodeError(node.id, f"{type(exc).__name__}: {exc}") from exc
        latency_ms = (time.perf_counter() - start) * 1000

        score = self_reported_score(raw)
        return NodeResponse(
            node_id=node.id,
            raw_result=raw,
            confidence=node.reliability if score is None else score,
            self_reported_score=score,
            latency_ms=round(latency_ms, 2),
            reasoning_text=reasoning_text(raw),
            specialty_metadata={
                "specialty": node.specialty.value,
                "weight": node.weight,
                "reliability": node.reliability,
            },
        )

    async def _branch(self, node: EvaluatorNode, request: ConsensusRequest) -> NodeResponse | None:
        try:
            return await self._call_node(node, request)
        except NodeTimeout as failure:
            logger.warning("Dropping %s from round: %s", node.name, failure)
        except NodeFailure as failure:
            logger.warning("Dropping %s from round: %s", node.name, failure, exc_info=failure.__cause__)
        return None

    async def dispatch(self, nodes: list[EvaluatorNode], request: ConsensusRequest) -> list[NodeResponse]:
        """Run all nodes in parallel and return the responses that arrived in time."""
        results = await asyncio.gather(*(self._branch(node, request) for node in nodes))
        responses = [r for r in results if r is not None]

        if not responses:
            raise NoConsensusReached(f"All {len(nodes)} node(s) failed or timed out")

        self.registry.mark_used((r.node_id for r in responses), at=self.clock())
        logger.info("Received %d/%d node responses", len(responses), len(nodes))
        return responses
