from __future__ import annotations

import asyncio
import logging
import time

from consensus.config import FALLBACK_CONFIDENCE, FALLBACK_NODE_ID
from consensus.dispatcher import reasoning_text
from consensus.errors import ConsensusUnavailable
from consensus.models import TaskExecutor
from consensus.schemas import (
    AgreementLevel,
    ConsensusMetadata,
    ConsensusRequest,
    ConsensusResult,
    NodeResponse,
)

logger = logging.getLogger(__name__)


class FallbackController:
    """One degraded, untransformed call used when a full round fails."""

    def __init__(self, executor: TaskExecutor):
        self.executor = executor

    async def run(self, request: ConsensusRequest, cause: BaseException | None = None) -> ConsensusResult:
        logger.warning("Falling back to single executor call (cause: %s)", cause)
        start = time.perf_counter()
        try:
            raw = await asyncio.wait_for(
                self.executor.execute(request.payload, request.type),
                timeout=request.timeout_ms / 1000,
            )
        except Exception as exc:
            logger.exception("Fallback call failed")
            raise ConsensusUnavailable(f"Both consensus and fallback failed: {exc}") from exc
        latency_ms = (time.perf_counter() - start) * 1000

        return ConsensusResult(
            final_result=raw,
            confidence=FALLBACK_CONFIDENCE,
            agreement_score=1.0,
            participating_node_count=1,
            per_node_responses=[
                NodeResponse(
                    node_id=FALLBACK_NODE_ID,
                    raw_result=raw,
                    confidence=FALLBACK_CONFIDENCE,
                    latency_ms=round(latency_ms, 2),
                    reasoning_text=reasoning_text(raw) or "Fallback single node execution",
                    specialty_metadata={"executor": self.executor.executor_id},
                )
            ],
            explanation="fallback path used",
            metadata=ConsensusMetadata(
                agreement_level=AgreementLevel.HIGH,
                average_confidence=FALLBACK_CONFIDENCE,
                quality_score=FALLBACK_CONFIDENCE,
                fallback_used=True,
            ),
        )
