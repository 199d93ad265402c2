"""FastAPI server — exposes the consensus engine over HTTP."""
from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from consensus.errors import ConsensusUnavailable, InvalidRequest
from consensus.models import get_default_executor
from consensus.runner import ConsensusEngine
from consensus.schemas import ConsensusRequest, ConsensusResult, EvaluatorNode

logger = logging.getLogger(__name__)

app = FastAPI(title="Multi-Node Consensus API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_engine() -> ConsensusEngine:
    """Process-wide engine backed by the Gemini executor."""
    return ConsensusEngine(get_default_executor())


@app.post("/consensus", response_model=ConsensusResult)
async def run_consensus(request: ConsensusRequest, engine: ConsensusEngine = Depends(get_engine)) -> ConsensusResult:
    """Run one consensus round and return the aggregated result."""
    try:
        return await engine.run_consensus(request)
    except InvalidRequest as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except ConsensusUnavailable as exc:
        logger.error("Consensus unavailable: %s", exc)
        raise HTTPException(status_code=503, detail=str(exc)) from exc


@app.get("/nodes", response_model=list[EvaluatorNode])
async def get_nodes(engine: ConsensusEngine = Depends(get_engine)) -> list[EvaluatorNode]:
    """Current node trust state."""
    return engine.get_node_stats()


@app.get("/history", response_model=dict[str, ConsensusResult])
async def get_history(engine: ConsensusEngine = Depends(get_engine)) -> dict[str, ConsensusResult]:
    """Past consensus results keyed by request fingerprint."""
    return engine.get_history()


@app.get("/health")
async def health(engine: ConsensusEngine = Depends(get_engine)) -> dict:
    """Liveness plus node pool and history summary."""
    nodes = engine.get_node_stats()
    return {
        "status": "ok",
        "nodes": len(nodes),
        "average_reliability": round(sum(n.reliability for n in nodes) / len(nodes), 4) if nodes else 0.0,
        "history_size": len(engine.history),
    }
