from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from consensus.config import DEFAULT_MAX_NODES, DEFAULT_REQUIRED_CONFIDENCE, DEFAULT_TIMEOUT_MS


def clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, value))


# ── Nodes ───────────────────────────────────────────────────────────

class Specialty(str, Enum):
    CREATIVE = "creative"
    TECHNICAL = "technical"
    AESTHETIC = "aesthetic"
    BALANCED = "balanced"


class EvaluatorNode(BaseModel):
    id: str
    name: str
    specialty: Specialty
    weight: float = Field(gt=0.0)
    reliability: float
    last_used_at: float | None = None                    # epoch seconds of last successful answer


# ── Requests / responses ────────────────────────────────────────────

class RequestType(str, Enum):
    GENERATE = "generate"
    ANALYZE = "analyze"
    ENHANCE = "enhance"
    VALIDATE = "validate"


class ConsensusRequest(BaseModel):
    type: RequestType
    payload: Any
    required_confidence: float = DEFAULT_REQUIRED_CONFIDENCE
    max_nodes: int = DEFAULT_MAX_NODES                   # range checked by the engine, not here
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    metadata: dict[str, Any] = Field(default_factory=dict)


class NodeResponse(BaseModel):
    node_id: str
    raw_result: Any = None
    confidence: float
    self_reported_score: float | None = None
    latency_ms: float = 0.0
    reasoning_text: str = ""
    specialty_metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, v: float) -> float:
        return clamp(v)

    @field_validator("self_reported_score")
    @classmethod
    def _clamp_self_report(cls, v: float | None) -> float | None:
        return None if v is None else clamp(v)


# ── Aggregated output ───────────────────────────────────────────────

class AgreementLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ConsensusMetadata(BaseModel):
    agreement_level: AgreementLevel
    average_confidence: float
    quality_score: float = Field(ge=0.0, le=1.0)
    meets_required_confidence: bool | None = None        # null until the engine compares against the request
    fallback_used: bool = False


class RoundTiming(BaseModel):
    started_at: float = 0.0
    total_ms: float = 0.0


class ConsensusResult(BaseModel):
    final_result: Any = None
    confidence: float = Field(ge=0.0, le=1.0)
    agreement_score: float = Field(ge=0.0, le=1.0)
    participating_node_count: int = Field(ge=0)
    per_node_responses: list[NodeResponse] = Field(default_factory=list)
    explanation: str = ""
    metadata: ConsensusMetadata
    timing: RoundTiming = Field(default_factory=RoundTiming)
