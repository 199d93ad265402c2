"""Weighted multi-node consensus engine."""
from consensus.errors import ConsensusUnavailable, InvalidRequest
from consensus.models import CallableExecutor, ExecutorResult, TaskExecutor
from consensus.registry import DEFAULT_NODES, NodeRegistry
from consensus.runner import ConsensusEngine
from consensus.schemas import ConsensusRequest, ConsensusResult, EvaluatorNode, RequestType, Specialty

__all__ = [
    "DEFAULT_NODES",
    "CallableExecutor",
    "ConsensusEngine",
    "ConsensusRequest",
    "ConsensusResult",
    "ConsensusUnavailable",
    "EvaluatorNode",
    "ExecutorResult",
    "InvalidRequest",
    "NodeRegistry",
    "RequestType",
    "Specialty",
    "TaskExecutor",
]
