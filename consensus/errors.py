"""Exception hierarchy for the consensus engine."""
from __future__ import annotations


class ConsensusError(Exception):
    """Base class for engine-originated errors."""


class InvalidRequest(ConsensusError):
    """Raised before dispatch when a request is malformed."""


class RoundFailed(ConsensusError):
    """Base class for failures that hand the request to the fallback path."""


class NoNodesAvailable(RoundFailed):
    """Raised when the registry is empty or selection yields nothing."""


class NoConsensusReached(RoundFailed):
    """Raised when every dispatched branch failed or timed out."""


class NodeFailure(ConsensusError):
    """Base class for single-branch failures. Never surfaced to callers."""

    def __init__(self, node_id: str, message: str) -> None:
        super().__init__(f"{node_id}: {message}")
        self.node_id = node_id


class NodeTimeout(NodeFailure):
    """Raised when a node does not answer within the request timeout."""


class NodeError(NodeFailure):
    """Raised when the task executor fails for a node."""


class ConsensusUnavailable(ConsensusError):
    """Raised when both the round and the fallback call failed."""
