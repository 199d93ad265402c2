from __future__ import annotations

import pytest

from consensus.history import ConsensusHistory, fingerprint
from consensus.schemas import AgreementLevel, ConsensusMetadata, ConsensusResult, RequestType


def _result(tag: str) -> ConsensusResult:
    return ConsensusResult(
        final_result=tag,
        confidence=0.5,
        agreement_score=1.0,
        participating_node_count=1,
        metadata=ConsensusMetadata(agreement_level=AgreementLevel.HIGH, average_confidence=0.5, quality_score=0.5),
    )


def test_fingerprint_is_deterministic_and_type_sensitive():
    payload = {"prompt": "a cat", "style": "ink"}
    same_payload_reordered = {"style": "ink", "prompt": "a cat"}

    assert fingerprint(RequestType.GENERATE, payload) == fingerprint(RequestType.GENERATE, same_payload_reordered)
    assert fingerprint(RequestType.GENERATE, payload) != fingerprint(RequestType.ANALYZE, payload)
    assert len(fingerprint(RequestType.GENERATE, "x")) == 64


def test_fifo_eviction():
    history = ConsensusHistory(capacity=2)
    history.put("a", _result("a"))
    history.put("b", _result("b"))
    history.put("c", _result("c"))

    assert history.get("a") is None
    assert list(history.snapshot()) == ["b", "c"]


def test_reput_refreshes_value_without_moving():
    history = ConsensusHistory(capacity=2)
    history.put("a", _result("a1"))
    history.put("b", _result("b"))
    history.put("a", _result("a2"))
    history.put("c", _result("c"))

    assert history.get("a") is None
    assert history.get("b").final_result == "b"
    assert len(history) == 2


def test_snapshot_is_a_copy():
    history = ConsensusHistory()
    history.put("a", _result("a"))
    snapshot = history.snapshot()
    snapshot["a"].final_result = "mutated"
    snapshot["z"] = _result("z")

    assert history.get("a").final_result == "a"
    assert history.get("z") is None


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        ConsensusHistory(capacity=0)
