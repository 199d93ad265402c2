from __future__ import annotations

import pytest

from consensus.errors import InvalidRequest, NoNodesAvailable
from consensus.schemas import ConsensusRequest, RequestType, Specialty
from consensus.selector import recency_penalty, score_node, select, specialty_multiplier
from tests.fakes import make_node

NOW = 1_000_000.0


def _request(request_type: RequestType = RequestType.GENERATE, max_nodes: int = 4) -> ConsensusRequest:
    return ConsensusRequest(type=request_type, payload="a prompt", max_nodes=max_nodes)


def test_creative_node_ranks_first_for_generate():
    n1 = make_node("N1", Specialty.CREATIVE, weight=1.2, reliability=0.95)
    n2 = make_node("N2", Specialty.TECHNICAL, weight=1.0, reliability=0.92)

    selected = select([n2, n1], _request(max_nodes=2), NOW)

    assert [n.id for n in selected] == ["N1", "N2"]
    assert score_node(n1, _request(), NOW) == pytest.approx(0.95 * 1.2 * 1.3)
    assert score_node(n2, _request(), NOW) == pytest.approx(0.92)


@pytest.mark.parametrize(
    "request_type,specialty,expected",
    [
        (RequestType.GENERATE, Specialty.CREATIVE, 1.3),
        (RequestType.GENERATE, Specialty.BALANCED, 1.1),
        (RequestType.GENERATE, Specialty.TECHNICAL, 1.0),
        (RequestType.ANALYZE, Specialty.TECHNICAL, 1.3),
        (RequestType.ANALYZE, Specialty.AESTHETIC, 1.2),
        (RequestType.ENHANCE, Specialty.AESTHETIC, 1.3),
        (RequestType.ENHANCE, Specialty.CREATIVE, 1.2),
        (RequestType.VALIDATE, Specialty.TECHNICAL, 1.3),
        (RequestType.VALIDATE, Specialty.BALANCED, 1.1),
        (RequestType.VALIDATE, Specialty.AESTHETIC, 1.0),
    ],
)
def test_specialty_multiplier_table(request_type, specialty, expected):
    assert specialty_multiplier(request_type, specialty) == expected


def test_recently_used_nodes_are_penalised():
    fresh = make_node("fresh", reliability=0.9)
    recent = make_node("recent", reliability=0.9, last_used_at=NOW - 10)
    stale = make_node("stale", reliability=0.9, last_used_at=NOW - 31)

    assert recency_penalty(fresh, NOW) == 1.0
    assert recency_penalty(recent, NOW) == 0.8
    assert recency_penalty(stale, NOW) == 1.0
    assert [n.id for n in select([recent, stale, fresh], _request(), NOW)] == ["fresh", "stale", "recent"]


def test_ties_are_broken_by_node_id():
    nodes = [make_node(node_id) for node_id in ("c", "a", "b")]
    assert [n.id for n in select(nodes, _request(), NOW)] == ["a", "b", "c"]


def test_max_nodes_is_clamped_to_pool_size():
    nodes = [make_node("a"), make_node("b")]
    assert len(select(nodes, _request(max_nodes=10), NOW)) == 2


def test_selection_takes_top_k():
    nodes = [
        make_node("low", reliability=0.2),
        make_node("high", reliability=0.9),
        make_node("mid", reliability=0.5),
    ]
    assert [n.id for n in select(nodes, _request(max_nodes=2), NOW)] == ["high", "mid"]


def test_selection_is_deterministic(four_specialty_nodes):
    request = _request(RequestType.ANALYZE, max_nodes=3)
    first = select(four_specialty_nodes, request, NOW)
    for _ in range(5):
        assert select(four_specialty_nodes, request, NOW) == first


def test_zero_max_nodes_is_invalid():
    with pytest.raises(InvalidRequest):
        select([make_node("a")], _request(max_nodes=0), NOW)


def test_empty_pool_has_no_nodes():
    with pytest.raises(NoNodesAvailable):
        select([], _request(), NOW)
