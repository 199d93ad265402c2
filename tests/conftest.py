from __future__ import annotations

from typing import Any

import pytest

from consensus.registry import NodeRegistry
from consensus.reliability import ReliabilityUpdater
from consensus.runner import ConsensusEngine
from consensus.schemas import EvaluatorNode, Specialty
from tests.fakes import TAGGING_TRANSFORMS, FakeExecutor, FrozenClock, make_node


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def four_specialty_nodes() -> list[EvaluatorNode]:
    return [
        make_node("creative", Specialty.CREATIVE, weight=1.2, reliability=0.95),
        make_node("technical", Specialty.TECHNICAL, weight=1.0, reliability=0.92),
        make_node("aesthetic", Specialty.AESTHETIC, weight=1.1, reliability=0.88),
        make_node("balanced", Specialty.BALANCED, weight=1.0, reliability=0.90),
    ]


@pytest.fixture
def make_engine(clock: FrozenClock):
    def _make_engine(
        nodes: list[EvaluatorNode],
        executor: FakeExecutor,
        reliability_enabled: bool = True,
        **kwargs: Any,
    ) -> ConsensusEngine:
        return ConsensusEngine(
            executor,
            registry=NodeRegistry(nodes),
            transforms=TAGGING_TRANSFORMS,
            reliability_updater=ReliabilityUpdater(enabled=reliability_enabled),
            clock=clock,
            **kwargs,
        )

    return _make_engine
