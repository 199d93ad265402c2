"""Bounded record of past consensus results."""
from __future__ import annotations

import hashlib
import json
import threading
from collections import OrderedDict
from typing import Any

from consensus.config import HISTORY_CAPACITY
from consensus.schemas import ConsensusResult, RequestType


def fingerprint(request_type: RequestType, payload: Any) -> str:
    """SHA-256 of the request type and payload (deterministic via sort_keys)."""
    canonical = json.dumps({"type": request_type.value, "payload": payload}, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


class ConsensusHistory:
    """Fixed-capacity map with first-in-first-out eviction.

    Written by the engine after each round and read only through ``get`` and
    ``snapshot``. Re-putting a fingerprint replaces its result in place
    without moving it in the eviction order.
    """

    def __init__(self, capacity: int = HISTORY_CAPACITY):
        if capacity <= 0:
            raise ValueError("History capacity must be positive")
        self.capacity = capacity
        self._entries: OrderedDict[str, ConsensusResult] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def put(self, key: str, result: ConsensusResult) -> None:
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.capacity:
                self._entries.popitem(last=False)
            self._entries[key] = result.model_copy(deep=True)

    def get(self, key: str) -> ConsensusResult | None:
        with self._lock:
            result = self._entries.get(key)
            return result.model_copy(deep=True) if result else None

    def snapshot(self) -> dict[str, ConsensusResult]:
        with self._lock:
            return {k: v.model_copy(deep=True) for k, v in self._entries.items()}
