"""CLI entry point — run one consensus round against the Gemini executor."""
from __future__ import annotations

import asyncio
import json
import logging
import sys

from consensus.config import DEFAULT_MAX_NODES, DEFAULT_TIMEOUT_MS
from consensus.models import get_default_executor
from consensus.runner import ConsensusEngine
from consensus.schemas import ConsensusRequest, RequestType


async def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )

    if len(sys.argv) < 3:
        print("usage: python run.py <generate|analyze|enhance|validate> <prompt> [max_nodes] [timeout_ms]")
        sys.exit(2)

    request_type = RequestType(sys.argv[1])
    prompt = sys.argv[2]
    max_nodes = int(sys.argv[3]) if len(sys.argv) > 3 else DEFAULT_MAX_NODES
    timeout_ms = int(sys.argv[4]) if len(sys.argv) > 4 else DEFAULT_TIMEOUT_MS

    engine = ConsensusEngine(get_default_executor())
    request = ConsensusRequest(type=request_type, payload=prompt, max_nodes=max_nodes, timeout_ms=timeout_ms)

    print(f"\nRequest: {request_type.value}: {prompt}")
    print(f"Max nodes: {max_nodes}, Timeout: {timeout_ms}ms\n")

    result = await engine.run_consensus(request)

    print("\n" + "=" * 60)
    print("CONSENSUS RESULT")
    print("=" * 60)
    print(f"  Confidence:      {result.confidence:.2%}")
    print(f"  Agreement score: {result.agreement_score:.2%} ({result.metadata.agreement_level.value})")
    print(f"  Quality score:   {result.metadata.quality_score:.3f}")
    print(f"  Nodes:           {result.participating_node_count}")
    print(f"  Fallback used:   {result.metadata.fallback_used}")
    print(f"  {result.explanation}")
    print("  Node reliability after round:")
    for node in engine.get_node_stats():
        print(f"    {node.id:<22} {node.reliability:.4f}")
    print("=" * 60)

    out_path = "consensus_result.json"
    with open(out_path, "w") as f:
        json.dump(result.model_dump(mode="json"), f, indent=2, default=str)
    print(f"\nFull result written to {out_path}")


if __name__ == "__main__":
    asyncio.run(main())
