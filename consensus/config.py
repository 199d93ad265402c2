import os

from dotenv import load_dotenv

load_dotenv()

# ── Request defaults ────────────────────────────────────────────────
DEFAULT_MAX_NODES = 4
DEFAULT_TIMEOUT_MS = 30_000
DEFAULT_REQUIRED_CONFIDENCE = 0.7

# ── Node selection ──────────────────────────────────────────────────
SPECIALTY_BOOSTS: dict[str, dict[str, float]] = {
    "generate": {"creative": 1.3, "balanced": 1.1},
    "analyze": {"technical": 1.3, "aesthetic": 1.2},
    "enhance": {"aesthetic": 1.3, "creative": 1.2},
    "validate": {"technical": 1.3, "balanced": 1.1},
}
RECENCY_WINDOW_S = 30.0     # nodes used within this window are penalised
RECENCY_PENALTY = 0.8

# ── Aggregation ─────────────────────────────────────────────────────
SELF_REPORT_BLEND = 0.5     # weight of the executor's own score vs node reliability
REASONING_BOOST = 1.1
CONFIDENCE_FLOOR = 0.1
HIGH_AGREEMENT_VARIANCE = 0.1
MEDIUM_AGREEMENT_VARIANCE = 0.25
PAIR_AGREEMENT_DELTA = 0.2  # two confidences closer than this "agree"
QUALITY_CONFIDENCE_WEIGHT = 0.4
QUALITY_AGREEMENT_WEIGHT = 0.4
QUALITY_PARTICIPATION_WEIGHT = 0.2
TARGET_NODE_COUNT = 4

# ── Reliability ─────────────────────────────────────────────────────
ADJUSTMENT_RATE = 0.05
RELIABILITY_FLOOR = 0.1

# ── Fallback / history ──────────────────────────────────────────────
FALLBACK_CONFIDENCE = 0.7
FALLBACK_NODE_ID = "fallback"
HISTORY_CAPACITY = 1000

# ── Gemini executor ─────────────────────────────────────────────────
TEXT_MODEL = os.environ.get("CONSENSUS_TEXT_MODEL", "gemini-2.0-flash")
IMAGE_MODEL = os.environ.get("CONSENSUS_IMAGE_MODEL", "gemini-2.0-flash-preview-image-generation")
TEMPERATURE = 0.8
