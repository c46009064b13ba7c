"""Prometheus metrics declarations for structured-chat.

All metrics are declared statically at module level.
Labels use ONLY static enumerations — never question text or raw answers.
"""

from prometheus_client import Counter, Histogram

# ── Request outcomes ──────────────────────────────────────────────

REQUESTS_TOTAL = Counter(
    "structured_chat_requests_total",
    "Structured chat requests by answer variant and outcome",
    ["variant", "outcome"],
)

DISPATCH_SECONDS = Histogram(
    "structured_chat_dispatch_seconds",
    "Time spent submitting a request and aggregating its response",
    ["variant"],
)

# ── Transport ─────────────────────────────────────────────────────

TOKENS_TOTAL = Counter(
    "structured_chat_tokens_total",
    "LLM tokens reported by the transport",
    ["model", "type"],
)

OUTCOME_ANSWERED = "answered"
OUTCOME_DECODE_FAILED = "decode_failed"
OUTCOME_PATTERN_MISMATCH = "pattern_mismatch"
OUTCOME_TRANSPORT_FAILED = "transport_failed"
