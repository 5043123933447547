"""
Shared constants for the block KPI toolkit.

Centralizes the window sizes, seeds and rounding rules that every metric
script relies on.
"""

# ---------------------------------------------------------------------------
# Block ranges
# ---------------------------------------------------------------------------

DEFAULT_WINDOW: int = 100
"""Number of trailing blocks inspected when no explicit range is given."""

DIFFICULTY_WINDOW: int = 128
"""Trailing window used by the raw difficulty listing."""

DEFAULT_RANGE_FLOOR: int = 1
"""Lowest block fetched by default (genesis has no predecessor)."""

ORPHAN_RANGE_FLOOR: int = 0
"""The orphan-count RPC also reports blocks seen at genesis height."""

# ---------------------------------------------------------------------------
# Reductions
# ---------------------------------------------------------------------------

SENTINEL: float = -1.0
"""Reported for a statistic that has too few samples to be computed."""

STAT_DECIMALS: int = 2
"""Block time statistics are rounded to this many decimals."""

ORPHAN_RATE_DECIMALS: int = 3

DIFFICULTY_SEED: int = 1
"""Starting value of both cumulative PoW and PoS difficulty sums."""

# ---------------------------------------------------------------------------
# RPC
# ---------------------------------------------------------------------------

DEFAULT_RPC_URL: str = "http://127.0.0.1:8545"

DEFAULT_TIMEOUT_SECS: float = 30.0

JSONRPC_VERSION: str = "2.0"
