"""
Shared utility functions for the block KPI toolkit.

Consolidates logic every metric script needs:
- JSON-RPC quantity decoding and encoding
- Clamping a requested block range to what the node can serve
"""

from typing import Any, Optional, Tuple

from .constants import DEFAULT_RANGE_FLOOR, DEFAULT_WINDOW


def hex_to_int(value: Any) -> Optional[int]:
    """Decode a JSON-RPC quantity.

    Accepts ``0x``-prefixed hex strings, decimal strings and plain ints.
    Returns ``None`` for anything else.

    >>> hex_to_int("0x1f")
    31
    >>> hex_to_int(7)
    7
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip().lower()
    try:
        if text.startswith("0x"):
            return int(text, 16)
        return int(text)
    except ValueError:
        return None


def to_quantity(number: int) -> str:
    """Encode a block number as a JSON-RPC quantity.

    >>> to_quantity(255)
    '0xff'
    """
    return hex(number)


def clamp_block_range(latest: int,
                      start: Optional[int] = None,
                      end: Optional[int] = None,
                      window: int = DEFAULT_WINDOW,
                      floor: int = DEFAULT_RANGE_FLOOR) -> Tuple[int, int]:
    """Resolve the closed range ``[start, end]`` a metric should cover.

    Missing bounds default to the trailing ``window`` blocks ending at
    ``latest``. The start is clamped up to ``floor`` and the end down to
    ``latest``. A start past the end is returned as-is; callers treat it
    as an empty range.
    """
    if start is None:
        start = latest - window + 1
    if end is None:
        end = latest
    return max(start, floor), min(end, latest)
