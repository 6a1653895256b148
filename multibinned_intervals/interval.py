"""
Closed intervals over the unsigned 64-bit integer domain.
"""

from typing import NamedTuple


MAX_UINT64 = (1 << 64) - 1


class Interval(NamedTuple):
    """
    The closed interval [start, end].

    No normalization is performed: an interval with start > end is stored
    and routed exactly as given.
    """
    start: int
    end: int


def overlaps_closed(a: Interval, b: Interval) -> bool:
    """Check if two closed intervals [a0,a1] and [b0,b1] overlap."""
    return not (a.end < b.start or b.end < a.start)


def check_endpoint(name: str, value: int) -> None:
    """
    Check that an endpoint fits in an unsigned 64-bit integer.

    Raises:
        ValueError: If value is not an int in [0, 2**64 - 1]
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0 or value > MAX_UINT64:
        raise ValueError(f"{name} must be in [0, {MAX_UINT64}], got {value}")
