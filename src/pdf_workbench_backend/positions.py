"""
Insertion index resolution for page mutations.

Callers may send any value as a position: a number, a numeric string, garbage
or nothing at all. Resolution never fails; anything that is not a usable index
falls back to appending at the end of the document.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional

from .models import PositionOutcome

_INTEGER_PATTERN = re.compile(r"[+-]?\d+")


@dataclass(frozen=True)
class ResolvedPosition:
    """
    A validated insertion index.

    Attributes:
        index: Zero-based index in ``[0, page_count]``; ``page_count`` means append
        outcome: Whether the requested index was used or the append fallback applied
    """

    index: int
    outcome: PositionOutcome

    @property
    def clamped(self) -> bool:
        return self.outcome is PositionOutcome.CLAMPED


def parse_position(requested: Any) -> Optional[int]:
    """
    Parse a caller-supplied position into an integer.

    The whole value must be an integer: trailing text ("3rd") and fractions
    (1.5) are not truncated, they count as unparseable.

    Args:
        requested: Raw value from a JSON body or a form field

    Returns:
        The integer value, or None if the value is absent or not an integer

    Example:
        >>> parse_position(" 3 ")
        3
        >>> parse_position("3rd") is None
        True
        >>> parse_position(2.0)
        2
    """
    if requested is None or isinstance(requested, bool):
        return None
    if isinstance(requested, int):
        return requested
    if isinstance(requested, float):
        return int(requested) if requested.is_integer() else None
    if isinstance(requested, str):
        candidate = requested.strip()
        if _INTEGER_PATTERN.fullmatch(candidate):
            return int(candidate)
    return None


def resolve_position(requested: Any, page_count: int) -> ResolvedPosition:
    """
    Resolve a requested insertion index against the current page count.

    Absent, unparseable, negative and out-of-range values resolve to
    ``page_count`` (append). Valid values are returned unchanged.

    Args:
        requested: Raw position supplied by the caller
        page_count: Number of pages before the insertion

    Returns:
        ResolvedPosition with the index to use and how it was obtained

    Raises:
        ValueError: If page_count is negative
    """
    if page_count < 0:
        raise ValueError(f"page_count must be non-negative, got {page_count}")

    index = parse_position(requested)
    if index is None or index < 0 or index > page_count:
        return ResolvedPosition(index=page_count, outcome=PositionOutcome.CLAMPED)
    return ResolvedPosition(index=index, outcome=PositionOutcome.REQUESTED)
