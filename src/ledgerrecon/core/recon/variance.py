"""
Variance classification for key-matched row pairs.

For each value column the classifier computes ``diff = left - right``
(missing or non-numeric cells read as 0.0). Differences within
``NOISE_FLOOR`` are ignored. The rest are tested against the tolerance:

    absolute:   out of tolerance when |diff| > tolerance
    percentage: out of tolerance when |diff| / max(|left|, |right|) * 100 > tolerance
                (never out of tolerance when both sides are zero)

A pair with at least one out-of-tolerance column is a variance; only those
columns are recorded. Otherwise the pair is a match.

Key Functions:
    - resolve_value_columns(): Ordered union of numeric columns minus match keys
    - is_out_of_tolerance(): Tolerance test for a single column
    - classify_pair(): Differences mapping for a pair (empty means match)
"""

import logging
from typing import Dict, Iterable, List, Mapping, Sequence, Union

from ledgerrecon.core.recon.models import ToleranceMode
from ledgerrecon.utils.pandas_utils import numeric_or_zero

logger = logging.getLogger(__name__)


# Differences at or below this magnitude are floating-point noise
NOISE_FLOOR = 0.001


def resolve_value_columns(
    left_numeric: Iterable[str],
    right_numeric: Iterable[str],
    key_columns: Iterable[str],
) -> List[str]:
    """
    Build the ordered value-column list for a run.

    Left numeric columns come first in their detected order, then right-only
    numeric columns. Match key columns are excluded.

    Examples:
        >>> resolve_value_columns(["Amount", "Fee"], ["Amount", "Tax"], ["Invoice ID"])
        ['Amount', 'Fee', 'Tax']
        >>> resolve_value_columns(["id", "Amount"], ["id", "Amount"], ["id"])
        ['Amount']
    """
    keys = set(key_columns)
    ordered: List[str] = []
    for col in list(left_numeric) + list(right_numeric):
        if col not in keys and col not in ordered:
            ordered.append(col)
    return ordered


def is_out_of_tolerance(
    left_value: float,
    right_value: float,
    tolerance: float,
    tolerance_mode: Union[ToleranceMode, str],
) -> bool:
    """Return True when the difference between two values exceeds the tolerance."""
    diff = left_value - right_value
    if abs(diff) <= NOISE_FLOOR:
        return False

    if ToleranceMode(tolerance_mode) is ToleranceMode.ABSOLUTE:
        return abs(diff) > tolerance

    base = max(abs(left_value), abs(right_value))
    if base > 0:
        return (abs(diff) / base) * 100 > tolerance
    return False


def classify_pair(
    left_row: Mapping[str, object],
    right_row: Mapping[str, object],
    value_columns: Sequence[str],
    tolerance: float,
    tolerance_mode: Union[ToleranceMode, str] = ToleranceMode.ABSOLUTE,
) -> Dict[str, float]:
    """
    Compare a key-matched pair on every value column.

    Args:
        left_row: Row from the left dataset
        right_row: Row from the right dataset
        value_columns: Columns to compare, in order
        tolerance: Allowed deviation (units or percent depending on mode)
        tolerance_mode: ABSOLUTE or PERCENTAGE

    Returns:
        Mapping of out-of-tolerance column -> signed difference (left - right).
        An empty mapping means the pair is a match.
    """
    mode = ToleranceMode(tolerance_mode)
    differences: Dict[str, float] = {}

    for col in value_columns:
        v1 = numeric_or_zero(left_row.get(col))
        v2 = numeric_or_zero(right_row.get(col))
        if is_out_of_tolerance(v1, v2, tolerance, mode):
            differences[col] = v1 - v2

    return differences


__all__ = [
    "NOISE_FLOOR",
    "resolve_value_columns",
    "is_out_of_tolerance",
    "classify_pair",
]
