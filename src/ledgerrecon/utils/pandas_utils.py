"""
Centralized numeric coercion utilities for reconciliation inputs.

Provides explicit, tested functions for turning raw cell text into numbers
the same way for every dataset that reaches the engine:
- Currency symbol and thousands separator stripping ("$1,234.56" -> 1234.56)
- Numeric column detection over a leading sample of rows

Usage:
    from ledgerrecon.utils.pandas_utils import coerce_cell, detect_numeric_columns

    coerce_cell("$1,250.00")     # 1250.0
    coerce_cell("INV-001")       # "INV-001"

    detect_numeric_columns(rows, ["Invoice ID", "Amount"])   # ["Amount"]
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np


logger = logging.getLogger(__name__)

# Characters removed before numeric coercion
_STRIP_PATTERN = re.compile(r"[$,]")

# Leading rows inspected when deciding whether a column is numeric
NUMERIC_SAMPLE_SIZE = 10


def is_numeric_value(value: Any) -> bool:
    """Return True for real numbers (bool and NaN excluded)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float, np.integer, np.floating)):
        return not math.isnan(float(value))
    return False


def numeric_or_zero(value: Any) -> float:
    """Read a cell as a float, treating missing or non-numeric values as 0.0."""
    return float(value) if is_numeric_value(value) else 0.0


def coerce_cell(raw: Optional[str]) -> Union[float, str]:
    """
    Coerce a single raw cell to a number when possible.

    Currency symbols ("$") and thousands separators (",") are stripped before
    parsing. Values that do not parse to a finite float are returned as the
    trimmed original text.

    Examples:
        >>> coerce_cell("15,000")
        15000.0
        >>> coerce_cell(" $8,750.50 ")
        8750.5
        >>> coerce_cell("2025-01-15")
        '2025-01-15'
        >>> coerce_cell("")
        ''
    """
    if raw is None:
        return ""
    text = str(raw).strip()
    cleaned = _STRIP_PATTERN.sub("", text).strip()
    if cleaned == "":
        return text
    try:
        number = float(cleaned)
    except ValueError:
        return text
    if math.isnan(number) or math.isinf(number):
        return text
    return number


def detect_numeric_columns(
    rows: Sequence[Mapping[str, Any]],
    columns: Iterable[str],
    sample_size: int = NUMERIC_SAMPLE_SIZE,
) -> List[str]:
    """
    Return the columns whose leading sample is mostly numeric.

    A column is numeric when more than half of the first
    ``min(sample_size, len(rows))`` rows hold a numeric value. Column order is
    preserved. An empty row collection has no numeric columns.
    """
    if not rows:
        return []
    sample = rows[:min(sample_size, len(rows))]
    numeric = []
    for col in columns:
        numeric_count = sum(1 for row in sample if is_numeric_value(row.get(col)))
        if numeric_count > len(sample) * 0.5:
            numeric.append(col)
    return numeric


def compute_numeric_sums(
    rows: Iterable[Mapping[str, Any]],
    numeric_columns: Iterable[str],
) -> Dict[str, float]:
    """Sum each numeric column, skipping non-numeric cells."""
    rows = list(rows)
    return {
        col: sum(numeric_or_zero(row.get(col)) for row in rows)
        for col in numeric_columns
    }


__all__ = [
    'NUMERIC_SAMPLE_SIZE',
    'is_numeric_value',
    'numeric_or_zero',
    'coerce_cell',
    'detect_numeric_columns',
    'compute_numeric_sums',
]
