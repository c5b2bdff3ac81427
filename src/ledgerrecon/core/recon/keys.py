"""
Composite key construction.

A composite key is the case- and whitespace-insensitive text of each match
key column, in order, joined with ``KEY_SEPARATOR``. The same function is used
for both sides of a run, so it doubles as join key and lookup key.

Example:
    >>> build_composite_key({"id": " INV-001 ", "region": "EU"}, ["id", "region"])
    'inv-001||eu'
"""

import math
from typing import Any, Mapping, Sequence

from ledgerrecon.core.recon.models import ConfigurationError


KEY_SEPARATOR = "||"


def value_to_text(value: Any) -> str:
    """
    Render a cell as text for key construction.

    Missing values become "", integral floats drop their fractional part
    (15000.0 -> "15000") and text is returned unchanged.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float):
        if math.isnan(value):
            return "nan"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def build_composite_key(row: Mapping[str, Any], key_columns: Sequence[str]) -> str:
    """
    Derive the composite matching key for a row.

    Args:
        row: Row mapping column name to value
        key_columns: Ordered, non-empty list of key column names

    Returns:
        Lowercased, trimmed key segments joined by ``KEY_SEPARATOR``.
        Columns absent from the row contribute an empty segment.

    Raises:
        ConfigurationError: If key_columns is empty
    """
    if not key_columns:
        raise ConfigurationError("Cannot build a composite key from zero key columns")
    return KEY_SEPARATOR.join(
        value_to_text(row.get(col)).lower().strip() for col in key_columns
    )


__all__ = [
    "KEY_SEPARATOR",
    "value_to_text",
    "build_composite_key",
]
