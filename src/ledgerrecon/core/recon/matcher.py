"""
Matcher: one-pass hash join of two row collections on composite key.

The right side is indexed once (composite key -> row, last write wins on
duplicate keys). Left rows are then probed in order:

- no counterpart: the left row is missing from the right
- counterpart found: the key is consumed and the pair is handed to the
  classifier, which returns the out-of-tolerance differences (empty = match)

Right rows whose key was never consumed are missing from the left.
Left order is preserved in matches, variances and missing-from-right; right
order is preserved in missing-from-left.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Sequence, Set

from ledgerrecon.core.recon.keys import build_composite_key
from ledgerrecon.core.recon.models import Row, VariancePair


logger = logging.getLogger(__name__)


PairClassifier = Callable[[Row, Row], Mapping[str, float]]


@dataclass
class MatchPartition:
    """Partition of both datasets produced by ``match_rows``."""
    matches: List[Row] = field(default_factory=list)
    variances: List[VariancePair] = field(default_factory=list)
    missing_from_right: List[Row] = field(default_factory=list)
    missing_from_left: List[Row] = field(default_factory=list)
    duplicate_right_keys: List[str] = field(default_factory=list)


def build_lookup(
    rows: Sequence[Row],
    key_columns: Sequence[str],
) -> tuple[Dict[str, Row], List[str]]:
    """
    Index rows by composite key.

    A later row with an already-seen key overwrites the earlier one.

    Returns:
        Tuple of (key -> row lookup, duplicate keys in first-seen order)
    """
    lookup: Dict[str, Row] = {}
    duplicates: List[str] = []
    for row in rows:
        key = build_composite_key(row, key_columns)
        if key in lookup and key not in duplicates:
            duplicates.append(key)
        lookup[key] = row
    return lookup, duplicates


def match_rows(
    left_rows: Sequence[Row],
    right_rows: Sequence[Row],
    key_columns: Sequence[str],
    classify: PairClassifier,
) -> MatchPartition:
    """
    Partition the left rows against the right rows on composite key.

    Args:
        left_rows: Left dataset rows, in order
        right_rows: Right dataset rows, in order
        key_columns: Ordered match key columns
        classify: Callable returning the differences for a matched pair

    Returns:
        MatchPartition with matches, variances, and missing rows on each side
    """
    partition = MatchPartition()

    right_lookup, duplicates = build_lookup(right_rows, key_columns)
    partition.duplicate_right_keys = duplicates
    if duplicates:
        logger.warning(
            f"Right dataset has {len(duplicates)} duplicate composite key(s); "
            f"the last row per key is used for matching",
            extra={"duplicate_keys": duplicates[:10]},
        )

    consumed: Set[str] = set()

    for left_row in left_rows:
        key = build_composite_key(left_row, key_columns)
        right_row = right_lookup.get(key)

        if right_row is None:
            partition.missing_from_right.append(left_row)
            continue

        consumed.add(key)
        differences = classify(left_row, right_row)
        if differences:
            partition.variances.append(
                VariancePair(left=left_row, right=right_row, differences=dict(differences))
            )
        else:
            partition.matches.append(left_row)

    for right_row in right_rows:
        if build_composite_key(right_row, key_columns) not in consumed:
            partition.missing_from_left.append(right_row)

    return partition


__all__ = [
    "MatchPartition",
    "build_lookup",
    "match_rows",
]
