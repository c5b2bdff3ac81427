"""
Summary Builder Module

Builds the summary record of a reconciliation run from the matcher's
partition.

This module is responsible for:
- Counting records per output category
- Totalling the first value column for matches and missing rows
- Totalling the absolute differences of all variances
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence

from ledgerrecon.core.recon.matcher import MatchPartition
from ledgerrecon.core.recon.models import SummaryTotals, VariancePair
from ledgerrecon.utils.pandas_utils import numeric_or_zero


logger = logging.getLogger(__name__)


class SummaryBuilder:
    """
    Build reconciliation summary totals.

    Matches and missing rows are totalled on the *first* value column only.
    The variance total is the sum of absolute recorded differences across
    every out-of-tolerance column of every variance.

    Example:
        >>> builder = SummaryBuilder(["Amount"])
        >>> totals = builder.build(partition)
        >>> print(f"Variance: {totals.variance_amount}")
    """

    def __init__(self, value_columns: Sequence[str]):
        """
        Initialize the summary builder.

        Args:
            value_columns: Value columns of the run, in order
        """
        self.value_columns = list(value_columns)

    @property
    def amount_column(self):
        """Column used for per-category amounts, or None when there is none."""
        return self.value_columns[0] if self.value_columns else None

    def build(self, partition: MatchPartition) -> SummaryTotals:
        """
        Build complete summary totals.

        Args:
            partition: Matcher output

        Returns:
            SummaryTotals with counts and amounts per category
        """
        return SummaryTotals(
            match_count=len(partition.matches),
            match_amount=self._sum_amount(partition.matches),
            missing_from_left_count=len(partition.missing_from_left),
            missing_from_left_amount=self._sum_amount(partition.missing_from_left),
            missing_from_right_count=len(partition.missing_from_right),
            missing_from_right_amount=self._sum_amount(partition.missing_from_right),
            variance_count=len(partition.variances),
            variance_amount=self._sum_variances(partition.variances),
        )

    def _sum_amount(self, rows: Iterable[Mapping[str, object]]) -> float:
        """Sum the first value column across rows (0.0 without value columns)."""
        col = self.amount_column
        if col is None:
            return 0.0
        return sum(numeric_or_zero(row.get(col)) for row in rows)

    @staticmethod
    def _sum_variances(variances: Iterable[VariancePair]) -> float:
        """Sum of absolute differences across all recorded variance columns."""
        return sum(pair.total_abs_difference for pair in variances)


def calculate_summary_totals(
    partition: MatchPartition,
    value_columns: Sequence[str],
) -> SummaryTotals:
    """
    Calculate summary totals for a partition.

    Convenience function that creates a SummaryBuilder and builds totals.
    """
    return SummaryBuilder(value_columns).build(partition)


__all__ = [
    'SummaryBuilder',
    'calculate_summary_totals',
]
