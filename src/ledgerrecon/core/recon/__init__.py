"""
Reconciliation Package

The two-dataset reconciliation engine.

Includes:
- build_composite_key: Case/whitespace-insensitive composite match key
- match_rows: One-pass hash join partitioning both datasets
- classify_pair: Tolerance-based variance classification
- SummaryBuilder: Counts and monetary totals per category
- reconcile / run_reconciliation: Engine entry points
"""

from ledgerrecon.core.recon.keys import KEY_SEPARATOR, build_composite_key
from ledgerrecon.core.recon.matcher import MatchPartition, match_rows
from ledgerrecon.core.recon.models import (
    ConfigurationError,
    Dataset,
    ReconciliationConfig,
    ReconciliationResult,
    SummaryTotals,
    ToleranceMode,
    VariancePair,
)
from ledgerrecon.core.recon.run_reconciliation import reconcile, run_reconciliation
from ledgerrecon.core.recon.summary_builder import SummaryBuilder, calculate_summary_totals
from ledgerrecon.core.recon.variance import NOISE_FLOOR, classify_pair, resolve_value_columns

__all__ = [
    'KEY_SEPARATOR',
    'NOISE_FLOOR',
    'ConfigurationError',
    'Dataset',
    'MatchPartition',
    'ReconciliationConfig',
    'ReconciliationResult',
    'SummaryBuilder',
    'SummaryTotals',
    'ToleranceMode',
    'VariancePair',
    'build_composite_key',
    'calculate_summary_totals',
    'classify_pair',
    'match_rows',
    'reconcile',
    'resolve_value_columns',
    'run_reconciliation',
]
