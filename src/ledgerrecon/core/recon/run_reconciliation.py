"""
Headless Reconciliation Engine (run_reconciliation)

Provides the entry points for reconciling two datasets without a user
interface. ``reconcile()`` is the pure engine function; ``run_reconciliation()``
wraps it with parameter validation and a status envelope for the CLI and API.

Usage:
    from ledgerrecon.core.recon.run_reconciliation import reconcile, run_reconciliation

    config = ReconciliationConfig(key_columns=("Invoice ID",), tolerance=10)
    result = reconcile(left_dataset, right_dataset, config)

    envelope = run_reconciliation(left_dataset, right_dataset, {
        'key_columns': ['Invoice ID'],
        'tolerance': 10,
        'tolerance_mode': 'absolute',
    })

    # envelope contains:
    # - status: str - 'SUCCESS', 'WARNING' or 'ERROR'
    # - result: ReconciliationResult or None
    # - errors / warnings: List[str]
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import partial
from typing import Any, Dict, Iterable, List, Mapping, Union

from ledgerrecon.core.recon.matcher import match_rows
from ledgerrecon.core.recon.models import (
    ConfigurationError,
    Dataset,
    ReconciliationConfig,
    ReconciliationResult,
)
from ledgerrecon.core.recon.profiles import get_profile
from ledgerrecon.core.recon.summary_builder import SummaryBuilder
from ledgerrecon.core.recon.variance import classify_pair, resolve_value_columns


logger = logging.getLogger(__name__)


DatasetLike = Union[Dataset, Iterable[Mapping[str, Any]]]


def _as_dataset(data: DatasetLike, default_name: str) -> Dataset:
    if isinstance(data, Dataset):
        return data
    return Dataset.from_rows(data, name=default_name)


def reconcile(
    left: DatasetLike,
    right: DatasetLike,
    config: ReconciliationConfig,
) -> ReconciliationResult:
    """
    Reconcile two datasets.

    This function is pure and deterministic:
    1. Resolve value columns (explicit, or numeric columns minus match keys)
    2. Partition rows with the composite-key matcher
    3. Classify each matched pair against the tolerance policy
    4. Aggregate counts and totals

    Args:
        left: Left dataset (e.g. internal ledger) or a list of rows
        right: Right dataset (e.g. external statement) or a list of rows
        config: Validated reconciliation configuration

    Returns:
        ReconciliationResult with the four categories and the summary
    """
    left_ds = _as_dataset(left, "left")
    right_ds = _as_dataset(right, "right")

    if config.value_columns is not None:
        value_columns = [c for c in config.value_columns if c not in config.key_columns]
    else:
        value_columns = resolve_value_columns(
            left_ds.numeric_columns,
            right_ds.numeric_columns,
            config.key_columns,
        )

    classifier = partial(
        classify_pair,
        value_columns=value_columns,
        tolerance=config.tolerance,
        tolerance_mode=config.tolerance_mode,
    )

    partition = match_rows(left_ds.rows, right_ds.rows, config.key_columns, classifier)
    summary = SummaryBuilder(value_columns).build(partition)

    logger.info(
        "Reconciliation complete",
        extra={
            "left_rows": left_ds.row_count,
            "right_rows": right_ds.row_count,
            "matches": summary.match_count,
            "variances": summary.variance_count,
            "missing_from_left": summary.missing_from_left_count,
            "missing_from_right": summary.missing_from_right_count,
        },
    )

    return ReconciliationResult(
        matches=partition.matches,
        missing_from_right=partition.missing_from_right,
        missing_from_left=partition.missing_from_left,
        variances=partition.variances,
        summary=summary,
        key_columns=config.key_columns,
        value_columns=value_columns,
        duplicate_right_keys=partition.duplicate_right_keys,
    )


def run_reconciliation(
    left: DatasetLike,
    right: DatasetLike,
    params: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Execute a reconciliation in headless mode with a status envelope.

    Args:
        left: Left dataset or list of rows
        right: Right dataset or list of rows
        params: Dictionary containing either:
            - profile (str): Name of a YAML reconciliation profile, optionally
              combined with overrides below, or
            - key_columns (List[str]): Match key columns (required without profile)
            - tolerance (float, optional): Allowed deviation (default: 0)
            - tolerance_mode (str, optional): 'absolute' or 'percentage'

    Returns:
        {
            'status': str - 'SUCCESS', 'WARNING', or 'ERROR'
            'timestamp': str - ISO timestamp of execution
            'params': dict - Input parameters used
            'config': dict - Resolved configuration (None on config errors)
            'result': ReconciliationResult or None
            'errors': list - Any errors encountered
            'warnings': list - Any warnings generated
        }
    """
    result: Dict[str, Any] = {
        'status': 'SUCCESS',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'params': params,
        'config': None,
        'result': None,
        'errors': [],
        'warnings': [],
    }

    try:
        config = _resolve_config(params)
    except (ConfigurationError, FileNotFoundError, ValueError) as e:
        logger.warning(f"Invalid reconciliation configuration: {e}")
        result['status'] = 'ERROR'
        result['errors'].append(str(e))
        return result

    result['config'] = config.to_dict()

    left_ds = _as_dataset(left, "left")
    right_ds = _as_dataset(right, "right")
    if left_ds.row_count == 0:
        result['warnings'].append(f"Left dataset '{left_ds.name}' is empty")
    if right_ds.row_count == 0:
        result['warnings'].append(f"Right dataset '{right_ds.name}' is empty")

    missing_keys = _missing_key_columns(left_ds, right_ds, config.key_columns)
    if missing_keys:
        result['warnings'].append(
            f"Match key column(s) not present in both datasets: {missing_keys}"
        )

    recon = reconcile(left_ds, right_ds, config)
    result['result'] = recon

    if recon.duplicate_right_keys:
        result['warnings'].append(
            f"{len(recon.duplicate_right_keys)} duplicate key(s) in right dataset "
            f"'{right_ds.name}'; the last occurrence was used"
        )

    result['status'] = 'WARNING' if result['warnings'] else 'SUCCESS'
    logger.info(f"Reconciliation finished with status: {result['status']}")
    return result


def _resolve_config(params: Mapping[str, Any]) -> ReconciliationConfig:
    """Build the run configuration from a profile and/or explicit fields."""
    profile_name = params.get('profile')
    if not profile_name:
        return ReconciliationConfig.from_dict(params)
    if not isinstance(profile_name, str):
        raise ConfigurationError(
            f"Profile name must be a string, got {type(profile_name).__name__}"
        )

    profile, _ = get_profile(profile_name)
    merged = profile.config.to_dict()
    for key in ('key_columns', 'match_keys', 'tolerance', 'tolerance_mode',
                'tolerance_type', 'value_columns'):
        if params.get(key) is not None:
            merged[key] = params[key]
    if 'match_keys' in merged:
        merged['key_columns'] = merged.pop('match_keys')
    if 'tolerance_type' in merged:
        merged['tolerance_mode'] = merged.pop('tolerance_type')
    return ReconciliationConfig.from_dict(merged)


def _missing_key_columns(left: Dataset, right: Dataset, key_columns: Iterable[str]) -> List[str]:
    """Key columns absent from either dataset's column list (empty datasets are skipped)."""
    missing = []
    for col in key_columns:
        if left.columns and col not in left.columns:
            missing.append(col)
        elif right.columns and col not in right.columns:
            missing.append(col)
    return missing


__all__ = [
    'reconcile',
    'run_reconciliation',
]
