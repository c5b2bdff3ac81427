"""
Data models for the ledgerrecon reconciliation engine.

These models describe the engine's inputs (datasets and configuration) and
its single output (the reconciliation result).

Key Models:
    - Dataset: Ordered rows plus column metadata for one side of a run
    - ToleranceMode: How a numeric difference is compared to the tolerance
    - ReconciliationConfig: Validated, immutable run configuration
    - VariancePair: A key-matched pair whose value columns disagree
    - SummaryTotals: Counts and monetary totals per output category
    - ReconciliationResult: The four categories plus the summary
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import pandas as pd

from ledgerrecon.utils.pandas_utils import compute_numeric_sums, detect_numeric_columns


Value = Union[float, str]
Row = Dict[str, Value]


class ConfigurationError(ValueError):
    """Raised when a reconciliation configuration violates an engine precondition."""


class ToleranceMode(str, Enum):
    """
    Tolerance modes supported by the variance classifier.

    ABSOLUTE: A column is out of tolerance when |diff| > tolerance.

    PERCENTAGE: A column is out of tolerance when |diff| relative to the
                larger magnitude of the two values, in percent, exceeds
                the tolerance.
    """
    ABSOLUTE = "absolute"
    PERCENTAGE = "percentage"

    @property
    def unit(self) -> str:
        """Display unit used in summaries."""
        return "USD" if self is ToleranceMode.ABSOLUTE else "%"


@dataclass(frozen=True)
class Dataset:
    """
    One side of a reconciliation.

    Attributes:
        rows: Ordered rows; never mutated by the engine
        columns: Full column name list
        numeric_columns: Columns classified numeric by leading-sample detection
        name: Display name (usually the source file name)
    """
    rows: Tuple[Row, ...]
    columns: Tuple[str, ...] = ()
    numeric_columns: Tuple[str, ...] = ()
    name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "rows", tuple(self.rows))
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "numeric_columns", tuple(self.numeric_columns))

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, Value]], name: str = "") -> "Dataset":
        """Build a dataset, deriving columns from every row (first-seen order) and detecting numeric columns."""
        rows = [dict(row) for row in rows]
        columns: List[str] = []
        for row in rows:
            for col in row:
                if col not in columns:
                    columns.append(col)
        return cls(
            rows=tuple(rows),
            columns=tuple(columns),
            numeric_columns=tuple(detect_numeric_columns(rows, columns)),
            name=name,
        )

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def numeric_sums(self) -> Dict[str, float]:
        return compute_numeric_sums(self.rows, self.numeric_columns)

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class ReconciliationConfig:
    """
    Immutable reconciliation configuration, validated once on construction.

    Attributes:
        key_columns: Ordered, distinct match-key column names (non-empty)
        tolerance: Allowed deviation, non-negative
        tolerance_mode: ABSOLUTE or PERCENTAGE
        value_columns: Optional explicit value columns; when None they are
            resolved from the datasets' numeric columns
    """
    key_columns: Tuple[str, ...]
    tolerance: float = 0.0
    tolerance_mode: ToleranceMode = ToleranceMode.ABSOLUTE
    value_columns: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        if isinstance(self.key_columns, str):
            raise ConfigurationError("key_columns must be a sequence of column names, not a string")
        if self.key_columns is not None and not isinstance(self.key_columns, (list, tuple)):
            raise ConfigurationError(
                f"key_columns must be a list of column names, got {type(self.key_columns).__name__}"
            )
        keys = tuple(self.key_columns or ())
        if not keys:
            raise ConfigurationError("At least one match key column is required")
        for key in keys:
            if not isinstance(key, str) or not key.strip():
                raise ConfigurationError(f"Invalid match key column: {key!r}")
        if len(set(keys)) != len(keys):
            raise ConfigurationError(f"Match key columns must be distinct, got {list(keys)}")
        object.__setattr__(self, "key_columns", keys)

        try:
            tolerance = float(self.tolerance)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Tolerance must be a number, got {self.tolerance!r}")
        if math.isnan(tolerance) or math.isinf(tolerance) or tolerance < 0:
            raise ConfigurationError(f"Tolerance must be a finite non-negative number, got {self.tolerance!r}")
        object.__setattr__(self, "tolerance", tolerance)

        mode = self.tolerance_mode
        if isinstance(mode, str) and not isinstance(mode, ToleranceMode):
            mode = mode.strip().lower()
        try:
            mode = ToleranceMode(mode)
        except ValueError:
            valid = [m.value for m in ToleranceMode]
            raise ConfigurationError(
                f"Invalid tolerance mode: {self.tolerance_mode!r}. Must be one of {valid}"
            )
        object.__setattr__(self, "tolerance_mode", mode)

        if self.value_columns is not None:
            if not isinstance(self.value_columns, (list, tuple)):
                raise ConfigurationError(
                    f"value_columns must be a list of column names, got {type(self.value_columns).__name__}"
                )
            object.__setattr__(self, "value_columns", tuple(self.value_columns))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ReconciliationConfig":
        """
        Build a configuration from a plain mapping (JSON body, YAML profile).

        Accepts ``key_columns`` or ``match_keys``, ``tolerance`` and
        ``tolerance_mode`` or ``tolerance_type``.
        """
        keys = data.get("key_columns", data.get("match_keys"))
        if keys is None:
            raise ConfigurationError("Missing required parameter: 'key_columns'")
        return cls(
            key_columns=keys,
            tolerance=data.get("tolerance", 0.0),
            tolerance_mode=data.get("tolerance_mode", data.get("tolerance_type", ToleranceMode.ABSOLUTE)),
            value_columns=data.get("value_columns"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key_columns": list(self.key_columns),
            "tolerance": self.tolerance,
            "tolerance_mode": self.tolerance_mode.value,
            "value_columns": list(self.value_columns) if self.value_columns is not None else None,
        }


@dataclass(frozen=True)
class VariancePair:
    """
    A pair of rows sharing a composite key whose value columns disagree.

    ``differences`` maps each out-of-tolerance column to left minus right.
    """
    left: Row
    right: Row
    differences: Dict[str, float]

    @property
    def total_abs_difference(self) -> float:
        return sum(abs(d) for d in self.differences.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "left": dict(self.left),
            "right": dict(self.right),
            "differences": dict(self.differences),
        }


@dataclass(frozen=True)
class SummaryTotals:
    """Counts and monetary totals per output category."""
    match_count: int = 0
    match_amount: float = 0.0
    missing_from_left_count: int = 0
    missing_from_left_amount: float = 0.0
    missing_from_right_count: int = 0
    missing_from_right_amount: float = 0.0
    variance_count: int = 0
    variance_amount: float = 0.0

    @property
    def missing_count(self) -> int:
        return self.missing_from_left_count + self.missing_from_right_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "match_count": self.match_count,
            "match_amount": self.match_amount,
            "missing_from_left_count": self.missing_from_left_count,
            "missing_from_left_amount": self.missing_from_left_amount,
            "missing_from_right_count": self.missing_from_right_count,
            "missing_from_right_amount": self.missing_from_right_amount,
            "variance_count": self.variance_count,
            "variance_amount": self.variance_amount,
        }


@dataclass(frozen=True)
class ReconciliationResult:
    """
    The engine's sole output.

    Attributes:
        matches: Left rows whose counterpart agrees within tolerance
        missing_from_right: Left rows with no counterpart key on the right
        missing_from_left: Right rows whose key no left row produced
        variances: Key-matched pairs with out-of-tolerance value columns
        summary: Counts and monetary totals
        key_columns: Match keys used for the run
        value_columns: Value columns compared, in order
        duplicate_right_keys: Composite keys seen more than once on the right
    """
    matches: Tuple[Row, ...]
    missing_from_right: Tuple[Row, ...]
    missing_from_left: Tuple[Row, ...]
    variances: Tuple[VariancePair, ...]
    summary: SummaryTotals
    key_columns: Tuple[str, ...] = ()
    value_columns: Tuple[str, ...] = ()
    duplicate_right_keys: Tuple[str, ...] = ()

    def __post_init__(self):
        for name in ("matches", "missing_from_right", "missing_from_left",
                     "variances", "key_columns", "value_columns", "duplicate_right_keys"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "matches": [dict(r) for r in self.matches],
            "missing_from_right": [dict(r) for r in self.missing_from_right],
            "missing_from_left": [dict(r) for r in self.missing_from_left],
            "variances": [v.to_dict() for v in self.variances],
            "summary": self.summary.to_dict(),
            "key_columns": list(self.key_columns),
            "value_columns": list(self.value_columns),
            "duplicate_right_keys": list(self.duplicate_right_keys),
        }

    def to_frames(self) -> Dict[str, pd.DataFrame]:
        """
        Tabular views of each category.

        Variances are flattened to one row per pair with ``left_<col>``,
        ``right_<col>`` and ``diff_<col>`` columns.
        """
        variance_records: List[Dict[str, Any]] = []
        for pair in self.variances:
            record: Dict[str, Any] = {}
            for col in self.key_columns:
                record[col] = pair.left.get(col, "")
            for col, diff in pair.differences.items():
                record[f"left_{col}"] = pair.left.get(col)
                record[f"right_{col}"] = pair.right.get(col)
                record[f"diff_{col}"] = diff
            variance_records.append(record)

        return {
            "matches": pd.DataFrame([dict(r) for r in self.matches]),
            "missing_from_right": pd.DataFrame([dict(r) for r in self.missing_from_right]),
            "missing_from_left": pd.DataFrame([dict(r) for r in self.missing_from_left]),
            "variances": pd.DataFrame(variance_records),
        }


__all__ = [
    "Value",
    "Row",
    "ConfigurationError",
    "ToleranceMode",
    "Dataset",
    "ReconciliationConfig",
    "VariancePair",
    "SummaryTotals",
    "ReconciliationResult",
]
