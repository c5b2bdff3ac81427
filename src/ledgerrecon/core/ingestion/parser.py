"""
Delimited text parsing for reconciliation inputs.

Turns raw CSV/TSV text into a ``Dataset`` the engine can consume:
- quoted fields, doubled quotes and embedded delimiters are honoured (pandas)
- cells are trimmed; "$" and "," are stripped before numeric coercion
- cells that parse to a finite number become floats, everything else stays text
- numeric columns are detected on the leading sample of rows

Usage:
    from ledgerrecon.core.ingestion.parser import load_dataset, parse_delimited_text

    ledger = load_dataset("accounts_receivable_jan2025.csv")
    statement = parse_delimited_text(raw_text, name="statement.tsv")
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import List, Optional, Union

import pandas as pd

from ledgerrecon.core.recon.models import Dataset, Row
from ledgerrecon.utils.pandas_utils import coerce_cell, detect_numeric_columns


logger = logging.getLogger(__name__)


class DatasetParseError(ValueError):
    """Raised when raw text cannot be turned into a dataset."""


def _infer_delimiter(name: str) -> str:
    return "\t" if name.lower().endswith(".tsv") else ","


def parse_delimited_text(
    text: str,
    name: str = "dataset.csv",
    delimiter: Optional[str] = None,
) -> Dataset:
    """
    Parse delimited text with a header row into a Dataset.

    Args:
        text: Raw file contents
        name: Display name; a ``.tsv`` suffix selects the tab delimiter
        delimiter: Explicit delimiter, overriding the name-based choice

    Returns:
        Dataset with typed rows, column list and detected numeric columns

    Raises:
        DatasetParseError: If the text has no header or no data rows, or
            cannot be tokenized
    """
    sep = delimiter or _infer_delimiter(name)
    not_parsed = f"Could not parse {name}. Please ensure it is a valid CSV file with headers."

    lines = [line for line in text.splitlines() if line.strip() != ""]
    if len(lines) < 2:
        raise DatasetParseError(not_parsed)

    try:
        df = pd.read_csv(
            io.StringIO("\n".join(lines)),
            sep=sep,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
            index_col=False,
        )
    except pd.errors.EmptyDataError:
        raise DatasetParseError(not_parsed)
    except (pd.errors.ParserError, ValueError) as e:
        raise DatasetParseError(f"Error parsing {name}: {e}")

    if df.empty:
        raise DatasetParseError(not_parsed)

    df.columns = [str(c).strip() for c in df.columns]
    df = df.fillna("")

    columns = list(df.columns)
    rows: List[Row] = [
        {col: coerce_cell(record[col]) for col in columns}
        for record in df.to_dict(orient="records")
    ]
    numeric_columns = detect_numeric_columns(rows, columns)

    logger.info(
        f"Parsed {name}: {len(rows)} rows, {len(columns)} columns",
        extra={"dataset": name, "numeric_columns": numeric_columns},
    )

    return Dataset(
        rows=tuple(rows),
        columns=tuple(columns),
        numeric_columns=tuple(numeric_columns),
        name=name,
    )


def load_dataset(path: Union[str, Path], delimiter: Optional[str] = None) -> Dataset:
    """
    Read a UTF-8 CSV/TSV file and parse it into a Dataset.

    Raises:
        FileNotFoundError: If the file does not exist
        DatasetParseError: If the contents cannot be parsed
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Input file not found: {file_path}")

    try:
        text = file_path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise DatasetParseError(f"Error parsing {file_path.name}: {e}")

    return parse_delimited_text(text, name=file_path.name, delimiter=delimiter)


__all__ = [
    "DatasetParseError",
    "parse_delimited_text",
    "load_dataset",
]
