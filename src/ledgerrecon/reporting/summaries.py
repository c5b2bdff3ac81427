"""
Textual summaries of a reconciliation result for external services.

Three messages are derived from a ``ReconciliationResult``:
    - analysis: counts, totals and the first variances/missing keys, asking
      the analysis service for a structured commentary
    - report: detailed variance lines and JSON samples of missing rows,
      asking the report service for a downloadable file
    - email: a short summary sent through the notification service

The builders only read the result; nothing here mutates it.
"""

from __future__ import annotations

import json
import math
from typing import Iterable, Optional, Tuple

from ledgerrecon.core.recon.keys import build_composite_key
from ledgerrecon.core.recon.models import ReconciliationConfig, ReconciliationResult, Row


ANALYSIS_TOP_VARIANCES = 5
ANALYSIS_TOP_MISSING = 5
REPORT_TOP_VARIANCES = 20
REPORT_TOP_MISSING = 10
EMAIL_TOP_VARIANCES = 5


def format_currency(value: float) -> str:
    """
    Format a number as US dollars.

    Examples:
        >>> format_currency(15000)
        '$15,000.00'
        >>> format_currency(-250)
        '-$250.00'
    """
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def _format_number(value) -> str:
    if isinstance(value, float) and not math.isnan(value) and value.is_integer():
        return str(int(value))
    return str(value)


def _tolerance_text(config: ReconciliationConfig) -> str:
    return f"{_format_number(config.tolerance)} {config.tolerance_mode.unit}"


def _keys(rows: Iterable[Row], key_columns) -> str:
    return ", ".join(build_composite_key(r, key_columns) for r in rows)


def _summary_lines(result: ReconciliationResult, left_name: str, right_name: str) -> str:
    s = result.summary
    return "\n".join([
        f"- Matches: {s.match_count} records, total {format_currency(s.match_amount)}",
        f"- Missing from {left_name}: {s.missing_from_left_count} records, "
        f"total {format_currency(s.missing_from_left_amount)}",
        f"- Missing from {right_name}: {s.missing_from_right_count} records, "
        f"total {format_currency(s.missing_from_right_amount)}",
        f"- Variances: {s.variance_count} records, total variance {format_currency(s.variance_amount)}",
    ])


def build_analysis_message(
    result: ReconciliationResult,
    config: ReconciliationConfig,
    left_name: str = "File 1",
    right_name: str = "File 2",
    left_rows: int = 0,
    right_rows: int = 0,
) -> str:
    """Build the request sent to the reconciliation analysis service."""
    keys = result.key_columns or config.key_columns

    top_variances = "; ".join(
        f"{build_composite_key(v.left, keys)} => "
        + ", ".join(f"{col}: {format_currency(d)}" for col, d in v.differences.items())
        for v in result.variances[:ANALYSIS_TOP_VARIANCES]
    )

    return (
        f'Analyze these reconciliation results between "{left_name}" and "{right_name}":\n'
        f"\n"
        f"Summary:\n"
        f"{_summary_lines(result, left_name, right_name)}\n"
        f"- Match keys used: {', '.join(config.key_columns)}\n"
        f"- Tolerance: {_tolerance_text(config)}\n"
        f"- {left_name} rows: {left_rows}, {right_name} rows: {right_rows}\n"
        f"\n"
        f"Top variances: {top_variances}\n"
        f"\n"
        f"Missing from {right_name} (first {ANALYSIS_TOP_MISSING}): "
        f"{_keys(result.missing_from_right[:ANALYSIS_TOP_MISSING], keys)}\n"
        f"Missing from {left_name} (first {ANALYSIS_TOP_MISSING}): "
        f"{_keys(result.missing_from_left[:ANALYSIS_TOP_MISSING], keys)}\n"
        f"\n"
        f"Please provide a comprehensive analysis with summary, match_rate, key_findings, "
        f"anomalies, missing_records_analysis, variance_analysis, and recommendations."
    )


def build_report_message(
    result: ReconciliationResult,
    config: ReconciliationConfig,
    left_name: str = "File 1",
    right_name: str = "File 2",
) -> str:
    """Build the request sent to the report generation service."""
    keys = result.key_columns or config.key_columns

    variance_lines = []
    for v in result.variances[:REPORT_TOP_VARIANCES]:
        details = "; ".join(
            f"{col}: {left_name}={_format_number(v.left.get(col, ''))}, "
            f"{right_name}={_format_number(v.right.get(col, ''))}, Diff={format_currency(d)}"
            for col, d in v.differences.items()
        )
        variance_lines.append(f"{build_composite_key(v.left, keys)}: {details}")

    def _json_rows(rows) -> str:
        return ", ".join(json.dumps(dict(r), default=str) for r in rows)

    return (
        f"Generate a structured Excel reconciliation report for the following data:\n"
        f"\n"
        f'Files: "{left_name}" vs "{right_name}"\n'
        f"Match keys: {', '.join(config.key_columns)}\n"
        f"Tolerance: {_tolerance_text(config)}\n"
        f"\n"
        f"Summary:\n"
        f"{_summary_lines(result, left_name, right_name)}\n"
        f"\n"
        f"Variance details:\n"
        + "\n".join(variance_lines)
        + f"\n\n"
        f"Missing from {right_name}: {_json_rows(result.missing_from_right[:REPORT_TOP_MISSING])}\n"
        f"Missing from {left_name}: {_json_rows(result.missing_from_left[:REPORT_TOP_MISSING])}\n"
        f"\n"
        f"Please generate a downloadable report file with sections for matches, "
        f"missing records, and variances."
    )


def build_email_message(
    result: ReconciliationResult,
    recipient: str,
    subject: Optional[str] = None,
    left_name: str = "File 1",
    right_name: str = "File 2",
) -> Tuple[str, str]:
    """
    Build the subject line and request sent to the notification service.

    Returns:
        Tuple of (subject, message)
    """
    subject_line = subject or f"Reconciliation Report: {left_name} vs {right_name}"
    keys = result.key_columns

    top_variances = "\n".join(
        f"- {build_composite_key(v.left, keys)}: "
        + ", ".join(f"{col}: {format_currency(d)}" for col, d in v.differences.items())
        for v in result.variances[:EMAIL_TOP_VARIANCES]
    ) if keys else ""

    message = (
        f'Send an email to {recipient} with subject "{subject_line}" containing the '
        f"following reconciliation summary:\n"
        f"\n"
        f"Reconciliation Results\n"
        f'Files compared: "{left_name}" vs "{right_name}"\n'
        f"\n"
        f"Summary:\n"
        f"{_summary_lines(result, left_name, right_name)}\n"
        f"\n"
        f"Top variances:\n"
        f"{top_variances}\n"
        f"\n"
        f"Please review the reconciliation report for detailed findings."
    )
    return subject_line, message


__all__ = [
    "format_currency",
    "build_analysis_message",
    "build_report_message",
    "build_email_message",
]
