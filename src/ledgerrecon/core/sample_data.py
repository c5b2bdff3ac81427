"""
Built-in demonstration datasets.

An accounts-receivable ledger and a bank statement for January 2025 that
exercise every outcome of the engine: exact matches, variances, and records
missing on each side.
"""

from typing import Tuple

from ledgerrecon.core.recon.models import Dataset, ReconciliationConfig, ToleranceMode


SAMPLE_COLUMNS = ('Invoice ID', 'Customer', 'Amount', 'Date', 'Category')

_LEDGER_ROWS = [
    ('INV-001', 'Acme Corp', 15000.0, '2025-01-15', 'Software'),
    ('INV-002', 'Globex Inc', 8500.0, '2025-01-16', 'Consulting'),
    ('INV-003', 'Initech', 22000.0, '2025-01-17', 'Hardware'),
    ('INV-004', 'Umbrella Ltd', 5200.0, '2025-01-18', 'Support'),
    ('INV-005', 'Wayne Enterprises', 31500.0, '2025-01-19', 'Software'),
    ('INV-006', 'Stark Industries', 12750.0, '2025-01-20', 'Consulting'),
    ('INV-007', 'Cyberdyne', 9800.0, '2025-01-21', 'Hardware'),
    ('INV-008', 'Massive Dynamic', 18400.0, '2025-01-22', 'Software'),
]

_STATEMENT_ROWS = [
    ('INV-001', 'Acme Corp', 15000.0, '2025-01-15', 'Software'),
    ('INV-002', 'Globex Inc', 8750.0, '2025-01-16', 'Consulting'),
    ('INV-003', 'Initech', 22000.0, '2025-01-17', 'Hardware'),
    ('INV-004', 'Umbrella Ltd', 5500.0, '2025-01-18', 'Support'),
    ('INV-005', 'Wayne Enterprises', 31500.0, '2025-01-19', 'Software'),
    ('INV-009', 'Oscorp', 7600.0, '2025-01-23', 'Support'),
    ('INV-010', 'LexCorp', 14200.0, '2025-01-24', 'Consulting'),
]


def _dataset(name: str, records) -> Dataset:
    rows = tuple(dict(zip(SAMPLE_COLUMNS, record)) for record in records)
    return Dataset(rows=rows, columns=SAMPLE_COLUMNS, numeric_columns=('Amount',), name=name)


def generate_sample_datasets() -> Tuple[Dataset, Dataset, ReconciliationConfig]:
    """
    Return the sample ledger, the sample statement and their default configuration.

    The configuration matches on ``Invoice ID`` with a 10 USD absolute tolerance.
    """
    ledger = _dataset('accounts_receivable_jan2025.csv', _LEDGER_ROWS)
    statement = _dataset('bank_statement_jan2025.csv', _STATEMENT_ROWS)
    config = ReconciliationConfig(
        key_columns=('Invoice ID',),
        tolerance=10.0,
        tolerance_mode=ToleranceMode.ABSOLUTE,
    )
    return ledger, statement, config


__all__ = [
    'SAMPLE_COLUMNS',
    'generate_sample_datasets',
]
