"""ledgerrecon: reconcile two tabular datasets by composite key with tolerance-based variance detection."""

__version__ = "0.1.0"
