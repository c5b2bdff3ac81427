"""
Command line interface for ledgerrecon.

Examples:
    ledgerrecon run ledger.csv statement.csv --keys "Invoice ID" --tolerance 10
    ledgerrecon run ledger.csv statement.tsv --profile PERCENT --json
    ledgerrecon sample --analyze
    ledgerrecon profiles
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict, List, Optional

from ledgerrecon.core.history import HistoryEntry
from ledgerrecon.core.ingestion.parser import DatasetParseError, load_dataset
from ledgerrecon.core.logging_config import get_logger, setup_logging
from ledgerrecon.core.recon.models import Dataset, ReconciliationConfig, ReconciliationResult
from ledgerrecon.core.recon.profiles import get_available_profiles, get_profile
from ledgerrecon.core.recon.run_reconciliation import run_reconciliation
from ledgerrecon.core.sample_data import generate_sample_datasets
from ledgerrecon.integrations.agent_client import (
    AgentCallError,
    AgentClient,
    analyze_results,
    send_email,
)
from ledgerrecon.reporting.summaries import format_currency


logger = get_logger(__name__)


def _print_summary(result: ReconciliationResult, left: Dataset, right: Dataset) -> None:
    s = result.summary
    print(f"\n=== Reconciliation: {left.name} vs {right.name} ===")
    print(f"Match keys:     {', '.join(result.key_columns)}")
    print(f"Value columns:  {', '.join(result.value_columns) or '(none)'}")
    print(f"Matches:        {s.match_count:>6}  {format_currency(s.match_amount)}")
    print(f"Variances:      {s.variance_count:>6}  {format_currency(s.variance_amount)}")
    print(f"Missing from {right.name}: {s.missing_from_right_count} ({format_currency(s.missing_from_right_amount)})")
    print(f"Missing from {left.name}: {s.missing_from_left_count} ({format_currency(s.missing_from_left_amount)})")

    if result.variances:
        print("\nVariances:")
        for pair in result.variances:
            key = " / ".join(str(pair.left.get(col, "")) for col in result.key_columns)
            diffs = ", ".join(f"{col}: {format_currency(d)}" for col, d in pair.differences.items())
            print(f"  - {key}: {diffs}")


def _run_services(
    args: argparse.Namespace,
    result: ReconciliationResult,
    config: ReconciliationConfig,
    left: Dataset,
    right: Dataset,
) -> int:
    """Call the optional external services; failures are reported, never fatal to the result."""
    if not (args.analyze or args.email):
        return 0

    try:
        client = AgentClient.from_env()
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    exit_code = 0
    if args.analyze:
        try:
            analysis = analyze_results(client, result, config, left.name, right.name,
                                       left.row_count, right.row_count)
            print("\n=== Analysis ===")
            for field_name, value in vars(analysis).items():
                if value:
                    print(f"{field_name}: {value}")
        except AgentCallError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            exit_code = 1

    if args.email:
        try:
            email = send_email(client, result, args.email, args.subject, left.name, right.name)
            print(f"\nEmail {email.email_status} to {email.recipient}: {email.delivery_message}")
        except (AgentCallError, ValueError) as e:
            print(f"ERROR: {e}", file=sys.stderr)
            exit_code = 1

    return exit_code


def _reconcile_and_report(
    args: argparse.Namespace,
    left: Dataset,
    right: Dataset,
    params: Dict[str, Any],
) -> int:
    envelope = run_reconciliation(left, right, params)

    if envelope['status'] == 'ERROR':
        for err in envelope['errors']:
            print(f"ERROR: {err}", file=sys.stderr)
        return 2

    for warning in envelope['warnings']:
        print(f"WARNING: {warning}", file=sys.stderr)

    result: ReconciliationResult = envelope['result']
    if args.json:
        body = dict(envelope)
        body['result'] = result.to_dict()
        body['history_entry'] = HistoryEntry.from_result(result, left.name, right.name).to_dict()
        print(json.dumps(body, indent=2, default=str))
    else:
        _print_summary(result, left, right)

    config = ReconciliationConfig.from_dict(envelope['config'])
    return _run_services(args, result, config, left, right)


def cmd_run(args: argparse.Namespace) -> int:
    try:
        left = load_dataset(args.left, delimiter=args.delimiter)
        right = load_dataset(args.right, delimiter=args.delimiter)
    except (FileNotFoundError, DatasetParseError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    params: Dict[str, Any] = {
        'profile': args.profile,
        'key_columns': args.keys,
        'tolerance': args.tolerance,
        'tolerance_mode': args.mode,
    }
    if not args.profile and not args.keys:
        print("ERROR: Provide --keys or --profile", file=sys.stderr)
        return 2
    if not args.profile:
        params['tolerance'] = args.tolerance if args.tolerance is not None else 0.0
        params['tolerance_mode'] = args.mode or 'absolute'

    return _reconcile_and_report(args, left, right, params)


def cmd_sample(args: argparse.Namespace) -> int:
    left, right, config = generate_sample_datasets()
    return _reconcile_and_report(args, left, right, config.to_dict())


def cmd_profiles(args: argparse.Namespace) -> int:
    for name in get_available_profiles():
        try:
            profile, profile_hash = get_profile(name)
        except (FileNotFoundError, ValueError) as e:
            print(f"{name}: INVALID ({e})")
            continue
        cfg = profile.config
        print(
            f"{name} v{profile.version}: keys={list(cfg.key_columns)} "
            f"tolerance={cfg.tolerance} {cfg.tolerance_mode.value} "
            f"[{profile_hash[:8]}] - {profile.description}"
        )
    return 0


def _add_output_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--json", action="store_true", help="Print the full result as JSON")
    p.add_argument("--analyze", action="store_true", help="Request an analysis from the analysis service")
    p.add_argument("--email", help="Email a summary to this recipient via the notification service")
    p.add_argument("--subject", help="Email subject line")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ledgerrecon",
        description="Reconcile two tabular datasets by composite key.",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    parser.add_argument("--log-format", choices=["json", "text"], default="json")
    sub = parser.add_subparsers(dest="command", required=True)

    p_run = sub.add_parser("run", help="Reconcile two CSV/TSV files")
    p_run.add_argument("left", help="Left file (e.g. internal ledger)")
    p_run.add_argument("right", help="Right file (e.g. external statement)")
    p_run.add_argument("--keys", nargs="+", help="Match key column(s)")
    p_run.add_argument("--tolerance", type=float, help="Allowed deviation (default: 0)")
    p_run.add_argument("--mode", choices=["absolute", "percentage"], help="Tolerance mode (default: absolute)")
    p_run.add_argument("--profile", help="Reconciliation profile name (see 'profiles')")
    p_run.add_argument("--delimiter", help="Field delimiter (default: tab for .tsv, comma otherwise)")
    _add_output_options(p_run)
    p_run.set_defaults(func=cmd_run)

    p_sample = sub.add_parser("sample", help="Reconcile the built-in sample datasets")
    _add_output_options(p_sample)
    p_sample.set_defaults(func=cmd_sample)

    p_profiles = sub.add_parser("profiles", help="List reconciliation profiles")
    p_profiles.set_defaults(func=cmd_profiles)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        setup_logging(level=args.log_level, format_as_json=args.log_format == "json")
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    try:
        return args.func(args)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        print(f"ERROR: Unexpected error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
