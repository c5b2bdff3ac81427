"""
Tests for the ledgerrecon command line interface.
"""

import json
import logging
from unittest.mock import MagicMock, patch

import pytest

from ledgerrecon import cli
from ledgerrecon.cli import build_parser, main
from ledgerrecon.integrations.agent_client import AgentCallError, AnalysisResult


LEDGER_CSV = "Invoice ID,Amount\nINV-001,100\nINV-002,200\nINV-003,300\n"
STATEMENT_CSV = "Invoice ID,Amount\nINV-001,100\nINV-002,250\nINV-004,400\n"


@pytest.fixture(autouse=True)
def restore_root_logger():
    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers[:]
    original_level = root_logger.level
    yield
    root_logger.handlers = original_handlers
    root_logger.level = original_level


@pytest.fixture
def csv_files(tmp_path):
    left = tmp_path / "ledger.csv"
    right = tmp_path / "statement.csv"
    left.write_text(LEDGER_CSV, encoding="utf-8")
    right.write_text(STATEMENT_CSV, encoding="utf-8")
    return str(left), str(right)


class TestParser:
    """Tests for argument parsing."""

    def test_run_arguments(self):
        args = build_parser().parse_args(
            ["run", "a.csv", "b.csv", "--keys", "Invoice ID", "Date", "--tolerance", "2", "--mode", "percentage"]
        )
        assert args.keys == ["Invoice ID", "Date"]
        assert args.tolerance == 2.0
        assert args.mode == "percentage"

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestRunCommand:
    """Tests for 'ledgerrecon run'."""

    def test_text_summary(self, csv_files, capsys):
        left, right = csv_files
        assert main(["run", left, right, "--keys", "Invoice ID", "--tolerance", "10"]) == 0

        out = capsys.readouterr().out
        assert "ledger.csv vs statement.csv" in out
        matches_line = next(line for line in out.splitlines() if line.startswith("Matches:"))
        assert matches_line.split() == ["Matches:", "1", "$100.00"]
        assert "INV-002: Amount: -$50.00" in out

    def test_json_output(self, csv_files, capsys):
        left, right = csv_files
        assert main(["run", left, right, "--keys", "Invoice ID", "--json"]) == 0

        body = json.loads(capsys.readouterr().out)
        assert body["status"] == "SUCCESS"
        summary = body["result"]["summary"]
        assert summary["match_count"] == 1
        assert summary["variance_count"] == 1
        assert summary["missing_from_right_count"] == 1
        assert summary["missing_from_left_count"] == 1
        assert body["history_entry"]["left_name"] == "ledger.csv"
        assert body["history_entry"]["missing_count"] == 2

    def test_profile(self, csv_files, capsys):
        left, right = csv_files
        assert main(["run", left, right, "--profile", "INVOICE", "--tolerance", "60", "--json"]) == 0

        body = json.loads(capsys.readouterr().out)
        assert body["config"]["tolerance"] == 60.0
        assert body["result"]["summary"]["match_count"] == 2

    def test_keys_or_profile_required(self, csv_files, capsys):
        left, right = csv_files
        assert main(["run", left, right]) == 2
        assert "--keys or --profile" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main(["run", str(tmp_path / "a.csv"), str(tmp_path / "b.csv"), "--keys", "id"]) == 2
        assert "not found" in capsys.readouterr().err

    def test_unparseable_file(self, tmp_path, csv_files, capsys):
        empty = tmp_path / "empty.csv"
        empty.write_text("", encoding="utf-8")
        assert main(["run", str(empty), csv_files[1], "--keys", "id"]) == 2
        assert "Could not parse empty.csv" in capsys.readouterr().err

    def test_invalid_tolerance(self, csv_files, capsys):
        left, right = csv_files
        assert main(["run", left, right, "--keys", "Invoice ID", "--tolerance", "-1"]) == 2
        assert "non-negative" in capsys.readouterr().err

    def test_missing_key_column_warns(self, csv_files, capsys):
        left, right = csv_files
        assert main(["run", left, right, "--keys", "Ref"]) == 0
        assert "WARNING: Match key column(s) not present" in capsys.readouterr().err

    def test_unknown_log_level(self, csv_files, capsys):
        left, right = csv_files
        assert main(["--log-level", "LOUD", "run", left, right, "--keys", "Invoice ID"]) == 2


class TestSampleCommand:
    """Tests for 'ledgerrecon sample'."""

    def test_sample_json(self, capsys):
        assert main(["sample", "--json"]) == 0
        summary = json.loads(capsys.readouterr().out)["result"]["summary"]
        assert summary["match_count"] == 3
        assert summary["variance_count"] == 2
        assert summary["missing_from_right_amount"] == pytest.approx(40950.0)
        assert summary["missing_from_left_amount"] == pytest.approx(21800.0)

    def test_analyze_without_endpoint(self, capsys, monkeypatch):
        monkeypatch.delenv("LEDGERRECON_AGENT_URL", raising=False)
        assert main(["sample", "--analyze"]) == 1
        assert "LEDGERRECON_AGENT_URL" in capsys.readouterr().err

    def test_analyze(self, capsys):
        with patch("ledgerrecon.cli.AgentClient.from_env", return_value=MagicMock()), \
                patch("ledgerrecon.cli.analyze_results",
                      return_value=AnalysisResult(summary="Looks fine", match_rate="37.5%")) as analyze:
            assert main(["sample", "--analyze"]) == 0

        out = capsys.readouterr().out
        assert "summary: Looks fine" in out
        assert "match_rate: 37.5%" in out
        assert analyze.call_args.args[3:] == ("accounts_receivable_jan2025.csv", "bank_statement_jan2025.csv", 8, 7)

    def test_email_failure(self, capsys):
        with patch("ledgerrecon.cli.AgentClient.from_env", return_value=MagicMock()), \
                patch("ledgerrecon.cli.send_email", side_effect=AgentCallError("smtp down")):
            assert main(["sample", "--email", "ops@example.com"]) == 1
        assert "smtp down" in capsys.readouterr().err


class TestProfilesCommand:
    """Tests for 'ledgerrecon profiles'."""

    def test_lists_profiles(self, capsys):
        assert main(["profiles"]) == 0
        out = capsys.readouterr().out
        assert "INVOICE v1: keys=['Invoice ID'] tolerance=10.0 absolute" in out
        assert "PERCENT v1" in out

    def test_unexpected_error(self, capsys):
        with patch("ledgerrecon.cli.get_available_profiles", side_effect=RuntimeError("disk gone")):
            assert main(["profiles"]) == 1
        assert "Unexpected error: disk gone" in capsys.readouterr().err

    def test_unexpected_error_is_logged(self):
        with patch("ledgerrecon.cli.get_available_profiles", side_effect=RuntimeError("disk gone")), \
                patch("ledgerrecon.cli.logger") as cli_logger:
            assert main(["profiles"]) == 1
        cli_logger.exception.assert_called_once()
        assert "disk gone" in cli_logger.exception.call_args.args[0]

    def test_cli_logger_name(self):
        assert cli.logger.name == "ledgerrecon.cli"
