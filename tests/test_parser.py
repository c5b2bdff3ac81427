"""
Tests for delimited text parsing.

Test Coverage:
- Header and data rows, trimmed cells and column names
- Numeric coercion and numeric column detection
- Quoted fields with embedded delimiters and doubled quotes
- Tab-delimited input selected by file name or explicit delimiter
- Error handling for empty and malformed input
- Loading from disk
"""

import pytest

from ledgerrecon.core.ingestion.parser import DatasetParseError, load_dataset, parse_delimited_text


LEDGER_CSV = """Invoice ID,Customer,Amount,Date
INV-001,Acme Corp,"$15,000.00",2025-01-15
INV-002, Globex Inc ,8500,2025-01-16
"""


class TestParseDelimitedText:
    """Tests for parse_delimited_text()."""

    def test_basic_csv(self):
        ds = parse_delimited_text(LEDGER_CSV, name="ledger.csv")

        assert ds.name == "ledger.csv"
        assert ds.columns == ("Invoice ID", "Customer", "Amount", "Date")
        assert ds.row_count == 2
        assert ds.rows[0]["Amount"] == 15000.0
        assert ds.rows[1]["Customer"] == "Globex Inc"
        assert ds.rows[0]["Date"] == "2025-01-15"
        assert ds.numeric_columns == ("Amount",)

    def test_quoted_fields(self):
        text = 'id,note\n1,"Smith, John ""JJ"""\n'
        ds = parse_delimited_text(text)
        assert ds.rows[0]["note"] == 'Smith, John "JJ"'

    def test_header_names_are_trimmed(self):
        ds = parse_delimited_text(" id , amount \n1,2\n")
        assert ds.columns == ("id", "amount")

    def test_blank_lines_ignored(self):
        ds = parse_delimited_text("id,amount\n\n1,2\n   \n3,4\n")
        assert ds.row_count == 2

    def test_short_rows_padded_with_empty_text(self):
        ds = parse_delimited_text("id,amount,note\n1,2\n")
        assert ds.rows[0]["note"] == ""

    def test_tsv_by_name(self):
        ds = parse_delimited_text("id\tamount\nA\t1,000\n", name="bank.TSV")
        assert ds.columns == ("id", "amount")
        assert ds.rows[0]["amount"] == 1000.0

    def test_explicit_delimiter(self):
        ds = parse_delimited_text("id;amount\nA;5\n", name="data.txt", delimiter=";")
        assert ds.rows[0] == {"id": "A", "amount": 5.0}

    def test_numeric_looking_ids_become_numbers(self):
        ds = parse_delimited_text("id,amount\n1001,5\n1002,6\n")
        assert ds.rows[0]["id"] == 1001.0
        assert ds.numeric_columns == ("id", "amount")

    @pytest.mark.parametrize("text", ["", "   \n", "id,amount\n", "id,amount\n\n  \n"])
    def test_no_data_rows(self, text):
        with pytest.raises(DatasetParseError, match="Could not parse empty.csv"):
            parse_delimited_text(text, name="empty.csv")

    def test_too_many_fields(self):
        with pytest.raises(DatasetParseError, match="Error parsing bad.csv"):
            parse_delimited_text("a,b\n1,2\n3,4,5,6\n", name="bad.csv")


class TestLoadDataset:
    """Tests for load_dataset()."""

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "ledger.csv"
        path.write_text(LEDGER_CSV, encoding="utf-8")
        ds = load_dataset(path)
        assert ds.name == "ledger.csv"
        assert ds.row_count == 2

    def test_utf8_bom_is_dropped(self, tmp_path):
        path = tmp_path / "bom.csv"
        path.write_bytes("\ufeffid,amount\nA,1\n".encode("utf-8"))
        ds = load_dataset(path)
        assert ds.columns == ("id", "amount")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_dataset(tmp_path / "nope.csv")
