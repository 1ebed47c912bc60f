"""
Tests for report generation.
"""

import csv
import json
import re

from zonesweep.core.records import NormalizedRecord, ZoneTransferResult
from zonesweep.core.transfer import TransferSetupError
from zonesweep.reports import (
    CSV_HEADER,
    default_report_path,
    format_transfer_report,
    generate_csv_report,
    generate_json_report,
)


def _results():
    return [
        ZoneTransferResult(
            domain="example.com",
            nameserver="ns1.example.com",
            records=[
                NormalizedRecord("example.com.", "SOA", 3600, "ns1.example.com. hostmaster.example.com. 1 7200 3600 1209600 300"),
                NormalizedRecord("www.example.com.", "A", 300, "192.0.2.1"),
            ],
        ),
        ZoneTransferResult(
            domain="example.com",
            nameserver="ns2.example.com",
            error=TransferSetupError("Could not connect to ns2.example.com:53: timed out"),
        ),
    ]


class TestJSONReport:
    """Tests for JSON reports."""

    def test_every_attempt_is_written(self, tmp_path):
        """Test failed attempts appear alongside successful ones."""
        path = tmp_path / "out.json"
        generate_json_report(_results(), path)

        data = json.loads(path.read_text(encoding="utf-8"))

        assert [entry["nameserver"] for entry in data] == ["ns1.example.com", "ns2.example.com"]
        assert data[0]["records"][1] == {
            "name": "www.example.com.", "type": "A", "ttl": 300, "value": "192.0.2.1",
        }
        assert data[1] == {"domain": "example.com", "nameserver": "ns2.example.com", "records": []}

    def test_empty(self, tmp_path):
        """Test an empty result list is an empty array."""
        path = tmp_path / "out.json"
        generate_json_report([], path)

        assert json.loads(path.read_text(encoding="utf-8")) == []


class TestCSVReport:
    """Tests for CSV reports."""

    def test_rows_for_successful_transfers(self, tmp_path):
        """Test one row per record of each successful transfer."""
        path = tmp_path / "out.csv"
        generate_csv_report(_results(), path)

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))

        assert rows[0] == CSV_HEADER
        assert len(rows) == 3
        assert rows[2] == ["example.com", "ns1.example.com", "www.example.com.", "A", "300", "192.0.2.1"]

    def test_header_only(self, tmp_path):
        """Test the header is written even without records."""
        path = tmp_path / "out.csv"
        generate_csv_report(_results()[1:], path)

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))

        assert rows == [CSV_HEADER]


class TestTextReport:
    """Tests for the text report."""

    def test_format(self):
        """Test the report lists every attempt."""
        report = format_transfer_report(_results())

        assert "ZONE TRANSFER REPORT" in report
        assert "Attempts: 2" in report
        assert "Successful: 1" in report
        assert "Records Disclosed: 2" in report
        assert "example.com@ns1.example.com: SUCCESS" in report
        assert "www.example.com. 300 A 192.0.2.1" in report
        assert "example.com@ns2.example.com: FAILED" in report
        assert "timed out" in report


class TestDefaultReportPath:
    """Tests for default report file names."""

    def test_timestamped_name(self, tmp_path):
        """Test names follow axfr-YYYYmmdd-HHMMSS.ext."""
        path = default_report_path("json", tmp_path)

        assert path.parent == tmp_path
        assert re.fullmatch(r"axfr-\d{8}-\d{6}\.json", path.name)
