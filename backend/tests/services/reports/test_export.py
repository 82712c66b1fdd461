# tests/services/reports/test_export.py
"""
Tests for CSV and JSON report exports.
"""

import csv
import io
import json
from datetime import date, datetime, timezone

import pytest

from holdings_ledger.services.exceptions import ValidationError
from holdings_ledger.services.ledger import SqlLedgerStore
from holdings_ledger.services.reports import ExportFormat, ReportComposer, ReportType, load_snapshot
from holdings_ledger.services.reports.export import export_report
from tests.conftest import seed_reporting_ledger

AS_OF = date(2024, 3, 31)
NOW = datetime(2024, 3, 31, 12, 0, tzinfo=timezone.utc)
STAMP = "20240331_120000"


@pytest.fixture
def snapshot(db, sample_user):
    seed_reporting_ledger(db, sample_user)
    return load_snapshot(db, SqlLedgerStore(), sample_user.id)


@pytest.fixture
def composer() -> ReportComposer:
    return ReportComposer()


def _rows(content: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(content)))


class TestCsvExport:

    def test_performance_csv(self, composer, snapshot):
        report = composer.performance_summary(snapshot, None, None, AS_OF, NOW)

        exported = export_report(report, ReportType.PERFORMANCE, ExportFormat.CSV, STAMP)
        rows = _rows(exported.content)

        assert exported.media_type == "text/csv"
        assert exported.filename == "performance_report_20240331_120000.csv"
        assert rows[0] == ["Performance Summary Report"]
        assert rows[2] == ["Period: Beginning to Mar 31, 2024"]
        assert ["3500.00", "3850.00", "350.00", "10.00%"] in rows
        header = rows.index(["Rank", "Name", "Category", "Initial", "Current", "Gain/Loss", "Gain/Loss %"])
        assert rows[header + 1][:3] == ["1", "Growth Fund", "Stocks"]

    def test_transactions_csv(self, composer, snapshot):
        report = composer.transaction_history(snapshot, None, None, AS_OF, NOW)

        exported = export_report(report, ReportType.TRANSACTIONS, ExportFormat.CSV, STAMP)
        rows = _rows(exported.content)

        header = rows.index(
            ["Date", "Holding", "Category", "Transaction Type", "Quantity", "Price", "Amount", "Notes"]
        )
        detail = rows[header + 1:]
        assert len(detail) == 4
        assert detail[0][0] == "2024-03-20"
        assert detail[0][1:4] == ["Bond Ladder", "Bonds", "Sell"]
        assert detail[0][-1] == "rebalance"
        assert detail[-1][-1] == ""

    @pytest.mark.parametrize("report_type", [
        ReportType.DISTRIBUTION,
        ReportType.MONTHLY,
        ReportType.YEAR_OVER_YEAR,
        ReportType.TOP_PERFORMING,
    ])
    def test_csv_unavailable(self, composer, snapshot, report_type):
        report = composer.distribution_report(snapshot, NOW)

        with pytest.raises(ValidationError) as exc_info:
            export_report(report, report_type, ExportFormat.CSV, STAMP)

        assert exc_info.value.field == "format"


class TestJsonExport:

    def test_json_round_trips_report(self, composer, snapshot):
        report = composer.distribution_report(snapshot, NOW)

        exported = export_report(report, ReportType.DISTRIBUTION, ExportFormat.JSON, STAMP)
        payload = json.loads(exported.content)

        assert exported.media_type == "application/json"
        assert exported.filename == "distribution_report_20240331_120000.json"
        assert payload["report_title"] == "Holdings Distribution Report"
        assert payload["total_holdings"] == 3
        assert len(payload["holdings"]) == 3

    def test_json_for_every_report(self, composer, snapshot):
        report = composer.year_over_year(snapshot, AS_OF, NOW)

        exported = export_report(report, ReportType.YEAR_OVER_YEAR, ExportFormat.JSON, STAMP)

        assert json.loads(exported.content)["years_covered"] == [2023, 2024]
