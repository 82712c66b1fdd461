# backend/holdings_ledger/services/reports/export.py
"""
Render reports as downloadable CSV or JSON.

Exporters format what the composer already computed; they never
recompute numbers.

- CSV: performance and transactions reports (stdlib csv)
- JSON: every report (pydantic model_dump_json)
"""

import csv
import io
import logging

from pydantic import BaseModel

from holdings_ledger.schemas.reports import PerformanceSummaryReport, TransactionHistoryReport
from holdings_ledger.services.exceptions import ValidationError
from holdings_ledger.services.reports.types import ExportedReport, ExportFormat, ReportType

logger = logging.getLogger(__name__)

CSV_REPORT_TYPES = frozenset({ReportType.PERFORMANCE, ReportType.TRANSACTIONS})

CSV_MEDIA_TYPE = "text/csv"
JSON_MEDIA_TYPE = "application/json"


def _percent(value) -> str:
    return f"{value}%"


def performance_csv(report: PerformanceSummaryReport) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)

    writer.writerow([report.report_title])
    writer.writerow([f"Generated: {report.generated_at:%Y-%m-%d %H:%M:%S}"])
    writer.writerow([f"Period: {report.period_start} to {report.period_end}"])
    writer.writerow([])

    writer.writerow(["Overall Performance"])
    writer.writerow(["Total Invested", "Current Value", "Gain/Loss", "Gain/Loss %"])
    writer.writerow([
        report.total_invested,
        report.current_value,
        report.total_gain_loss,
        _percent(report.total_gain_loss_percentage),
    ])
    writer.writerow([])

    writer.writerow(["Top Performers"])
    writer.writerow(["Rank", "Name", "Category", "Initial", "Current", "Gain/Loss", "Gain/Loss %"])
    for item in report.top_performers:
        writer.writerow([
            item.rank,
            item.name,
            item.category.value,
            item.initial_amount,
            item.current_value,
            item.gain_loss,
            _percent(item.gain_loss_percentage),
        ])

    return buffer.getvalue()


def transactions_csv(report: TransactionHistoryReport) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)

    writer.writerow([report.report_title])
    writer.writerow([f"Generated: {report.generated_at:%Y-%m-%d %H:%M:%S}"])
    writer.writerow([f"Period: {report.period_start} to {report.period_end}"])
    writer.writerow([])

    writer.writerow(["Date", "Holding", "Category", "Transaction Type", "Quantity", "Price", "Amount", "Notes"])
    for row in report.transactions:
        writer.writerow([
            row.transaction_date.isoformat(),
            row.holding_name,
            row.holding_category.value,
            row.transaction_type.value,
            row.quantity,
            row.price_per_unit,
            row.amount,
            row.notes or "",
        ])

    return buffer.getvalue()


def to_json(report: BaseModel) -> str:
    return report.model_dump_json(indent=2)


def export_report(report: BaseModel, report_type: ReportType, fmt: ExportFormat, stamp: str) -> ExportedReport:
    """
    Render an already-built report.

    Args:
        report: Output of the matching ReportComposer method
        report_type: Which report it is
        fmt: CSV or JSON
        stamp: Timestamp for the filename (e.g. "20240615_103000")

    Raises:
        ValidationError: CSV requested for a report without a CSV layout
    """
    filename = f"{report_type.value}_report_{stamp}.{fmt.value}"

    if fmt == ExportFormat.JSON:
        return ExportedReport(content=to_json(report), media_type=JSON_MEDIA_TYPE, filename=filename)

    if report_type not in CSV_REPORT_TYPES:
        supported = ", ".join(sorted(t.value for t in CSV_REPORT_TYPES))
        raise ValidationError(
            f"CSV export is not available for '{report_type.value}' (supported: {supported})",
            field="format",
        )

    if report_type == ReportType.PERFORMANCE:
        content = performance_csv(report)
    else:
        content = transactions_csv(report)

    logger.debug(f"Rendered {report_type.value} CSV: {len(content)} chars")
    return ExportedReport(content=content, media_type=CSV_MEDIA_TYPE, filename=filename)
