# o2d/dispatch_dashboard/report.py
"""
Printable report for the Dispatch Dashboard.

compose_report() is a pure projection of values the dashboard already
computed; render_html() turns it into a self-contained A4 page that the
browser can print or save as PDF.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from html import escape
from typing import List, Optional, Tuple

import pandas as pd

from .constants import DISPLAY_DATE_FORMAT, REPORT_ROW_LIMIT, REPORT_SUBTITLE, REPORT_TITLE
from .filters import FilterSelection, describe_active_filters
from .metrics import DispatchMetrics
from .models import DashboardSnapshot, parse_timestamp
from .ranking import RankedEntry, Ranking

logger = logging.getLogger(__name__)

EMPTY_CELL = "-"

KPI_CARDS = [
    ('Total Gate In', 'total_gate_in', ''),
    ('Total Gate Out', 'total_gate_out', ''),
    ('Total Dispatch', 'total_dispatch', ''),
    ('Pending Gate Out', 'pending_gate_out', 'alert'),
]


@dataclass(frozen=True)
class ReportRow:
    sr_no: int
    party_name: str
    item_name: str
    in_date: str
    out_date: str
    invoice_no: str


@dataclass(frozen=True)
class DashboardReport:
    title: str
    subtitle: str
    generated_at: datetime
    metrics: DispatchMetrics
    applied_filters: Tuple[Tuple[str, str], ...]
    top_customers: Tuple[RankedEntry, ...]
    rows: Tuple[ReportRow, ...]
    total_rows: int
    last_updated: Optional[datetime] = None

    @property
    def truncated(self) -> bool:
        return self.total_rows > len(self.rows)

    @property
    def truncation_note(self) -> str:
        if not self.truncated:
            return ""
        return f"Showing first {len(self.rows)} records of {self.total_rows} total results"


def display_date(value: str) -> str:
    ts = parse_timestamp(value)
    if ts is None:
        return value or EMPTY_CELL
    return ts.strftime(DISPLAY_DATE_FORMAT)


def _report_rows(df: pd.DataFrame, limit: int) -> List[ReportRow]:
    if df is None or df.empty:
        return []

    rows = []
    for sr_no, record in enumerate(df.head(limit).itertuples(index=False), start=1):
        rows.append(ReportRow(
            sr_no=sr_no,
            party_name=record.party_name or EMPTY_CELL,
            item_name=record.item_name or EMPTY_CELL,
            in_date=display_date(record.indate),
            out_date=display_date(record.outdate),
            invoice_no=record.invoice_no or EMPTY_CELL,
        ))
    return rows


def compose_report(
    snapshot: Optional[DashboardSnapshot],
    filtered_df: pd.DataFrame,
    metrics: DispatchMetrics,
    ranking: Ranking,
    selection: FilterSelection,
    generated_at: datetime,
    row_limit: int = REPORT_ROW_LIMIT
) -> DashboardReport:
    """
    Assemble the report from the current dashboard state.

    Args:
        snapshot: Latest snapshot (only its last-updated time is used)
        filtered_df: Rows after apply_filters
        metrics: Output of derive_metrics
        ranking: Output of rank_parties (Others is not listed)
        selection: Current filters, only non-default ones are listed
        generated_at: Report timestamp
        row_limit: Maximum listed rows

    Returns:
        DashboardReport
    """
    total_rows = 0 if filtered_df is None else len(filtered_df)
    report = DashboardReport(
        title=REPORT_TITLE,
        subtitle=REPORT_SUBTITLE,
        generated_at=generated_at,
        metrics=metrics,
        applied_filters=tuple(describe_active_filters(selection)),
        top_customers=tuple(ranking.entries),
        rows=tuple(_report_rows(filtered_df, row_limit)),
        total_rows=total_rows,
        last_updated=snapshot.last_updated if snapshot is not None else None,
    )
    logger.info(f"Composed report: {total_rows} rows, {len(report.top_customers)} customers")
    return report


# =============================================================================
# HTML
# =============================================================================

REPORT_CSS = """
@page { margin: 20mm; size: A4; }
* { margin: 0; padding: 0; box-sizing: border-box; }
body { font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; color: #333; line-height: 1.6; background: white; }
.header { text-align: center; margin-bottom: 30px; border-bottom: 2px solid #2563eb; padding-bottom: 20px; }
.header h1 { font-size: 28px; color: #1e40af; margin-bottom: 5px; }
.header .subtitle { font-size: 14px; color: #6b7280; margin-bottom: 10px; }
.timestamp { font-size: 12px; color: #9ca3af; }
.section { margin-bottom: 30px; page-break-inside: avoid; }
.section-title { font-size: 18px; font-weight: 600; color: #1e40af; margin-bottom: 15px; padding-bottom: 5px; border-bottom: 1px solid #e5e7eb; }
.kpi-grid { display: grid; grid-template-columns: repeat(4, 1fr); gap: 15px; margin-bottom: 20px; }
.kpi-card { border: 1px solid #e5e7eb; border-radius: 8px; padding: 15px; background: #f9fafb; }
.kpi-label { font-size: 12px; color: #6b7280; margin-bottom: 5px; text-transform: uppercase; letter-spacing: 0.5px; }
.kpi-value { font-size: 20px; font-weight: 700; color: #1e40af; }
.kpi-value.alert { color: #dc2626; }
table { width: 100%; border-collapse: collapse; margin-top: 10px; font-size: 11px; }
th { background: #f3f4f6; color: #374151; font-weight: 600; padding: 12px 8px; text-align: left; border: 1px solid #d1d5db; }
td { padding: 10px 8px; border: 1px solid #e5e7eb; vertical-align: top; }
tr:nth-child(even) { background: #f9fafb; }
.filters-section { background: #eff6ff; padding: 15px; border-radius: 8px; border-left: 4px solid #2563eb; }
.filter-item { display: inline-block; background: white; padding: 5px 10px; margin: 5px; border-radius: 15px; border: 1px solid #d1d5db; font-size: 12px; }
.no-data { text-align: center; color: #6b7280; font-style: italic; padding: 20px; }
.note { margin-top: 15px; font-size: 12px; color: #6b7280; text-align: center; }
.page-break { page-break-before: always; }
@media print { body { print-color-adjust: exact; } }
"""

PRINT_SCRIPT = "<script>window.addEventListener('load', function () { window.focus(); window.print(); });</script>"


def _kpi_section(metrics: DispatchMetrics) -> str:
    cards = "".join(
        f'<div class="kpi-card"><div class="kpi-label">{escape(label)}</div>'
        f'<div class="kpi-value {css}">{getattr(metrics, attr):,}</div></div>'
        for label, attr, css in KPI_CARDS
    )
    return (
        '<div class="section"><div class="section-title">Key Performance Indicators</div>'
        f'<div class="kpi-grid">{cards}</div></div>'
    )


def _filters_section(applied_filters) -> str:
    if not applied_filters:
        return ""
    chips = "".join(
        f'<span class="filter-item">{escape(label)}: {escape(value)}</span>'
        for label, value in applied_filters
    )
    return (
        '<div class="section"><div class="section-title">Applied Filters</div>'
        f'<div class="filters-section">{chips}</div></div>'
    )


def _top_customers_section(entries) -> str:
    if not entries:
        body = '<div class="no-data">No customer data available</div>'
    else:
        rows = "".join(
            f"<tr><td>{e.rank}</td><td>{escape(e.name)}</td>"
            f"<td>{e.count:,}</td><td>{escape(e.items_text)}</td></tr>"
            for e in entries
        )
        body = (
            '<table><thead><tr><th style="width:8%">Rank</th><th style="width:40%">Customer Name</th>'
            '<th style="width:20%">Dispatches</th><th style="width:32%">Items</th></tr></thead>'
            f"<tbody>{rows}</tbody></table>"
        )
    return f'<div class="section"><div class="section-title">Top 10 Customers</div>{body}</div>'


def _rows_section(report: DashboardReport) -> str:
    if not report.rows:
        body = '<div class="no-data">No records found matching your filters</div>'
    else:
        rows = "".join(
            f"<tr><td>{r.sr_no}</td><td>{escape(r.party_name)}</td><td>{escape(r.item_name)}</td>"
            f"<td>{escape(r.in_date)}</td><td>{escape(r.out_date)}</td><td>{escape(r.invoice_no)}</td></tr>"
            for r in report.rows
        )
        body = (
            '<table><thead><tr><th style="width:6%">Sr.No.</th><th style="width:30%">Party Name</th>'
            '<th style="width:20%">Item</th><th style="width:14%">In Date</th>'
            '<th style="width:14%">Out Date</th><th style="width:16%">Invoice No.</th></tr></thead>'
            f"<tbody>{rows}</tbody></table>"
        )
        if report.truncated:
            body += f'<div class="note">{escape(report.truncation_note)}</div>'

    return (
        '<div class="section page-break">'
        f'<div class="section-title">Filtered Results ({report.total_rows} total records)</div>'
        f"{body}</div>"
    )


def render_html(report: DashboardReport, auto_print: bool = True) -> str:
    """
    Self-contained printable HTML. Every data value is escaped.

    Args:
        report: Output of compose_report
        auto_print: Open the print dialog once the page loads
    """
    generated = report.generated_at.strftime(f"{DISPLAY_DATE_FORMAT} %H:%M:%S")
    parts = [
        "<!DOCTYPE html><html><head><meta charset=\"UTF-8\">",
        f"<title>{escape(report.title)}</title><style>{REPORT_CSS}</style></head><body>",
        '<div class="header">',
        f"<h1>{escape(report.title)}</h1>",
        f'<div class="subtitle">{escape(report.subtitle)}</div>',
        f'<div class="timestamp">Generated on: {generated}</div>',
        "</div>",
        _kpi_section(report.metrics),
        _filters_section(report.applied_filters),
        _top_customers_section(report.top_customers),
        _rows_section(report),
    ]
    if auto_print:
        parts.append(PRINT_SCRIPT)
    parts.append("</body></html>")
    return "".join(parts)


__all__ = [
    'DashboardReport',
    'ReportRow',
    'display_date',
    'compose_report',
    'render_html',
]
