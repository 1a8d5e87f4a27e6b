# o2d/dispatch_dashboard/export.py
"""
Formatted Excel Export for the Dispatch Dashboard

Same content as the printable report:
- Summary sheet with KPIs and applied filters
- Top customers
- Dispatch rows

Uses openpyxl for formatting capabilities.
"""

import logging
from io import BytesIO
from typing import List, Optional, Tuple

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from .constants import DISPLAY_DATE_FORMAT, EXCEL_STYLES
from .report import KPI_CARDS, DashboardReport, display_date

logger = logging.getLogger(__name__)

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# (frame column, header, width)
DETAIL_COLUMNS: List[Tuple[str, str, int]] = [
    ('party_name', 'Party Name', 30),
    ('item_name', 'Item', 22),
    ('indate', 'In Date', 12),
    ('outdate', 'Out Date', 12),
    ('gate_out_time', 'Gate Out', 18),
    ('invoice_no', 'Invoice No.', 16),
    ('order_vrno', 'Order No.', 14),
    ('gate_vrno', 'Gate No.', 14),
    ('sales_person', 'Salesperson', 20),
    ('state_name', 'State', 16),
]

DATE_COLUMNS = {'indate', 'outdate'}


class ReportExporter:
    """
    Excel report generator for the dispatch dashboard.

    Usage:
        exporter = ReportExporter()
        excel_bytes = exporter.create_report(report, filtered_df)

        st.download_button(
            label="Download Excel",
            data=excel_bytes,
            file_name="dispatch_report.xlsx",
            mime=XLSX_MIME
        )
    """

    def __init__(self):
        self.wb = None
        self._init_styles()

    def _init_styles(self):
        self.header_fill = PatternFill(
            start_color=EXCEL_STYLES['header_fill_color'],
            end_color=EXCEL_STYLES['header_fill_color'],
            fill_type='solid'
        )
        self.header_font = Font(bold=True, color=EXCEL_STYLES['header_font_color'], size=11)
        self.title_font = Font(bold=True, size=16)
        self.subtitle_font = Font(bold=True, size=12)

        thin_border = Side(style='thin', color='000000')
        self.cell_border = Border(left=thin_border, right=thin_border, top=thin_border, bottom=thin_border)

        self.center_align = Alignment(horizontal='center', vertical='center')
        self.right_align = Alignment(horizontal='right', vertical='center')

        self.number_format = EXCEL_STYLES['number_format']

    # =========================================================================
    # MAIN EXPORT METHOD
    # =========================================================================

    def create_report(self, report: DashboardReport, detail_df: Optional[pd.DataFrame] = None) -> BytesIO:
        """
        Create the workbook.

        Args:
            report: Output of compose_report
            detail_df: Full filtered frame; when omitted the sheet lists the
                report's (capped) rows

        Returns:
            BytesIO containing Excel file
        """
        self.wb = Workbook()

        self._create_summary_sheet(report)
        self._create_top_customers_sheet(report)
        self._create_detail_sheet(report, detail_df)

        output = BytesIO()
        self.wb.save(output)
        output.seek(0)

        logger.info("Excel report created successfully")
        return output

    def _write_header(self, ws, columns):
        for col_idx, (_, header, width) in enumerate(columns, 1):
            cell = ws.cell(row=1, column=col_idx, value=header)
            cell.fill = self.header_fill
            cell.font = self.header_font
            cell.alignment = self.center_align
            cell.border = self.cell_border
            ws.column_dimensions[get_column_letter(col_idx)].width = width
        ws.freeze_panes = 'A2'

    # =========================================================================
    # SUMMARY SHEET
    # =========================================================================

    def _create_summary_sheet(self, report: DashboardReport):
        ws = self.wb.active
        ws.title = "Summary"

        row = 1
        ws.cell(row=row, column=1, value=report.title).font = self.title_font
        ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=3)
        row += 1
        ws.cell(row=row, column=1, value=report.subtitle)
        row += 2

        ws.cell(row=row, column=1, value="Generated:")
        ws.cell(row=row, column=2, value=report.generated_at.strftime(f"{DISPLAY_DATE_FORMAT} %H:%M"))
        row += 1
        if report.last_updated is not None:
            ws.cell(row=row, column=1, value="Data as of:")
            ws.cell(row=row, column=2, value=report.last_updated.strftime(f"{DISPLAY_DATE_FORMAT} %H:%M"))
            row += 1
        row += 1

        ws.cell(row=row, column=1, value="Key Performance Indicators").font = self.subtitle_font
        row += 1
        for label, attr, _ in KPI_CARDS:
            ws.cell(row=row, column=1, value=label)
            cell = ws.cell(row=row, column=2, value=getattr(report.metrics, attr))
            cell.number_format = self.number_format
            cell.alignment = self.right_align
            row += 1
        row += 1

        ws.cell(row=row, column=1, value="Applied Filters").font = self.subtitle_font
        row += 1
        if not report.applied_filters:
            ws.cell(row=row, column=1, value="None")
            row += 1
        for label, value in report.applied_filters:
            ws.cell(row=row, column=1, value=label)
            ws.cell(row=row, column=2, value=value)
            row += 1

        ws.column_dimensions['A'].width = 25
        ws.column_dimensions['B'].width = 30

    # =========================================================================
    # TOP CUSTOMERS SHEET
    # =========================================================================

    def _create_top_customers_sheet(self, report: DashboardReport):
        ws = self.wb.create_sheet("Top Customers")
        columns = [('rank', 'Rank', 8), ('name', 'Customer Name', 40),
                   ('count', 'Dispatches', 14), ('items_text', 'Items', 50)]
        self._write_header(ws, columns)

        for row_idx, entry in enumerate(report.top_customers, 2):
            for col_idx, (attr, _, _) in enumerate(columns, 1):
                cell = ws.cell(row=row_idx, column=col_idx, value=getattr(entry, attr))
                cell.border = self.cell_border
                if attr == 'count':
                    cell.number_format = self.number_format
                    cell.alignment = self.right_align
                elif attr == 'rank':
                    cell.alignment = self.center_align

    # =========================================================================
    # DETAIL SHEET
    # =========================================================================

    def _create_detail_sheet(self, report: DashboardReport, detail_df: Optional[pd.DataFrame]):
        ws = self.wb.create_sheet("Details")

        if detail_df is None:
            columns = [('sr_no', 'Sr.No.', 8), ('party_name', 'Party Name', 30),
                       ('item_name', 'Item', 22), ('in_date', 'In Date', 12),
                       ('out_date', 'Out Date', 12), ('invoice_no', 'Invoice No.', 16)]
            self._write_header(ws, columns)
            for row_idx, record in enumerate(report.rows, 2):
                for col_idx, (attr, _, _) in enumerate(columns, 1):
                    ws.cell(row=row_idx, column=col_idx, value=getattr(record, attr)).border = self.cell_border
            return

        columns = [('sr_no', 'Sr.No.', 8)] + [c for c in DETAIL_COLUMNS if c[0] in detail_df.columns]
        self._write_header(ws, columns)

        for row_idx, record in enumerate(detail_df.itertuples(index=False), 2):
            ws.cell(row=row_idx, column=1, value=row_idx - 1).border = self.cell_border
            for col_idx, (col_name, _, _) in enumerate(columns[1:], 2):
                value = getattr(record, col_name)
                if col_name in DATE_COLUMNS:
                    value = display_date(value)
                ws.cell(row=row_idx, column=col_idx, value=value or "-").border = self.cell_border

        logger.debug(f"Details sheet: {len(detail_df)} rows")


__all__ = ['ReportExporter', 'XLSX_MIME']
