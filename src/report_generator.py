"""Partner commission statement generation"""
import pandas as pd
from decimal import Decimal
from typing import List, Optional
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side

from .models import Job, Partner
from .calculator import CommissionCalculator
from config import COMPANY_NAME, EXCEL_STYLES, JOB_STATUSES

COLUMNS = ['Date', 'Customer', 'Service', 'Status', 'Final Price', 'Rate', 'Commission']


class ReportGenerator:
    """
    Generates Excel commission statements for partners.
    """

    def __init__(self, partner: Partner):
        self.partner = partner
        self.calculator = CommissionCalculator()
        self.jobs: List[Job] = []

    def add_jobs(self, jobs: List[Job]) -> None:
        """Add referred jobs to the statement."""
        self.jobs.extend(jobs)

    def to_dataframe(self) -> pd.DataFrame:
        """
        Convert jobs to a pandas DataFrame (numbers left unformatted).
        """
        data = []
        for job in self.jobs:
            counted = self.calculator.counts_toward_earnings(job)
            data.append({
                'Date': job.created_at.strftime('%m/%d/%Y') if job.created_at else '',
                'Customer': job.customer_name,
                'Service': job.service,
                'Status': JOB_STATUSES.get(job.status, job.status),
                'Final Price': float(job.final_price) if job.final_price is not None else None,
                'Rate': f"{job.commission_rate:g}%",
                'Commission': float(self.calculator.compute_commission(job)) if counted else 0.0,
            })

        return pd.DataFrame(data, columns=COLUMNS)

    def get_summary_row(self) -> dict:
        """Get summary row data."""
        completed = [j for j in self.jobs if self.calculator.counts_toward_earnings(j)]
        return {
            'Date': f"{len(self.jobs)} Referrals",
            'Customer': '',
            'Service': '',
            'Status': f"{len(completed)} Completed",
            'Final Price': float(sum((j.final_price for j in completed), Decimal("0"))),
            'Rate': '',
            'Commission': float(self.calculator.compute_total_earnings(self.jobs)),
        }

    def get_date_range(self) -> tuple:
        """Get the date range of jobs."""
        dates = [j.created_at.date() for j in self.jobs if j.created_at]
        if not dates:
            return None, None
        return min(dates), max(dates)

    def export_excel(self, filepath: str) -> None:
        """
        Export statement to an Excel file.

        Args:
            filepath: Path to save the Excel file
        """
        wb = Workbook()
        ws = wb.active
        ws.title = "Commission Statement"

        # Styles
        header_fill = PatternFill(start_color=EXCEL_STYLES['header_bg_color'],
                                  end_color=EXCEL_STYLES['header_bg_color'],
                                  fill_type='solid')
        summary_fill = PatternFill(start_color=EXCEL_STYLES['summary_bg_color'],
                                   end_color=EXCEL_STYLES['summary_bg_color'],
                                   fill_type='solid')
        header_font = Font(name=EXCEL_STYLES['font_name'],
                           size=EXCEL_STYLES['font_size'],
                           bold=True)
        title_font = Font(name=EXCEL_STYLES['font_name'], size=14, bold=True)
        border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

        # Title section
        ws['A1'] = COMPANY_NAME
        ws['A1'].font = title_font

        ws['A2'] = f"Partner: {self.partner.company_name} ({self.partner.commission_rate:g}%)"
        ws['A2'].font = Font(size=12, bold=True)

        period = self.statement_period()
        if period:
            ws['A3'] = f"Period: {period}"

        ws['E2'] = "Commission Owed"
        ws['F2'] = float(self.partner.display_commission_owed)
        ws['F2'].number_format = '$#,##0.00'

        # Data starts at row 5
        df = self.to_dataframe()
        start_row = 5
        money_columns = {'Final Price', 'Commission'}

        # Headers
        for col_idx, col_name in enumerate(df.columns, 1):
            cell = ws.cell(row=start_row, column=col_idx, value=col_name)
            cell.fill = header_fill
            cell.font = header_font
            cell.border = border
            cell.alignment = Alignment(horizontal='center')

        # Data rows
        for row_offset, row in enumerate(df.itertuples(index=False), 1):
            for col_idx, (col_name, value) in enumerate(zip(df.columns, row), 1):
                if col_name in money_columns and pd.isna(value):
                    value = None
                cell = ws.cell(row=start_row + row_offset, column=col_idx, value=value)
                cell.border = border
                if col_name in money_columns:
                    cell.alignment = Alignment(horizontal='right')
                    cell.number_format = '$#,##0.00'

        # Summary row
        summary_row = start_row + len(df) + 1
        summary_data = self.get_summary_row()
        for col_idx, col_name in enumerate(df.columns, 1):
            cell = ws.cell(row=summary_row, column=col_idx, value=summary_data[col_name])
            cell.fill = summary_fill
            cell.font = Font(bold=True)
            cell.border = border
            if col_name in money_columns:
                cell.alignment = Alignment(horizontal='right')
                cell.number_format = '$#,##0.00'

        # Adjust column widths
        column_widths = [12, 24, 28, 14, 14, 8, 14]
        for idx, width in enumerate(column_widths, 1):
            ws.column_dimensions[chr(64 + idx)].width = width

        # Save
        Path(filepath).parent.mkdir(parents=True, exist_ok=True)
        wb.save(filepath)

    def statement_period(self) -> Optional[str]:
        start_date, end_date = self.get_date_range()
        if not start_date:
            return None
        return f"{start_date:%m/%d/%Y} - {end_date:%m/%d/%Y}"
