"""Tests for partner statements and referral data loading"""
import sys
from datetime import datetime
from decimal import Decimal
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from openpyxl import load_workbook

from src.data_loader import DataLoader
from src.models import Job, Partner
from src.report_generator import ReportGenerator


def _jobs():
    return [
        Job(id="1", commission_rate=15, status='completed', final_price=Decimal("200"),
            created_at=datetime(2026, 3, 2), service="Local Towing", customer_name="Dana"),
        Job(id="2", commission_rate=10, status='pending',
            created_at=datetime(2026, 3, 9), service="Lockout Service", customer_name="Lee"),
    ]


class TestReportGenerator:

    def setup_method(self):
        self.partner = Partner(id="p1", company_name="Acme Auto Body", commission_rate=15,
                               total_commission_earned=Decimal("30"), total_paid=Decimal("0"))
        self.generator = ReportGenerator(self.partner)
        self.generator.add_jobs(_jobs())

    def test_dataframe(self):
        df = self.generator.to_dataframe()

        assert list(df['Customer']) == ["Dana", "Lee"]
        assert list(df['Status']) == ["Completed", "Pending"]
        assert df['Commission'].tolist() == [30.0, 0.0]
        assert df['Rate'].tolist() == ["15%", "10%"]

    def test_summary_row(self):
        summary = self.generator.get_summary_row()
        assert summary['Date'] == "2 Referrals"
        assert summary['Final Price'] == 200.0
        assert summary['Commission'] == 30.0

    def test_export_excel(self, tmp_path):
        output = tmp_path / "reports" / "acme.xlsx"
        self.generator.export_excel(str(output))

        ws = load_workbook(output).active
        assert ws['A2'].value == "Partner: Acme Auto Body (15%)"
        assert ws['A3'].value == "Period: 03/02/2026 - 03/09/2026"
        assert ws['F2'].value == 30.0
        assert ws['A5'].value == "Date"
        assert ws['G6'].value == 30.0
        assert ws['E7'].value is None
        assert ws['G8'].value == 30.0


class TestDataLoader:

    def test_load_from_csv(self, tmp_path):
        csv_path = tmp_path / "referrals.csv"
        csv_path.write_text(
            "Date,Customer,Service,Final Price,Commission %,Status\n"
            "2026-03-02,Dana,Local Towing,200,15%,\n"
            "2026-03-09,Lee,Lockout Service,,10,pending\n",
            encoding="utf-8",
        )

        jobs = DataLoader.load_from_csv(str(csv_path), partner_id="p1")

        assert len(jobs) == 2
        assert jobs[0].status == 'completed'
        assert jobs[0].final_price == 200
        assert jobs[0].commission_rate == 15
        assert jobs[0].created_at == datetime(2026, 3, 2)
        assert jobs[1].status == 'pending'
        assert jobs[1].final_price is None
        assert jobs[1].partner_id == "p1"

    def test_rate_override(self, tmp_path):
        csv_path = tmp_path / "referrals.csv"
        csv_path.write_text("Customer,Final Price\nDana,100\n", encoding="utf-8")

        jobs = DataLoader.load_from_csv(str(csv_path), commission_rate=20)

        assert jobs[0].commission_rate == 20
        assert jobs[0].status == 'completed'
