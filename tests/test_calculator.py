"""Tests for the commission calculator"""
import pytest
import sys
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.models import Job, Partner
from src.calculator import CommissionCalculator


def _job(job_id="1", price=200, rate=15, status='completed', created_at=None):
    return Job(
        id=job_id,
        commission_rate=rate,
        status=status,
        final_price=Decimal(str(price)) if price is not None else None,
        partner_id="p1",
        created_at=created_at or datetime(2026, 3, 10, 12, 0),
    )


class TestCommissionCalculator:
    """Test cases for CommissionCalculator"""

    def setup_method(self):
        self.calc = CommissionCalculator()

    def test_commission_amount(self):
        """
        Test: $200 final price, 15% commission
        Expected: $30.00
        """
        assert self.calc.compute_commission(_job()) == Decimal("30.00")

    def test_commission_rounds_to_cents(self):
        """$123.45 at 12.5% = 15.43125 → $15.43"""
        assert self.calc.compute_commission(_job(price="123.45", rate=12.5)) == Decimal("15.43")

    def test_snapshot_rate_is_used(self):
        """
        Test: job referred at 10%, partner later moved to 20%
        Expected: commission still uses 10%
        """
        partner = Partner(id="p1", company_name="Acme Auto Body", commission_rate=10)
        job = _job(price=300, rate=partner.commission_rate)

        partner.commission_rate = 20

        assert self.calc.compute_commission(job) == Decimal("30.00")

    def test_missing_final_price(self):
        assert self.calc.compute_commission(_job(price=None)) == Decimal("0.00")

    def test_huge_final_price_earns_nothing(self):
        assert self.calc.compute_commission(_job(price="1e30")) == Decimal("0.00")
        assert self.calc.compute_total_earnings([_job(price="1e30"), _job()]) == Decimal("30.00")

    def test_batch_calculation(self):
        jobs = [_job("1", 200, 15), _job("2", 100, 10), _job("3", 80, 20)]
        assert self.calc.calculate_batch(jobs) == [30, 10, 16]

    def test_only_completed_jobs_count(self):
        jobs = [
            _job("1", 200, 15),
            _job("2", 500, 15, status='in_progress'),
            _job("3", 500, 15, status='cancelled'),
            _job("4", None, 15),
        ]
        assert self.calc.compute_total_earnings(jobs) == Decimal("30.00")

    def test_monthly_uses_calendar_month(self):
        """
        Jobs on Mar 1 and Mar 31 count for March; Feb 28 does not,
        even though it is within 30 days of Mar 10.
        """
        jobs = [
            _job("1", 100, 10, created_at=datetime(2026, 3, 1, 0, 5)),
            _job("2", 100, 10, created_at=datetime(2026, 3, 31, 23, 55)),
            _job("3", 100, 10, created_at=datetime(2026, 2, 28, 9, 0)),
            _job("4", 100, 10, created_at=datetime(2025, 3, 15, 9, 0)),
        ]

        assert self.calc.compute_monthly_earnings(jobs, date(2026, 3, 10)) == Decimal("20.00")
        assert self.calc.compute_monthly_earnings(jobs, date(2026, 2, 1)) == Decimal("10.00")

    def test_summary(self):
        partner = Partner(
            id="p1",
            company_name="Acme Auto Body",
            total_commission_earned=Decimal("46.00"),
            total_paid=Decimal("30.00"),
        )
        jobs = [
            _job("1", 200, 15),
            _job("2", 160, 10),
            _job("3", None, 10, status='pending'),
        ]

        summary = self.calc.calculate_summary(partner, jobs, date(2026, 3, 1))

        assert summary.total_referrals == 3
        assert summary.pending_referrals == 1
        assert summary.completed_referrals == 2
        assert summary.earned_from_jobs == Decimal("46.00")
        assert summary.month_earnings == Decimal("46.00")
        assert summary.commission_owed == Decimal("16.00")

    def test_owed_is_clamped_for_display(self):
        partner = Partner(
            id="p1",
            company_name="Acme Auto Body",
            total_commission_earned=Decimal("20.00"),
            total_paid=Decimal("25.00"),
        )
        assert partner.commission_owed == Decimal("-5.00")
        assert partner.display_commission_owed == 0

    def test_partner_rate_validation(self):
        with pytest.raises(ValueError):
            Partner(id="p1", company_name="Bad", commission_rate=150)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
