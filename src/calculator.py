"""Partner commission calculation for CloseBy Towing referrals"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Union

from .models import Job, Partner, PartnerEarnings
from .money import round_cents, to_decimal

ZERO = Decimal("0.00")


class CommissionCalculator:
    """
    Calculates partner commission on referred jobs.

    Business Logic:
    ===============

    - Commission = job final price × job commission rate / 100
    - The rate is the one snapshotted on the job when it was referred,
      so changing a partner's rate never alters past commissions
    - Only completed jobs with a final price count toward earnings
    - Monthly earnings group jobs by the calendar month of created_at
    - Commission owed = total earned - total paid, shown as at least $0
    """

    def compute_commission(self, job: Job) -> Decimal:
        """
        Calculate commission for a single job.

        Args:
            job: The referred job

        Returns:
            Commission in dollars, rounded to cents (0.00 if no final price)
        """
        final_price = to_decimal(job.final_price)
        rate = to_decimal(job.commission_rate)
        if final_price is None or final_price < 0 or rate is None or rate < 0:
            return ZERO
        return round_cents(final_price * rate / Decimal("100"))

    def counts_toward_earnings(self, job: Job) -> bool:
        return job.is_completed and to_decimal(job.final_price) is not None

    def calculate_batch(self, jobs: List[Job]) -> List[Decimal]:
        """Commission for each job, in order."""
        return [self.compute_commission(job) for job in jobs]

    def compute_total_earnings(self, jobs: List[Job]) -> Decimal:
        """Commission earned across all completed jobs."""
        return sum(
            (self.compute_commission(job) for job in jobs if self.counts_toward_earnings(job)),
            ZERO,
        )

    def compute_monthly_earnings(self, jobs: List[Job],
                                 reference_month: Union[date, datetime]) -> Decimal:
        """
        Commission earned by jobs created in the reference calendar month.

        Args:
            jobs: Jobs to aggregate
            reference_month: Any date in the month of interest

        Returns:
            Sum of commissions for completed jobs created that month
        """
        return sum(
            (self.compute_commission(job) for job in jobs
             if self.counts_toward_earnings(job) and _in_month(job.created_at, reference_month)),
            ZERO,
        )

    def calculate_summary(self, partner: Partner, jobs: List[Job],
                          reference_month: Optional[date] = None) -> PartnerEarnings:
        """
        Summarize a partner's referrals for the dashboard.

        Args:
            partner: The partner record (stored totals)
            jobs: Jobs referred by the partner
            reference_month: Month for the "this month" figure (default: today)

        Returns:
            PartnerEarnings
        """
        reference_month = reference_month or date.today()
        return PartnerEarnings(
            partner=partner,
            total_referrals=len(jobs),
            pending_referrals=len([j for j in jobs if j.status == 'pending']),
            completed_referrals=len([j for j in jobs if j.is_completed]),
            earned_from_jobs=self.compute_total_earnings(jobs),
            month_earnings=self.compute_monthly_earnings(jobs, reference_month),
            jobs=list(jobs),
        )


def _in_month(created_at: Optional[datetime], reference: Union[date, datetime]) -> bool:
    if created_at is None:
        return False
    return created_at.year == reference.year and created_at.month == reference.month
