"""Data models for CloseBy Towing pricing and partner commissions"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Literal

from config import DEFAULT_COMMISSION_RATE

JobStatus = Literal['pending', 'accepted', 'in_progress', 'completed', 'cancelled']
ServiceType = Literal['towing', 'onsite', 'recovery', 'custom']


@dataclass(frozen=True)
class ServicePrice:
    """A configured service with its standard and online (discounted) price"""
    service_name: str
    standard_price: Decimal
    online_price: Decimal
    label: str = ""
    service_type: ServiceType = 'onsite'
    after_hours_eligible: bool = False

    @property
    def is_towing(self) -> bool:
        return self.service_type == 'towing'


@dataclass(frozen=True)
class ServicePriceLookup:
    """Result of a catalog lookup, safe to render in every state"""
    service_name: str
    standard_price: Decimal
    online_price: Decimal
    loading: bool = False
    error: Optional[str] = None
    service_type: ServiceType = 'onsite'
    after_hours_eligible: bool = False

    @property
    def is_final(self) -> bool:
        """True when the prices came from resolved configuration."""
        return not self.loading and self.error is None

    @property
    def is_towing(self) -> bool:
        return self.service_type == 'towing'


@dataclass(frozen=True)
class DiscountPolicy:
    """Online discount; rate is a fraction in [0, 1)"""
    rate: Decimal
    label: str
    from_config: bool = False


@dataclass(frozen=True)
class TimeMultiplier:
    """Price multiplier for the current time of day (1 = standard pricing)"""
    multiplier: Decimal
    label: str

    @property
    def is_standard(self) -> bool:
        return self.multiplier == 1


@dataclass(frozen=True)
class QuoteLineItem:
    label: str
    original_amount: Decimal
    discounted_amount: Decimal

    @property
    def is_indicator(self) -> bool:
        """Label-only line (e.g. after-hours notice); amounts are already in other lines."""
        return self.original_amount == 0 and self.discounted_amount == 0


@dataclass(frozen=True)
class Quote:
    """
    Itemized quote. Totals are plain sums of the already-rounded line
    amounts so they always reconcile with the displayed lines.
    """
    lines: List[QuoteLineItem]
    discount_rate: Decimal
    degraded: bool = False
    time_multiplier: Optional[TimeMultiplier] = None

    @property
    def total(self) -> Decimal:
        return sum((line.discounted_amount for line in self.lines), Decimal("0"))

    @property
    def original_total(self) -> Decimal:
        return sum((line.original_amount for line in self.lines), Decimal("0"))

    @property
    def savings(self) -> Decimal:
        return self.original_total - self.total


@dataclass
class Partner:
    """A referral partner (body shop, dealership, property manager...)"""
    id: str
    company_name: str
    commission_rate: float = DEFAULT_COMMISSION_RATE  # percent
    total_commission_earned: Decimal = Decimal("0")
    total_paid: Decimal = Decimal("0")
    total_referrals: int = 0
    membership_tier: str = 'silver'
    status: str = 'active'
    email: str = ""

    def __post_init__(self):
        if not 0 <= self.commission_rate <= 100:
            raise ValueError("Commission rate must be between 0 and 100")

    @property
    def commission_owed(self) -> Decimal:
        """Raw balance; negative if total_paid was corrected after the fact."""
        return self.total_commission_earned - self.total_paid

    @property
    def display_commission_owed(self) -> Decimal:
        return max(self.commission_owed, Decimal("0"))


@dataclass
class Job:
    """A referred job. commission_rate is the partner's rate at referral time."""
    id: str
    commission_rate: float
    status: JobStatus = 'pending'
    final_price: Optional[Decimal] = None
    partner_id: Optional[str] = None
    created_at: Optional[datetime] = None
    service: str = ""
    customer_name: str = ""
    completed_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status == 'completed'


@dataclass
class PartnerEarnings:
    """Earnings summary for a partner dashboard"""
    partner: Partner
    total_referrals: int
    pending_referrals: int
    completed_referrals: int
    earned_from_jobs: Decimal
    month_earnings: Decimal
    jobs: List[Job] = field(default_factory=list)

    @property
    def total_commission_earned(self) -> Decimal:
        return self.partner.total_commission_earned

    @property
    def total_paid(self) -> Decimal:
        return self.partner.total_paid

    @property
    def commission_owed(self) -> Decimal:
        return self.partner.commission_owed

    @property
    def display_commission_owed(self) -> Decimal:
        return self.partner.display_commission_owed
