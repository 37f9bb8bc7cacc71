"""Service price catalog backed by the pricing config store"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from config import (
    COMPANY_PHONE,
    DEFAULT_FALLBACK_PRICE,
    FALLBACK_PRICES,
    HIDDEN_SERVICES,
    TOW_MILES_SERVICE,
    TOW_RATE_PER_MILE,
    TRAVEL_MILES_SERVICE,
    TRAVEL_RATE_PER_MILE,
)
from .config_store import ConfigStore, PricingConfig, TOWING_SERVICES, flag_enabled
from .discount_policy import fallback_policy, resolve_discount_policy
from .exceptions import ConfigUnavailableError
from .models import DiscountPolicy, ServicePrice, ServicePriceLookup, TimeMultiplier
from .money import apply_discount, positive_or_none, round_cents, to_decimal
from .time_multipliers import TimePeriod, current_time_multiplier, parse_periods

SERVICE_TYPES = ('towing', 'onsite', 'recovery', 'custom')


class PriceCatalog:
    """
    Looks up standard and online prices for services.

    The catalog performs a single config read (load()). Until it resolves,
    lookups report loading=True with a non-zero placeholder. Lookups never
    raise: missing entries come back with an error message and the
    hard-coded fallback price pair.
    """

    def __init__(self, store: ConfigStore):
        self.store = store
        self._config: Optional[PricingConfig] = None
        self._policy: Optional[DiscountPolicy] = None
        self._periods: List[TimePeriod] = []
        self._error: Optional[str] = None
        self._loaded = False

    # ============ LOADING ============

    def load(self, force: bool = False) -> bool:
        """Fetch the config. Returns True when prices are available."""
        try:
            self._config = self.store.fetch_config(force=force)
            self._policy = resolve_discount_policy(self._config.features)
            self._periods = parse_periods(self._config.time_periods)
            self._error = None
        except ConfigUnavailableError as e:
            print(f"❌ Error fetching pricing config: {e}")
            self._config = None
            self._policy = None
            self._periods = []
            self._error = f"Unable to load pricing. Please call {COMPANY_PHONE}."
        self._loaded = True
        return self._config is not None

    @property
    def loading(self) -> bool:
        return not self._loaded

    @property
    def error(self) -> Optional[str]:
        return self._error

    # ============ DISCOUNT ============

    @property
    def policy(self) -> DiscountPolicy:
        """The discount policy resolved from the same config read as the prices."""
        return self._policy or fallback_policy()

    def get_online_discount_rate(self) -> Decimal:
        return self.policy.rate

    def get_discount_text(self) -> str:
        return self.policy.label

    # ============ AFTER-HOURS ============

    def get_time_multiplier(self, now: Optional[datetime] = None) -> Optional[TimeMultiplier]:
        """Multiplier in effect now, or None when after-hours pricing is off."""
        if self._config is None:
            return None
        return current_time_multiplier(self._config.features, self._periods, now)

    # ============ PRICES ============

    def get_service_price(self, name: str) -> ServicePriceLookup:
        """Look up a service by exact (case-sensitive) name."""
        if self.loading:
            return self._fallback_lookup(name, loading=True)
        if self._config is None:
            return self._fallback_lookup(name, error=self._error)

        service = self.get_service(name)
        if service is None:
            return self._fallback_lookup(
                name, error=f"Pricing not available for {name}. Please call {COMPANY_PHONE}."
            )

        return ServicePriceLookup(
            service_name=service.service_name,
            standard_price=service.standard_price,
            online_price=service.online_price,
            service_type=service.service_type,
            after_hours_eligible=service.after_hours_eligible,
        )

    def get_service(self, name: str) -> Optional[ServicePrice]:
        """Return the configured ServicePrice, or None if unavailable."""
        if self._config is None or name in HIDDEN_SERVICES:
            return None
        row = self._config.services.get(name)
        if row is None:
            return None

        standard_price = positive_or_none(row.get('standard_price'))
        if standard_price is None:
            # Custom-priced services (e.g. Impound) have no quotable price
            return None

        service_type = str(row.get('type', 'onsite')).strip().lower()
        if service_type not in SERVICE_TYPES:
            service_type = 'onsite'

        return ServicePrice(
            service_name=name,
            standard_price=standard_price,
            online_price=apply_discount(standard_price, self.policy.rate),
            label=str(row.get('label') or name),
            service_type=service_type,
            after_hours_eligible=flag_enabled(row.get('after_hours_eligible')),
        )

    def list_services(self) -> List[ServicePrice]:
        """Quotable services in config order"""
        if self._config is None:
            return []
        services = (self.get_service(name) for name in self._config.services)
        return [s for s in services if s is not None]

    def get_mileage_rates(self) -> Tuple[Decimal, Decimal]:
        """(travel rate, tow rate) per mile"""
        return (
            self._rate_for(TRAVEL_MILES_SERVICE, TRAVEL_RATE_PER_MILE),
            self._rate_for(TOW_MILES_SERVICE, TOW_RATE_PER_MILE),
        )

    def _rate_for(self, name: str, default: float) -> Decimal:
        if self._config is not None:
            row = self._config.services.get(name) or {}
            rate = positive_or_none(row.get('rate_per_mile'))
            if rate is not None:
                return rate
        return to_decimal(default)

    def _fallback_lookup(self, name: str, loading: bool = False,
                         error: Optional[str] = None) -> ServicePriceLookup:
        standard_price = to_decimal(FALLBACK_PRICES.get(name, DEFAULT_FALLBACK_PRICE))
        return ServicePriceLookup(
            service_name=name,
            standard_price=standard_price,
            online_price=apply_discount(standard_price, self.policy.rate),
            loading=loading,
            error=error,
            service_type='towing' if name in TOWING_SERVICES else 'onsite',
        )


def display_price(lookup: ServicePriceLookup, online: bool = True) -> str:
    """'$75' for resolved prices, '$...' while loading or on error."""
    if not lookup.is_final:
        return "$..."
    amount = lookup.online_price if online else lookup.standard_price
    return f"${amount:,.0f}" if amount == amount.to_integral_value() else f"${round_cents(amount):,.2f}"
