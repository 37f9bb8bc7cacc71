"""Itemized quote calculation for the online booking popup"""
import math
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, List, Optional

from config import NO_TRAVEL_SERVICES, TOW_RATE_PER_MILE, TRAVEL_RATE_PER_MILE
from .discount_policy import fallback_policy
from .models import DiscountPolicy, Quote, QuoteLineItem, ServicePriceLookup, TimeMultiplier
from .money import apply_discount, positive_or_none, round_cents, to_decimal

ZERO = Decimal("0")


@dataclass(frozen=True)
class QuoteOptions:
    """Distances collected by the popup. Missing or bad values mean 'no line'."""
    travel_miles: Any = None
    tow_miles_distance: Any = None
    is_towing: bool = False


def bill_miles(distance: Any) -> Optional[int]:
    """Round a measured distance up to whole billable miles."""
    miles = positive_or_none(distance)
    if miles is None:
        return None
    return math.ceil(miles)


class QuoteCalculator:
    """
    Builds itemized quotes.

    Every line is rounded to cents, then discounted and rounded on its own
    (whole dollars, half-up); the quote totals are sums of those rounded
    amounts, so a customer adding up the lines always gets the total shown.

    Line order:
    1. Service fee
    2. Travel miles (dispatch base -> pickup), when travel_miles > 0
    3. Tow miles (pickup -> drop-off), only for towing services with a
       distance > 0
    4. After-hours notice, when a time multiplier other than 1 applies
       (label only; the multiplier is already in lines 1-3)
    """

    def __init__(self, travel_rate: Any = TRAVEL_RATE_PER_MILE, tow_rate: Any = TOW_RATE_PER_MILE):
        self.travel_rate = to_decimal(travel_rate)
        self.tow_rate = to_decimal(tow_rate)

    def compute_quote(self, service_base_price: Any, options: QuoteOptions,
                      discount_rate: Any,
                      time_multiplier: Optional[TimeMultiplier] = None) -> Quote:
        """
        Compute a quote.

        Args:
            service_base_price: Standard price of the selected service
            options: Travel/tow distances and whether the service is towing
            discount_rate: Online discount as a fraction (0.15 for 15%)
            time_multiplier: After-hours multiplier, applied before the discount

        Returns:
            Quote with ordered line items; malformed amounts are omitted
        """
        rate = self._valid_rate(discount_rate)
        if time_multiplier is not None and time_multiplier.is_standard:
            time_multiplier = None
        factor = time_multiplier.multiplier if time_multiplier else Decimal("1")
        lines: List[QuoteLineItem] = []

        base_price = positive_or_none(service_base_price)
        if base_price is not None:
            lines.append(self._line("Service", base_price * factor, rate))

        travel_miles = positive_or_none(options.travel_miles)
        if travel_miles is not None:
            lines.append(self._line(
                f"Travel Miles ({travel_miles} mi × ${self.travel_rate:.2f})",
                travel_miles * self.travel_rate * factor,
                rate,
            ))

        tow_miles = positive_or_none(options.tow_miles_distance)
        if options.is_towing and tow_miles is not None:
            lines.append(self._line(
                f"Tow Miles ({tow_miles} mi × ${self.tow_rate:.2f})",
                tow_miles * self.tow_rate * factor,
                rate,
            ))

        if time_multiplier is not None and lines:
            lines.append(QuoteLineItem(
                label=f"After-hours ({time_multiplier.label})",
                original_amount=ZERO,
                discounted_amount=ZERO,
            ))

        return Quote(lines=lines, discount_rate=rate, time_multiplier=time_multiplier)

    def quote_for_service(self, lookup: ServicePriceLookup, options: QuoteOptions,
                          policy: DiscountPolicy,
                          time_multiplier: Optional[TimeMultiplier] = None) -> Optional[Quote]:
        """
        Quote a catalog lookup.

        Returns None while the catalog is still loading so placeholder
        prices are never shown as final. A lookup carrying an error is
        quoted from its fallback price and marked degraded. The time
        multiplier only applies to services marked after-hours eligible.
        """
        if lookup.loading:
            return None

        # Towing comes from the catalog entry, not from the form
        options = replace(
            options,
            travel_miles=None if lookup.service_name in NO_TRAVEL_SERVICES else options.travel_miles,
            is_towing=lookup.is_towing,
        )
        multiplier = time_multiplier if lookup.after_hours_eligible else None

        quote = self.compute_quote(lookup.standard_price, options, policy.rate, multiplier)
        if lookup.error is not None:
            return replace(quote, degraded=True)
        return quote

    @staticmethod
    def _line(label: str, amount: Decimal, rate: Decimal) -> QuoteLineItem:
        original = round_cents(amount)
        return QuoteLineItem(
            label=label,
            original_amount=original,
            discounted_amount=apply_discount(original, rate),
        )

    @staticmethod
    def _valid_rate(discount_rate: Any) -> Decimal:
        rate = to_decimal(discount_rate)
        if rate is None or not Decimal("0") <= rate < Decimal("1"):
            print(f"⚠️ Invalid discount rate {discount_rate!r}, using fallback")
            return fallback_policy().rate
        return rate
