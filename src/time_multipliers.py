"""After-hours pricing - time-of-day multipliers read from the pricing config"""
from dataclasses import dataclass
from datetime import datetime, time, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from config import AFTER_HOURS_TIMEZONE, MAX_TIME_MULTIPLIER
from .config_store import flag_enabled
from .models import TimeMultiplier
from .money import positive_or_none

STANDARD = TimeMultiplier(multiplier=Decimal("1"), label="Standard")


@dataclass(frozen=True)
class TimePeriod:
    """
    A priced time window.

    days_of_week uses 0 = Sunday ... 6 = Saturday. A start_time later
    than end_time means the window runs past midnight (e.g. 20:00-07:00).
    """
    name: str
    multiplier: Decimal
    start_time: time
    end_time: time
    days_of_week: Tuple[int, ...]
    badge: str = ""
    active: bool = True

    @property
    def label(self) -> str:
        return self.badge or self.name

    @property
    def crosses_midnight(self) -> bool:
        return self.start_time > self.end_time

    def matches(self, day: int, current: time) -> bool:
        if not self.active or day not in self.days_of_week:
            return False
        if self.crosses_midnight:
            return current >= self.start_time or current < self.end_time
        return self.start_time <= current < self.end_time

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'TimePeriod':
        """
        Build a period from a config row.

        Raises:
            ValueError: missing/invalid times, days or multiplier
        """
        multiplier = positive_or_none(row.get('multiplier'))
        if multiplier is None or multiplier > MAX_TIME_MULTIPLIER:
            raise ValueError(f"invalid multiplier {row.get('multiplier')!r}")

        return cls(
            name=str(row.get('name') or 'After-hours'),
            multiplier=multiplier,
            start_time=_parse_time(row.get('start_time')),
            end_time=_parse_time(row.get('end_time')),
            days_of_week=_parse_days(row.get('days_of_week')),
            badge=str(row.get('badge') or ''),
            active=flag_enabled(row.get('active'), default=True),
        )


def _parse_time(value: Any) -> time:
    if isinstance(value, time):
        return value
    text = str(value or '').strip()
    for fmt in ('%H:%M', '%H:%M:%S'):
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"invalid time {value!r}")


def _parse_days(value: Any) -> Tuple[int, ...]:
    if isinstance(value, bool):
        raise ValueError(f"invalid days {value!r}")
    if isinstance(value, int):
        parts = [value]
    elif isinstance(value, (list, tuple)):
        parts = list(value)
    else:
        parts = [p for p in str(value or '').replace(';', ',').split(',') if p.strip()]

    try:
        days = tuple(sorted({int(str(p).strip()) for p in parts}))
    except ValueError:
        raise ValueError(f"invalid days {value!r}")
    if not days or any(d < 0 or d > 6 for d in days):
        raise ValueError(f"invalid days {value!r}")
    return days


def parse_periods(rows: List[Dict[str, Any]]) -> List[TimePeriod]:
    """Parse period rows in config order, skipping rows that don't parse."""
    periods = []
    for row in rows or []:
        try:
            periods.append(TimePeriod.from_row(row))
        except ValueError as e:
            print(f"⚠️ Skipping time period {row.get('name', '?')}: {e}")
    return periods


def service_zone(features: Dict[str, Any]) -> ZoneInfo:
    name = str(features.get('after_hours_timezone') or AFTER_HOURS_TIMEZONE)
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        print(f"⚠️ Unknown timezone {name!r}, using {AFTER_HOURS_TIMEZONE}")
        return ZoneInfo(AFTER_HOURS_TIMEZONE)


def current_time_multiplier(features: Optional[Dict[str, Any]], periods: List[TimePeriod],
                            now: Optional[datetime] = None) -> Optional[TimeMultiplier]:
    """
    Multiplier in effect at `now` (default: current time).

    Args:
        features: The 'features' config record
        periods: Parsed periods, first match wins
        now: Moment to price; naive datetimes are taken as system local time

    Returns:
        None when after-hours pricing is off or no periods are configured,
        the matching period's multiplier, or STANDARD when none matches
    """
    if not features or not flag_enabled(features.get('after_hours_enabled')):
        return None
    if not periods:
        return None

    moment = now or datetime.now(timezone.utc)
    local = moment.astimezone(service_zone(features))
    day = (local.weekday() + 1) % 7  # Python's Monday = 0 -> Sunday = 0
    current = local.time().replace(second=0, microsecond=0)

    for period in periods:
        if period.matches(day, current):
            return TimeMultiplier(multiplier=period.multiplier, label=period.label)
    return STANDARD
