"""Tests for after-hours time multipliers"""
import sys
from datetime import datetime, time, timezone
from decimal import Decimal
from pathlib import Path
from zoneinfo import ZoneInfo

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from src.config_store import default_time_periods
from src.time_multipliers import STANDARD, TimePeriod, current_time_multiplier, parse_periods

LA = ZoneInfo("America/Los_Angeles")

ENABLED = {'after_hours_enabled': True, 'after_hours_timezone': 'America/Los_Angeles'}


def _at(day, hour, minute=0):
    """March 2026: the 10th is a Tuesday, the 14th a Saturday."""
    return datetime(2026, 3, day, hour, minute, tzinfo=LA)


class TestTimePeriod:

    def test_from_row_accepts_sheet_formats(self):
        period = TimePeriod.from_row({
            'name': 'Overnight', 'badge': '', 'multiplier': '1.25',
            'start_time': '20:00:00', 'end_time': '07:00', 'days_of_week': 6, 'active': 'TRUE',
        })
        assert period.multiplier == Decimal("1.25")
        assert period.start_time == time(20, 0)
        assert period.days_of_week == (6,)
        assert period.label == 'Overnight'
        assert period.crosses_midnight is True

    @pytest.mark.parametrize("row", [
        {'multiplier': 0, 'start_time': '20:00', 'end_time': '07:00', 'days_of_week': '1'},
        {'multiplier': 50, 'start_time': '20:00', 'end_time': '07:00', 'days_of_week': '1'},
        {'multiplier': 1.5, 'start_time': 'late', 'end_time': '07:00', 'days_of_week': '1'},
        {'multiplier': 1.5, 'start_time': '20:00', 'end_time': '07:00', 'days_of_week': '7'},
        {'multiplier': 1.5, 'start_time': '20:00', 'end_time': '07:00', 'days_of_week': ''},
    ])
    def test_invalid_rows_are_skipped(self, row):
        assert parse_periods([row]) == []

    def test_inactive_period_never_matches(self):
        period = TimePeriod.from_row({
            'multiplier': 1.5, 'start_time': '00:00', 'end_time': '23:59',
            'days_of_week': '0,1,2,3,4,5,6', 'active': False,
        })
        assert period.matches(2, time(12, 0)) is False


class TestCurrentTimeMultiplier:

    def setup_method(self):
        self.periods = parse_periods(default_time_periods())

    def test_overnight_before_midnight(self):
        result = current_time_multiplier(ENABLED, self.periods, _at(10, 23, 30))
        assert result.multiplier == Decimal("1.25")
        assert result.label == "Night Rate"

    def test_overnight_after_midnight(self):
        result = current_time_multiplier(ENABLED, self.periods, _at(10, 6, 59))
        assert result.multiplier == Decimal("1.25")

    def test_period_end_is_exclusive(self):
        assert current_time_multiplier(ENABLED, self.periods, _at(10, 7, 0)) == STANDARD
        assert current_time_multiplier(ENABLED, self.periods, _at(10, 20, 0)).label == "Night Rate"

    def test_weekday_daytime_is_standard(self):
        result = current_time_multiplier(ENABLED, self.periods, _at(10, 12))
        assert result == STANDARD
        assert result.is_standard

    def test_weekend_daytime(self):
        result = current_time_multiplier(ENABLED, self.periods, _at(14, 12))
        assert result.multiplier == Decimal("1.15")
        assert result.label == "Weekend Rate"

    def test_first_matching_period_wins(self):
        """Saturday 21:00 is inside both Overnight (listed first) and the weekend"""
        result = current_time_multiplier(ENABLED, self.periods, _at(14, 21))
        assert result.label == "Night Rate"

    def test_day_filter_applies_past_midnight(self):
        periods = parse_periods([{
            'name': 'Late weekend', 'multiplier': 1.5,
            'start_time': '22:00', 'end_time': '04:00', 'days_of_week': '5,6',
        }])
        # Saturday 02:00 counts (Saturday listed), Tuesday 02:00 does not
        assert current_time_multiplier(ENABLED, periods, _at(14, 2)).multiplier == Decimal("1.5")
        assert current_time_multiplier(ENABLED, periods, _at(10, 2)) == STANDARD

    def test_converts_to_service_timezone(self):
        """06:30 UTC on Mar 11 is 23:30 on Mar 10 in Los Angeles"""
        moment = datetime(2026, 3, 11, 6, 30, tzinfo=timezone.utc)
        assert current_time_multiplier(ENABLED, self.periods, moment).label == "Night Rate"

        new_york = dict(ENABLED, after_hours_timezone='America/New_York')
        # 02:30 in New York, still overnight
        assert current_time_multiplier(new_york, self.periods, moment).label == "Night Rate"

    def test_unknown_timezone_uses_default(self):
        features = dict(ENABLED, after_hours_timezone='Mars/Olympus_Mons')
        assert current_time_multiplier(features, self.periods, _at(10, 23)).label == "Night Rate"

    def test_disabled_or_unconfigured(self):
        assert current_time_multiplier({'after_hours_enabled': False}, self.periods, _at(10, 23)) is None
        assert current_time_multiplier({}, self.periods, _at(10, 23)) is None
        assert current_time_multiplier(None, self.periods, _at(10, 23)) is None
        assert current_time_multiplier(ENABLED, [], _at(10, 23)) is None


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
