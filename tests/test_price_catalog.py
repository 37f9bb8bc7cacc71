"""Tests for the price catalog and pricing config store"""
import os
import sys
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from zoneinfo import ZoneInfo

# Force local backend for tests
os.environ["USE_LOCAL_STORAGE"] = "true"

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from src.config_store import ConfigStore, default_features, default_service_rows, default_time_periods
from src.exceptions import ConfigUnavailableError
from src.price_catalog import PriceCatalog, display_price


def _store(tmp_path, rows=None, features=None, periods=None, **kwargs) -> ConfigStore:
    store = ConfigStore(data_dir=str(tmp_path), **kwargs)
    store.write_local(
        default_service_rows() if rows is None else rows,
        default_features() if features is None else features,
        default_time_periods() if periods is None else periods,
    )
    return store


class TestConfigStore:

    def test_missing_file_is_unavailable(self, tmp_path):
        store = ConfigStore(data_dir=str(tmp_path))
        with pytest.raises(ConfigUnavailableError):
            store.fetch_config()

    def test_invalid_json_is_unavailable(self, tmp_path):
        (tmp_path / "pricing_config.json").write_text("{not json", encoding="utf-8")
        store = ConfigStore(data_dir=str(tmp_path))
        with pytest.raises(ConfigUnavailableError):
            store.fetch_config()

    def test_inactive_rows_are_skipped(self, tmp_path):
        rows = [
            {'name': 'Tire Change', 'type': 'onsite', 'standard_price': 88, 'active': True},
            {'name': 'Fuel Delivery', 'type': 'onsite', 'standard_price': 88, 'active': 'false'},
        ]
        config = _store(tmp_path, rows=rows).fetch_config()
        assert list(config.services) == ['Tire Change']

    def test_cache_reuses_last_fetch(self, tmp_path):
        now = [100.0]
        store = _store(tmp_path, cache_seconds=60, clock=lambda: now[0])
        first = store.fetch_config()

        # Change the file behind the cache
        (tmp_path / "pricing_config.json").write_text('{"services": []}', encoding="utf-8")
        now[0] = 130.0
        assert store.fetch_config() is first

        now[0] = 161.0
        with pytest.raises(ConfigUnavailableError):
            store.fetch_config()

    def test_set_discount_rate(self, tmp_path):
        store = _store(tmp_path)
        store.set_discount_rate(0.2)
        assert store.fetch_config().features['online_discount_rate'] == 0.2

        with pytest.raises(ValueError):
            store.set_discount_rate(15)

    def test_set_discount_rate_keeps_time_periods(self, tmp_path):
        store = _store(tmp_path)
        store.set_discount_rate(0.1)
        assert len(store.fetch_config().time_periods) == 2

    def test_set_after_hours(self, tmp_path):
        store = _store(tmp_path)
        assert store.fetch_config().features['after_hours_enabled'] is False

        store.set_after_hours(True, timezone='America/Denver')

        features = store.fetch_config().features
        assert features['after_hours_enabled'] is True
        assert features['after_hours_timezone'] == 'America/Denver'


class TestPriceCatalog:
    """Test cases for PriceCatalog.get_service_price"""

    def test_loading_returns_placeholder(self, tmp_path):
        catalog = PriceCatalog(_store(tmp_path))

        lookup = catalog.get_service_price("Battery Jump Start")

        assert lookup.loading is True
        assert lookup.standard_price == 88
        assert lookup.online_price == 75
        assert display_price(lookup) == "$..."

    def test_resolved_price(self, tmp_path):
        """
        Test: Battery Jump Start configured at $88, 15% off
        Expected: standard $88, online $75 (74.80 rounded)
        """
        catalog = PriceCatalog(_store(tmp_path))
        assert catalog.load() is True

        lookup = catalog.get_service_price("Battery Jump Start")

        assert lookup.loading is False
        assert lookup.error is None
        assert lookup.standard_price == 88
        assert lookup.online_price == 75
        assert display_price(lookup) == "$75"
        assert display_price(lookup, online=False) == "$88"

    def test_online_price_follows_configured_rate(self, tmp_path):
        features = {'online_discount_enabled': True, 'online_discount_rate': 0.2}
        catalog = PriceCatalog(_store(tmp_path, features=features))
        catalog.load()

        assert catalog.get_service_price("Tire Change").online_price == 70
        assert catalog.get_discount_text() == "20%"

    def test_names_are_case_sensitive(self, tmp_path):
        catalog = PriceCatalog(_store(tmp_path))
        catalog.load()

        lookup = catalog.get_service_price("battery jump start")

        assert lookup.error is not None
        assert lookup.standard_price == 65  # default fallback
        assert display_price(lookup) == "$..."

    def test_unknown_service_falls_back(self, tmp_path):
        catalog = PriceCatalog(_store(tmp_path))
        catalog.load()

        lookup = catalog.get_service_price("Boat Towing")

        assert lookup.loading is False
        assert "Pricing not available" in lookup.error
        assert lookup.standard_price > 0
        assert lookup.online_price > 0

    def test_custom_priced_service_is_an_error(self, tmp_path):
        catalog = PriceCatalog(_store(tmp_path))
        catalog.load()

        assert catalog.get_service_price("Impound").error is not None
        assert catalog.get_service("Impound") is None

    def test_config_unavailable(self, tmp_path):
        catalog = PriceCatalog(ConfigStore(data_dir=str(tmp_path)))

        assert catalog.load() is False
        lookup = catalog.get_service_price("Lockout Service")

        assert lookup.loading is False
        assert lookup.error is not None
        assert lookup.standard_price == 88
        assert catalog.get_online_discount_rate() == Decimal("0.15")

    def test_towing_type(self, tmp_path):
        catalog = PriceCatalog(_store(tmp_path))
        catalog.load()

        assert catalog.get_service_price("Local Towing").is_towing is True
        assert catalog.get_service_price("Tire Change").is_towing is False

    def test_list_services_hides_rate_entries(self, tmp_path):
        catalog = PriceCatalog(_store(tmp_path))
        catalog.load()

        names = [s.service_name for s in catalog.list_services()]

        assert "Travel Miles" not in names
        assert "Tow Miles" not in names
        assert "Impound" not in names
        assert "Local Towing" in names

    def test_mileage_rates(self, tmp_path):
        rows = default_service_rows()
        for row in rows:
            if row['name'] == 'Travel Miles':
                row['rate_per_mile'] = 2.25
        catalog = PriceCatalog(_store(tmp_path, rows=rows))

        # Defaults before loading
        assert catalog.get_mileage_rates() == (Decimal("1.75"), Decimal("8.0"))

        catalog.load()
        assert catalog.get_mileage_rates() == (Decimal("2.25"), Decimal("8.0"))

    def test_malformed_rate_resolved_once(self, tmp_path, capsys):
        features = {'online_discount_enabled': True, 'online_discount_rate': 15}
        catalog = PriceCatalog(_store(tmp_path, features=features))
        catalog.load()

        catalog.list_services()
        catalog.get_service_price("Tire Change")
        catalog.get_discount_text()

        assert capsys.readouterr().out.count("Using fallback discount") == 1
        assert catalog.get_discount_text() == "15%"


class TestAfterHoursPricing:

    def _catalog(self, tmp_path, enabled=True) -> PriceCatalog:
        features = dict(default_features(), after_hours_enabled=enabled)
        catalog = PriceCatalog(_store(tmp_path, features=features))
        catalog.load()
        return catalog

    def test_night_multiplier(self, tmp_path):
        catalog = self._catalog(tmp_path)

        night = datetime(2026, 3, 10, 23, 0, tzinfo=ZoneInfo("America/Los_Angeles"))
        result = catalog.get_time_multiplier(night)

        assert result.multiplier == Decimal("1.25")
        assert result.label == "Night Rate"

    def test_disabled(self, tmp_path):
        assert self._catalog(tmp_path, enabled=False).get_time_multiplier() is None

    def test_unavailable_config(self, tmp_path):
        catalog = PriceCatalog(ConfigStore(data_dir=str(tmp_path)))
        catalog.load()
        assert catalog.get_time_multiplier() is None

    def test_eligibility_comes_from_config(self, tmp_path):
        catalog = self._catalog(tmp_path)

        assert catalog.get_service_price("Lockout Service").after_hours_eligible is True
        assert catalog.get_service_price("Winch-Out / Recovery").after_hours_eligible is False
