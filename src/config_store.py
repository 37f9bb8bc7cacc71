"""Pricing configuration store - Google Sheets backend with local JSON fallback"""
import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from config import (
    AFTER_HOURS_TIMEZONE,
    CONFIG_CACHE_SECONDS,
    FALLBACK_DISCOUNT_RATE,
    FALLBACK_PRICES,
    NO_TRAVEL_SERVICES,
    TOW_MILES_SERVICE,
    TOW_RATE_PER_MILE,
    TRAVEL_MILES_SERVICE,
    TRAVEL_RATE_PER_MILE,
)
from .exceptions import ConfigUnavailableError
from .job_storage import use_google_sheets

TOWING_SERVICES = {"Local Towing", "Long-Distance Towing"}
RECOVERY_SERVICES = {"Winch-Out / Recovery", "Collision Recovery"}


def default_service_rows() -> List[Dict[str, Any]]:
    """Seed rows for a fresh config (same prices as the fallback table)"""
    rows = []
    for name, price in FALLBACK_PRICES.items():
        if name in TOWING_SERVICES:
            service_type = 'towing'
        elif name in RECOVERY_SERVICES:
            service_type = 'recovery'
        else:
            service_type = 'onsite'
        rows.append({'name': name, 'label': name, 'type': service_type,
                     'standard_price': price, 'rate_per_mile': '',
                     'after_hours_eligible': name not in NO_TRAVEL_SERVICES, 'active': True})
    rows.append({'name': 'Impound', 'label': 'Impound', 'type': 'custom',
                 'standard_price': '', 'rate_per_mile': '', 'after_hours_eligible': False,
                 'active': True})
    rows.append({'name': TRAVEL_MILES_SERVICE, 'label': 'Travel', 'type': 'rate',
                 'standard_price': '', 'rate_per_mile': TRAVEL_RATE_PER_MILE,
                 'after_hours_eligible': False, 'active': True})
    rows.append({'name': TOW_MILES_SERVICE, 'label': 'Tow', 'type': 'rate',
                 'standard_price': '', 'rate_per_mile': TOW_RATE_PER_MILE,
                 'after_hours_eligible': False, 'active': True})
    return rows


def default_features() -> Dict[str, Any]:
    return {
        'online_discount_enabled': True,
        'online_discount_rate': FALLBACK_DISCOUNT_RATE,
        'after_hours_enabled': False,
        'after_hours_timezone': AFTER_HOURS_TIMEZONE,
    }


def default_time_periods() -> List[Dict[str, Any]]:
    """Seed after-hours periods. Days are 0 = Sunday ... 6 = Saturday; first match wins."""
    return [
        {'name': 'Overnight', 'badge': 'Night Rate', 'multiplier': 1.25,
         'start_time': '20:00', 'end_time': '07:00', 'days_of_week': '0,1,2,3,4,5,6',
         'active': True},
        {'name': 'Weekend', 'badge': 'Weekend Rate', 'multiplier': 1.15,
         'start_time': '07:00', 'end_time': '20:00', 'days_of_week': '0,6',
         'active': True},
    ]


_TRUE_VALUES = ('true', '1', 'yes', 'on')


def flag_enabled(value: Any, default: bool = False) -> bool:
    """Read a true/false cell; Sheets and JSON disagree on how booleans come back"""
    if isinstance(value, bool):
        return value
    if value is None or str(value).strip() == '':
        return default
    return str(value).strip().lower() in _TRUE_VALUES


def _is_active(row: Dict[str, Any]) -> bool:
    return flag_enabled(row.get('active'), default=True)


@dataclass
class PricingConfig:
    """One resolved read of the pricing configuration"""
    services: Dict[str, Dict[str, Any]]
    features: Dict[str, Any] = field(default_factory=dict)
    time_periods: List[Dict[str, Any]] = field(default_factory=list)
    fetched_at: float = 0.0

    @classmethod
    def from_rows(cls, rows: List[Dict[str, Any]], features: Dict[str, Any],
                  time_periods: Optional[List[Dict[str, Any]]] = None,
                  fetched_at: float = 0.0) -> 'PricingConfig':
        services = {}
        for row in rows:
            name = str(row.get('name', '')).strip()
            if name and _is_active(row):
                services[name] = dict(row)
        return cls(
            services=services,
            features=dict(features or {}),
            time_periods=[dict(p) for p in (time_periods or [])],
            fetched_at=fetched_at,
        )


class ConfigStore:
    """
    Reads service prices, the online-discount record and after-hours periods.

    Automatically uses Google Sheets when credentials are available,
    falls back to a local JSON file for development. The last successful
    fetch is reused for CONFIG_CACHE_SECONDS.
    """

    def __init__(self, data_dir: str = "data", cache_seconds: float = CONFIG_CACHE_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        self.data_dir = Path(data_dir)
        self.config_file = self.data_dir / "pricing_config.json"
        self.cache_seconds = cache_seconds
        self._clock = clock
        self._cache: Optional[PricingConfig] = None

        self._use_sheets = use_google_sheets()
        self._sheets_client = None

        if self._use_sheets:
            try:
                from .sheets_storage import get_sheets_client
                self._sheets_client = get_sheets_client()
                print("✅ Using Google Sheets pricing config")
            except Exception as e:
                print(f"⚠️ Failed to connect to Google Sheets: {e}")
                print("📁 Falling back to local pricing config")
                self._use_sheets = False

    def fetch_config(self, force: bool = False) -> PricingConfig:
        """
        Return the current pricing config.

        Raises:
            ConfigUnavailableError: the backing record is missing or unreadable
        """
        now = self._clock()
        if not force and self._cache is not None and (now - self._cache.fetched_at) < self.cache_seconds:
            return self._cache

        try:
            if self._use_sheets:
                rows = self._sheets_client.get_services()
                features = self._sheets_client.get_features()
                time_periods = self._sheets_client.get_time_periods()
            else:
                rows, features, time_periods = self._read_local()
        except ConfigUnavailableError:
            self._cache = None
            raise
        except Exception as e:
            self._cache = None
            raise ConfigUnavailableError(f"Unable to load pricing: {e}", cause=e) from e

        config = PricingConfig.from_rows(rows, features, time_periods, fetched_at=now)
        if not config.services:
            self._cache = None
            raise ConfigUnavailableError("No services found in pricing config")

        self._cache = config
        return config

    def clear_cache(self) -> None:
        self._cache = None

    def _read_local(self):
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise ConfigUnavailableError(f"Pricing config not found: {self.config_file}", cause=e) from e
        except json.JSONDecodeError as e:
            raise ConfigUnavailableError(f"Pricing config is not valid JSON: {e}", cause=e) from e
        return data.get('services', []), data.get('features', {}), data.get('time_multipliers', [])

    def write_local(self, rows: List[Dict[str, Any]], features: Dict[str, Any],
                    time_periods: Optional[List[Dict[str, Any]]] = None) -> None:
        """Write a local config file (used by setup and tests)"""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        data = {'services': rows, 'features': features, 'time_multipliers': time_periods or []}
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        self.clear_cache()

    def set_discount_rate(self, rate: float, enabled: bool = True) -> None:
        """Update the online discount record"""
        if not 0 <= rate < 1:
            raise ValueError("Discount rate must be a fraction between 0 and 1")
        self._set_features({'online_discount_rate': rate, 'online_discount_enabled': enabled})

    def set_after_hours(self, enabled: bool, timezone: Optional[str] = None) -> None:
        """Turn after-hours pricing on or off"""
        updates: Dict[str, Any] = {'after_hours_enabled': enabled}
        if timezone:
            updates['after_hours_timezone'] = timezone
        self._set_features(updates)

    def _set_features(self, updates: Dict[str, Any]) -> None:
        if self._use_sheets:
            for key, value in updates.items():
                self._sheets_client.set_feature(key, value)
        else:
            try:
                rows, features, time_periods = self._read_local()
            except ConfigUnavailableError:
                rows, features, time_periods = default_service_rows(), default_features(), default_time_periods()
            features = dict(features)
            features.update(updates)
            self.write_local(rows, features, time_periods)
        self.clear_cache()
