"""Tests for the online discount policy"""
import sys
from decimal import Decimal
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from src.discount_policy import discount_text, fallback_policy, make_policy, resolve_discount_policy


class TestDiscountPolicy:

    def test_configured_rate_is_authoritative(self):
        policy = resolve_discount_policy({'online_discount_enabled': True, 'online_discount_rate': 0.2})
        assert policy.rate == Decimal("0.2")
        assert policy.label == "20%"
        assert policy.from_config is True

    def test_missing_config_uses_fallback(self):
        policy = resolve_discount_policy(None)
        assert policy.rate == Decimal("0.15")
        assert policy.label == "15%"
        assert policy.from_config is False

    def test_disabled_discount_is_zero(self):
        policy = resolve_discount_policy({'online_discount_enabled': 'false', 'online_discount_rate': 0.2})
        assert policy.rate == 0
        assert policy.label == "0%"

    @pytest.mark.parametrize("bad", [15, -0.1, 1, "", None, "abc"])
    def test_malformed_rate_uses_fallback(self, bad):
        policy = resolve_discount_policy({'online_discount_enabled': True, 'online_discount_rate': bad})
        assert policy == fallback_policy()

    def test_text_is_whole_percent(self):
        assert discount_text(Decimal("0.125")) == "13%"
        assert discount_text(Decimal("0.1549")) == "15%"
        assert discount_text(Decimal("0.15")) == "15%"

    def test_make_policy_validates(self):
        with pytest.raises(ValueError):
            make_policy(1.5)
        assert make_policy("0.15").rate == Decimal("0.15")
