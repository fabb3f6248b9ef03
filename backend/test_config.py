"""
Unit tests for SimulationConfig validation
"""

import pytest

from config import CONFIG, CorporateConfig, MarketConfig, OracleConfig, SimulationConfig, TimeConfig


class TestSimulationConfig:
    """Test suite for configuration validation"""

    def test_default_config_is_valid(self):
        assert CONFIG.time.days_per_week == 7
        assert CONFIG.workforce.weekly_salary_per_employee == 1_500_000
        assert 0.0 <= CONFIG.oracle.event_probability <= 1.0

    def test_invalid_event_probability_raises_error(self):
        with pytest.raises(ValueError, match="event_probability"):
            SimulationConfig(oracle=OracleConfig(event_probability=1.5))

    def test_invalid_promotion_window_raises_error(self):
        with pytest.raises(ValueError, match="promotion_max_weeks"):
            SimulationConfig(corporate=CorporateConfig(promotion_min_weeks=3, promotion_max_weeks=2))

    def test_non_positive_price_floor_raises_error(self):
        with pytest.raises(ValueError, match="min_asset_price"):
            SimulationConfig(market=MarketConfig(min_asset_price=0.0))

    def test_zero_length_week_raises_error(self):
        with pytest.raises(ValueError, match="days_per_week"):
            SimulationConfig(time=TimeConfig(days_per_week=0))
