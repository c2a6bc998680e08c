"""
Tests for chart settings
"""

import pytest
from pydantic import ValidationError

from dbcharts.config.settings import Settings, get_settings, clear_settings_cache
from dbcharts.models.schemas import ChartConfig


class TestSettings:
    """Test Settings defaults and environment overrides"""

    def test_defaults(self, settings):
        assert settings.date_column == "created_at"
        assert settings.preaggregated_field == "aggregate"
        assert settings.timezone == "UTC"
        assert (settings.default_years, settings.default_days, settings.default_months) == (4, 7, 6)

    def test_environment_override(self, monkeypatch):
        """Test DBCHARTS_ prefixed variables override defaults"""
        monkeypatch.setenv("DBCHARTS_DATE_COLUMN", "placed_at")
        monkeypatch.setenv("DBCHARTS_TIMEZONE", "Europe/Paris")
        clear_settings_cache()

        settings = get_settings()

        assert settings.date_column == "placed_at"
        assert settings.timezone == "Europe/Paris"

    def test_settings_are_cached(self):
        assert get_settings() is get_settings()

    def test_unknown_timezone_rejected(self):
        with pytest.raises(ValidationError):
            Settings(timezone="Nowhere/Special")

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError):
            Settings(log_level="loud")

    def test_chart_config_from_settings(self):
        """Test the chart configuration starts from settings"""
        config = ChartConfig.from_settings(Settings(date_column="ts", preaggregated_field="total"))

        assert config.date_column == "ts"
        assert config.aggregation.preaggregated_field == "total"
        assert config.aggregation.preaggregated is False
