"""Konfigürasyon unit testleri."""

import pytest

from lubristock.config import EngineConfig


class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig.from_env({})
        assert config.region_name == "us-west-2"
        assert config.backend_enabled is False
        assert config.alerts_table == "StockAlerts"
        assert config.poll_interval_seconds == 120.0
        assert config.idle_threshold_days == 180
        assert config.obsolete_top_n == 10
        assert config.rotation_window_days == 90
        assert config.log_bucket is None

    def test_reads_environment(self):
        config = EngineConfig.from_env(
            {
                "AWS_DEFAULT_REGION": "eu-west-1",
                "LUBRISTOCK_BACKEND_ENABLED": "True",
                "LUBRISTOCK_ALERTS_TABLE": "Alerts-dev",
                "LUBRISTOCK_LOG_BUCKET": "lubristock-logs",
                "LUBRISTOCK_REFRESH_TIMEOUT": "2.5",
                "LUBRISTOCK_IDLE_DAYS": "90",
            }
        )
        assert config.region_name == "eu-west-1"
        assert config.backend_enabled is True
        assert config.alerts_table == "Alerts-dev"
        assert config.log_bucket == "lubristock-logs"
        assert config.refresh_timeout_seconds == 2.5
        assert config.idle_threshold_days == 90

    @pytest.mark.parametrize("value", ["0", "false", "no", ""])
    def test_backend_disabled_values(self, value):
        assert EngineConfig.from_env({"LUBRISTOCK_BACKEND_ENABLED": value}).backend_enabled is False

    def test_non_numeric_value_raises(self):
        with pytest.raises(ValueError, match="LUBRISTOCK_IDLE_DAYS"):
            EngineConfig.from_env({"LUBRISTOCK_IDLE_DAYS": "altı ay"})

    def test_negative_value_raises(self):
        with pytest.raises(ValueError, match="LUBRISTOCK_OBSOLETE_TOP_N"):
            EngineConfig.from_env({"LUBRISTOCK_OBSOLETE_TOP_N": "-3"})
