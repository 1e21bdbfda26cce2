"""Tests for Settings.from_env."""

from pathlib import Path

import pytest

from orderdesk.infrastructure.config import Settings


class TestSettingsFromEnv:

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.return_window_days == 30
        assert settings.low_stock_threshold == 10
        assert settings.debug is False
        assert settings.log_level == "WARNING"
        assert settings.store_path.name == "store.json"

    def test_overrides(self, tmp_path):
        settings = Settings.from_env(
            {
                "ORDERDESK_DATA_DIR": str(tmp_path),
                "ORDERDESK_RETURN_WINDOW_DAYS": "14",
                "ORDERDESK_LOW_STOCK_THRESHOLD": "3",
                "ORDERDESK_DEBUG": "true",
                "ORDERDESK_LOG_LEVEL": "info",
                "UNRELATED": "x",
            }
        )
        assert settings.store_path == Path(tmp_path) / "store.json"
        assert settings.return_window_days == 14
        assert settings.low_stock_threshold == 3
        assert settings.debug is True
        assert settings.log_level == "INFO"

    def test_bad_integer_named_in_error(self):
        with pytest.raises(ValueError, match="ORDERDESK_RETURN_WINDOW_DAYS"):
            Settings.from_env({"ORDERDESK_RETURN_WINDOW_DAYS": "soon"})
