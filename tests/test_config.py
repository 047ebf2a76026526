"""Tests for configuration and logging setup."""

import pytest

from spendful.audit import AuditLogger, configure_logging
from spendful.config import get_settings, validate_all_settings
from spendful.ledger import AccountStore
from spendful.models import LedgerEventBuilder


class TestSettings:
    """Tests for pydantic-settings configuration."""

    def test_validate_all_settings(self):
        results = validate_all_settings()
        assert results["storage"] is True
        assert results["ledger"] is True

    def test_env_overrides(self, monkeypatch):
        """Test that SPENDFUL_* variables reach the sub-settings."""
        monkeypatch.setenv("SPENDFUL_DEFAULT_CURRENCY", "eur")
        monkeypatch.setenv("SPENDFUL_STORAGE_WRITE_ATTEMPTS", "5")

        settings = get_settings()

        assert settings.ledger.default_currency == "EUR"
        assert settings.storage.write_attempts == 5

    def test_invalid_log_level_reported(self, monkeypatch):
        monkeypatch.setenv("SPENDFUL_LOG_LEVEL", "loud")
        results = validate_all_settings()
        assert results["ledger"] is False
        assert "ledger_error" in results

    @pytest.mark.asyncio
    async def test_env_seeds_default_settings(self, monkeypatch, kv, clock):
        """Test that new installs take their defaults from configuration."""
        monkeypatch.setenv("SPENDFUL_DEFAULT_FREE_HISTORY_DAYS", "7")

        settings = await AccountStore(kv, clock=clock).get_settings()

        assert settings.free_history_days == 7


class TestLogging:
    """Tests for the audit logger."""

    @pytest.mark.asyncio
    async def test_console_renderer(self):
        """Test reconfiguring and logging never raising."""
        configure_logging(level="DEBUG", json_logs=False)
        try:
            assert await AuditLogger().log(LedgerEventBuilder.entry_deleted("entry-1")) is True
        finally:
            configure_logging()
