"""Tests for configuration loading."""

from decimal import Decimal

import pytest

from fintrack.config import (
    AuthSettings,
    BudgetSettings,
    ClientSettings,
    DatabaseSettings,
    get_settings,
    validate_all_settings,
)


class TestSettings:
    """Tests for the pydantic-settings classes."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("FINTRACK_DB_URL", raising=False)
        monkeypatch.delenv("FINTRACK_BUDGET_DEFAULT_TOTAL_BUDGET", raising=False)
        assert DatabaseSettings().url == "sqlite:///fintrack.db"
        assert BudgetSettings().default_total_budget == Decimal("20000")
        assert ClientSettings().max_attempts == 3

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("FINTRACK_DB_URL", "sqlite:///other.db")
        monkeypatch.setenv("FINTRACK_BUDGET_SEED_DEMO_GOALS", "false")
        monkeypatch.setenv("FINTRACK_CLIENT_TIMEOUT_SECONDS", "2.5")
        assert DatabaseSettings().url == "sqlite:///other.db"
        assert BudgetSettings().seed_demo_goals is False
        assert ClientSettings().timeout_seconds == 2.5

    def test_out_of_range_value_rejected(self, monkeypatch):
        monkeypatch.setenv("FINTRACK_CLIENT_MAX_ATTEMPTS", "0")
        with pytest.raises(ValueError):
            ClientSettings()

    def test_development_secret_key_warns(self, monkeypatch):
        monkeypatch.delenv("FINTRACK_AUTH_SECRET_KEY", raising=False)
        with pytest.warns(UserWarning, match="development key"):
            AuthSettings()

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestValidateAllSettings:
    def test_all_sections_load(self, monkeypatch):
        monkeypatch.setenv("FINTRACK_AUTH_SECRET_KEY", "test-secret")
        results = validate_all_settings()
        assert results == {
            "database": True,
            "auth": True,
            "budget": True,
            "client": True,
            "app": True,
        }

    def test_broken_section_is_reported(self, monkeypatch):
        monkeypatch.setenv("FINTRACK_BUDGET_DEFAULT_TOTAL_BUDGET", "-10")
        results = validate_all_settings()
        assert results["budget"] is False
        assert "budget_error" in results
