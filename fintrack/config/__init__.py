"""Configuration package."""

from fintrack.config.settings import (
    AppSettings,
    AuthSettings,
    BudgetSettings,
    ClientSettings,
    DatabaseSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "AuthSettings",
    "BudgetSettings",
    "ClientSettings",
    "DatabaseSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
