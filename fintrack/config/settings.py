"""
Configuration Management for FinTrack

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Relational store configuration (SQLAlchemy URL)."""

    model_config = SettingsConfigDict(
        env_prefix="FINTRACK_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    url: str = Field(
        default="sqlite:///fintrack.db",
        description="SQLAlchemy database URL"
    )
    echo: bool = Field(
        default=False,
        description="Echo SQL statements to the log"
    )


class AuthSettings(BaseSettings):
    """Session cookie configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINTRACK_AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    secret_key: str = Field(
        default="dev-key-change-me",
        validate_default=True,
        description="Key used to sign the session cookie"
    )
    session_cookie_name: str = Field(
        default="fintrack_session",
        description="Name of the session cookie"
    )
    user_id_key: str = Field(
        default="user_id",
        description="Session key holding the authenticated user's id"
    )

    @field_validator('secret_key')
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        """Warn about the development key (but don't fail - tests rely on it)."""
        if v == "dev-key-change-me":
            import warnings
            warnings.warn(
                "FINTRACK_AUTH_SECRET_KEY is not set; using the development key. "
                "Set it before exposing the service."
            )
        return v


class BudgetSettings(BaseSettings):
    """Defaults used when a user has no stored budget or goals yet."""

    model_config = SettingsConfigDict(
        env_prefix="FINTRACK_BUDGET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    default_total_budget: Decimal = Field(
        default=Decimal("20000"),
        ge=0,
        description="Total budget of the default plan"
    )
    seed_demo_goals: bool = Field(
        default=True,
        description="Give new users the demo goals"
    )


class ClientSettings(BaseSettings):
    """HTTP client configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINTRACK_CLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    base_url: str = Field(
        default="http://127.0.0.1:5000",
        description="Base URL of the FinTrack API"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Per-request timeout"
    )
    max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for idempotent reads before reporting failure"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Development server
    host: str = Field(
        default="127.0.0.1",
        description="Interface the development server binds to"
    )
    port: int = Field(
        default=5000,
        ge=0,
        le=65535,
        description="Port the development server listens on"
    )

    # Sanity limits
    max_transaction_amount: Decimal = Field(
        default=Decimal("1000000000"),
        description="Largest accepted transaction amount"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def database(self) -> DatabaseSettings:
        return DatabaseSettings()

    @property
    def auth(self) -> AuthSettings:
        return AuthSettings()

    @property
    def budget(self) -> BudgetSettings:
        return BudgetSettings()

    @property
    def client(self) -> ClientSettings:
        return ClientSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("database", "auth", "budget", "client", "app"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
