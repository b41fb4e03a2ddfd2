"""
Payment Intent Server - Configuration
Environment configuration using Pydantic Settings
"""
from functools import lru_cache
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from payserver.errors import ConfigurationError

SECRET_KEY_PREFIXES = ("sk_", "rk_")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Payment Intent Server"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080

    # Stripe
    stripe_publishable_key: Optional[str] = None
    stripe_secret_key: str
    stripe_webhook_secret: Optional[str] = None
    stripe_api_version: str = "2020-08-27"
    stripe_timeout_seconds: float = 30.0
    stripe_max_network_retries: int = 0
    stripe_webhook_tolerance_seconds: int = 300

    # Customer created when the checkout does not send a name
    default_customer_name: str = "Guest customer"

    # Allowed browser origins (no wildcard, credentials are enabled)
    cors_origins: List[str] = [
        "http://localhost:8081",
        "http://localhost:19006",
    ]

    @field_validator("stripe_secret_key")
    @classmethod
    def check_secret_key(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(SECRET_KEY_PREFIXES):
            raise ValueError("STRIPE_SECRET_KEY must start with sk_ or rk_")
        return value

    @field_validator("cors_origins")
    @classmethod
    def check_cors_origins(cls, value: List[str]) -> List[str]:
        if "*" in value:
            raise ValueError("CORS_ORIGINS must list explicit origins, not '*'")
        return value

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
    )


def load_settings(**overrides) -> Settings:
    """
    Build a Settings instance, turning validation failures into
    ConfigurationError.

    Args:
        overrides: Explicit field values (take precedence over the environment)

    Returns:
        Validated, immutable settings
    """
    try:
        return Settings(**overrides)
    except PydanticValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {problems}") from e


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return load_settings()
