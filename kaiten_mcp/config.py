from __future__ import annotations
import logging
from pydantic import BaseModel, ConfigDict, PositiveFloat, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="", extra="ignore")

    # Kaiten
    KAITEN_BASE_URL: str | None = None  # e.g. https://company.kaiten.ru/api/latest
    KAITEN_API_TOKEN: str | None = None  # do not commit
    KAITEN_TIMEOUT: PositiveFloat = 30.0

    # Observability
    LOG_JSON: bool = False
    LOG_LEVEL: str = "INFO"

    @field_validator("LOG_LEVEL")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown logging level '{value}'")
        return level


class ConfigurationError(Exception):
    """Required process configuration is missing or invalid."""


class ClientConfig(BaseModel):
    """Immutable connection settings handed to the client at construction."""
    model_config = ConfigDict(frozen=True)

    base_url: str
    token: str
    timeout: PositiveFloat = 30.0


def load_settings(**overrides) -> Settings:
    """Read settings from env/.env; invalid values raise ConfigurationError."""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {problems}") from e


def load_client_config(settings: Settings) -> ClientConfig:
    """
    Build the client configuration from settings.
    Raises ConfigurationError if the base URL or token is missing.
    """
    if not settings.KAITEN_API_TOKEN:
        raise ConfigurationError("KAITEN_API_TOKEN is required")
    if not settings.KAITEN_BASE_URL:
        raise ConfigurationError(
            "KAITEN_BASE_URL is required (e.g. https://mycompany.kaiten.ru/api/latest)"
        )
    return ClientConfig(
        base_url=settings.KAITEN_BASE_URL.rstrip("/"),
        token=settings.KAITEN_API_TOKEN,
        timeout=settings.KAITEN_TIMEOUT,
    )
