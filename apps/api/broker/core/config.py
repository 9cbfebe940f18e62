"""Application configuration for the presence broker."""
from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .errors import ConfigurationMissingError

REQUIRED_SETTINGS = {
    "api_key": "API_KEY",
    "api_secret": "API_SECRET",
    "presence_session": "PRESENCE_SESSION",
}


class Settings(BaseSettings):
    """Runtime configuration."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")
    cors_allow_origins: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["*"])

    api_key: str = Field(default="")
    api_secret: str = Field(default="")
    presence_session: str = Field(default="")

    provider_timeout_seconds: float = Field(default=10.0, gt=0)
    token_ttl_seconds: int = Field(default=86400, ge=1, le=30 * 86400)
    max_name_length: int = Field(default=100, ge=1)
    chat_media_mode: str = Field(default="relayed")

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: object) -> object:
        """Allow comma-separated env values for CORS origins."""

        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("chat_media_mode")
    @classmethod
    def _check_media_mode(cls, value: str) -> str:
        lowered = value.strip().lower()
        if lowered not in {"relayed", "routed"}:
            raise ValueError("chat_media_mode must be 'relayed' or 'routed'")
        return lowered

    def require_provider_settings(self) -> None:
        """Fail fast unless credentials and the presence session id are all set."""

        missing = [env for field, env in REQUIRED_SETTINGS.items() if not getattr(self, field).strip()]
        if missing:
            raise ConfigurationMissingError(
                "You must specify " + ", ".join(missing) + " environment variables"
            )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


settings = get_settings()
