"""Server configuration read from the environment (and an optional ``.env``).

All settings use the plain variable names of the deployment environment,
e.g. ``YANDEX_MAPS_API_KEY``, ``MODE``, ``HOST`` and ``PORT``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from yandex_maps_mcp.protocol.errors import ConfigurationError

TransportMode = Literal["stdio", "http"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_GEOCODER_URL = "https://geocode-maps.yandex.ru/1.x/"
DEFAULT_STATIC_URL = "https://static-maps.yandex.ru/v1"


class Settings(BaseSettings):
    """Gateway settings.

    ``MODE=sse`` is accepted as an alias of ``http``; both select the
    multiplexed HTTP binding, which also serves the legacy SSE endpoints.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    api_key: str | None = Field(default=None, validation_alias="YANDEX_MAPS_API_KEY")
    static_api_key: str | None = Field(default=None, validation_alias="YANDEX_MAPS_STATIC_API_KEY")

    mode: TransportMode = Field(default="stdio", validation_alias=AliasChoices("MODE", "mode"))
    host: str = Field(default="0.0.0.0", validation_alias=AliasChoices("HOST", "host"))
    port: int = Field(default=3000, ge=0, le=65535, validation_alias=AliasChoices("PORT", "port"))
    log_level: LogLevel = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))

    geocoder_url: str = Field(default=DEFAULT_GEOCODER_URL, validation_alias="YANDEX_MAPS_GEOCODER_URL")
    static_url: str = Field(default=DEFAULT_STATIC_URL, validation_alias="YANDEX_MAPS_STATIC_URL")
    request_timeout: float = Field(default=30.0, gt=0, validation_alias="YANDEX_MAPS_TIMEOUT")

    otlp_endpoint: str | None = Field(default=None, validation_alias="OTEL_EXPORTER_OTLP_ENDPOINT")

    @field_validator("mode", mode="before")
    @classmethod
    def _normalize_mode(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip().lower()
            if value == "sse":
                return "http"
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    def require_api_keys(self) -> None:
        """Fail fast when a Yandex API key is missing.

        Raises:
            ConfigurationError: Naming the first missing environment variable.
        """
        if not self.api_key:
            msg = "YANDEX_MAPS_API_KEY environment variable is not set"
            raise ConfigurationError(msg)
        if not self.static_api_key:
            msg = "YANDEX_MAPS_STATIC_API_KEY environment variable is not set"
            raise ConfigurationError(msg)
