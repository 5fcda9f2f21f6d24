"""Application configuration for the Beacon agent transport."""
from __future__ import annotations

from functools import lru_cache
import logging
import re

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger("beacon.config")

_DURATION_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m)?\s*$", re.IGNORECASE)
_SIZE_PATTERN = re.compile(r"^\s*(\d+)\s*(b|kb|mb)?\s*$", re.IGNORECASE)

_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0}
_SIZE_UNITS = {"b": 1, "kb": 1024, "mb": 1024 * 1024}


def parse_duration(value: str | int | float) -> float:
    """Convert ``"100ms"``, ``"10s"``, ``"1m"`` or a plain number into seconds."""

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = float(value)
    else:
        match = _DURATION_PATTERN.match(str(value))
        if match is None:
            raise ValueError(f"Invalid duration {value!r}; expected e.g. '100ms', '10s' or '1m'")
        amount, unit = match.groups()
        seconds = float(amount) * _DURATION_UNITS[(unit or "s").lower()]
    if seconds <= 0:
        raise ValueError(f"Duration must be positive, got {value!r}")
    return seconds


def parse_size(value: str | int) -> int:
    """Convert ``"5b"``, ``"768kb"``, ``"1mb"`` or a plain number into bytes."""

    if isinstance(value, int) and not isinstance(value, bool):
        size = value
    else:
        match = _SIZE_PATTERN.match(str(value))
        if match is None:
            raise ValueError(f"Invalid size {value!r}; expected e.g. '5b', '768kb' or '1mb'")
        amount, unit = match.groups()
        size = int(amount) * _SIZE_UNITS[(unit or "b").lower()]
    if size <= 0:
        raise ValueError(f"Size must be positive, got {value!r}")
    return size


class Settings(BaseSettings):
    """Runtime configuration loaded from keyword arguments and environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="BEACON_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        arbitrary_types_allowed=True,
    )

    server_url: str = Field(default="http://localhost:8200", description="Base URL of the intake server.")
    secret_token: str | None = Field(default=None, description="Bearer token sent in the Authorization header.")
    disable_send: bool = Field(default=False, description="Discard all events without any network activity.")
    http_compression: bool = Field(default=True, description="Gzip the streamed request body.")
    verify_server_cert: bool = Field(default=True, description="Validate the intake server TLS certificate.")
    api_request_time: float = Field(
        default=10.0,
        description="Seconds a streaming request may stay open before it is closed (accepts '100ms', '10s', '1m').",
    )
    api_request_size: int = Field(
        default=768 * 1024,
        description="Wire bytes after which a streaming request is closed (accepts '5b', '768kb', '1mb').",
    )
    server_timeout: float = Field(
        default=5.0,
        description="Network I/O timeout for intake requests; also bounds how long a flush may block.",
    )
    service_name: str = Field(default="python-service", description="Service name reported in metadata.")
    service_version: str | None = Field(default=None, description="Service version reported in metadata.")
    environment: str | None = Field(default=None, description="Deployment environment reported in metadata.")
    hostname: str | None = Field(default=None, description="Overrides the detected host name in metadata.")
    log_level: str | None = Field(default=None, description="When set, the agent configures logging at startup.")
    logger: logging.Logger = Field(
        default_factory=lambda: logging.getLogger("beacon.transport"),
        exclude=True,
        repr=False,
        description="Sink for delivery errors. Injected, never read from the environment.",
    )

    @field_validator("server_url")
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("api_request_time", "server_timeout", mode="before")
    def _parse_duration(cls, value: str | int | float) -> float:
        return parse_duration(value)

    @field_validator("api_request_size", mode="before")
    def _parse_size(cls, value: str | int) -> int:
        return parse_size(value)

    @field_validator("logger", mode="before")
    def _resolve_logger(cls, value: logging.Logger | str) -> logging.Logger:
        if isinstance(value, str):
            return logging.getLogger(value)
        return value


@lru_cache()
def get_settings() -> Settings:
    """Return cached process-wide settings."""

    settings = Settings()
    if settings.disable_send:
        logger.info("Event delivery disabled through BEACON_DISABLE_SEND")
    return settings
