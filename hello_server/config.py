"""
Configuration loading for the hello server.

Configuration is resolved once at startup and never mutated afterwards:

1. Process environment (``PORT``)
2. A ``.env`` file, when present (never overrides the process environment)
3. Built-in defaults for everything that is not environment-driven

``PORT`` has no default. A missing or unusable value is a fatal
`ConfigError` rather than an implicit bind to an arbitrary port.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional, Tuple

from dotenv import dotenv_values, find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from hello_server.exceptions import ConfigError

__all__ = [
    "DEFAULT_ALLOWED_ORIGINS",
    "ServerConfig",
    "load_config",
]


DEFAULT_ALLOWED_ORIGINS: Tuple[str, ...] = ("http://localhost:3000",)
DEFAULT_BODY_LIMIT = 100 * 1024  # 100KiB
DEFAULT_PARAMETER_LIMIT = 1000

PORT_ENV = "PORT"


class ServerConfig(BaseModel):
    """Immutable process configuration passed to the bootstrap routine."""

    port: int = Field(..., description="TCP port to listen on", ge=1, le=65535)
    host: str = Field("0.0.0.0", description="Interface to bind", min_length=1)
    allowed_origins: Tuple[str, ...] = Field(
        DEFAULT_ALLOWED_ORIGINS,
        description="Origins that receive CORS response headers",
    )
    json_limit: int = Field(
        DEFAULT_BODY_LIMIT, description="Maximum JSON body size in bytes", ge=0
    )
    urlencoded_limit: int = Field(
        DEFAULT_BODY_LIMIT,
        description="Maximum URL-encoded body size in bytes",
        ge=0,
    )
    parameter_limit: int = Field(
        DEFAULT_PARAMETER_LIMIT,
        description="Maximum number of URL-encoded parameters",
        ge=1,
    )
    log_level: str = Field("INFO", description="Log level")
    log_format: str = Field("console", description="Log output format")

    model_config = ConfigDict(frozen=True)

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _coerce_origins(cls, value):
        if isinstance(value, str):
            return (value,)
        return tuple(value)

    @field_validator("log_format")
    @classmethod
    def _check_format(cls, value: str) -> str:
        if value not in {"json", "console"}:
            raise ValueError(f"log_format must be 'json' or 'console', got {value!r}")
        return value

    @property
    def url(self) -> str:
        """Address reported in the startup message."""

        return f"http://localhost:{self.port}"


def load_config(
    env: Optional[Mapping[str, str]] = None,
    *,
    dotenv_path: Optional[Path | str] = None,
) -> ServerConfig:
    """
    Build a `ServerConfig` from the environment.

    Args:
        env: Explicit environment mapping. Defaults to ``os.environ`` after
            loading the nearest ``.env`` file (searched from the working
            directory upwards) into it.
        dotenv_path: Optional explicit ``.env`` file location.

    Returns:
        ServerConfig populated with the resolved values.

    Raises:
        ConfigError: if ``PORT`` is missing, not an integer or out of range.
    """

    if env is None:
        load_dotenv(dotenv_path or find_dotenv(usecwd=True), override=False)
        env = os.environ
    elif dotenv_path is not None:
        file_values = {k: v for k, v in dotenv_values(dotenv_path).items() if v is not None}
        env = {**file_values, **env}

    port = _parse_port(env.get(PORT_ENV))
    try:
        return ServerConfig(port=port)
    except ValidationError as exc:
        raise ConfigError(
            f"Invalid {PORT_ENV}: {port} is outside 1-65535", variable=PORT_ENV
        ) from exc


def _parse_port(raw: Optional[str]) -> int:
    """Convert the raw ``PORT`` value to an integer."""

    if raw is None or not raw.strip():
        raise ConfigError(f"{PORT_ENV} is not set", variable=PORT_ENV)

    value = raw.strip()
    if not (value.isascii() and value.isdigit()):
        raise ConfigError(
            f"Invalid {PORT_ENV}: {raw!r} is not a number", variable=PORT_ENV
        )
    return int(value)
