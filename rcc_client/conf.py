# SPDX-License-Identifier: MIT
# Copyright (c) 2025 rcc-client contributors

"""Client settings with validation and environment loading."""

import os
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigurationError

# Environment variable names understood by Conf.from_env()
ENV_VARS = {
    "server_url": "RCC_SERVER_URL",
    "project_name": "RCC_PROJECT_NAME",
    "env_name": "RCC_ENV_NAME",
    "api_password": "RCC_API_PASSWORD",
    "version_name": "RCC_VERSION_NAME",
    "poll_interval_seconds": "RCC_POLL_INTERVAL",
    "request_timeout_seconds": "RCC_REQUEST_TIMEOUT",
    "cache_dir": "RCC_CACHE_DIR",
    "enable_cache": "RCC_ENABLE_CACHE",
    "enable_callback": "RCC_ENABLE_CALLBACK",
}

_BOOL_FIELDS = ("enable_cache", "enable_callback")


def _parse_bool(value: str) -> bool | None:
    value_lower = value.strip().lower()
    if value_lower in ("true", "1", "yes", "on"):
        return True
    if value_lower in ("false", "0", "no", "off"):
        return False
    return None


class Conf(BaseModel):
    """Settings for one project/environment binding.

    Values are normalized once at construction and the instance is frozen
    afterwards. Any invalid value raises ConfigurationError.

    Example:
        >>> conf = Conf(server_url="http://rcc:8088/", project_name="demo", env_name="prod")
        >>> conf.server_url
        'http://rcc:8088'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    server_url: str = Field(..., min_length=1, description="Base URL of the configuration authority")
    project_name: str = Field(..., min_length=1, description="Project name")
    env_name: str = Field(..., min_length=1, description="Environment name")
    api_password: str = Field(default="", description="Project API credential")
    version_name: str = Field(default="", description="Named version; empty selects the active one")
    poll_interval_seconds: float = Field(default=20.0, gt=0, description="Version check interval")
    request_timeout_seconds: float = Field(default=10.0, gt=0, description="HTTP request timeout")
    cache_dir: str = Field(default="./.rcc_cache", min_length=1, description="Directory for the cache file")
    enable_cache: bool = Field(default=True, description="Persist snapshots and fall back to them")
    enable_callback: bool = Field(default=False, description="Poll for updates and deliver change events")

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid rcc client configuration: {e}") from e

    @field_validator("server_url", "project_name", "env_name", "version_name", "cache_dir", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> Any:
        # api_password is used verbatim
        return v.strip() if isinstance(v, str) else v

    @field_validator("server_url")
    @classmethod
    def _normalize_server_url(cls, v: str) -> str:
        v = v.rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"server_url must start with http:// or https://, got '{v}'")
        return v

    @field_validator("cache_dir")
    @classmethod
    def _expand_cache_dir(cls, v: str) -> str:
        return os.path.expanduser(v)

    @classmethod
    def normalize(cls, **data: Any) -> "Conf":
        """Validate raw settings and return a frozen Conf.

        Raises:
            ConfigurationError: If a required setting is missing or invalid
        """
        return cls(**data)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> "Conf":
        """Build a Conf from RCC_* environment variables.

        Unset variables keep their defaults. Boolean variables accept
        true/1/yes/on and false/0/no/off; other values keep the default.
        Keyword overrides that are not None win over the environment.

        Args:
            environ: Mapping to read instead of os.environ
            **overrides: Explicit field values

        Raises:
            ConfigurationError: If the resulting settings are invalid
        """
        environ = environ if environ is not None else os.environ
        data: dict[str, Any] = {}
        for field_name, env_var in ENV_VARS.items():
            raw = environ.get(env_var)
            if raw is None:
                continue
            if field_name in _BOOL_FIELDS:
                parsed = _parse_bool(raw)
                if parsed is not None:
                    data[field_name] = parsed
            else:
                data[field_name] = raw

        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**data)

    @property
    def cache_file(self) -> str:
        """Path of the snapshot file for this project/environment pair."""
        return os.path.join(self.cache_dir, f".{self.project_name}_{self.env_name}")
