"""Server settings and configuration loading.

Settings come from environment variables (and an optional `.env` file) using
pydantic-settings. The Elasticsearch configuration (connection and tools) is
read from a JSON configuration file when one is given, or else built from the
`ES_*` environment variables.

Configuration files can reference environment variables as `${VAR}` or
`${VAR:default}`:

    {
      "url": "${ES_URL:http://localhost:9200}",
      "api_key": "${ES_API_KEY:}",
      "tools": {"exclude": ["get_shards"], "custom": {...}}
    }
"""

import json
import logging
import os
import re
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError
from .models import DEFAULT_ES_URL, EsMcpConfig

logger = logging.getLogger(__name__)

FALSE_VALUES = ("", "false", "0", "no", "off")


class Settings(BaseSettings):
    """Process settings, loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Server
    http_address: str = Field(
        default="0.0.0.0:8080",
        validation_alias="HTTP_ADDRESS",
        description="Address the HTTP transport listens on (host:port)",
    )
    container_mode: bool = Field(
        default=False,
        validation_alias="CONTAINER_MODE",
        description="Rewrite localhost Elasticsearch URLs to the container host",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "ES_MCP_LOG_LEVEL")
    )
    config_file: Path | None = Field(default=None, validation_alias="ES_MCP_CONFIG")

    # Elasticsearch connection, when no configuration file is used
    es_url: str = Field(default=DEFAULT_ES_URL, validation_alias="ES_URL")
    es_api_key: str | None = Field(default=None, validation_alias="ES_API_KEY")
    es_username: str | None = Field(default=None, validation_alias="ES_USERNAME")
    es_password: str | None = Field(default=None, validation_alias="ES_PASSWORD")
    es_ssl_skip_verify: bool = Field(default=False, validation_alias="ES_SSL_SKIP_VERIFY")
    es_ca_cert: str | None = Field(default=None, validation_alias="ES_CA_CERT")

    @field_validator("container_mode", mode="before")
    @classmethod
    def _truthy_container_mode(cls, v: Any) -> Any:
        # Any value enables container mode (e.g. CONTAINER_MODE=docker), except
        # an empty one or an explicit false
        if isinstance(v, str):
            return v.strip().lower() not in FALSE_VALUES
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    @property
    def host(self) -> str:
        return self.http_address.rpartition(":")[0] or "0.0.0.0"

    @property
    def port(self) -> int:
        try:
            return int(self.http_address.rpartition(":")[2])
        except ValueError:
            raise ConfigurationError(f"Invalid HTTP_ADDRESS: {self.http_address}") from None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the global settings instance (cached).

    Raises:
        ConfigurationError: an environment variable has an invalid value
    """
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid environment settings: {e}") from e


_ENV_VAR = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::([^}]*))?\}")


def interpolate_env(text: str, env: Mapping[str, str] | None = None) -> str:
    """Replace `${VAR}` and `${VAR:default}` references with their values.

    Raises:
        ConfigurationError: a variable without default is not set
    """
    env = os.environ if env is None else env

    def replace(match: re.Match) -> str:
        name, default = match.group(1), match.group(2)
        value = env.get(name)
        if value is not None:
            return value
        if default is not None:
            return default
        raise ConfigurationError(f"Environment variable '{name}' is not set")

    return _ENV_VAR.sub(replace, text)


def load_config(path: str | Path | None = None, settings: Settings | None = None) -> EsMcpConfig:
    """Load the Elasticsearch configuration.

    Args:
        path: JSON configuration file. If None, `settings.config_file` is used,
            and if not set either, the configuration is built from settings.
        settings: Process settings (defaults to `get_settings()`)

    Raises:
        ConfigurationError: unreadable file, invalid JSON or invalid configuration
    """
    settings = settings or get_settings()
    path = path or settings.config_file

    if path is None:
        data = {
            "url": settings.es_url,
            "api_key": settings.es_api_key,
            "username": settings.es_username,
            "password": settings.es_password,
            "ssl_skip_verify": settings.es_ssl_skip_verify,
            "ca_cert": settings.es_ca_cert,
        }
        source = "environment"
    else:
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file {path}: {e}") from e
        try:
            data = json.loads(interpolate_env(text))
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in configuration file {path}: {e}") from e
        source = str(path)

    try:
        config = EsMcpConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration ({source}): {e}") from e

    logger.info(f"Loaded configuration from {source}")
    return config
