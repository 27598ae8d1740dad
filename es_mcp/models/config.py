"""Server configuration model.

Loaded once at startup, from a configuration file or from environment
variables (see `es_mcp.config.load_config`), and never mutated afterwards.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .tools import CustomTool

DEFAULT_ES_URL = "http://localhost:9200"


class Tools(BaseModel):
    """Tool selection: built-in tools filter and custom tools."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    include: list[str] | None = Field(
        default=None, description="Only expose these built-in tools"
    )
    exclude: list[str] | None = Field(
        default=None, description="Expose all built-in tools except these"
    )
    custom: dict[str, CustomTool] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _include_or_exclude(self) -> "Tools":
        if self.include is not None and self.exclude is not None:
            raise ValueError("'include' and 'exclude' cannot be used together")
        return self

    def is_enabled(self, name: str) -> bool:
        """Whether the built-in tool `name` passes the include/exclude filter."""
        if self.include is not None:
            return name in self.include
        if self.exclude is not None:
            return name not in self.exclude
        return True


class EsMcpConfig(BaseModel):
    """Connection defaults, credentials and tools to expose."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Optional if a URL will be provided per request via X-Elasticsearch-URL
    url: str | None = DEFAULT_ES_URL
    api_key: str | None = None
    username: str | None = None
    password: str | None = None
    ssl_skip_verify: bool = False
    # Path to a PEM file with the CA certificate(s) of the cluster
    ca_cert: str | None = None
    tools: Tools = Field(default_factory=Tools)
    prompts: list[str] = Field(default_factory=list)

    @field_validator("url", "api_key", "username", "password", "ca_cert", mode="before")
    @classmethod
    def _none_if_empty(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("ssl_skip_verify", mode="before")
    @classmethod
    def _bool_from_anything(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return False
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return v != 0
        return v

    @model_validator(mode="after")
    def _password_with_username(self) -> "EsMcpConfig":
        if self.username is not None and self.password is None:
            raise ValueError("missing password for username")
        return self
