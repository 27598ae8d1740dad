"""Tool engine: the set of tools exposed by the server and their dispatch.

The engine is built once at startup from the configuration and shared,
read-only, by all requests. Per call it validates the arguments, resolves the
Elasticsearch client for the request and runs the tool handler.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from ..elasticsearch import EsClientProvider, build_default_client
from ..errors import ConfigurationError, McpError
from ..mcp.tool_defs import BASE_TOOL_DEFINITIONS, custom_tool_definition
from ..mcp.validation import validate_arguments
from ..models import BaseToolName, EsMcpConfig
from .handlers import (
    HandlerFunc,
    ToolResult,
    custom_tool_handler,
    handle_esql,
    handle_get_mappings,
    handle_get_shards,
    handle_list_indices,
    handle_search,
)

logger = logging.getLogger(__name__)

BASE_TOOL_HANDLERS: dict[str, HandlerFunc] = {
    BaseToolName.LIST_INDICES: handle_list_indices,
    BaseToolName.GET_MAPPINGS: handle_get_mappings,
    BaseToolName.SEARCH: handle_search,
    BaseToolName.ESQL: handle_esql,
    BaseToolName.GET_SHARDS: handle_get_shards,
}


@dataclass(frozen=True)
class RegisteredTool:
    definition: dict[str, Any]
    handler: HandlerFunc


class EsMcpEngine:
    """Registered tools and prompts, and the client provider they run with."""

    def __init__(self, provider: EsClientProvider, config: EsMcpConfig):
        self.provider = provider
        self.prompts: tuple[str, ...] = tuple(config.prompts)
        self._tools: dict[str, RegisteredTool] = {}

        for definition in BASE_TOOL_DEFINITIONS:
            name = definition["name"]
            if config.tools.is_enabled(name):
                self._tools[name] = RegisteredTool(definition, BASE_TOOL_HANDLERS[name])

        for name, tool in config.tools.custom.items():
            if name in BASE_TOOL_HANDLERS:
                raise ConfigurationError(f"Custom tool '{name}' conflicts with a built-in tool")
            self._tools[name] = RegisteredTool(
                custom_tool_definition(name, tool), custom_tool_handler(tool)
            )

        logger.info(f"Registered tools: {', '.join(self._tools) or '(none)'}")

    @classmethod
    def from_config(
        cls,
        config: EsMcpConfig,
        container_mode: bool = False,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "EsMcpEngine":
        """Build the default client and the engine.

        Raises:
            ConfigurationError: the configuration cannot be used to start
        """
        client = build_default_client(config, container_mode, transport=transport)
        provider = EsClientProvider(
            client, config.ssl_skip_verify, config.ca_cert, transport=transport
        )
        return cls(provider, config)

    async def aclose(self) -> None:
        await self.provider.default.aclose()

    # ============ TOOLS ============

    def list_tools(self) -> list[dict[str, Any]]:
        return [tool.definition for tool in self._tools.values()]

    def get_tool(self, name: str) -> RegisteredTool:
        tool = self._tools.get(name)
        if tool is None:
            raise McpError.invalid_params(f"Unknown tool: {name}")
        return tool

    async def call_tool(
        self,
        name: str,
        arguments: dict[str, Any] | None,
        headers: Mapping[str, str] | None = None,
    ) -> ToolResult:
        """Run tool `name` for a request carrying `headers`.

        Raises:
            McpError: invalid params for unknown tools or bad arguments,
                internal error for backend failures
        """
        tool = self.get_tool(name)
        params = validate_arguments(name, tool.definition["inputSchema"], arguments)

        async with self.provider.resolve(headers) as client:
            return await tool.handler(params, client)

    # ============ PROMPTS ============

    def list_prompts(self) -> list[dict[str, Any]]:
        return [
            {"name": prompt_name(i), "description": _first_line(text)}
            for i, text in enumerate(self.prompts)
        ]

    def get_prompt(self, name: str) -> dict[str, Any]:
        for i, text in enumerate(self.prompts):
            if prompt_name(i) == name:
                return {
                    "description": _first_line(text),
                    "messages": [{"role": "user", "content": {"type": "text", "text": text}}],
                }
        raise McpError.invalid_params(f"Unknown prompt: {name}")


def prompt_name(index: int) -> str:
    return f"prompt_{index + 1}"


def _first_line(text: str) -> str:
    return text.strip().splitlines()[0] if text.strip() else ""


__all__ = ["EsMcpEngine", "RegisteredTool", "BASE_TOOL_HANDLERS", "prompt_name"]
