"""Tool handlers.

This package contains the tool handlers:
- builtin: list_indices, get_mappings, search, esql, get_shards
- custom: ES|QL and search template tools declared in the configuration

Each handler is a standalone async function that takes:
- params: dict[str, Any] - Validated tool arguments from the MCP call
- client: ElasticsearchClient - Client resolved for the request

And returns:
- ToolResult with the data to send back
"""

from .base import HandlerFunc, ToolResult, render
from .builtin import (
    handle_esql,
    handle_get_mappings,
    handle_get_shards,
    handle_list_indices,
    handle_search,
)
from .custom import custom_tool_handler, run_esql_tool, run_search_template_tool
from .esql import esql_rows, shape_esql_result

__all__ = [
    # Base
    "HandlerFunc",
    "ToolResult",
    "render",
    # Built-in handlers
    "handle_list_indices",
    "handle_get_mappings",
    "handle_search",
    "handle_esql",
    "handle_get_shards",
    # Custom tools
    "custom_tool_handler",
    "run_esql_tool",
    "run_search_template_tool",
    "esql_rows",
    "shape_esql_result",
]
