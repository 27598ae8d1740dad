"""MCP tool definitions returned by the tools/list method.

Built-in tools are fixed; custom tools get their definition from the
configuration file (see `custom_tool_definition`).

Tool Categories:
    - Discovery: list_indices, get_mappings, get_shards
    - Queries: search, esql
    - Custom: ES|QL and search template tools declared in the configuration
"""

from typing import Any

from ..models import BaseToolName, ToolAnnotations, ToolBase

READ_ONLY = ToolAnnotations(read_only_hint=True)


BASE_TOOL_DEFINITIONS: list[dict] = [
    # ============ Discovery Tools ============
    {
        "name": BaseToolName.LIST_INDICES,
        "description": "List all available Elasticsearch indices",
        "inputSchema": {
            "type": "object",
            "properties": {
                "index_pattern": {
                    "type": "string",
                    "description": "Index pattern of Elasticsearch indices to list",
                },
            },
            "required": ["index_pattern"],
        },
        "annotations": READ_ONLY.to_mcp(),
    },
    {
        "name": BaseToolName.GET_MAPPINGS,
        "description": "Get field mappings for a specific Elasticsearch index",
        "inputSchema": {
            "type": "object",
            "properties": {
                "index": {"type": "string", "description": "Name of the Elasticsearch index"},
            },
            "required": ["index"],
        },
        "annotations": READ_ONLY.to_mcp(),
    },
    {
        "name": BaseToolName.GET_SHARDS,
        "description": "Get shard information for all or specific indices.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "index": {
                    "type": "string",
                    "description": "Optional index name to get shard information for",
                },
            },
        },
        "annotations": READ_ONLY.to_mcp(),
    },
    # ============ Query Tools ============
    {
        "name": BaseToolName.SEARCH,
        "description": (
            "Perform an Elasticsearch search with the provided query DSL, "
            "returning hits (with highlighted matches in text fields) and aggregations."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "index": {"type": "string", "description": "Name of the Elasticsearch index"},
                "fields": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Fields to include in the response. Returns all fields if omitted.",
                },
                "query_body": {
                    "type": "object",
                    "description": (
                        "Complete Elasticsearch query DSL object that can include query, "
                        "size, from, sort, aggs, etc."
                    ),
                },
            },
            "required": ["index", "query_body"],
        },
        "annotations": READ_ONLY.to_mcp(),
    },
    {
        "name": BaseToolName.ESQL,
        "description": "Perform an ES|QL query.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Complete ES|QL query"},
            },
            "required": ["query"],
        },
        "annotations": READ_ONLY.to_mcp(),
    },
]


def custom_tool_input_schema(tool: ToolBase) -> dict[str, Any]:
    """JSON schema of a custom tool's arguments.

    Parameters without a `default` in their schema are required.
    """
    return {
        "type": "object",
        "properties": dict(tool.parameters),
        "required": [name for name, schema in tool.parameters.items() if "default" not in schema],
    }


def custom_tool_definition(name: str, tool: ToolBase) -> dict[str, Any]:
    definition: dict[str, Any] = {
        "name": name,
        "description": tool.description,
        "inputSchema": custom_tool_input_schema(tool),
    }
    if tool.annotations is not None:
        definition["annotations"] = tool.annotations.to_mcp()
    return definition
