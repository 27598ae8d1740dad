"""Enumeration types for the Elasticsearch MCP server."""

from enum import StrEnum


class BaseToolName(StrEnum):
    """Built-in tools, always available unless filtered out by configuration."""

    LIST_INDICES = "list_indices"
    GET_MAPPINGS = "get_mappings"
    SEARCH = "search"
    ESQL = "esql"
    GET_SHARDS = "get_shards"


class EsqlResultFormat(StrEnum):
    """How the rows of an ES|QL custom tool are returned."""

    JSON = "json"  # Array of objects, or a single object for a single row
    VALUE = "value"  # Single object with a single property: only its value

