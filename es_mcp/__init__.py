"""MCP server exposing an Elasticsearch cluster as tools."""

__version__ = "0.4.0"
