"""Errors returned to MCP callers and raised at startup.

Two families:
- ConfigurationError: invalid startup configuration, fatal before serving.
- McpError: an error returned to the MCP caller as a JSON-RPC error object.

JSON-RPC 2.0 message builders live here too, so that every error shape sent
on the wire comes from one place (https://www.jsonrpc.org/specification).
"""

from typing import Any

# Standard JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


def jsonrpc_response(id: Any, result: Any) -> dict:
    return {"jsonrpc": "2.0", "id": id, "result": result}


def jsonrpc_error(id: Any, code: int, message: str) -> dict:
    """Build a JSON-RPC error message. `id` is None when the request id is unknown."""
    return {"jsonrpc": "2.0", "id": id, "error": {"code": code, "message": message}}


class ConfigurationError(Exception):
    """Raised when the server cannot start with the given configuration."""


class McpError(Exception):
    """An error to be reported to the caller in the JSON-RPC error shape."""

    def __init__(self, code: int, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    @classmethod
    def invalid_params(cls, message: str) -> "McpError":
        """Caller-correctable error (unknown tool, bad arguments)."""
        return cls(INVALID_PARAMS, message)

    @classmethod
    def internal_error(cls, message: str) -> "McpError":
        """Server-side or backend failure."""
        return cls(INTERNAL_ERROR, message)

    @classmethod
    def method_not_found(cls, method: str) -> "McpError":
        return cls(METHOD_NOT_FOUND, f"Method not found: {method}")

    def to_response(self, id: Any) -> dict:
        return jsonrpc_error(id, self.code, self.message)
