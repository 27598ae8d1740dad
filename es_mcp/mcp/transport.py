"""JSON-RPC dispatch of MCP messages.

Shared by the HTTP transport (`es_mcp.server`) and the stdio transport
(`es_mcp.stdio`). HTTP requests pass their headers along so that tools can
use per-request Elasticsearch URL and credentials; stdio requests have none.
"""

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .. import __version__
from ..errors import INVALID_PARAMS, INVALID_REQUEST, McpError, jsonrpc_error, jsonrpc_response

if TYPE_CHECKING:
    from ..engine import EsMcpEngine

logger = logging.getLogger(__name__)

SERVER_NAME = "elasticsearch-mcp-server"
SUPPORTED_PROTOCOL_VERSIONS = ("2024-11-05", "2025-03-26", "2025-06-18")
LATEST_PROTOCOL_VERSION = SUPPORTED_PROTOCOL_VERSIONS[-1]

INSTRUCTIONS = "Provides access to Elasticsearch: list indices, inspect mappings and run queries."


async def handle_message(
    body: Any,
    engine: "EsMcpEngine",
    headers: Mapping[str, str] | None = None,
) -> dict | list | None:
    """Handle a JSON-RPC message or batch.

    Returns:
        The response (a list for batches), or None if there is nothing to send
        back (notifications only)
    """
    if isinstance(body, list):
        if not body:
            return jsonrpc_error(None, INVALID_REQUEST, "Invalid request: empty batch")
        responses = []
        for message in body:
            response = await handle_request(message, engine, headers)
            if response:  # Skip notifications (no id)
                responses.append(response)
        return responses or None

    return await handle_request(body, engine, headers)


async def handle_request(
    body: Any,
    engine: "EsMcpEngine",
    headers: Mapping[str, str] | None = None,
) -> dict | None:
    """Handle a single JSON-RPC request."""
    if not isinstance(body, dict) or not isinstance(body.get("method"), str):
        return jsonrpc_error(
            body.get("id") if isinstance(body, dict) else None,
            INVALID_REQUEST,
            "Invalid request",
        )

    method = body["method"]
    id = body.get("id")
    params = body.get("params") or {}

    if id is None:  # Notification - no response
        logger.debug(f"Notification: {method}")
        return None

    if not isinstance(params, dict):
        return jsonrpc_error(id, INVALID_PARAMS, "Invalid params: expected an object")

    try:
        result = await _dispatch(method, params, engine, headers)
    except McpError as e:
        return e.to_response(id)
    except Exception as e:
        logger.error(f"Unexpected error handling '{method}': {e}", exc_info=True)
        return McpError.internal_error("An internal server error occurred").to_response(id)

    return jsonrpc_response(id, result)


async def _dispatch(
    method: str,
    params: dict,
    engine: "EsMcpEngine",
    headers: Mapping[str, str] | None,
) -> dict:
    if method == "initialize":
        requested = params.get("protocolVersion")
        version = requested if requested in SUPPORTED_PROTOCOL_VERSIONS else LATEST_PROTOCOL_VERSION
        return {
            "protocolVersion": version,
            "serverInfo": {"name": SERVER_NAME, "version": __version__},
            "capabilities": {"tools": {}, "prompts": {}},
            "instructions": INSTRUCTIONS,
        }
    elif method == "ping":
        return {}
    elif method == "tools/list":
        return {"tools": engine.list_tools()}
    elif method == "tools/call":
        name = params.get("name")
        if not isinstance(name, str):
            raise McpError.invalid_params("Invalid parameter: missing tool name")
        result = await engine.call_tool(name, params.get("arguments"), headers)
        return result.to_mcp()
    elif method == "prompts/list":
        return {"prompts": engine.list_prompts()}
    elif method == "prompts/get":
        return engine.get_prompt(params.get("name", ""))
    else:
        raise McpError.method_not_found(method)
