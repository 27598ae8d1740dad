"""Mapping of Elasticsearch responses to MCP results and errors.

Every backend call made by a tool goes through `read_json` or `read_text`, so
transport failures and error statuses are logged and reported the same way.
"""

import logging
from collections.abc import Awaitable
from typing import Any

import httpx

from ..errors import McpError

logger = logging.getLogger(__name__)


def internal_error(e: Exception) -> McpError:
    """Map any error to an internal error of the MCP server."""
    return McpError.internal_error(str(e) or type(e).__name__)


async def handle_error(call: Awaitable[httpx.Response]) -> httpx.Response:
    """Await a backend call and return its response if it succeeded.

    Raises:
        McpError: internal error for transport failures (connection, TLS,
            timeout) and non-2xx statuses. The backend's error body is relayed
            to the caller as it is informative.
    """
    try:
        response = await call
    except httpx.HTTPError as e:
        logger.error(f"Error: {e!r}")
        raise internal_error(e) from e

    if not response.is_success:
        body = await response.aread()
        text = body.decode(response.encoding or "utf-8", errors="replace")
        logger.error(f"Elasticsearch error: status={response.status_code} body={text}")
        raise McpError.internal_error(f"{response.status_code}: {text}")

    return response


async def read_json(call: Awaitable[httpx.Response]) -> Any:
    response = await handle_error(call)
    try:
        await response.aread()
        return response.json()
    except (ValueError, httpx.HTTPError) as e:
        logger.error(f"Cannot decode Elasticsearch response: {e}")
        raise internal_error(e) from e


async def read_text(call: Awaitable[httpx.Response]) -> str:
    response = await handle_error(call)
    try:
        await response.aread()
        return response.text
    except httpx.HTTPError as e:
        raise internal_error(e) from e
