"""stdio transport: JSON-RPC messages on stdin/stdout.

Line framing and message parsing are done by the MCP SDK (`stdio_server`);
each message is dispatched by `es_mcp.mcp.transport.handle_message`.

Logs go to stderr; stdout only carries protocol messages.
"""

import logging

import anyio
from anyio.abc import ObjectSendStream
from mcp.server.stdio import stdio_server
from mcp.shared.message import SessionMessage
from mcp.types import JSONRPCMessage

from .engine import EsMcpEngine
from .mcp.transport import handle_message

logger = logging.getLogger(__name__)


async def _handle_session_message(
    message: SessionMessage,
    engine: EsMcpEngine,
    write_stream: ObjectSendStream[SessionMessage],
) -> None:
    body = message.message.model_dump(by_alias=True, mode="json", exclude_none=True)

    # No transport headers on stdio: tools always use the default client
    response = await handle_message(body, engine)
    if response is not None:
        await write_stream.send(SessionMessage(JSONRPCMessage.model_validate(response)))


async def serve_stdio(
    engine: EsMcpEngine,
    stdin: anyio.AsyncFile[str] | None = None,
    stdout: anyio.AsyncFile[str] | None = None,
) -> None:
    """Serve MCP requests from standard input (or `stdin`) until end of file.

    Requests are handled concurrently; responses are written as they complete.
    Lines that are not valid JSON-RPC messages are logged and skipped.
    """
    logger.info("Serving MCP on stdio")
    try:
        async with stdio_server(stdin, stdout) as (read_stream, write_stream):
            async with write_stream, anyio.create_task_group() as tg:
                async for message in read_stream:
                    if isinstance(message, Exception):
                        logger.warning(f"Invalid message on stdin: {message}")
                        continue
                    tg.start_soon(_handle_session_message, message, engine, write_stream)
    finally:
        await engine.aclose()
        logger.info("stdio transport closed")
