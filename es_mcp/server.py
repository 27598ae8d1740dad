"""FastAPI MCP server for Elasticsearch.

Serves MCP over HTTP (`POST /mcp`, JSON-RPC) or stdio. Over HTTP, a request
can target another cluster or user with the `X-Elasticsearch-URL` and
`Authorization` headers.
"""

import argparse
import asyncio
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from . import __version__
from .config import get_settings, load_config
from .engine import EsMcpEngine
from .errors import INTERNAL_ERROR, PARSE_ERROR, ConfigurationError, jsonrpc_error
from .mcp.transport import handle_message
from .stdio import serve_stdio

logger = logging.getLogger(__name__)


def create_app(engine: EsMcpEngine) -> FastAPI:
    """Create the HTTP application serving `engine`."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler for startup/shutdown."""
        logger.info(f"Starting Elasticsearch MCP server v{__version__}")
        yield
        await engine.aclose()

    app = FastAPI(
        title="Elasticsearch MCP Server",
        description="MCP endpoint exposing Elasticsearch indices and queries as tools",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.engine = engine

    # ============ EXCEPTION HANDLERS ============

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions with sanitized error messages."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=jsonrpc_error(None, INTERNAL_ERROR, "An internal server error occurred"),
        )

    # ============ HEALTH ENDPOINTS ============

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint (lightweight liveness check)."""
        return {"status": "healthy", "version": __version__}

    @app.get("/", tags=["Health"])
    async def root():
        """Root endpoint with server info."""
        return {
            "name": "Elasticsearch MCP Server",
            "version": __version__,
            "mcp": "/mcp",
            "health": "/health",
        }

    # ============ MCP ENDPOINTS ============

    @app.post("/mcp", tags=["MCP"])
    async def mcp_endpoint(request: Request):
        """
        MCP Streamable HTTP endpoint (JSON-RPC format, JSON responses only).

        Optional headers:
            X-Elasticsearch-URL: Elasticsearch URL to use for this request
            Authorization: Elasticsearch credentials (`ApiKey ...` or `Basic ...`)
        """
        try:
            body = await request.json()
        except ValueError:
            return JSONResponse(jsonrpc_error(None, PARSE_ERROR, "Parse error"), status_code=400)

        response = await handle_message(body, request.app.state.engine, request.headers)
        if response is None:  # Notifications and responses only
            return Response(status_code=202)
        return JSONResponse(response)

    @app.get("/mcp", tags=["MCP"])
    async def mcp_stream_not_supported():
        """Server-initiated streams are not supported."""
        return Response(status_code=405, headers={"Allow": "POST"})

    return app


# ============ MAIN ============


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="es-mcp-server", description="Elasticsearch MCP server"
    )
    parser.add_argument(
        "--config",
        help="JSON configuration file (default: ES_MCP_CONFIG, or ES_* environment variables)",
    )
    subparsers = parser.add_subparsers(dest="mode")
    subparsers.add_parser("stdio", help="Serve MCP on stdin/stdout (default)")
    http = subparsers.add_parser("http", help="Serve MCP over HTTP")
    http.add_argument("--address", help="host:port to listen on (default: HTTP_ADDRESS)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Run the server in stdio or HTTP mode."""
    args = _parse_args(argv)

    # stdout is reserved for the stdio transport
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = get_settings()
        logging.getLogger().setLevel(settings.log_level)
        if args.mode == "http" and args.address:
            settings = settings.model_copy(update={"http_address": args.address})
        config = load_config(args.config, settings)
        engine = EsMcpEngine.from_config(config, settings.container_mode)
        host, port = settings.host, settings.port
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    if args.mode == "http":
        import uvicorn

        uvicorn.run(create_app(engine), host=host, port=port)
    else:
        asyncio.run(serve_stdio(engine))


if __name__ == "__main__":
    main()
