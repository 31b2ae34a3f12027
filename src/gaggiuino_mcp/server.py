"""Main MCP server entry point.

Copyright (C) 2024 Gaggiuino MCP

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""

import contextlib
import logging
import os
import sys
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import anyio
import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from starlette.applications import Starlette
from starlette.routing import Mount

from .api_client import GaggiuinoAPIClient
from .decoders import parse_int
from .prompts import PROMPTS, get_prompt as render_prompt
from .tools import ToolGateway

SERVER_NAME = "gaggiuino-mcp"
SERVER_VERSION = "1.0.0"

DEFAULT_BASE_URL = "http://192.168.3.248"
DEFAULT_TIMEOUT_MS = "5000"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """Process configuration read from the environment."""

    base_url: str
    timeout_ms: int
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8080


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Read settings from environment variables.

    Args:
        environ: Mapping to read from. Defaults to os.environ.

    Returns:
        Settings

    Raises:
        ValueError: If REQUEST_TIMEOUT or GAGGIUINO_MCP_PORT is not a positive integer
    """
    if environ is None:
        environ = os.environ

    raw_timeout = environ.get("REQUEST_TIMEOUT") or DEFAULT_TIMEOUT_MS
    timeout_ms = parse_int(raw_timeout)
    if timeout_ms is None or timeout_ms <= 0:
        raise ValueError(f"REQUEST_TIMEOUT must be a positive integer number of milliseconds, got {raw_timeout!r}")

    raw_port = environ.get("GAGGIUINO_MCP_PORT") or "8080"
    port = parse_int(raw_port)
    if port is None or port <= 0:
        raise ValueError(f"GAGGIUINO_MCP_PORT must be a positive integer, got {raw_port!r}")

    return Settings(
        base_url=environ.get("GAGGIUINO_BASE_URL") or DEFAULT_BASE_URL,
        timeout_ms=timeout_ms,
        log_level=environ.get("GAGGIUINO_MCP_LOG_LEVEL", "INFO"),
        host=environ.get("GAGGIUINO_MCP_HOST", "127.0.0.1"),
        port=port,
    )


def configure_logging(level: str) -> None:
    """Log to stderr; stdout carries the stdio transport."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def create_server(api_client: GaggiuinoAPIClient) -> Server:
    """Build the MCP server around an API client.

    Args:
        api_client: Client used by every tool call

    Returns:
        Low-level MCP server with tools and prompts registered
    """
    gateway = ToolGateway(api_client)
    server = Server(SERVER_NAME, version=SERVER_VERSION)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return gateway.list_tools()

    # Arguments are validated by the gateway so callers get its error messages.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> types.CallToolResult:
        return await gateway.call_tool(name, arguments)

    @server.list_prompts()
    async def list_prompts() -> List[types.Prompt]:
        return list(PROMPTS)

    @server.get_prompt()
    async def get_prompt(name: str, arguments: Optional[Dict[str, str]]) -> types.GetPromptResult:
        return render_prompt(name, arguments)

    return server


def create_http_app(server: Server) -> Starlette:
    """Wrap the server in a Starlette app serving streamable HTTP at /mcp."""
    session_manager = StreamableHTTPSessionManager(app=server)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        async with session_manager.run():
            yield

    return Starlette(
        routes=[Mount("/mcp", app=session_manager.handle_request)],
        lifespan=lifespan,
    )


async def serve_stdio(server: Server, base_url: str) -> None:
    """Serve over stdin/stdout until the client disconnects."""
    async with stdio_server() as (read_stream, write_stream):
        logger.info("%s running (%s)", SERVER_NAME, base_url)
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    """Main entry point for running the server over stdio."""
    configure_logging(os.getenv("GAGGIUINO_MCP_LOG_LEVEL", "INFO"))
    try:
        settings = load_settings()
        server = create_server(GaggiuinoAPIClient(settings.base_url, settings.timeout_ms))
        anyio.run(serve_stdio, server, settings.base_url)
    except Exception:
        logger.exception("%s stopped with a fatal error", SERVER_NAME)
        sys.exit(1)


def main_http() -> None:
    """Entry point for running the server over streamable HTTP."""
    import uvicorn

    configure_logging(os.getenv("GAGGIUINO_MCP_LOG_LEVEL", "INFO"))
    try:
        settings = load_settings()
        server = create_server(GaggiuinoAPIClient(settings.base_url, settings.timeout_ms))
        app = create_http_app(server)
        logger.info(
            "%s running (%s) on http://%s:%s/mcp", SERVER_NAME, settings.base_url, settings.host, settings.port
        )
        uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    except Exception:
        logger.exception("%s stopped with a fatal error", SERVER_NAME)
        sys.exit(1)


if __name__ == "__main__":
    main()
