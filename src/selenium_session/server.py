"""FastMCP server exposing browser sessions as tools."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from fastmcp import FastMCP
from fastmcp.server.auth.providers.debug import DebugTokenVerifier
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from .config import Settings, settings
from .core.driver_factory import DriverFactory
from .core.session_manager import SessionManager, SessionSweeper
from .tools import create_tool_router, import_all_tools

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_auth_verifier():
    """Bearer-token verifier when an API key is configured, else None."""
    api_key = settings.get_api_key()

    if not api_key:
        logger.info("No API key configured - authentication disabled")
        return None

    def validate_token(token: str) -> bool:
        return token == api_key

    logger.info("API key authentication enabled")
    return DebugTokenVerifier(
        validate=validate_token,
        client_id="selenium-session-client",
        scopes=["*"],
    )


@dataclass
class AppContext:
    """Lifespan context holding all services shared across tools."""

    session_manager: SessionManager
    settings: Settings


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[AppContext]:
    """
    Create the session registry and sweeper on startup; close every
    session on shutdown.
    """
    logger.info(
        f"Starting selenium-session server (browser: {settings.default_browser}, "
        f"grid: {settings.selenium_grid_url})"
    )

    driver_factory = DriverFactory(
        grid_url=settings.selenium_grid_url,
        page_load_timeout=settings.page_load_timeout_seconds,
        script_timeout=settings.script_timeout_seconds,
        implicit_wait=settings.implicit_wait_seconds,
    )

    session_manager = SessionManager(
        driver_factory=driver_factory,
        max_sessions=settings.max_concurrent_sessions,
        max_lifetime_seconds=settings.session_max_lifetime_seconds,
        max_idle_seconds=settings.session_max_idle_seconds,
    )

    sweeper = SessionSweeper(
        session_manager=session_manager,
        interval_seconds=settings.sweep_interval_seconds,
    )
    await sweeper.start()

    try:
        yield AppContext(session_manager=session_manager, settings=settings)
    finally:
        logger.info("Shutting down selenium-session server...")
        await sweeper.stop()
        closed = await session_manager.close_all()
        logger.info(f"Shutdown complete ({closed} sessions closed)")


def create_server() -> FastMCP:
    """Create the MCP server; tools are imported by setup_server."""
    return FastMCP(
        name="selenium-session",
        instructions=(
            "Browser automation with Capybara-style finders. "
            "Call create_session first, visit a page, find_elements to get "
            "element ids, then click, set_value or select_option. "
            "Finders wait briefly for elements to appear. "
            "Close sessions with close_session when done."
        ),
        lifespan=app_lifespan,
        auth=create_auth_verifier(),
    )


async def setup_server(mcp: FastMCP) -> None:
    """Import all tool routers into the server (async)."""
    tool_router = create_tool_router()
    await import_all_tools(tool_router)
    await mcp.import_server(tool_router)


mcp = create_server()


@mcp.custom_route("/health", methods=["GET"])
async def health_check(request: Request) -> Response:
    """Health check endpoint for container orchestration."""
    return JSONResponse({"status": "ok"})


def run_server() -> None:
    """Run the MCP server with HTTP transport."""
    asyncio.run(setup_server(mcp))

    mcp.run(
        transport="http",
        host=settings.host,
        port=settings.port,
    )
