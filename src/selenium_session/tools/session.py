"""Browser session lifecycle tools."""

from typing import Annotated, Optional, Literal
from pydantic import Field
from fastmcp import FastMCP, Context

from ..core.exceptions import SessionNotFoundError
from ._common import get_context, get_session, run_in_session, to_tool_error

session_router = FastMCP(
    name="SessionTools",
    instructions="Browser session lifecycle management",
)


@session_router.tool(
    description="Start a browser and return a session id for the other tools",
    tags={"session", "lifecycle"},
)
async def create_session(
    ctx: Context,
    browser: Annotated[
        Literal["chrome", "firefox", "edge"],
        Field(description="Browser type to launch"),
    ] = "chrome",
    headless: Annotated[
        bool,
        Field(description="Run browser in headless mode (no visible window)"),
    ] = True,
    viewport_width: Annotated[
        Optional[int],
        Field(description="Browser viewport width in pixels"),
    ] = None,
    viewport_height: Annotated[
        Optional[int],
        Field(description="Browser viewport height in pixels"),
    ] = None,
    app_host: Annotated[
        Optional[str],
        Field(description="Base URL that relative paths passed to visit resolve against"),
    ] = None,
    default_wait_time: Annotated[
        Optional[float],
        Field(description="Seconds finders wait for elements to appear"),
    ] = None,
) -> dict:
    """
    Create a new browser session.

    The session is closed automatically after the configured idle or
    lifetime limit.
    """
    app_ctx = get_context(ctx)

    try:
        browser_session = await app_ctx.session_manager.create_session(
            browser=browser,
            headless=headless,
            viewport_width=viewport_width,
            viewport_height=viewport_height,
            app_host=app_host,
            default_wait_time=default_wait_time,
        )
        await ctx.info(f"Created {browser} session: {browser_session.session_id}")

        return {
            "success": True,
            "session_id": browser_session.session_id,
            "browser": browser_session.browser,
            "headless": headless,
            "created_at": browser_session.created_at,
            "app_host": browser_session.session.app_host,
        }

    except Exception as e:
        raise to_tool_error(e)


@session_router.tool(
    description="Close a browser session and release all resources",
    tags={"session", "lifecycle"},
)
async def close_session(
    ctx: Context,
    session_id: Annotated[str, Field(description="Session ID to close")],
) -> dict:
    """Quit the browser, drop registered elements and free the session slot."""
    app_ctx = get_context(ctx)

    try:
        closed = await app_ctx.session_manager.close_session(session_id)
        if not closed:
            raise SessionNotFoundError(session_id)

        await ctx.info(f"Closed session: {session_id}")

        return {
            "success": True,
            "closed": True,
            "session_id": session_id,
        }

    except Exception as e:
        raise to_tool_error(e)


@session_router.tool(
    description="Get information about a browser session and its current page",
    tags={"session", "info"},
)
async def get_session_info(
    ctx: Context,
    session_id: Annotated[str, Field(description="Session ID to get info for")],
) -> dict:
    """Session metadata plus the current URL, title and window count."""
    try:
        browser_session = get_session(ctx, session_id)
        session = browser_session.session

        def read_state():
            return {
                "current_url": session.current_url,
                "current_title": session.title,
                "window_count": len(session.driver.window_handles),
            }

        state = await run_in_session(browser_session, read_state)

        return {
            "success": True,
            **browser_session.to_dict(),
            **state,
        }

    except Exception as e:
        raise to_tool_error(e)


@session_router.tool(
    description="Reset a session: close extra windows, clear cookies and load a blank page",
    tags={"session", "lifecycle"},
)
async def reset_session(
    ctx: Context,
    session_id: Annotated[str, Field(description="Session ID to reset")],
) -> dict:
    """Return the browser to a blank state; registered element ids are dropped."""
    try:
        browser_session = get_session(ctx, session_id)
        def run():
            browser_session.session.reset()
            return browser_session.clear_nodes()

        cleared = await run_in_session(browser_session, run)

        return {
            "success": True,
            "session_id": session_id,
            "elements_cleared": cleared,
        }

    except Exception as e:
        raise to_tool_error(e)
