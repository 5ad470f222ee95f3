"""Page navigation tools."""

from typing import Annotated, Optional
from pydantic import Field
from fastmcp import FastMCP, Context

from ..core.exceptions import StatusCodeUnavailable
from ._common import get_session, run_in_session, to_tool_error

navigation_router = FastMCP(
    name="NavigationTools",
    instructions="Browser navigation and page context tools",
)


def get_page_state(session, include_status: bool = False) -> dict:
    """Current URL, path and title (blocking); optionally the HTTP status."""
    state = {
        "url": session.current_url,
        "path": session.current_path,
        "title": session.title,
    }
    if include_status:
        try:
            state["status_code"] = session.status_code
        except StatusCodeUnavailable:
            state["status_code"] = None
    return state


async def _navigate(ctx: Context, session_id: str, action) -> dict:
    browser_session = get_session(ctx, session_id)
    session = browser_session.session

    def run():
        action(session)
        return get_page_state(session)

    state = await run_in_session(browser_session, run)
    return {"success": True, "session_id": session_id, **state}


@navigation_router.tool(
    description="Navigate to a URL; relative paths resolve against the session's app_host",
    tags={"navigation"},
)
async def visit(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    url: Annotated[str, Field(description="Absolute URL or path relative to app_host")],
) -> dict:
    """
    Navigate the top-level window to ``url``.

    Returns:
        Final URL (after redirects), path and page title
    """
    try:
        result = await _navigate(ctx, session_id, lambda s: s.visit(url))
        await ctx.info(f"Navigated to {result['url']}")
        return result
    except Exception as e:
        raise to_tool_error(e)


@navigation_router.tool(
    description="Navigate back in browser history",
    tags={"navigation"},
)
async def go_back(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
) -> dict:
    try:
        return await _navigate(ctx, session_id, lambda s: s.go_back())
    except Exception as e:
        raise to_tool_error(e)


@navigation_router.tool(
    description="Navigate forward in browser history",
    tags={"navigation"},
)
async def go_forward(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
) -> dict:
    try:
        return await _navigate(ctx, session_id, lambda s: s.go_forward())
    except Exception as e:
        raise to_tool_error(e)


@navigation_router.tool(
    description="Reload the current page",
    tags={"navigation"},
)
async def refresh(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
) -> dict:
    try:
        return await _navigate(ctx, session_id, lambda s: s.refresh())
    except Exception as e:
        raise to_tool_error(e)


@navigation_router.tool(
    description="Get URL, path, title and HTTP status code of the current page",
    tags={"navigation", "observation"},
)
async def get_page_info(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    include_status: Annotated[
        Optional[bool],
        Field(description="Look up the HTTP status code (Chrome only)"),
    ] = True,
) -> dict:
    """
    Get current page metadata.

    ``status_code`` is None when the browser does not expose network events.
    """
    try:
        browser_session = get_session(ctx, session_id)
        state = await run_in_session(
            browser_session,
            lambda: get_page_state(browser_session.session, include_status=bool(include_status)),
        )
        return {"success": True, "session_id": session_id, **state}
    except Exception as e:
        raise to_tool_error(e)
