"""Helpers shared by the tool routers."""

from typing import Callable, TypeVar

import anyio
from fastmcp import Context
from fastmcp.exceptions import ToolError

from ..core.node import Node
from ..utils.error_mapper import create_error_response, error_details, map_error

T = TypeVar("T")


def get_context(ctx: Context):
    """Helper to retrieve app context from lifespan."""
    return ctx.request_context.lifespan_context


def get_session(ctx: Context, session_id: str):
    """Get the BrowserSession from the manager."""
    return get_context(ctx).session_manager.get_session(session_id)


async def run_blocking(fn: Callable[[], T]) -> T:
    """Run blocking WebDriver work in a worker thread."""
    return await anyio.to_thread.run_sync(fn)


async def run_in_session(browser_session, fn: Callable[[], T]) -> T:
    """
    Run blocking work against one session's browser in a worker thread.

    Calls on the same session are serialized by its lock, so node lookups
    (which check the DOM) belong inside ``fn`` too.
    """
    async with browser_session._lock:
        return await run_blocking(fn)


def to_tool_error(exc: Exception) -> ToolError:
    """Convert any exception into a ToolError carrying the structured response."""
    error_code, message = map_error(exc)
    error_response = create_error_response(error_code, message, error_details(exc))
    return ToolError(str(error_response.to_dict()))


def summarize_node(node: Node, max_text: int = 200) -> dict:
    """Compact description of a node for tool responses (blocking)."""
    text = node.text
    return {
        "tag": node.tag_name,
        "text": text[:max_text],
        "visible": node.visible,
        "id": node.attribute("id"),
        "name": node.attribute("name"),
    }
