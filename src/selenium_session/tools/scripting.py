"""JavaScript execution tools."""

from typing import Annotated, Any, Optional
from pydantic import Field
from fastmcp import FastMCP, Context

from ..core.exceptions import ElementRegistryError
from ..core.node import Node
from ._common import get_session, run_in_session, to_tool_error

scripting_router = FastMCP(
    name="ScriptingTools",
    instructions="Execute JavaScript in the browser context",
)

# Maximum script length for safety
MAX_SCRIPT_LENGTH = 10000


def _check_length(script: str) -> None:
    if len(script) > MAX_SCRIPT_LENGTH:
        raise ValueError(
            f"Script too long ({len(script)} chars). "
            f"Maximum allowed: {MAX_SCRIPT_LENGTH}"
        )


def resolve_args(browser_session, args: Optional[list]) -> list:
    """Replace registered ``elem_N`` ids with their nodes; other values pass through."""
    resolved = []
    for arg in args or []:
        if isinstance(arg, str) and arg.startswith("elem_"):
            try:
                resolved.append(browser_session.get_node(arg))
                continue
            except ElementRegistryError:
                pass
        resolved.append(arg)
    return resolved


def register_result(browser_session, value: Any) -> Any:
    """Register returned nodes and replace them with ``{"element_id": ...}``."""
    if isinstance(value, Node):
        return {"element_id": browser_session.register_node(value)}
    if isinstance(value, list):
        return [register_result(browser_session, v) for v in value]
    if isinstance(value, dict):
        return {k: register_result(browser_session, v) for k, v in value.items()}
    return value


@scripting_router.tool(
    description="Run JavaScript for its side effects (returns nothing)",
    tags={"script", "javascript"},
)
async def execute_script(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    script: Annotated[str, Field(description="JavaScript statements to run")],
    args: Annotated[
        Optional[list],
        Field(description="Arguments (arguments[0], ...); element ids are passed as elements"),
    ] = None,
) -> dict:
    try:
        _check_length(script)
        browser_session = get_session(ctx, session_id)
        await run_in_session(
            browser_session,
            lambda: browser_session.session.execute_script(
                script, *resolve_args(browser_session, args)
            ),
        )

        return {"success": True, "session_id": session_id}

    except Exception as e:
        raise to_tool_error(e)


@scripting_router.tool(
    description="Evaluate a JavaScript expression and return its value",
    tags={"script", "javascript"},
)
async def evaluate_script(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    expression: Annotated[str, Field(description="JavaScript expression, e.g. document.title")],
    args: Annotated[
        Optional[list],
        Field(description="Arguments (arguments[0], ...); element ids are passed as elements"),
    ] = None,
) -> dict:
    """
    Evaluate an expression in the current frame.

    Returned elements are registered and reported as element ids. Cyclic
    structures come back as ``"(cyclic structure)"``.
    """
    try:
        _check_length(expression)
        browser_session = get_session(ctx, session_id)
        def evaluate():
            value = browser_session.session.evaluate_script(
                expression, *resolve_args(browser_session, args)
            )
            return register_result(browser_session, value)

        result = await run_in_session(browser_session, evaluate)

        return {"success": True, "session_id": session_id, "result": result}

    except Exception as e:
        raise to_tool_error(e)
