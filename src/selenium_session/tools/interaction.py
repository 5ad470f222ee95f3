"""Element interaction tools."""

from typing import Annotated, Optional, Union
from pydantic import Field
from fastmcp import FastMCP, Context
from selenium.webdriver.common.keys import Keys

from ._common import get_session, run_in_session, to_tool_error

interaction_router = FastMCP(
    name="InteractionTools",
    instructions="Element interaction tools: click, hover, fill in, select, trigger events",
)

# Modifier names accepted by click
MODIFIER_KEYS = {
    "ALT": Keys.ALT,
    "CONTROL": Keys.CONTROL,
    "CTRL": Keys.CONTROL,
    "META": Keys.META,
    "COMMAND": Keys.COMMAND,
    "SHIFT": Keys.SHIFT,
}


def resolve_modifiers(names: Optional[list[str]]) -> list[str]:
    keys = []
    for name in names or []:
        key = MODIFIER_KEYS.get(name.upper())
        if key is None:
            raise ValueError(f"Unknown modifier key: {name}. Use one of {sorted(MODIFIER_KEYS)}")
        keys.append(key)
    return keys


async def _on_node(ctx: Context, session_id: str, element_id: str, action) -> dict:
    """Run ``action(node)`` under the session lock and report the element."""
    browser_session = get_session(ctx, session_id)
    await run_in_session(browser_session, lambda: action(browser_session.get_node(element_id)))
    return {"success": True, "session_id": session_id, "element_id": element_id}


@interaction_router.tool(
    description="Click an element at the centre of its visible area",
    tags={"action", "click"},
)
async def click(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    element_id: Annotated[str, Field(description="Element ID from find_elements")],
    modifiers: Annotated[
        Optional[list[str]],
        Field(description="Modifier keys held during the click (SHIFT, CONTROL, ALT, META)"),
    ] = None,
    x: Annotated[Optional[int], Field(description="Horizontal offset from the element centre")] = None,
    y: Annotated[Optional[int], Field(description="Vertical offset from the element centre")] = None,
) -> dict:
    """
    Click an element.

    Fails with ELEMENT_OBSCURED (including the selector and position of
    the element actually hit) when something covers the click point.
    """
    try:
        keys = resolve_modifiers(modifiers)
        return await _on_node(ctx, session_id, element_id, lambda node: node.click(keys, x, y))
    except Exception as e:
        raise to_tool_error(e)


@interaction_router.tool(
    description="Double-click an element",
    tags={"action", "click"},
)
async def double_click(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    element_id: Annotated[str, Field(description="Element ID from find_elements")],
) -> dict:
    try:
        return await _on_node(ctx, session_id, element_id, lambda node: node.double_click())
    except Exception as e:
        raise to_tool_error(e)


@interaction_router.tool(
    description="Move the mouse over an element",
    tags={"action", "mouse"},
)
async def hover(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    element_id: Annotated[str, Field(description="Element ID from find_elements")],
) -> dict:
    try:
        return await _on_node(ctx, session_id, element_id, lambda node: node.hover())
    except Exception as e:
        raise to_tool_error(e)


@interaction_router.tool(
    description="Set the value of an input, textarea, checkbox, radio button, select or file field",
    tags={"action", "input"},
)
async def set_value(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    element_id: Annotated[str, Field(description="Element ID from find_elements")],
    value: Annotated[
        Union[str, int, float, bool, list[str], None],
        Field(description="Text, number, checked state, option text or file path(s)"),
    ],
) -> dict:
    """
    Set a form element's value the way a user would.

    Text fields are typed into (respecting maxlength) and fire input and
    change events. Read-only and disabled fields are left untouched.
    """
    try:
        browser_session = get_session(ctx, session_id)
        new_value = await run_in_session(
            browser_session, lambda: browser_session.get_node(element_id).set(value).value
        )
        return {
            "success": True,
            "session_id": session_id,
            "element_id": element_id,
            "value": new_value,
        }
    except Exception as e:
        raise to_tool_error(e)


@interaction_router.tool(
    description="Select (or unselect) an option by its text",
    tags={"action", "select"},
)
async def select_option(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    option: Annotated[str, Field(description="Visible text of the option")],
    select: Annotated[
        Optional[str],
        Field(description="Label, id or name of the select box (any select when omitted)"),
    ] = None,
    unselect: Annotated[
        bool,
        Field(description="Unselect instead (multiple selects only)"),
    ] = False,
) -> dict:
    try:
        browser_session = get_session(ctx, session_id)
        session = browser_session.session

        def run():
            if unselect:
                node = session.unselect(option, from_=select)
            else:
                node = session.select(option, from_=select)
            return browser_session.register_node(node)

        element_id = await run_in_session(browser_session, run)

        return {
            "success": True,
            "session_id": session_id,
            "element_id": element_id,
            "selected": not unselect,
        }
    except Exception as e:
        raise to_tool_error(e)


@interaction_router.tool(
    description="Dispatch a DOM event on an element without mouse hit testing",
    tags={"action", "event"},
)
async def trigger_event(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    element_id: Annotated[str, Field(description="Element ID from find_elements")],
    event: Annotated[str, Field(description="Event type, e.g. click, change, submit, mouseover")],
) -> dict:
    try:
        result = await _on_node(ctx, session_id, element_id, lambda node: node.trigger(event))
        result["event"] = event
        return result
    except Exception as e:
        raise to_tool_error(e)
