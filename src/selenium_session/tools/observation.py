"""DOM observation and element query tools."""

import base64
from typing import Annotated, Optional, Literal
from pydantic import Field
from fastmcp import FastMCP, Context

from ..utils.dom_helpers import get_dom_content
from ._common import get_context, get_session, run_in_session, summarize_node, to_tool_error

observation_router = FastMCP(
    name="ObservationTools",
    instructions="Element queries and DOM inspection",
)

SelectorKind = Literal[
    "css",
    "xpath",
    "link",
    "button",
    "link_or_button",
    "field",
    "fillable_field",
    "checkbox",
    "radio_button",
    "file_field",
    "select",
    "option",
    "id",
    "frame",
]

VisibleFilter = Literal["visible", "hidden", "all"]


@observation_router.tool(
    description="Find elements by selector kind and locator; returns element ids for later calls",
    tags={"observation", "elements"},
)
async def find_elements(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    locator: Annotated[str, Field(description="CSS/XPath expression, or label/id/text for other kinds")],
    kind: Annotated[SelectorKind, Field(description="Selector kind")] = "css",
    visible: Annotated[
        Optional[VisibleFilter],
        Field(description="Visibility filter (default: visible only)"),
    ] = None,
    text: Annotated[
        Optional[str],
        Field(description="Only elements whose text contains this string"),
    ] = None,
    exact: Annotated[
        Optional[bool],
        Field(description="Require exact label/text matches for link, button and field kinds"),
    ] = None,
    minimum: Annotated[
        Optional[int],
        Field(description="Wait until at least this many elements match"),
    ] = None,
    within_element_id: Annotated[
        Optional[str],
        Field(description="Only search inside this previously found element"),
    ] = None,
    max_results: Annotated[
        int,
        Field(description="Maximum number of elements to return"),
    ] = 20,
) -> dict:
    """
    Find elements and register them in the session.

    The returned element ids are accepted by the interaction tools.
    """
    try:
        browser_session = get_session(ctx, session_id)
        session = browser_session.session

        def query():
            scope = browser_session.get_node(within_element_id) if within_element_id else None
            nodes = session.find_all(
                kind,
                locator,
                visible=visible,
                text=text,
                exact=exact,
                minimum=minimum,
                scope=scope,
            )
            results = [
                {"element_id": browser_session.register_node(node), **summarize_node(node)}
                for node in nodes[:max_results]
            ]
            return nodes, results

        nodes, results = await run_in_session(browser_session, query)

        return {
            "success": True,
            "session_id": session_id,
            "elements": results,
            "count": len(results),
            "total_found": len(nodes),
        }

    except Exception as e:
        raise to_tool_error(e)


@observation_router.tool(
    description="Get text, value, state and attributes of a previously found element",
    tags={"observation", "elements"},
)
async def get_element_info(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    element_id: Annotated[str, Field(description="Element ID from find_elements")],
) -> dict:
    try:
        browser_session = get_session(ctx, session_id)
        def describe():
            node = browser_session.get_node(element_id)
            return {
                "tag": node.tag_name,
                "text": node.text,
                "value": node.value,
                "visible": node.visible,
                "checked": node.checked,
                "selected": node.selected,
                "disabled": node.disabled,
                "path": node.path,
                "attributes": node.attributes,
            }

        info = await run_in_session(browser_session, describe)
        return {"success": True, "session_id": session_id, "element_id": element_id, **info}

    except Exception as e:
        raise to_tool_error(e)


@observation_router.tool(
    description="Get the HTML of the current page or frame",
    tags={"observation", "dom"},
)
async def get_html(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    max_chars: Annotated[
        Optional[int],
        Field(description="Maximum characters to return (default: from config)"),
    ] = None,
    strip_scripts_and_styles: Annotated[
        bool,
        Field(description="Remove <script> and <style> tags from output"),
    ] = True,
) -> dict:
    """
    Get the HTML source of the current browsing context.

    Large pages are truncated to max_chars.
    """
    try:
        app_ctx = get_context(ctx)
        browser_session = get_session(ctx, session_id)
        limit = max_chars or app_ctx.settings.dom_max_chars

        async with browser_session._lock:
            dom_content = await get_dom_content(
                browser_session.session,
                max_chars=limit,
                strip_scripts_and_styles=strip_scripts_and_styles,
            )

        return {"success": True, "session_id": session_id, **dom_content}

    except Exception as e:
        raise to_tool_error(e)


@observation_router.tool(
    description="Check whether the page has a matching element, waiting for it to appear",
    tags={"observation", "elements"},
)
async def has_selector(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    locator: Annotated[str, Field(description="Locator for the chosen kind")],
    kind: Annotated[SelectorKind, Field(description="Selector kind")] = "css",
    count: Annotated[
        Optional[int],
        Field(description="Exact number of matches expected"),
    ] = None,
    text: Annotated[
        Optional[str],
        Field(description="Only elements whose text contains this string"),
    ] = None,
    visible: Annotated[
        Optional[VisibleFilter],
        Field(description="Visibility filter (default: visible only)"),
    ] = None,
    wait: Annotated[
        Optional[float],
        Field(description="Seconds to wait (default: session wait time)"),
    ] = None,
) -> dict:
    try:
        browser_session = get_session(ctx, session_id)
        session = browser_session.session
        found = await run_in_session(
            browser_session,
            lambda: session.has_selector(
                kind, locator, count=count, text=text, visible=visible, wait=wait
            ),
        )
        return {"success": True, "session_id": session_id, "found": found}

    except Exception as e:
        raise to_tool_error(e)


@observation_router.tool(
    description="Take a screenshot of the current viewport",
    tags={"observation", "screenshot"},
)
async def get_screenshot(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
) -> dict:
    """
    Take a screenshot of the current viewport.

    Returns:
        Base64-encoded PNG image data
    """
    try:
        browser_session = get_session(ctx, session_id)
        png = await run_in_session(browser_session, browser_session.session.screenshot)

        return {
            "success": True,
            "session_id": session_id,
            "image_base64": base64.b64encode(png).decode("utf-8"),
            "format": "png",
        }

    except Exception as e:
        raise to_tool_error(e)
