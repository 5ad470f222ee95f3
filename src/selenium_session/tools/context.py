"""Frame, window, dialog and viewport tools."""

from typing import Annotated, Optional, Union
from pydantic import Field
from fastmcp import FastMCP, Context

from ._common import get_session, run_in_session, to_tool_error

context_router = FastMCP(
    name="ContextTools",
    instructions="Switch frames and windows, answer dialogs, resize the viewport",
)


@context_router.tool(
    description=(
        "Enter a frame by index, name/id or element id; "
        "use 'parent' or 'top' to leave frames"
    ),
    tags={"context", "frame"},
)
async def switch_frame(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    frame: Annotated[
        Union[int, str],
        Field(description="Frame index, name or id, element id from find_elements, 'parent' or 'top'"),
    ],
) -> dict:
    """Switch the browsing context; returns the URL and title of the frame entered."""
    try:
        browser_session = get_session(ctx, session_id)
        session = browser_session.session

        def run():
            target = frame
            if isinstance(frame, str) and frame.startswith("elem_"):
                target = browser_session.get_node(frame)
            session.switch_to_frame(target)
            return {"frame_url": session.frame_url, "frame_title": session.frame_title}

        state = await run_in_session(browser_session, run)

        return {"success": True, "session_id": session_id, **state}

    except Exception as e:
        raise to_tool_error(e)


@context_router.tool(
    description="List open windows and tabs",
    tags={"context", "window"},
)
async def list_windows(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
) -> dict:
    try:
        browser_session = get_session(ctx, session_id)
        session = browser_session.session

        def run():
            current = session.current_window_handle
            return [
                {"handle": window.handle, "current": window.handle == current}
                for window in session.windows
            ]

        windows = await run_in_session(browser_session, run)
        return {"success": True, "session_id": session_id, "windows": windows, "count": len(windows)}

    except Exception as e:
        raise to_tool_error(e)


@context_router.tool(
    description="Switch to a window by handle, or open a new blank tab/window",
    tags={"context", "window"},
)
async def switch_window(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    handle: Annotated[
        Optional[str],
        Field(description="Window handle from list_windows; omit with open_new to open one"),
    ] = None,
    open_new: Annotated[
        Optional[str],
        Field(description="Open a new 'tab' or 'window' and switch to it"),
    ] = None,
    close_current: Annotated[
        bool,
        Field(description="Close the current window before switching"),
    ] = False,
) -> dict:
    """
    Make another window current.

    Waits for the target window's document to finish loading.
    """
    try:
        if handle is None and open_new is None:
            raise ValueError("Provide a window handle or open_new")

        browser_session = get_session(ctx, session_id)
        session = browser_session.session

        def run():
            target = session.open_new_window(open_new) if open_new else handle
            if close_current:
                session.current_window.close()
            window = session.switch_to_window(target)
            return {"handle": window.handle, "url": session.current_url, "title": session.title}

        state = await run_in_session(browser_session, run)

        return {"success": True, "session_id": session_id, **state}

    except Exception as e:
        raise to_tool_error(e)


@context_router.tool(
    description="Accept or dismiss the open alert, confirm or prompt dialog",
    tags={"context", "modal"},
)
async def respond_to_modal(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    accept: Annotated[bool, Field(description="Accept (OK) or dismiss (Cancel)")] = True,
    expected_text: Annotated[
        Optional[str],
        Field(description="Fail unless the dialog message contains this text"),
    ] = None,
    prompt_response: Annotated[
        Optional[str],
        Field(description="Text entered into a prompt before accepting"),
    ] = None,
    wait: Annotated[
        Optional[float],
        Field(description="Seconds to wait for the dialog to open"),
    ] = None,
) -> dict:
    """Answer a dialog and return its message."""
    try:
        browser_session = get_session(ctx, session_id)
        session = browser_session.session

        message = await run_in_session(
            browser_session,
            lambda: session.respond_to_modal(
                accept=accept, text=expected_text, response=prompt_response, wait=wait
            ),
        )

        return {"success": True, "session_id": session_id, "message": message, "accepted": accept}

    except Exception as e:
        raise to_tool_error(e)


@context_router.tool(
    description="Resize the browser viewport",
    tags={"context", "viewport"},
)
async def resize_viewport(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    width: Annotated[int, Field(description="Viewport width in pixels", gt=0)],
    height: Annotated[int, Field(description="Viewport height in pixels", gt=0)],
) -> dict:
    try:
        browser_session = get_session(ctx, session_id)
        await run_in_session(browser_session, lambda: browser_session.session.resize(width, height))
        return {"success": True, "session_id": session_id, "width": width, "height": height}

    except Exception as e:
        raise to_tool_error(e)
