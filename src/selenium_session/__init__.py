"""Capybara-style browser sessions on Selenium WebDriver, with an MCP server."""

__version__ = "0.1.0"

from .core import (
    Ambiguous,
    BrowserError,
    ElementNotFound,
    FrameNotFound,
    InvalidSelector,
    JavaScriptError,
    ModalNotFound,
    MouseEventFailed,
    Node,
    ObsoleteNode,
    Session,
    Window,
)

__all__ = [
    "__version__",
    "Ambiguous",
    "BrowserError",
    "ElementNotFound",
    "FrameNotFound",
    "InvalidSelector",
    "JavaScriptError",
    "ModalNotFound",
    "MouseEventFailed",
    "Node",
    "ObsoleteNode",
    "Session",
    "Window",
]
