"""Browser session core: Session, Node and their errors."""

from .exceptions import (
    Ambiguous,
    BrowserError,
    ElementNotFound,
    FrameNotFound,
    InvalidSelector,
    JavaScriptError,
    ModalNotFound,
    MouseEventFailed,
    NoSuchWindow,
    ObsoleteNode,
    StatusCodeUnavailable,
    WindowError,
)
from .node import Node
from .session import Modal, Session
from .window import Window

__all__ = [
    "Ambiguous",
    "BrowserError",
    "ElementNotFound",
    "FrameNotFound",
    "InvalidSelector",
    "JavaScriptError",
    "Modal",
    "ModalNotFound",
    "MouseEventFailed",
    "Node",
    "NoSuchWindow",
    "ObsoleteNode",
    "Session",
    "StatusCodeUnavailable",
    "Window",
    "WindowError",
]
