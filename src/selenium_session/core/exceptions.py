"""Domain-specific exceptions for selenium-session."""

from typing import Optional, Sequence


class BrowserError(Exception):
    """Base exception for all selenium-session errors."""

    pass


class ObsoleteNode(BrowserError):
    """Raised when a node handle refers to an element no longer in the live DOM."""

    def __init__(self, node=None, message: Optional[str] = None):
        self.node = node
        super().__init__(
            message
            or "The element you are trying to interact with is either not part of "
            "the DOM, or is not currently visible on the page (perhaps "
            "display: none is set). It is possible the element has been replaced "
            "by another element and you meant to interact with the new element. "
            "If so you need to do a new find in order to get a reference to the "
            "new element."
        )


class ElementNotFound(BrowserError):
    """Raised when a finder matches nothing within the wait budget."""

    def __init__(self, query: str):
        self.query = query
        super().__init__(f"Unable to find {query}")


class Ambiguous(ElementNotFound):
    """Raised when match="one" finds more than one element."""

    def __init__(self, query: str, count: int):
        self.count = count
        super().__init__(query)
        self.args = (f"Ambiguous match, found {count} elements matching {query}",)


class InvalidSelector(BrowserError):
    """Raised when the browser rejects a CSS or XPath expression."""

    def __init__(self, selector: str, method: str = "css"):
        self.selector = selector
        self.method = method
        super().__init__(
            f"Browser raised error trying to evaluate {method} selector {selector!r}"
        )


class MouseEventFailed(BrowserError):
    """Raised when a mouse event cannot reach the intended element.

    ``selector`` is the CSS path of the element found at ``position`` instead
    of the target, or None when the target had no area inside the viewport.
    """

    def __init__(
        self,
        name: str,
        selector: Optional[str],
        position: Optional[Sequence[float]],
    ):
        self.name = name
        self.selector = selector
        self.position = list(position) if position is not None else None
        if selector is None or self.position is None:
            message = (
                f"Firing a {name} failed: the element has no visible area inside "
                "the viewport. It may be positioned off screen."
            )
        else:
            coords = [float(c) for c in self.position]
            message = (
                f"Firing a {name} at co-ordinates {coords} failed. Another element "
                f"with CSS selector {selector!r} was detected at this position. "
                "It may be overlapping the element you are trying to interact with. "
                f"If you don't care about overlapping elements, try using "
                f"node.trigger({name!r})."
            )
        super().__init__(message)


class FrameNotFound(BrowserError):
    """Raised when a frame cannot be located within the frame wait budget."""

    def __init__(self, locator):
        self.locator = locator
        super().__init__(f"Unable to find frame {locator!r}")


class NoSuchWindow(BrowserError):
    """Raised when switching to a window that has been closed."""

    def __init__(self, handle: str):
        self.handle = handle
        super().__init__(f"No such window: {handle}")


class WindowError(BrowserError):
    """Raised when window_opened_by does not observe exactly one new window."""

    pass


class ModalNotFound(BrowserError):
    """Raised when an expected dialog is not opened or its text does not match."""

    def __init__(self, expected=None, actual: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        if expected is None:
            message = "Unable to find modal dialog"
        else:
            pattern = getattr(expected, "pattern", expected)
            message = f"Unable to find modal dialog with {pattern}"
        if actual is not None:
            message += f" - found {actual!r} instead"
        super().__init__(message)


class JavaScriptError(BrowserError):
    """Raised when page JavaScript throws."""

    def __init__(self, message: str):
        super().__init__(f"JavaScript error: {message}")


class StatusCodeUnavailable(BrowserError):
    """Raised when the browser does not expose network responses."""

    def __init__(self, reason: str = "performance logging is not available"):
        super().__init__(f"Status code unavailable: {reason}")


class DriverConnectionError(BrowserError):
    """Raised when unable to start a local browser or reach a Selenium Grid."""

    def __init__(self, target: str, message: str):
        self.target = target
        super().__init__(f"Failed to start browser via {target}: {message}")


class SessionNotFoundError(BrowserError):
    """Raised when referencing a non-existent or expired session."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class SessionLimitError(BrowserError):
    """Raised when max session limit is reached."""

    def __init__(self, max_sessions: int):
        self.max_sessions = max_sessions
        super().__init__(f"Maximum sessions ({max_sessions}) reached")


class ElementRegistryError(BrowserError):
    """Raised when an element ID is not in the session's element registry."""

    def __init__(self, element_id: str):
        self.element_id = element_id
        super().__init__(f"Element not found in registry: {element_id}")
