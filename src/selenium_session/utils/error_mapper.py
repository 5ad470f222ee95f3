"""Translate Selenium exceptions into session errors and MCP-friendly responses."""

from contextlib import contextmanager
from enum import Enum
from dataclasses import dataclass
from typing import Iterator, Optional

from selenium.common.exceptions import (
    NoSuchElementException,
    StaleElementReferenceException,
    ElementNotInteractableException,
    InvalidSelectorException,
    TimeoutException,
    NoSuchWindowException,
    NoSuchFrameException,
    NoAlertPresentException,
    UnexpectedAlertPresentException,
    JavascriptException,
    WebDriverException,
    InvalidArgumentException,
    SessionNotCreatedException,
    MoveTargetOutOfBoundsException,
    InvalidElementStateException,
)

from ..core.exceptions import (
    BrowserError,
    ObsoleteNode,
    ElementNotFound,
    Ambiguous,
    InvalidSelector,
    MouseEventFailed,
    FrameNotFound,
    NoSuchWindow,
    WindowError,
    ModalNotFound,
    JavaScriptError,
    StatusCodeUnavailable,
    DriverConnectionError,
    SessionNotFoundError,
    SessionLimitError,
    ElementRegistryError,
)

# Fragments chromedriver uses when an element id outlived its document
_STALE_MARKERS = ("stale element", "node is detached", "no node with given id")


def translate_selenium_error(
    exc: Exception,
    node=None,
    selector: Optional[str] = None,
    method: str = "css",
) -> Exception:
    """
    Convert a Selenium exception into the matching session error.

    Args:
        exc: Exception raised by Selenium
        node: Node the operation was acting on, if any
        selector: Selector or frame/window locator being evaluated, if any
        method: Selector language of ``selector`` (css or xpath)

    Returns:
        The translated exception, or ``exc`` itself when no mapping applies
    """
    if isinstance(exc, BrowserError):
        return exc
    if isinstance(exc, StaleElementReferenceException):
        return ObsoleteNode(node)
    if isinstance(exc, InvalidSelectorException):
        return InvalidSelector(selector or exc.msg or "", method)
    if isinstance(exc, NoSuchFrameException):
        return FrameNotFound(selector)
    if isinstance(exc, NoSuchWindowException):
        return NoSuchWindow(selector or "")
    if isinstance(exc, JavascriptException):
        message = exc.msg or str(exc)
        if node is not None and any(m in message.lower() for m in _STALE_MARKERS):
            return ObsoleteNode(node)
        return JavaScriptError(message)
    if isinstance(exc, NoSuchElementException) and node is not None:
        # Element ids from a previous document are reported as unknown
        return ObsoleteNode(node)
    return exc


@contextmanager
def selenium_errors(
    node=None,
    selector: Optional[str] = None,
    method: str = "css",
) -> Iterator[None]:
    """Re-raise Selenium exceptions raised in the block as session errors."""
    try:
        yield
    except WebDriverException as e:
        translated = translate_selenium_error(e, node=node, selector=selector, method=method)
        if translated is e:
            raise
        raise translated from e


class ErrorCode(str, Enum):
    """MCP-compatible error codes for browser operations."""

    # Session errors
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    SESSION_LIMIT_REACHED = "SESSION_LIMIT_REACHED"
    SESSION_CREATION_FAILED = "SESSION_CREATION_FAILED"
    SESSION_TERMINATED = "SESSION_TERMINATED"

    # Element errors
    ELEMENT_NOT_FOUND = "ELEMENT_NOT_FOUND"
    ELEMENT_AMBIGUOUS = "ELEMENT_AMBIGUOUS"
    ELEMENT_STALE = "ELEMENT_STALE"
    ELEMENT_NOT_INTERACTABLE = "ELEMENT_NOT_INTERACTABLE"
    ELEMENT_OBSCURED = "ELEMENT_OBSCURED"

    # Selector errors
    INVALID_SELECTOR = "INVALID_SELECTOR"

    # Timeout errors
    TIMEOUT = "TIMEOUT"

    # Window/Frame errors
    WINDOW_NOT_FOUND = "WINDOW_NOT_FOUND"
    WINDOW_ERROR = "WINDOW_ERROR"
    FRAME_NOT_FOUND = "FRAME_NOT_FOUND"

    # Modal errors
    MODAL_NOT_FOUND = "MODAL_NOT_FOUND"
    UNEXPECTED_MODAL = "UNEXPECTED_MODAL"

    # Network
    STATUS_CODE_UNAVAILABLE = "STATUS_CODE_UNAVAILABLE"

    # JavaScript errors
    JAVASCRIPT_ERROR = "JAVASCRIPT_ERROR"

    # Connection errors
    DRIVER_UNAVAILABLE = "DRIVER_UNAVAILABLE"
    CONNECTION_REFUSED = "CONNECTION_REFUSED"

    # Generic errors
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


# Map exceptions to MCP error codes; subclasses must precede their bases
EXCEPTION_MAP: dict[type[Exception], ErrorCode] = {
    # Session errors
    SessionNotFoundError: ErrorCode.SESSION_NOT_FOUND,
    SessionLimitError: ErrorCode.SESSION_LIMIT_REACHED,
    ElementRegistryError: ErrorCode.ELEMENT_NOT_FOUND,
    Ambiguous: ErrorCode.ELEMENT_AMBIGUOUS,
    ElementNotFound: ErrorCode.ELEMENT_NOT_FOUND,
    ObsoleteNode: ErrorCode.ELEMENT_STALE,
    MouseEventFailed: ErrorCode.ELEMENT_OBSCURED,
    InvalidSelector: ErrorCode.INVALID_SELECTOR,
    FrameNotFound: ErrorCode.FRAME_NOT_FOUND,
    NoSuchWindow: ErrorCode.WINDOW_NOT_FOUND,
    WindowError: ErrorCode.WINDOW_ERROR,
    ModalNotFound: ErrorCode.MODAL_NOT_FOUND,
    JavaScriptError: ErrorCode.JAVASCRIPT_ERROR,
    StatusCodeUnavailable: ErrorCode.STATUS_CODE_UNAVAILABLE,
    DriverConnectionError: ErrorCode.DRIVER_UNAVAILABLE,
    # Selenium exceptions that escape translation
    NoSuchElementException: ErrorCode.ELEMENT_NOT_FOUND,
    StaleElementReferenceException: ErrorCode.ELEMENT_STALE,
    ElementNotInteractableException: ErrorCode.ELEMENT_NOT_INTERACTABLE,
    InvalidElementStateException: ErrorCode.ELEMENT_NOT_INTERACTABLE,
    InvalidSelectorException: ErrorCode.INVALID_SELECTOR,
    TimeoutException: ErrorCode.TIMEOUT,
    NoSuchWindowException: ErrorCode.WINDOW_NOT_FOUND,
    NoSuchFrameException: ErrorCode.FRAME_NOT_FOUND,
    NoAlertPresentException: ErrorCode.MODAL_NOT_FOUND,
    UnexpectedAlertPresentException: ErrorCode.UNEXPECTED_MODAL,
    JavascriptException: ErrorCode.JAVASCRIPT_ERROR,
    InvalidArgumentException: ErrorCode.INVALID_ARGUMENT,
    MoveTargetOutOfBoundsException: ErrorCode.ELEMENT_OBSCURED,
    SessionNotCreatedException: ErrorCode.SESSION_CREATION_FAILED,
    ValueError: ErrorCode.INVALID_ARGUMENT,
}

# Suggestions for each error code to help the caller recover
SUGGESTIONS: dict[ErrorCode, str] = {
    ErrorCode.SESSION_NOT_FOUND: (
        "The session ID is invalid or has expired. "
        "Create a new session with create_session."
    ),
    ErrorCode.SESSION_LIMIT_REACHED: (
        "Maximum number of concurrent sessions reached. "
        "Close unused sessions with close_session before creating new ones."
    ),
    ErrorCode.SESSION_CREATION_FAILED: (
        "Failed to create browser session. "
        "Check that the browser or Selenium Grid is available."
    ),
    ErrorCode.ELEMENT_NOT_FOUND: (
        "Element not found. Verify the selector is correct and the element is visible. "
        "Pass visible=false to match hidden elements."
    ),
    ErrorCode.ELEMENT_AMBIGUOUS: (
        "More than one element matched. Narrow the selector or use match='first'."
    ),
    ErrorCode.ELEMENT_STALE: (
        "Element reference is outdated (page may have changed). "
        "Find the element again before interacting with it."
    ),
    ErrorCode.ELEMENT_NOT_INTERACTABLE: (
        "Element exists but cannot be interacted with. It may be disabled or read-only."
    ),
    ErrorCode.ELEMENT_OBSCURED: (
        "Another element covers the click point, or the element is outside the viewport. "
        "Scroll, resize the viewport, or use trigger_event to dispatch the event directly."
    ),
    ErrorCode.INVALID_SELECTOR: (
        "The selector syntax is invalid. "
        "Check for typos in CSS selectors or XPath expressions."
    ),
    ErrorCode.TIMEOUT: (
        "Operation timed out. Increase the wait time or check if the condition "
        "can ever be met."
    ),
    ErrorCode.WINDOW_NOT_FOUND: (
        "The specified window does not exist. Use list_windows to list open windows."
    ),
    ErrorCode.FRAME_NOT_FOUND: (
        "The specified frame does not exist. "
        "Verify the frame name, id or index."
    ),
    ErrorCode.MODAL_NOT_FOUND: (
        "No matching alert, confirm or prompt dialog is open. "
        "Trigger the dialog first, and check the expected text."
    ),
    ErrorCode.UNEXPECTED_MODAL: (
        "A dialog is blocking the page. Answer it with respond_to_modal."
    ),
    ErrorCode.STATUS_CODE_UNAVAILABLE: (
        "Status codes require Chrome with performance logging enabled."
    ),
    ErrorCode.JAVASCRIPT_ERROR: (
        "JavaScript execution failed. Check the script syntax and ensure all "
        "referenced objects exist in the page context."
    ),
    ErrorCode.DRIVER_UNAVAILABLE: (
        "Cannot start the browser. Verify the browser is installed or that the "
        "Grid URL is correct and the Grid service is running."
    ),
    ErrorCode.INVALID_ARGUMENT: (
        "Invalid argument provided. Check parameter types and values."
    ),
}


@dataclass
class ToolErrorResponse:
    """Structured error response for MCP tools."""

    error_code: str
    message: str
    suggestion: Optional[str] = None
    details: Optional[dict] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for tool response."""
        result = {
            "success": False,
            "error": {
                "code": self.error_code,
                "message": self.message,
            },
        }
        if self.suggestion:
            result["error"]["suggestion"] = self.suggestion
        if self.details:
            result["error"]["details"] = self.details
        return result


def map_error(exc: Exception) -> tuple[ErrorCode, str]:
    """
    Map an exception to an MCP error code and message.

    Args:
        exc: The exception to map

    Returns:
        Tuple of (ErrorCode, error message)
    """
    exc_type = type(exc)

    # Check exact type first
    if exc_type in EXCEPTION_MAP:
        return EXCEPTION_MAP[exc_type], str(exc)

    # Check parent types
    for exc_class, code in EXCEPTION_MAP.items():
        if isinstance(exc, exc_class):
            return code, str(exc)

    # Check for connection errors in WebDriverException
    if isinstance(exc, WebDriverException):
        msg_lower = str(exc).lower()
        if "connection refused" in msg_lower:
            return ErrorCode.CONNECTION_REFUSED, str(exc)
        if "session" in msg_lower and ("not found" in msg_lower or "deleted" in msg_lower):
            return ErrorCode.SESSION_TERMINATED, str(exc)

    # Fallback
    return ErrorCode.UNKNOWN_ERROR, str(exc)


def create_error_response(
    code: ErrorCode,
    message: str,
    details: Optional[dict] = None,
) -> ToolErrorResponse:
    """
    Create a structured error response with suggestion.

    Args:
        code: Error code
        message: Error message
        details: Optional additional details

    Returns:
        ToolErrorResponse with suggestion from SUGGESTIONS
    """
    return ToolErrorResponse(
        error_code=code.value,
        message=message,
        suggestion=SUGGESTIONS.get(code),
        details=details,
    )


def error_details(exc: Exception) -> Optional[dict]:
    """Extra structured fields for errors that carry them."""
    if isinstance(exc, MouseEventFailed):
        return {"selector": exc.selector, "position": exc.position}
    if isinstance(exc, ModalNotFound) and exc.actual is not None:
        return {"actual": exc.actual}
    return None
