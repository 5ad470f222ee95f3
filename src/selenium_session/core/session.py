"""Session: synchronous browser-driving API over one WebDriver."""

from __future__ import annotations

import logging
import os
import re
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Tuple, Type, Union
from urllib.parse import urljoin, urlsplit

from selenium.common.exceptions import (
    NoAlertPresentException,
    NoSuchWindowException,
    TimeoutException,
    WebDriverException,
)
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from ..config import settings
from ..utils import scripts
from ..utils.dom_helpers import text_matches
from ..utils.error_mapper import selenium_errors
from .driver_factory import DriverFactory
from .exceptions import (
    ElementNotFound,
    FrameNotFound,
    ModalNotFound,
    MouseEventFailed,
    NoSuchWindow,
    ObsoleteNode,
    StatusCodeUnavailable,
    WindowError,
)
from .network import DocumentResponse, NetworkTraffic
from .node import Node
from .query import SelectorQuery
from .window import Window

logger = logging.getLogger(__name__)

# Errors that finders retry until the wait budget runs out
FINDER_ERRORS: Tuple[Type[Exception], ...] = (ElementNotFound, ObsoleteNode)

# Errors that actions (find + interact) retry
ACTION_ERRORS: Tuple[Type[Exception], ...] = (ElementNotFound, ObsoleteNode, MouseEventFailed)

Wait = Union[float, int, bool, None]
FrameLocator = Union[int, str, Node, WebElement]


@dataclass
class Modal:
    """A dialog expectation; ``message`` is filled once the dialog is answered."""

    kind: str
    accept: bool
    expected: Any = None
    response: Optional[str] = None
    message: Optional[str] = None


class Session:
    """
    Drives one browser through a Capybara-style API.

    Finders and actions synchronize: they retry on ElementNotFound,
    ObsoleteNode and (for actions) MouseEventFailed until
    ``default_wait_time`` expires, then re-raise the last error.

    Args:
        driver: Existing WebDriver. When omitted one is created with
            DriverFactory from ``settings`` and quit with the session.
        app_host: Base URL for relative ``visit`` paths
        default_wait_time: Synchronization budget for finders and matchers
        frame_wait_time: Budget for locating frames and waiting for them to load
        window_wait_time: Budget for new windows and dialogs
    """

    def __init__(
        self,
        driver: Optional[WebDriver] = None,
        *,
        app_host: Optional[str] = None,
        browser: Optional[str] = None,
        headless: Optional[bool] = None,
        window_size: Optional[Tuple[int, int]] = None,
        default_wait_time: Optional[float] = None,
        frame_wait_time: Optional[float] = None,
        window_wait_time: Optional[float] = None,
        ignore_hidden_elements: Optional[bool] = None,
        poll_interval: float = 0.05,
        driver_factory: Optional[DriverFactory] = None,
    ):
        self.app_host = app_host if app_host is not None else settings.app_host
        self.browser = browser or settings.default_browser
        self.window_size = window_size or (settings.window_width, settings.window_height)
        self.default_wait_time = (
            default_wait_time if default_wait_time is not None else settings.default_wait_time
        )
        self.frame_wait_time = (
            frame_wait_time if frame_wait_time is not None else settings.frame_wait_time
        )
        self.window_wait_time = (
            window_wait_time if window_wait_time is not None else settings.window_wait_time
        )
        self.ignore_hidden_elements = (
            ignore_hidden_elements
            if ignore_hidden_elements is not None
            else settings.ignore_hidden_elements
        )
        self.poll_interval = poll_interval

        self._owns_driver = driver is None
        if driver is None:
            factory = driver_factory or DriverFactory(
                grid_url=settings.selenium_grid_url,
                page_load_timeout=settings.page_load_timeout_seconds,
                script_timeout=settings.script_timeout_seconds,
                implicit_wait=settings.implicit_wait_seconds,
            )
            driver = factory.create(
                browser=self.browser,
                headless=settings.headless if headless is None else headless,
                window_width=self.window_size[0],
                window_height=self.window_size[1],
            )
        self.driver = driver

        self.network = NetworkTraffic()
        self._main_window = driver.current_window_handle
        self._frames: list[WebElement] = []
        self._scopes: list[Node] = []
        self._synchronizing = False

        if self._owns_driver:
            self.resize(*self.window_size)

    def __repr__(self) -> str:
        return f"<Session {self.browser} app_host={self.app_host!r}>"

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc_info) -> None:
        self.quit()

    # -- lifecycle ----------------------------------------------------------

    def quit(self) -> None:
        """Quit the browser if this session created it."""
        if not self._owns_driver:
            return
        try:
            self.driver.quit()
        except WebDriverException as e:
            logger.warning(f"Error quitting driver: {e}")
        logger.info("Session closed")

    def reset(self) -> None:
        """
        Return to a blank state: answer open dialogs, close extra windows,
        leave frames, delete cookies and load about:blank.
        """
        self._dismiss_open_modal()

        handles = list(self.driver.window_handles)
        if self._main_window not in handles:
            logger.info(f"Main window {self._main_window} is gone, adopting {handles[0]}")
            self._main_window = handles[0]
        for handle in handles:
            if handle != self._main_window:
                self.driver.switch_to.window(handle)
                self._dismiss_open_modal()
                self.driver.close()
        self.driver.switch_to.window(self._main_window)

        self._frames.clear()
        self._scopes.clear()
        self.driver.delete_all_cookies()
        self.driver.get("about:blank")
        self.network.clear()
        logger.debug("Session reset")

    def _dismiss_open_modal(self) -> None:
        try:
            self.driver.switch_to.alert.dismiss()
            logger.info("Dismissed a dialog left open")
        except (NoAlertPresentException, NoSuchWindowException):
            pass

    # -- synchronization ----------------------------------------------------

    def _wait_budget(self, wait: Wait, default: Optional[float] = None) -> float:
        if default is None:
            default = self.default_wait_time
        if wait is None or wait is True:
            return default
        if wait is False:
            return 0.0
        return float(wait)

    def synchronize(
        self,
        block: Callable[[], Any],
        wait: Wait = None,
        errors: Tuple[Type[Exception], ...] = ACTION_ERRORS,
    ):
        """
        Run ``block`` until it stops raising one of ``errors`` or time runs out.

        Nested calls run their block once; only the outermost call retries.
        """
        if self._synchronizing:
            return block()

        deadline = time.monotonic() + self._wait_budget(wait)
        self._synchronizing = True
        try:
            while True:
                try:
                    return block()
                except errors as e:
                    if time.monotonic() >= deadline:
                        raise
                    logger.debug(f"Retrying after {type(e).__name__}: {e}")
                    time.sleep(self.poll_interval)
        finally:
            self._synchronizing = False

    # -- navigation ---------------------------------------------------------

    def _absolute_url(self, url: str) -> str:
        if urlsplit(url).scheme:
            return url
        if not self.app_host:
            raise ValueError(f"Cannot visit relative URL {url!r} without an app_host")
        return urljoin(self.app_host, url)

    def visit(self, url: Optional[str] = None) -> None:
        """Navigate the top-level window; relative URLs resolve against app_host."""
        target = self._absolute_url(url if url is not None else "/")
        if self._frames:
            self.driver.switch_to.default_content()
        self._frames.clear()
        self._scopes.clear()
        with selenium_errors():
            self.driver.get(target)
        logger.info(f"Visited {target}")

    def go_back(self) -> None:
        self._frames.clear()
        with selenium_errors():
            self.driver.back()

    def go_forward(self) -> None:
        self._frames.clear()
        with selenium_errors():
            self.driver.forward()

    def refresh(self) -> None:
        self._frames.clear()
        with selenium_errors():
            self.driver.refresh()

    @property
    def current_url(self) -> str:
        """URL of the top-level document, even inside a frame."""
        with selenium_errors():
            return self.driver.current_url

    @property
    def current_path(self) -> Optional[str]:
        """Path of the current URL, percent-encoding preserved; None for about: pages."""
        parts = urlsplit(self.current_url)
        if parts.scheme not in ("http", "https", "file"):
            return None
        return parts.path or "/"

    @property
    def current_host(self) -> Optional[str]:
        parts = urlsplit(self.current_url)
        if not parts.netloc:
            return None
        return f"{parts.scheme}://{parts.netloc}"

    @property
    def title(self) -> str:
        with selenium_errors():
            return self.driver.title

    @property
    def html(self) -> str:
        """Source of the current frame's document."""
        with selenium_errors():
            return self.driver.page_source

    body = html

    def _latest_response(self) -> DocumentResponse:
        # Any script call makes the driver finish a pending navigation first
        self.driver.execute_script(scripts.READY_STATE)
        self.network.collect(self.driver)
        response = self.network.last_document_response(self.current_url)
        if response is None:
            raise StatusCodeUnavailable("no document response was recorded")
        return response

    @property
    def status_code(self) -> int:
        """HTTP status of the current top-level document."""
        return self._latest_response().status

    @property
    def response_headers(self) -> dict:
        return self._latest_response().headers

    # -- scripting ----------------------------------------------------------

    def _native_args(self, args) -> list:
        natives = []
        for arg in args:
            if isinstance(arg, Node):
                natives.append(arg.native)
            elif isinstance(arg, (list, tuple)):
                natives.append(self._native_args(arg))
            else:
                natives.append(arg)
        return natives

    def _wrap_result(self, value):
        if isinstance(value, WebElement):
            return Node(self, value)
        if isinstance(value, list):
            return [self._wrap_result(v) for v in value]
        if isinstance(value, dict):
            return {k: self._wrap_result(v) for k, v in value.items()}
        return value

    def execute_script(self, script: str, *args) -> None:
        """Run a script for its side effects."""
        with selenium_errors():
            self.driver.execute_script(script, *self._native_args(args))

    def evaluate_script(self, expression: str, *args):
        """
        Evaluate a JavaScript expression and return its value.

        undefined becomes None, functions become ``{}``, elements become
        Nodes and any cyclic structure becomes ``"(cyclic structure)"``.

        Raises:
            JavaScriptError: If the expression throws
        """
        with selenium_errors():
            result = self.driver.execute_script(
                scripts.evaluate_script(expression), *self._native_args(args)
            )
        return self._wrap_result(result)

    def evaluate_async_script(self, script: str, *args):
        """Run a script that reports its result through its last argument."""
        with selenium_errors():
            result = self.driver.execute_async_script(script, *self._native_args(args))
        return self._wrap_result(result)

    # -- finders ------------------------------------------------------------

    def _query(self, *args, **filters) -> SelectorQuery:
        return SelectorQuery(
            *args, ignore_hidden_elements=self.ignore_hidden_elements, **filters
        )

    def _scope(self, scope: Optional[Node]) -> Optional[Node]:
        if scope is not None:
            return scope
        return self._scopes[-1] if self._scopes else None

    def find(self, *args, scope: Optional[Node] = None, wait: Wait = None, **filters) -> Node:
        """
        Find exactly one element, waiting for it to appear.

        Raises:
            ElementNotFound: If nothing matched within the wait budget
            Ambiguous: If several elements matched and ``match`` forbids it
            InvalidSelector: If the browser rejects the selector
        """
        query = self._query(*args, **filters)
        scope = self._scope(scope)
        return self.synchronize(
            lambda: query.resolve_one(self, scope), wait=wait, errors=FINDER_ERRORS
        )

    def find_all(self, *args, scope: Optional[Node] = None, wait: Wait = None, **filters) -> list[Node]:
        """All matching elements; waits only when a count expectation is given."""
        query = self._query(*args, **filters)
        scope = self._scope(scope)
        if not query.has_count_expectation:
            return query.resolve(self, scope)

        def matching():
            nodes = query.resolve(self, scope)
            if not query.matches_count(len(nodes)):
                raise ElementNotFound(f"{query.description} (found {len(nodes)})")
            return nodes

        return self.synchronize(matching, wait=wait, errors=FINDER_ERRORS)

    all = find_all

    def first(self, *args, **filters) -> Node:
        counted = ("count", "minimum", "maximum", "between")
        if not any(filters.get(key) is not None for key in counted):
            filters["minimum"] = 1
        return self.find_all(*args, **filters)[0]

    def find_field(self, locator: Optional[str] = None, **filters) -> Node:
        return self.find("field", locator, **filters)

    def find_link(self, locator: Optional[str] = None, **filters) -> Node:
        return self.find("link", locator, **filters)

    def find_button(self, locator: Optional[str] = None, **filters) -> Node:
        return self.find("button", locator, **filters)

    def find_by_id(self, element_id: str, **filters) -> Node:
        return self.find("id", element_id, **filters)

    @contextmanager
    def within(self, *args, **filters) -> Iterator[Node]:
        """Scope finders to a node (or the element the arguments find)."""
        node = args[0] if len(args) == 1 and isinstance(args[0], Node) else self.find(*args, **filters)
        self._scopes.append(node)
        try:
            yield node
        finally:
            self._scopes.pop()

    # -- matchers -----------------------------------------------------------

    def has_selector(self, *args, scope: Optional[Node] = None, wait: Wait = None, **filters) -> bool:
        """Whether matches satisfy the count options (default: at least one)."""
        query = self._query(*args, **filters)
        scope = self._scope(scope)

        def check():
            if not query.matches_count(len(query.resolve(self, scope))):
                raise ElementNotFound(query.description)
            return True

        try:
            return self.synchronize(check, wait=wait, errors=FINDER_ERRORS)
        except FINDER_ERRORS:
            return False

    def has_no_selector(self, *args, scope: Optional[Node] = None, wait: Wait = None, **filters) -> bool:
        query = self._query(*args, **filters)
        scope = self._scope(scope)

        def check():
            if query.matches_count(len(query.resolve(self, scope))):
                raise ElementNotFound(f"no {query.description}")
            return True

        try:
            return self.synchronize(check, wait=wait, errors=FINDER_ERRORS)
        except FINDER_ERRORS:
            return False

    def assert_selector(self, *args, **options) -> None:
        if not self.has_selector(*args, **options):
            raise ElementNotFound(self._query(*args, **{
                k: v for k, v in options.items() if k not in ("scope", "wait")
            }).description)

    def has_css(self, selector: str, **options) -> bool:
        return self.has_selector("css", selector, **options)

    def has_no_css(self, selector: str, **options) -> bool:
        return self.has_no_selector("css", selector, **options)

    def has_xpath(self, selector: str, **options) -> bool:
        return self.has_selector("xpath", selector, **options)

    def has_no_xpath(self, selector: str, **options) -> bool:
        return self.has_no_selector("xpath", selector, **options)

    def _scope_text(self, scope: Optional[Node]) -> str:
        scope = self._scope(scope)
        if scope is None:
            with selenium_errors():
                body = self.driver.execute_script(scripts.DOCUMENT_BODY)
            if body is None:
                return ""
            scope = Node(self, body)
        return scope.text

    def has_content(self, content, scope: Optional[Node] = None, wait: Wait = None) -> bool:
        """Whether the visible text contains ``content`` (str or compiled regex)."""

        def check():
            if not text_matches(self._scope_text(scope), content):
                raise ElementNotFound(f"text {getattr(content, 'pattern', content)!r}")
            return True

        try:
            return self.synchronize(check, wait=wait, errors=FINDER_ERRORS)
        except FINDER_ERRORS:
            return False

    has_text = has_content

    def has_no_content(self, content, scope: Optional[Node] = None, wait: Wait = None) -> bool:
        def check():
            if text_matches(self._scope_text(scope), content):
                raise ElementNotFound(f"no text {getattr(content, 'pattern', content)!r}")
            return True

        try:
            return self.synchronize(check, wait=wait, errors=FINDER_ERRORS)
        except FINDER_ERRORS:
            return False

    has_no_text = has_no_content

    def _path_matches(self, expected, url: bool) -> bool:
        if url:
            actual = self.current_url
        else:
            parts = urlsplit(self.current_url)
            actual = parts.path or "/"
            if isinstance(expected, str) and "?" in expected:
                actual = f"{actual}?{parts.query}"
        if isinstance(expected, re.Pattern):
            return expected.search(actual) is not None
        return actual == expected

    def has_current_path(self, expected, wait: Wait = None, url: bool = False) -> bool:
        """Whether the current path (or full URL) equals ``expected`` or matches a regex."""

        def check():
            if not self._path_matches(expected, url):
                raise ElementNotFound(f"current path {expected!r}")
            return True

        try:
            return self.synchronize(check, wait=wait, errors=FINDER_ERRORS)
        except FINDER_ERRORS:
            return False

    def has_no_current_path(self, expected, wait: Wait = None, url: bool = False) -> bool:
        def check():
            if self._path_matches(expected, url):
                raise ElementNotFound(f"current path other than {expected!r}")
            return True

        try:
            return self.synchronize(check, wait=wait, errors=FINDER_ERRORS)
        except FINDER_ERRORS:
            return False

    # -- actions ------------------------------------------------------------

    def _act(self, action: Callable[[], Any]):
        return self.synchronize(action, errors=ACTION_ERRORS)

    def click_link(self, locator: Optional[str] = None, **filters) -> Node:
        return self._act(lambda: self.find("link", locator, **filters).click())

    def click_button(self, locator: Optional[str] = None, **filters) -> Node:
        return self._act(lambda: self.find("button", locator, **filters).click())

    def click_link_or_button(self, locator: Optional[str] = None, **filters) -> Node:
        return self._act(lambda: self.find("link_or_button", locator, **filters).click())

    click_on = click_link_or_button

    def fill_in(self, locator: Optional[str] = None, with_=None, **filters) -> Node:
        if with_ is None:
            raise ValueError("fill_in requires with_")
        return self._act(lambda: self.find("fillable_field", locator, **filters).set(with_))

    def check(self, locator: Optional[str] = None, **filters) -> Node:
        return self._act(lambda: self.find("checkbox", locator, **filters).set(True))

    def uncheck(self, locator: Optional[str] = None, **filters) -> Node:
        return self._act(lambda: self.find("checkbox", locator, **filters).set(False))

    def choose(self, locator: Optional[str] = None, **filters) -> Node:
        return self._act(lambda: self.find("radio_button", locator, **filters).set(True))

    def select(self, value: str, from_: Optional[str] = None, **filters) -> Node:
        """Select the option with text ``value``, optionally inside select ``from_``."""

        def attempt():
            if from_ is not None:
                return self.find("select", from_, **filters).find("option", value).select_option()
            return self.find("option", value, **filters).select_option()

        return self._act(attempt)

    def unselect(self, value: str, from_: Optional[str] = None, **filters) -> Node:
        def attempt():
            if from_ is not None:
                return self.find("select", from_, **filters).find("option", value).unselect_option()
            return self.find("option", value, **filters).unselect_option()

        return self._act(attempt)

    def attach_file(self, locator: Optional[str], path, **filters) -> Node:
        return self._act(lambda: self.find("file_field", locator, **filters).set(path))

    # -- frames -------------------------------------------------------------

    def _locate_frame(self, locator: FrameLocator) -> WebElement:
        if isinstance(locator, Node):
            return locator.native
        if isinstance(locator, WebElement):
            return locator

        def locate():
            with selenium_errors(selector=str(locator)):
                if isinstance(locator, int):
                    frames = self.driver.find_elements(By.CSS_SELECTOR, "iframe, frame")
                    if len(frames) > locator:
                        return frames[locator]
                else:
                    found = self.driver.execute_script(scripts.FIND_FRAME, locator)
                    if found is not None:
                        return found
            raise FrameNotFound(locator)

        return self.synchronize(locate, wait=self.frame_wait_time, errors=(FrameNotFound,))

    def _wait_for_document(self, expected_src: Optional[str], wait: float) -> None:
        """Wait until the current context finished loading its real document.

        A frame or window starts on a complete about:blank document before it
        navigates to its src, so about:blank only counts when nothing else
        is expected.
        """
        deadline = time.monotonic() + wait
        while True:
            with selenium_errors():
                state, href = self.driver.execute_script(scripts.DOCUMENT_STATE)
            navigated = expected_src in (None, "about:blank") or href != "about:blank"
            if state == "complete" and navigated:
                return
            if time.monotonic() >= deadline:
                logger.warning(f"Document still {state} at {href} after {wait}s")
                return
            time.sleep(self.poll_interval)

    def switch_to_frame(self, frame: FrameLocator) -> None:
        """
        Enter a frame by index, name/id, element or Node, or leave with
        ``"parent"`` / ``"top"``.

        Raises:
            FrameNotFound: If the frame does not appear within frame_wait_time
        """
        if frame == "top":
            self.driver.switch_to.default_content()
            self._frames.clear()
            return
        if frame == "parent":
            if not self._frames:
                raise FrameNotFound("parent")
            self.driver.switch_to.parent_frame()
            self._frames.pop()
            return

        element = self._locate_frame(frame)
        with selenium_errors(selector=str(frame)):
            src = self.driver.execute_script(scripts.FRAME_SOURCE, element)
            self.driver.switch_to.frame(element)
        self._frames.append(element)
        logger.debug(f"Switched to frame {frame!r}")
        self._wait_for_document(src, self.frame_wait_time)

    @contextmanager
    def within_frame(self, frame: FrameLocator) -> Iterator[None]:
        """Run the block inside a frame, restoring the parent context afterwards."""
        outer = list(self._frames)
        self.switch_to_frame(frame)
        inner = list(self._frames)
        saved_scopes, self._scopes = self._scopes, []
        try:
            yield
        finally:
            self._scopes = saved_scopes
            if self._frames == inner:
                self.switch_to_frame("parent")
            else:
                # The block moved elsewhere in the frame tree
                self.driver.switch_to.default_content()
                self._restore_frames(outer)

    @property
    def frame_url(self) -> str:
        with selenium_errors():
            return self.driver.execute_script(scripts.LOCATION)

    @property
    def frame_title(self) -> str:
        with selenium_errors():
            return self.driver.execute_script(scripts.TITLE)

    # -- windows ------------------------------------------------------------

    @property
    def current_window_handle(self) -> str:
        try:
            return self.driver.current_window_handle
        except NoSuchWindowException as e:
            raise NoSuchWindow("current") from e

    @property
    def windows(self) -> list[Window]:
        return [Window(self, handle) for handle in self.driver.window_handles]

    @property
    def current_window(self) -> Window:
        return Window(self, self.current_window_handle)

    def _restore_frames(self, frames: list[WebElement]) -> None:
        for element in frames:
            self.driver.switch_to.frame(element)
        self._frames = list(frames)

    @contextmanager
    def _switched_to(self, handle: str) -> Iterator[None]:
        """Temporarily make ``handle`` current, then return to where we were."""
        try:
            original = self.driver.current_window_handle
        except NoSuchWindowException:
            original = None
        if original == handle:
            yield
            return

        frames, scopes = list(self._frames), list(self._scopes)
        with selenium_errors(selector=handle):
            self.driver.switch_to.window(handle)
        self._frames, self._scopes = [], []
        try:
            yield
        finally:
            if original is not None and original in self.driver.window_handles:
                self.driver.switch_to.window(original)
                self._restore_frames(frames)
                self._scopes = scopes

    def open_new_window(self, kind: str = "tab") -> Window:
        """Open a blank window or tab without switching to it."""
        before = set(self.driver.window_handles)
        original = self.current_window_handle
        frames = list(self._frames)
        with selenium_errors():
            self.driver.switch_to.new_window(kind)
            handle = self.driver.current_window_handle
            self.driver.switch_to.window(original)
        self._restore_frames(frames)
        if handle in before:
            raise WindowError("Browser did not open a new window")
        logger.info(f"Opened window {handle}")
        return Window(self, handle, blank=True)

    def switch_to_window(self, window: Union[Window, str]) -> Window:
        """Make a window current and wait for its document to load."""
        if isinstance(window, str):
            window = Window(self, window)
        with selenium_errors(selector=window.handle):
            self.driver.switch_to.window(window.handle)
        self._frames.clear()
        self._scopes.clear()
        self._wait_for_document(None if window.blank else "", self.window_wait_time)
        logger.debug(f"Switched to window {window.handle}")
        return window

    @contextmanager
    def within_window(self, window: Union[Window, str]) -> Iterator[Window]:
        """Run the block in another window, then return to the current one."""
        original = self.current_window_handle
        frames, scopes = list(self._frames), list(self._scopes)
        window = self.switch_to_window(window)
        try:
            yield window
        finally:
            if original in self.driver.window_handles:
                self.driver.switch_to.window(original)
                self._restore_frames(frames)
                self._scopes = scopes
            else:
                logger.warning(f"Window {original} closed inside within_window")

    def window_opened_by(self, trigger: Callable[[], Any], wait: Wait = None) -> Window:
        """
        Call ``trigger`` and return the single window it opened.

        Raises:
            WindowError: If no window or more than one window was opened
        """
        before = set(self.driver.window_handles)
        trigger()

        def opened():
            handles = [h for h in self.driver.window_handles if h not in before]
            if not handles:
                raise WindowError("No window was opened")
            return handles

        handles = self.synchronize(
            opened,
            wait=self._wait_budget(wait, self.window_wait_time),
            errors=(WindowError,),
        )
        if len(handles) > 1:
            raise WindowError(f"{len(handles)} windows were opened, expected exactly one")
        logger.info(f"Window {handles[0]} opened")
        return Window(self, handles[0])

    # -- modals -------------------------------------------------------------

    def respond_to_modal(
        self,
        accept: bool = True,
        text=None,
        response: Optional[str] = None,
        wait: Wait = None,
    ) -> str:
        """
        Answer the dialog open in the current window.

        Args:
            accept: Accept (OK) or dismiss (Cancel)
            text: Expected message; substring for str, ``re.search`` for patterns
            response: Text typed into a prompt before accepting
            wait: How long to wait for the dialog to open

        Returns:
            The dialog's message

        Raises:
            ModalNotFound: If no dialog opens or its message does not match
        """
        budget = self._wait_budget(wait, self.window_wait_time)
        try:
            alert = WebDriverWait(
                self.driver, budget, poll_frequency=self.poll_interval
            ).until(EC.alert_is_present())
        except TimeoutException as e:
            raise ModalNotFound(text) from e

        message = alert.text
        if not text_matches(message, text):
            raise ModalNotFound(text, message)
        if response is not None:
            alert.send_keys(response)
        if accept:
            alert.accept()
        else:
            alert.dismiss()
        logger.info(f"{'Accepted' if accept else 'Dismissed'} dialog {message!r}")
        return message

    @contextmanager
    def _modal(self, kind: str, accept: bool, text, response=None, wait: Wait = None) -> Iterator[Modal]:
        modal = Modal(kind=kind, accept=accept, expected=text, response=response)
        yield modal
        modal.message = self.respond_to_modal(accept, text, response, wait)

    def accept_confirm(self, text=None, wait: Wait = None):
        """Context manager answering OK to the confirm opened by the block."""
        return self._modal("confirm", True, text, wait=wait)

    def dismiss_confirm(self, text=None, wait: Wait = None):
        return self._modal("confirm", False, text, wait=wait)

    def accept_alert(self, text=None, wait: Wait = None):
        return self._modal("alert", True, text, wait=wait)

    def accept_prompt(self, text=None, with_: Optional[str] = None, wait: Wait = None):
        return self._modal("prompt", True, text, response=with_, wait=wait)

    def dismiss_prompt(self, text=None, wait: Wait = None):
        return self._modal("prompt", False, text, wait=wait)

    # -- viewport -----------------------------------------------------------

    def resize(self, width: int, height: int) -> None:
        """Set the viewport size (exact on Chromium, window size elsewhere)."""
        execute_cdp_cmd = getattr(self.driver, "execute_cdp_cmd", None)
        if execute_cdp_cmd is not None:
            execute_cdp_cmd(
                "Emulation.setDeviceMetricsOverride",
                {"width": width, "height": height, "deviceScaleFactor": 0, "mobile": False},
            )
        else:
            self.driver.set_window_size(width, height)
        logger.debug(f"Viewport resized to {width}x{height}")

    def screenshot(self) -> bytes:
        """PNG bytes of the current viewport."""
        with selenium_errors():
            return self.driver.get_screenshot_as_png()

    def save_screenshot(self, path) -> str:
        path = os.fspath(path)
        with open(path, "wb") as f:
            f.write(self.screenshot())
        return path
