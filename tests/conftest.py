"""Pytest fixtures for unit tests with a mocked WebDriver."""

import time

import pytest
from unittest.mock import MagicMock, AsyncMock
from selenium.webdriver.remote.webelement import WebElement

from selenium_session.core.driver_factory import DriverFactory
from selenium_session.core.session import Session
from selenium_session.core.session_manager import SessionManager, BrowserSession
from selenium_session.utils import scripts


def build_element(element_id="el-1", tag="div", text="", **state):
    """
    Create a mock WebElement whose DOM state is read by ``script_dispatcher``.

    ``state`` keys: visible, connected, value, input_type, path, props,
    attributes, click_target.
    """
    element = MagicMock(spec=WebElement)
    element.id = element_id
    element.tag_name = tag.upper()
    element.dom_state = {
        "text": text,
        "visible": True,
        "connected": True,
        "value": None,
        "input_type": None,
        "path": tag,
        "props": {},
        "attributes": {},
        "click_target": {"x": 10.0, "y": 10.0, "hit": True, "selector": tag},
        **state,
    }
    element.get_dom_attribute.side_effect = lambda name: element.dom_state["attributes"].get(name)
    return element


def script_dispatcher(driver):
    """Answer the library's scripts from mock element state and ``driver.script_results``."""

    def execute(script, *args):
        if script in driver.script_results:
            result = driver.script_results[script]
            if callable(result) and not isinstance(result, WebElement):
                return result(*args)
            return result

        element = args[0] if args and isinstance(args[0], WebElement) else None
        if element is not None:
            state = element.dom_state
            if script == scripts.IS_VISIBLE:
                return state["visible"]
            if script == scripts.VISIBLE_TEXT:
                return state["text"] if state["visible"] else ""
            if script == scripts.ALL_TEXT:
                return state["text"]
            if script == scripts.IS_CONNECTED:
                return state["connected"]
            if script == scripts.VALUE:
                return state["value"]
            if script == scripts.INPUT_TYPE:
                return state["input_type"]
            if script == scripts.PATH:
                return state["path"]
            if script == scripts.PROPERTY:
                return state["props"].get(args[1])
            if script == scripts.ATTRIBUTES:
                return dict(state["attributes"])
            if script == scripts.CLICK_TARGET:
                return state["click_target"]
            if script == scripts.SET_VALUE_WITH_EVENTS:
                state["value"] = args[1]
                return None
            if script == scripts.SELECT_OPTION:
                state["props"]["selected"] = True
                return True
            return None

        if script == scripts.READY_STATE:
            return "complete"
        if script == scripts.DOCUMENT_STATE:
            return ["complete", driver.current_url]
        return None

    return execute


@pytest.fixture
def make_element():
    """Factory for mock elements with DOM state."""
    return build_element


@pytest.fixture
def mock_webelement():
    """A visible button element."""
    return build_element("el-button", tag="button", text="Click Me", path="html body button")


@pytest.fixture
def mock_webdriver(mock_webelement):
    """Create a mock WebDriver with common methods."""
    driver = MagicMock()

    # Navigation
    driver.current_url = "http://app.test/ferrum/index"
    driver.title = "Example Page"
    driver.page_source = "<html><body><h1>Hello</h1></body></html>"

    # Scripts answered from element state
    driver.script_results = {}
    driver.execute_script.side_effect = script_dispatcher(driver)
    driver.execute_async_script = MagicMock(return_value="async_result")

    # Find elements
    driver.find_elements = MagicMock(return_value=[mock_webelement])

    # Window management
    driver.window_handles = ["window1"]
    driver.current_window_handle = "window1"
    driver.get_window_size = MagicMock(return_value={"width": 1024, "height": 768})

    # Session
    driver.session_id = "mock-session-id"
    driver.capabilities = {"browserName": "chrome", "browserVersion": "120.0"}

    # Logs
    driver.get_log = MagicMock(return_value=[])

    return driver


@pytest.fixture
def session(mock_webdriver):
    """A Session over the mock driver with short waits."""
    return Session(
        mock_webdriver,
        app_host="http://app.test",
        default_wait_time=0.2,
        frame_wait_time=0.2,
        window_wait_time=0.2,
        poll_interval=0.01,
    )


@pytest.fixture
def mock_driver_factory(mock_webdriver):
    """DriverFactory whose create returns the mock WebDriver."""
    factory = MagicMock(spec=DriverFactory)
    factory.create.return_value = mock_webdriver
    factory.grid_url = None
    return factory


@pytest.fixture
def session_manager(mock_driver_factory):
    """SessionManager with a mocked driver factory."""
    return SessionManager(
        driver_factory=mock_driver_factory,
        max_sessions=2,
        max_lifetime_seconds=900,
        max_idle_seconds=300,
    )


@pytest.fixture
def browser_session(session):
    """A registered BrowserSession wrapping the mock Session."""
    now = time.time()
    return BrowserSession(
        session_id="sess_test",
        session=session,
        browser="chrome",
        created_at=now,
        last_activity=now,
    )


@pytest.fixture
def mock_ctx(browser_session):
    """A FastMCP Context whose lifespan context serves ``browser_session``."""
    from selenium_session.config import Settings

    ctx = MagicMock()
    app_ctx = MagicMock()
    app_ctx.settings = Settings()
    app_ctx.session_manager.get_session.return_value = browser_session
    ctx.request_context.lifespan_context = app_ctx
    ctx.info = AsyncMock()
    return ctx
