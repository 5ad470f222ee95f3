"""Factory for creating local or Grid-backed WebDriver instances."""

import logging
from typing import Optional

from selenium import webdriver
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.common.exceptions import WebDriverException

from .exceptions import DriverConnectionError

logger = logging.getLogger(__name__)


class DriverFactory:
    """
    Creates WebDriver instances configured for Session.

    Dialogs are left open (``unhandledPromptBehavior=ignore``) so the
    session can answer them, and Chrome records performance logs so status
    codes can be recovered.

    Creation is blocking; async callers run it in a worker thread.
    """

    def __init__(
        self,
        grid_url: Optional[str] = None,
        page_load_timeout: int = 30,
        script_timeout: int = 30,
        implicit_wait: int = 0,
    ):
        self.grid_url = grid_url
        self.page_load_timeout = page_load_timeout
        self.script_timeout = script_timeout
        self.implicit_wait = implicit_wait

    @property
    def target(self) -> str:
        return self.grid_url or "local browser"

    def create(
        self,
        browser: str = "chrome",
        headless: bool = True,
        window_width: Optional[int] = None,
        window_height: Optional[int] = None,
        extra_capabilities: Optional[dict] = None,
    ) -> WebDriver:
        """
        Create a new WebDriver, locally or on the Grid.

        Args:
            browser: Browser type (chrome, firefox, edge)
            headless: Run browser in headless mode
            window_width: Optional window width
            window_height: Optional window height
            extra_capabilities: Additional capabilities to pass to the browser

        Returns:
            Configured WebDriver instance

        Raises:
            DriverConnectionError: If the browser cannot be started
            ValueError: If browser type is not supported
        """
        options = self._build_options(
            browser=browser,
            headless=headless,
            window_width=window_width,
            window_height=window_height,
            extra_capabilities=extra_capabilities,
        )

        try:
            if self.grid_url:
                driver = webdriver.Remote(command_executor=self.grid_url, options=options)
            else:
                local = {
                    "chrome": webdriver.Chrome,
                    "firefox": webdriver.Firefox,
                    "edge": webdriver.Edge,
                }[browser.lower()]
                driver = local(options=options)

            driver.set_page_load_timeout(self.page_load_timeout)
            driver.set_script_timeout(self.script_timeout)
            driver.implicitly_wait(self.implicit_wait)

            if window_width and window_height:
                driver.set_window_size(window_width, window_height)

        except WebDriverException as e:
            raise DriverConnectionError(self.target, str(e)) from e

        logger.info(f"Started {browser} via {self.target} (headless={headless})")
        return driver

    def _build_options(
        self,
        browser: str,
        headless: bool,
        window_width: Optional[int],
        window_height: Optional[int],
        extra_capabilities: Optional[dict],
    ):
        """Build browser-specific options object."""
        options_map = {
            "chrome": webdriver.ChromeOptions,
            "firefox": webdriver.FirefoxOptions,
            "edge": webdriver.EdgeOptions,
        }

        if browser.lower() not in options_map:
            raise ValueError(
                f"Unsupported browser: {browser}. "
                f"Supported browsers: {list(options_map.keys())}"
            )

        options = options_map[browser.lower()]()

        # Common arguments for stability
        if browser.lower() in ("chrome", "edge"):
            options.add_argument("--no-sandbox")
            options.add_argument("--disable-dev-shm-usage")
            options.add_argument("--disable-gpu")
            options.add_argument("--disable-popup-blocking")
            if headless:
                options.add_argument("--headless=new")
            if window_width and window_height:
                options.add_argument(f"--window-size={window_width},{window_height}")
            options.set_capability("goog:loggingPrefs", {"performance": "ALL"})

        elif browser.lower() == "firefox":
            if headless:
                options.add_argument("-headless")

        options.set_capability("unhandledPromptBehavior", "ignore")

        # Apply extra capabilities
        if extra_capabilities:
            for key, value in extra_capabilities.items():
                options.set_capability(key, value)

        return options
