"""Fixtures for integration tests against a real browser and the fixture app."""

import socket
import threading
import time

import pytest
import uvicorn
from selenium.common.exceptions import WebDriverException

from selenium_session.core.exceptions import DriverConnectionError
from selenium_session.core.session import Session

from app import app

# Window size restored after every test
WINDOW_SIZE = (1024, 768)


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class AppServer:
    """Runs the fixture app with uvicorn in a background thread."""

    def __init__(self, host: str = "127.0.0.1", port: int = 0):
        self.host = host
        self.port = port or free_port()
        self.server = uvicorn.Server(
            uvicorn.Config(app, host=self.host, port=self.port, log_level="warning")
        )
        self._thread = threading.Thread(target=self.server.run, daemon=True)

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def start(self, timeout: float = 10.0) -> None:
        self._thread.start()
        deadline = time.monotonic() + timeout
        while not self.server.started:
            if time.monotonic() > deadline:
                raise RuntimeError(f"Fixture app did not start on {self.url}")
            time.sleep(0.05)

    def stop(self) -> None:
        self.server.should_exit = True
        self._thread.join(timeout=5)


@pytest.fixture(scope="session")
def app_server():
    """The fixture app, served for the whole test run."""
    server = AppServer()
    server.start()
    yield server
    server.stop()


@pytest.fixture(scope="session")
def shared_session(app_server):
    """One headless Chrome shared by the run; skips when no browser can start."""
    try:
        session = Session(
            app_host=app_server.url,
            browser="chrome",
            headless=True,
            window_size=WINDOW_SIZE,
            default_wait_time=2,
            frame_wait_time=5,
            window_wait_time=5,
        )
    except (DriverConnectionError, WebDriverException) as e:
        pytest.skip(f"No browser available: {e}")
    yield session
    session.quit()


@pytest.fixture
def session(shared_session):
    """The shared Session, reset to a blank page after each test."""
    session = shared_session
    yield session
    session.resize(*WINDOW_SIZE)
    session.reset()


@pytest.fixture
def server_url(app_server) -> str:
    return app_server.url
