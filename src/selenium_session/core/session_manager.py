"""Session registry with element ids for the MCP server."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

import anyio

from .driver_factory import DriverFactory
from .exceptions import (
    ElementRegistryError,
    ObsoleteNode,
    SessionLimitError,
    SessionNotFoundError,
)
from .node import Node
from .session import Session

logger = logging.getLogger(__name__)


@dataclass
class BrowserSession:
    """
    A Session exposed over MCP together with its element registry.

    Nodes found by tools are registered under ``elem_N`` ids so later tool
    calls can refer to them.
    """

    session_id: str
    session: Session
    browser: str
    created_at: float
    last_activity: float
    _nodes: Dict[str, Node] = field(default_factory=dict)
    _node_counter: int = field(default=0)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def touch(self) -> None:
        self.last_activity = time.time()

    def register_node(self, node: Node) -> str:
        """Register a node and return its element id."""
        for element_id, known in self._nodes.items():
            if known == node:
                self.touch()
                return element_id
        self._node_counter += 1
        element_id = f"elem_{self._node_counter}"
        self._nodes[element_id] = node
        self.touch()
        return element_id

    def register_nodes(self, nodes: list[Node]) -> list[str]:
        return [self.register_node(node) for node in nodes]

    def get_node(self, element_id: str) -> Node:
        """
        Look up a registered node.

        Raises:
            ElementRegistryError: If the id was never registered
            ObsoleteNode: If the node left the DOM (it is evicted)
        """
        node = self._nodes.get(element_id)
        if node is None:
            raise ElementRegistryError(element_id)
        if node.obsolete:
            del self._nodes[element_id]
            raise ObsoleteNode(node)
        self.touch()
        return node

    def clear_nodes(self) -> int:
        count = len(self._nodes)
        self._nodes.clear()
        self._node_counter = 0
        return count

    @property
    def element_count(self) -> int:
        return len(self._nodes)

    def to_dict(self) -> dict:
        """Summary for API responses; never touches the browser."""
        return {
            "session_id": self.session_id,
            "browser": self.browser,
            "created_at": self.created_at,
            "last_activity": self.last_activity,
            "element_count": self.element_count,
            "app_host": self.session.app_host,
        }


class SessionManager:
    """
    Coroutine-safe registry of browser sessions.

    WebDriver calls block, so session start and shutdown run in worker
    threads via ``anyio.to_thread``.
    """

    def __init__(
        self,
        driver_factory: DriverFactory,
        max_sessions: int = 10,
        max_lifetime_seconds: int = 900,
        max_idle_seconds: int = 300,
    ):
        self._driver_factory = driver_factory
        self._max_sessions = max_sessions
        self._max_lifetime_seconds = max_lifetime_seconds
        self._max_idle_seconds = max_idle_seconds
        self._sessions: Dict[str, BrowserSession] = {}
        self._lock = asyncio.Lock()

    async def create_session(
        self,
        browser: str = "chrome",
        headless: bool = True,
        viewport_width: Optional[int] = None,
        viewport_height: Optional[int] = None,
        app_host: Optional[str] = None,
        default_wait_time: Optional[float] = None,
    ) -> BrowserSession:
        """
        Start a browser and register a Session for it.

        Raises:
            SessionLimitError: If max sessions reached
            DriverConnectionError: If the browser cannot be started
        """
        async with self._lock:
            if len(self._sessions) >= self._max_sessions:
                raise SessionLimitError(self._max_sessions)

            window_size = None
            if viewport_width and viewport_height:
                window_size = (viewport_width, viewport_height)

            session = await anyio.to_thread.run_sync(
                lambda: Session(
                    browser=browser,
                    headless=headless,
                    window_size=window_size,
                    app_host=app_host,
                    default_wait_time=default_wait_time,
                    driver_factory=self._driver_factory,
                )
            )

            session_id = f"sess_{uuid.uuid4().hex[:16]}"
            now = time.time()
            browser_session = BrowserSession(
                session_id=session_id,
                session=session,
                browser=browser,
                created_at=now,
                last_activity=now,
            )
            self._sessions[session_id] = browser_session
            logger.info(f"Created session {session_id} with {browser}")
            return browser_session

    def get_session(self, session_id: str) -> BrowserSession:
        """
        Raises:
            SessionNotFoundError: If session doesn't exist
        """
        browser_session = self._sessions.get(session_id)
        if browser_session is None:
            raise SessionNotFoundError(session_id)
        browser_session.touch()
        return browser_session

    async def close_session(self, session_id: str) -> bool:
        """Quit a session's browser; False if the id is unknown."""
        async with self._lock:
            browser_session = self._sessions.pop(session_id, None)
            if browser_session is None:
                return False

            async with browser_session._lock:
                await anyio.to_thread.run_sync(browser_session.session.quit)

            logger.info(f"Closed session {session_id}")
            return True

    def list_sessions(self, browser: Optional[str] = None) -> list[dict]:
        sessions = list(self._sessions.values())
        if browser:
            sessions = [s for s in sessions if s.browser.lower() == browser.lower()]
        return [s.to_dict() for s in sessions]

    async def get_expired_sessions(self) -> list[str]:
        """Ids of sessions past their lifetime or idle limit."""
        now = time.time()
        expired = []

        for session_id, browser_session in self._sessions.items():
            age = now - browser_session.created_at
            idle = now - browser_session.last_activity

            if age > self._max_lifetime_seconds:
                logger.info(f"Session {session_id} exceeded max lifetime ({age:.0f}s)")
                expired.append(session_id)
            elif idle > self._max_idle_seconds:
                logger.info(f"Session {session_id} exceeded max idle time ({idle:.0f}s)")
                expired.append(session_id)

        return expired

    async def sweep_expired(self) -> int:
        count = 0
        for session_id in await self.get_expired_sessions():
            if await self.close_session(session_id):
                count += 1
        return count

    async def close_all(self) -> int:
        count = 0
        for session_id in list(self._sessions.keys()):
            if await self.close_session(session_id):
                count += 1
        logger.info(f"Closed all {count} sessions")
        return count

    @property
    def session_count(self) -> int:
        return len(self._sessions)


class SessionSweeper:
    """
    Background task that periodically closes expired sessions.

    Started during server lifespan and cancelled on shutdown.
    """

    def __init__(self, session_manager: SessionManager, interval_seconds: int = 60):
        self._session_manager = session_manager
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task] = None
        self._shutdown_event = asyncio.Event()

    async def start(self) -> None:
        self._shutdown_event.clear()
        self._task = asyncio.create_task(self._sweep_loop())
        logger.info(f"Session sweeper started (interval: {self._interval}s)")

    async def stop(self) -> None:
        if self._task:
            self._shutdown_event.set()
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            logger.info("Session sweeper stopped")

    async def _sweep_loop(self) -> None:
        while not self._shutdown_event.is_set():
            try:
                await asyncio.wait_for(self._shutdown_event.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                try:
                    swept = await self._session_manager.sweep_expired()
                    if swept > 0:
                        logger.info(f"Swept {swept} expired session(s)")
                except Exception as e:
                    logger.error(f"Error during session sweep: {e}")
