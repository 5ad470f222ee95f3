"""Window handles for top-level browsing contexts."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Tuple

from .exceptions import NoSuchWindow

if TYPE_CHECKING:
    from .session import Session

logger = logging.getLogger(__name__)


class Window:
    """
    A browser window or tab, identified by its WebDriver handle.

    Operations on a window other than the current one switch to it
    temporarily and switch back afterwards.
    """

    def __init__(self, session: "Session", handle: str, blank: bool = False):
        self.session = session
        self.handle = handle
        # Opened without a URL, so loading finishes on about:blank
        self.blank = blank

    def __repr__(self) -> str:
        return f"<Window {self.handle}>"

    def __eq__(self, other) -> bool:
        return isinstance(other, Window) and other.handle == self.handle

    def __hash__(self) -> int:
        return hash(self.handle)

    @property
    def exists(self) -> bool:
        return self.handle in self.session.driver.window_handles

    @property
    def closed(self) -> bool:
        return not self.exists

    @property
    def is_current(self) -> bool:
        return self.session.current_window_handle == self.handle

    def close(self) -> None:
        """Close the window; the session stays on (or returns to) another window."""
        if not self.exists:
            raise NoSuchWindow(self.handle)
        if self.is_current:
            self.session.driver.close()
            logger.info(f"Closed current window {self.handle}")
            return
        with self.session._switched_to(self.handle):
            self.session.driver.close()
        logger.info(f"Closed window {self.handle}")

    @property
    def size(self) -> Tuple[int, int]:
        with self.session._switched_to(self.handle):
            size = self.session.driver.get_window_size()
        return size["width"], size["height"]

    def resize_to(self, width: int, height: int) -> None:
        with self.session._switched_to(self.handle):
            self.session.driver.set_window_size(width, height)

    def maximize(self) -> None:
        with self.session._switched_to(self.handle):
            self.session.driver.maximize_window()
