"""Document responses recovered from Chrome's performance log."""

from __future__ import annotations

import json
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urldefrag

from selenium.common.exceptions import WebDriverException

from .exceptions import StatusCodeUnavailable

logger = logging.getLogger(__name__)

# Responses kept per session; older ones are dropped
MAX_RESPONSES = 200


@dataclass
class DocumentResponse:
    """One document (page or frame) response seen by the browser."""

    url: str
    status: int
    headers: dict = field(default_factory=dict)
    frame_id: Optional[str] = None


class NetworkTraffic:
    """
    Accumulates document responses from ``driver.get_log("performance")``.

    Reading the log drains it, so every entry is folded into this object as
    it arrives. Requires the ``goog:loggingPrefs`` performance capability.
    """

    def __init__(self, max_responses: int = MAX_RESPONSES):
        self._responses: deque[DocumentResponse] = deque(maxlen=max_responses)
        self._main_frame_id: Optional[str] = None

    def clear(self) -> None:
        self._responses.clear()

    def collect(self, driver) -> None:
        """Drain the performance log into this object."""
        try:
            entries = driver.get_log("performance")
        except (WebDriverException, AttributeError, KeyError) as e:
            raise StatusCodeUnavailable(str(e)) from e
        for entry in entries:
            self.record(entry)

    def record(self, entry: dict) -> None:
        try:
            message = json.loads(entry["message"])["message"]
        except (KeyError, TypeError, ValueError):
            logger.debug(f"Skipping malformed performance log entry: {entry!r}")
            return

        method = message.get("method")
        params = message.get("params", {})

        if method == "Page.frameNavigated":
            frame = params.get("frame", {})
            if not frame.get("parentId"):
                self._main_frame_id = frame.get("id")
        elif method == "Network.responseReceived" and params.get("type") == "Document":
            response = params.get("response", {})
            self._responses.append(
                DocumentResponse(
                    url=response.get("url", ""),
                    status=int(response.get("status", 0)),
                    headers=dict(response.get("headers", {})),
                    frame_id=params.get("frameId"),
                )
            )

    @property
    def responses(self) -> list[DocumentResponse]:
        return list(self._responses)

    def last_document_response(self, url: Optional[str] = None) -> Optional[DocumentResponse]:
        """
        Latest top-level document response, preferring one for ``url``.

        Without a URL match, frame documents are skipped once the main frame
        id is known.
        """
        if url is not None:
            wanted = urldefrag(url)[0]
            for response in reversed(self._responses):
                if urldefrag(response.url)[0] == wanted:
                    return response
        candidates = [
            r for r in self._responses
            if self._main_frame_id is None or r.frame_id in (None, self._main_frame_id)
        ]
        return candidates[-1] if candidates else None
