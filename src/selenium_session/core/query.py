"""Selector queries: what to look for and which matches to keep."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Optional, Tuple, Union

from .exceptions import Ambiguous, ElementNotFound
from ..utils.dom_helpers import text_matches
from ..utils.error_mapper import selenium_errors
from ..utils.selectors import (
    INEXACT_KINDS,
    SELECTOR_KINDS,
    build_locator,
    looks_like_xpath,
)

if TYPE_CHECKING:
    from .node import Node
    from .session import Session

MATCH_STRATEGIES = ("smart", "first", "one", "prefer_exact")

VisibleOption = Union[bool, str, None]


class SelectorQuery:
    """
    A parsed finder call: selector kind, locator and filters.

    ``find("css", "#id")``, ``find("#id")`` and ``find(".//a")`` are all
    accepted; a single argument is XPath when it looks like a path and CSS
    otherwise.
    """

    def __init__(
        self,
        *args,
        visible: VisibleOption = None,
        text=None,
        exact_text=None,
        exact: Optional[bool] = None,
        count: Optional[int] = None,
        minimum: Optional[int] = None,
        maximum: Optional[int] = None,
        between: Optional[Tuple[int, int]] = None,
        match: str = "smart",
        ignore_hidden_elements: bool = True,
    ):
        if len(args) == 2:
            kind, locator = args
        elif len(args) == 1:
            locator = args[0]
            kind = "xpath" if looks_like_xpath(locator) else "css"
        else:
            raise ValueError(f"Expected a selector and optional kind, got {args!r}")
        kind = str(kind).lower()
        if kind not in SELECTOR_KINDS:
            raise ValueError(f"Unsupported selector kind: {kind}")
        if match not in MATCH_STRATEGIES:
            raise ValueError(f"match must be one of {MATCH_STRATEGIES}, got {match!r}")

        self.kind = kind
        self.locator = locator
        self.text = text
        self.exact_text = exact_text
        self.exact = exact
        self.count = count
        self.minimum = minimum
        self.maximum = maximum
        self.between = between
        self.match = match
        self.visible = self._normalize_visible(visible, ignore_hidden_elements)

    @staticmethod
    def _normalize_visible(visible: VisibleOption, ignore_hidden_elements: bool) -> str:
        if visible is None:
            return "visible" if ignore_hidden_elements else "all"
        if visible is True:
            return "visible"
        if visible is False:
            return "all"
        if visible in ("all", "visible", "hidden"):
            return visible
        raise ValueError(f"visible must be a bool, 'all', 'visible' or 'hidden', got {visible!r}")

    @property
    def method(self) -> str:
        return "css" if self.kind == "css" else "xpath"

    @property
    def description(self) -> str:
        parts = [f"{self.kind} {self.locator!r}"]
        if self.text is not None:
            parts.append(f"with text {getattr(self.text, 'pattern', self.text)!r}")
        if self.exact_text is not None:
            parts.append(f"with exact text {self.exact_text!r}")
        if self.visible != "all":
            parts.append(f"({self.visible})")
        return " ".join(parts)

    def __repr__(self) -> str:
        return f"<SelectorQuery {self.description}>"

    # -- counting -----------------------------------------------------------

    @property
    def has_count_expectation(self) -> bool:
        return any(v is not None for v in (self.count, self.minimum, self.maximum, self.between))

    def matches_count(self, found: int) -> bool:
        """Whether ``found`` satisfies count/minimum/maximum/between (or >= 1)."""
        if not self.has_count_expectation:
            return found >= 1
        if self.count is not None and found != self.count:
            return False
        if self.minimum is not None and found < self.minimum:
            return False
        if self.maximum is not None and found > self.maximum:
            return False
        if self.between is not None:
            low, high = self.between
            if not low <= found <= high:
                return False
        return True

    # -- resolution ---------------------------------------------------------

    def _locate(self, session: "Session", scope, exact: bool) -> list:
        by, expression = build_locator(self.kind, self.locator, exact)
        context = scope.native if scope is not None else session.driver
        with selenium_errors(selector=self.locator, method=self.method):
            return context.find_elements(by, expression)

    def _keep(self, node: "Node") -> bool:
        if self.visible != "all":
            shown = node.visible
            if (self.visible == "visible") != shown:
                return False
        if self.text is None and self.exact_text is None:
            return True
        content = node.text if self.visible == "visible" else node.all_text
        if not text_matches(content, self.text):
            return False
        if self.exact_text is not None:
            if isinstance(self.exact_text, re.Pattern):
                return self.exact_text.fullmatch(content) is not None
            return content == str(self.exact_text)
        return True

    def resolve(self, session: "Session", scope=None, exact: Optional[bool] = None) -> list["Node"]:
        """All matching nodes in document order."""
        from .node import Node

        if exact is None:
            exact = bool(self.exact) if self.exact is not None else False
        natives = self._locate(session, scope, exact)
        nodes = [Node(session, native, self.description) for native in natives]
        return [node for node in nodes if self._keep(node)]

    def resolve_one(self, session: "Session", scope=None) -> "Node":
        """
        Apply the match strategy and return the single result.

        Raises:
            ElementNotFound: If nothing matches
            Ambiguous: If the strategy forbids multiple matches
        """
        supports_exact = self.kind in INEXACT_KINDS and self.exact is None

        if self.match == "first":
            nodes = self.resolve(session, scope)
            if not nodes:
                raise ElementNotFound(self.description)
            return nodes[0]

        if self.match == "one":
            nodes = self.resolve(session, scope)
            if len(nodes) > 1:
                raise Ambiguous(self.description, len(nodes))
            if not nodes:
                raise ElementNotFound(self.description)
            return nodes[0]

        # smart / prefer_exact try exact locators first
        candidates = [True, False] if supports_exact else [None]
        for exact in candidates:
            nodes = self.resolve(session, scope, exact=exact)
            if not nodes:
                continue
            if len(nodes) > 1 and self.match == "smart":
                raise Ambiguous(self.description, len(nodes))
            return nodes[0]
        raise ElementNotFound(self.description)
