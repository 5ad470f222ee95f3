"""Node: a handle to one DOM element of a Session."""

from __future__ import annotations

import logging
import os
from numbers import Number
from typing import TYPE_CHECKING, Any, Optional, Sequence

from selenium.webdriver.common.action_chains import ActionChains
from selenium.webdriver.remote.webelement import WebElement

from .exceptions import MouseEventFailed, ObsoleteNode
from ..utils import scripts
from ..utils.dom_helpers import normalize_text
from ..utils.error_mapper import selenium_errors

if TYPE_CHECKING:
    from .session import Session

logger = logging.getLogger(__name__)

# Input types whose value is assigned by script rather than typed
SCRIPTED_INPUT_TYPES = {
    "date", "time", "datetime-local", "month", "week", "color", "range",
}


class Node:
    """
    Handle to a DOM element found through a Session.

    Operations on an element that left the live DOM raise ObsoleteNode.
    Two nodes are equal only when they wrap the same element.
    """

    def __init__(self, session: "Session", native: WebElement, description: Optional[str] = None):
        self.session = session
        self.native = native
        self.description = description

    def __repr__(self) -> str:
        return f"<Node {self.description or self.native.id}>"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self.native.id == other.native.id

    def __hash__(self) -> int:
        return hash(self.native.id)

    # -- evaluation helpers -------------------------------------------------

    @property
    def driver(self):
        return self.session.driver

    def _script(self, script: str, *args) -> Any:
        with selenium_errors(node=self):
            return self.driver.execute_script(script, self.native, *args)

    def _wrap(self, value):
        if isinstance(value, WebElement):
            return Node(self.session, value)
        if isinstance(value, list):
            return [self._wrap(v) for v in value]
        return value

    # -- state --------------------------------------------------------------

    @property
    def text(self) -> str:
        """Visible text, empty for hidden nodes."""
        return normalize_text(self._script(scripts.VISIBLE_TEXT))

    @property
    def all_text(self) -> str:
        return normalize_text(self._script(scripts.ALL_TEXT))

    def visible_text(self) -> str:
        return self.text

    @property
    def tag_name(self) -> str:
        with selenium_errors(node=self):
            return self.native.tag_name.lower()

    @property
    def value(self):
        return self._script(scripts.VALUE)

    @property
    def visible(self) -> bool:
        return bool(self._script(scripts.IS_VISIBLE))

    def is_visible(self) -> bool:
        return self.visible

    @property
    def checked(self) -> bool:
        return bool(self.property("checked"))

    @property
    def selected(self) -> bool:
        return bool(self.property("selected"))

    @property
    def disabled(self) -> bool:
        return bool(self.property("disabled"))

    @property
    def readonly(self) -> bool:
        return bool(self.property("readOnly"))

    @property
    def obsolete(self) -> bool:
        """True when the element no longer belongs to the live DOM."""
        try:
            return not self._script(scripts.IS_CONNECTED)
        except ObsoleteNode:
            return True

    def __getitem__(self, name: str):
        """Property value, falling back to the attribute (normalized href, booleans)."""
        return self._script(scripts.PROPERTY_OR_ATTRIBUTE, name)

    def attribute(self, name: str) -> Optional[str]:
        with selenium_errors(node=self):
            return self.native.get_dom_attribute(name)

    @property
    def attributes(self) -> dict:
        return self._script(scripts.ATTRIBUTES)

    @property
    def parents(self) -> list[Node]:
        """Ancestor nodes, nearest first."""
        return self._wrap(self._script(scripts.PARENTS))

    @property
    def path(self) -> str:
        """CSS-like path such as ``html body div#two.box``."""
        return self._script(scripts.PATH)

    # -- finders scoped to this node ---------------------------------------

    def find(self, *args, **options) -> Node:
        return self.session.find(*args, scope=self, **options)

    def find_all(self, *args, **options) -> list[Node]:
        return self.session.find_all(*args, scope=self, **options)

    all = find_all

    def first(self, *args, **options) -> Node:
        return self.session.first(*args, scope=self, **options)

    def has_selector(self, *args, **options) -> bool:
        return self.session.has_selector(*args, scope=self, **options)

    def has_no_selector(self, *args, **options) -> bool:
        return self.session.has_no_selector(*args, scope=self, **options)

    def has_css(self, selector: str, **options) -> bool:
        return self.has_selector("css", selector, **options)

    def has_xpath(self, selector: str, **options) -> bool:
        return self.has_selector("xpath", selector, **options)

    def has_content(self, text, **options) -> bool:
        return self.session.has_content(text, scope=self, **options)

    has_text = has_content

    # -- mouse --------------------------------------------------------------

    def _mouse_target(self, name: str) -> dict:
        """Scroll into view and hit-test; raise MouseEventFailed if obscured."""
        target = self._script(scripts.CLICK_TARGET)
        if target is None:
            raise MouseEventFailed(name, None, None)
        if not target["hit"]:
            raise MouseEventFailed(name, target["selector"], [target["x"], target["y"]])
        return target

    def _mouse_action(self, name: str, perform, x: Optional[int] = None, y: Optional[int] = None):
        def attempt():
            chain = ActionChains(self.driver)
            if x is not None and y is not None:
                self._script(scripts.SCROLL_INTO_VIEW)
                chain.move_to_element_with_offset(self.native, x, y)
            else:
                # WebDriver aims at the in-view centre, the point just hit-tested
                self._mouse_target(name)
                chain.move_to_element(self.native)
            perform(chain)
            with selenium_errors(node=self):
                chain.perform()
            logger.debug(f"{name} on {self!r}")

        return self.session.synchronize(attempt, errors=(MouseEventFailed,))

    def click(self, keys: Sequence[str] = (), x: Optional[int] = None, y: Optional[int] = None) -> Node:
        """
        Click the element at the centre of its visible area.

        Args:
            keys: Modifier keys (selenium Keys values) held during the click
            x: Optional offset from the element centre
            y: Optional offset from the element centre

        Raises:
            MouseEventFailed: If another element covers the click point or the
                element has no area inside the viewport
        """

        def perform(chain: ActionChains):
            for key in keys:
                chain.key_down(key)
            chain.click()
            for key in keys:
                chain.key_up(key)

        self._mouse_action("click", perform, x, y)
        return self

    def double_click(self) -> Node:
        self._mouse_action("dblclick", lambda chain: chain.double_click())
        return self

    def right_click(self) -> Node:
        self._mouse_action("contextmenu", lambda chain: chain.context_click())
        return self

    def hover(self) -> Node:
        self._mouse_action("hover", lambda chain: None)
        return self

    def drag_to(self, other: Node) -> Node:
        self._mouse_target("drag")
        other._mouse_target("drop")
        with selenium_errors(node=self):
            ActionChains(self.driver).drag_and_drop(self.native, other.native).perform()
        return self

    def drag_by(self, dx: int, dy: int) -> Node:
        self._mouse_target("drag")
        with selenium_errors(node=self):
            ActionChains(self.driver).drag_and_drop_by_offset(self.native, dx, dy).perform()
        return self

    def scroll_into_view(self) -> Node:
        self._script(scripts.SCROLL_INTO_VIEW)
        return self

    def trigger(self, event: str) -> Node:
        """Dispatch a synthetic DOM event without any hit testing."""
        self._script(scripts.TRIGGER, event)
        return self

    # -- forms --------------------------------------------------------------

    def set(self, value) -> Node:
        """
        Set the element's value the way a user would.

        Text inputs are cleared silently, typed into with native key events
        and blurred so change fires. Checkboxes and radios are clicked when
        their state differs, file inputs receive absolute paths.
        """
        input_type = self._script(scripts.INPUT_TYPE)

        if input_type in ("checkbox", "radio"):
            if bool(value) != self.checked:
                self.click()
            return self

        if input_type == "file":
            paths = value if isinstance(value, (list, tuple)) else [value]
            files = "\n".join(os.path.abspath(os.fspath(p)) for p in paths)
            with selenium_errors(node=self):
                self.native.send_keys(files)
            return self

        if input_type == "select":
            return self.find("option", str(value)).select_option()

        if isinstance(value, Number) and not isinstance(value, bool):
            value = str(value)
        elif isinstance(value, os.PathLike):
            value = os.fspath(value)
        value = "" if value is None else str(value)

        if self.readonly or self.disabled:
            logger.warning(f"Refusing to set value of read-only or disabled {self!r}")
            return self

        if input_type == "contenteditable" and value == "":
            self._script(scripts.FOCUS)
            self._script(scripts.CLEAR_SILENTLY)
            self._script(scripts.TRIGGER, "input")
            return self

        if input_type in SCRIPTED_INPUT_TYPES or value == "":
            self._script(scripts.SET_VALUE_WITH_EVENTS, value)
            return self

        self._script(scripts.FOCUS)
        self._script(scripts.CLEAR_SILENTLY)
        with selenium_errors(node=self):
            self.native.send_keys(value)
        self._script(scripts.BLUR)
        return self

    def select_option(self) -> Node:
        """Select this <option>, firing focus, change and blur on its select."""
        if not self._script(scripts.SELECT_OPTION):
            logger.warning(f"Option {self!r} is disabled and was not selected")
        return self

    def unselect_option(self) -> Node:
        if not self._script(scripts.UNSELECT_OPTION):
            raise ValueError("Cannot unselect an option from a single select box")
        return self

    def send_keys(self, *keys: str) -> Node:
        with selenium_errors(node=self):
            self.native.send_keys(*keys)
        return self

    # Must stay last: this name shadows the builtin property in the class body
    def property(self, name: str):
        return self._wrap(self._script(scripts.PROPERTY, name))
