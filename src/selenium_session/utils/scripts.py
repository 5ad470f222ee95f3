"""JavaScript snippets executed in the page through ``execute_script``.

Each snippet receives the target element as ``arguments[0]``.
"""

# Shared helpers prepended to snippets that need them
_HELPERS = """
var __isVisible = function(node) {
  if (node.nodeType !== 1) node = node.parentElement;
  if (!node) return false;
  var style = window.getComputedStyle(node);
  if (style.visibility === "hidden" || style.visibility === "collapse") return false;
  while (node) {
    style = window.getComputedStyle(node);
    if (style.display === "none" || parseFloat(style.opacity) === 0) return false;
    node = node.parentElement;
  }
  return true;
};
var __path = function(node) {
  var parts = [];
  while (node && node.nodeType === 1) {
    var part = node.tagName.toLowerCase();
    if (node.id) part += "#" + node.id;
    var cls = node.getAttribute("class");
    if (cls) {
      var names = cls.trim().split(/\\s+/);
      for (var i = 0; i < names.length; i++) if (names[i]) part += "." + names[i];
    }
    parts.unshift(part);
    node = node.parentElement;
  }
  return parts.join(" ");
};
"""

IS_VISIBLE = _HELPERS + "return __isVisible(arguments[0]);"

VISIBLE_TEXT = _HELPERS + """
var node = arguments[0];
if (!__isVisible(node)) return "";
if (node instanceof HTMLElement) return node.innerText;
return node.textContent;
"""

ALL_TEXT = "return arguments[0].textContent;"

PATH = _HELPERS + "return __path(arguments[0]);"

VALUE = """
var node = arguments[0];
if (node.tagName === "SELECT" && node.multiple) {
  var values = [];
  for (var i = 0; i < node.options.length; i++) {
    if (node.options[i].selected) values.push(node.options[i].value);
  }
  return values;
}
return node.value === undefined ? null : node.value;
"""

# Property wins unless missing, null, an object or a function (e.g. onclick)
PROPERTY_OR_ATTRIBUTE = """
var node = arguments[0], name = arguments[1];
var value = node[name];
if (value === undefined || value === null || typeof value === "object" || typeof value === "function") {
  return node.getAttribute(name);
}
return value;
"""

PROPERTY = """
var value = arguments[0][arguments[1]];
if (value === undefined || typeof value === "function") return null;
return value;
"""

ATTRIBUTES = """
var result = {}, list = arguments[0].attributes;
for (var i = 0; i < list.length; i++) result[list[i].name] = list[i].value;
return result;
"""

PARENTS = """
var parents = [], node = arguments[0].parentElement;
while (node) { parents.push(node); node = node.parentElement; }
return parents;
"""

IS_CONNECTED = "return arguments[0].isConnected;"

# Scrolls the node into view and hit-tests the centre of its visible part.
# Returns null when no part of the node lies inside the viewport.
CLICK_TARGET = _HELPERS + """
var node = arguments[0];
var visibleRect = function() {
  var rects = node.getClientRects();
  var rect = rects.length ? rects[0] : node.getBoundingClientRect();
  var left = Math.max(rect.left, 0), top = Math.max(rect.top, 0);
  var right = Math.min(rect.right, window.innerWidth);
  var bottom = Math.min(rect.bottom, window.innerHeight);
  if (right <= left || bottom <= top) return null;
  return {left: left, top: top, right: right, bottom: bottom};
};
if (node.scrollIntoViewIfNeeded) {
  node.scrollIntoViewIfNeeded(true);
} else {
  node.scrollIntoView({block: "center", inline: "center"});
}
var rect = visibleRect();
if (!rect) {
  node.scrollIntoView({block: "center", inline: "center"});
  rect = visibleRect();
}
if (!rect) return null;
var x = (rect.left + rect.right) / 2, y = (rect.top + rect.bottom) / 2;
var hit = document.elementFromPoint(x, y);
return {
  x: x,
  y: y,
  hit: hit === node || (hit !== null && node.contains(hit)),
  selector: hit ? __path(hit) : null
};
"""

SCROLL_INTO_VIEW = 'arguments[0].scrollIntoView({block: "center", inline: "center"});'

FOCUS = "arguments[0].focus();"

BLUR = "arguments[0].blur();"

# Clears the value without firing keyboard events
CLEAR_SILENTLY = """
var node = arguments[0];
if (node.isContentEditable) { node.innerHTML = ""; } else { node.value = ""; }
"""

SET_VALUE_WITH_EVENTS = """
var node = arguments[0], value = arguments[1];
if (document.activeElement !== node) node.focus();
node.value = value;
node.dispatchEvent(new Event("input", {bubbles: true}));
node.dispatchEvent(new Event("change", {bubbles: true}));
"""

INPUT_TYPE = """
var node = arguments[0];
if (node.isContentEditable && node.tagName !== "INPUT" && node.tagName !== "TEXTAREA") return "contenteditable";
if (node.tagName === "TEXTAREA") return "textarea";
if (node.tagName === "SELECT") return "select";
if (node.tagName !== "INPUT") return node.tagName.toLowerCase();
return (node.type || "text").toLowerCase();
"""

SELECT_OPTION = """
var option = arguments[0], select = option.parentNode;
while (select && select.tagName !== "SELECT") select = select.parentNode;
if (option.disabled || (select && select.disabled)) return false;
if (!select) { option.selected = true; return true; }
select.focus();
if (document.activeElement !== select) {
  select.dispatchEvent(new FocusEvent("focus"));
}
if (!option.selected) {
  option.selected = true;
  select.dispatchEvent(new Event("input", {bubbles: true}));
  select.dispatchEvent(new Event("change", {bubbles: true}));
}
if (document.activeElement === select) {
  select.blur();
} else {
  select.dispatchEvent(new FocusEvent("blur"));
}
return true;
"""

UNSELECT_OPTION = """
var option = arguments[0], select = option.parentNode;
while (select && select.tagName !== "SELECT") select = select.parentNode;
if (!select || !select.multiple) return false;
if (option.selected) {
  option.selected = false;
  select.dispatchEvent(new Event("input", {bubbles: true}));
  select.dispatchEvent(new Event("change", {bubbles: true}));
}
return true;
"""

TRIGGER = """
var node = arguments[0], name = arguments[1];
var mouse = ["click", "dblclick", "mousedown", "mouseup", "mouseover", "mouseout",
             "mouseenter", "mouseleave", "mousemove", "contextmenu"];
var event;
if (mouse.indexOf(name) >= 0) {
  event = new MouseEvent(name, {bubbles: true, cancelable: true, view: window});
} else if (name === "focus" || name === "blur") {
  node[name]();
  return;
} else if (name === "focusin" || name === "focusout") {
  event = new FocusEvent(name, {bubbles: true});
} else {
  event = new Event(name, {bubbles: true, cancelable: true});
}
node.dispatchEvent(event);
"""

READY_STATE = "return document.readyState;"

LOCATION = "return window.location.href;"

TITLE = "return document.title;"

DOCUMENT_STATE = "return [document.readyState, window.location.href];"

DOCUMENT_BODY = "return document.body || document.documentElement;"

# Frame element's resolved src, or null for frames without a navigable src
FRAME_SOURCE = """
var frame = arguments[0];
var src = frame.getAttribute("src");
if (!src || frame.hasAttribute("srcdoc")) return null;
return frame.src;
"""

FIND_FRAME = """
var name = arguments[0];
var frames = document.querySelectorAll("iframe, frame");
for (var i = 0; i < frames.length; i++) {
  if (frames[i].name === name || frames[i].id === name) return frames[i];
}
return null;
"""

CYCLIC_STRUCTURE = "(cyclic structure)"

# ``%s`` is replaced by the expression being evaluated
EVALUATE = """
var __value = (function() { return %s
}).apply(this, arguments);
var __cyclic = {};
var __convert = function(value, seen) {
  if (value === undefined || value === null) return null;
  if (typeof value === "function") return {};
  if (typeof value !== "object") return value;
  if (value instanceof Element || value instanceof Document) return value;
  if (value === window) return {};
  if (seen.indexOf(value) >= 0) throw __cyclic;
  seen.push(value);
  var result;
  if (Array.isArray(value) || value instanceof NodeList || value instanceof HTMLCollection) {
    result = [];
    for (var i = 0; i < value.length; i++) result.push(__convert(value[i], seen));
  } else if (value instanceof Date) {
    result = value.toISOString();
  } else {
    result = {};
    for (var key in value) {
      if (Object.prototype.hasOwnProperty.call(value, key)) result[key] = __convert(value[key], seen);
    }
  }
  seen.pop();
  return result;
};
try {
  return __convert(__value, []);
} catch (e) {
  if (e === __cyclic) return "%s";
  throw e;
}
"""


def evaluate_script(expression: str) -> str:
    """Wrap an expression so its value is returned in a WebDriver-safe form."""
    return EVALUATE % (expression.strip(), CYCLIC_STRUCTURE)
