"""Selector kinds and the XPath expressions behind them."""

from typing import Callable, Optional, Tuple

from selenium.webdriver.common.by import By


def xpath_literal(value: str) -> str:
    """Quote a Python string as an XPath 1.0 string literal."""
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    parts = value.split("'")
    return "concat(" + ", \"'\", ".join(f"'{part}'" for part in parts) + ")"


def looks_like_xpath(selector: str) -> bool:
    """Heuristic used when a finder gets a bare selector."""
    return selector.startswith(("/", "./", "(", ".."))


def _text_is(expression: str, locator: str, exact: bool) -> str:
    literal = xpath_literal(locator)
    if exact:
        return f"normalize-space({expression})={literal}"
    return f"contains(normalize-space({expression}), {literal})"


def _attr_is(name: str, locator: str, exact: bool) -> str:
    literal = xpath_literal(locator)
    if exact:
        return f"@{name}={literal}"
    return f"contains(@{name}, {literal})"


def _one_of(*conditions: str) -> str:
    return "[" + " or ".join(conditions) + "]"


def _input_types(*types: str) -> str:
    return " or ".join(f"@type='{t}'" for t in types)


_NON_FIELD_TYPES = ("submit", "image", "hidden", "button", "reset")
_NON_FILLABLE_TYPES = ("submit", "image", "radio", "checkbox", "hidden", "file", "button", "reset")


def _labelled(elements: str, locator: str, exact: bool) -> str:
    """Elements located by id, name, placeholder or label text.

    ``elements`` is a predicate body over ``self::`` axes.
    """
    literal = xpath_literal(locator)
    label = _text_is("string(.)", locator, exact)
    direct = (
        f".//*[{elements}]"
        + _one_of(
            f"@id={literal}",
            f"@name={literal}",
            _attr_is("placeholder", locator, exact),
            f"@id=//label[{label}]/@for",
        )
    )
    wrapped = f".//label[{label}]//*[{elements}]"
    return f"{direct} | {wrapped}"


def _field_elements(excluded: Tuple[str, ...]) -> str:
    return (
        f"self::input[not(@type) or not({_input_types(*excluded)})]"
        " or self::textarea or self::select"
    )


def link_xpath(locator: Optional[str], exact: bool = False) -> str:
    if locator is None:
        return ".//a[@href]"
    literal = xpath_literal(locator)
    return ".//a[@href]" + _one_of(
        f"@id={literal}",
        _text_is("string(.)", locator, exact),
        _attr_is("title", locator, exact),
        ".//img[" + _attr_is("alt", locator, exact) + "]",
    )


def button_xpath(locator: Optional[str], exact: bool = False) -> str:
    inputs = f".//input[{_input_types('submit', 'reset', 'image', 'button')}]"
    buttons = ".//button"
    if locator is None:
        return f"{inputs} | {buttons}"
    literal = xpath_literal(locator)
    input_match = _one_of(
        f"@id={literal}",
        f"@name={literal}",
        _attr_is("value", locator, exact),
        _attr_is("title", locator, exact),
    )
    image_match = "[@type='image']" + "[" + _attr_is("alt", locator, exact) + "]"
    button_match = _one_of(
        f"@id={literal}",
        f"@name={literal}",
        _attr_is("value", locator, exact),
        _attr_is("title", locator, exact),
        _text_is("string(.)", locator, exact),
    )
    return f"{inputs}{input_match} | .//input{image_match} | {buttons}{button_match}"


def link_or_button_xpath(locator: Optional[str], exact: bool = False) -> str:
    return f"{link_xpath(locator, exact)} | {button_xpath(locator, exact)}"


def field_xpath(locator: Optional[str], exact: bool = False) -> str:
    elements = _field_elements(_NON_FIELD_TYPES)
    if locator is None:
        return f".//*[{elements}]"
    return _labelled(elements, locator, exact)


def fillable_field_xpath(locator: Optional[str], exact: bool = False) -> str:
    elements = (
        f"self::input[not(@type) or not({_input_types(*_NON_FILLABLE_TYPES)})]"
        " or self::textarea"
    )
    if locator is None:
        return f".//*[{elements}]"
    return _labelled(elements, locator, exact)


def _typed_input_xpath(input_type: str) -> Callable[[Optional[str], bool], str]:
    elements = f"self::input[@type='{input_type}']"

    def build(locator: Optional[str], exact: bool = False) -> str:
        if locator is None:
            return f".//*[{elements}]"
        return _labelled(elements, locator, exact)

    return build


def select_xpath(locator: Optional[str], exact: bool = False) -> str:
    if locator is None:
        return ".//select"
    return _labelled("self::select", locator, exact)


def option_xpath(locator: Optional[str], exact: bool = False) -> str:
    if locator is None:
        return ".//option"
    return ".//option[" + _text_is("string(.)", locator, exact) + "]"


def id_xpath(locator: Optional[str], exact: bool = True) -> str:
    return f".//*[@id={xpath_literal(locator or '')}]"


def frame_xpath(locator: Optional[str], exact: bool = True) -> str:
    frames = ".//*[self::iframe or self::frame]"
    if locator is None:
        return frames
    literal = xpath_literal(locator)
    return frames + _one_of(f"@id={literal}", f"@name={literal}")


XPATH_BUILDERS: dict[str, Callable[..., str]] = {
    "link": link_xpath,
    "button": button_xpath,
    "link_or_button": link_or_button_xpath,
    "field": field_xpath,
    "fillable_field": fillable_field_xpath,
    "checkbox": _typed_input_xpath("checkbox"),
    "radio_button": _typed_input_xpath("radio"),
    "file_field": _typed_input_xpath("file"),
    "select": select_xpath,
    "option": option_xpath,
    "id": id_xpath,
    "frame": frame_xpath,
}

# Kinds whose locator can match exactly or partially
INEXACT_KINDS = {
    "link", "button", "link_or_button", "field", "fillable_field",
    "checkbox", "radio_button", "file_field", "select", "option",
}

SELECTOR_KINDS = frozenset({"css", "xpath", *XPATH_BUILDERS})


def build_locator(kind: str, locator: Optional[str], exact: bool = False) -> Tuple[str, str]:
    """
    Convert a selector kind and locator into a Selenium (By, expression) pair.

    Args:
        kind: Selector kind (css, xpath, link, button, field, ...)
        locator: Selector string or human locator (text, id, name, label)
        exact: Whether text-like locators must match exactly

    Returns:
        Tuple of Selenium By constant and expression

    Raises:
        ValueError: If the kind is not supported
    """
    kind = kind.lower()
    if kind == "css":
        return By.CSS_SELECTOR, locator or "*"
    if kind == "xpath":
        return By.XPATH, locator or ".//*"
    if kind not in XPATH_BUILDERS:
        raise ValueError(
            f"Unsupported selector kind: {kind}. "
            f"Supported: {sorted(SELECTOR_KINDS)}"
        )
    return By.XPATH, XPATH_BUILDERS[kind](locator, exact)
