"""Shared utilities: error mapping, selectors, scripts and text helpers."""

from .error_mapper import ErrorCode, map_error, translate_selenium_error
from .selectors import build_locator
from .dom_helpers import get_dom_content, normalize_text

__all__ = [
    "ErrorCode",
    "map_error",
    "translate_selenium_error",
    "build_locator",
    "get_dom_content",
    "normalize_text",
]
