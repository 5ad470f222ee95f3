"""DOM content and text helpers."""

import re
import anyio

# Characters stripped from the ends of node text. Unicode spaces such as
# NBSP and U+3000 are content and survive.
ASCII_WHITESPACE = " \t\n\r\f\v\x00"

NBSP = "\u00a0"


def normalize_text(text) -> str:
    """Strip ASCII whitespace from both ends, then turn NBSP into plain spaces."""
    if text is None:
        return ""
    return str(text).strip(ASCII_WHITESPACE).replace(NBSP, " ")


def text_matches(text: str, expected) -> bool:
    """Substring match for strings, ``re.search`` for compiled patterns."""
    if expected is None:
        return True
    if isinstance(expected, re.Pattern):
        return expected.search(text) is not None
    return str(expected) in text


def prepare_html(html: str, max_chars: int, strip_scripts_and_styles: bool = True) -> dict:
    """
    Apply standard processing to page source.

    Args:
        html: Raw page source
        max_chars: Maximum characters to return
        strip_scripts_and_styles: Whether to remove script/style tags

    Returns:
        Dict with:
        - html: Processed HTML content
        - truncated: Whether content was truncated
        - total_length: Original length or ">limit" if truncated
    """
    if strip_scripts_and_styles:
        html = re.sub(
            r"<script[^>]*>.*?</script>", "", html, flags=re.DOTALL | re.IGNORECASE
        )
        html = re.sub(
            r"<style[^>]*>.*?</style>", "", html, flags=re.DOTALL | re.IGNORECASE
        )

    truncated = len(html) > max_chars
    original_length = len(html)
    if truncated:
        html = html[:max_chars]

    return {
        "html": html,
        "truncated": truncated,
        "total_length": original_length if not truncated else f">{max_chars}",
    }


async def get_dom_content(
    session,
    max_chars: int,
    strip_scripts_and_styles: bool = True,
) -> dict:
    """
    Get the current frame's HTML with standard processing.

    Args:
        session: selenium_session Session
        max_chars: Maximum characters to return
        strip_scripts_and_styles: Whether to remove script/style tags
    """
    html = await anyio.to_thread.run_sync(lambda: session.html)
    return prepare_html(html, max_chars, strip_scripts_and_styles)
