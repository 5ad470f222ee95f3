"""Tests for DOM helper utilities."""

import re

import pytest
from unittest.mock import MagicMock

from selenium_session.utils.dom_helpers import (
    get_dom_content,
    normalize_text,
    prepare_html,
    text_matches,
)


@pytest.fixture
def mock_session_with_html():
    """A session stand-in with customizable html."""
    session = MagicMock()
    session.html = "<html><body><h1>Test</h1></body></html>"
    return session


@pytest.mark.asyncio
async def test_get_dom_content_basic(mock_session_with_html):
    """Test basic DOM content retrieval."""
    result = await get_dom_content(mock_session_with_html, max_chars=10000)

    assert result["truncated"] is False
    assert result["html"] == "<html><body><h1>Test</h1></body></html>"


@pytest.mark.asyncio
async def test_get_dom_content_strips_scripts_and_styles():
    session = MagicMock()
    session.html = (
        "<html><script>alert('evil');</script><style>.foo { color: red; }</style>"
        "<body>Content</body></html>"
    )

    result = await get_dom_content(session, max_chars=10000)

    assert "alert" not in result["html"]
    assert "color: red" not in result["html"]
    assert "Content" in result["html"]


def test_prepare_html_keeps_scripts_when_asked():
    html = "<script>keep()</script><p>x</p>"

    result = prepare_html(html, max_chars=1000, strip_scripts_and_styles=False)

    assert result["html"] == html


def test_prepare_html_truncates():
    result = prepare_html("<p>" + "a" * 100 + "</p>", max_chars=20)

    assert result["truncated"] is True
    assert len(result["html"]) == 20
    assert result["total_length"] == ">20"


class TestNormalizeText:
    def test_strips_ascii_whitespace(self):
        assert normalize_text("\n\t  Some text \r\n") == "Some text"

    def test_keeps_unicode_spaces_at_edges(self):
        assert normalize_text("\u3000Some text\u3000") == "\u3000Some text\u3000"

    def test_nbsp_becomes_space_after_stripping(self):
        assert normalize_text(" \u00a0Some text\u00a0 ") == " Some text "

    def test_nbsp_padding_around_ideographic_spaces(self):
        text = "\u00a0\u00a0\u3000 qux \u3000\u00a0\u00a0\n"

        assert normalize_text(text) == "  \u3000 qux \u3000  "

    def test_none_is_empty(self):
        assert normalize_text(None) == ""


class TestTextMatches:
    def test_substring(self):
        assert text_matches("Hello world", "lo wo")
        assert not text_matches("Hello world", "bye")

    def test_regex_searches(self):
        assert text_matches("Ruby on Rails", re.compile(r"on R"))
        assert not text_matches("Ruby on Rails", re.compile(r"^Rails"))

    def test_none_matches_anything(self):
        assert text_matches("", None)
