"""Tests for MCP tool functions with a mocked session."""

import base64
import threading

import pytest
from unittest.mock import MagicMock, PropertyMock, patch
from fastmcp.exceptions import ToolError

from selenium_session.core.exceptions import SessionNotFoundError
from selenium_session.core.node import Node
from selenium_session.tools import context, interaction, meta, navigation, observation, scripting
from selenium_session.utils import scripts


@pytest.mark.asyncio
async def test_ping():
    result = await meta.ping.fn()

    assert result["status"] == "ok"
    assert "version" in result


@pytest.mark.asyncio
async def test_unknown_session_maps_to_error(mock_ctx):
    mock_ctx.request_context.lifespan_context.session_manager.get_session.side_effect = (
        SessionNotFoundError("sess_missing")
    )

    with pytest.raises(ToolError, match="SESSION_NOT_FOUND"):
        await navigation.get_page_info.fn(mock_ctx, session_id="sess_missing")


class TestNavigationTools:
    @pytest.mark.asyncio
    async def test_visit(self, mock_ctx, mock_webdriver):
        result = await navigation.visit.fn(mock_ctx, session_id="sess_test", url="/ferrum/index")

        mock_webdriver.get.assert_called_once_with("http://app.test/ferrum/index")
        assert result["success"] is True
        assert result["path"] == "/ferrum/index"
        assert result["title"] == "Example Page"

    @pytest.mark.asyncio
    async def test_get_page_info_without_status(self, mock_ctx):
        result = await navigation.get_page_info.fn(mock_ctx, session_id="sess_test")

        assert result["status_code"] is None
        assert result["url"] == "http://app.test/ferrum/index"


class TestObservationTools:
    @pytest.mark.asyncio
    async def test_find_elements_registers_nodes(self, mock_ctx, browser_session):
        result = await observation.find_elements.fn(mock_ctx, session_id="sess_test", locator="button")

        assert result["count"] == 1
        element = result["elements"][0]
        assert element["element_id"] == "elem_1"
        assert element["tag"] == "button"
        assert element["text"] == "Click Me"
        assert browser_session.element_count == 1

    @pytest.mark.asyncio
    async def test_find_elements_invalid_kind_argument(self, mock_ctx):
        with pytest.raises(ToolError, match="INVALID_ARGUMENT"):
            await observation.find_elements.fn(
                mock_ctx, session_id="sess_test", locator="x", kind="table"
            )

    @pytest.mark.asyncio
    async def test_get_html(self, mock_ctx):
        result = await observation.get_html.fn(mock_ctx, session_id="sess_test")

        assert "<h1>Hello</h1>" in result["html"]
        assert result["truncated"] is False

    @pytest.mark.asyncio
    async def test_get_screenshot(self, mock_ctx, mock_webdriver):
        mock_webdriver.get_screenshot_as_png.return_value = b"\x89PNG"

        result = await observation.get_screenshot.fn(mock_ctx, session_id="sess_test")

        assert result["image_base64"] == base64.b64encode(b"\x89PNG").decode("utf-8")
        assert result["format"] == "png"

    @pytest.mark.asyncio
    async def test_has_selector(self, mock_ctx, mock_webdriver):
        mock_webdriver.find_elements.return_value = []

        result = await observation.has_selector.fn(
            mock_ctx, session_id="sess_test", locator="#missing", wait=0
        )

        assert result["found"] is False


class TestInteractionTools:
    @pytest.mark.asyncio
    @patch("selenium_session.core.node.ActionChains")
    async def test_click(self, action_chains, mock_ctx, browser_session, session, mock_webelement):
        element_id = browser_session.register_node(Node(session, mock_webelement))

        result = await interaction.click.fn(mock_ctx, session_id="sess_test", element_id=element_id)

        assert result["success"] is True
        action_chains.return_value.click.assert_called_once_with()

    @pytest.mark.asyncio
    @patch("selenium_session.core.node.ActionChains")
    async def test_node_lookup_runs_in_worker_under_lock(
        self, action_chains, mock_ctx, browser_session, session, mock_webdriver, mock_webelement
    ):
        element_id = browser_session.register_node(Node(session, mock_webelement))
        lookups = []

        def is_connected(element):
            lookups.append((threading.get_ident(), browser_session._lock.locked()))
            return True

        mock_webdriver.script_results[scripts.IS_CONNECTED] = is_connected

        await interaction.hover.fn(mock_ctx, session_id="sess_test", element_id=element_id)

        assert lookups
        loop_thread = threading.get_ident()
        assert all(thread != loop_thread and locked for thread, locked in lookups)

    @pytest.mark.asyncio
    async def test_obscured_click_reports_selector(self, mock_ctx, browser_session, session, make_element):
        element = make_element(
            click_target={"x": 200, "y": 200, "hit": False, "selector": "html body div#two.box"}
        )
        element_id = browser_session.register_node(Node(session, element))

        with pytest.raises(ToolError) as exc_info:
            await interaction.click.fn(mock_ctx, session_id="sess_test", element_id=element_id)

        assert "ELEMENT_OBSCURED" in str(exc_info.value)
        assert "html body div#two.box" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_unknown_modifier(self, mock_ctx):
        with pytest.raises(ToolError, match="INVALID_ARGUMENT"):
            await interaction.click.fn(
                mock_ctx, session_id="sess_test", element_id="elem_1", modifiers=["HYPER"]
            )

    @pytest.mark.asyncio
    async def test_set_value_returns_new_value(self, mock_ctx, browser_session, session, make_element):
        element = make_element(tag="input", input_type="date")
        element_id = browser_session.register_node(Node(session, element))

        result = await interaction.set_value.fn(
            mock_ctx, session_id="sess_test", element_id=element_id, value="2024-01-31"
        )

        assert result["value"] == "2024-01-31"

    @pytest.mark.asyncio
    async def test_trigger_event(self, mock_ctx, browser_session, session, mock_webdriver, mock_webelement):
        element_id = browser_session.register_node(Node(session, mock_webelement))

        await interaction.trigger_event.fn(
            mock_ctx, session_id="sess_test", element_id=element_id, event="mouseover"
        )

        mock_webdriver.execute_script.assert_any_call(scripts.TRIGGER, mock_webelement, "mouseover")


class TestScriptingTools:
    @pytest.mark.asyncio
    async def test_evaluate_script_registers_elements(self, mock_ctx, mock_webdriver, make_element):
        mock_webdriver.script_results[scripts.evaluate_script("document.body")] = make_element("body")

        result = await scripting.evaluate_script.fn(
            mock_ctx, session_id="sess_test", expression="document.body"
        )

        assert result["result"] == {"element_id": "elem_1"}

    @pytest.mark.asyncio
    async def test_execute_script_too_long(self, mock_ctx):
        with pytest.raises(ToolError, match="INVALID_ARGUMENT"):
            await scripting.execute_script.fn(
                mock_ctx, session_id="sess_test", script="x" * (scripting.MAX_SCRIPT_LENGTH + 1)
            )

    @pytest.mark.asyncio
    async def test_execute_script_resolves_element_ids(
        self, mock_ctx, browser_session, session, mock_webdriver, mock_webelement
    ):
        element_id = browser_session.register_node(Node(session, mock_webelement))

        await scripting.execute_script.fn(
            mock_ctx, session_id="sess_test", script="arguments[0].focus()", args=[element_id, "elem_x"]
        )

        mock_webdriver.execute_script.assert_any_call("arguments[0].focus()", mock_webelement, "elem_x")


class TestContextTools:
    @pytest.mark.asyncio
    async def test_switch_frame_top(self, mock_ctx, mock_webdriver):
        result = await context.switch_frame.fn(mock_ctx, session_id="sess_test", frame="top")

        mock_webdriver.switch_to.default_content.assert_called_once_with()
        assert result["success"] is True

    @pytest.mark.asyncio
    async def test_list_windows(self, mock_ctx, mock_webdriver):
        mock_webdriver.window_handles = ["window1", "window2"]

        result = await context.list_windows.fn(mock_ctx, session_id="sess_test")

        assert result["windows"] == [
            {"handle": "window1", "current": True},
            {"handle": "window2", "current": False},
        ]

    @pytest.mark.asyncio
    async def test_switch_window_needs_target(self, mock_ctx):
        with pytest.raises(ToolError, match="INVALID_ARGUMENT"):
            await context.switch_window.fn(mock_ctx, session_id="sess_test")

    @pytest.mark.asyncio
    async def test_respond_to_modal(self, mock_ctx, mock_webdriver):
        alert = MagicMock()
        alert.text = "Are you sure?"
        type(mock_webdriver.switch_to).alert = PropertyMock(return_value=alert)

        result = await context.respond_to_modal.fn(
            mock_ctx, session_id="sess_test", accept=False, expected_text="sure"
        )

        assert result["message"] == "Are you sure?"
        alert.dismiss.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_resize_viewport(self, mock_ctx, mock_webdriver):
        await context.resize_viewport.fn(mock_ctx, session_id="sess_test", width=640, height=480)

        mock_webdriver.execute_cdp_cmd.assert_called_once()
