"""Unit tests for Session navigation, finders, frames, windows and modals."""

import json
import re

import pytest
from unittest.mock import MagicMock, PropertyMock
from selenium.common.exceptions import NoAlertPresentException

from selenium_session.core.exceptions import (
    ElementNotFound,
    FrameNotFound,
    ModalNotFound,
    ObsoleteNode,
    StatusCodeUnavailable,
    WindowError,
)
from selenium_session.core.node import Node
from selenium_session.core.session import Session
from selenium_session.utils import scripts


class TestNavigation:
    def test_visit_relative_path_uses_app_host(self, session, mock_webdriver):
        session.visit("/ferrum/with_js")

        mock_webdriver.get.assert_called_once_with("http://app.test/ferrum/with_js")

    def test_visit_absolute_url(self, session, mock_webdriver):
        session.visit("http://other.test/page")

        mock_webdriver.get.assert_called_once_with("http://other.test/page")

    def test_visit_relative_without_app_host(self, mock_webdriver):
        session = Session(mock_webdriver, app_host="")

        with pytest.raises(ValueError, match="app_host"):
            session.visit("/ferrum/with_js")

    def test_visit_leaves_frames(self, session, mock_webdriver, make_element):
        session.switch_to_frame(make_element("frame"))

        session.visit("/")

        mock_webdriver.switch_to.default_content.assert_called_once_with()

    @pytest.mark.parametrize(
        "url, path",
        [
            ("http://app.test/ferrum/arbitrary_path/200/foo%20bar", "/ferrum/arbitrary_path/200/foo%20bar"),
            ("http://app.test", "/"),
            ("about:blank", None),
        ],
    )
    def test_current_path(self, session, mock_webdriver, url, path):
        mock_webdriver.current_url = url

        assert session.current_path == path

    def test_current_host(self, session):
        assert session.current_host == "http://app.test"

    def test_status_code_from_performance_log(self, session, mock_webdriver):
        mock_webdriver.get_log.return_value = [
            {
                "message": json.dumps({
                    "message": {
                        "method": "Network.responseReceived",
                        "params": {
                            "type": "Document",
                            "response": {"url": mock_webdriver.current_url, "status": 404, "headers": {}},
                        },
                    }
                })
            }
        ]

        assert session.status_code == 404

    def test_status_code_without_responses(self, session):
        with pytest.raises(StatusCodeUnavailable):
            session.status_code


class TestSynchronize:
    def test_retries_until_success(self, session):
        attempts = []

        def flaky():
            attempts.append(1)
            if len(attempts) < 3:
                raise ObsoleteNode()
            return "done"

        assert session.synchronize(flaky) == "done"
        assert len(attempts) == 3

    def test_reraises_last_error_after_timeout(self, session):
        def missing():
            raise ElementNotFound("css '#nope'")

        with pytest.raises(ElementNotFound):
            session.synchronize(missing, wait=0.05)

    def test_other_errors_are_not_retried(self, session):
        attempts = []

        def broken():
            attempts.append(1)
            raise ValueError("bad")

        with pytest.raises(ValueError):
            session.synchronize(broken)
        assert len(attempts) == 1

    def test_nested_calls_run_once(self, session):
        inner_attempts = []

        def inner():
            inner_attempts.append(1)
            raise ElementNotFound("x")

        def outer():
            return session.synchronize(inner)

        with pytest.raises(ElementNotFound):
            session.synchronize(outer, wait=0.05)
        assert len(inner_attempts) > 1
        assert session._synchronizing is False


class TestFinders:
    def test_find_waits_for_element(self, session, mock_webdriver, make_element):
        element = make_element("late")
        mock_webdriver.find_elements.side_effect = [[], [], [element]]

        assert session.find("#late").native is element

    def test_find_gives_up(self, session, mock_webdriver):
        mock_webdriver.find_elements.return_value = []

        with pytest.raises(ElementNotFound):
            session.find("#missing", wait=0.05)

    def test_find_all_without_counts_does_not_wait(self, session, mock_webdriver):
        mock_webdriver.find_elements.return_value = []

        assert session.find_all("li") == []
        assert mock_webdriver.find_elements.call_count == 1

    def test_find_all_with_count_waits(self, session, mock_webdriver, make_element):
        mock_webdriver.find_elements.side_effect = [[make_element("a")], [make_element("a"), make_element("b")]]

        assert len(session.find_all("li", count=2)) == 2

    def test_has_selector_and_has_no_selector(self, session, mock_webdriver, make_element):
        mock_webdriver.find_elements.return_value = [make_element("a"), make_element("b")]

        assert session.has_selector("li", count=2) is True
        assert session.has_selector("li", count=3, wait=0.05) is False
        assert session.has_no_selector("li", wait=0.05) is False
        assert session.has_css("li", minimum=1) is True

    def test_has_selector_never_raises_for_missing(self, session, mock_webdriver):
        mock_webdriver.find_elements.return_value = []

        assert session.has_selector("#missing", wait=0) is False
        assert session.has_no_selector("#missing") is True

    def test_has_content_uses_body_text(self, session, mock_webdriver, make_element):
        mock_webdriver.script_results[scripts.DOCUMENT_BODY] = make_element("body", tag="body", text="Hello world")

        assert session.has_content("world") is True
        assert session.has_content(re.compile(r"^Hello")) is True
        assert session.has_no_content("goodbye") is True

    def test_has_current_path(self, session, mock_webdriver):
        mock_webdriver.current_url = "http://app.test/ferrum/with_js?param=1"

        assert session.has_current_path("/ferrum/with_js") is True
        assert session.has_current_path("/ferrum/with_js?param=1") is True
        assert session.has_current_path(re.compile(r"with_js")) is True
        assert session.has_current_path("/other", wait=0.05) is False

    def test_within_scopes_finders(self, session, mock_webdriver, make_element):
        container = make_element("container")
        child = make_element("child")
        container.find_elements.return_value = [child]
        mock_webdriver.find_elements.return_value = [container]

        with session.within("#container"):
            assert session.find("span").native is child

        mock_webdriver.find_elements.return_value = [container]
        assert session.find("span").native is container


class TestScripting:
    def test_evaluate_script_wraps_elements(self, session, mock_webdriver, make_element):
        element = make_element("el")
        mock_webdriver.script_results[scripts.evaluate_script("document.body")] = element

        result = session.evaluate_script("document.body")

        assert isinstance(result, Node)
        assert result.native is element

    def test_evaluate_script_converts_nested(self, session, mock_webdriver, make_element):
        element = make_element("el")
        mock_webdriver.script_results[scripts.evaluate_script("value")] = {"a": [1, element]}

        result = session.evaluate_script("value")

        assert result["a"][0] == 1
        assert isinstance(result["a"][1], Node)

    def test_node_arguments_are_unwrapped(self, session, mock_webdriver, make_element):
        element = make_element("el")

        session.execute_script("arguments[0].click()", Node(session, element))

        mock_webdriver.execute_script.assert_any_call("arguments[0].click()", element)

    def test_execute_script_returns_nothing(self, session, mock_webdriver):
        mock_webdriver.script_results["return 1"] = 1

        assert session.execute_script("return 1") is None


class TestFrames:
    def test_switch_by_index(self, session, mock_webdriver, make_element):
        frames = [make_element("f0", tag="iframe"), make_element("f1", tag="iframe")]
        mock_webdriver.find_elements.return_value = frames

        session.switch_to_frame(1)

        mock_webdriver.switch_to.frame.assert_called_once_with(frames[1])

    def test_switch_by_name(self, session, mock_webdriver, make_element):
        frame = make_element("frame", tag="iframe")
        mock_webdriver.script_results[scripts.FIND_FRAME] = lambda name: frame if name == "frameOne" else None

        session.switch_to_frame("frameOne")

        mock_webdriver.switch_to.frame.assert_called_once_with(frame)

    def test_missing_frame(self, session, mock_webdriver):
        mock_webdriver.find_elements.return_value = []

        with pytest.raises(FrameNotFound):
            session.switch_to_frame(3)
        with pytest.raises(FrameNotFound):
            session.switch_to_frame("nope")

    def test_parent_without_frame(self, session):
        with pytest.raises(FrameNotFound):
            session.switch_to_frame("parent")

    def test_within_frame_switches_back(self, session, mock_webdriver, make_element):
        frame = make_element("frame", tag="iframe")

        with session.within_frame(frame):
            assert session._frames == [frame]

        mock_webdriver.switch_to.parent_frame.assert_called_once_with()
        assert session._frames == []

    def test_within_frame_restores_after_leaving_to_top(self, session, mock_webdriver, make_element):
        outer = make_element("outer", tag="iframe")
        inner = make_element("inner", tag="iframe")
        session.switch_to_frame(outer)

        with session.within_frame(inner):
            session.switch_to_frame("top")

        assert session._frames == [outer]
        mock_webdriver.switch_to.parent_frame.assert_not_called()
        mock_webdriver.switch_to.frame.assert_called_with(outer)

    def test_waits_for_frame_document(self, session, mock_webdriver, make_element):
        frame = make_element("frame", tag="iframe")
        states = iter([["loading", "about:blank"], ["complete", "about:blank"], ["complete", "http://app.test/slow"]])
        mock_webdriver.script_results[scripts.FRAME_SOURCE] = "/slow"
        mock_webdriver.script_results[scripts.DOCUMENT_STATE] = lambda: next(states)

        session.switch_to_frame(frame)

        assert next(states, None) is None


class TestWindows:
    def test_window_opened_by(self, session, mock_webdriver):
        def open_popup():
            mock_webdriver.window_handles = ["window1", "popup"]

        window = session.window_opened_by(open_popup)

        assert window.handle == "popup"

    def test_window_opened_by_requires_a_window(self, session):
        with pytest.raises(WindowError):
            session.window_opened_by(lambda: None, wait=0.05)

    def test_window_opened_by_rejects_several(self, session, mock_webdriver):
        def open_two():
            mock_webdriver.window_handles = ["window1", "a", "b"]

        with pytest.raises(WindowError, match="2 windows"):
            session.window_opened_by(open_two)

    def test_within_window_switches_back(self, session, mock_webdriver):
        mock_webdriver.window_handles = ["window1", "popup"]

        with session.within_window("popup") as window:
            assert window.handle == "popup"

        calls = [c.args[0] for c in mock_webdriver.switch_to.window.call_args_list]
        assert calls == ["popup", "window1"]

    def test_windows(self, session, mock_webdriver):
        mock_webdriver.window_handles = ["window1", "popup"]

        assert [w.handle for w in session.windows] == ["window1", "popup"]
        assert session.current_window.is_current


class TestModals:
    def test_respond_to_modal_accepts(self, session, mock_webdriver):
        alert = MagicMock()
        alert.text = "Are you sure?"
        type(mock_webdriver.switch_to).alert = PropertyMock(return_value=alert)

        message = session.respond_to_modal(accept=True, text="sure")

        assert message == "Are you sure?"
        alert.accept.assert_called_once_with()

    def test_prompt_response_and_dismiss(self, session, mock_webdriver):
        alert = MagicMock()
        alert.text = "Name?"
        type(mock_webdriver.switch_to).alert = PropertyMock(return_value=alert)

        with session.accept_prompt(with_="Capybara") as modal:
            pass

        alert.send_keys.assert_called_once_with("Capybara")
        alert.accept.assert_called_once_with()
        assert modal.message == "Name?"

    def test_text_mismatch(self, session, mock_webdriver):
        alert = MagicMock()
        alert.text = "Goodbye"
        type(mock_webdriver.switch_to).alert = PropertyMock(return_value=alert)

        with pytest.raises(ModalNotFound) as exc_info:
            session.respond_to_modal(text=re.compile("^Hello"))

        assert exc_info.value.actual == "Goodbye"
        alert.accept.assert_not_called()

    def test_no_modal(self, session, mock_webdriver):
        type(mock_webdriver.switch_to).alert = PropertyMock(side_effect=NoAlertPresentException())

        with pytest.raises(ModalNotFound):
            session.respond_to_modal(wait=0.05)


class TestLifecycle:
    def test_reset_closes_extra_windows(self, session, mock_webdriver):
        type(mock_webdriver.switch_to).alert = PropertyMock(side_effect=NoAlertPresentException())
        mock_webdriver.window_handles = ["window1", "popup"]

        def close():
            mock_webdriver.window_handles = ["window1"]

        mock_webdriver.close.side_effect = close

        session.reset()

        mock_webdriver.close.assert_called_once_with()
        mock_webdriver.delete_all_cookies.assert_called_once_with()
        mock_webdriver.get.assert_called_with("about:blank")

    def test_reset_adopts_a_window_when_main_is_closed(self, session, mock_webdriver):
        type(mock_webdriver.switch_to).alert = PropertyMock(side_effect=NoAlertPresentException())
        mock_webdriver.window_handles = ["win2", "win3"]

        def close():
            mock_webdriver.window_handles = ["win2"]

        mock_webdriver.close.side_effect = close

        session.reset()

        mock_webdriver.close.assert_called_once_with()
        mock_webdriver.switch_to.window.assert_called_with("win2")
        assert session._main_window == "win2"

    def test_quit_leaves_borrowed_driver(self, session, mock_webdriver):
        session.quit()

        mock_webdriver.quit.assert_not_called()

    def test_owned_driver_is_created_and_quit(self, mock_driver_factory, mock_webdriver):
        session = Session(driver_factory=mock_driver_factory, window_size=(800, 600))

        mock_driver_factory.create.assert_called_once()
        mock_webdriver.execute_cdp_cmd.assert_called_once_with(
            "Emulation.setDeviceMetricsOverride",
            {"width": 800, "height": 600, "deviceScaleFactor": 0, "mobile": False},
        )

        session.quit()
        mock_webdriver.quit.assert_called_once_with()


class TestScreenshots:
    def test_save_screenshot_writes_png(self, session, mock_webdriver, tmp_path):
        mock_webdriver.get_screenshot_as_png.return_value = b"\x89PNG"
        path = tmp_path / "shot.png"

        result = session.save_screenshot(path)

        assert result == str(path)
        assert path.read_bytes() == b"\x89PNG"
