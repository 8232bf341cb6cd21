# tests/test_appium_driver.py
"""
Tests for the Appium driver facade against a mocked webdriver.
"""

from unittest.mock import MagicMock, PropertyMock, call

import pytest
from appium.webdriver.common.appiumby import AppiumBy
from selenium.common.exceptions import (InvalidSessionIdException,
                                        NoSuchElementException,
                                        StaleElementReferenceException,
                                        WebDriverException)

from uiauto_appium.driver import (AppiumDriver, AppiumElementHandle,
                                  is_session_lost, parse_selector)
from uiauto_core.convergence import Point, PointerPath
from uiauto_core.exceptions import SessionLostError


class TestParseSelector:

    @pytest.mark.parametrize("selector,expected", [
        ("~login_button", (AppiumBy.ACCESSIBILITY_ID, "login_button")),
        ("id=com.example.app:id/login_btn", (AppiumBy.ID, "com.example.app:id/login_btn")),
        ('android=new UiSelector().text("Login")', (AppiumBy.ANDROID_UIAUTOMATOR, 'new UiSelector().text("Login")')),
        ("xpath=//android.widget.Button", (AppiumBy.XPATH, "//android.widget.Button")),
        ("//android.widget.ListView", (AppiumBy.XPATH, "//android.widget.ListView")),
        ("class=android.widget.EditText", (AppiumBy.CLASS_NAME, "android.widget.EditText")),
    ])
    def test_prefixes(self, selector, expected):
        assert parse_selector(selector) == expected

    @pytest.mark.parametrize("selector", ["", "css=.button", "login_button"])
    def test_unsupported(self, selector):
        with pytest.raises(ValueError):
            parse_selector(selector)


class TestAppiumDriver:

    def test_resolve_returns_first_match(self):
        wd = MagicMock()
        first, second = MagicMock(), MagicMock()
        wd.find_elements.return_value = [first, second]

        handle = AppiumDriver(wd).resolve("~login_button")

        wd.find_elements.assert_called_once_with(AppiumBy.ACCESSIBILITY_ID, "login_button")
        assert isinstance(handle, AppiumElementHandle)
        assert handle.raw is first

    def test_resolve_no_match_is_none(self):
        wd = MagicMock()
        wd.find_elements.return_value = []
        assert AppiumDriver(wd).resolve("id=missing") is None

    def test_invalid_session_becomes_session_lost(self):
        wd = MagicMock()
        wd.find_elements.side_effect = InvalidSessionIdException("invalid session id")
        with pytest.raises(SessionLostError):
            AppiumDriver(wd).resolve("~x")

    def test_terminated_session_message_becomes_session_lost(self):
        wd = MagicMock()
        type(wd).page_source = PropertyMock(
            side_effect=WebDriverException("A session is either terminated or not started"))
        with pytest.raises(SessionLostError):
            AppiumDriver(wd).snapshot()

    def test_other_webdriver_errors_pass_through(self):
        wd = MagicMock()
        wd.find_elements.side_effect = WebDriverException("UiAutomator2 server crashed mid-call")
        with pytest.raises(WebDriverException) as exc_info:
            AppiumDriver(wd).resolve("~x")
        assert not isinstance(exc_info.value, SessionLostError)

    def test_snapshot_and_viewport(self):
        wd = MagicMock()
        wd.page_source = "<hierarchy/>"
        wd.get_window_size.return_value = {"width": 1080, "height": 2400}
        driver = AppiumDriver(wd)

        assert driver.snapshot() == "<hierarchy/>"
        assert driver.viewport_size() == (1080, 2400)

    def test_hide_keyboard_without_keyboard_is_ignored(self):
        wd = MagicMock()
        wd.hide_keyboard.side_effect = WebDriverException("Soft keyboard not present")
        AppiumDriver(wd).hide_keyboard()
        wd.hide_keyboard.assert_called_once()

    def test_hide_keyboard_session_lost(self):
        wd = MagicMock()
        wd.hide_keyboard.side_effect = InvalidSessionIdException("invalid session id")
        with pytest.raises(SessionLostError):
            AppiumDriver(wd).hide_keyboard()

    def test_device_helpers(self):
        wd = MagicMock()
        wd.current_activity = ".MainActivity"
        wd.current_package = "com.example.app"
        wd.get_screenshot_as_png.return_value = b"png"
        driver = AppiumDriver(wd)

        driver.back()
        driver.activate_app("com.example.app")
        driver.terminate_app("com.example.app")

        assert driver.current_activity == ".MainActivity"
        assert driver.current_package == "com.example.app"
        assert driver.screenshot_png() == b"png"
        wd.back.assert_called_once()
        wd.activate_app.assert_called_once_with("com.example.app")
        wd.terminate_app.assert_called_once_with("com.example.app")

    def test_perform_gesture_sends_touch_pointer_actions(self):
        wd = MagicMock()
        path = PointerPath((Point(500, 1600), Point(500, 400)), hold=1.0)

        AppiumDriver(wd).perform_gesture(path)

        wd.execute.assert_called_once()
        payload = wd.execute.call_args[0][1]
        touch = [a for a in payload["actions"] if a.get("parameters", {}).get("pointerType") == "touch"]
        assert len(touch) == 1
        steps = touch[0]["actions"]
        assert [s["type"] for s in steps] == ["pointerMove", "pointerDown", "pause", "pointerMove", "pointerUp"]
        assert (steps[0]["x"], steps[0]["y"]) == (500, 1600)
        assert (steps[3]["x"], steps[3]["y"]) == (500, 400)
        assert steps[2]["duration"] == 1000


class TestAppiumElementHandle:

    def test_stale_element_does_not_exist(self):
        element = MagicMock()
        element.is_displayed.side_effect = StaleElementReferenceException("stale")
        handle = AppiumElementHandle(element, "~x")

        assert handle.exists() is False
        assert handle.is_visible() is False

    def test_missing_element_is_not_enabled(self):
        element = MagicMock()
        element.is_enabled.side_effect = NoSuchElementException("gone")
        assert AppiumElementHandle(element, "~x").is_enabled() is False

    def test_set_text_clears_first(self):
        element = MagicMock()
        AppiumElementHandle(element, "~email_input").set_text("user@example.com")
        assert element.mock_calls[:2] == [call.clear(), call.send_keys("user@example.com")]

    def test_get_text_and_click(self):
        element = MagicMock()
        element.text = "Welcome back"
        handle = AppiumElementHandle(element, "~welcome")

        handle.click()
        assert handle.get_text() == "Welcome back"
        element.click.assert_called_once()

    def test_click_on_dead_session(self):
        element = MagicMock()
        element.click.side_effect = WebDriverException("invalid session id")
        with pytest.raises(SessionLostError):
            AppiumElementHandle(element, "~x").click()


def test_is_session_lost_markers():
    assert is_session_lost(WebDriverException("No such session"))
    assert not is_session_lost(WebDriverException("element not interactable"))
