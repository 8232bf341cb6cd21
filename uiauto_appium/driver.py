# uiauto_appium/driver.py
"""
@file driver.py
@brief Appium (UiAutomator2) implementation of the driver facade.

Wraps an already-open Appium webdriver session. Selector strings use the
prefix convention produced by uiauto_core.locators.encode_selector:

    ~login_button                               accessibility id
    id=com.example.app:id/login_btn             resource id
    android=new UiSelector().text("Login")      UiAutomator query
    xpath=//android.widget.Button | //...       xpath
    class=android.widget.EditText               class name
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Generator, Optional, Tuple

from appium.webdriver.common.appiumby import AppiumBy
from selenium.common.exceptions import (InvalidSessionIdException,
                                        NoSuchElementException,
                                        StaleElementReferenceException,
                                        WebDriverException)
from selenium.webdriver.common.action_chains import ActionChains
from selenium.webdriver.common.actions import interaction
from selenium.webdriver.common.actions.action_builder import ActionBuilder
from selenium.webdriver.common.actions.pointer_input import PointerInput

from uiauto_core.convergence import PointerPath
from uiauto_core.exceptions import SessionLostError
from uiauto_core.interfaces import IDriverFacade, IElementHandle

_SESSION_LOST_MARKERS = (
    "invalid session id",
    "session is either terminated or not started",
    "no such session",
    "session not created",
    "instrumentation process is not running",
)

_GONE = (StaleElementReferenceException, NoSuchElementException)


def is_session_lost(error: BaseException) -> bool:
    """True when a webdriver error means the device session is gone."""
    if isinstance(error, InvalidSessionIdException):
        return True
    text = str(error).lower()
    return any(marker in text for marker in _SESSION_LOST_MARKERS)


@contextmanager
def session_guard(action: str) -> Generator[None, None, None]:
    """Re-raise session-terminated webdriver errors as SessionLostError."""
    try:
        yield
    except WebDriverException as e:
        if is_session_lost(e):
            raise SessionLostError(f"{action}: device session lost ({type(e).__name__}: {e})") from e
        raise


def parse_selector(selector: str) -> Tuple[str, str]:
    """
    Split a prefixed selector into an (AppiumBy strategy, value) pair.

    @throws ValueError for an empty or unknown selector
    """
    if not selector:
        raise ValueError("Empty selector")
    if selector.startswith("~"):
        return AppiumBy.ACCESSIBILITY_ID, selector[1:]
    if selector.startswith("id="):
        return AppiumBy.ID, selector[3:]
    if selector.startswith("android="):
        return AppiumBy.ANDROID_UIAUTOMATOR, selector[8:]
    if selector.startswith("xpath="):
        return AppiumBy.XPATH, selector[6:]
    if selector.startswith("//") or selector.startswith("(/"):
        return AppiumBy.XPATH, selector
    if selector.startswith("class="):
        return AppiumBy.CLASS_NAME, selector[6:]
    raise ValueError(f"Unsupported selector: {selector!r}")


class AppiumElementHandle(IElementHandle):
    """Handle around one selenium WebElement found by AppiumDriver.resolve."""

    def __init__(self, element: Any, selector: str):
        self._element = element
        self.selector = selector

    @property
    def raw(self) -> Any:
        return self._element

    def __repr__(self) -> str:
        return f"AppiumElementHandle({self.selector!r})"

    def exists(self) -> bool:
        with session_guard(f"exists {self.selector}"):
            try:
                self._element.is_displayed()
                return True
            except _GONE:
                return False

    def is_visible(self) -> bool:
        with session_guard(f"is_visible {self.selector}"):
            try:
                return bool(self._element.is_displayed())
            except _GONE:
                return False

    def is_enabled(self) -> bool:
        with session_guard(f"is_enabled {self.selector}"):
            try:
                return bool(self._element.is_enabled())
            except _GONE:
                return False

    def click(self) -> None:
        with session_guard(f"click {self.selector}"):
            self._element.click()

    def set_text(self, text: str) -> None:
        with session_guard(f"set_text {self.selector}"):
            self._element.clear()
            self._element.send_keys(text)

    def get_text(self) -> str:
        with session_guard(f"get_text {self.selector}"):
            return self._element.text or ""


class AppiumDriver(IDriverFacade):
    """
    Driver facade over an Appium-Python-Client webdriver.

    Session creation and capabilities belong to the caller; this class only
    drives an open session.
    """

    def __init__(self, webdriver: Any, logger: Optional[logging.Logger] = None):
        """
        @param webdriver Open appium.webdriver.Remote session
        @param logger Logger for facade calls
        """
        self.webdriver = webdriver
        self.log = logger or logging.getLogger("uiauto")

    # --- Facade ---

    def resolve(self, selector: str) -> Optional[AppiumElementHandle]:
        by, value = parse_selector(selector)
        with session_guard(f"resolve {selector}"):
            elements = self.webdriver.find_elements(by, value)
        if not elements:
            return None
        return AppiumElementHandle(elements[0], selector)

    def snapshot(self) -> str:
        with session_guard("page_source"):
            return self.webdriver.page_source

    def perform_gesture(self, path: PointerPath) -> None:
        """
        W3C touch action: move to the first point, press, hold, move through
        the rest, release.
        """
        self.log.debug("Gesture %s -> %s hold=%.2fs", path.start, path.end, path.hold)
        actions = ActionChains(self.webdriver)
        actions.w3c_actions = ActionBuilder(
            self.webdriver,
            mouse=PointerInput(interaction.POINTER_TOUCH, "touch"),
            duration=int(path.move_duration * 1000),
        )
        pointer = actions.w3c_actions.pointer_action
        pointer.move_to_location(path.start.x, path.start.y)
        pointer.pointer_down()
        if path.hold > 0:
            pointer.pause(path.hold)
        for point in path.points[1:]:
            pointer.move_to_location(point.x, point.y)
        pointer.pointer_up()
        with session_guard("perform_gesture"):
            actions.perform()

    def viewport_size(self) -> Tuple[int, int]:
        with session_guard("get_window_size"):
            size = self.webdriver.get_window_size()
        return int(size["width"]), int(size["height"])

    # --- Device helpers ---

    def back(self) -> None:
        with session_guard("back"):
            self.webdriver.back()

    def hide_keyboard(self) -> None:
        """Dismiss the soft keyboard; no keyboard on screen is not an error."""
        try:
            with session_guard("hide_keyboard"):
                self.webdriver.hide_keyboard()
        except SessionLostError:
            raise
        except WebDriverException as e:
            self.log.debug("hide_keyboard ignored: %s", e)

    @property
    def current_activity(self) -> str:
        with session_guard("current_activity"):
            return self.webdriver.current_activity

    @property
    def current_package(self) -> str:
        with session_guard("current_package"):
            return self.webdriver.current_package

    def screenshot_png(self) -> bytes:
        with session_guard("screenshot"):
            return self.webdriver.get_screenshot_as_png()

    def terminate_app(self, app_id: str) -> bool:
        with session_guard(f"terminate_app {app_id}"):
            return bool(self.webdriver.terminate_app(app_id))

    def activate_app(self, app_id: str) -> None:
        with session_guard(f"activate_app {app_id}"):
            self.webdriver.activate_app(app_id)
