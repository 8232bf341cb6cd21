# uiauto_appium/pages/home.py
from __future__ import annotations

from typing import Optional

from uiauto_core.config import TimeConfig
from uiauto_core.locators import TargetDescriptor

from .base import BasePage


class HomePage(BasePage):
    """Screen shown after a successful login."""

    screen_name = "home"
    TARGETS = {
        "home_title": TargetDescriptor.of(
            "home_title",
            accessibility_id="home_title",
            resource_id="com.example.app:id/home_title",
            text="Home",
        ),
        "welcome_message": TargetDescriptor.of(
            "welcome_message",
            accessibility_id="welcome_message",
            resource_id="com.example.app:id/welcome_text",
            text_contains="Welcome",
        ),
        "menu_button": TargetDescriptor.of(
            "menu_button",
            accessibility_id="menu_button",
            resource_id="com.example.app:id/menu_btn",
            uiautomator='new UiSelector().description("Menu")',
        ),
        "logout_button": TargetDescriptor.of(
            "logout_button",
            accessibility_id="logout_button",
            resource_id="com.example.app:id/logout_btn",
            text="Logout",
        ),
    }

    def is_displayed(self, target=None) -> bool:
        """With no target: whether the home title is on screen."""
        return super().is_displayed(target or "home_title")

    def title_text(self) -> str:
        return self.read_text("home_title")

    def welcome_text(self) -> str:
        return self.read_text("welcome_message")

    def wait_until_loaded(self, timeout: Optional[float] = None) -> None:
        """Wait for the home title (page_load timeout, 15s by default)."""
        if timeout is None:
            timeout = TimeConfig.current().page_load.timeout
        self.wait_visible("home_title", timeout=timeout)

    def open_menu(self) -> None:
        self.click("menu_button")

    def logout(self) -> None:
        self.open_menu()
        self.click("logout_button")

    def verify_logged_in(self) -> bool:
        return self.is_displayed()
