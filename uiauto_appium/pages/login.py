# uiauto_appium/pages/login.py
from __future__ import annotations

from typing import Optional

from uiauto_core.config import TimeConfig
from uiauto_core.context import tracked_action
from uiauto_core.locators import TargetDescriptor
from uiauto_core.waits import clamp_schedule, wait_for_any

from .base import BasePage
from .home import HomePage


class LoginPage(BasePage):
    """Login screen: email, password, login button and the error banner."""

    screen_name = "login"
    TARGETS = {
        "email_input": TargetDescriptor.of(
            "email_input",
            accessibility_id="email_input",
            resource_id="com.example.app:id/email_field",
            uiautomator='new UiSelector().className("android.widget.EditText").instance(0)',
        ),
        "password_input": TargetDescriptor.of(
            "password_input",
            accessibility_id="password_input",
            resource_id="com.example.app:id/password_field",
            uiautomator='new UiSelector().className("android.widget.EditText").instance(1)',
        ),
        "login_button": TargetDescriptor.of(
            "login_button",
            accessibility_id="login_button",
            resource_id="com.example.app:id/login_btn",
            text="Login",
        ),
        "error_message": TargetDescriptor.of(
            "error_message",
            accessibility_id="error_message",
            resource_id="com.example.app:id/error_text",
            uiautomator='new UiSelector().className("android.widget.TextView").textContains("Error")',
        ),
    }

    def enter_email(self, email: str) -> None:
        self.set_value("email_input", email)

    def enter_password(self, password: str) -> None:
        self.set_value("password_input", password)

    def click_login(self) -> None:
        self.click("login_button")

    @tracked_action("login", target="login_form")
    def login(self, email: str, password: str) -> None:
        """Fill both fields, dismiss the keyboard, tap Login once."""
        self.enter_email(email)
        self.enter_password(password)
        self.hide_keyboard()
        self.click_login()

    def login_and_wait(self, email: str, password: str, timeout: Optional[float] = None) -> str:
        """
        Log in, then wait for whichever screen answers first.

        @return "home" when the home title shows, "error" when the error banner does
        @throws ConditionTimeout if neither appears
        """
        self.login(email, password)

        home = HomePage(self.driver, self.repo, chain=self.chain, artifacts_dir=self.artifacts_dir)
        config = TimeConfig.current().wait_for_any
        timeout, interval = clamp_schedule(config.timeout if timeout is None else timeout, config.interval)
        index = wait_for_any(
            [lambda: home.is_displayed(), lambda: self.is_error_displayed()],
            timeout=timeout,
            interval=interval,
            descriptions=["home title visible", "login error visible"],
            stage="precondition",
        )
        return ("home", "error")[index]

    def is_error_displayed(self) -> bool:
        return self.is_displayed("error_message")

    def error_text(self) -> str:
        return self.read_text("error_message")

    def is_displayed(self, target=None) -> bool:
        """With no target: whether the login form (both fields and the button) is on screen."""
        if target is not None:
            return super().is_displayed(target)
        return all(
            super(LoginPage, self).is_displayed(name)
            for name in ("email_input", "password_input", "login_button")
        )
