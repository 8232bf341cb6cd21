# uiauto_appium/__init__.py
"""Appium/UiAutomator2 backend: driver facade, page objects and CLI."""

from .driver import AppiumDriver, AppiumElementHandle, parse_selector
from .artifacts import capture_screenshot, dump_page_source, make_artifacts
from .pages import (AccessibilityPage, AnimationsPage, BasePage, HomePage,
                    LoginPage, ViewsPage)

__version__ = "1.0.0"

__all__ = [
    "AppiumDriver",
    "AppiumElementHandle",
    "parse_selector",
    "capture_screenshot",
    "dump_page_source",
    "make_artifacts",
    "BasePage",
    "LoginPage",
    "HomePage",
    "ViewsPage",
    "AnimationsPage",
    "AccessibilityPage",
]
