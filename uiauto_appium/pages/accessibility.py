from __future__ import annotations

from typing import Optional

from uiauto_core.config import TimeConfig
from uiauto_core.context import tracked_action
from uiauto_core.locators import TargetDescriptor

from .base import BasePage

TALKBACK_MARKER = "Enable TalkBack"


class AccessibilityPage(BasePage):
    """API Demos Accessibility > Custom View screen and its TalkBack instructions."""

    screen_name = "accessibility"
    TARGETS = {
        "accessibility_menu": TargetDescriptor.of(
            "accessibility_menu", accessibility_id="Accessibility", text="Accessibility",
        ),
        "custom_view_menu": TargetDescriptor.of(
            "custom_view_menu", accessibility_id="Custom View", text="Custom View",
        ),
        "talkback_text": TargetDescriptor.from_locators("talkback_text", [
            {"text_contains": TALKBACK_MARKER},
            {"text_contains": "TalkBack"},
        ]),
    }

    def open_accessibility(self) -> None:
        self.tap_and_settle("accessibility_menu", TimeConfig.current().navigation_pause)

    @tracked_action("open_custom_view")
    def open_custom_view(self) -> None:
        """Accessibility > Custom View."""
        self.open_accessibility()
        self.tap_and_settle("custom_view_menu", TimeConfig.current().navigation_pause)

    def talkback_instructions(self, timeout: Optional[float] = None) -> str:
        """Full instruction text once it is on screen."""
        self.wait_visible("talkback_text", timeout=timeout)
        return self.read_text("talkback_text")

    def is_talkback_text_displayed(self) -> bool:
        return self.is_displayed("talkback_text")

    def page_mentions(self, text: str = TALKBACK_MARKER) -> bool:
        """Whether the current view tree contains text, even inside an unreadable node."""
        return text in self.driver.snapshot()
