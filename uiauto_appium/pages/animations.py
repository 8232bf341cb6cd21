# uiauto_appium/pages/animations.py
from __future__ import annotations

from uiauto_core.locators import TargetDescriptor

from .base import BasePage

BUTTON_COUNT = 4


def _button(index: int) -> TargetDescriptor:
    if not 0 <= index < BUTTON_COUNT:
        raise ValueError(f"Button index must be 0..{BUTTON_COUNT - 1}, got {index}")
    return TargetDescriptor.of(f"button_{index}", text=str(index))


class AnimationsPage(BasePage):
    """API Demos Animation > Hide-Show Animations screen."""

    screen_name = "animations"
    TARGETS = {
        "animation_menu": TargetDescriptor.of(
            "animation_menu", accessibility_id="Animation", text="Animation",
        ),
        "hide_show_menu": TargetDescriptor.of(
            "hide_show_menu", accessibility_id="Hide-Show Animations", text="Hide-Show Animations",
        ),
        "show_buttons": TargetDescriptor.of("show_buttons", text="Show Buttons"),
    }
    TARGETS.update({f"button_{i}": _button(i) for i in range(BUTTON_COUNT)})

    def open_animation(self) -> None:
        self.click("animation_menu")

    def open_hide_show(self) -> None:
        self.click("hide_show_menu")

    def tap_button(self, index: int) -> None:
        """Tap a button; it animates out, so settle before the next query."""
        self.tap_and_settle(_button(index).name)

    def tap_show_buttons(self) -> None:
        self.tap_and_settle("show_buttons")

    def is_button_displayed(self, index: int) -> bool:
        return self.is_displayed(_button(index).name)
