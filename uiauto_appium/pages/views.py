# uiauto_appium/pages/views.py
from __future__ import annotations

from uiauto_core.config import TimeConfig
from uiauto_core.context import tracked_action
from uiauto_core.convergence import ConvergenceResult
from uiauto_core.locators import TargetDescriptor

from .base import BasePage


class ViewsPage(BasePage):
    """API Demos "Views" list: a long list scrolled until it stops moving."""

    screen_name = "views"
    TARGETS = {
        "views_menu": TargetDescriptor.of("views_menu", accessibility_id="Views", text="Views"),
    }

    @tracked_action("open_views")
    def open_views(self) -> None:
        self.tap_and_settle("views_menu", TimeConfig.current().navigation_pause)

    def scroll_to_bottom(self) -> ConvergenceResult:
        return self.scroll_to_end()

    def scroll_to_top(self) -> ConvergenceResult:
        return self.scroll_to_start()

    def is_text_visible(self, text: str) -> bool:
        """Whether an element whose text contains `text` is displayed right now."""
        return self.chain.is_visible(TargetDescriptor.of(f"text:{text}", text_contains=text))
