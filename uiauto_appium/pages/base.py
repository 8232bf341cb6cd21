# uiauto_appium/pages/base.py
"""
@file base.py
@brief Base page object: named targets, resilient actions and gestures.

Each page declares its targets in TARGETS as TargetDescriptors. When a
Repository (elements.yaml) is supplied, an object-map entry with the same
name overrides the built-in descriptor, so locators can be corrected
without touching code.
"""

from __future__ import annotations

import logging
import time
from typing import Dict, Optional, Union

from uiauto_core.config import TimeConfig
from uiauto_core.context import tracked_action
from uiauto_core.convergence import (ConvergenceResult, Direction, Point,
                                     PointerPath, Viewport,
                                     scroll_until_found, scroll_until_stable,
                                     settle_after, swipe_path)
from uiauto_core.element import TargetElement
from uiauto_core.exceptions import ConfigError
from uiauto_core.locators import LocatorChain, TargetDescriptor
from uiauto_core.repository import Repository

from ..artifacts import capture_screenshot, make_artifacts
from ..driver import AppiumDriver

Target = Union[str, TargetDescriptor]


class BasePage:
    """Common page behaviour shared by every screen."""

    screen_name: Optional[str] = None
    TARGETS: Dict[str, TargetDescriptor] = {}

    def __init__(
        self,
        driver: AppiumDriver,
        repo: Optional[Repository] = None,
        chain: Optional[LocatorChain] = None,
        artifacts_dir: Optional[str] = None,
    ):
        """
        @param driver Appium driver facade
        @param repo Optional object map whose targets override TARGETS; its app
                    timing is installed as the run config
        @param chain Locator chain (built over driver if None)
        @param artifacts_dir Where failure artifacts go (repo.app.artifacts_dir if None;
                             no capture when both are unset)
        """
        self.driver = driver
        self.repo = repo
        self.chain = chain or LocatorChain(driver)
        if repo is not None:
            TimeConfig.install_run_config(repo.time_config())
            if artifacts_dir is None:
                artifacts_dir = repo.app.artifacts_dir
        self.artifacts_dir = artifacts_dir
        self.log = logging.getLogger("uiauto")

    # --- Targets ---

    def target(self, name: str) -> TargetDescriptor:
        """Object-map descriptor if present, else the page's built-in one."""
        if self.repo is not None and self.repo.has_target(name):
            return self.repo.target(name)
        if name in self.TARGETS:
            return self.TARGETS[name]
        raise ConfigError(f"{type(self).__name__}: unknown target '{name}'")

    def element(self, target: Target) -> TargetElement:
        descriptor = target if isinstance(target, TargetDescriptor) else self.target(target)
        return TargetElement(
            self.chain,
            descriptor,
            screen_name=self.screen_name,
            on_failure=self._capture_failure,
        )

    def _capture_failure(self, prefix: str) -> Dict[str, str]:
        if not self.artifacts_dir:
            return {}
        return make_artifacts(self.driver, self.artifacts_dir, prefix)

    # --- Element actions ---

    @tracked_action()
    def wait_visible(self, target: Target, timeout: Optional[float] = None) -> TargetElement:
        return self.element(target).wait("visible", timeout)

    @tracked_action()
    def wait_clickable(self, target: Target, timeout: Optional[float] = None) -> TargetElement:
        return self.element(target).wait("enabled", timeout)

    @tracked_action()
    def click(self, target: Target) -> None:
        self.element(target).click()

    @tracked_action()
    def set_value(self, target: Target, value: str) -> None:
        """Clear the field, then type value."""
        self.element(target).set_text(value)

    @tracked_action()
    def read_text(self, target: Target) -> str:
        return self.element(target).get_text()

    def is_displayed(self, target: Target) -> bool:
        return self.element(target).is_visible()

    def is_existing(self, target: Target) -> bool:
        return self.element(target).exists()

    # --- Gestures ---

    def _viewport(self) -> Viewport:
        return Viewport(*self.driver.viewport_size())

    @tracked_action()
    def swipe(self, start: Point, end: Point, hold: Optional[float] = None) -> None:
        """Press at start, hold, drag to end, release."""
        if hold is None:
            hold = TimeConfig.current().swipe_hold_pause
        self.driver.perform_gesture(PointerPath((start, end), hold=hold))

    def swipe_up(self) -> None:
        """Finger moves up (80% -> 20% of the height): content below comes into view."""
        path = swipe_path(Direction.DOWN, self._viewport(), hold=TimeConfig.current().swipe_hold_pause)
        self.swipe(path.start, path.end, hold=path.hold)

    def swipe_down(self) -> None:
        """Finger moves down (20% -> 80% of the height): content above comes into view."""
        path = swipe_path(Direction.UP, self._viewport(), hold=TimeConfig.current().swipe_hold_pause)
        self.swipe(path.start, path.end, hold=path.hold)

    @tracked_action()
    def scroll_to_end(self, max_attempts: Optional[int] = None) -> ConvergenceResult:
        return scroll_until_stable(self.driver, Direction.DOWN, max_attempts=max_attempts)

    @tracked_action()
    def scroll_to_start(self, max_attempts: Optional[int] = None) -> ConvergenceResult:
        return scroll_until_stable(self.driver, Direction.UP, max_attempts=max_attempts)

    @tracked_action()
    def scroll_to(self, target: Target, direction: Direction = Direction.DOWN) -> bool:
        """Scroll until target resolves; False when the content ran out first."""
        descriptor = target if isinstance(target, TargetDescriptor) else self.target(target)
        result = scroll_until_found(self.driver, self.chain, descriptor, direction)
        return result.reason == "found"

    @tracked_action()
    def tap_and_settle(self, target: Target, delay: Optional[float] = None) -> None:
        """Tap a control whose effect has no completion signal, then pause."""
        settle_after(lambda: self.element(target).click(), delay)

    # --- Device ---

    def hide_keyboard(self) -> None:
        self.driver.hide_keyboard()

    def go_back(self) -> None:
        self.driver.back()

    def pause(self, seconds: Optional[float] = None) -> None:
        if seconds is None:
            seconds = TimeConfig.current().navigation_pause
        if seconds > 0:
            time.sleep(seconds)

    def take_screenshot(self, name: str, out_dir: str = "screenshots") -> str:
        path = capture_screenshot(self.driver, out_dir, name)
        self.log.info("Screenshot saved: %s", path)
        return path
