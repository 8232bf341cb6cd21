"""
@file element.py
@brief Lazily-resolved target element with built-in waits and retries.

A TargetElement never keeps a device handle. Every state query and action
resolves the target afresh through the LocatorChain, so a re-rendered view
or a changed resource id is picked up without any staleness handling.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, TypeVar

from .config import TimeConfig
from .context import ActionContextManager
from .exceptions import (ActionError, ConditionTimeout, ElementNotEnabledError,
                         ElementNotFound, ElementNotVisibleError,
                         SessionLostError)
from .interfaces import IElementHandle
from .locators import LocatorChain, TargetDescriptor
from .waits import retry

T = TypeVar("T")

# Called with the failing action name; returns artifact paths to attach
FailureHook = Callable[[str], Dict[str, str]]


class TargetElement:
    """
    A named target bound to a locator chain.

    Actions wait for the right precondition first (visible for reads,
    visible and enabled for input), then run the facade call under retry
    using the TimeConfig `*_action` settings. Any failure is raised as
    ActionError with the underlying cause attached.
    """

    def __init__(
        self,
        chain: LocatorChain,
        descriptor: TargetDescriptor,
        screen_name: Optional[str] = None,
        on_failure: Optional[FailureHook] = None,
    ):
        """
        @param chain Locator chain used for every resolution
        @param descriptor Target descriptor
        @param screen_name Screen the target belongs to (for traces)
        @param on_failure Optional artifact hook called before ActionError is raised
        """
        self._chain = chain
        self._descriptor = descriptor
        self._screen_name = screen_name
        self._on_failure = on_failure

    @property
    def name(self) -> str:
        return self._descriptor.name

    @property
    def descriptor(self) -> TargetDescriptor:
        return self._descriptor

    def __repr__(self) -> str:
        return f"TargetElement({self.name!r}, strategies={len(self._descriptor.strategies)})"

    # --- State Queries ---

    def resolve(self) -> IElementHandle:
        """Resolve the target now. @throws ElementNotFound"""
        return self._chain.resolve_target(self._descriptor)

    def exists(self) -> bool:
        return self._chain.exists(self._descriptor)

    def is_visible(self) -> bool:
        return self._chain.is_visible(self._descriptor)

    def is_enabled(self) -> bool:
        try:
            return bool(self.resolve().is_enabled())
        except SessionLostError:
            raise
        except Exception:
            return False

    # --- Wait Operations ---

    def wait(self, state: str = "visible", timeout: Optional[float] = None) -> TargetElement:
        """
        Wait for the target to reach a state.

        @param state One of: "exists", "visible", "enabled"
        @param timeout Override timeout
        @return self for chaining
        @throws ConditionTimeout
        """
        self._chain.wait_for(self._descriptor, state=state, timeout=timeout)
        return self

    def wait_until_visible(self, timeout: Optional[float] = None) -> TargetElement:
        return self.wait("visible", timeout)

    def wait_until_enabled(self, timeout: Optional[float] = None) -> TargetElement:
        return self.wait("enabled", timeout)

    def wait_until_gone(self, timeout: Optional[float] = None) -> None:
        self._chain.wait_until_gone(self._descriptor, timeout=timeout)

    def _ensure_visible(self, timeout: Optional[float] = None) -> None:
        try:
            self.wait("visible", timeout)
        except ConditionTimeout as e:
            raise ElementNotVisibleError(
                self.name,
                f"Target did not become visible within {e.timeout}s"
            ) from e

    def _ensure_enabled(self, timeout: Optional[float] = None) -> None:
        try:
            self.wait("enabled", timeout)
        except ConditionTimeout as e:
            raise ElementNotEnabledError(
                self.name,
                f"Target did not become enabled within {e.timeout}s"
            ) from e

    # --- Action Plumbing ---

    def _fail(self, action_name: str, details: str, cause: Optional[BaseException]) -> ActionError:
        artifacts: Dict[str, str] = {}
        if self._on_failure is not None:
            artifacts = self._on_failure(f"{action_name}_{self.name}")
        context = ActionContextManager.current()
        return ActionError(
            action=action_name,
            target_name=self.name,
            details=details,
            artifacts=artifacts,
            cause=cause,
            trace=context.format_trace() if context is not None else None,
        )

    def _perform(self, action_name: str, action: Callable[[IElementHandle], T], precondition: str) -> T:
        """
        Wait for the precondition, then run action(handle) with retry. Each
        attempt re-resolves the handle.
        """
        config = TimeConfig.current().get_action_settings(action_name)

        with ActionContextManager.action(action_name, target_name=self.name, screen_name=self._screen_name):
            try:
                if precondition == "enabled":
                    self._ensure_enabled()
                else:
                    self._ensure_visible()
            except (ElementNotVisibleError, ElementNotEnabledError) as e:
                cause = e.__cause__
                if isinstance(cause, ConditionTimeout) and isinstance(cause.original_exception, ElementNotFound):
                    cause = cause.original_exception
                raise self._fail(action_name, str(e), cause or e) from e

            try:
                return retry(
                    lambda: action(self.resolve()),
                    max_attempts=config.retry_count or 1,
                    interval=config.interval,
                    description=f"{action_name} on '{self.name}'",
                    stage="execute",
                )
            except ConditionTimeout as e:
                original = e.original_exception
                raise self._fail(
                    action_name,
                    str(original) if original else str(e),
                    original,
                ) from e

    # --- Actions ---

    def click(self) -> TargetElement:
        """Tap the target once it is visible and enabled."""
        self._perform("click", lambda h: h.click(), precondition="enabled")
        return self

    def set_text(self, text: str) -> TargetElement:
        """Replace the target's text once it is visible and enabled."""
        self._perform("set_text", lambda h: h.set_text(text), precondition="enabled")
        return self

    def get_text(self) -> str:
        """Visible text of the target."""
        return self._perform("get_text", lambda h: h.get_text() or "", precondition="visible")

    def call(self, action_name: str, func: Callable[[IElementHandle], Any]) -> Any:
        """Run an arbitrary handle operation with the same waits and retries."""
        return self._perform(action_name, func, precondition="visible")
