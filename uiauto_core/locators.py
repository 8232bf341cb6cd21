"""
@file locators.py
@brief Target descriptors and the ordered locator strategy chain.

A TargetDescriptor names one logical UI target through up to four addressing
schemes, most stable first:

    accessibility_id  stable semantic id (content-desc / accessibility label)
    resource_id       platform resource id (com.app:id/login_btn)
    uiautomator       structural query (new UiSelector().className(...).instance(1))
    text/text_contains  literal or partial visible text

LocatorChain resolves a descriptor by trying each strategy in order and
returning the first handle that exists. Handles are never cached; every call
resolves against the live screen.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .config import TimeConfig
from .context import ActionContextManager
from .exceptions import (ConfigError, ElementNotFound, LocatorAttempt,
                         SessionLostError)
from .interfaces import IDriverFacade, IElementHandle
from .waits import clamp_schedule, wait_until, wait_until_not


class StrategyKind(str, Enum):
    ACCESSIBILITY_ID = "accessibility_id"
    RESOURCE_ID = "resource_id"
    UIAUTOMATOR = "uiautomator"
    TEXT = "text"
    TEXT_CONTAINS = "text_contains"


# Canonical priority used by TargetDescriptor.of()
STRATEGY_PRIORITY: Tuple[StrategyKind, ...] = (
    StrategyKind.ACCESSIBILITY_ID,
    StrategyKind.RESOURCE_ID,
    StrategyKind.UIAUTOMATOR,
    StrategyKind.TEXT,
    StrategyKind.TEXT_CONTAINS,
)

_KEY_ALIASES: Dict[str, StrategyKind] = {
    "accessibility_id": StrategyKind.ACCESSIBILITY_ID,
    "accessibilityId": StrategyKind.ACCESSIBILITY_ID,
    "resource_id": StrategyKind.RESOURCE_ID,
    "resourceId": StrategyKind.RESOURCE_ID,
    "uiautomator": StrategyKind.UIAUTOMATOR,
    "uiAutomator": StrategyKind.UIAUTOMATOR,
    "text": StrategyKind.TEXT,
    "text_contains": StrategyKind.TEXT_CONTAINS,
    "textContains": StrategyKind.TEXT_CONTAINS,
}


@dataclass(frozen=True)
class Strategy:
    """One (kind, value) addressing pair."""
    kind: StrategyKind
    value: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", StrategyKind(self.kind))
        if not isinstance(self.value, str) or not self.value:
            raise ConfigError(f"{self.kind.value}: strategy value must be a non-empty string")

    def __str__(self) -> str:
        return f"{self.kind.value}={self.value!r}"


@dataclass(frozen=True)
class TargetDescriptor:
    """Ordered strategies for one logical target. At least one is required."""
    name: str
    strategies: Tuple[Strategy, ...]

    def __post_init__(self) -> None:
        strategies = tuple(self.strategies)
        if not strategies:
            raise ConfigError(f"Target '{self.name}' needs at least one locator strategy")
        for s in strategies:
            if not isinstance(s, Strategy):
                raise ConfigError(f"Target '{self.name}': expected Strategy, got {type(s).__name__}")
        object.__setattr__(self, "strategies", strategies)

    @classmethod
    def of(
        cls,
        name: str,
        *,
        accessibility_id: Optional[str] = None,
        resource_id: Optional[str] = None,
        uiautomator: Optional[str] = None,
        text: Optional[str] = None,
        text_contains: Optional[str] = None,
    ) -> TargetDescriptor:
        """Build with the canonical priority order; None values are skipped."""
        given = {
            StrategyKind.ACCESSIBILITY_ID: accessibility_id,
            StrategyKind.RESOURCE_ID: resource_id,
            StrategyKind.UIAUTOMATOR: uiautomator,
            StrategyKind.TEXT: text,
            StrategyKind.TEXT_CONTAINS: text_contains,
        }
        return cls(name, tuple(Strategy(k, given[k]) for k in STRATEGY_PRIORITY if given[k] is not None))

    @classmethod
    def from_mapping(cls, name: str, mapping: Mapping[str, Any]) -> TargetDescriptor:
        """
        Build from {"accessibilityId": ..., "resourceId": ..., ...}, keeping
        the mapping's order as priority.
        """
        strategies = []
        for key, value in mapping.items():
            kind = _KEY_ALIASES.get(key)
            if kind is None:
                raise ConfigError(f"Target '{name}': unknown locator key '{key}'")
            strategies.append(Strategy(kind, value))
        return cls(name, tuple(strategies))

    @classmethod
    def from_locators(cls, name: str, locators: List[Mapping[str, Any]]) -> TargetDescriptor:
        """Build from a list of single-key mappings (object map form)."""
        strategies = []
        for i, locator in enumerate(locators):
            if not isinstance(locator, Mapping) or len(locator) != 1:
                raise ConfigError(f"Target '{name}': locators[{i}] must be a single-key mapping")
            strategies.extend(cls.from_mapping(name, locator).strategies)
        return cls(name, tuple(strategies))


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def encode_selector(strategy: Strategy) -> str:
    """
    Default selector strings, in the Appium/WebdriverIO prefix convention
    understood by uiauto_appium.AppiumDriver.
    """
    kind, value = strategy.kind, strategy.value
    if kind is StrategyKind.ACCESSIBILITY_ID:
        return f"~{value}"
    if kind is StrategyKind.RESOURCE_ID:
        return f"id={value}"
    if kind is StrategyKind.UIAUTOMATOR:
        return f"android={value}"
    if kind is StrategyKind.TEXT:
        return f'android=new UiSelector().text("{_quote(value)}")'
    return f'android=new UiSelector().textContains("{_quote(value)}")'


@dataclass
class Resolution:
    """How a target was resolved: the handle, the winning strategy, prior misses."""
    handle: IElementHandle
    descriptor: TargetDescriptor
    strategy: Strategy
    index: int
    attempts: List[LocatorAttempt] = field(default_factory=list)


class LocatorChain:
    """
    Resolves TargetDescriptors against a driver facade with ordered fallback.
    """

    def __init__(
        self,
        driver: IDriverFacade,
        encoder: Callable[[Strategy], str] = encode_selector,
        logger: Optional[logging.Logger] = None,
    ):
        """
        @param driver Driver facade (resolve/snapshot/gesture)
        @param encoder Strategy -> selector string passed to driver.resolve
        @param logger Logger for per-strategy misses
        """
        self.driver = driver
        self.encoder = encoder
        self.log = logger or logging.getLogger("uiauto")

    def locate(self, descriptor: TargetDescriptor) -> Resolution:
        """
        Try each strategy in order; return the first existing handle.

        @throws ElementNotFound if every strategy misses
        """
        attempts: List[LocatorAttempt] = []
        last_error: Optional[str] = None

        with ActionContextManager.action("resolve", target_name=descriptor.name):
            for index, strategy in enumerate(descriptor.strategies):
                selector = self.encoder(strategy)
                try:
                    handle = self.driver.resolve(selector)
                    if handle is None:
                        raise LookupError("no match")
                    if not handle.exists():
                        raise LookupError("handle does not exist")
                except SessionLostError:
                    raise
                except Exception as e:
                    last_error = f"{type(e).__name__}: {e}"
                    attempts.append(LocatorAttempt(kind=strategy.kind.value, selector=selector, error=last_error))
                    self.log.debug("Target '%s' strategy %d (%s) missed: %s",
                                   descriptor.name, index + 1, selector, last_error)
                    continue

                if index:
                    self.log.info("Target '%s' resolved by fallback strategy %d (%s)",
                                  descriptor.name, index + 1, strategy.kind.value)
                return Resolution(handle, descriptor, strategy, index, attempts)

        raise ElementNotFound(descriptor, attempts=attempts, last_error=last_error)

    def resolve_target(self, descriptor: TargetDescriptor) -> IElementHandle:
        """First live handle for descriptor. @throws ElementNotFound"""
        return self.locate(descriptor).handle

    def exists(self, descriptor: TargetDescriptor) -> bool:
        """Single lookup without waiting."""
        try:
            self.locate(descriptor)
            return True
        except ElementNotFound:
            return False

    def is_visible(self, descriptor: TargetDescriptor) -> bool:
        """Single check: resolves and is displayed. Facade errors count as False."""
        try:
            return bool(self.resolve_target(descriptor).is_visible())
        except SessionLostError:
            raise
        except Exception:
            return False

    def wait_for(
        self,
        descriptor: TargetDescriptor,
        state: str = "visible",
        timeout: Optional[float] = None,
        interval: Optional[float] = None,
    ) -> IElementHandle:
        """
        Poll until the target reaches `state` ("exists", "visible", "enabled"),
        re-resolving through the chain on every tick.

        @return The handle that satisfied the state
        @throws ConditionTimeout
        """
        config = TimeConfig.current()
        settings = {
            "exists": config.element_wait,
            "visible": config.visibility_wait,
            "enabled": config.enabled_wait,
        }.get(state)
        if settings is None:
            raise ValueError(f"Unknown state: {state}. Use 'exists', 'visible', or 'enabled'")

        effective_timeout, effective_interval = clamp_schedule(
            settings.timeout if timeout is None else timeout,
            settings.interval if interval is None else interval,
        )

        def satisfied() -> Optional[IElementHandle]:
            handle = self.resolve_target(descriptor)
            if state in ("visible", "enabled") and not handle.is_visible():
                return None
            if state == "enabled" and not handle.is_enabled():
                return None
            return handle

        return wait_until(
            satisfied,
            timeout=effective_timeout,
            interval=effective_interval,
            description=f"target '{descriptor.name}' to be {state}",
            stage="precondition",
        )

    def wait_until_gone(self, descriptor: TargetDescriptor, timeout: Optional[float] = None) -> None:
        """Poll until no strategy resolves to a visible element."""
        config = TimeConfig.current().disappear_wait
        effective_timeout, effective_interval = clamp_schedule(
            config.timeout if timeout is None else timeout, config.interval,
        )
        wait_until_not(
            lambda: self.is_visible(descriptor),
            timeout=effective_timeout,
            interval=effective_interval,
            description=f"target '{descriptor.name}' to disappear",
            stage="precondition",
        )
