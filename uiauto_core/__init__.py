"""
UIAuto Core - Driver-agnostic resilience layer for mobile UI automation.

This package provides:
- Locators: target descriptors and the ordered strategy chain
- Waits: condition poller and retry utilities
- Convergence: gesture loops that stop once the screen stops changing
- Element: lazily-resolved targets with built-in waits and retries
- Repository: YAML object map loading and validation
- Config: timing presets and run-scope overrides
- Exceptions: common exception types
- Interfaces: abstract driver facade for backend implementations
"""

from uiauto_core.config import TimeConfig, TimeoutSettings
from uiauto_core.convergence import (ConvergenceResult, Direction, Point,
                                     PointerPath, SnapshotDiffState, Viewport,
                                     drag_until_stable, run_until_stable,
                                     scroll_until_found, scroll_until_stable,
                                     settle_after, swipe_path)
from uiauto_core.element import TargetElement
from uiauto_core.exceptions import (
    UIAutoError,
    ConfigError,
    MalformedConditionError,
    ConditionTimeout,
    SessionLostError,
    ElementNotFound,
    ElementNotVisibleError,
    ElementNotEnabledError,
    ActionError,
    LocatorAttempt,
)
from uiauto_core.interfaces import IDriverFacade, IElementHandle
from uiauto_core.locators import (LocatorChain, Resolution, Strategy,
                                  StrategyKind, TargetDescriptor,
                                  encode_selector)
from uiauto_core.repository import AppConfig, Repository
from uiauto_core.waits import (ConditionSpec, retry, wait_for_any, wait_until,
                               wait_until_condition, wait_until_not,
                               wait_until_passes)
from uiauto_core.timings import MIN_POLL_INTERVAL
from uiauto_core import artifacts

__all__ = [
    "TimeConfig",
    "TimeoutSettings",
    "MIN_POLL_INTERVAL",
    "ConvergenceResult",
    "Direction",
    "Point",
    "PointerPath",
    "SnapshotDiffState",
    "Viewport",
    "drag_until_stable",
    "run_until_stable",
    "scroll_until_found",
    "scroll_until_stable",
    "settle_after",
    "swipe_path",
    "TargetElement",
    "UIAutoError",
    "ConfigError",
    "MalformedConditionError",
    "ConditionTimeout",
    "SessionLostError",
    "ElementNotFound",
    "ElementNotVisibleError",
    "ElementNotEnabledError",
    "ActionError",
    "LocatorAttempt",
    "IDriverFacade",
    "IElementHandle",
    "LocatorChain",
    "Resolution",
    "Strategy",
    "StrategyKind",
    "TargetDescriptor",
    "encode_selector",
    "AppConfig",
    "Repository",
    "ConditionSpec",
    "retry",
    "wait_for_any",
    "wait_until",
    "wait_until_condition",
    "wait_until_not",
    "wait_until_passes",
    "artifacts",
]

__version__ = "1.0.0"
