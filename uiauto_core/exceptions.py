"""
@file exceptions.py
@brief Exception types raised by the mobile resilience layer.
"""

from __future__ import annotations
import traceback
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional

if TYPE_CHECKING:
    from .locators import TargetDescriptor


class UIAutoError(Exception):
    """Base exception for the framework."""
    pass


class ConfigError(UIAutoError):
    """Raised when an object map, descriptor or timing value is invalid."""
    pass


class MalformedConditionError(ConfigError):
    """Raised when a ConditionSpec violates interval > 0 and timeout >= interval."""
    pass


class SessionLostError(UIAutoError):
    """
    Raised by a driver facade when the device session is gone.

    Polling, locator and convergence loops never absorb this error; it
    propagates to whoever owns the session.
    """
    pass


class ConditionTimeout(UIAutoError):
    """
    Raised when a polled condition never became true within its budget.

    Attributes:
        original_exception: The last exception raised by the predicate, if any
        description: Human-readable description of what was being waited for
        timeout: The timeout value in seconds
        attempt_count: Number of predicate evaluations
        elapsed_time: Actual elapsed time in seconds
        stage: Optional phase label (precondition, resolve, execute)
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.original_exception: Optional[BaseException] = None
        self.description: Optional[str] = None
        self.timeout: Optional[float] = None
        self.attempt_count: Optional[int] = None
        self.elapsed_time: Optional[float] = None
        self.stage: Optional[str] = None

    def __str__(self) -> str:
        base_msg = super().__str__()

        details = []
        if self.original_exception is not None:
            details.append(f"Original exception: {type(self.original_exception).__name__}")
        if self.attempt_count is not None:
            details.append(f"Attempts: {self.attempt_count}")
        if self.elapsed_time is not None:
            details.append(f"Elapsed: {self.elapsed_time:.2f}s")
        if self.stage is not None:
            details.append(f"Stage: {self.stage}")

        if details:
            return f"{base_msg} [{', '.join(details)}]"
        return base_msg

    def get_root_cause(self) -> Optional[BaseException]:
        """
        Follow original_exception links down to the innermost cause.

        @return The deepest original_exception in the chain, or None
        """
        current = self.original_exception
        while current is not None:
            inner = getattr(current, "original_exception", None)
            if inner is None:
                return current
            current = inner
        return None

    def get_traceback_str(self) -> str:
        """Formatted traceback of the original exception, or an empty string."""
        if self.original_exception is None:
            return ""
        exc = self.original_exception
        return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


@dataclass
class LocatorAttempt:
    """One strategy tried while resolving a target."""
    kind: str
    selector: str
    error: Optional[str] = None


class ElementNotFound(UIAutoError):
    """
    Raised when every strategy of a TargetDescriptor missed.

    Carries the full descriptor and the per-strategy attempts so the failure
    message shows exactly which selectors were tried and why each missed.
    """

    def __init__(
        self,
        descriptor: "TargetDescriptor",
        attempts: List[LocatorAttempt],
        last_error: Optional[str] = None,
        artifacts: Optional[Dict[str, str]] = None,
    ):
        self.descriptor = descriptor
        self.attempts = attempts
        self.last_error = last_error
        self.artifacts = artifacts or {}
        super().__init__(self.__str__())

    @property
    def target_name(self) -> str:
        return self.descriptor.name

    def __str__(self) -> str:
        lines = [
            f"target='{self.descriptor.name}' "
            f"strategies={len(self.descriptor.strategies)}",
        ]
        if self.last_error:
            lines.append(f"Last error: {self.last_error}")
        lines.append("Attempts:")
        for i, a in enumerate(self.attempts, start=1):
            lines.append(f"  {i}. {a.kind}: {a.selector} err={a.error}")
        if self.artifacts:
            lines.append(f"Artifacts: {self.artifacts}")
        return "\n".join(lines)


class ActionError(UIAutoError):
    """
    Raised when a page-level action fails.

    Wraps the underlying cause (ElementNotFound, ConditionTimeout or a facade
    error) together with the target name, any captured artifacts and the
    action trace active when the failure was raised.
    """

    def __init__(
        self,
        action: str,
        target_name: Optional[str] = None,
        details: Optional[str] = None,
        artifacts: Optional[Dict[str, str]] = None,
        cause: Optional[BaseException] = None,
        trace: Optional[str] = None,
    ):
        self.action = action
        self.target_name = target_name
        self.details = details
        self.artifacts = artifacts or {}
        self.cause = cause
        self.trace = trace
        super().__init__(self.__str__())

    def __str__(self) -> str:
        base = f"ActionError: action='{self.action}'"
        if self.target_name:
            base += f" target='{self.target_name}'"
        if self.details:
            base += f" details='{self.details}'"
        if self.cause:
            base += f" cause='{type(self.cause).__name__}: {self.cause}'"
        if self.artifacts:
            base += f" artifacts={self.artifacts}"
        if self.trace:
            base += f"\n{self.trace}"
        return base


class ElementNotVisibleError(UIAutoError):
    """Raised when a target exists but never became visible."""

    def __init__(self, target_name: str, message: Optional[str] = None):
        self.target_name = target_name
        msg = f"Target '{target_name}' is not visible"
        if message:
            msg += f": {message}"
        super().__init__(msg)


class ElementNotEnabledError(UIAutoError):
    """Raised when a target is visible but never became enabled."""

    def __init__(self, target_name: str, message: Optional[str] = None):
        self.target_name = target_name
        msg = f"Target '{target_name}' is not enabled"
        if message:
            msg += f": {message}"
        super().__init__(msg)
