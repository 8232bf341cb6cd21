"""
@file waits.py
@brief Polling condition waits and retry utilities.

Every "wait until X" in the framework goes through wait_until. The predicate
is evaluated, and while it is falsy (or raises) the loop sleeps for the poll
interval and tries again, until the cumulative elapsed time reaches the
timeout. Only exhaustion is reported (ConditionTimeout); a single failing
evaluation is absorbed. SessionLostError is never absorbed.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Optional, Tuple, Type, TypeVar

from .exceptions import (ConditionTimeout, MalformedConditionError,
                         SessionLostError)
from .timinglogger import TIMING_LOGGER
from .timings import MIN_POLL_INTERVAL

T = TypeVar("T")

FATAL_EXCEPTIONS: Tuple[Type[BaseException], ...] = (SessionLostError,)


def _now() -> float:
    """Monotonic time source for timeout calculations."""
    return time.monotonic()


def _sleep(seconds: float) -> None:
    time.sleep(seconds)


def clamp_schedule(timeout: float, interval: float) -> Tuple[float, float]:
    """
    Floor timeout and interval at MIN_POLL_INTERVAL and keep interval <= timeout.

    An explicit short timeout then polls at least once and ends in
    ConditionTimeout instead of failing ConditionSpec validation.
    """
    timeout = max(float(timeout), MIN_POLL_INTERVAL)
    interval = min(max(float(interval), MIN_POLL_INTERVAL), timeout)
    return timeout, interval


@dataclass(frozen=True)
class ConditionSpec(Generic[T]):
    """
    A predicate plus its polling budget.

    interval must be > 0 and timeout >= interval; anything else raises
    MalformedConditionError at construction.
    """
    predicate: Callable[[], T]
    timeout: float
    interval: float = 0.2
    description: str = "condition"

    def __post_init__(self) -> None:
        if not callable(self.predicate):
            raise MalformedConditionError(f"{self.description}: predicate is not callable")
        if self.interval <= 0:
            raise MalformedConditionError(
                f"{self.description}: interval must be > 0, got {self.interval}"
            )
        if self.timeout < self.interval:
            raise MalformedConditionError(
                f"{self.description}: timeout ({self.timeout}) must be >= interval ({self.interval})"
            )


def _timeout_error(
    message: str,
    *,
    description: str,
    timeout: float,
    attempt_count: int,
    elapsed: float,
    stage: Optional[str],
    original: Optional[BaseException],
) -> ConditionTimeout:
    error = ConditionTimeout(message)
    error.original_exception = original
    error.description = description
    error.timeout = timeout
    error.attempt_count = attempt_count
    error.elapsed_time = elapsed
    error.stage = stage
    return error


def _log_retry_attempt(description: str, attempt: int, stage: Optional[str]) -> None:
    from .actionlogger import ACTION_LOGGER

    if ACTION_LOGGER.is_enabled() and ACTION_LOGGER.should_log_retry_attempt(attempt):
        ACTION_LOGGER.log(
            action="retry_attempt",
            status="info",
            metadata={"description": description},
            attempt=attempt,
            phase=stage or "execute",
            event="retry_attempt",
        )


def wait_until_condition(
    spec: ConditionSpec[T],
    stage: Optional[str] = None,
    fatal: Tuple[Type[BaseException], ...] = FATAL_EXCEPTIONS,
) -> T:
    """
    Block until spec.predicate returns a truthy value and return that value.

    @throws ConditionTimeout once elapsed time reaches spec.timeout
    """
    start_time = _now()
    last_exception: Optional[BaseException] = None
    attempt_count = 0

    TIMING_LOGGER.log(
        event="wait_start",
        description=spec.description,
        metadata={"timeout_s": spec.timeout, "interval_s": spec.interval, "stage": stage},
    )

    while True:
        attempt_count += 1
        try:
            result = spec.predicate()
            if result:
                TIMING_LOGGER.log(
                    event="wait_success",
                    description=spec.description,
                    status="success",
                    metadata={
                        "attempts": attempt_count,
                        "elapsed_s": round(_now() - start_time, 3),
                        "stage": stage,
                    },
                )
                return result
        except fatal:
            raise
        except Exception as e:
            last_exception = e

        elapsed = _now() - start_time
        time_left = spec.timeout - elapsed
        if time_left <= 0:
            break
        _sleep(min(spec.interval, time_left))

    elapsed = _now() - start_time
    TIMING_LOGGER.log(
        event="wait_timeout",
        description=spec.description,
        status="error",
        metadata={
            "timeout_s": spec.timeout,
            "attempts": attempt_count,
            "elapsed_s": round(elapsed, 3),
            "stage": stage,
        },
    )

    if last_exception is not None:
        message = (
            f"Timed out waiting for {spec.description} after {spec.timeout}s: "
            f"{type(last_exception).__name__}: {last_exception}"
        )
    else:
        message = (
            f"Timed out waiting for {spec.description} after {spec.timeout}s "
            f"(condition kept returning falsy)"
        )
    raise _timeout_error(
        message,
        description=spec.description,
        timeout=spec.timeout,
        attempt_count=attempt_count,
        elapsed=elapsed,
        stage=stage,
        original=last_exception,
    )


def wait_until(
    predicate: Callable[[], T],
    timeout: float,
    interval: float = 0.2,
    description: str = "condition",
    stage: Optional[str] = None,
    fatal: Tuple[Type[BaseException], ...] = FATAL_EXCEPTIONS,
) -> T:
    """
    Repeatedly runs predicate until it returns a truthy value, or until timeout.
    """
    spec = ConditionSpec(predicate, timeout=timeout, interval=interval, description=description)
    return wait_until_condition(spec, stage=stage, fatal=fatal)


def wait_until_not(
    predicate: Callable[[], Any],
    timeout: float,
    interval: float = 0.2,
    description: str = "condition to become false",
    stage: Optional[str] = None,
) -> None:
    """
    Wait until predicate returns a falsy value. A raising evaluation counts
    as "still true" for that tick.
    """
    wait_until(
        lambda: not predicate(),
        timeout=timeout,
        interval=interval,
        description=description,
        stage=stage,
    )


def wait_until_passes(
    func: Callable[..., T],
    timeout: float,
    interval: float = 0.2,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    description: str = "operation",
    *args: Any,
    stage: Optional[str] = None,
    **kwargs: Any,
) -> T:
    """
    Call func(*args, **kwargs) until it returns without raising one of
    `exceptions`. Other exceptions propagate immediately.
    """
    start_time = _now()
    attempt_count = 0

    while True:
        attempt_count += 1
        _log_retry_attempt(description, attempt_count, stage)
        try:
            return func(*args, **kwargs)
        except FATAL_EXCEPTIONS:
            raise
        except exceptions as e:
            elapsed = _now() - start_time
            time_left = timeout - elapsed
            if time_left <= 0:
                raise _timeout_error(
                    f"Timed out waiting for {description} after {timeout}s "
                    f"({attempt_count} attempts). Last error: {type(e).__name__}: {e}",
                    description=description,
                    timeout=timeout,
                    attempt_count=attempt_count,
                    elapsed=elapsed,
                    stage=stage,
                    original=e,
                ) from e
            _sleep(min(interval, time_left))


def wait_for_any(
    predicates: List[Callable[[], Any]],
    timeout: float,
    interval: float = 0.2,
    descriptions: Optional[List[str]] = None,
    stage: Optional[str] = None,
) -> int:
    """
    Wait until any predicate returns a truthy value; return its index.
    Predicates are evaluated in order on each tick.
    """
    if not predicates:
        raise MalformedConditionError("wait_for_any needs at least one predicate")
    if descriptions is None:
        descriptions = [f"predicate[{i}]" for i in range(len(predicates))]
    last_exceptions: List[Optional[BaseException]] = [None] * len(predicates)

    def any_true() -> Optional[int]:
        for i, predicate in enumerate(predicates):
            try:
                if predicate():
                    return i + 1
            except FATAL_EXCEPTIONS:
                raise
            except Exception as e:
                last_exceptions[i] = e
        return None

    desc_str = ", ".join(descriptions)
    try:
        hit = wait_until(
            any_true,
            timeout=timeout,
            interval=interval,
            description=f"any of [{desc_str}]",
            stage=stage,
        )
    except ConditionTimeout as error:
        error.original_exception = next((e for e in last_exceptions if e is not None), None)
        error.original_exceptions = last_exceptions
        raise
    return hit - 1


def retry(
    func: Callable[..., T],
    max_attempts: int = 3,
    interval: float = 0.5,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    description: str = "operation",
    *args: Any,
    stage: Optional[str] = None,
    **kwargs: Any
) -> T:
    """
    Call func up to max_attempts times, sleeping `interval` between failures.
    """
    if max_attempts < 1:
        raise MalformedConditionError(f"{description}: max_attempts must be >= 1")
    start_time = _now()
    last_exception: Optional[BaseException] = None

    for attempt in range(1, max_attempts + 1):
        _log_retry_attempt(description, attempt, stage)
        try:
            return func(*args, **kwargs)
        except FATAL_EXCEPTIONS:
            raise
        except exceptions as e:
            last_exception = e
            if attempt < max_attempts:
                _sleep(interval)

    elapsed = _now() - start_time
    raise _timeout_error(
        f"Failed {description} after {max_attempts} attempts. "
        f"Last error: {type(last_exception).__name__}: {last_exception}",
        description=description,
        timeout=elapsed,
        attempt_count=max_attempts,
        elapsed=elapsed,
        stage=stage,
        original=last_exception,
    ) from last_exception
