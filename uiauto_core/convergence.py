"""
@file convergence.py
@brief Gesture loops that stop when the screen stops changing.

Scrolling "to the end" of a list has no reliable end marker on a device, so
the runner repeats a gesture and compares the full view tree before and after
each one. When two consecutive snapshots are identical the content no longer
moves and the loop has converged. max_attempts bounds the loop so an endless
feed cannot scroll forever.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional, Tuple, TypeVar

from .actionlogger import ACTION_LOGGER
from .config import TimeConfig
from .context import ActionContextManager
from .exceptions import ConfigError, SessionLostError
from .timinglogger import TIMING_LOGGER

if TYPE_CHECKING:
    from .interfaces import IDriverFacade
    from .locators import LocatorChain, TargetDescriptor

T = TypeVar("T")

log = logging.getLogger("uiauto")


def _now() -> float:
    return time.monotonic()


def _sleep(seconds: float) -> None:
    if seconds > 0:
        time.sleep(seconds)


@dataclass(frozen=True)
class Viewport:
    width: int
    height: int


@dataclass(frozen=True)
class Point:
    x: int
    y: int


@dataclass(frozen=True)
class PointerPath:
    """
    One drag: press at points[0], hold for `hold` seconds, move through the
    remaining points (each move taking `move_duration` seconds), release.
    """
    points: Tuple[Point, ...]
    hold: float = 0.0
    move_duration: float = 0.25

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))
        if not self.points:
            raise ConfigError("PointerPath needs at least one point")
        if self.hold < 0 or self.move_duration < 0:
            raise ConfigError("PointerPath durations must be >= 0")

    @property
    def start(self) -> Point:
        return self.points[0]

    @property
    def end(self) -> Point:
        return self.points[-1]


class Direction(str, Enum):
    """Direction the content moves into view (DOWN reveals what is below)."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


def swipe_path(
    direction: Direction,
    viewport: Viewport,
    start: float = 0.8,
    end: float = 0.2,
    hold: float = 0.0,
) -> PointerPath:
    """
    Straight drag across the middle of the screen.

    For DOWN the finger travels from `start` to `end` of the height (80% -> 20%
    by default), which pulls the content below into view; UP is the reverse.
    LEFT/RIGHT do the same along the width.

    @param start Fraction of the axis where the finger lands (for DOWN/RIGHT)
    @param end Fraction of the axis where the finger lifts (for DOWN/RIGHT)
    """
    if not (0.0 <= start <= 1.0 and 0.0 <= end <= 1.0):
        raise ConfigError(f"swipe fractions must be within [0, 1], got {start}, {end}")

    direction = Direction(direction)
    cx = viewport.width // 2
    cy = viewport.height // 2

    if direction in (Direction.UP, Direction.DOWN):
        near, far = int(viewport.height * start), int(viewport.height * end)
        if direction is Direction.UP:
            near, far = far, near
        points = (Point(cx, near), Point(cx, far))
    else:
        near, far = int(viewport.width * start), int(viewport.width * end)
        if direction is Direction.LEFT:
            near, far = far, near
        points = (Point(near, cy), Point(far, cy))
    return PointerPath(points, hold=hold)


@dataclass
class SnapshotDiffState:
    """Two most recent view-tree snapshots plus the gesture count."""
    previous: Optional[str]
    current: str
    attempt_count: int = 0
    max_attempts: int = 20

    @property
    def converged(self) -> bool:
        return self.previous is not None and self.previous == self.current

    @property
    def exhausted(self) -> bool:
        return self.attempt_count >= self.max_attempts

    @property
    def should_continue(self) -> bool:
        return not self.converged and not self.exhausted

    def advance(self, snapshot: str) -> None:
        self.previous = self.current
        self.current = snapshot
        self.attempt_count += 1


@dataclass(frozen=True)
class ConvergenceResult:
    """
    converged: the last gesture did not change the view tree
    attempts: gestures performed (failed ones included)
    reason: "converged", "exhausted" or "found"
    """
    converged: bool
    attempts: int
    reason: str

    def __bool__(self) -> bool:
        return self.reason in ("converged", "found")


def _check(until: Callable[[], Any]) -> bool:
    try:
        return bool(until())
    except SessionLostError:
        raise
    except Exception as e:
        log.debug("Convergence stop condition raised %s: %s", type(e).__name__, e)
        return False


def run_until_stable(
    driver: IDriverFacade,
    step: Callable[[], Any],
    max_attempts: Optional[int] = None,
    settle_delay: Optional[float] = None,
    until: Optional[Callable[[], Any]] = None,
    description: str = "gesture",
) -> ConvergenceResult:
    """
    Repeat `step` until two consecutive snapshots are equal, `until` holds,
    or max_attempts gestures have been performed.

    A never-changing screen costs exactly one gesture. A step that raises
    still counts as an attempt and is logged; SessionLostError propagates,
    as does any error from driver.snapshot().

    @param max_attempts Gesture bound (TimeConfig.scroll_max_attempts if None)
    @param settle_delay Pause after each gesture (TimeConfig.scroll_settle_pause if None)
    @param until Optional early-stop predicate, checked before the first
                 gesture and after each settle
    @return ConvergenceResult; non-convergence is reported, never raised
    """
    config = TimeConfig.current()
    if max_attempts is None:
        max_attempts = config.scroll_max_attempts
    if settle_delay is None:
        settle_delay = config.scroll_settle_pause
    if max_attempts < 1:
        raise ConfigError(f"max_attempts must be >= 1, got {max_attempts}")

    start_time = _now()
    TIMING_LOGGER.log(
        event="converge_start",
        description=description,
        metadata={"max_attempts": max_attempts, "settle_s": settle_delay},
    )

    with ActionContextManager.action(description) as context:
        state = SnapshotDiffState(previous=None, current=driver.snapshot(), max_attempts=max_attempts)
        found = until is not None and _check(until)

        while not found and state.should_continue:
            try:
                step()
            except SessionLostError:
                raise
            except Exception as e:
                log.warning("%s attempt %d failed: %s: %s",
                            description, state.attempt_count + 1, type(e).__name__, e)
            _sleep(settle_delay)
            state.advance(driver.snapshot())

            TIMING_LOGGER.log(
                event="converge_step",
                description=description,
                metadata={"attempt": state.attempt_count, "changed": not state.converged},
            )
            if until is not None and _check(until):
                found = True

        if found:
            reason = "found"
        elif state.converged:
            reason = "converged"
        else:
            reason = "exhausted"
        result = ConvergenceResult(converged=state.converged, attempts=state.attempt_count, reason=reason)

        TIMING_LOGGER.log(
            event="converge_end",
            description=description,
            status="success" if result else "warning",
            metadata={
                "attempts": result.attempts,
                "reason": reason,
                "elapsed_s": round(_now() - start_time, 3),
            },
        )
        ACTION_LOGGER.log(
            action=description,
            status="ok" if result else "warning",
            duration_ms=int((_now() - start_time) * 1000),
            metadata={"attempts": result.attempts, "reason": reason},
            action_id=context.action_id,
            event="action_finish",
        )

    if reason == "exhausted":
        log.info("%s did not converge after %d attempts", description, result.attempts)
    return result


def drag_until_stable(
    driver: IDriverFacade,
    path_factory: Callable[[Viewport], PointerPath],
    max_attempts: Optional[int] = None,
    settle_delay: Optional[float] = None,
    until: Optional[Callable[[], Any]] = None,
    description: str = "drag",
) -> ConvergenceResult:
    """Repeat the pointer path built by path_factory until the screen is stable."""
    viewport = Viewport(*driver.viewport_size())
    path = path_factory(viewport)
    return run_until_stable(
        driver,
        lambda: driver.perform_gesture(path),
        max_attempts=max_attempts,
        settle_delay=settle_delay,
        until=until,
        description=description,
    )


def scroll_until_stable(
    driver: IDriverFacade,
    direction: Direction = Direction.DOWN,
    max_attempts: Optional[int] = None,
    settle_delay: Optional[float] = None,
    until: Optional[Callable[[], Any]] = None,
) -> ConvergenceResult:
    """Scroll in `direction` until the content stops moving."""
    direction = Direction(direction)
    return drag_until_stable(
        driver,
        lambda viewport: swipe_path(direction, viewport),
        max_attempts=max_attempts,
        settle_delay=settle_delay,
        until=until,
        description=f"scroll_{direction.value}",
    )


def scroll_until_found(
    driver: IDriverFacade,
    chain: LocatorChain,
    descriptor: TargetDescriptor,
    direction: Direction = Direction.DOWN,
    max_attempts: Optional[int] = None,
    settle_delay: Optional[float] = None,
) -> ConvergenceResult:
    """
    Scroll until `descriptor` resolves or the content stops moving.

    The caller re-resolves the target afterwards; no handle is returned.
    """
    return scroll_until_stable(
        driver,
        direction,
        max_attempts=max_attempts,
        settle_delay=settle_delay,
        until=lambda: chain.exists(descriptor),
    )


def settle_after(action: Callable[[], T], delay: Optional[float] = None) -> T:
    """
    Run `action` once, then pause for the tap settle delay. Used for controls
    whose effect (an animation, a transient layout) has no observable
    completion signal.
    """
    if delay is None:
        delay = TimeConfig.current().tap_settle_pause
    result = action()
    _sleep(delay)
    return result
