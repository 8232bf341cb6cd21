"""
@file context.py
@brief Action context stack used to build action traces for failures.
"""

from __future__ import annotations
import functools
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Generator, List, Optional
from uuid import uuid4

from .actionlogger import ACTION_LOGGER


@dataclass
class ActionContext:
    """Context information for a single action."""
    action_id: str = field(default_factory=lambda: str(uuid4())[:8])
    action_name: str = ""
    target_name: Optional[str] = None
    screen_name: Optional[str] = None
    start_time: float = field(default_factory=time.time)
    metadata: Dict[str, Any] = field(default_factory=dict)
    parent_context: Optional[ActionContext] = None

    @property
    def description(self) -> str:
        parts = [self.action_name]
        if self.target_name:
            parts.append(f"on '{self.target_name}'")
        if self.screen_name:
            parts.append(f"in screen '{self.screen_name}'")
        return " ".join(parts)

    @property
    def elapsed_time(self) -> float:
        return time.time() - self.start_time

    def get_full_trace(self) -> List[ActionContext]:
        """This context followed by its parents, innermost first."""
        trace = [self]
        current = self.parent_context
        while current is not None:
            trace.append(current)
            current = current.parent_context
        return trace

    def format_trace(self) -> str:
        lines = ["Action trace (most recent first):"]
        for i, ctx in enumerate(self.get_full_trace()):
            prefix = "  -> " if i > 0 else "  X "
            lines.append(f"{prefix}{ctx.description} [{ctx.elapsed_time:.2f}s]")
        return "\n".join(lines)


class ActionContextManager:
    """Per-thread stack of ActionContext objects."""

    _local = threading.local()

    @classmethod
    def _get_stack(cls) -> List[ActionContext]:
        if not hasattr(cls._local, "stack"):
            cls._local.stack = []
        return cls._local.stack

    @classmethod
    def current(cls) -> Optional[ActionContext]:
        stack = cls._get_stack()
        return stack[-1] if stack else None

    @classmethod
    @contextmanager
    def action(
        cls,
        action_name: str,
        target_name: Optional[str] = None,
        screen_name: Optional[str] = None,
        **metadata: Any
    ) -> Generator[ActionContext, None, None]:
        """Push an ActionContext for the duration of the block."""
        stack = cls._get_stack()
        context = ActionContext(
            action_name=action_name,
            target_name=target_name,
            screen_name=screen_name,
            metadata=metadata,
            parent_context=stack[-1] if stack else None,
        )
        stack.append(context)
        try:
            yield context
        finally:
            stack.pop()

    @classmethod
    def clear(cls) -> None:
        cls._local.stack = []


def tracked_action(action_name: Optional[str] = None, target: Optional[str] = None):
    """
    Decorator for page methods: tracks the action context and emits an
    action_finish event with status ok/error and the duration.

    Without an explicit target, a "target"/"name" keyword or a leading string
    argument names the target.
    """
    def decorator(func):
        name = action_name or func.__name__

        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            target_name = target or kwargs.get("target") or kwargs.get("name")
            if target_name is None and args and isinstance(args[0], str):
                target_name = args[0]
            screen = getattr(self, "screen_name", None)

            start_time = time.time()
            with ActionContextManager.action(name, target_name=target_name, screen_name=screen) as context:
                try:
                    result = func(self, *args, **kwargs)
                except Exception as exc:
                    ACTION_LOGGER.log(
                        action=name,
                        target=target_name,
                        screen=screen,
                        status="error",
                        duration_ms=int((time.time() - start_time) * 1000),
                        metadata=kwargs,
                        exception=exc,
                        action_id=context.action_id,
                        phase="execute",
                        event="action_finish",
                    )
                    raise
                ACTION_LOGGER.log(
                    action=name,
                    target=target_name,
                    screen=screen,
                    status="ok",
                    duration_ms=int((time.time() - start_time) * 1000),
                    metadata=kwargs,
                    action_id=context.action_id,
                    phase="execute",
                    event="action_finish",
                )
                return result

        return wrapper

    return decorator
