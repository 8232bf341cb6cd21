"""
@file timinglogger.py
@brief Opt-in timing log for polling waits and convergence loops.
"""

from __future__ import annotations

import os
import threading
import time
from typing import Any, Dict, Optional

_TRUTHY = {"1", "true", "yes", "on"}


class TimingLogger:
    """
    Thread-safe timing logger with console/file output.

    Every wait and every scroll session emits start/end events through this
    logger when it is enabled, e.g.:

        [info] [timing] time=12:01:07 event=converge_step description=scroll down attempt=3 changed=True
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._enabled = False
        self._console = True
        self._file_path: Optional[str] = None

    def configure(self, *, console: bool = True, file_path: Optional[str] = None) -> None:
        """Configure output sinks."""
        with self._lock:
            self._console = bool(console)
            self._file_path = file_path

    def configure_from_env(self, environ: Optional[Dict[str, str]] = None) -> None:
        """Enable/configure from UIAUTO_TIMING_LOG and UIAUTO_TIMING_LOG_FILE."""
        env = os.environ if environ is None else environ
        file_path = env.get("UIAUTO_TIMING_LOG_FILE") or None
        self.configure(console=True, file_path=file_path)
        if env.get("UIAUTO_TIMING_LOG", "").strip().lower() in _TRUTHY:
            self.enable()

    def enable(self) -> None:
        with self._lock:
            self._enabled = True

    def disable(self) -> None:
        with self._lock:
            self._enabled = False

    def is_enabled(self) -> bool:
        return self._enabled

    def log(
        self,
        *,
        event: str,
        description: Optional[str] = None,
        status: str = "info",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Emit a timing event; no-op while disabled."""
        if not self._enabled:
            return

        parts = [
            f"[{status.lower()}]",
            "[timing]",
            f"time={time.strftime('%H:%M:%S')}",
            f"event={event}",
        ]
        if description:
            parts.append(f"description={description}")
        for key, value in (metadata or {}).items():
            parts.append(f"{key}={value}")
        line = " ".join(parts)

        if self._console:
            print(line, flush=True)
        if self._file_path:
            self._append(line)

    def _append(self, line: str) -> None:
        try:
            os.makedirs(os.path.dirname(os.path.abspath(self._file_path)) or ".", exist_ok=True)
            with open(self._file_path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError:
            pass


TIMING_LOGGER = TimingLogger()
