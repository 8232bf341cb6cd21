"""
@file actionlogger.py
@brief Central action event log for target resolution, page actions and gestures.
"""

from __future__ import annotations

import json
import os
import threading
import time
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_TRUTHY = {"1", "true", "yes", "on"}
_SENSITIVE_KEYS = {"password", "passwd", "secret", "token", "pin"}
_TEXT_ACTIONS = {"set_text", "set_value", "enter_email", "enter_password"}


class ActionLogger:
    """Thread-safe action logger with line/jsonl output."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._enabled = False
        self._console = True
        self._file_path: Optional[str] = None
        self._run_id = "default"
        self._format = "line"
        self._max_traceback_chars = 4000
        self._sample_retry_events = 1

    def configure(
        self,
        *,
        console: bool = True,
        file_path: Optional[str] = None,
        run_id: Optional[str] = None,
        format: str = "line",
        max_traceback_chars: int = 4000,
        sample_retry_events: int = 1,
    ) -> None:
        """Configure logger settings."""
        fmt = (format or "line").lower()
        if fmt not in {"line", "jsonl"}:
            raise ValueError("ActionLogger format must be 'line' or 'jsonl'")

        with self._lock:
            self._console = bool(console)
            self._file_path = file_path
            self._format = fmt
            self._max_traceback_chars = max(256, int(max_traceback_chars))
            self._sample_retry_events = max(1, int(sample_retry_events))
            if run_id:
                self._run_id = run_id

    def configure_from_env(self, environ: Optional[Dict[str, str]] = None) -> None:
        """
        Read UIAUTO_ACTION_LOG, UIAUTO_ACTION_LOG_FILE, UIAUTO_ACTION_LOG_FORMAT
        and UIAUTO_ACTION_LOG_SAMPLE.
        """
        env = os.environ if environ is None else environ
        self.configure(
            console=env.get("UIAUTO_ACTION_LOG_CONSOLE", "1").strip().lower() in _TRUTHY,
            file_path=env.get("UIAUTO_ACTION_LOG_FILE") or None,
            format=env.get("UIAUTO_ACTION_LOG_FORMAT", "line"),
            sample_retry_events=int(env.get("UIAUTO_ACTION_LOG_SAMPLE", "1") or 1),
        )
        if env.get("UIAUTO_ACTION_LOG", "").strip().lower() in _TRUTHY:
            self.enable()

    def enable(self) -> None:
        with self._lock:
            self._enabled = True

    def disable(self) -> None:
        with self._lock:
            self._enabled = False

    def is_enabled(self) -> bool:
        return self._enabled

    def set_run_id(self, run_id: str) -> None:
        if run_id:
            with self._lock:
                self._run_id = run_id

    def should_log_retry_attempt(self, attempt: int) -> bool:
        """Log the first attempt, then every Nth one."""
        if attempt <= 1:
            return True
        return attempt % self._sample_retry_events == 0

    def log(
        self,
        *,
        action: str,
        target: Optional[str] = None,
        screen: Optional[str] = None,
        status: str = "ok",
        duration_ms: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
        exception: Optional[BaseException] = None,
        action_id: Optional[str] = None,
        phase: Optional[str] = None,
        attempt: Optional[int] = None,
        event: Optional[str] = None,
    ) -> None:
        """Emit one event; no-op while disabled."""
        if not self._enabled:
            return

        record: Dict[str, Any] = {
            "timestamp": time.strftime("%H:%M:%S"),
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "event": event or "action",
            "action": action,
            "action_id": action_id,
            "target": target,
            "screen": screen,
            "phase": phase,
            "status": status,
            "attempt": attempt,
            "duration_ms": duration_ms,
            "metadata": self._redact(action, dict(metadata or {})),
            "run_id": self._run_id,
        }
        if exception is not None:
            record["exception"] = self._format_exception(exception)

        if self._format == "jsonl":
            line = json.dumps(record, ensure_ascii=False, separators=(",", ":"), default=str)
        else:
            line = self._format_line(record)

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

    @staticmethod
    def _format_line(record: Dict[str, Any]) -> str:
        parts = [record["timestamp"], record["action"]]
        for key in ("event", "action_id", "phase", "attempt", "status", "duration_ms", "run_id"):
            value = record.get(key)
            if value is not None and value != "":
                parts.append(f"{key}={value}")
        for key in ("target", "screen"):
            if record.get(key):
                parts.append(f"{key}='{record[key]}'")
        for key, value in record["metadata"].items():
            parts.append(f"{key}={value}")
        exc = record.get("exception")
        if exc:
            parts.append(f"exc_type={exc['type']}")
            parts.append(f"exc_message={exc['message']}")
        return " | ".join(parts)

    @staticmethod
    def _redact(action: str, metadata: Dict[str, Any]) -> Dict[str, Any]:
        redacted: Dict[str, Any] = {}
        for key, value in metadata.items():
            if key.lower() in _SENSITIVE_KEYS:
                redacted[key] = "***"
            elif action in _TEXT_ACTIONS and key in {"text", "value"}:
                text = str(value)
                redacted[key] = text if len(text) <= 10 else f"{text[:10]}..."
            else:
                redacted[key] = value
        return redacted

    def _format_exception(self, exception: BaseException) -> Dict[str, Any]:
        tb = "".join(traceback.format_exception(type(exception), exception, exception.__traceback__))
        if len(tb) > self._max_traceback_chars:
            tb = tb[: self._max_traceback_chars] + "...<truncated>"
        cause = exception.__cause__
        return {
            "type": type(exception).__name__,
            "message": str(exception),
            "traceback": tb.strip(),
            "cause_type": type(cause).__name__ if cause is not None else None,
            "cause_message": str(cause) if cause is not None else None,
        }


ACTION_LOGGER = ActionLogger()
