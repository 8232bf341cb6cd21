"""
@file config.py
@brief Centralized timeout, pause and attempt-bound configuration.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Dict, Generator, Optional

from .timings import (COUNT_FIELDS, MIN_POLL_INTERVAL, PAUSE_FIELDS,
                      TIMEOUT_FIELDS, build_preset_values, list_presets)


@dataclass
class TimeoutSettings:
    """Timeout/interval pair (plus optional retry count) for one wait kind."""
    timeout: float
    interval: float
    retry_count: Optional[int] = None

    def __post_init__(self) -> None:
        self.interval = max(float(self.interval), MIN_POLL_INTERVAL)
        self.timeout = max(float(self.timeout), self.interval)

    def with_overrides(
        self,
        timeout: Optional[float] = None,
        interval: Optional[float] = None,
        retry_count: Optional[int] = None,
    ) -> TimeoutSettings:
        return TimeoutSettings(
            timeout=timeout if timeout is not None else self.timeout,
            interval=interval if interval is not None else self.interval,
            retry_count=retry_count if retry_count is not None else self.retry_count,
        )


class TimeConfig:
    """
    Timing configuration for waits, settle pauses and scroll bounds.

    Precedence for a run: base defaults -> preset -> overrides -> app defaults.
    A run-scope snapshot is installed per thread, so every session driven
    from its own thread carries its own timings.
    """

    _default_instance: Optional[TimeConfig] = None
    _local = threading.local()
    _lock = threading.Lock()

    def __init__(self, preset: str = "default"):
        self.preset = preset
        self._apply_values(build_preset_values(preset))

    def _apply_values(self, values: Dict[str, Any]) -> None:
        for name in TIMEOUT_FIELDS:
            val = values.get(name)
            if isinstance(val, TimeoutSettings):
                setattr(self, name, deepcopy(val))
            elif isinstance(val, dict):
                setattr(self, name, TimeoutSettings(
                    timeout=float(val["timeout"]),
                    interval=float(val["interval"]),
                    retry_count=val.get("retry_count"),
                ))
            else:
                raise ValueError(f"Invalid timeout setting for {name}: {val}")

        for name in PAUSE_FIELDS:
            if name not in values:
                raise ValueError(f"Missing pause setting for {name}")
            setattr(self, name, max(0.0, float(values[name])))

        for name in COUNT_FIELDS:
            count = int(values[name])
            if count < 1:
                raise ValueError(f"{name} must be >= 1, got {count}")
            setattr(self, name, count)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for name in TIMEOUT_FIELDS:
            setting: TimeoutSettings = getattr(self, name)
            data[name] = {
                "timeout": setting.timeout,
                "interval": setting.interval,
                "retry_count": setting.retry_count,
            }
        for name in PAUSE_FIELDS:
            data[name] = getattr(self, name)
        for name in COUNT_FIELDS:
            data[name] = getattr(self, name)
        return data

    def clone(self) -> TimeConfig:
        clone = TimeConfig(self.preset)
        clone._apply_values(self.to_dict())
        return clone

    def get_action_settings(self, action_name: str) -> TimeoutSettings:
        """Settings for click/set_text/get_text; click settings otherwise."""
        field = f"{action_name}_action"
        if field in TIMEOUT_FIELDS:
            return getattr(self, field)
        return self.click_action

    @classmethod
    def build_from(
        cls,
        *,
        preset: str = "default",
        overrides: Optional[Dict[str, Any]] = None,
        app_defaults: Optional[Dict[str, float]] = None,
    ) -> TimeConfig:
        """Build a run-scope config snapshot."""
        cfg = cls(preset)
        if overrides:
            _apply_overrides(cfg, overrides)
        if app_defaults and preset == "default":
            timeout = float(app_defaults["default_timeout"])
            interval = float(app_defaults["polling_interval"])
            _apply_overrides(cfg, {
                "element_wait": {"timeout": timeout, "interval": interval},
                "visibility_wait": {"timeout": timeout, "interval": interval},
                "enabled_wait": {"timeout": timeout, "interval": interval},
                "exists_wait": {"timeout": max(timeout / 5, interval), "interval": interval},
            })
        return cfg

    @classmethod
    def default(cls) -> TimeConfig:
        """Process-wide default configuration (lazily created singleton)."""
        if cls._default_instance is None:
            with cls._lock:
                if cls._default_instance is None:
                    cls._default_instance = cls("default")
        return cls._default_instance

    @classmethod
    def install_run_config(cls, config: TimeConfig) -> None:
        cls._local.run_config = config

    @classmethod
    def clear_run_config(cls) -> None:
        cls._local.run_config = None

    @classmethod
    def current(cls) -> TimeConfig:
        """Innermost override, else the run config, else the default."""
        override = getattr(cls._local, "override", None)
        if override is not None:
            return override
        run_cfg = getattr(cls._local, "run_config", None)
        if run_cfg is not None:
            return run_cfg
        return cls.default()

    @classmethod
    def apply_preset(cls, preset: str) -> None:
        cls.install_run_config(cls(preset))

    @classmethod
    @contextmanager
    def override(cls, **kwargs: Any) -> Generator[TimeConfig, None, None]:
        """
        Temporarily override fields for the current thread:

            with TimeConfig.override(scroll_settle_pause=0, visibility_wait={"timeout": 1}):
                ...
        """
        previous = getattr(cls._local, "override", None)
        new_config = cls.current().clone()
        _apply_overrides(new_config, kwargs)
        cls._local.override = new_config
        try:
            yield new_config
        finally:
            cls._local.override = previous

    @classmethod
    def reset_to_defaults(cls) -> None:
        with cls._lock:
            cls._default_instance = cls("default")
        cls._local.override = None
        cls._local.run_config = None


def _apply_overrides(config: TimeConfig, overrides: Dict[str, Any]) -> None:
    for key, value in overrides.items():
        if key in TIMEOUT_FIELDS:
            base: TimeoutSettings = getattr(config, key)
            if isinstance(value, TimeoutSettings):
                setattr(config, key, deepcopy(value))
            elif isinstance(value, dict):
                setattr(config, key, base.with_overrides(
                    timeout=value.get("timeout"),
                    interval=value.get("interval"),
                    retry_count=value.get("retry_count"),
                ))
            else:
                raise ValueError(f"Invalid override for {key}: {value}")
        elif key in PAUSE_FIELDS:
            setattr(config, key, max(0.0, float(value)))
        elif key in COUNT_FIELDS:
            count = int(value)
            if count < 1:
                raise ValueError(f"{key} must be >= 1, got {count}")
            setattr(config, key, count)
        else:
            raise ValueError(f"Unknown TimeConfig field: {key}")


def available_presets() -> Dict[str, Dict[str, Any]]:
    return list_presets()
