"""
@file timings.py
@brief Timing presets and defaults for mobile UI automation.

Values are seconds unless the field is a count. Every wait interval is
clamped to MIN_POLL_INTERVAL when a TimeConfig is built.
"""

from __future__ import annotations
from copy import deepcopy
from typing import Any, Dict

MIN_POLL_INTERVAL = 0.05

TIMEOUT_FIELDS: Dict[str, Dict[str, Any]] = {
    "element_wait": {"timeout": 10.0, "interval": 0.2},
    "visibility_wait": {"timeout": 10.0, "interval": 0.2},
    "enabled_wait": {"timeout": 10.0, "interval": 0.2},
    "disappear_wait": {"timeout": 10.0, "interval": 0.25},
    "exists_wait": {"timeout": 2.0, "interval": 0.1},
    "wait_for_any": {"timeout": 15.0, "interval": 0.25},
    "page_load": {"timeout": 15.0, "interval": 0.25},
    "click_action": {"timeout": 5.0, "interval": 0.2, "retry_count": 2},
    "set_text_action": {"timeout": 5.0, "interval": 0.2, "retry_count": 2},
    "get_text_action": {"timeout": 3.0, "interval": 0.2, "retry_count": 2},
}

PAUSE_FIELDS: Dict[str, float] = {
    "scroll_settle_pause": 0.3,
    "tap_settle_pause": 0.5,
    "navigation_pause": 1.0,
    "swipe_hold_pause": 1.0,
}

COUNT_FIELDS: Dict[str, int] = {
    "scroll_max_attempts": 20,
}

PRESET_OVERRIDES: Dict[str, Dict[str, Any]] = {
    "fast": {
        "element_wait": {"timeout": 5.0, "interval": 0.1},
        "visibility_wait": {"timeout": 5.0, "interval": 0.1},
        "enabled_wait": {"timeout": 5.0, "interval": 0.1},
        "disappear_wait": {"timeout": 5.0, "interval": 0.1},
        "exists_wait": {"timeout": 1.0, "interval": 0.05},
        "wait_for_any": {"timeout": 8.0, "interval": 0.1},
        "page_load": {"timeout": 8.0, "interval": 0.1},
        "scroll_settle_pause": 0.2,
        "tap_settle_pause": 0.3,
        "navigation_pause": 0.5,
        "swipe_hold_pause": 0.5,
    },
    "slow": {
        "element_wait": {"timeout": 20.0, "interval": 0.3},
        "visibility_wait": {"timeout": 20.0, "interval": 0.3},
        "enabled_wait": {"timeout": 20.0, "interval": 0.3},
        "disappear_wait": {"timeout": 20.0, "interval": 0.4},
        "exists_wait": {"timeout": 4.0, "interval": 0.2},
        "wait_for_any": {"timeout": 30.0, "interval": 0.4},
        "page_load": {"timeout": 30.0, "interval": 0.4},
        "click_action": {"retry_count": 3},
        "set_text_action": {"retry_count": 3},
        "scroll_settle_pause": 0.6,
        "tap_settle_pause": 0.8,
        "navigation_pause": 2.0,
    },
    "ci": {
        "element_wait": {"timeout": 30.0, "interval": 0.5},
        "visibility_wait": {"timeout": 30.0, "interval": 0.5},
        "enabled_wait": {"timeout": 30.0, "interval": 0.5},
        "disappear_wait": {"timeout": 30.0, "interval": 0.5},
        "exists_wait": {"timeout": 5.0, "interval": 0.3},
        "wait_for_any": {"timeout": 45.0, "interval": 0.5},
        "page_load": {"timeout": 45.0, "interval": 0.5},
        "click_action": {"retry_count": 4},
        "set_text_action": {"retry_count": 4},
        "get_text_action": {"retry_count": 3},
        "scroll_settle_pause": 0.8,
        "tap_settle_pause": 1.0,
        "navigation_pause": 2.0,
        "scroll_max_attempts": 30,
    },
}


def list_presets() -> Dict[str, Dict[str, Any]]:
    return {"default": {}, **deepcopy(PRESET_OVERRIDES)}


def build_preset_values(preset: str) -> Dict[str, Any]:
    """Flat dict of every timing field for the named preset."""
    preset_key = (preset or "default").lower()
    values: Dict[str, Any] = {}
    values.update(deepcopy(TIMEOUT_FIELDS))
    values.update(PAUSE_FIELDS)
    values.update(COUNT_FIELDS)

    if preset_key == "default":
        return values

    overrides = PRESET_OVERRIDES.get(preset_key)
    if overrides is None:
        raise ValueError(f"Unknown timing preset: {preset}")

    for key, value in overrides.items():
        if key in TIMEOUT_FIELDS:
            merged = deepcopy(values[key])
            merged.update(value)
            values[key] = merged
        else:
            values[key] = value
    return values
