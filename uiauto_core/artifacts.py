"""
Generic artifact generation utilities (screenshots, view-tree dumps).
Driver-specific capture and dump functions plug in through make_artifacts.
"""
from __future__ import annotations
import logging
import os
import re
import time
from typing import Any, Callable, Dict, Optional

log = logging.getLogger("uiauto")

_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]+")


def _ts() -> str:
    """Generate timestamp string for file naming."""
    return time.strftime("%Y%m%d_%H%M%S")


def ensure_dir(path: str) -> None:
    """Ensure directory exists."""
    os.makedirs(path, exist_ok=True)


def safe_name(name: str) -> str:
    """File-name-safe version of a target or action name."""
    return _UNSAFE.sub("_", name).strip("_") or "artifact"


def artifact_path(out_dir: str, name_prefix: str, ext: str) -> str:
    """Timestamped path under out_dir, creating the directory."""
    ensure_dir(out_dir)
    return os.path.join(out_dir, f"{safe_name(name_prefix)}_{_ts()}.{ext}")


def make_artifacts(
    target: Any,
    out_dir: str,
    prefix: str,
    capture_func: Optional[Callable[[Any, str, str], Optional[str]]] = None,
    dump_func: Optional[Callable[[Any, str, str], Optional[str]]] = None,
) -> Dict[str, str]:
    """
    Best-effort artifact capture after a failure. A failing capture never
    masks the original error; it is logged and skipped.

    @param target Object the capture functions operate on (usually the driver)
    @param out_dir Output directory
    @param prefix File prefix
    @param capture_func Optional screenshot capture function
    @param dump_func Optional view-tree dump function
    @return Dict of artifact types to file paths
    """
    artifacts: Dict[str, str] = {}

    if capture_func:
        try:
            img = capture_func(target, out_dir, prefix + "_screenshot")
            if img:
                artifacts["screenshot"] = img
        except Exception as e:
            log.warning("Screenshot capture failed: %s", e)

    if dump_func:
        try:
            tree = dump_func(target, out_dir, prefix + "_tree")
            if tree:
                artifacts["tree"] = tree
        except Exception as e:
            log.warning("View tree dump failed: %s", e)

    return artifacts
