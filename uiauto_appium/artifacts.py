# uiauto_appium/artifacts.py
from __future__ import annotations
import io
from typing import Dict, Optional

from PIL import Image

from uiauto_core.artifacts import artifact_path
from uiauto_core.artifacts import make_artifacts as _make_artifacts


def capture_screenshot(driver, out_dir: str, name_prefix: str) -> Optional[str]:
    """
    Capture the device screen through the driver and save it as PNG.
    The raw bytes go through Pillow so a truncated capture fails here
    rather than leaving a broken file behind.
    Returns file path.
    """
    png = driver.screenshot_png()
    with Image.open(io.BytesIO(png)) as img:
        img.load()
        path = artifact_path(out_dir, name_prefix, "png")
        img.save(path, format="PNG")
    return path


def dump_page_source(driver, out_dir: str, name_prefix: str) -> Optional[str]:
    """
    Dumps the current view hierarchy (page source XML) to a file.
    """
    source = driver.snapshot()
    path = artifact_path(out_dir, name_prefix, "xml")
    with open(path, "w", encoding="utf-8") as f:
        f.write(source)
    return path


def make_artifacts(driver, out_dir: str, prefix: str) -> Dict[str, str]:
    """
    Returns dict like {"screenshot": "...", "tree": "..."} (only those that succeed).
    """
    return _make_artifacts(
        driver,
        out_dir,
        prefix,
        capture_func=capture_screenshot,
        dump_func=dump_page_source,
    )
