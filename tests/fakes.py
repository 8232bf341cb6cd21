# tests/fakes.py
"""
In-memory driver facade for tests.

FakeDriver.elements maps selector strings to what resolve() should produce:
a FakeHandle, None, an exception instance (raised), or a zero-argument
callable evaluated on every resolve (for targets that appear later).

FakeDriver.pages is the sequence of view-tree snapshots; each successful
gesture advances to the next page and the last page repeats forever.
"""

import io
from typing import Any, Dict, List, Optional, Sequence

from PIL import Image

from uiauto_core.interfaces import IDriverFacade, IElementHandle


class FakeHandle(IElementHandle):
    def __init__(self, text: str = "", visible: bool = True, enabled: bool = True,
                 alive: bool = True, click_errors: Optional[List[BaseException]] = None):
        self.text = text
        self.visible = visible
        self.enabled = enabled
        self.alive = alive
        self.click_errors = list(click_errors or [])
        self.clicks = 0
        self.typed: List[str] = []

    def exists(self) -> bool:
        return self.alive

    def is_visible(self) -> bool:
        return self.alive and self.visible

    def is_enabled(self) -> bool:
        return self.alive and self.enabled

    def click(self) -> None:
        if self.click_errors:
            raise self.click_errors.pop(0)
        self.clicks += 1

    def set_text(self, text: str) -> None:
        self.text = text
        self.typed.append(text)

    def get_text(self) -> str:
        return self.text


class FakeDriver(IDriverFacade):
    def __init__(self, elements: Optional[Dict[str, Any]] = None,
                 pages: Sequence[str] = ("<page/>",),
                 gesture_errors: Optional[List[Optional[BaseException]]] = None,
                 size=(1000, 2000)):
        self.elements: Dict[str, Any] = dict(elements or {})
        self.pages = list(pages)
        self.page_index = 0
        self.gesture_errors = list(gesture_errors or [])
        self.size = size
        self.resolve_calls: List[str] = []
        self.gestures: List[Any] = []
        self.snapshot_calls = 0
        self.keyboard_hidden = 0
        self.back_presses = 0

    def resolve(self, selector: str) -> Optional[IElementHandle]:
        self.resolve_calls.append(selector)
        entry = self.elements.get(selector)
        if isinstance(entry, BaseException):
            raise entry
        if callable(entry) and not isinstance(entry, IElementHandle):
            return entry()
        return entry

    def snapshot(self) -> str:
        self.snapshot_calls += 1
        return self.pages[min(self.page_index, len(self.pages) - 1)]

    def perform_gesture(self, path) -> None:
        self.gestures.append(path)
        if self.gesture_errors:
            error = self.gesture_errors.pop(0)
            if error is not None:
                raise error
        self.page_index += 1

    def viewport_size(self):
        return self.size

    def hide_keyboard(self) -> None:
        self.keyboard_hidden += 1

    def back(self) -> None:
        self.back_presses += 1

    def screenshot_png(self) -> bytes:
        buf = io.BytesIO()
        Image.new("RGB", (8, 16), color=(10, 20, 30)).save(buf, format="PNG")
        return buf.getvalue()

    def calls_for(self, selector: str) -> int:
        return self.resolve_calls.count(selector)
