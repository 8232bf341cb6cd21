"""
@file interfaces.py
@brief Abstract base classes for the device driver facade.

The resilience layer (locator chain, condition poller, convergence runner)
only talks to the device through these interfaces, so any backend that can
resolve a selector, capture the screen's view tree and perform a pointer
gesture can be plugged in (Appium/UiAutomator2, an in-memory fake, ...).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional, Tuple

if TYPE_CHECKING:
    from .convergence import PointerPath


class IElementHandle(ABC):
    """
    Abstract handle to one on-screen element.

    A handle may go stale at any moment; callers re-resolve instead of
    keeping handles across actions.
    """

    @abstractmethod
    def exists(self) -> bool:
        """
        Check if the element is still attached to the view tree.

        Returns:
            True if the element exists, False if it is gone or stale
        """
        pass

    @abstractmethod
    def is_visible(self) -> bool:
        """
        Check if the element is displayed.

        Returns:
            True if displayed, False otherwise
        """
        pass

    @abstractmethod
    def is_enabled(self) -> bool:
        """
        Check if the element accepts input.

        Returns:
            True if enabled, False otherwise
        """
        pass

    @abstractmethod
    def click(self) -> None:
        """Tap the element."""
        pass

    @abstractmethod
    def set_text(self, text: str) -> None:
        """
        Replace the element's text.

        Args:
            text: New value (existing text is cleared first)
        """
        pass

    @abstractmethod
    def get_text(self) -> str:
        """
        Get the element's text.

        Returns:
            Visible text content
        """
        pass


class IDriverFacade(ABC):
    """
    Abstract driver interface: the three device capabilities the resilience
    layer needs, plus the viewport size used to build gesture coordinates.

    Implementations raise SessionLostError when the device session is gone.
    """

    @abstractmethod
    def resolve(self, selector: str) -> Optional[IElementHandle]:
        """
        Resolve a selector to a handle.

        Args:
            selector: Encoded selector string (e.g. "~login_button")

        Returns:
            Handle of the first match, or None when nothing matches
        """
        pass

    @abstractmethod
    def snapshot(self) -> str:
        """
        Capture the current screen's full view tree as text.

        Returns:
            Serialized view hierarchy (page source)
        """
        pass

    @abstractmethod
    def perform_gesture(self, path: "PointerPath") -> None:
        """
        Perform one pointer gesture: press at the first point, hold, move
        through the remaining points, release.

        Args:
            path: Ordered pointer coordinates plus hold duration
        """
        pass

    @abstractmethod
    def viewport_size(self) -> Tuple[int, int]:
        """
        Get the screen size.

        Returns:
            (width, height) in pixels
        """
        pass
