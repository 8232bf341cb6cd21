"""Page objects for the sample login app and the API Demos screens."""

from .base import BasePage
from .login import LoginPage
from .home import HomePage
from .views import ViewsPage
from .animations import AnimationsPage
from .accessibility import AccessibilityPage

__all__ = [
    "BasePage", "LoginPage", "HomePage", "ViewsPage", "AnimationsPage", "AccessibilityPage",
]
