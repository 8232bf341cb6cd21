# tests/conftest.py
import pytest

from uiauto_core import convergence, waits
from uiauto_core.config import TimeConfig
from uiauto_core.context import ActionContextManager


class VirtualClock:
    """Deterministic time source: sleeping advances `now` instantly."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def time(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture(autouse=True)
def _reset_state():
    TimeConfig.reset_to_defaults()
    ActionContextManager.clear()
    yield
    TimeConfig.reset_to_defaults()
    ActionContextManager.clear()


@pytest.fixture
def clock(monkeypatch):
    vc = VirtualClock()
    for module in (waits, convergence):
        monkeypatch.setattr(module, "_now", vc.time)
        monkeypatch.setattr(module, "_sleep", vc.sleep)
    return vc
