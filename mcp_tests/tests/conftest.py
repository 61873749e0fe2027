import pytest

import core.cache as cache_mod
from core.cache import CacheManager


class DummyMCP:
    """Minimal FastMCP stand-in to capture tool and resource registration."""

    def __init__(self) -> None:
        self.tools = {}
        self.resources = {}

    def tool(self, *, name: str):
        def _decorator(fn):
            self.tools[name] = fn
            return fn
        return _decorator

    def resource(self, uri: str, **kwargs):
        def _decorator(fn):
            self.resources[uri] = {"fn": fn, **kwargs}
            return fn
        return _decorator


class FakeClock:
    """Controllable time.monotonic_ns replacement."""

    def __init__(self, now_ms: int = 0) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms * 1_000_000

    def advance(self, ms: int) -> None:
        self.now_ms += ms


@pytest.fixture
def dummy_mcp():
    return DummyMCP()


@pytest.fixture
def clock(monkeypatch):
    c = FakeClock(now_ms=100_000)
    monkeypatch.setattr(cache_mod.time, "monotonic_ns", c)
    return c


@pytest.fixture
def cache(clock):
    return CacheManager()
