import pytest

import core.cache as cache_mod


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
            self.resources[uri] = fn
            return fn
        return _decorator


class RecordingLogger:
    """Captures (level, message, extra) tuples like a logging.Logger would receive."""

    def __init__(self) -> None:
        self.records = []

    def _record(self, level, msg, extra=None):
        self.records.append((level, msg, dict(extra or {})))

    def debug(self, msg, *, extra=None):
        self._record("debug", msg, extra)

    def info(self, msg, *, extra=None):
        self._record("info", msg, extra)

    def warning(self, msg, *, extra=None):
        self._record("warning", msg, extra)

    def error(self, msg, *, extra=None):
        self._record("error", msg, extra)

    def messages(self, level=None):
        return [m for (lvl, m, _) in self.records if level is None or lvl == level]


@pytest.fixture
def dummy_mcp():
    return DummyMCP()


@pytest.fixture
def recording_logger():
    return RecordingLogger()


@pytest.fixture
def fake_clock(monkeypatch):
    t = {"now": 0.0}

    def fake_monotonic():
        return t["now"]

    monkeypatch.setattr(cache_mod.time, "monotonic", fake_monotonic)
    return t


@pytest.fixture(autouse=True)
def no_random_sweep(monkeypatch):
    # Probabilistic sweeps are switched off unless a test opts back in.
    monkeypatch.setattr(cache_mod.random, "random", lambda: 1.0)
