import pytest


@pytest.fixture(autouse=True)
def no_forced_color(monkeypatch):
    """Keep rich from enabling colour for the captured streams.

    The rendering tests compare exact bytes and assume plain-text sinks.
    """
    monkeypatch.delenv("FORCE_COLOR", raising=False)
    monkeypatch.delenv("TTY_COMPATIBLE", raising=False)
