from __future__ import annotations

import time

import pytest


@pytest.fixture()
def utc_plus_one(monkeypatch):
    """Run with the local zone fixed at UTC+1 (POSIX rule, no tz database needed)."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "CET-1")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()
