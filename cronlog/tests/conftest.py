"""
Shared fixtures for the cronlog test suite.
"""

from datetime import datetime, timedelta, timezone

import pytest

from cronlog.models import OperationResult
from cronlog.storage import ResultStore


class StepClock:
    """Deterministic clock: each call returns the next instant."""

    def __init__(self, start: datetime, step: timedelta = timedelta(minutes=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current = self.current + self.step
        return now


CLOCK_START = datetime(2025, 12, 1, 10, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "cronlog-store.db"


@pytest.fixture
def store(db_path):
    """Empty file-backed store using the real clock."""
    with ResultStore(db_path) as s:
        yield s


@pytest.fixture
def clock():
    return StepClock(CLOCK_START)


@pytest.fixture
def clocked_store(db_path, clock):
    """Empty store whose clock advances one minute per insert."""
    with ResultStore(db_path, clock=clock) as s:
        yield s


def make_result(application: str = "test", success: bool = True, output: str = "") -> OperationResult:
    return OperationResult(application=application, success=success, output=output)


@pytest.fixture
def ten_results(store):
    """Store holding test_0 .. test_9, inserted in that order."""
    for i in range(10):
        store.create(make_result(f"test_{i}"))
    return store
