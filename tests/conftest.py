"""Shared fixtures."""

from datetime import datetime, timedelta

import pytest


class FakeClock:
    """Manually advanced stand-in for datetime.now."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2098, 12, 31, 0, 0, 0))
