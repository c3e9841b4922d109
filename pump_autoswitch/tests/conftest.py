import sys
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

BASE_DIR = Path(__file__).resolve().parents[2]
if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))


class FakeClock:
    """Manually driven monotonic clock for timer tests."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def actuator() -> AsyncMock:
    mock = AsyncMock()
    mock.set_pump.return_value = None
    return mock


@pytest.fixture()
def notifier() -> AsyncMock:
    mock = AsyncMock()
    mock.notify.return_value = None
    return mock
