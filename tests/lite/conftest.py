from collections.abc import Callable, Generator
from typing import Any

import pytest


def pytest_configure(config: Any) -> None:
    config.addinivalue_line("markers", "unit: fast, isolated unit tests")
    config.addinivalue_line("markers", "fast: tests that run in well under a second")


@pytest.fixture
def test_timezone() -> str:
    """Return a deterministic timezone identifier for tests.

    Using a fixed timezone string avoids host-local timezone differences
    which can make datetime-sensitive tests flaky.
    """
    return "America/New_York"


@pytest.fixture
def make_event(test_timezone: str) -> Callable[..., dict[str, Any]]:
    """Factory for stored event rows (camelCase, as they come out of storage).

    Defaults describe a published one-hour one-off event on 2024-01-01 15:00 UTC;
    keyword arguments override individual fields.
    """

    def _make(**overrides: Any) -> dict[str, Any]:
        row: dict[str, Any] = {
            "id": "evt-1",
            "title": "Fireworks Show",
            "world": "survival",
            "category": "Fireworks",
            "status": "Published",
            "startAt": "2024-01-01T15:00:00Z",
            "endAt": "2024-01-01T16:00:00Z",
            "timezone": test_timezone,
            "recurrenceFreq": "NONE",
            "byWeekdayJson": [],
            "timesJson": [],
            "recurrenceUntil": None,
        }
        row.update(overrides)
        return row

    return _make


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: Any) -> Generator[None, Any, None]:
    """Ensure recurrence_lite environment variables do not leak between tests."""
    for key in (
        "RECURRENCE_LITE_TEST_TIME",
        "RECURRENCE_LITE_DEFAULT_TIMEZONE",
        "RECURRENCE_LITE_DEBUG",
        "RECURRENCE_LITE_LOG_LEVEL",
        "RECURRENCE_LITE_DAYS",
        "RECURRENCE_LITE_LIMIT",
        "RECURRENCE_LITE_MAX_SOURCE_EVENTS",
        "RECURRENCE_LITE_WORKER_CONCURRENCY",
    ):
        monkeypatch.delenv(key, raising=False)
    yield
