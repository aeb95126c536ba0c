"""Unit tests for cancellation tokens and window time units."""

from __future__ import annotations

import pytest

from crptapi.throttle.cancellation import CancellationToken
from crptapi.throttle.units import TimeUnit


def test_cancel_runs_registered_callbacks_exactly_once() -> None:
    """Cancelling twice should notify each registered callback a single time."""

    token = CancellationToken()
    calls: list[str] = []
    token.add_callback(lambda: calls.append("first"))
    token.add_callback(lambda: calls.append("second"))

    token.cancel()
    token.cancel()

    assert token.cancelled is True
    assert calls == ["first", "second"]


def test_removed_callback_is_not_run() -> None:
    """Unregistered callbacks should be skipped on cancellation."""

    token = CancellationToken()
    calls: list[str] = []
    handle = token.add_callback(lambda: calls.append("removed"))
    token.remove_callback(handle)
    token.remove_callback(None)

    token.cancel()

    assert calls == []


def test_callback_added_after_cancel_runs_immediately() -> None:
    """Late registration should run the callback at once and return no handle."""

    token = CancellationToken()
    token.cancel()
    calls: list[str] = []

    handle = token.add_callback(lambda: calls.append("late"))

    assert handle is None
    assert calls == ["late"]


@pytest.mark.parametrize(
    ("name", "seconds"),
    [("milliseconds", 0.001), ("SECONDS", 1.0), (" minutes ", 60.0), ("hours", 3600.0), ("days", 86400.0)],
)
def test_time_unit_parse_accepts_case_insensitive_names(name: str, seconds: float) -> None:
    """Unit names should parse regardless of case and surrounding whitespace."""

    assert TimeUnit.parse(name).seconds == seconds


def test_time_unit_parse_rejects_unknown_names() -> None:
    """Unknown unit names should raise with the supported list."""

    with pytest.raises(ValueError, match="supported: milliseconds, seconds"):
        TimeUnit.parse("weeks")

    assert TimeUnit.parse(TimeUnit.HOURS) is TimeUnit.HOURS
