"""Fixed-window admission gate used around external API requests.

Responsibilities:
- Admit at most `capacity` callers per window of `window_seconds`.
- Block callers beyond capacity until a later window replenishes permits.
- Detect window rollover lazily, from inside `acquire`, without a timer thread.

Key types:
- `AdmissionGate`: thread-safe blocking gate shared by all request threads.
"""

from __future__ import annotations

from collections import deque
import math
import threading
from time import monotonic
from typing import Callable

from ..errors import AcquireCancelledError, InvalidConfigurationError
from .cancellation import CancellationToken
from .units import TimeUnit


class AdmissionGate:
    """Blocking fixed-window limiter with full replenishment on rollover.

    A window opens when a caller arrives at or after the previous window's end;
    it then lasts `window_seconds` and holds `capacity` permits. Waiters are
    admitted in arrival order. A waiter that is still blocked when the window
    ends performs the rollover itself, since it is a caller inside `acquire`.
    """

    def __init__(
        self,
        window_seconds: float,
        capacity: int,
        *,
        clock: Callable[[], float] = monotonic,
    ) -> None:
        """Initialize gate policy and an already-lapsed first window.

        Raises:
            InvalidConfigurationError: If the window or capacity is not positive.
        """

        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise InvalidConfigurationError(
                f"Gate capacity must be a positive integer, got `{capacity!r}`."
            )
        if (
            isinstance(window_seconds, bool)
            or not isinstance(window_seconds, (int, float))
            or not math.isfinite(window_seconds)
            or window_seconds <= 0
        ):
            raise InvalidConfigurationError(
                f"Gate window must be a positive finite duration, got `{window_seconds!r}`."
            )

        self._window_seconds = float(window_seconds)
        self._capacity = capacity
        self._clock = clock
        self._condition = threading.Condition(threading.Lock())
        self._window_end = clock()
        self._remaining = capacity
        self._waiters: deque[object] = deque()

    @classmethod
    def for_time_unit(
        cls,
        time_unit: TimeUnit | str,
        capacity: int,
        *,
        clock: Callable[[], float] = monotonic,
    ) -> AdmissionGate:
        """Create a gate whose window is exactly one `time_unit` long."""

        try:
            unit = TimeUnit.parse(time_unit)
        except ValueError as exc:
            raise InvalidConfigurationError(str(exc)) from exc
        return cls(unit.seconds, capacity, clock=clock)

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def remaining(self) -> int:
        """Return unused permits in the current window, without rolling it."""

        with self._condition:
            return self._remaining

    @property
    def waiting(self) -> int:
        """Return how many callers are currently blocked in `acquire`."""

        with self._condition:
            return len(self._waiters)

    def acquire(
        self,
        cancel_token: CancellationToken | None = None,
        timeout: float | None = None,
    ) -> None:
        """Block until one permit is granted to the caller.

        Args:
            cancel_token: Optional token whose cancellation abandons the wait.
            timeout: Optional maximum wait in seconds; `0` means do not wait.

        Raises:
            AcquireCancelledError: If the token is cancelled or the timeout
                elapses before a permit is granted. No permit is consumed.
        """

        deadline = None if timeout is None else self._clock() + max(timeout, 0.0)
        handle = None
        if cancel_token is not None:
            handle = cancel_token.add_callback(self._wake_waiters)
        try:
            with self._condition:
                self._admit(cancel_token, deadline)
        finally:
            if cancel_token is not None:
                cancel_token.remove_callback(handle)

    def _admit(self, cancel_token: CancellationToken | None, deadline: float | None) -> None:
        """Grant one permit to the caller; must run under the gate lock."""

        ticket = object()
        queued = False
        try:
            while True:
                if cancel_token is not None and cancel_token.cancelled:
                    raise AcquireCancelledError(
                        "Admission wait was cancelled.", reason="cancelled"
                    )
                now = self._clock()
                self._roll_window(now)
                if self._remaining > 0 and (
                    not self._waiters or self._waiters[0] is ticket
                ):
                    if queued:
                        self._waiters.popleft()
                        queued = False
                    self._remaining -= 1
                    if self._waiters and self._remaining > 0:
                        self._condition.notify_all()
                    return

                wait_seconds = self._window_end - now
                if deadline is not None:
                    if now >= deadline:
                        raise AcquireCancelledError(
                            "Admission wait exceeded its deadline.", reason="deadline"
                        )
                    wait_seconds = min(wait_seconds, deadline - now)
                if not queued:
                    self._waiters.append(ticket)
                    queued = True
                self._condition.wait(wait_seconds)
        finally:
            if queued:
                self._waiters.remove(ticket)
                self._condition.notify_all()

    def _roll_window(self, now: float) -> None:
        """Open a fresh full window once the current one has lapsed."""

        if now < self._window_end:
            return
        self._window_end = now + self._window_seconds
        self._remaining = self._capacity
        if self._waiters:
            self._condition.notify_all()

    def _wake_waiters(self) -> None:
        """Wake every blocked caller so it re-checks cancellation and permits."""

        with self._condition:
            self._condition.notify_all()
