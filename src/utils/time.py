"""
Time, clock and deadline abstractions for gateway calls.

This module provides a simple, testable way to obtain "now" via a clock object
rather than calling datetime.now() directly. Gateway calls compute their
deadline from the clock at the moment they are issued, so tests can freeze time
and assert exact deadlines, and repeated calls each get a fresh budget.
"""

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    """
    Abstract time source protocol.

    **Conceptual**: A Clock is any object that can answer the question "what time
    is it right now?" Depending on this abstraction instead of calling
    datetime.now() directly keeps deadline computation deterministic in tests.

    **Usage**: Consumers accept a Clock instance (injected via constructor) and
    call clock.now() whenever they need the current time. In production, pass a
    RealClock; in tests, pass a FrozenClock.
    """

    def now(self) -> datetime:
        """
        Return the current time according to this clock.

        Returns:
            datetime object representing "now" (timezone-aware, UTC).
        """
        ...


class RealClock:
    """Clock that returns the actual current system time (UTC)."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FrozenClock:
    """
    Clock that returns a fixed timestamp until explicitly advanced.

    **Usage**:
        clock = FrozenClock(datetime(2024, 1, 5, tzinfo=timezone.utc))
        clock.now()                       # 2024-01-05T00:00:00+00:00
        clock.advance(timedelta(seconds=3))
        clock.now()                       # 2024-01-05T00:00:03+00:00
    """

    def __init__(self, fixed_now: datetime):
        """
        Args:
            fixed_now: The datetime to return from now(). Should be timezone-aware.
        """
        self._fixed_now = fixed_now

    def now(self) -> datetime:
        return self._fixed_now

    def advance(self, delta: timedelta) -> None:
        """Move the frozen time forward by ``delta``."""
        self._fixed_now = self._fixed_now + delta


def deadline_after(duration: timedelta, clock: Clock) -> datetime:
    """
    Compute an absolute deadline ``duration`` from now.

    Args:
        duration: Time budget for the call.
        clock: Time source.

    Returns:
        clock.now() + duration.
    """
    return clock.now() + duration


def seconds_until(deadline: datetime, clock: Clock) -> float:
    """
    Return the number of seconds left before ``deadline`` (never negative).

    gRPC takes a relative timeout, so the absolute deadline is converted back
    just before the call is made. An already-expired deadline maps to 0, which
    makes the call fail immediately with DEADLINE_EXCEEDED.
    """
    return max((deadline - clock.now()).total_seconds(), 0.0)
