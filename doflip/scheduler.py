"""Rate-budget scheduling.

DigitalOcean grants a fixed number of API calls per window. The
controller spreads what is left evenly over the time until the window
resets, and never runs a cycle more often than once a minute.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from doflip.types import RateSnapshot

# Estimated API calls per reconciliation cycle.
CALLS_PER_CYCLE = 5

MIN_CYCLE_DELAY = timedelta(minutes=1)
RESET_MARGIN = timedelta(seconds=5)
POLL_INTERVAL = timedelta(seconds=10)

_ZERO = timedelta(0)


def next_cycle_delay(rate: RateSnapshot, now: datetime | None = None) -> timedelta:
    """Delay before the next reconciliation cycle.

    Args:
        rate: Latest rate snapshot seen during the cycle.
        now: Current time. Defaults to the wall clock.

    Returns:
        ``until_reset + 5s`` when the quota is spent, otherwise the time
        until reset divided by the cycles the quota still affords, but
        at least one minute.
    """
    until_reset = timedelta(seconds=rate.until_reset(now))

    if rate.exhausted:
        return max(until_reset + RESET_MARGIN, _ZERO)

    possible_cycles = max(rate.remaining // CALLS_PER_CYCLE, 1)
    return max(until_reset / possible_cycles, MIN_CYCLE_DELAY)


def poll_delay(rate: RateSnapshot, now: datetime | None = None) -> timedelta:
    """Delay before polling an in-flight action again."""
    if rate.exhausted:
        return max(timedelta(seconds=rate.until_reset(now)), _ZERO)
    return POLL_INTERVAL


__all__ = [
    "CALLS_PER_CYCLE",
    "MIN_CYCLE_DELAY",
    "POLL_INTERVAL",
    "RESET_MARGIN",
    "next_cycle_delay",
    "poll_delay",
]
