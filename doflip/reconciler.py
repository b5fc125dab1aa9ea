"""Reconciliation loop.

One cycle is Fetch, Decide, Execute, Schedule, strictly in that order,
followed by a sleep sized to the remaining API budget. The loop runs
until a fetch fails, which ends it with that failure's exit code.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from loguru import logger

from doflip.decision import decide
from doflip.executor import ActionExecutor
from doflip.fetcher import FetchFailed, fetch_state
from doflip.scheduler import next_cycle_delay
from doflip.types import Action, Decision, FloatingIPApi, RateSnapshot, utcnow


@dataclass(frozen=True, slots=True)
class CycleCompleted:
    decision: Decision
    action: Action | None
    rate: RateSnapshot
    delay: timedelta


type CycleResult = CycleCompleted | FetchFailed


class Reconciler:
    """Keeps one floating IP pointed at a node of one cluster.

    Args:
        client: DigitalOcean API.
        floating_ip: Address of the floating IP to manage.
        cluster_id: Kubernetes cluster whose nodes are eligible.
        sleep: Blocking sleep, in seconds.
        clock: Current time.
    """

    def __init__(
        self,
        client: FloatingIPApi,
        floating_ip: str,
        cluster_id: str,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._client = client
        self._floating_ip = floating_ip
        self._cluster_id = cluster_id
        self._sleep = sleep
        self._clock = clock
        self._executor = ActionExecutor(client, sleep=sleep, clock=clock)
        self._log = logger.bind(floating_ip=floating_ip, cluster_id=cluster_id)

    def reconcile(self) -> CycleResult:
        """Run a single cycle without the trailing sleep."""
        fetched = fetch_state(self._client, self._floating_ip, self._cluster_id)
        if isinstance(fetched, FetchFailed):
            return fetched

        state = fetched.state
        rate = state.rate
        decision = decide(state.floating_ip, state.node_pools)

        action: Action | None = None
        if decision.should_change:
            action = self._executor.execute(state.floating_ip, decision.target_droplet_id)
            if action is not None:
                polled = self._executor.wait(state.floating_ip, action)
                action, rate = polled.value, polled.rate

        delay = next_cycle_delay(rate, now=self._clock())
        if rate.exhausted:
            self._log.bind(sleep=delay).info("Waiting until the rate limit has been reset")
        else:
            self._log.bind(sleep=delay).info("Waiting before checking floating IP assignment again")

        return CycleCompleted(decision=decision, action=action, rate=rate, delay=delay)

    def run(self) -> int:
        """Reconcile forever. Returns an exit code only on a fatal fetch error."""
        self._log.info("Starting floating IP controller")
        while True:
            result = self.reconcile()
            if isinstance(result, FetchFailed):
                self._log.critical(f"{result.message}: {result.error}")
                return result.exit_code
            self._sleep(result.delay.total_seconds())


__all__ = [
    "CycleCompleted",
    "CycleResult",
    "Reconciler",
]
