"""Action execution.

Issues the assign/unassign call a decision asks for, then polls the
resulting action until it leaves ``in-progress``. Failures here are never
fatal: a failed call is logged and the next cycle decides again.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import datetime

from loguru import logger
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    retry_if_result,
    stop_never,
)

from doflip.exceptions import DigitalOceanError
from doflip.scheduler import POLL_INTERVAL, poll_delay
from doflip.types import Action, FloatingIP, FloatingIPApi, Rated, utcnow


class ActionExecutor:
    """Applies assignment changes to a floating IP.

    Args:
        client: DigitalOcean API.
        sleep: Blocking sleep, in seconds. Injected by tests.
        clock: Current time, used against the rate-limit reset.
    """

    def __init__(
        self,
        client: FloatingIPApi,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._client = client
        self._sleep = sleep
        self._clock = clock

    def execute(self, floating_ip: FloatingIP, target_droplet_id: int) -> Action | None:
        """Issue the action moving ``floating_ip`` to ``target_droplet_id``.

        A target of 0 unassigns the IP. Returns None when nothing was
        issued, either because the IP is already unassigned or because
        the call failed.
        """
        log = logger.bind(floating_ip=floating_ip.ip, droplet_id=target_droplet_id)
        log.debug("Floating IP is about to change")

        try:
            if target_droplet_id != 0:
                log.info("Assigning floating IP to a(nother) droplet")
                return self._client.assign(floating_ip.ip, target_droplet_id).value
            if floating_ip.assigned:
                log.info("Unassigning floating IP because cluster has no droplets")
                return self._client.unassign(floating_ip.ip).value
        except DigitalOceanError as e:
            log.error(f"Could not perform action on floating IP: {e}")
            return None

        log.debug("Floating IP is already unassigned")
        return None

    def wait(self, floating_ip: FloatingIP, action: Action) -> Rated[Action]:
        """Poll ``action`` until its status is no longer ``in-progress``.

        There is no attempt limit. Poll failures are logged and retried
        after the fixed poll interval.
        """
        log = logger.bind(floating_ip=floating_ip.ip, action_id=action.id)

        def next_wait(state: RetryCallState) -> float:
            outcome = state.outcome
            if outcome is None or outcome.failed:
                return POLL_INTERVAL.total_seconds()
            return poll_delay(outcome.result().rate, now=self._clock()).total_seconds()

        def before_sleep(state: RetryCallState) -> None:
            outcome = state.outcome
            if outcome is not None and outcome.failed:
                log.error(f"Could not check status of action on floating IP: {outcome.exception()}")
            else:
                log.trace("Waiting until action on floating IP completes")

        retrying = Retrying(
            retry=retry_if_exception_type(DigitalOceanError)
            | retry_if_result(lambda r: r.value.in_progress),
            wait=next_wait,
            stop=stop_never,
            sleep=self._sleep,
            before_sleep=before_sleep,
            reraise=True,
        )
        result: Rated[Action] = retrying(self._client.get_action, floating_ip.ip, action.id)

        if result.value.status == "completed":
            log.info(f"Action {result.value.type or action.type} on floating IP completed")
        else:
            log.warning(
                f"Action {result.value.type or action.type} on floating IP ended with status {result.value.status}"
            )
        return result


__all__ = ["ActionExecutor"]
