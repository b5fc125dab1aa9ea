"""State fetching.

Reads the floating IP and the cluster's node pools. Either read failing
is fatal for the controller; the failure is returned as a FetchFailed
result carrying the process exit code, and the driver decides what to do
with it.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from doflip.exceptions import DigitalOceanError
from doflip.types import ClusterState, FloatingIPApi

EXIT_FLOATING_IP_FETCH = 100
EXIT_NODE_POOL_FETCH = 101


@dataclass(frozen=True, slots=True)
class StateFetched:
    state: ClusterState


@dataclass(frozen=True, slots=True)
class FetchFailed:
    message: str
    error: DigitalOceanError
    exit_code: int


type FetchResult = StateFetched | FetchFailed


def fetch_state(client: FloatingIPApi, floating_ip: str, cluster_id: str) -> FetchResult:
    """Read the current assignment and cluster membership. No retries."""
    log = logger.bind(floating_ip=floating_ip, cluster_id=cluster_id)

    try:
        fip = client.get_floating_ip(floating_ip).value
    except DigitalOceanError as e:
        return FetchFailed("Could not find floating IP", e, EXIT_FLOATING_IP_FETCH)
    log.debug(f"Found floating IP in region {fip.region or 'unknown'}")

    try:
        pools = client.list_node_pools(cluster_id)
    except DigitalOceanError as e:
        return FetchFailed("Could not find node pools of kubernetes cluster", e, EXIT_NODE_POOL_FETCH)
    log.debug(f"Retrieved {len(pools.value)} node pools")

    return StateFetched(ClusterState(floating_ip=fip, node_pools=pools.value, rate=pools.rate))


__all__ = [
    "EXIT_FLOATING_IP_FETCH",
    "EXIT_NODE_POOL_FETCH",
    "FetchFailed",
    "FetchResult",
    "StateFetched",
    "fetch_state",
]
