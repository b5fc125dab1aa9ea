"""Assignment decision.

Compares the floating IP's current droplet with the cluster's nodes and
picks the droplet it should point at.
"""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from doflip.exceptions import DropletIdError
from doflip.types import Decision, FloatingIP, NodePool, parse_droplet_id


def decide(floating_ip: FloatingIP, node_pools: Sequence[NodePool]) -> Decision:
    """Decide whether the floating IP must move, and where to.

    Pools are scanned in order, nodes within a pool in order. The first
    node that proves the current assignment correct, or any parseable
    node when the IP is unassigned, ends the scan. A node whose droplet
    id does not parse ends the scan of its pool only.

    Without a stop condition the result asks for a change to the last
    parsed droplet, or to 0 (unassign) when no node parsed.
    """
    log = logger.bind(floating_ip=floating_ip.ip)
    target = 0

    for pool in node_pools:
        log.debug(f"Processing node pool {pool.name or pool.id}")
        for node in pool.nodes:
            try:
                droplet_id = parse_droplet_id(node.droplet_id)
            except DropletIdError as e:
                log.bind(node=node.name or node.id).warning(f"Could not parse droplet id: {e}")
                break

            target = droplet_id

            if not floating_ip.assigned:
                log.bind(droplet_id=target).debug("Floating IP is currently unassigned")
                return Decision(should_change=True, target_droplet_id=target)

            if droplet_id == floating_ip.droplet_id:
                log.bind(droplet_id=target).info(
                    "Floating IP is already assigned to a droplet in the cluster"
                )
                return Decision(should_change=False, target_droplet_id=target)

    return Decision(should_change=True, target_droplet_id=target)


__all__ = ["decide"]
