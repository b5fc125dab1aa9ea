"""DigitalOcean API client wrapper using pydo SDK.

Converts pydo's JSON payloads into doflip types and attaches the rate
snapshot read from the ``ratelimit-*`` response headers. Every pydo
failure is re-raised as DigitalOceanError.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from loguru import logger
from pydo import Client

from doflip.exceptions import DigitalOceanError
from doflip.types import Action, FloatingIP, NodePool, Rated, RateSnapshot, utcnow


def get_client(token: str) -> Client:
    """Create authenticated pydo client.

    Args:
        token: DigitalOcean API token.

    Returns:
        Authenticated pydo Client instance.
    """
    return Client(token=token)


def _with_headers(_pipeline_response: Any, deserialized: Any, headers: dict[str, Any]) -> tuple[Any, dict[str, Any]]:
    """pydo ``cls`` hook: keep the response headers next to the body."""
    return deserialized, headers or {}


# pydo operation groups this client calls. Floating IPs are served by
# DigitalOcean's reserved IP endpoints.
OPERATION_GROUPS = {
    "reserved_ips": ("get",),
    "reserved_ips_actions": ("post", "get"),
    "kubernetes": ("list_node_pools",),
}


class DigitalOceanClient:
    """Synchronous client for the reserved IP and Kubernetes endpoints.

    Example:
        client = DigitalOceanClient(get_client(token))
        fip = client.get_floating_ip("203.0.113.10").value
    """

    def __init__(self, client: Client, clock: Callable[[], datetime] = utcnow) -> None:
        self._client = client
        self._clock = clock

    def _rated(self, body: Any, headers: dict[str, Any], key: str) -> tuple[Any, RateSnapshot]:
        rate = RateSnapshot.from_headers(headers, now=self._clock())
        logger.trace(f"Rate limit: {rate.remaining}/{rate.limit} until {rate.reset.isoformat()}")
        return (body or {}).get(key), rate

    # =========================================================================
    # Reads
    # =========================================================================

    def get_floating_ip(self, ip: str) -> Rated[FloatingIP]:
        """Get a floating IP and its current droplet assignment."""
        try:
            body, headers = self._client.reserved_ips.get(reserved_ip=ip, cls=_with_headers)
            data, rate = self._rated(body, headers, "reserved_ip")
            if not data:
                raise DigitalOceanError(f"Failed to get floating IP {ip}: {_describe(body)}")
            return Rated(FloatingIP.from_response(data), rate)
        except DigitalOceanError:
            raise
        except Exception as e:
            raise DigitalOceanError(f"Failed to get floating IP {ip}: {e}") from e

    def list_node_pools(self, cluster_id: str) -> Rated[tuple[NodePool, ...]]:
        """List the node pools of a Kubernetes cluster, in API order.

        pydo returns 404 bodies instead of raising, so a body without a
        ``node_pools`` key is an error. An empty list is an empty cluster.
        """
        try:
            body, headers = self._client.kubernetes.list_node_pools(
                cluster_id=cluster_id, cls=_with_headers
            )
            data, rate = self._rated(body, headers, "node_pools")
            if data is None:
                raise DigitalOceanError(
                    f"Failed to list node pools of cluster {cluster_id}: {_describe(body)}"
                )
            return Rated(tuple(NodePool.from_response(p) for p in data), rate)
        except DigitalOceanError:
            raise
        except Exception as e:
            raise DigitalOceanError(f"Failed to list node pools of cluster {cluster_id}: {e}") from e

    # =========================================================================
    # Actions
    # =========================================================================

    def _post_action(self, ip: str, body: dict[str, Any]) -> Rated[Action]:
        try:
            result, headers = self._client.reserved_ips_actions.post(
                reserved_ip=ip, body=body, cls=_with_headers
            )
            data, rate = self._rated(result, headers, "action")
            if not data:
                raise DigitalOceanError(f"Failed to {body['type']} floating IP {ip}: {_describe(result)}")
            return Rated(Action.from_response(data), rate)
        except DigitalOceanError:
            raise
        except Exception as e:
            raise DigitalOceanError(f"Failed to {body['type']} floating IP {ip}: {e}") from e

    def assign(self, ip: str, droplet_id: int) -> Rated[Action]:
        """Point the floating IP at a droplet."""
        return self._post_action(ip, {"type": "assign", "droplet_id": droplet_id})

    def unassign(self, ip: str) -> Rated[Action]:
        """Detach the floating IP from whatever droplet holds it."""
        return self._post_action(ip, {"type": "unassign"})

    def get_action(self, ip: str, action_id: int) -> Rated[Action]:
        """Get the current status of an action on a floating IP."""
        try:
            result, headers = self._client.reserved_ips_actions.get(
                reserved_ip=ip, action_id=action_id, cls=_with_headers
            )
            data, rate = self._rated(result, headers, "action")
            if not data:
                raise DigitalOceanError(f"Failed to get action {action_id}: {_describe(result)}")
            return Rated(Action.from_response(data), rate)
        except DigitalOceanError:
            raise
        except Exception as e:
            raise DigitalOceanError(f"Failed to get action {action_id}: {e}") from e


def _describe(body: Any) -> str:
    """Error text for a response body that lacks the expected key."""
    if isinstance(body, dict) and body.get("id"):
        message = body.get("message")
        return f"{body['id']}: {message}" if message else str(body["id"])
    return "empty response"


__all__ = [
    "OPERATION_GROUPS",
    "DigitalOceanClient",
    "get_client",
]
