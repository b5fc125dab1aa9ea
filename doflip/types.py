"""Domain types for the floating IP controller.

Immutable snapshots of DigitalOcean state. Every cycle builds them fresh
from API responses; nothing here is cached across cycles.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Protocol

from doflip.exceptions import DropletIdError

ACTION_IN_PROGRESS = "in-progress"

# DigitalOcean allows 5000 requests per hour per token.
DEFAULT_RATE_LIMIT = 5000

_DROPLET_ID_PATTERN = re.compile(r"[+-]?[0-9]+")


def utcnow() -> datetime:
    return datetime.now(UTC)


# =============================================================================
# Rate Limiting
# =============================================================================


@dataclass(frozen=True, slots=True)
class RateSnapshot:
    """API call quota as reported by the ratelimit-* response headers.

    Attributes:
        limit: Total calls allowed per window.
        remaining: Calls left in the current window.
        reset: Absolute time at which the window resets.
    """

    limit: int
    remaining: int
    reset: datetime

    @classmethod
    def from_headers(cls, headers: Mapping[str, Any], now: datetime | None = None) -> RateSnapshot:
        """Build a snapshot from response headers.

        Missing headers mean full quota with a window resetting now.
        """
        now = now or utcnow()
        limit = _header_int(headers, "ratelimit-limit")
        limit = DEFAULT_RATE_LIMIT if limit is None else limit

        remaining = _header_int(headers, "ratelimit-remaining")
        reset = _header_int(headers, "ratelimit-reset")

        return cls(
            limit=limit,
            remaining=limit if remaining is None else remaining,
            reset=now if reset is None else datetime.fromtimestamp(reset, UTC),
        )

    def until_reset(self, now: datetime | None = None) -> float:
        """Seconds until the quota resets. Negative once the reset has passed."""
        return (self.reset - (now or utcnow())).total_seconds()

    @property
    def exhausted(self) -> bool:
        return self.remaining <= 0


def _header_int(headers: Mapping[str, Any], name: str) -> int | None:
    value = headers.get(name)
    if value is None or value == "":
        return None
    return int(value)


@dataclass(frozen=True, slots=True)
class Rated[T]:
    """An API response value together with the rate snapshot it carried."""

    value: T
    rate: RateSnapshot


# =============================================================================
# Cloud State
# =============================================================================


@dataclass(frozen=True, slots=True)
class FloatingIP:
    """A floating IP and the droplet it currently points at.

    ``droplet_id is None`` means the address is unassigned.
    """

    ip: str
    droplet_id: int | None = None
    region: str = ""

    @property
    def assigned(self) -> bool:
        return self.droplet_id is not None

    @classmethod
    def from_response(cls, data: Mapping[str, Any]) -> FloatingIP:
        droplet = data.get("droplet") or None
        region = data.get("region") or {}
        return cls(
            ip=data["ip"],
            droplet_id=int(droplet["id"]) if droplet else None,
            region=region.get("slug", "") if isinstance(region, Mapping) else "",
        )


@dataclass(frozen=True, slots=True)
class Node:
    """A Kubernetes node. ``droplet_id`` is text as returned by the API."""

    id: str
    name: str
    droplet_id: str | None

    @classmethod
    def from_response(cls, data: Mapping[str, Any]) -> Node:
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            droplet_id=data.get("droplet_id"),
        )


@dataclass(frozen=True, slots=True)
class NodePool:
    id: str
    name: str
    nodes: tuple[Node, ...] = ()

    @classmethod
    def from_response(cls, data: Mapping[str, Any]) -> NodePool:
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            nodes=tuple(Node.from_response(n) for n in data.get("nodes") or ()),
        )


@dataclass(frozen=True, slots=True)
class Action:
    """An assign/unassign operation on a floating IP."""

    id: int
    status: str
    type: str = ""

    @property
    def in_progress(self) -> bool:
        return self.status == ACTION_IN_PROGRESS

    @classmethod
    def from_response(cls, data: Mapping[str, Any]) -> Action:
        return cls(id=int(data["id"]), status=data["status"], type=data.get("type", ""))


@dataclass(frozen=True, slots=True)
class ClusterState:
    """Everything one reconciliation cycle reads before deciding."""

    floating_ip: FloatingIP
    node_pools: tuple[NodePool, ...]
    rate: RateSnapshot


@dataclass(frozen=True, slots=True)
class Decision:
    """Outcome of comparing the floating IP assignment with the cluster nodes.

    A ``target_droplet_id`` of 0 means there is no candidate and the
    floating IP should be unassigned.
    """

    should_change: bool
    target_droplet_id: int = 0


def parse_droplet_id(text: str | None) -> int:
    """Parse a droplet id as an optionally signed run of ASCII digits."""
    if text is None or not _DROPLET_ID_PATTERN.fullmatch(text):
        raise DropletIdError(text)
    return int(text)


# =============================================================================
# API Protocol
# =============================================================================


class FloatingIPApi(Protocol):
    """The DigitalOcean calls the controller depends on."""

    def get_floating_ip(self, ip: str) -> Rated[FloatingIP]: ...

    def list_node_pools(self, cluster_id: str) -> Rated[tuple[NodePool, ...]]: ...

    def assign(self, ip: str, droplet_id: int) -> Rated[Action]: ...

    def unassign(self, ip: str) -> Rated[Action]: ...

    def get_action(self, ip: str, action_id: int) -> Rated[Action]: ...


__all__ = [
    "ACTION_IN_PROGRESS",
    "DEFAULT_RATE_LIMIT",
    "Action",
    "ClusterState",
    "Decision",
    "FloatingIP",
    "FloatingIPApi",
    "Node",
    "NodePool",
    "RateSnapshot",
    "Rated",
    "parse_droplet_id",
    "utcnow",
]
