from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest
from loguru import logger

from doflip.exceptions import DigitalOceanError
from doflip.types import Action, FloatingIP, Node, NodePool, Rated, RateSnapshot

NOW = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)
FIP = "203.0.113.10"
CLUSTER = "c0ffee00-0000-4000-8000-000000000000"


def clock() -> datetime:
    return NOW


def rate(remaining: int = 4000, reset_in: float = 3600.0) -> RateSnapshot:
    return RateSnapshot(limit=5000, remaining=remaining, reset=NOW + timedelta(seconds=reset_in))


def pool(*droplet_ids: str | None, name: str = "pool") -> NodePool:
    nodes = tuple(Node(id=f"node-{i}", name=f"{name}-{i}", droplet_id=d) for i, d in enumerate(droplet_ids))
    return NodePool(id=name, name=name, nodes=nodes)


@dataclass
class FakeApi:
    """In-memory stand-in for DigitalOceanClient.

    ``statuses`` feeds get_action: each entry is a status string, or an
    exception to raise for that poll.
    """

    floating_ip: FloatingIP = field(default_factory=lambda: FloatingIP(ip=FIP))
    pools: tuple[NodePool, ...] = ()
    rate: RateSnapshot = field(default_factory=rate)
    poll_rate: RateSnapshot | None = None
    statuses: list[str | Exception] = field(default_factory=lambda: ["completed"])
    fail_floating_ip: bool = False
    fail_node_pools: bool = False
    fail_action: bool = False
    calls: list[tuple] = field(default_factory=list)

    def get_floating_ip(self, ip: str) -> Rated[FloatingIP]:
        self.calls.append(("get_floating_ip", ip))
        if self.fail_floating_ip:
            raise DigitalOceanError("Failed to get floating IP: 404")
        return Rated(self.floating_ip, self.rate)

    def list_node_pools(self, cluster_id: str) -> Rated[tuple[NodePool, ...]]:
        self.calls.append(("list_node_pools", cluster_id))
        if self.fail_node_pools:
            raise DigitalOceanError("Failed to list node pools: 500")
        return Rated(self.pools, self.rate)

    def assign(self, ip: str, droplet_id: int) -> Rated[Action]:
        self.calls.append(("assign", ip, droplet_id))
        if self.fail_action:
            raise DigitalOceanError("Failed to assign floating IP: 422")
        return Rated(Action(id=1, status="in-progress", type="assign"), self.rate)

    def unassign(self, ip: str) -> Rated[Action]:
        self.calls.append(("unassign", ip))
        if self.fail_action:
            raise DigitalOceanError("Failed to unassign floating IP: 422")
        return Rated(Action(id=2, status="in-progress", type="unassign"), self.rate)

    def get_action(self, ip: str, action_id: int) -> Rated[Action]:
        self.calls.append(("get_action", ip, action_id))
        status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        if isinstance(status, Exception):
            raise status
        return Rated(Action(id=action_id, status=status), self.poll_rate or self.rate)

    @property
    def writes(self) -> list[tuple]:
        return [c for c in self.calls if c[0] in ("assign", "unassign")]


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def log_messages() -> Iterator[list[str]]:
    messages: list[str] = []
    hid = logger.add(lambda m: messages.append(f"{m.record['level'].name} {m.record['message']}"), level="TRACE")
    yield messages
    logger.remove(hid)
