"""doflip - keeps a DigitalOcean floating IP on a live Kubernetes node.

Example:
    from doflip import DigitalOceanClient, Reconciler, Settings, get_client

    settings = Settings.from_env()
    client = DigitalOceanClient(get_client(settings.token))
    Reconciler(client, settings.floating_ip, settings.cluster_id).run()
"""

from doflip.client import DigitalOceanClient, get_client
from doflip.config import Settings
from doflip.decision import decide
from doflip.exceptions import (
    ConfigurationError,
    DigitalOceanError,
    DoflipError,
    DropletIdError,
    MissingSettingsError,
)
from doflip.executor import ActionExecutor
from doflip.fetcher import FetchFailed, StateFetched, fetch_state
from doflip.logging import LogConfig, setup_logging
from doflip.reconciler import CycleCompleted, Reconciler
from doflip.scheduler import next_cycle_delay, poll_delay
from doflip.types import (
    Action,
    ClusterState,
    Decision,
    FloatingIP,
    Node,
    NodePool,
    Rated,
    RateSnapshot,
)

__version__ = "0.1.0"

__all__ = [
    "Action",
    "ActionExecutor",
    "ClusterState",
    "ConfigurationError",
    "CycleCompleted",
    "Decision",
    "DigitalOceanClient",
    "DigitalOceanError",
    "DoflipError",
    "DropletIdError",
    "FetchFailed",
    "FloatingIP",
    "LogConfig",
    "MissingSettingsError",
    "Node",
    "NodePool",
    "RateSnapshot",
    "Rated",
    "Reconciler",
    "Settings",
    "StateFetched",
    "decide",
    "fetch_state",
    "get_client",
    "next_cycle_delay",
    "poll_delay",
    "setup_logging",
]
