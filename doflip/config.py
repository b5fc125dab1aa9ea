"""Environment-based controller configuration.

All three values are required. Every missing one is reported before
giving up, and the count of missing values becomes the exit code.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from loguru import logger

from doflip.exceptions import MissingSettingsError

TOKEN_ENV = "DO_API_TOKEN"
FLOATING_IP_ENV = "DO_FLOATING_IP"
CLUSTER_ID_ENV = "DO_CLUSTER_ID"

REQUIRED_ENV = (TOKEN_ENV, FLOATING_IP_ENV, CLUSTER_ID_ENV)


@dataclass(frozen=True, slots=True)
class Settings:
    """Controller configuration.

    Args:
        token: DigitalOcean API token.
        floating_ip: Address of the floating IP to manage.
        cluster_id: Kubernetes cluster whose nodes may hold the IP.
    """

    token: str = field(repr=False)
    floating_ip: str
    cluster_id: str

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ

        missing = [name for name in REQUIRED_ENV if not env.get(name)]
        for name in missing:
            logger.error(f"Environment variable {name} is required")
        if missing:
            raise MissingSettingsError(missing)

        return cls(
            token=env[TOKEN_ENV],
            floating_ip=env[FLOATING_IP_ENV],
            cluster_id=env[CLUSTER_ID_ENV],
        )


__all__ = [
    "CLUSTER_ID_ENV",
    "FLOATING_IP_ENV",
    "REQUIRED_ENV",
    "Settings",
    "TOKEN_ENV",
]
