"""Exception hierarchy for doflip.

All doflip-specific exceptions inherit from DoflipError, so callers can
catch every controller error with a single except clause.
"""

from __future__ import annotations

from collections.abc import Sequence


class DoflipError(Exception):
    """Base exception for all doflip errors."""


class ConfigurationError(DoflipError):
    """Raised for invalid configuration or missing required settings."""


class MissingSettingsError(ConfigurationError):
    """Raised when required environment variables are unset or empty.

    The process exit code is the number of missing values.
    """

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = tuple(missing)
        super().__init__(f"Missing required environment variables: {', '.join(self.missing)}")

    @property
    def exit_code(self) -> int:
        return len(self.missing)


class DigitalOceanError(DoflipError):
    """Error from DigitalOcean API."""


class DropletIdError(DoflipError, ValueError):
    """Raised when a node's droplet id is not a number."""

    def __init__(self, text: str | None) -> None:
        self.text = text
        super().__init__(f"Invalid droplet id: {text!r}")


__all__ = [
    "ConfigurationError",
    "DigitalOceanError",
    "DoflipError",
    "DropletIdError",
    "MissingSettingsError",
]
