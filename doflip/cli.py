"""Command-line entry point.

Usage:
    DO_API_TOKEN=... DO_FLOATING_IP=... DO_CLUSTER_ID=... doflip [--debug]
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from typing import NoReturn

from loguru import logger

from doflip.client import DigitalOceanClient, get_client
from doflip.config import Settings
from doflip.exceptions import MissingSettingsError
from doflip.logging import LogConfig, setup_logging
from doflip.reconciler import Reconciler

EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="doflip",
        description="Keep a DigitalOcean floating IP pointed at a node of a Kubernetes cluster",
    )
    parser.add_argument("--debug", action="store_true", help="sets log level to debug")
    parser.add_argument("--trace", action="store_true", help="sets log level to trace")
    parser.add_argument("--log-file", type=str, default=None, help="also write logs to this file")
    return parser


def log_config(args: argparse.Namespace) -> LogConfig:
    level = "TRACE" if args.trace else "DEBUG" if args.debug else "INFO"
    return LogConfig(level=level, file=args.log_file)


def run(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, load settings and run the controller. Returns the exit code."""
    args = build_parser().parse_args(argv)
    setup_logging(log_config(args))

    try:
        settings = Settings.from_env()
    except MissingSettingsError as e:
        return e.exit_code

    client = DigitalOceanClient(get_client(settings.token))
    reconciler = Reconciler(client, settings.floating_ip, settings.cluster_id)

    try:
        return reconciler.run()
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping floating IP controller")
        return EXIT_INTERRUPTED


def main(argv: Sequence[str] | None = None) -> NoReturn:
    sys.exit(run(argv))


if __name__ == "__main__":
    main()
