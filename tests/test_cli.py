from __future__ import annotations

import sys
from collections.abc import Iterator
from unittest.mock import MagicMock

import pytest
from loguru import logger

from doflip import cli
from doflip.logging import LogConfig

pytestmark = [pytest.mark.xdist_group("unit")]

ENV = {
    "DO_API_TOKEN": "dop_v1_secret",
    "DO_FLOATING_IP": "203.0.113.10",
    "DO_CLUSTER_ID": "c0ffee",
}


@pytest.fixture(autouse=True)
def restore_logger() -> Iterator[None]:
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def env(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    for key in ENV:
        monkeypatch.delenv(key, raising=False)
    return ENV


class TestParser:
    def test_defaults_to_info(self):
        args = cli.build_parser().parse_args([])
        assert cli.log_config(args) == LogConfig(level="INFO")

    def test_debug_flag(self):
        args = cli.build_parser().parse_args(["--debug"])
        assert cli.log_config(args).level == "DEBUG"

    def test_trace_wins_over_debug(self):
        args = cli.build_parser().parse_args(["--debug", "--trace"])
        assert cli.log_config(args).level == "TRACE"

    def test_log_file(self, tmp_path):
        path = str(tmp_path / "doflip.log")
        args = cli.build_parser().parse_args(["--log-file", path])
        assert cli.log_config(args).file == path


class TestRun:
    def test_missing_env_exits_with_count(self, env: dict[str, str], monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("DO_API_TOKEN", "x")
        assert cli.run([]) == 2

    def test_all_missing(self, env: dict[str, str]):
        assert cli.run([]) == 3

    def test_runs_reconciler(self, env: dict[str, str], monkeypatch: pytest.MonkeyPatch):
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        reconciler = MagicMock()
        reconciler.return_value.run.return_value = 101
        monkeypatch.setattr(cli, "get_client", MagicMock())
        monkeypatch.setattr(cli, "Reconciler", reconciler)

        assert cli.run([]) == 101
        _, floating_ip, cluster_id = reconciler.call_args.args
        assert (floating_ip, cluster_id) == ("203.0.113.10", "c0ffee")

    def test_interrupt_exits_130(self, env: dict[str, str], monkeypatch: pytest.MonkeyPatch):
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        reconciler = MagicMock()
        reconciler.return_value.run.side_effect = KeyboardInterrupt
        monkeypatch.setattr(cli, "get_client", MagicMock())
        monkeypatch.setattr(cli, "Reconciler", reconciler)

        assert cli.run([]) == cli.EXIT_INTERRUPTED

    def test_main_exits(self, env: dict[str, str]):
        with pytest.raises(SystemExit) as info:
            cli.main([])
        assert info.value.code == 3
