"""Tests for the CLI."""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from hostqueue import __version__
from hostqueue.cli.main import app, run_simulation
from hostqueue.core.models import QueueOptions
from hostqueue.queue.router import QueueRouter

runner = CliRunner()


class TestCommands:
    """Tests for CLI commands."""

    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_config(self, monkeypatch):
        monkeypatch.setenv("HOSTQUEUE_MAX_CONCURRENT", "7")
        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert "Max Concurrent" in result.output
        assert "7" in result.output

    def test_simulate(self):
        with patch("hostqueue.cli.main.setup_logging"):
            result = runner.invoke(
                app, ["simulate", "-n", "4", "-g", "2", "-c", "1", "-d", "0"]
            )

        assert result.exit_code == 0
        assert "host-0" in result.output
        assert "host-1" in result.output


class TestRunSimulation:
    """Tests for the simulation driver."""

    @pytest.mark.asyncio
    async def test_priority_desc(self):
        router = QueueRouter(QueueOptions(max_concurrent=1, delay_ms=10))
        admissions = await run_simulation(router, requests=4, groups=1, priority_desc=True)

        assert [a[0] for a in admissions] == [0, 3, 2, 1]

    @pytest.mark.asyncio
    async def test_groups_run_in_parallel(self):
        router = QueueRouter(QueueOptions(max_concurrent=1, delay_ms=30))
        admissions = await run_simulation(router, requests=4, groups=2)

        first_two = sorted(a[1] for a in admissions[:2])
        assert first_two == ["host-0", "host-1"]
        assert admissions[1][4] < 25
