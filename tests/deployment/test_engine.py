"""Tests for the container engine wrapper."""

import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from aurora.deployment.engine import ContainerEngine, EngineRun
from aurora.errors import EngineUnavailableError


@pytest.fixture
def docker_engine():
    with patch("aurora.deployment.engine.find_engine", return_value="docker"):
        yield ContainerEngine("auto")


class TestLocate:
    def test_require_returns_binary(self, docker_engine):
        assert docker_engine.require() == "docker"
        assert docker_engine.is_available()

    @patch("aurora.deployment.engine.find_engine", return_value=None)
    def test_require_raises_when_missing(self, _mock_find):
        engine = ContainerEngine("docker")

        assert not engine.is_available()
        with pytest.raises(EngineUnavailableError, match="Docker could not be found"):
            engine.require()


class TestCommands:
    def test_build_command(self, docker_engine):
        command = docker_engine.build_command("shop:2024-05-01_12-30-45", "/tmp/ctx", "/tmp/ctx/Dockerfile")

        assert command == [
            "docker",
            "build",
            "-t",
            "shop:2024-05-01_12-30-45",
            "-f",
            "/tmp/ctx/Dockerfile",
            "/tmp/ctx",
        ]

    def test_save_command(self, docker_engine):
        command = docker_engine.save_command("shop:2024-05-01_12-30-45", "/srv/out/shop.docker")

        assert command == ["docker", "save", "-o", "/srv/out/shop.docker", "shop:2024-05-01_12-30-45"]

    @patch("aurora.deployment.engine.find_engine", return_value=None)
    def test_commands_require_engine(self, _mock_find):
        with pytest.raises(EngineUnavailableError):
            ContainerEngine().build_command("t", "/ctx", "/ctx/Dockerfile")


class TestRunStreaming:
    """Streaming runs a real (harmless) subprocess: the current interpreter."""

    def test_lines_streamed_in_order(self):
        lines = []
        script = "import sys; print('one'); print('two', file=sys.stderr); print('three')"

        run = ContainerEngine().run_streaming([sys.executable, "-u", "-c", script], sink=lines.append)

        assert isinstance(run, EngineRun)
        assert run.succeeded
        assert run.output == ["one", "two", "three"]
        assert lines == run.output

    def test_nonzero_exit_reported(self):
        script = "print('partial'); raise SystemExit(3)"

        run = ContainerEngine().run_streaming([sys.executable, "-c", script], sink=lambda _: None)

        assert not run.succeeded
        assert run.returncode == 3
        assert run.output == ["partial"]

    def test_undecodable_output_replaced(self):
        script = "import sys; sys.stdout.buffer.write(b'ok\\n\\xff\\xfe bad\\nafter\\n')"

        run = ContainerEngine().run_streaming([sys.executable, "-c", script], sink=lambda _: None)

        assert run.succeeded
        assert run.output[0] == "ok"
        assert run.output[1].endswith(" bad")
        assert "�" in run.output[1]
        assert run.output[2] == "after"

    def test_default_sink_is_docker_logger(self):
        with patch("aurora.deployment.engine.logger") as mock_logger:
            ContainerEngine().run_streaming([sys.executable, "-c", "print('hi')"])

        mock_logger.output.assert_called_once_with("hi")

    def test_runs_in_cwd(self, tmp_path):
        script = "import os; print(os.getcwd())"

        run = ContainerEngine(cwd=tmp_path).run_streaming([sys.executable, "-c", script], sink=lambda _: None)

        assert Path(run.output[0]).resolve() == tmp_path.resolve()
