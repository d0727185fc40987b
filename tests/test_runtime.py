"""Tests for the Aurora orchestrator handle."""

import shlex
import sys
from unittest.mock import patch

import pytest
from conftest import FIXED_NOW, FIXED_TAG, FakeEngine, ScriptedConfirm

from aurora.build.preflight import PreFlightChecker
from aurora.deployment.engine import ContainerEngine
from aurora.errors import (
    BuildCancelledError,
    ConfigurationError,
    EngineBuildFailedError,
    EngineUnavailableError,
    ExportDirMissingError,
    NotApplicableError,
    VersionControlMissingError,
)
from aurora.runtime import Aurora, BuildOutcome, BuildStatus, ShellProcess


@pytest.fixture
def aurora(config, fake_engine):
    return Aurora(config, engine=fake_engine, confirm=ScriptedConfirm(), mercury=False)


class TestConstruction:
    def test_storage_ensured(self, config, fake_engine):
        Aurora(config, engine=fake_engine, mercury=False)

        assert (config.storage_path / ".gitignore").read_text() == "*"
        assert (config.storage_path / "logs" / "nginx").is_dir()

    def test_mercury_detected_from_environment(self, config, fake_engine, monkeypatch):
        monkeypatch.setenv("AURORA_MERCURY", "1")
        assert Aurora(config, engine=fake_engine).is_mercury

    def test_not_mercury_by_default(self, config, fake_engine):
        assert not Aurora(config, engine=fake_engine).is_mercury

    def test_default_engine_follows_configuration(self, project):
        (project / "aurora.yml").write_text("container_runtime: podman\n")

        aurora = Aurora.from_project(project)

        assert aurora.engine.preference == "podman"
        assert aurora.config.project_root == project.resolve()

    def test_default_confirm_is_questionary(self, config, fake_engine):
        from aurora.utils.prompts import questionary_confirm

        assert Aurora(config, engine=fake_engine).confirm is questionary_confirm


class TestLifecycleCommands:
    def test_start(self, aurora, project):
        process = aurora.start()

        assert isinstance(process, ShellProcess)
        assert process.command.startswith("docker compose -p shop_app -f ")
        assert process.command.endswith(" up")
        assert process.cwd == project.resolve()
        assert not process.tty

    def test_stop(self, aurora):
        assert aurora.stop().command.endswith(" down -t 0 --volumes")

    def test_build_builds_mercury_first(self, aurora):
        command = aurora.build().command

        first, second = command.split(" && ")
        assert first.endswith(" build mercury")
        assert second.endswith(" build")
        assert first.rsplit(" build mercury", 1)[0] == second.rsplit(" build", 1)[0]

    def test_build_uses_configured_service(self, project, fake_engine):
        (project / "aurora.yml").write_text("compose:\n  service: php app\n")
        aurora = Aurora.from_project(project, engine=fake_engine, mercury=False)

        assert shlex.split(aurora.build().command.split(" && ")[0])[-2:] == ["build", "php app"]

    def test_shell(self, aurora):
        process = aurora.shell()

        assert process.command.endswith(" exec -it mercury bash")
        assert process.tty

    @pytest.mark.parametrize("action", ["start", "stop", "build", "shell"])
    def test_not_applicable_in_mercury(self, config, fake_engine, action):
        aurora = Aurora(config, engine=fake_engine, mercury=True)

        with pytest.raises(NotApplicableError, match="not applicable when running in Mercury"):
            getattr(aurora, action)()

    @pytest.mark.parametrize("action", ["start", "stop", "build", "shell"])
    def test_engine_checked_uniformly(self, config, action):
        aurora = Aurora(config, engine=FakeEngine(binary=None), mercury=False)

        with pytest.raises(EngineUnavailableError):
            getattr(aurora, action)()

    def test_mercury_checked_before_engine(self, config):
        aurora = Aurora(config, engine=FakeEngine(binary=None), mercury=True)

        with pytest.raises(NotApplicableError):
            aurora.start()


class TestShellProcess:
    def test_run_waits_and_returns_status(self, tmp_path):
        process = ShellProcess(f"{shlex.quote(sys.executable)} -c 'raise SystemExit(4)'", cwd=tmp_path)
        assert process.run() == 4

    def test_start_does_not_wait(self, tmp_path):
        marker = tmp_path / "done"
        script = f"import pathlib; pathlib.Path({str(marker)!r}).write_text('x')"
        process = ShellProcess(f"{shlex.quote(sys.executable)} -c {shlex.quote(script)}", cwd=tmp_path)

        with process.start() as popen:
            assert popen.wait() == 0

        assert marker.read_text() == "x"

    def test_runs_in_cwd(self, tmp_path):
        process = ShellProcess("touch here.txt", cwd=tmp_path)
        assert process.run() == 0
        assert (tmp_path / "here.txt").exists()


class TestBuildProduction:
    @pytest.fixture(autouse=True)
    def skip_dirty_check(self):
        with patch.object(PreFlightChecker, "warn_if_dirty"):
            yield

    @pytest.fixture(autouse=True)
    def fixed_clock(self):
        with patch("aurora.build.pipeline.datetime") as mock_datetime:
            mock_datetime.now.return_value = FIXED_NOW
            yield

    def test_done(self, aurora, fake_engine, config):
        outcome = aurora.build_production(export=True, yes=True)

        assert isinstance(outcome, BuildOutcome)
        assert outcome.status is BuildStatus.DONE
        assert outcome.succeeded
        assert outcome.exit_code == 0
        assert outcome.image_tag == FIXED_TAG
        assert outcome.export_path == config.build_path / f"{FIXED_TAG}.docker"
        assert outcome.error is None
        assert outcome.diagnostics == fake_engine.output

    def test_cancelled_logged_as_warning(self, config, fake_engine):
        aurora = Aurora(config, engine=fake_engine, confirm=ScriptedConfirm(False), mercury=False)

        with patch("aurora.runtime.logger") as mock_logger:
            outcome = aurora.build_production()

        assert outcome.status is BuildStatus.CANCELLED
        assert isinstance(outcome.error, BuildCancelledError)
        assert outcome.exit_code == 3
        assert outcome.image_tag is None
        mock_logger.warning.assert_called_once()
        mock_logger.error.assert_not_called()

    def test_build_failure(self, config):
        engine = FakeEngine(build_returncode=1, output=["boom"])
        aurora = Aurora(config, engine=engine, mercury=False)

        with patch("aurora.runtime.logger") as mock_logger:
            outcome = aurora.build_production(export=True, yes=True)

        assert outcome.status is BuildStatus.FAILED
        assert isinstance(outcome.error, EngineBuildFailedError)
        assert outcome.exit_code == 1
        assert outcome.export_path is None
        assert outcome.diagnostics == ["boom"]
        mock_logger.error.assert_called_once()

    def test_binary_engine_output_reported_as_build_failure(self, config):
        class ScriptEngine(ContainerEngine):
            def locate(self):
                return "docker"

            def build_command(self, tag, context_dir, dockerfile):
                script = "import sys; sys.stdout.buffer.write(b'step\\n\\xff\\xfe\\n'); sys.exit(1)"
                return [sys.executable, "-c", script]

        aurora = Aurora(config, engine=ScriptEngine(), mercury=False)

        outcome = aurora.build_production(yes=True)

        assert outcome.status is BuildStatus.FAILED
        assert isinstance(outcome.error, EngineBuildFailedError)
        assert outcome.diagnostics[0] == "step"

    def test_missing_dockerfile_template_reported_as_failure(self, project, fake_engine):
        (project / "aurora.yml").write_text("production:\n  dockerfile_template: nope.j2\n")
        aurora = Aurora.from_project(project, engine=fake_engine, mercury=False)

        outcome = aurora.build_production(yes=True)

        assert outcome.status is BuildStatus.FAILED
        assert isinstance(outcome.error, ConfigurationError)
        assert outcome.exit_code == 1
        assert "nope.j2" in outcome.error.message
        assert fake_engine.build_commands == []

    def test_export_validation_failure(self, aurora, tmp_path, fake_engine):
        outcome = aurora.build_production(export=True, export_dir=tmp_path / "missing", yes=True)

        assert outcome.status is BuildStatus.FAILED
        assert isinstance(outcome.error, ExportDirMissingError)
        assert outcome.image_tag == FIXED_TAG
        assert outcome.export_path is None
        assert fake_engine.save_commands == []

    def test_precondition_failure(self, aurora, project):
        (project / ".git").rmdir()

        outcome = aurora.build_production(yes=True)

        assert outcome.status is BuildStatus.FAILED
        assert isinstance(outcome.error, VersionControlMissingError)
        assert outcome.diagnostics == []

    def test_available_in_mercury(self, config, fake_engine):
        aurora = Aurora(config, engine=fake_engine, mercury=True)
        assert aurora.build_production(yes=True).succeeded
