"""
Pytest configuration and shared test utilities.

This module provides shared fixtures for all Aurora tests: a throwaway
project on disk, a fake container engine that never shells out, and
scripted confirmation prompts.
"""

import os
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest

from aurora.deployment import runtime_helper
from aurora.deployment.engine import ContainerEngine, EngineRun
from aurora.utils.config import ConfigBuilder

FIXED_NOW = datetime(2024, 5, 1, 12, 30, 45)
FIXED_TAG = "shop_app:2024-05-01_12-30-45"

_ENV_VARS = ("APP_NAME", "AURORA_MERCURY", "AURORA_PROJECT", "CONTAINER_RUNTIME")


# ===================================================================
# Environment isolation
# ===================================================================


@pytest.fixture(autouse=True)
def isolated_environment():
    """Restore os.environ after each test (ConfigBuilder loads .env into it)."""
    with patch.dict(os.environ):
        for name in _ENV_VARS:
            os.environ.pop(name, None)
        runtime_helper.clear_engine_cache()
        yield
    runtime_helper.clear_engine_cache()


# ===================================================================
# Fakes
# ===================================================================


class FakeEngine(ContainerEngine):
    """ContainerEngine that records commands instead of running them.

    Build invocations snapshot the staged context (it is deleted right
    after), save invocations write a placeholder archive on success.
    """

    def __init__(
        self,
        binary: str | None = "docker",
        build_returncode: int = 0,
        save_returncode: int = 0,
        output: list[str] | None = None,
    ):
        super().__init__("auto")
        self.binary = binary
        self.build_returncode = build_returncode
        self.save_returncode = save_returncode
        self.output = output if output is not None else ["Step 1/3 : FROM php", "Successfully built"]
        self.commands: list[list[str]] = []
        self.context_dir: Path | None = None
        self.context_files: dict[str, str] = {}

    def locate(self):
        return self.binary

    def run_streaming(self, command, sink=None):
        self.commands.append(command)

        if command[1] == "build":
            self.context_dir = Path(command[-1])
            self.context_files = {
                str(p.relative_to(self.context_dir)): p.read_text()
                for p in self.context_dir.rglob("*")
                if p.is_file()
            }
            returncode = self.build_returncode
        else:
            returncode = self.save_returncode
            if returncode == 0:
                Path(command[3]).write_text("image archive")

        for line in self.output:
            if sink:
                sink(line)
        return EngineRun(command=command, returncode=returncode, output=list(self.output))

    @property
    def build_commands(self):
        return [c for c in self.commands if c[1] == "build"]

    @property
    def save_commands(self):
        return [c for c in self.commands if c[1] == "save"]


class ScriptedConfirm:
    """Confirmation prompt answering from a script (default: yes to everything)."""

    def __init__(self, *answers: bool, default: bool = True):
        self.answers = list(answers)
        self.default = default
        self.prompts: list[str] = []

    def __call__(self, message: str) -> bool:
        self.prompts.append(message)
        if self.answers:
            return self.answers.pop(0)
        return self.default


# ===================================================================
# Fixtures
# ===================================================================


@pytest.fixture
def project(tmp_path):
    """A git-initialized PHP project with a compose file and .env."""
    root = tmp_path / "shop"
    root.mkdir()
    (root / ".git").mkdir()
    (root / ".env").write_text("APP_NAME='Shop App'\nAPP_ENV=local\nDB_HOST=mysql\n")
    (root / "docker-compose.yml").write_text("services:\n  mercury:\n    image: php\n")
    (root / "public").mkdir()
    (root / "public" / "index.php").write_text("<?php echo 'hello';\n")
    (root / "vendor").mkdir()
    (root / "vendor" / "autoload.php").write_text("<?php\n")
    return root


@pytest.fixture
def config(project):
    return ConfigBuilder(project)


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def confirm_yes():
    return ScriptedConfirm(default=True)


@pytest.fixture
def confirm_no():
    return ScriptedConfirm(default=False)
