"""Unit tests for runtime_helper module."""

from unittest.mock import patch

import pytest

from aurora.deployment import runtime_helper
from aurora.deployment.runtime_helper import (
    clear_engine_cache,
    engine_unavailable_message,
    find_engine,
)


@pytest.fixture(autouse=True)
def reset_cache():
    """Reset cached engine before each test."""
    runtime_helper._cached_engine.clear()
    yield
    runtime_helper._cached_engine.clear()


class TestFindEngine:
    """Tests for find_engine function."""

    @patch("shutil.which")
    def test_detect_docker_when_available(self, mock_which):
        mock_which.return_value = "/usr/bin/docker"

        assert find_engine("auto") == "docker"
        mock_which.assert_called_once_with("docker")

    @patch("shutil.which")
    def test_detect_podman_when_docker_not_available(self, mock_which):
        mock_which.side_effect = lambda name: "/usr/bin/podman" if name == "podman" else None

        assert find_engine() == "podman"
        assert mock_which.call_count == 2

    @patch("shutil.which")
    def test_prefer_docker_when_both_available(self, mock_which):
        mock_which.side_effect = lambda name: f"/usr/bin/{name}"

        assert find_engine("auto") == "docker"

    @patch("shutil.which")
    def test_explicit_preference_only_checks_that_engine(self, mock_which):
        mock_which.return_value = None

        assert find_engine("podman") is None
        mock_which.assert_called_once_with("podman")

    @patch("shutil.which")
    def test_env_var_overrides_preference(self, mock_which, monkeypatch):
        monkeypatch.setenv("CONTAINER_RUNTIME", "podman")
        mock_which.side_effect = lambda name: f"/usr/bin/{name}"

        assert find_engine("docker") == "podman"

    @patch("shutil.which")
    def test_none_found(self, mock_which):
        mock_which.return_value = None
        assert find_engine("auto") is None

    @patch("shutil.which")
    def test_result_cached(self, mock_which):
        mock_which.return_value = "/usr/bin/docker"

        find_engine("auto")
        find_engine("auto")

        assert mock_which.call_count == 1

    @patch("shutil.which")
    def test_missing_engine_not_cached(self, mock_which):
        mock_which.return_value = None
        find_engine("docker")

        mock_which.return_value = "/usr/bin/docker"
        assert find_engine("docker") == "docker"

    @patch("shutil.which")
    def test_clear_cache(self, mock_which):
        mock_which.return_value = "/usr/bin/docker"
        find_engine("auto")

        clear_engine_cache()
        find_engine("auto")

        assert mock_which.call_count == 2


class TestEngineUnavailableMessage:
    def test_auto_mentions_both_engines(self):
        message = engine_unavailable_message("auto")
        assert message.startswith("Docker could not be found on this machine.")
        assert "Podman" in message

    def test_podman_hint(self):
        message = engine_unavailable_message("podman")
        assert message.startswith("Podman could not be found")
        assert "podman.io" in message

    @pytest.mark.parametrize(
        ("system", "fragment"),
        [("Darwin", "mac-install"), ("Windows", "windows-install"), ("Linux", "engine/install")],
    )
    def test_docker_hint_per_platform(self, system, fragment):
        with patch("platform.system", return_value=system):
            assert fragment in engine_unavailable_message("docker")
