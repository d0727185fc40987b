"""Simple container engine detection for Docker and Podman.

Locates the engine binary Aurora shells out to and explains what to install
when none is found.

Examples:
    Basic usage::

        from aurora.deployment.runtime_helper import find_engine

        engine = find_engine("auto")
        # Returns: 'docker', 'podman' or None
"""

import os
import platform
import shutil

SUPPORTED_ENGINES = ("docker", "podman")

# Module-level cache for the detected engine, keyed by preference
_cached_engine: dict[str, str] = {}


def find_engine(preference: str | None = None) -> str | None:
    """Locate the container engine binary.

    Checks the CONTAINER_RUNTIME env var, then the configured preference, and
    auto-detects (Docker first, then Podman) if 'auto' or not set. A positive
    result is cached for the process.

    Args:
        preference: 'docker', 'podman' or 'auto' (from container_runtime)

    Returns:
        Engine binary name, or None if no supported engine is on PATH
    """
    env_runtime = os.getenv("CONTAINER_RUNTIME")
    if env_runtime:
        preference = env_runtime

    preference = (preference or "auto").lower()

    if preference in _cached_engine:
        return _cached_engine[preference]

    if preference in SUPPORTED_ENGINES:
        engines_to_try = [preference]
    else:
        engines_to_try = list(SUPPORTED_ENGINES)

    for engine in engines_to_try:
        if shutil.which(engine):
            _cached_engine[preference] = engine
            return engine

    return None


def clear_engine_cache() -> None:
    """Forget previously detected engines."""
    _cached_engine.clear()


def engine_unavailable_message(preference: str | None = None) -> str:
    """Human-readable explanation for a missing engine."""
    preference = (os.getenv("CONTAINER_RUNTIME") or preference or "auto").lower()
    if preference in SUPPORTED_ENGINES:
        return f"{preference.capitalize()} could not be found on this machine.\n" + _install_hint(
            preference
        )
    return (
        "Docker could not be found on this machine. Install Docker Desktop 4.0+ or Podman 4.0+\n"
        "Docker: https://docs.docker.com/get-docker/\n"
        "Podman: https://podman.io/getting-started/installation"
    )


def _install_hint(engine: str) -> str:
    """Get a platform-specific install hint for one engine."""
    system = platform.system()

    if engine == "podman":
        return "Install Podman 4.0+: https://podman.io/getting-started/installation"

    if system == "Darwin":
        return "Install Docker Desktop: https://docs.docker.com/desktop/install/mac-install/"
    elif system == "Windows":
        return "Install Docker Desktop: https://docs.docker.com/desktop/install/windows-install/"
    return "Install Docker Engine: https://docs.docker.com/engine/install/"
