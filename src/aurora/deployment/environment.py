"""Runtime environment mode detection."""

import os

MERCURY_ENV_VAR = "AURORA_MERCURY"

_TRUTHY = {"1", "true", "yes", "on"}


def running_in_mercury() -> bool:
    """Return True when running inside the Mercury development container.

    The Mercury compose service sets ``AURORA_MERCURY=1``; lifecycle commands
    that manage the stack from the host are meaningless in there.
    """
    return os.environ.get(MERCURY_ENV_VAR, "").strip().lower() in _TRUTHY
