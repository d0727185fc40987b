"""Container engine and development environment helpers.

This package locates the container engine, composes compose command lines,
detects Mercury mode and guarantees the persistent storage layout.
"""

from .compose import ComposeComposer
from .engine import ContainerEngine, EngineRun
from .environment import running_in_mercury
from .storage import ensure_storage_exists

__all__ = [
    "ComposeComposer",
    "ContainerEngine",
    "EngineRun",
    "running_in_mercury",
    "ensure_storage_exists",
]
