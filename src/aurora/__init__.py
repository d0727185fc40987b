"""Aurora environment runtime.

Lifecycle orchestrator for a local containerized development environment
and its production image builds.

This package contains:
- The ``Aurora`` orchestrator handle (start, stop, build, shell, production builds)
- The production build and export pipeline
- Container engine and compose command helpers
- Configuration and logging utilities
- The ``aurora`` command line interface
"""

# Version information
__version__ = "0.4.2"

__all__ = ["__version__"]

# Import submodules directly, e.g. ``from aurora.runtime import Aurora``
