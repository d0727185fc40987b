"""Command-line interface for the Aurora runtime.

Commands:
    - start: Start the development stack
    - stop: Stop the development stack and remove its volumes
    - build: Build the development images
    - shell: Open a shell inside the Mercury container
    - build-production: Build (and optionally export) a production image

Architecture:
    Uses Click for command-line parsing with a group-based structure.
    Commands are lazy-loaded for fast startup time.
"""

from .main import cli, main

__all__ = ["cli", "main"]
