"""Configuration and logging utilities.

Modules:
    config: Project configuration builder
    logger: Rich component logging
"""

from . import config, logger

__all__ = ["config", "logger"]
