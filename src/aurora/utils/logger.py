"""
Component Logger

Provides colored logging for Aurora components with:
- One API for every component (runtime, build, docker output, storage)
- Rich terminal output with component-specific colors
- Graceful fallbacks when configuration is unavailable

Usage:
    logger = get_logger("build")
    logger.key_info("Building production...")
    logger.info("Staging build context")
    logger.trace("Creating tarball @ /path")
    logger.success("Image built successfully")
    logger.warning("Working tree has uncommitted changes")
    logger.error("The Docker build process ended with a non-zero exit code")

    # Custom loggers with explicit parameters
    logger = get_logger(name="custom_component", color="blue")
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

DEFAULT_COLORS = {
    "aurora": "magenta",
    "build": "cyan",
    "docker": "blue",
    "storage": "green",
    "compose": "yellow",
    "preflight": "cyan",
}

# Display preferences applied by configure_logging(); secure defaults hide locals
_settings: dict[str, Any] = {
    "rich_tracebacks": True,
    "show_traceback_locals": False,
    "show_full_paths": False,
    "logging_colors": {},
}


class ComponentLogger:
    """
    Rich-formatted logger for Aurora components with color coding and message hierarchy.

    Message Types:
    - key_info: Important operational information
    - info: Normal operational messages
    - debug: Detailed tracing information
    - trace: Low-level progress (paths, commands), logged at debug level
    - warning: Warning messages
    - error: Error messages
    - success: Success messages
    """

    def __init__(self, base_logger: logging.Logger, component_name: str, color: str = "white"):
        """
        Initialize component logger.

        Args:
            base_logger: Underlying Python logger
            component_name: Name of the component (e.g., 'build', 'docker')
            color: Rich color name for this component
        """
        self.base_logger = base_logger
        self.component_name = component_name
        self._color = color

    @property
    def color(self) -> str:
        """Configured component color (logging.logging_colors) or the one given at creation."""
        return _settings["logging_colors"].get(self.component_name) or self._color

    def _format_message(self, message: str, style: str, emoji: str = "") -> str:
        """Format message with Rich markup and emoji prefix."""
        prefix = f"{emoji}{self.component_name.title()}: "
        if style:
            return f"[{style}]{prefix}{message}[/{style}]"
        return f"{prefix}{message}"

    def key_info(self, message: str) -> None:
        """Important operational information."""
        style = f"bold {self.color}" if self.color != "white" else "bold white"
        self.base_logger.info(self._format_message(message, style))

    def info(self, message: str) -> None:
        """Info message."""
        self.base_logger.info(self._format_message(message, self.color))

    def debug(self, message: str) -> None:
        """Debug message."""
        style = f"dim {self.color}" if self.color != "white" else "dim white"
        self.base_logger.debug(self._format_message(message, style, "🔍 "))

    def trace(self, message: str) -> None:
        """Trace message for paths and commands, emitted at debug level."""
        self.base_logger.debug(self._format_message(message, "dim", "→ "))

    def warning(self, message: str) -> None:
        """Warning message."""
        self.base_logger.warning(self._format_message(message, "bold yellow", "⚠️  "))

    def error(self, message: str, exc_info: bool = False) -> None:
        """Error message.

        Args:
            message: Error message
            exc_info: Whether to include exception traceback
        """
        formatted = self._format_message(message, "bold red", "❌ ")
        self.base_logger.error(formatted, exc_info=exc_info)

    def success(self, message: str) -> None:
        """Success message."""
        self.base_logger.info(self._format_message(message, "bold green", "✅ "))

    def output(self, line: str) -> None:
        """Raw line of external process output, logged without markup."""
        # Engine output may contain square brackets that Rich would read as markup
        self.base_logger.info(f"{self.component_name}: {line}", extra={"markup": False})


def configure_logging(settings: dict[str, Any] | None = None) -> None:
    """Apply the ``logging`` configuration section.

    Called once by the CLI after configuration is loaded. Replaces any Rich
    handler installed earlier so changed display preferences take effect.

    Args:
        settings: The ``logging`` section of aurora.yml
    """
    settings = settings or {}
    for key in ("rich_tracebacks", "show_traceback_locals", "show_full_paths"):
        if key in settings:
            _settings[key] = bool(settings[key])
    _settings["logging_colors"] = dict(settings.get("logging_colors") or {})

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if isinstance(handler, RichHandler):
            root_logger.removeHandler(handler)

    level_name = str(settings.get("level", "INFO")).upper()
    _setup_rich_logging(getattr(logging, level_name, logging.INFO))


def _setup_rich_logging(level: int = logging.INFO) -> None:
    """Configure Rich logging for the root logger (called once)."""
    root_logger = logging.getLogger()

    # Prevent duplicate handler registration
    for handler in root_logger.handlers:
        if isinstance(handler, RichHandler):
            return

    root_logger.setLevel(level)

    console = Console(stderr=True, width=120)

    handler = RichHandler(
        console=console,
        rich_tracebacks=_settings["rich_tracebacks"],
        markup=True,  # Enable [bold], [green], etc. in log messages
        show_path=_settings["show_full_paths"],
        show_time=True,
        show_level=True,
        tracebacks_show_locals=_settings["show_traceback_locals"],
    )

    root_logger.addHandler(handler)


def get_logger(
    component_name: str | None = None,
    level: int = logging.INFO,
    *,
    name: str | None = None,
    color: str | None = None,
) -> ComponentLogger:
    """
    Get a component logger.

    Args:
        component_name: Component name (e.g., 'build', 'docker')
        level: Logging level used if logging has not been configured yet
        name: Direct logger name (keyword-only, for custom loggers)
        color: Direct color override (keyword-only)

    Returns:
        ComponentLogger instance

    Examples:
        logger = get_logger("build")
        logger.info("Staging build context")

        logger = get_logger(name="test_logger", color="blue")
    """
    _setup_rich_logging(level)

    if name is not None:
        return ComponentLogger(logging.getLogger(name), name, color or "white")

    if component_name is None:
        raise ValueError(
            "Component name is required. Usage: get_logger('component_name') or "
            "get_logger(name='custom_name', color='blue')"
        )

    base_logger = logging.getLogger(f"aurora.{component_name}")
    color = color or DEFAULT_COLORS.get(component_name) or "white"
    return ComponentLogger(base_logger, component_name, color)
