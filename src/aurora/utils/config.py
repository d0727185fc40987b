"""
Configuration System

Project-scoped configuration for the Aurora runtime. Features:
- Optional single-file YAML loading (aurora.yml) with validation
- .env loading via python-dotenv so ${VAR} placeholders and APP_NAME resolve
- Environment variable resolution with bash-style defaults
- Dot-notation access plus typed accessors for the settings Aurora needs

A ConfigBuilder is constructed once per process by the CLI (or by tests) and
handed to the Aurora orchestrator; there is no module-level singleton.
"""

import copy
import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from aurora.errors import ConfigurationError

# Standard logging (not get_logger) to avoid circular imports with logger.py
logger = logging.getLogger("CONFIG")

CONFIG_FILENAME = "aurora.yml"

DEFAULT_STORAGE_PATH = "storage/aurora"
DEFAULT_BUILD_PATH = "storage/aurora/builds"

DEFAULT_COMPOSE_FILES = [
    "docker-compose.yml",
    "docker-compose.override.yml",
    "compose.yaml",
    "compose.yml",
]

DEFAULT_CONTEXT_EXCLUDES = [".git", "node_modules", "vendor", ".env", ".env.*"]

PRODUCTION_DEFAULTS = {
    "base_image": "php:8.3-fpm-alpine",
    "workdir": "/var/www/html",
    "expose": 80,
    "build_commands": [],
    "command": None,
    "env": {},
    "dockerfile_template": None,
    "context_excludes": [],
}


class ConfigBuilder:
    """
    Configuration builder for a single Aurora project.

    Features:
    - Optional YAML file; a project without aurora.yml runs on defaults
    - Environment variable resolution
    - Explicit fail-fast behavior for required configurations
    - Paths resolved against the project root
    """

    # Sentinel object to distinguish between "no default provided" and "default is None"
    _REQUIRED = object()

    def __init__(
        self, project_root: str | Path | None = None, config_path: str | Path | None = None
    ):
        """
        Initialize configuration builder.

        Args:
            project_root: Project directory. Defaults to the current working directory.
            config_path: Path to the config file. If None, uses <project_root>/aurora.yml
                when it exists and runs on defaults otherwise.

        Raises:
            ConfigurationError: If an explicit config file is missing or malformed.
        """
        self.project_root = Path(project_root or Path.cwd()).resolve()

        # Load the project's .env so APP_NAME and ${VAR} placeholders resolve
        dotenv_path = self.project_root / ".env"
        if dotenv_path.exists():
            load_dotenv(dotenv_path, override=False)  # Don't override existing env vars
            logger.debug(f"Loaded .env file from {dotenv_path}")
        else:
            logger.debug(f"No .env file found at {dotenv_path}")

        if config_path is None:
            candidate = self.project_root / CONFIG_FILENAME
            self.config_path = candidate if candidate.exists() else None
        else:
            self.config_path = Path(config_path)
            if not self.config_path.exists():
                raise ConfigurationError(
                    f"Configuration file not found: {self.config_path}", str(self.config_path)
                )

        self.raw_config = self._load_config()

    def _require_config(self, path: str, default: Any = _REQUIRED) -> Any:
        """
        Get configuration value with explicit control over required vs. optional settings.

        Args:
            path: Dot-separated configuration path (e.g., "production.base_image")
            default: Default value to use if config is missing. If not provided,
                    the configuration is considered required.

        Returns:
            The configuration value, or default if provided and config is missing

        Raises:
            ConfigurationError: If required configuration (no default) is missing or None
        """
        value = self.get(path)

        if value is None:
            if default is self._REQUIRED:
                raise ConfigurationError(
                    f"Missing required configuration: '{path}' must be explicitly set in "
                    f"{CONFIG_FILENAME}.",
                    str(self.config_path) if self.config_path else None,
                )
            logger.debug(f"Using default value for '{path}' = {default}")
            return default
        return value

    def _load_yaml_file(self, file_path: Path) -> dict[str, Any]:
        """Load and validate a YAML configuration file."""
        try:
            with open(file_path) as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Error parsing YAML configuration: {e}", str(file_path)
            ) from e

        if config is None:
            logger.warning(f"Configuration file is empty: {file_path}")
            return {}

        if not isinstance(config, dict):
            raise ConfigurationError(
                f"Configuration file must contain a dictionary/mapping: {file_path}",
                str(file_path),
            )

        logger.debug(f"Loaded configuration from {file_path}")
        return config

    def _resolve_env_vars(self, data: Any) -> Any:
        """Recursively resolve environment variables in configuration data.

        Supports both simple and bash-style default value syntax:
        - ${VAR_NAME} - simple substitution
        - ${VAR_NAME:-default_value} - with default value
        - $VAR_NAME - simple substitution without braces
        """
        if isinstance(data, dict):
            return {key: self._resolve_env_vars(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [self._resolve_env_vars(item) for item in data]
        elif isinstance(data, str):

            def replace_env_var(match):
                if match.group(1):  # ${VAR_NAME:-default} or ${VAR_NAME}
                    var_name = match.group(1)
                    default_value = match.group(2)
                else:  # $VAR_NAME
                    var_name = match.group(3)
                    default_value = None

                env_value = os.environ.get(var_name)
                if env_value is None:
                    if default_value is not None:
                        return default_value
                    logger.debug(
                        f"Environment variable '{var_name}' not found, keeping original value"
                    )
                    return match.group(0)
                return env_value

            pattern = r"\$\{([^}:]+)(?::-(.*?))?\}|\$([A-Za-z_][A-Za-z0-9_]*)"
            return re.sub(pattern, replace_env_var, data)
        else:
            return data

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from the optional config file, placeholders resolved."""
        if self.config_path is None:
            logger.debug(f"No {CONFIG_FILENAME} in {self.project_root}, using defaults")
            return {}

        config = self._resolve_env_vars(self._load_yaml_file(self.config_path))

        logger.info(f"Loaded configuration from {self.config_path}")
        return config

    def get(self, path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation path."""
        keys = path.split(".")
        value = self.raw_config

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default

    # ------------------------------------------------------------------
    # Typed accessors
    # ------------------------------------------------------------------

    def _project_path(self, value: str) -> Path:
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = self.project_root / path
        return path

    @property
    def app_name(self) -> str:
        """Application name: app.name, then APP_NAME, then the project directory name."""
        name = self.get("app.name")
        # An unresolved placeholder means APP_NAME is not set anywhere
        if not name or (isinstance(name, str) and name.startswith("$")):
            name = os.environ.get("APP_NAME") or self.project_root.name
        return str(name)

    @property
    def storage_path(self) -> Path:
        """Persistent storage root for logs and build artifacts."""
        return self._project_path(self._require_config("storage_path", DEFAULT_STORAGE_PATH))

    @property
    def build_path(self) -> Path:
        """Default archive output root for exported images."""
        return self._project_path(self._require_config("build_path", DEFAULT_BUILD_PATH))

    @property
    def container_runtime(self) -> str:
        """Preferred container engine: docker, podman or auto."""
        return str(self.get("container_runtime", "auto") or "auto")

    @property
    def compose_files(self) -> list[str]:
        """Explicitly configured compose files (empty means discovery)."""
        files = self.get("compose.files", []) or []
        if not isinstance(files, list):
            raise ConfigurationError(
                "'compose.files' must be a list of paths",
                str(self.config_path) if self.config_path else None,
            )
        return [str(f) for f in files]

    @property
    def compose_service(self) -> str:
        """Name of the development container used by build and shell."""
        return str(self.get("compose.service", "mercury"))

    @property
    def production(self) -> dict[str, Any]:
        """Production build settings merged over their defaults."""
        production = self.get("production", {}) or {}
        if not isinstance(production, dict):
            raise ConfigurationError(
                "'production' must be a mapping",
                str(self.config_path) if self.config_path else None,
            )
        merged = copy.deepcopy(PRODUCTION_DEFAULTS)
        merged.update(production)
        for key in ("base_image", "workdir"):
            if key in production:
                merged[key] = self._require_config(f"production.{key}")
        return merged

    @property
    def context_excludes(self) -> list[str]:
        """Glob patterns left out of the staged build context."""
        extra = self.production.get("context_excludes") or []
        return DEFAULT_CONTEXT_EXCLUDES + [str(pattern) for pattern in extra]

    @property
    def logging_settings(self) -> dict[str, Any]:
        """The logging section, empty when not configured."""
        return self.get("logging", {}) or {}
