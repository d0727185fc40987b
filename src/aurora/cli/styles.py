"""Color and style management for the Aurora CLI.

Semantic style names (success, error, warning, path, command) map onto a
ColorTheme so every command renders the same way, and interactive prompts
share the palette through a questionary style.
"""

from dataclasses import dataclass
from typing import Any

from questionary import Style as QuestionaryStyle
from rich.console import Console
from rich.theme import Theme

from aurora.utils.logger import get_logger

logger = get_logger("aurora")


# ============================================================================
# THEME CONFIGURATION
# ============================================================================


@dataclass
class ColorTheme:
    """A complete color theme for the CLI.

    Error and warning stay fixed across themes; the remaining colors define
    the theme's identity. Dimmed variants are derived.
    """

    # Fixed UI conventions
    error: str = "#ff0000"
    warning: str = "#ffaa00"

    # Theme identity
    primary: str = "#E8A33D"
    success: str = "#7FB069"
    accent: str = "#F4D35E"
    command: str = "#9DB4C0"
    path: str = "#A2AE9D"
    info: str = "#5FA8D3"

    # Neutral
    text_primary: str = "#ffffff"
    text_secondary: str = "#888888"
    text_dim: str = "#666666"

    def __post_init__(self):
        self.primary_dark = self._adjust_brightness(self.primary, 0.85)
        self.header = self.primary
        self.subheader = self.primary_dark

    @staticmethod
    def _adjust_brightness(hex_color: str, factor: float) -> str:
        """Scale each RGB channel of ``hex_color`` by ``factor`` (clamped to 0-255)."""
        hex_color = hex_color.lstrip("#")
        r, g, b = int(hex_color[0:2], 16), int(hex_color[2:4], 16), int(hex_color[4:6], 16)
        r = max(0, min(255, int(r * factor)))
        g = max(0, min(255, int(g * factor)))
        b = max(0, min(255, int(b * factor)))
        return f"#{r:02x}{g:02x}{b:02x}"


# ============================================================================
# PREDEFINED THEMES
# ============================================================================

AURORA_THEME = ColorTheme()

MONO_THEME = ColorTheme(
    primary="#ffffff",
    success="#dddddd",
    accent="#bbbbbb",
    command="#dddddd",
    path="#aaaaaa",
    info="#cccccc",
)

THEME_REGISTRY = {
    "default": AURORA_THEME,
    "aurora": AURORA_THEME,
    "mono": MONO_THEME,
}


def _build_rich_theme(theme: ColorTheme) -> Theme:
    return Theme(
        {
            "success": f"bold {theme.success}",
            "error": f"bold {theme.error}",
            "warning": f"bold {theme.warning}",
            "info": f"bold {theme.info}",
            "primary": f"bold {theme.primary}",
            "secondary": theme.text_secondary,
            "dim": theme.text_dim,
            "header": f"bold {theme.header}",
            "subheader": f"bold {theme.subheader}",
            "label": "bold",
            "value": theme.success,
            "path": theme.path,
            "command": theme.command,
            "accent": theme.accent,
        }
    )


def _build_questionary_style(theme: ColorTheme) -> QuestionaryStyle:
    return QuestionaryStyle(
        [
            ("qmark", f"fg:{theme.accent} bold"),
            ("question", "bold"),
            ("answer", f"fg:{theme.primary} bold"),
            ("instruction", f"fg:{theme.text_dim} italic"),
            ("text", f"fg:{theme.text_secondary}"),
            ("default", f"fg:{theme.text_primary}"),
        ]
    )


# ============================================================================
# ACTIVE THEME MANAGEMENT
# ============================================================================

_active_theme = AURORA_THEME
console = Console(theme=_build_rich_theme(_active_theme))
custom_style = _build_questionary_style(_active_theme)


def get_active_theme() -> ColorTheme:
    return _active_theme


def set_theme(theme: ColorTheme):
    """Activate ``theme`` and rebuild the console and prompt style."""
    global _active_theme, console, custom_style
    _active_theme = theme
    console = Console(theme=_build_rich_theme(theme))
    custom_style = _build_questionary_style(theme)


def resolve_theme(theme_name: str | None, custom_colors: dict[str, Any] | None = None) -> ColorTheme:
    """Look up a theme by name.

    ``custom`` builds a theme from ``custom_colors`` (hex strings keyed by
    ColorTheme field). Unknown names and invalid custom colors fall back to
    the default theme with a warning.
    """
    theme_name = theme_name or "default"

    if theme_name == "custom":
        if not custom_colors:
            logger.warning("Custom theme selected but no cli.custom_theme colors found, using default")
            return AURORA_THEME
        for key, value in custom_colors.items():
            if not isinstance(value, str) or not value.startswith("#"):
                logger.warning(f"Invalid color format for {key}: {value}, using default")
                return AURORA_THEME
        try:
            return ColorTheme(**custom_colors)
        except (TypeError, ValueError) as e:
            logger.warning(f"Failed to create custom theme: {e}, using default")
            return AURORA_THEME

    theme = THEME_REGISTRY.get(theme_name)
    if theme is None:
        logger.warning(f"Unknown theme '{theme_name}', using default")
        theme = AURORA_THEME
    return theme


def initialize_theme_from_config(config) -> None:
    """Apply ``cli.theme`` (and ``cli.custom_theme``) from a loaded ConfigBuilder."""
    theme = resolve_theme(config.get("cli.theme", "default"), config.get("cli.custom_theme"))
    set_theme(theme)
    logger.debug("Applied theme from configuration")


def get_console() -> Console:
    """The console for the active theme (rebuilt whenever the theme changes)."""
    return console


def get_questionary_style() -> QuestionaryStyle:
    return custom_style


# ============================================================================
# STYLE HELPERS
# ============================================================================


class Messages:
    """Pre-formatted markup for common status messages."""

    @staticmethod
    def success(text: str) -> str:
        return f"[success]✓ {text}[/success]"

    @staticmethod
    def error(text: str) -> str:
        return f"[error]✗ {text}[/error]"

    @staticmethod
    def warning(text: str) -> str:
        return f"[warning]⚠️  {text}[/warning]"

    @staticmethod
    def header(text: str) -> str:
        return f"[header]{text}[/header]"

    @staticmethod
    def label_value(label: str, value: str) -> str:
        return f"[label]{label}:[/label] [value]{value}[/value]"

    @staticmethod
    def command(text: str) -> str:
        return f"[command]{text}[/command]"


__all__ = [
    "ColorTheme",
    "AURORA_THEME",
    "MONO_THEME",
    "THEME_REGISTRY",
    "get_active_theme",
    "set_theme",
    "resolve_theme",
    "initialize_theme_from_config",
    "console",
    "get_console",
    "get_questionary_style",
    "Messages",
]
