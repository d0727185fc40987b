"""Aurora exception hierarchy.

All runtime failures inherit from AuroraError and carry an ErrorCategory so
callers (mainly the CLI) can tell a user abort apart from a real failure
without matching on concrete classes.

Nothing in Aurora retries automatically; the category only decides how an
error is reported and which exit code it maps to.
"""

from enum import Enum

EXIT_FAILURE = 1
EXIT_USER_ABORT = 3


class ErrorCategory(Enum):
    """Error category for reporting and exit code selection.

    Attributes:
        PRECONDITION: Engine or version control missing, detected before any mutation
        CANCELLED: The user declined a confirmation prompt
        EXECUTION: The container engine exited with a non-zero status
        EXPORT: The export destination failed validation
        NOT_APPLICABLE: Operation is meaningless in the current environment mode
        CONFIGURATION: Invalid or unreadable configuration
    """

    PRECONDITION = "precondition"
    CANCELLED = "cancelled"
    EXECUTION = "execution"
    EXPORT = "export"
    NOT_APPLICABLE = "not_applicable"
    CONFIGURATION = "configuration"


class AuroraError(Exception):
    """Base exception for all Aurora runtime errors.

    Attributes:
        message: Human-readable error description
        category: Error category for reporting
        technical_details: Additional debugging information
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory,
        technical_details: dict | None = None,
    ) -> None:
        """Initialize AuroraError.

        Args:
            message: Human-readable error description
            category: Error category for reporting
            technical_details: Additional debugging information
        """
        super().__init__(message)
        self.message = message
        self.category = category
        self.technical_details = technical_details or {}

    @property
    def is_user_abort(self) -> bool:
        """Return True for CANCELLED and NOT_APPLICABLE categories."""
        return self.category in (ErrorCategory.CANCELLED, ErrorCategory.NOT_APPLICABLE)

    @property
    def exit_code(self) -> int:
        """Process exit code the CLI should use for this error."""
        return EXIT_USER_ABORT if self.is_user_abort else EXIT_FAILURE


# === CANCELLED / NOT_APPLICABLE (user abort, not a defect) ===


class BuildCancelledError(AuroraError):
    """The user declined a confirmation prompt."""

    def __init__(self, message: str = "Build cancelled.", technical_details: dict | None = None):
        super().__init__(message, ErrorCategory.CANCELLED, technical_details)


class NotApplicableError(AuroraError):
    """Command invoked inside Mercury, where lifecycle commands make no sense."""

    def __init__(
        self,
        message: str = "This command is not applicable when running in Mercury.",
        technical_details: dict | None = None,
    ):
        super().__init__(message, ErrorCategory.NOT_APPLICABLE, technical_details)


# === PRECONDITION ===


class EngineUnavailableError(AuroraError):
    """No usable container engine binary could be located."""

    def __init__(
        self,
        message: str = "Docker could not be found on this machine.",
        technical_details: dict | None = None,
    ):
        super().__init__(message, ErrorCategory.PRECONDITION, technical_details)


class VersionControlMissingError(AuroraError):
    """The project is not tracked by git, so the build would not be reproducible."""

    def __init__(
        self,
        message: str = "Git is not initialized in this project. "
        "Production builds must start from a tracked working tree.",
        technical_details: dict | None = None,
    ):
        super().__init__(message, ErrorCategory.PRECONDITION, technical_details)


class BuildInProgressError(AuroraError):
    """Another production build holds the build lock for this project."""

    def __init__(self, message: str, lock_path: str, owner_pid: int | None = None):
        details = {"lock_path": lock_path}
        if owner_pid is not None:
            details["owner_pid"] = owner_pid
        super().__init__(message, ErrorCategory.PRECONDITION, details)
        self.lock_path = lock_path
        self.owner_pid = owner_pid


# === EXECUTION ===


class EngineCommandError(AuroraError):
    """The container engine exited with a non-zero status.

    The accumulated engine output is kept on the exception so it can be shown
    to the user after the fact.
    """

    def __init__(
        self,
        message: str,
        command: list[str],
        returncode: int,
        output: list[str] | None = None,
    ) -> None:
        details = {"command": " ".join(command), "returncode": returncode}
        super().__init__(message, ErrorCategory.EXECUTION, details)
        self.command = command
        self.returncode = returncode
        self.output = output or []

    def output_tail(self, lines: int = 20) -> list[str]:
        """Return the last ``lines`` lines of engine output."""
        return self.output[-lines:]


class EngineBuildFailedError(EngineCommandError):
    """The engine's image build step failed."""


class EngineExportFailedError(EngineCommandError):
    """The engine's image save step failed."""


# === EXPORT ===


class ExportDirError(AuroraError):
    """Base class for export destination validation failures."""

    def __init__(self, message: str, export_dir: str):
        super().__init__(message, ErrorCategory.EXPORT, {"export_dir": export_dir})
        self.export_dir = export_dir


class ExportDirMissingError(ExportDirError):
    """The export directory does not exist."""

    def __init__(self, export_dir: str):
        super().__init__(
            "The export directory does not exist. Please create it and try again.", export_dir
        )


class ExportDirNotADirectoryError(ExportDirError):
    """The export path exists but is not a directory."""

    def __init__(self, export_dir: str):
        super().__init__(
            "The export directory is not a directory. Please create it and try again.",
            export_dir,
        )


class ExportDirNotWritableError(ExportDirError):
    """The export directory lacks write permission."""

    def __init__(self, export_dir: str):
        super().__init__(
            "The export directory is not writable. Please check the permissions and try again.",
            export_dir,
        )


# === CONFIGURATION ===


class ConfigurationError(AuroraError):
    """Configuration file could not be loaded or holds invalid values."""

    def __init__(self, message: str, config_path: str | None = None):
        details = {"config_path": config_path} if config_path else {}
        super().__init__(message, ErrorCategory.CONFIGURATION, details)
        self.config_path = config_path
