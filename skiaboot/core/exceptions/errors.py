"""Custom exception definitions for skiaboot."""

from typing import Any


class BootstrapError(Exception):
    """Base exception for all skiaboot errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Error message.
            details: Additional error details.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ToolError(BootstrapError):
    """Base exception for failures of an external tool invocation."""

    def __init__(
        self,
        message: str,
        tool: str | None = None,
        exit_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize tool error.

        Args:
            message: Error message.
            tool: Name or path of the tool that failed.
            exit_code: Exit status reported by the tool.
            details: Additional error details.
        """
        details = details or {}
        if tool:
            details["tool"] = tool
        if exit_code is not None:
            details["exit_code"] = exit_code
        super().__init__(message, details)
        self.tool = tool
        self.exit_code = exit_code


class FetchError(ToolError):
    """Exception raised when a download fails or produces no file."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        tool: str | None = None,
        exit_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize fetch error.

        Args:
            message: Error message.
            url: URL that could not be fetched.
            tool: Download tool used.
            exit_code: Exit status of the download tool.
            details: Additional error details.
        """
        details = details or {}
        if url:
            details["url"] = url
        super().__init__(message, tool=tool, exit_code=exit_code, details=details)
        self.url = url


class ExtractionError(ToolError):
    """Exception raised for archive stage failures or missing output directories."""

    def __init__(
        self,
        message: str,
        archive_path: str | None = None,
        tool: str | None = None,
        exit_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if archive_path:
            details["archive_path"] = archive_path
        super().__init__(message, tool=tool, exit_code=exit_code, details=details)


class CloneError(ToolError):
    """Exception raised when cloning a repository fails."""

    def __init__(
        self,
        message: str,
        repo_url: str | None = None,
        tool: str | None = "git",
        exit_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if repo_url:
            details["repo_url"] = repo_url
        super().__init__(message, tool=tool, exit_code=exit_code, details=details)


class DependencySyncError(ToolError):
    """Exception raised when no interpreter is usable or a repo script fails."""


class ConfigureError(ToolError):
    """Exception raised when the build-file generator exits non-zero."""


class BuildError(ToolError):
    """Exception raised when the build executor exits non-zero."""


class PackageInstallError(ToolError):
    """Exception raised when a system package manager command fails."""


class ToolNotFoundError(BootstrapError):
    """Exception raised when a required tool is neither local nor on PATH."""

    def __init__(
        self,
        message: str,
        tool_name: str | None = None,
        searched: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize tool-not-found error.

        Args:
            message: Error message.
            tool_name: Name of the missing tool.
            searched: Local paths that were checked before PATH.
            details: Additional error details.
        """
        details = details or {}
        if tool_name:
            details["tool_name"] = tool_name
        if searched:
            details["searched"] = searched
        super().__init__(message, details)
        self.tool = tool_name


class ConfigurationError(BootstrapError):
    """Exception raised for configuration errors."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error.

        Args:
            message: Error message.
            config_key: Configuration key that caused the error.
            details: Additional error details.
        """
        details = details or {}
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, details)


class StepFailedError(BootstrapError):
    """Raised by the planner when a step action fails; aborts the pipeline."""

    def __init__(
        self,
        step_name: str,
        cause: BaseException,
        result: Any = None,
    ) -> None:
        """Initialize step failure.

        Args:
            step_name: Name of the step whose action failed.
            cause: Underlying exception raised by the action.
            result: Pipeline result recorded up to and including the failure.
        """
        self.step_name = step_name
        self.cause = cause
        self.result = result
        self.tool = getattr(cause, "tool", None)
        self.exit_code = getattr(cause, "exit_code", None)

        details: dict[str, Any] = {"step": step_name}
        if self.tool:
            details["tool"] = self.tool
        if self.exit_code is not None:
            details["exit_code"] = self.exit_code
        message = getattr(cause, "message", None) or str(cause)
        super().__init__(f"Step '{step_name}' failed: {message}", details)

    @property
    def process_exit_code(self) -> int:
        """Exit status the process should terminate with (never 0)."""
        if isinstance(self.exit_code, int) and self.exit_code != 0:
            return self.exit_code
        return 1
