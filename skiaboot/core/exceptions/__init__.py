"""Exception definitions module."""

from skiaboot.core.exceptions.errors import (
    BootstrapError,
    BuildError,
    CloneError,
    ConfigurationError,
    ConfigureError,
    DependencySyncError,
    ExtractionError,
    FetchError,
    PackageInstallError,
    StepFailedError,
    ToolError,
    ToolNotFoundError,
)

__all__ = [
    "BootstrapError",
    "ToolError",
    "FetchError",
    "ExtractionError",
    "CloneError",
    "DependencySyncError",
    "ConfigureError",
    "BuildError",
    "PackageInstallError",
    "ToolNotFoundError",
    "ConfigurationError",
    "StepFailedError",
]
