"""Data models module."""

from skiaboot.models.archive import (
    ArchiveFormat,
    ArchiveSpec,
    ArchiveStage,
    ArtifactRole,
    StageFormat,
)
from skiaboot.models.environment import EnvironmentOverlay
from skiaboot.models.fetcher import DownloadSpec
from skiaboot.models.repo import RepoRef
from skiaboot.models.steps import PipelineResult, Step, StepOutcome, StepStatus
from skiaboot.models.tools import ToolLocation

__all__ = [
    "ArchiveFormat",
    "ArchiveSpec",
    "ArchiveStage",
    "ArtifactRole",
    "StageFormat",
    "DownloadSpec",
    "EnvironmentOverlay",
    "RepoRef",
    "ToolLocation",
    "Step",
    "StepOutcome",
    "StepStatus",
    "PipelineResult",
]
