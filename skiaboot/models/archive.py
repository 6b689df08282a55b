"""Archive and artifact data models."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class ArchiveFormat(str, Enum):
    """Shape of a downloaded artifact."""

    BINARY = "binary"
    ZIP = "zip"
    TAR_XZ = "tar_xz"
    TAR_GZ = "tar_gz"
    SFX = "sfx"


class StageFormat(str, Enum):
    """Format consumed by a single extraction stage."""

    XZ = "xz"
    GZIP = "gzip"
    TAR = "tar"
    ZIP = "zip"
    SFX = "sfx"


class ArtifactRole(str, Enum):
    """What a bootstrapped artifact is used for."""

    ARCHIVER = "archiver"
    DOWNLOADER = "downloader"
    TOOLCHAIN = "toolchain"
    VCS = "vcs"


class ArchiveStage(BaseModel):
    """One extraction pass: consumes the previous output, produces output_path."""

    format: StageFormat = Field(description="Format of the stage input")
    output_path: Path = Field(description="File or directory produced by the stage")


class ArchiveSpec(BaseModel):
    """Everything needed to turn a downloaded archive into a stable directory."""

    source_path: Path = Field(description="Downloaded archive")
    stages: list[ArchiveStage] = Field(
        default_factory=list,
        description="Ordered extraction stages",
    )
    final_directory_pattern: str | None = Field(
        default=None,
        description="Glob matching the top-level directory produced by the last stage",
    )
    target_path: Path = Field(description="Stable location of the extracted directory")
