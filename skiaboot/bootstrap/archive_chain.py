"""Archive resolution: turn a downloaded archive into a stable directory.

Supported shapes:
- zip archives, extracted directly with :mod:`zipfile`
- compressed tarballs, unpacked in two passes (compressed tar -> tar -> files)
  with the minimal archive tool
- self-extracting 7z archives, unpacked by the same tool

Every stage writes to a ``.partial`` sibling and renames it into place on
success, so an existing stage output is always complete and is skipped on the
next run.
"""

import fnmatch
import shutil
import zipfile
from collections.abc import Callable, Iterable
from pathlib import Path

from skiaboot.bootstrap.process import CommandRunner
from skiaboot.bootstrap.tools import require_tool
from skiaboot.core.exceptions.errors import BootstrapError, ExtractionError
from skiaboot.core.logger.logger import get_logger
from skiaboot.models.archive import ArchiveFormat, ArchiveSpec, ArchiveStage, StageFormat
from skiaboot.models.tools import ToolLocation

logger = get_logger(__name__)

DECOMPRESSION_STAGES = {StageFormat.XZ, StageFormat.GZIP}


def discover_directory(names: Iterable[str], pattern: str) -> str | None:
    """Pick the directory an archive produced from a listing of entry names.

    Args:
        names: Names of the directories found after extraction.
        pattern: Glob the produced directory is expected to match.

    Returns:
        The first matching name in sorted order, or None.
    """
    matches = sorted(n for n in names if fnmatch.fnmatchcase(n, pattern))
    return matches[0] if matches else None


def _tar_name(archive_name: str) -> str:
    for suffix, replacement in ((".tar.xz", ".tar"), (".tar.gz", ".tar"), (".tgz", ".tar")):
        if archive_name.endswith(suffix):
            return archive_name[: -len(suffix)] + replacement
    return archive_name + ".tar"


def plan_archive(
    source_path: Path,
    archive_format: ArchiveFormat,
    target_path: Path,
    directory_pattern: str | None = None,
) -> ArchiveSpec:
    """Build the stage list for an archive of the given format.

    Intermediate tarballs are kept next to the download so an interrupted
    chain resumes at the second pass. The final stage extracts into a hidden
    staging directory beside target_path.
    """
    staging = target_path.parent / f".{target_path.name}.extract"
    stages: list[ArchiveStage] = []

    if archive_format in (ArchiveFormat.TAR_XZ, ArchiveFormat.TAR_GZ):
        tarball = source_path.parent / _tar_name(source_path.name)
        first = StageFormat.XZ if archive_format == ArchiveFormat.TAR_XZ else StageFormat.GZIP
        stages = [
            ArchiveStage(format=first, output_path=tarball),
            ArchiveStage(format=StageFormat.TAR, output_path=staging),
        ]
    elif archive_format == ArchiveFormat.ZIP:
        stages = [ArchiveStage(format=StageFormat.ZIP, output_path=staging)]
    elif archive_format == ArchiveFormat.SFX:
        stages = [ArchiveStage(format=StageFormat.SFX, output_path=staging)]

    return ArchiveSpec(
        source_path=source_path,
        stages=stages,
        final_directory_pattern=directory_pattern,
        target_path=target_path,
    )


class ArchiveChain:
    """Applies archive stages in order and moves the result to its stable path."""

    def __init__(
        self,
        runner: CommandRunner,
        locate_archiver: Callable[[], ToolLocation],
    ) -> None:
        """Initialize the archive chain.

        Args:
            runner: Command runner for the archive tool.
            locate_archiver: Resolves the minimal archive tool. It is looked up
                lazily because the tool may be bootstrapped earlier in the run.
        """
        self.runner = runner
        self.locate_archiver = locate_archiver
        self._archiver: ToolLocation | None = None

    @staticmethod
    def stage_complete(stage: ArchiveStage) -> bool:
        """Return True when the stage output is already in place."""
        output = stage.output_path
        if output.is_dir():
            return any(output.iterdir())
        return output.is_file()

    def resolve(self, spec: ArchiveSpec) -> Path:
        """Produce spec.target_path from spec.source_path.

        Returns:
            The stable target directory.

        Raises:
            ExtractionError: If a stage fails or the produced directory
                cannot be found.
            ToolNotFoundError: If a stage needs the archive tool and it is absent.
        """
        target = spec.target_path
        if target.exists():
            logger.info(f"{target.name} already extracted, skipping archive chain")
            return target

        if not spec.stages:
            raise ExtractionError(
                "Archive has no extraction stages",
                archive_path=str(spec.source_path),
            )

        current = spec.source_path
        for index, stage in enumerate(spec.stages, start=1):
            if self.stage_complete(stage):
                logger.info(
                    f"Stage {index}/{len(spec.stages)} ({stage.format.value}) "
                    f"already done: {stage.output_path.name}"
                )
            else:
                logger.info(
                    f"Stage {index}/{len(spec.stages)} ({stage.format.value}): "
                    f"{current.name} -> {stage.output_path.name}"
                )
                self._run_stage(stage, current)
            current = stage.output_path

        produced = self._discover(current, spec.final_directory_pattern)
        target.parent.mkdir(parents=True, exist_ok=True)
        produced.rename(target)
        if produced != current and current.exists():
            shutil.rmtree(current)

        logger.info(f"Extracted {spec.source_path.name} to {target}")
        return target

    def _discover(self, extracted: Path, pattern: str | None) -> Path:
        if pattern is None:
            return extracted

        names = [p.name for p in extracted.iterdir() if p.is_dir()]
        match = discover_directory(names, pattern)
        if match is None:
            raise ExtractionError(
                f"No directory matching '{pattern}' after extraction",
                archive_path=str(extracted),
                details={"entries": sorted(names)},
            )
        return extracted / match

    def _run_stage(self, stage: ArchiveStage, source: Path) -> None:
        if not source.exists():
            raise ExtractionError(
                f"Stage input missing: {source}",
                archive_path=str(source),
            )

        output = stage.output_path
        partial = output.with_name(f"{output.name}.partial")
        if partial.is_dir():
            shutil.rmtree(partial)
        elif partial.exists():
            partial.unlink()
        partial.mkdir(parents=True)

        try:
            if stage.format == StageFormat.ZIP:
                self._extract_zip(source, partial)
            else:
                self._extract_with_tool(source, partial)
        except BootstrapError:
            shutil.rmtree(partial, ignore_errors=True)
            raise

        if stage.format in DECOMPRESSION_STAGES:
            produced = [p for p in partial.iterdir() if p.is_file()]
            if len(produced) != 1:
                raise ExtractionError(
                    f"Expected one decompressed file from {source.name}, found {len(produced)}",
                    archive_path=str(source),
                )
            produced[0].replace(output)
            shutil.rmtree(partial)
        else:
            partial.rename(output)

    def _extract_zip(self, source: Path, destination: Path) -> None:
        try:
            with zipfile.ZipFile(source) as archive:
                archive.extractall(destination)
        except zipfile.BadZipFile as e:
            raise ExtractionError(
                f"Invalid zip archive: {source.name}",
                archive_path=str(source),
                tool="zipfile",
                details={"error": str(e)},
            ) from e

    def _extract_with_tool(self, source: Path, destination: Path) -> None:
        if self._archiver is None:
            location = self.locate_archiver()
            require_tool(location)
            self._archiver = location

        result = self.runner.run(
            [self._archiver.path, "x", source, f"-o{destination}", "-y"]
        )
        if not result.success:
            raise ExtractionError(
                f"Extraction failed: {source.name}",
                archive_path=str(source),
                tool=self._archiver.name,
                exit_code=result.return_code,
            )
