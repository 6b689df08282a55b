"""Assembly of the bootstrap pipeline from settings."""

import os
import shutil
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from functools import partial
from pathlib import Path

import httpx

from skiaboot.bootstrap.archive_chain import ArchiveChain, plan_archive
from skiaboot.bootstrap.build_invoker import BuildInvoker
from skiaboot.bootstrap.environment import EnvironmentComposer
from skiaboot.bootstrap.fetcher import Fetcher
from skiaboot.bootstrap.packages import SystemPackages
from skiaboot.bootstrap.planner import StepPlanner
from skiaboot.bootstrap.process import CommandRunner
from skiaboot.bootstrap.repo_sync import RepoSync
from skiaboot.bootstrap.tools import is_nonempty_file, resolve_first, resolve_tool
from skiaboot.core.config.settings import ArtifactSettings, Settings, get_settings
from skiaboot.core.exceptions.errors import FetchError
from skiaboot.core.logger.logger import get_logger
from skiaboot.models.archive import ArchiveFormat, ArtifactRole
from skiaboot.models.environment import EnvironmentOverlay
from skiaboot.models.fetcher import DownloadSpec
from skiaboot.models.repo import RepoRef
from skiaboot.models.steps import PipelineResult, Step, StepOutcome
from skiaboot.models.tools import ToolLocation

logger = get_logger(__name__)

DEPS_SYNCED_MARKER = "skiaboot-deps-synced"


@dataclass
class Layout:
    """Directories the pipeline produces; all are siblings under root."""

    root: Path
    downloads: Path
    tools: Path
    toolchain: Path
    depot_tools: Path
    skia: Path

    @classmethod
    def from_settings(cls, settings: Settings) -> "Layout":
        """Build the layout from path and repo settings."""
        root = settings.paths.resolve_root()
        return cls(
            root=root,
            downloads=root / settings.paths.downloads_dir,
            tools=root / settings.paths.tools_dir,
            toolchain=root / settings.paths.toolchain_dir,
            depot_tools=root / settings.repos.depot_tools_dir,
            skia=root / settings.repos.skia_dir,
        )

    @property
    def work_areas(self) -> list[Path]:
        """Return the directories created before any download."""
        return [self.downloads, self.tools, self.toolchain]

    def area(self, name: str) -> Path:
        """Return the tools or toolchain area."""
        return self.tools if name == "tools" else self.toolchain


class Bootstrapper:
    """Builds the ordered step list and runs it with a StepPlanner."""

    def __init__(
        self,
        settings: Settings | None = None,
        base_env: Mapping[str, str] | None = None,
        platform: str | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize the bootstrapper.

        Args:
            settings: Settings to use. Loads global settings if not provided.
            base_env: Inherited environment. Defaults to os.environ.
            platform: sys.platform value used to select artifacts.
            http_client: Client for direct downloads.
        """
        self.settings = settings or get_settings()
        self.platform = platform or sys.platform
        self.base_env = dict(base_env) if base_env is not None else dict(os.environ)
        self.layout = Layout.from_settings(self.settings)
        self.artifacts = self.settings.artifacts_for(self.platform)

        self.overlay = self.compose_environment()
        self.runner = CommandRunner(overlay=self.overlay, base_env=self.base_env)

        downloader = self.settings.downloader
        self.fetcher = Fetcher(
            self.runner,
            locate_accelerator=self.locate_accelerator if downloader.accelerated else None,
            connections=downloader.connections,
            splits=downloader.splits,
            http_client=http_client,
            user_agent=downloader.user_agent,
        )
        self.archive_chain = ArchiveChain(self.runner, locate_archiver=self.locate_archiver)
        self.repo_sync = RepoSync(
            self.runner,
            interpreters=self.settings.repos.interpreters,
            locate_git=self.locate_git,
        )
        self.build_invoker = BuildInvoker(
            self.runner,
            self.layout.skia,
            generator_local_paths=self.settings.build.gn_local_paths,
            executor_local_paths=self.settings.build.ninja_local_paths,
        )
        packages = self.settings.packages
        self.system_packages = SystemPackages(
            self.runner,
            required_tools=packages.required_tools,
            apt_packages=packages.apt_packages,
            dnf_packages=packages.dnf_packages,
            use_sudo=packages.use_sudo,
        )

    # ------------------------------------------------------------------
    # Artifact layout
    # ------------------------------------------------------------------

    def artifact_path(self, artifact: ArtifactSettings) -> Path:
        """Return where an artifact ends up: a file for binaries, else a directory."""
        area = self.layout.area(artifact.area)
        if artifact.format == ArchiveFormat.BINARY:
            return area / artifact.file_name
        return area / (artifact.directory_name or artifact.name)

    def artifact_bin_dir(self, artifact: ArtifactSettings) -> Path:
        """Return the directory holding an artifact's executables."""
        if artifact.format == ArchiveFormat.BINARY:
            return self.layout.area(artifact.area)
        path = self.artifact_path(artifact)
        return path / artifact.bin_subdir if artifact.bin_subdir else path

    def compose_environment(self) -> EnvironmentOverlay:
        """Compose the overlay from the layout and the platform's artifacts."""
        toolchain_dirs: list[Path] = [self.layout.tools]
        vcs_dir: Path | None = None
        vcs_tool = "git"

        for artifact in self.artifacts:
            bin_dir = self.artifact_bin_dir(artifact)
            if artifact.role == ArtifactRole.VCS:
                vcs_dir = bin_dir
                vcs_tool = artifact.skip_if_on_path or vcs_tool
            elif bin_dir not in toolchain_dirs:
                toolchain_dirs.append(bin_dir)

        build = self.settings.build
        composer = EnvironmentComposer(
            toolchain_dirs=toolchain_dirs,
            vcs_dir=vcs_dir,
            dependency_tools_dir=self.layout.depot_tools,
            variables={build.toolchain_flag_name: build.toolchain_flag_value},
            vcs_tool=vcs_tool,
        )
        return composer.compose(self.base_env)

    def locate_archiver(self) -> ToolLocation:
        """Resolve the minimal archive tool (tools area first)."""
        return resolve_first(
            self.settings.archive.tool_names,
            [self.layout.tools],
            self.runner.search_path,
        )

    def locate_git(self) -> ToolLocation:
        """Resolve git on the composed PATH."""
        return resolve_tool("git", search_path=self.runner.search_path)

    def locate_accelerator(self) -> ToolLocation:
        """Resolve the accelerated downloader (bootstrapped copy first)."""
        name = self.settings.downloader.tool_name
        local = [
            self.artifact_bin_dir(a) / name
            for a in self.artifacts
            if a.role == ArtifactRole.DOWNLOADER
        ]
        return resolve_tool(name, local, self.runner.search_path)

    # ------------------------------------------------------------------
    # Preconditions and actions
    # ------------------------------------------------------------------

    def directories_ready(self) -> bool:
        return all(d.is_dir() for d in self.layout.work_areas)

    def prepare_directories(self) -> None:
        for directory in self.layout.work_areas:
            directory.mkdir(parents=True, exist_ok=True)

    def artifact_installed(self, artifact: ArtifactSettings) -> bool:
        """Return True when the artifact is in place or its tool is already on PATH."""
        if artifact.skip_if_on_path and shutil.which(
            artifact.skip_if_on_path, path=self.base_env.get("PATH", "")
        ):
            return True
        path = self.artifact_path(artifact)
        if artifact.format == ArchiveFormat.BINARY:
            return is_nonempty_file(path)
        return path.is_dir()

    def install_artifact(self, artifact: ArtifactSettings) -> Path:
        """Fetch an artifact if needed and unpack it into its stable location."""
        target = self.artifact_path(artifact)

        if artifact.format == ArchiveFormat.BINARY:
            spec = DownloadSpec(
                url=artifact.url,
                destination_dir=target.parent,
                destination_file=artifact.file_name,
            )
            # The archive tool is needed before the accelerator can be unpacked.
            path = self.fetcher.fetch(spec, direct=artifact.role == ArtifactRole.ARCHIVER)
            if os.name != "nt":
                path.chmod(path.stat().st_mode | 0o755)
            return path

        spec = DownloadSpec(
            url=artifact.url,
            destination_dir=self.layout.downloads,
            destination_file=artifact.file_name,
        )
        if self.fetcher.is_fetched(spec.destination):
            logger.info(f"Using cached download {spec.destination.name}")
        else:
            self.fetcher.fetch(spec)

        return self.archive_chain.resolve(
            plan_archive(spec.destination, artifact.format, target, artifact.directory_pattern)
        )

    @property
    def repos(self) -> list[RepoRef]:
        """Return depot_tools and skia, in clone order."""
        repos = self.settings.repos
        return [
            RepoRef(
                name="depot_tools",
                remote_url=repos.depot_tools_url,
                local_path=self.layout.depot_tools,
                depth=repos.clone_depth,
            ),
            RepoRef(
                name="skia",
                remote_url=repos.skia_url,
                local_path=self.layout.skia,
                depth=repos.clone_depth,
            ),
        ]

    @property
    def deps_marker(self) -> Path:
        """Return the marker written after a successful dependency sync."""
        return self.layout.skia / ".git" / DEPS_SYNCED_MARKER

    def sync_dependencies(self) -> None:
        self.repo_sync.sync_dependencies(self.layout.skia, self.settings.repos.sync_script)
        self.deps_marker.parent.mkdir(parents=True, exist_ok=True)
        self.deps_marker.write_text("ok\n", encoding="utf-8")

    def generator_available(self) -> bool:
        return self.build_invoker.locate_generator().found

    def fetch_generator(self) -> None:
        self.repo_sync.run_script(
            self.layout.skia,
            self.settings.repos.fetch_gn_script,
            FetchError,
        )

    def build_configured(self) -> bool:
        return self.build_invoker.is_configured(
            self.settings.build.output_dir,
            self.settings.build.merged_args(),
        )

    def configure(self) -> None:
        self.build_invoker.configure(
            self.settings.build.output_dir,
            self.settings.build.merged_args(),
        )

    def build(self) -> None:
        self.build_invoker.build(self.settings.build.output_dir)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def steps(self) -> list[Step]:
        """Return the ordered step list for this platform."""
        steps = [
            Step(
                name="prepare-directories",
                action=self.prepare_directories,
                precondition=self.directories_ready,
                description="Creating download, tools and toolchain areas",
            )
        ]

        if self.platform.startswith("linux") and self.settings.packages.enabled:
            steps.append(
                Step(
                    name="system-packages",
                    action=self.system_packages.install,
                    precondition=self.system_packages.is_satisfied,
                    description="Installing system packages",
                )
            )

        for artifact in self.artifacts:
            steps.append(
                Step(
                    name=f"install-{artifact.name}",
                    action=partial(self.install_artifact, artifact),
                    precondition=partial(self.artifact_installed, artifact),
                    description=f"Installing {artifact.name}",
                )
            )

        for ref in self.repos:
            steps.append(
                Step(
                    name=f"clone-{ref.name}",
                    action=partial(self.repo_sync.ensure_cloned, ref),
                    precondition=partial(RepoSync.is_cloned, ref),
                    description=f"Cloning {ref.name}",
                )
            )

        steps.extend(
            [
                Step(
                    name="sync-dependencies",
                    action=self.sync_dependencies,
                    precondition=self.deps_marker.is_file,
                    description="Syncing Skia dependencies",
                ),
                Step(
                    name="fetch-gn",
                    action=self.fetch_generator,
                    precondition=self.generator_available,
                    description="Downloading gn",
                ),
                Step(
                    name="configure",
                    action=self.configure,
                    precondition=self.build_configured,
                    description=f"Generating build files in {self.settings.build.output_dir}",
                ),
                Step(
                    name="build",
                    action=self.build,
                    description="Building with ninja",
                ),
            ]
        )
        return steps

    def plan(self) -> list[StepOutcome]:
        """Report which steps would run without running any."""
        return StepPlanner(self.steps()).plan()

    def run(self) -> PipelineResult:
        """Run the pipeline.

        Raises:
            StepFailedError: On the first failing step.
        """
        logger.info(f"Bootstrapping in {self.layout.root}")
        return StepPlanner(self.steps()).run()
