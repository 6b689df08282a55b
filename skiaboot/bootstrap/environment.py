"""Composition of the environment every child process inherits."""

import shutil
from collections.abc import Mapping, Sequence
from pathlib import Path

from skiaboot.core.logger.logger import get_logger
from skiaboot.models.environment import EnvironmentOverlay

logger = get_logger(__name__)


class EnvironmentComposer:
    """Builds the EnvironmentOverlay in a fixed order.

    1. Tool and toolchain directories.
    2. The version-control directory, only when ``vcs_tool`` does not
       already resolve on the inherited PATH.
    3. The dependency-tooling directory, last and therefore first on PATH.

    Composition is pure: nothing is created or modified on disk.
    """

    def __init__(
        self,
        toolchain_dirs: Sequence[Path] = (),
        vcs_dir: Path | None = None,
        dependency_tools_dir: Path | None = None,
        variables: Mapping[str, str] | None = None,
        vcs_tool: str = "git",
    ) -> None:
        """Initialize the composer.

        Args:
            toolchain_dirs: Archive tool, downloader and compiler directories,
                in prepend order.
            vcs_dir: Directory holding a bootstrapped git.
            dependency_tools_dir: Directory with highest precedence (depot_tools).
            variables: Variables set for child processes.
            vcs_tool: Executable whose presence on PATH makes vcs_dir unnecessary.
        """
        self.toolchain_dirs = list(toolchain_dirs)
        self.vcs_dir = vcs_dir
        self.dependency_tools_dir = dependency_tools_dir
        self.variables = dict(variables or {})
        self.vcs_tool = vcs_tool

    def compose(self, base_env: Mapping[str, str]) -> EnvironmentOverlay:
        """Return the overlay for base_env.

        Args:
            base_env: Inherited environment; only its PATH is inspected.
        """
        prepends: list[Path] = list(self.toolchain_dirs)

        if self.vcs_dir is not None:
            if shutil.which(self.vcs_tool, path=base_env.get("PATH", "")) is None:
                prepends.append(self.vcs_dir)
            else:
                logger.debug(f"{self.vcs_tool} found on PATH, not prepending {self.vcs_dir}")

        if self.dependency_tools_dir is not None:
            prepends.append(self.dependency_tools_dir)

        return EnvironmentOverlay(prepend_paths=tuple(prepends), variables=self.variables)
