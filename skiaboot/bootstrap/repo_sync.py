"""Clone-if-absent for external source trees and in-tree script invocation."""

import os
import shutil
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import git
from git import Repo
from git.exc import GitCommandError, GitCommandNotFound

from skiaboot.bootstrap.process import CommandRunner
from skiaboot.bootstrap.tools import require_tool, resolve_tool
from skiaboot.core.exceptions.errors import CloneError, DependencySyncError, ToolError
from skiaboot.core.logger.logger import get_logger
from skiaboot.models.repo import RepoRef
from skiaboot.models.tools import ToolLocation

logger = get_logger(__name__)


class RepoSync:
    """Handles clones and scripts that run inside a cloned tree."""

    def __init__(
        self,
        runner: CommandRunner,
        interpreters: Sequence[str] = ("python3", "python"),
        locate_git: Callable[[], ToolLocation] | None = None,
    ) -> None:
        """Initialize repository sync.

        Args:
            runner: Command runner; its composed environment is also handed
                to git.
            interpreters: Interpreter names in priority order.
            locate_git: Resolves git on the composed PATH. Called before each
                clone because git may have been bootstrapped earlier in the
                run; GitPython is pointed at the result.
        """
        self.runner = runner
        self.interpreters = list(interpreters)
        self.locate_git = locate_git

    @staticmethod
    def is_cloned(ref: RepoRef) -> bool:
        """Return True when the checkout exists. The tree is not inspected."""
        return ref.local_path.exists()

    def ensure_cloned(self, ref: RepoRef) -> bool:
        """Clone ref.remote_url to ref.local_path unless the path exists.

        The clone goes to a ``.partial`` sibling first and is renamed on
        success, so a present local_path is always a finished clone.

        Args:
            ref: Repository to clone.

        Returns:
            True if a clone was performed, False if the path already existed.

        Raises:
            CloneError: If git fails.
            ToolNotFoundError: If locate_git finds no git.
        """
        if self.is_cloned(ref):
            logger.info(f"{ref.name} already exists at {ref.local_path}")
            return False

        partial = ref.local_path.with_name(f"{ref.local_path.name}.partial")
        if partial.exists():
            logger.debug(f"Removing interrupted clone at {partial}")
            shutil.rmtree(partial)

        clone_kwargs: dict[str, Any] = {
            "url": ref.remote_url,
            "to_path": str(partial),
            "env": self.runner.env,
        }
        if ref.depth > 0:
            clone_kwargs["depth"] = ref.depth

        self._select_git()
        logger.info(f"Cloning {ref.name}: {ref.remote_url}")
        try:
            Repo.clone_from(**clone_kwargs)
        except (GitCommandError, GitCommandNotFound) as e:
            raise CloneError(
                f"Failed to clone {ref.name}",
                repo_url=ref.remote_url,
                exit_code=e.status if isinstance(e.status, int) else None,
                details={"error": str(e).strip()},
            ) from e

        partial.rename(ref.local_path)
        logger.info(f"Cloned {ref.name} to {ref.local_path}")
        return True

    def _select_git(self) -> None:
        if self.locate_git is None:
            return
        executable = require_tool(self.locate_git())
        try:
            git.refresh(str(executable))
        except Exception as e:
            raise CloneError(
                f"Unusable git executable: {executable}",
                tool=str(executable),
                details={"error": str(e)},
            ) from e

    def resolve_interpreter(self) -> ToolLocation | None:
        """Return the first interpreter resolvable on the composed PATH."""
        for name in self.interpreters:
            location = resolve_tool(name, search_path=self.runner.search_path)
            if location.found:
                return location
        return None

    def run_script(
        self,
        repo_path: Path,
        script: str,
        error_cls: type[ToolError] = DependencySyncError,
    ) -> None:
        """Run a Python script that lives inside a repository.

        Only the first interpreter found is used; if none resolves the script
        is executed directly.

        Args:
            repo_path: Repository root (also the working directory).
            script: Script path relative to repo_path.
            error_cls: Exception raised on failure.

        Raises:
            error_cls: If the script is missing, cannot be run, or exits non-zero.
        """
        script_path = repo_path / script
        if not script_path.is_file():
            raise error_cls(f"Script not found: {script_path}", tool=script)

        interpreter = self.resolve_interpreter()
        if interpreter is not None:
            argv: list[str | Path] = [interpreter.path, script_path]
            tool = interpreter.name
        elif os.access(script_path, os.X_OK):
            logger.warning(f"No interpreter from {self.interpreters} found, executing {script} directly")
            argv = [script_path]
            tool = script
        else:
            raise error_cls(
                f"No usable interpreter for {script}",
                tool=script,
                details={"interpreters": self.interpreters},
            )

        result = self.runner.run(argv, cwd=repo_path)
        if not result.success:
            raise error_cls(
                f"{script} failed",
                tool=tool,
                exit_code=result.return_code,
            )

    def sync_dependencies(self, repo_path: Path, script: str = "tools/git-sync-deps") -> None:
        """Run the dependency-sync entry point inside a checkout."""
        logger.info(f"Syncing dependencies in {repo_path}")
        self.run_script(repo_path, script, DependencySyncError)
