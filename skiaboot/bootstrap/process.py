"""Blocking subprocess invocation with an explicit environment overlay."""

import os
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from skiaboot.core.logger.logger import get_logger
from skiaboot.models.environment import EnvironmentOverlay

logger = get_logger(__name__)


@dataclass
class CommandResult:
    """Result of an external command.

    Attributes:
        argv: Command line that was executed.
        return_code: Exit status of the process.
        cwd: Working directory, if any.
    """

    argv: list[str]
    return_code: int
    cwd: Path | None = None

    @property
    def success(self) -> bool:
        """Return True when the process exited with status 0."""
        return self.return_code == 0

    @property
    def tool(self) -> str:
        """Return the executable that was invoked."""
        return self.argv[0] if self.argv else ""


class CommandRunner:
    """Runs external tools synchronously, streaming their output to the console.

    No timeout is applied; a hung tool blocks the pipeline. Child processes get
    ``overlay.apply(base_env)``, never a mutated ``os.environ``.
    """

    def __init__(
        self,
        overlay: EnvironmentOverlay | None = None,
        base_env: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            overlay: Environment overlay applied to every command.
            base_env: Inherited environment. Defaults to os.environ.
        """
        self.overlay = overlay or EnvironmentOverlay()
        self.base_env = dict(base_env) if base_env is not None else dict(os.environ)

    @property
    def env(self) -> dict[str, str]:
        """Return the composed environment handed to child processes."""
        return self.overlay.apply(self.base_env)

    @property
    def search_path(self) -> str:
        """Return the composed PATH."""
        return self.overlay.search_path(self.base_env)

    def run(self, argv: Sequence[str | Path], cwd: Path | None = None) -> CommandResult:
        """Run a command and wait for it to exit.

        Args:
            argv: Executable followed by its arguments.
            cwd: Working directory.

        Returns:
            CommandResult with the exit status. A missing executable is
            reported as 127 and a non-executable one as 126, like a shell.
        """
        args = [str(a) for a in argv]
        logger.info(f"Running: {' '.join(args)}" + (f" (in {cwd})" if cwd else ""))

        try:
            completed = subprocess.run(args, cwd=cwd, env=self.env, check=False)
        except FileNotFoundError as e:
            logger.error(f"Executable not found: {args[0]} ({e})")
            return CommandResult(argv=args, return_code=127, cwd=cwd)
        except PermissionError as e:
            logger.error(f"Executable not runnable: {args[0]} ({e})")
            return CommandResult(argv=args, return_code=126, cwd=cwd)

        if completed.returncode != 0:
            logger.warning(f"{args[0]} exited with status {completed.returncode}")
        return CommandResult(argv=args, return_code=completed.returncode, cwd=cwd)
