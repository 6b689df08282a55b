"""Build-file generation and build execution.

This module locates the generator (gn) and the executor (ninja), local
paths inside the source tree first and then the composed PATH, and runs
them against the configured output directory.
"""

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from skiaboot.bootstrap.gn_args import parse_gn_args, serialize_gn_args
from skiaboot.bootstrap.process import CommandRunner
from skiaboot.bootstrap.tools import require_tool, resolve_tool
from skiaboot.core.exceptions.errors import BuildError, ConfigureError
from skiaboot.core.logger.logger import get_logger
from skiaboot.models.tools import ToolLocation

logger = get_logger(__name__)


class BuildInvoker:
    """Runs ``gn gen`` and ``ninja`` inside a source tree."""

    def __init__(
        self,
        runner: CommandRunner,
        source_dir: Path,
        generator_local_paths: Sequence[str] = ("bin/gn",),
        executor_local_paths: Sequence[str] = ("third_party/ninja/ninja",),
        generator_name: str = "gn",
        executor_name: str = "ninja",
    ) -> None:
        """Initialize the build invoker.

        Args:
            runner: Command runner carrying the composed environment.
            source_dir: Root of the source tree; both tools run from here.
            generator_local_paths: Generator candidates relative to source_dir.
            executor_local_paths: Executor candidates relative to source_dir.
            generator_name: Generator name looked up on PATH.
            executor_name: Executor name looked up on PATH.
        """
        self.runner = runner
        self.source_dir = source_dir
        self.generator_local_paths = list(generator_local_paths)
        self.executor_local_paths = list(executor_local_paths)
        self.generator_name = generator_name
        self.executor_name = executor_name

    def locate_generator(self) -> ToolLocation:
        """Resolve the build-file generator."""
        return resolve_tool(
            self.generator_name,
            [self.source_dir / p for p in self.generator_local_paths],
            self.runner.search_path,
        )

    def locate_executor(self) -> ToolLocation:
        """Resolve the build executor."""
        return resolve_tool(
            self.executor_name,
            [self.source_dir / p for p in self.executor_local_paths],
            self.runner.search_path,
        )

    def is_configured(self, out_dir: str, args: Mapping[str, Any]) -> bool:
        """Return True when out_dir was generated with exactly these args."""
        output = self.source_dir / out_dir
        args_file = output / "args.gn"
        if not (output / "build.ninja").is_file() or not args_file.is_file():
            return False
        try:
            return parse_gn_args(args_file.read_text(encoding="utf-8")) == dict(args)
        except (OSError, ValueError) as e:
            logger.debug(f"Ignoring unreadable {args_file}: {e}")
            return False

    def configure(self, out_dir: str, args: Mapping[str, Any]) -> str:
        """Generate build files in out_dir.

        Args:
            out_dir: Output directory relative to source_dir.
            args: Build arguments.

        Returns:
            The serialized argument block passed to the generator.

        Raises:
            ToolNotFoundError: If the generator cannot be located.
            ConfigureError: If the generator exits non-zero.
        """
        generator = require_tool(self.locate_generator())
        block = serialize_gn_args(args)
        logger.info(f"Generating build files in {out_dir}")
        logger.debug(f"Build arguments:\n{block}")

        result = self.runner.run(
            [generator, "gen", out_dir, f"--args={block}"],
            cwd=self.source_dir,
        )
        if not result.success:
            raise ConfigureError(
                f"Build file generation failed for {out_dir}",
                tool=self.generator_name,
                exit_code=result.return_code,
            )
        return block

    def build(self, out_dir: str) -> None:
        """Run the build executor against out_dir.

        Raises:
            ToolNotFoundError: If the executor cannot be located.
            BuildError: If the executor exits non-zero.
        """
        executor = require_tool(self.locate_executor())
        logger.info(f"Building {out_dir}")

        result = self.runner.run([executor, "-C", out_dir], cwd=self.source_dir)
        if not result.success:
            raise BuildError(
                f"Build failed for {out_dir}",
                tool=self.executor_name,
                exit_code=result.return_code,
            )
        logger.info("Build complete")
