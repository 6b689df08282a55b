"""Main CLI entry point for skiaboot."""

import sys
from pathlib import Path

import click
from pydantic import ValidationError

from skiaboot.bootstrap.pipeline import Bootstrapper
from skiaboot.cli.display import (
    console,
    show_banner,
    show_error,
    show_failure,
    show_plan,
    show_result,
    show_success,
)
from skiaboot.core.config.settings import Settings
from skiaboot.core.exceptions.errors import BootstrapError, ConfigurationError, StepFailedError
from skiaboot.core.logger.logger import setup_logging


def load_settings(config_path: str | None, root: str | None, verbose: bool) -> Settings:
    """Load settings and apply command line overrides.

    Args:
        config_path: Explicit YAML file, or None for the default locations.
        root: Root directory override.
        verbose: Force DEBUG logging.

    Returns:
        Settings instance.

    Raises:
        ConfigurationError: If the configuration cannot be loaded.
    """
    try:
        settings = Settings.load(Path(config_path) if config_path else None)
    except ValidationError as e:
        raise ConfigurationError("Invalid configuration", details={"errors": e.errors()}) from e

    if root:
        settings.paths = settings.paths.model_copy(update={"root_dir": Path(root).resolve()})
    if verbose:
        settings.logging = settings.logging.model_copy(update={"level": "DEBUG"})
    return settings


def run_bootstrap(settings: Settings) -> None:
    """Run the pipeline and exit with the failing tool's status on error."""
    show_banner()
    bootstrapper = Bootstrapper(settings)
    console.print(f"[dim]Root directory: {bootstrapper.layout.root}[/]")

    try:
        result = bootstrapper.run()
    except StepFailedError as e:
        if e.result is not None:
            show_result(e.result)
        show_failure(e)
        sys.exit(e.process_exit_code)

    show_result(result)
    show_success(
        "Bootstrap Complete",
        f"{len(result.executed)} step(s) run, {len(result.skipped)} already satisfied",
    )


@click.group(invoke_without_command=True)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, dir_okay=False), help="YAML configuration file")
@click.option("--root", "-r", type=click.Path(file_okay=False), help="Directory holding all produced trees (default: cwd)")
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(
    ctx: click.Context,
    version: bool,
    config_path: str | None,
    root: str | None,
    verbose: bool,
) -> None:
    """skiaboot - Idempotent Skia build environment bootstrap.

    Run without arguments to bootstrap and build in the current directory.
    """
    if version:
        from skiaboot import __version__

        click.echo(f"skiaboot version {__version__}")
        return

    try:
        settings = load_settings(config_path, root, verbose)
    except ConfigurationError as e:
        show_error("Configuration Error", str(e))
        sys.exit(2)

    setup_logging(settings.logging)
    ctx.obj = settings

    if ctx.invoked_subcommand is None:
        run_bootstrap(settings)


@main.command()
@click.pass_obj
def run(settings: Settings) -> None:
    """Run every step whose work is not already done.

    Example:
        skiaboot --root /work run
    """
    run_bootstrap(settings)


@main.command()
@click.pass_obj
def plan(settings: Settings) -> None:
    """Show which steps would run, without running any."""
    try:
        outcomes = Bootstrapper(settings).plan()
    except BootstrapError as e:
        show_error("Plan Failed", str(e))
        sys.exit(1)
    show_plan(outcomes)


if __name__ == "__main__":
    main()
