"""Bootstrap pipeline - tool acquisition, source sync and build invocation."""

from skiaboot.bootstrap.archive_chain import ArchiveChain, discover_directory, plan_archive
from skiaboot.bootstrap.build_invoker import BuildInvoker
from skiaboot.bootstrap.environment import EnvironmentComposer
from skiaboot.bootstrap.fetcher import Fetcher
from skiaboot.bootstrap.gn_args import parse_gn_args, serialize_gn_args
from skiaboot.bootstrap.packages import SystemPackages
from skiaboot.bootstrap.pipeline import Bootstrapper, Layout
from skiaboot.bootstrap.planner import StepPlanner
from skiaboot.bootstrap.process import CommandResult, CommandRunner
from skiaboot.bootstrap.repo_sync import RepoSync
from skiaboot.bootstrap.tools import require_tool, resolve_first, resolve_tool

__all__ = [
    # Orchestration
    "Bootstrapper",
    "Layout",
    "StepPlanner",
    # Components
    "ArchiveChain",
    "BuildInvoker",
    "EnvironmentComposer",
    "Fetcher",
    "RepoSync",
    "SystemPackages",
    # Processes and tools
    "CommandResult",
    "CommandRunner",
    "require_tool",
    "resolve_first",
    "resolve_tool",
    # Pure helpers
    "discover_directory",
    "plan_archive",
    "parse_gn_args",
    "serialize_gn_args",
]
