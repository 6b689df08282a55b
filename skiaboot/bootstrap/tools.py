"""Tool location resolution: local candidates first, then the search path."""

import shutil
import sys
from collections.abc import Iterable, Sequence
from pathlib import Path

from skiaboot.core.exceptions.errors import ToolNotFoundError
from skiaboot.models.tools import ToolLocation

WINDOWS_SUFFIXES = (".exe", ".bat", ".cmd")


def executable_variants(path: Path, platform: str | None = None) -> list[Path]:
    """Return the file names an extension-less executable may have on platform."""
    platform = platform or sys.platform
    if platform == "win32" and not path.suffix:
        return [path.with_suffix(s) for s in WINDOWS_SUFFIXES] + [path]
    return [path]


def is_nonempty_file(path: Path) -> bool:
    """Return True when path is a regular file with at least one byte."""
    try:
        return path.is_file() and path.stat().st_size > 0
    except OSError:
        return False


def resolve_tool(
    name: str,
    local_candidates: Sequence[Path] = (),
    search_path: str | None = None,
) -> ToolLocation:
    """Resolve a tool once, preferring local candidates over the search path.

    Args:
        name: Executable name looked up on the search path.
        local_candidates: Paths checked in order before the search path.
        search_path: PATH string to search. None uses the process PATH.

    Returns:
        ToolLocation; ``path`` is None when nothing was found.
    """
    expected = Path(local_candidates[0]) if local_candidates else None

    local: Path | None = None
    for candidate in local_candidates:
        local = next(
            (v for v in executable_variants(Path(candidate)) if is_nonempty_file(v)),
            None,
        )
        if local is not None:
            break

    on_path = shutil.which(name, path=search_path)

    return ToolLocation(
        name=name,
        expected_path=expected,
        is_on_system_path=on_path is not None,
        path=local or (Path(on_path) if on_path else None),
    )


def resolve_first(
    names: Iterable[str],
    local_dirs: Sequence[Path] = (),
    search_path: str | None = None,
) -> ToolLocation:
    """Resolve the first of several interchangeable tool names.

    Each name is checked in every local directory, then on the search path.
    When nothing resolves, the not-found location of the first name is returned.
    """
    first: ToolLocation | None = None
    for name in names:
        location = resolve_tool(
            name,
            [Path(d) / name for d in local_dirs],
            search_path,
        )
        if location.found:
            return location
        first = first or location

    if first is None:
        raise ValueError("resolve_first() needs at least one tool name")
    return first


def require_tool(location: ToolLocation) -> Path:
    """Return the resolved path or raise ToolNotFoundError."""
    if location.path is None:
        searched = [str(location.expected_path)] if location.expected_path else []
        raise ToolNotFoundError(
            f"Required tool not found: {location.name}",
            tool_name=location.name,
            searched=searched,
        )
    return location.path
