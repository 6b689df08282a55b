"""Tests for tool location resolution."""

from collections.abc import Callable
from pathlib import Path

import pytest

from skiaboot.bootstrap.tools import (
    executable_variants,
    is_nonempty_file,
    require_tool,
    resolve_first,
    resolve_tool,
)
from skiaboot.core.exceptions.errors import ToolNotFoundError
from skiaboot.models.tools import ToolLocation


class TestExecutableVariants:
    """Tests for platform file name variants."""

    def test_windows_adds_suffixes(self) -> None:
        """Test that Windows candidates include the executable suffixes."""
        variants = executable_variants(Path("bin/gn"), platform="win32")
        assert variants == [Path("bin/gn.exe"), Path("bin/gn.bat"), Path("bin/gn.cmd"), Path("bin/gn")]

    def test_posix_unchanged(self) -> None:
        """Test that POSIX candidates are used as-is."""
        assert executable_variants(Path("bin/gn"), platform="linux") == [Path("bin/gn")]

    def test_existing_suffix_kept(self) -> None:
        """Test that names with a suffix are not expanded."""
        assert executable_variants(Path("7zr.exe"), platform="win32") == [Path("7zr.exe")]


class TestIsNonemptyFile:
    """Tests for is_nonempty_file."""

    def test_states(self, temp_dir: Path) -> None:
        """Test missing, empty, non-empty and directory paths."""
        empty = temp_dir / "empty"
        empty.touch()
        full = temp_dir / "full"
        full.write_bytes(b"x")

        assert is_nonempty_file(temp_dir / "missing") is False
        assert is_nonempty_file(empty) is False
        assert is_nonempty_file(full) is True
        assert is_nonempty_file(temp_dir) is False


class TestResolveTool:
    """Tests for resolve_tool."""

    def test_local_candidate_preferred(
        self, temp_dir: Path, make_executable: Callable[..., Path]
    ) -> None:
        """Test that a local copy wins over one on the search path."""
        local = make_executable(temp_dir / "skia" / "bin" / "gn")
        make_executable(temp_dir / "path_bin" / "gn")

        location = resolve_tool("gn", [local], search_path=str(temp_dir / "path_bin"))

        assert location.path == local
        assert location.is_on_system_path is True
        assert location.expected_path == local

    def test_falls_back_to_search_path(
        self, temp_dir: Path, make_executable: Callable[..., Path]
    ) -> None:
        """Test resolution on the search path when no local copy exists."""
        on_path = make_executable(temp_dir / "path_bin" / "ninja")

        location = resolve_tool(
            "ninja",
            [temp_dir / "skia" / "third_party" / "ninja" / "ninja"],
            search_path=str(temp_dir / "path_bin"),
        )

        assert location.found
        assert location.path == on_path

    def test_empty_local_file_ignored(self, temp_dir: Path) -> None:
        """Test that a zero-byte local file is not a usable tool."""
        local = temp_dir / "gn"
        local.touch()

        location = resolve_tool("gn", [local], search_path=str(temp_dir / "nowhere"))

        assert location.found is False
        assert location.path is None
        assert "not found" in str(location)

    def test_second_candidate(self, temp_dir: Path, make_executable: Callable[..., Path]) -> None:
        """Test that later local candidates are checked in order."""
        second = make_executable(temp_dir / "second" / "gn")
        location = resolve_tool(
            "gn", [temp_dir / "first" / "gn", second], search_path=str(temp_dir / "nowhere")
        )
        assert location.path == second
        assert location.expected_path == temp_dir / "first" / "gn"


class TestResolveFirst:
    """Tests for resolve_first."""

    def test_first_available_name(self, temp_dir: Path, make_executable: Callable[..., Path]) -> None:
        """Test that the first name that resolves is returned."""
        make_executable(temp_dir / "path_bin" / "7z")

        location = resolve_first(["7zr", "7za", "7z"], [temp_dir / "tools"], str(temp_dir / "path_bin"))

        assert location.name == "7z"

    def test_local_dir_checked(self, temp_dir: Path, make_executable: Callable[..., Path]) -> None:
        """Test that names are looked up in the local directories."""
        local = make_executable(temp_dir / "tools" / "7zr")
        location = resolve_first(["7zr", "7z"], [temp_dir / "tools"], str(temp_dir / "nowhere"))
        assert location.path == local

    def test_nothing_found(self, temp_dir: Path) -> None:
        """Test that the first name's location is reported when none resolve."""
        location = resolve_first(["7zr", "7z"], [], str(temp_dir))
        assert location.name == "7zr"
        assert location.found is False

    def test_no_names(self) -> None:
        """Test that an empty name list is a programming error."""
        with pytest.raises(ValueError):
            resolve_first([])


class TestRequireTool:
    """Tests for require_tool."""

    def test_returns_path(self, temp_dir: Path) -> None:
        """Test that a found tool returns its path."""
        location = ToolLocation(name="gn", path=temp_dir / "gn")
        assert require_tool(location) == temp_dir / "gn"

    def test_raises_when_missing(self, temp_dir: Path) -> None:
        """Test the error for a missing tool."""
        location = ToolLocation(name="gn", expected_path=temp_dir / "bin" / "gn")

        with pytest.raises(ToolNotFoundError, match="Required tool not found: gn") as exc_info:
            require_tool(location)

        assert exc_info.value.tool == "gn"
        assert exc_info.value.details["searched"] == [str(temp_dir / "bin" / "gn")]
