"""Tests for SystemPackages."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from skiaboot.bootstrap.packages import SystemPackages
from skiaboot.bootstrap.process import CommandResult, CommandRunner
from skiaboot.core.exceptions.errors import PackageInstallError


@pytest.fixture
def path_dir(temp_dir: Path) -> Path:
    """Directory used as the composed PATH."""
    path = temp_dir / "bin"
    path.mkdir()
    return path


@pytest.fixture
def runner(path_dir: Path) -> MagicMock:
    """Command runner mock that succeeds."""
    runner = MagicMock(spec=CommandRunner)
    runner.search_path = str(path_dir)
    runner.run.return_value = CommandResult(argv=["x"], return_code=0)
    return runner


def make_packages(runner: MagicMock, use_sudo: bool = True) -> SystemPackages:
    return SystemPackages(
        runner,
        required_tools=["git", "clang"],
        apt_packages=["git", "clang"],
        dnf_packages=["git", "clang", "@development-tools"],
        use_sudo=use_sudo,
    )


class TestSystemPackages:
    """Tests for system package installation."""

    def test_satisfied_when_tools_present(
        self, runner: MagicMock, path_dir: Path, make_executable: Callable[..., Path]
    ) -> None:
        """Test the precondition when every tool resolves."""
        make_executable(path_dir / "git")
        make_executable(path_dir / "clang")

        packages = make_packages(runner)

        assert packages.missing_tools() == []
        assert packages.is_satisfied() is True

    def test_missing_tools(
        self, runner: MagicMock, path_dir: Path, make_executable: Callable[..., Path]
    ) -> None:
        """Test that missing tools are reported."""
        make_executable(path_dir / "git")
        assert make_packages(runner).missing_tools() == ["clang"]

    def test_apt_install(
        self, runner: MagicMock, path_dir: Path, make_executable: Callable[..., Path]
    ) -> None:
        """Test apt-get update followed by install."""
        make_executable(path_dir / "apt-get")

        make_packages(runner).install()

        assert [c.args[0] for c in runner.run.call_args_list] == [
            ["sudo", "apt-get", "update"],
            ["sudo", "apt-get", "install", "-y", "git", "clang"],
        ]

    def test_dnf_install_without_sudo(
        self, runner: MagicMock, path_dir: Path, make_executable: Callable[..., Path]
    ) -> None:
        """Test dnf installation without sudo."""
        make_executable(path_dir / "dnf")

        make_packages(runner, use_sudo=False).install()

        runner.run.assert_called_once_with(["dnf", "install", "-y", "git", "clang", "@development-tools"])

    def test_no_manager_only_warns(self, runner: MagicMock) -> None:
        """Test that an unknown distribution does not fail the step."""
        make_packages(runner).install()
        runner.run.assert_not_called()

    def test_install_failure(
        self, runner: MagicMock, path_dir: Path, make_executable: Callable[..., Path]
    ) -> None:
        """Test that a failing package manager stops at the failing command."""
        make_executable(path_dir / "apt-get")
        runner.run.return_value = CommandResult(argv=["sudo"], return_code=100)

        with pytest.raises(PackageInstallError) as exc_info:
            make_packages(runner).install()

        assert runner.run.call_count == 1
        assert exc_info.value.tool == "apt-get"
        assert exc_info.value.exit_code == 100
