"""Tests for RepoSync."""

import os
from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from git import Repo

from skiaboot.bootstrap.process import CommandResult, CommandRunner
from skiaboot.bootstrap.repo_sync import RepoSync
from skiaboot.core.exceptions.errors import (
    CloneError,
    DependencySyncError,
    FetchError,
    ToolNotFoundError,
)
from skiaboot.models.repo import RepoRef
from skiaboot.models.tools import ToolLocation


@pytest.fixture
def clone_target(temp_dir: Path) -> Path:
    """Location a clone should end up at."""
    return temp_dir / "work" / "skia"


class TestEnsureCloned:
    """Tests for clone-if-absent."""

    def test_clones_when_absent(self, sample_git_repo: Path, clone_target: Path) -> None:
        """Test a fresh clone."""
        clone_target.parent.mkdir()
        ref = RepoRef(name="skia", remote_url=str(sample_git_repo), local_path=clone_target)

        cloned = RepoSync(CommandRunner()).ensure_cloned(ref)

        assert cloned is True
        assert (clone_target / "README.md").is_file()
        assert not Repo(clone_target).bare
        assert not clone_target.with_name("skia.partial").exists()

    def test_existing_path_trusted(self, clone_target: Path) -> None:
        """Test that an existing path is never inspected or re-cloned."""
        clone_target.mkdir(parents=True)
        ref = RepoRef(name="skia", remote_url="https://example.invalid/skia.git", local_path=clone_target)

        with patch.object(Repo, "clone_from") as mock_clone:
            assert RepoSync(CommandRunner()).ensure_cloned(ref) is False

        mock_clone.assert_not_called()
        assert list(clone_target.iterdir()) == []

    def test_stale_partial_removed(self, sample_git_repo: Path, clone_target: Path) -> None:
        """Test that an interrupted clone is discarded before cloning again."""
        partial = clone_target.with_name("skia.partial")
        partial.mkdir(parents=True)
        (partial / "garbage").write_text("x")
        ref = RepoRef(name="skia", remote_url=str(sample_git_repo), local_path=clone_target)

        RepoSync(CommandRunner()).ensure_cloned(ref)

        assert not partial.exists()
        assert not (clone_target / "garbage").exists()

    def test_clone_failure(self, temp_dir: Path, clone_target: Path) -> None:
        """Test that a failed clone leaves no checkout behind."""
        clone_target.parent.mkdir()
        ref = RepoRef(name="skia", remote_url=str(temp_dir / "no-such-repo"), local_path=clone_target)

        with pytest.raises(CloneError, match="Failed to clone skia") as exc_info:
            RepoSync(CommandRunner()).ensure_cloned(ref)

        assert exc_info.value.tool == "git"
        assert exc_info.value.details["repo_url"] == str(temp_dir / "no-such-repo")
        assert not clone_target.exists()

    def test_depth_and_environment_passed(self, clone_target: Path) -> None:
        """Test that depth and the composed environment reach git."""
        clone_target.parent.mkdir()
        runner = CommandRunner(base_env={"PATH": "/usr/bin", "HOME": "/home/user"})
        ref = RepoRef(name="skia", remote_url="https://example.com/skia.git", local_path=clone_target, depth=1)

        def fake_clone(url: str, to_path: str, **kwargs) -> MagicMock:
            Path(to_path).mkdir()
            return MagicMock()

        with patch.object(Repo, "clone_from", side_effect=fake_clone) as mock_clone:
            RepoSync(runner).ensure_cloned(ref)

        kwargs = mock_clone.call_args.kwargs
        assert kwargs["depth"] == 1
        assert kwargs["env"] == runner.env
        assert clone_target.is_dir()

    def test_git_not_found(self, clone_target: Path) -> None:
        """Test that a missing git aborts before any clone attempt."""
        ref = RepoRef(name="skia", remote_url="https://example.com/skia.git", local_path=clone_target)
        sync = RepoSync(CommandRunner(), locate_git=lambda: ToolLocation(name="git"))

        with patch.object(Repo, "clone_from") as mock_clone, pytest.raises(ToolNotFoundError):
            sync.ensure_cloned(ref)

        mock_clone.assert_not_called()

    def test_is_cloned(self, clone_target: Path) -> None:
        """Test the clone precondition."""
        ref = RepoRef(name="skia", remote_url="x", local_path=clone_target)
        assert RepoSync.is_cloned(ref) is False
        clone_target.mkdir(parents=True)
        assert RepoSync.is_cloned(ref) is True


class TestRunScript:
    """Tests for in-tree script execution."""

    @pytest.fixture
    def repo_dir(self, temp_dir: Path, make_executable: Callable[..., Path]) -> Path:
        """A checkout containing the dependency sync script."""
        repo = temp_dir / "skia"
        make_executable(repo / "tools" / "git-sync-deps", "#!/usr/bin/env python3\n")
        return repo

    @pytest.fixture
    def bin_dir(self, temp_dir: Path) -> Path:
        """Directory used as the composed PATH."""
        path = temp_dir / "bin"
        path.mkdir()
        return path

    def make_runner(self, bin_dir: Path, return_code: int = 0) -> MagicMock:
        runner = MagicMock(spec=CommandRunner)
        runner.search_path = str(bin_dir)
        runner.run.return_value = CommandResult(argv=["x"], return_code=return_code)
        return runner

    def test_first_interpreter_used(
        self, repo_dir: Path, bin_dir: Path, make_executable: Callable[..., Path]
    ) -> None:
        """Test that python3 is preferred over python."""
        python3 = make_executable(bin_dir / "python3")
        make_executable(bin_dir / "python")
        runner = self.make_runner(bin_dir)

        RepoSync(runner).sync_dependencies(repo_dir)

        runner.run.assert_called_once_with([python3, repo_dir / "tools" / "git-sync-deps"], cwd=repo_dir)

    def test_falls_back_to_second_interpreter(
        self, repo_dir: Path, bin_dir: Path, make_executable: Callable[..., Path]
    ) -> None:
        """Test that python is used when python3 does not resolve."""
        python = make_executable(bin_dir / "python")
        runner = self.make_runner(bin_dir)

        RepoSync(runner).sync_dependencies(repo_dir)

        assert runner.run.call_args.args[0][0] == python

    def test_direct_execution_without_interpreter(self, repo_dir: Path, bin_dir: Path) -> None:
        """Test that an executable script runs directly when no interpreter resolves."""
        runner = self.make_runner(bin_dir)

        RepoSync(runner).sync_dependencies(repo_dir)

        assert runner.run.call_args.args[0] == [repo_dir / "tools" / "git-sync-deps"]

    def test_no_way_to_run(self, repo_dir: Path, bin_dir: Path) -> None:
        """Test the error when neither an interpreter nor direct execution works."""
        script = repo_dir / "tools" / "git-sync-deps"
        os.chmod(script, 0o644)
        runner = self.make_runner(bin_dir)

        with pytest.raises(DependencySyncError, match="No usable interpreter"):
            RepoSync(runner).sync_dependencies(repo_dir)

        runner.run.assert_not_called()

    def test_only_first_interpreter_tried(
        self, repo_dir: Path, bin_dir: Path, make_executable: Callable[..., Path]
    ) -> None:
        """Test that a failing interpreter is not retried with the next one."""
        make_executable(bin_dir / "python3")
        make_executable(bin_dir / "python")
        runner = self.make_runner(bin_dir, return_code=1)

        with pytest.raises(DependencySyncError) as exc_info:
            RepoSync(runner).sync_dependencies(repo_dir)

        runner.run.assert_called_once()
        assert exc_info.value.tool == "python3"
        assert exc_info.value.exit_code == 1

    def test_custom_error_class(
        self, repo_dir: Path, bin_dir: Path, make_executable: Callable[..., Path]
    ) -> None:
        """Test that callers choose the error raised on failure."""
        make_executable(repo_dir / "bin" / "fetch-gn")
        make_executable(bin_dir / "python3")
        runner = self.make_runner(bin_dir, return_code=2)

        with pytest.raises(FetchError) as exc_info:
            RepoSync(runner).run_script(repo_dir, "bin/fetch-gn", FetchError)

        assert exc_info.value.exit_code == 2

    def test_missing_script(self, temp_dir: Path, bin_dir: Path) -> None:
        """Test that a missing script is reported without running anything."""
        runner = self.make_runner(bin_dir)

        with pytest.raises(DependencySyncError, match="Script not found"):
            RepoSync(runner).sync_dependencies(temp_dir)

        runner.run.assert_not_called()
