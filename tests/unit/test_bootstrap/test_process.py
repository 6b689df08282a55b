"""Tests for CommandRunner."""

import os
from pathlib import Path
from unittest.mock import MagicMock, patch

from skiaboot.bootstrap.process import CommandResult, CommandRunner
from skiaboot.models.environment import EnvironmentOverlay


class TestCommandRunner:
    """Tests for subprocess invocation."""

    @patch("skiaboot.bootstrap.process.subprocess.run")
    def test_runs_with_composed_environment(self, mock_run: MagicMock, temp_dir: Path) -> None:
        """Test that the child gets the overlay applied to the base environment."""
        mock_run.return_value = MagicMock(returncode=0)
        overlay = EnvironmentOverlay(prepend_paths=(temp_dir,), variables={"DEPOT_TOOLS_WIN_TOOLCHAIN": "0"})
        runner = CommandRunner(overlay=overlay, base_env={"PATH": "/usr/bin"})

        result = runner.run(["ninja", "-C", Path("out/Release")], cwd=temp_dir)

        assert result.success
        assert result.tool == "ninja"
        args, kwargs = mock_run.call_args
        assert args[0] == ["ninja", "-C", "out/Release"]
        assert kwargs["cwd"] == temp_dir
        assert kwargs["env"]["PATH"] == f"{temp_dir}{os.pathsep}/usr/bin"
        assert kwargs["env"]["DEPOT_TOOLS_WIN_TOOLCHAIN"] == "0"
        assert kwargs["check"] is False

    @patch("skiaboot.bootstrap.process.subprocess.run")
    def test_non_zero_exit(self, mock_run: MagicMock) -> None:
        """Test that exit statuses are reported, not raised."""
        mock_run.return_value = MagicMock(returncode=2)
        result = CommandRunner(base_env={}).run(["gn", "gen", "out"])
        assert result == CommandResult(argv=["gn", "gen", "out"], return_code=2)
        assert not result.success

    def test_missing_executable(self, temp_dir: Path) -> None:
        """Test that a missing executable maps to the shell's 127."""
        result = CommandRunner().run([temp_dir / "does-not-exist"])
        assert result.return_code == 127

    def test_real_process(self) -> None:
        """Test a real child process and its exit status."""
        runner = CommandRunner()
        assert runner.run(["sh", "-c", "exit 0"]).success
        assert runner.run(["sh", "-c", "exit 4"]).return_code == 4

    def test_base_env_defaults_to_process_environment(self) -> None:
        """Test that without arguments the runner uses os.environ unchanged."""
        runner = CommandRunner()
        assert runner.env == dict(os.environ)
        assert runner.search_path == os.environ.get("PATH", "")
