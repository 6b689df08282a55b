"""Pytest configuration and shared fixtures."""

import os
import shutil
import stat
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any, Generator

import pytest
from git import Repo

from skiaboot.core.config.settings import (
    DownloaderSettings,
    PackageSettings,
    PathSettings,
    RepoSettings,
    Settings,
)


def write_executable(path: Path, content: str = "#!/bin/sh\nexit 0\n") -> Path:
    """Write an executable script, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def _init_repo(repo_path: Path, files: dict[str, str], executable: frozenset[str] = frozenset()) -> Repo:
    repo_path.mkdir(parents=True)
    repo = Repo.init(repo_path)
    with repo.config_writer() as config:
        config.set_value("user", "name", "Test User")
        config.set_value("user", "email", "test@example.com")

    for name, content in files.items():
        if name in executable:
            write_executable(repo_path / name, content)
        else:
            (repo_path / name).parent.mkdir(parents=True, exist_ok=True)
            (repo_path / name).write_text(content, encoding="utf-8")

    repo.index.add(list(files))
    repo.index.commit("Initial commit")
    return repo


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory that is cleaned up after the test.

    Yields:
        Path to the temporary directory.
    """
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def sample_git_repo(temp_dir: Path) -> Path:
    """Create a sample Git repository usable as a clone source.

    Args:
        temp_dir: Temporary directory fixture.

    Returns:
        Path to the sample Git repository.
    """
    repo_path = temp_dir / "remotes" / "sample_repo"
    _init_repo(repo_path, {"README.md": "# Sample Repository\n"})
    return repo_path


@pytest.fixture
def depot_tools_remote(temp_dir: Path) -> Path:
    """Create a repository standing in for depot_tools."""
    repo_path = temp_dir / "remotes" / "depot_tools"
    _init_repo(repo_path, {"README.md": "depot_tools\n"})
    return repo_path


@pytest.fixture
def skia_remote(temp_dir: Path) -> Path:
    """Create a repository standing in for Skia, with its in-tree scripts."""
    repo_path = temp_dir / "remotes" / "skia"
    _init_repo(
        repo_path,
        {
            "README.md": "skia\n",
            "tools/git-sync-deps": "#!/usr/bin/env python3\nprint('synced')\n",
            "bin/fetch-gn": "#!/usr/bin/env python3\nprint('fetched')\n",
        },
        executable={"tools/git-sync-deps", "bin/fetch-gn"},
    )
    return repo_path


@pytest.fixture
def work_root(temp_dir: Path) -> Path:
    """Root directory receiving everything the pipeline produces."""
    root = temp_dir / "work"
    root.mkdir()
    return root


@pytest.fixture
def base_env() -> dict[str, str]:
    """Inherited environment handed to the pipeline (a copy of os.environ)."""
    return dict(os.environ)


@pytest.fixture
def make_settings(work_root: Path) -> Callable[..., Settings]:
    """Return a factory for settings rooted in work_root.

    System packages are disabled and downloads are always direct unless a
    test overrides the section.
    """

    def factory(**overrides: Any) -> Settings:
        kwargs: dict[str, Any] = {
            "paths": PathSettings(root_dir=work_root),
            "downloader": DownloaderSettings(accelerated=False),
            "packages": PackageSettings(enabled=False),
            "repos": RepoSettings(),
            "artifacts": [],
        }
        kwargs.update(overrides)
        return Settings(**kwargs)

    return factory


@pytest.fixture
def make_executable() -> Callable[..., Path]:
    """Return a helper writing executable scripts (see write_executable)."""
    return write_executable
