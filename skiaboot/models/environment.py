"""Composed environment data model."""

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class EnvironmentOverlay(BaseModel):
    """Immutable set of PATH prepends and variables handed to child processes.

    Prepends are applied in order, so the last entry ends up first on PATH and
    wins any name collision.
    """

    model_config = ConfigDict(frozen=True)

    prepend_paths: tuple[Path, ...] = Field(
        default=(),
        description="Directories prepended to PATH, in application order",
    )
    variables: dict[str, str] = Field(
        default_factory=dict,
        description="Variables set for child processes",
    )

    def search_path(self, base_env: Mapping[str, str]) -> str:
        """Return the PATH value after applying all prepends to base_env."""
        value = base_env.get("PATH", "")
        for directory in self.prepend_paths:
            value = f"{directory}{os.pathsep}{value}" if value else str(directory)
        return value

    def apply(self, base_env: Mapping[str, str]) -> dict[str, str]:
        """Return a new environment mapping; base_env is left untouched."""
        env = dict(base_env)
        env["PATH"] = self.search_path(base_env)
        env.update(self.variables)
        return env
