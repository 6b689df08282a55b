"""Tool location data models."""

from pathlib import Path

from pydantic import BaseModel, Field


class ToolLocation(BaseModel):
    """Where an executable was found, decided once per run."""

    name: str = Field(description="Tool name as looked up on PATH")
    expected_path: Path | None = Field(
        default=None,
        description="First local candidate path (may not exist)",
    )
    is_on_system_path: bool = Field(
        default=False,
        description="Whether the tool resolves on the searched PATH",
    )
    path: Path | None = Field(
        default=None,
        description="Resolved executable, local candidates taking precedence",
    )

    @property
    def found(self) -> bool:
        """Return True when an executable was resolved."""
        return self.path is not None

    def __str__(self) -> str:
        """Return string representation."""
        return str(self.path) if self.path else f"{self.name} (not found)"
