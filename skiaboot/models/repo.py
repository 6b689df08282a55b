"""Repository reference data model."""

from pathlib import Path

from pydantic import BaseModel, Field


class RepoRef(BaseModel):
    """A remote repository and its local checkout."""

    name: str = Field(description="Short name used in step names and logs")
    remote_url: str = Field(description="URL passed to git clone")
    local_path: Path = Field(description="Checkout location; presence means cloned")
    depth: int = Field(
        default=0,
        ge=0,
        description="Clone depth (0 = full clone)",
    )
