"""Fetcher-related data models."""

from pathlib import Path

from pydantic import BaseModel, Field


class DownloadSpec(BaseModel):
    """A remote resource and where it lands locally."""

    url: str = Field(description="Remote URL to download")
    destination_dir: Path = Field(description="Directory receiving the file")
    destination_file: str = Field(description="File name inside destination_dir")

    @property
    def destination(self) -> Path:
        """Return the full destination path."""
        return self.destination_dir / self.destination_file

    @property
    def partial_destination(self) -> Path:
        """Return the path used while the transfer is in progress."""
        return self.destination_dir / f"{self.destination_file}.part"
