"""Application settings using Pydantic Settings."""

import sys
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from skiaboot.core.config.loader import DEFAULT_CONFIG_PATH, ConfigLoader
from skiaboot.models.archive import ArchiveFormat, ArtifactRole

GnValue = bool | int | str | list[str]

DEFAULT_GN_ARGS: dict[str, GnValue] = {
    "is_official_build": False,
    "is_component_build": False,
    "is_clang": True,
    "skia_use_system_expat": False,
    "skia_use_system_icu": False,
    "skia_use_libjpeg_turbo_decode": True,
    "skia_use_libpng_decode": True,
    "skia_use_libwebp_decode": True,
    "skia_use_zlib": True,
    "skia_enable_gpu": True,
    "skia_use_gl": True,
}


class ArtifactSettings(BaseModel):
    """A pinned downloadable tool and how to unpack it."""

    name: str = Field(description="Artifact name, used in step names")
    url: str = Field(description="Pinned download URL")
    file_name: str = Field(description="File name in the download (or tools) area")
    format: ArchiveFormat = Field(default=ArchiveFormat.BINARY)
    area: str = Field(
        default="tools",
        description="Area receiving the artifact: 'tools' or 'toolchain'",
    )
    directory_name: str | None = Field(
        default=None,
        description="Stable directory name inside the area (archives only)",
    )
    directory_pattern: str | None = Field(
        default=None,
        description="Glob matching the top-level directory the archive produces",
    )
    bin_subdir: str | None = Field(
        default=None,
        description="Subdirectory holding executables, prepended to PATH",
    )
    role: ArtifactRole = Field(default=ArtifactRole.TOOLCHAIN)
    skip_if_on_path: str | None = Field(
        default=None,
        description="Skip installation when this executable already resolves on PATH",
    )
    platforms: list[str] = Field(
        default_factory=lambda: ["win32"],
        description="sys.platform prefixes the artifact applies to",
    )

    @field_validator("area")
    @classmethod
    def validate_area(cls, v: str) -> str:
        """Validate artifact area."""
        if v not in {"tools", "toolchain"}:
            raise ValueError(f"Invalid artifact area: {v}. Must be 'tools' or 'toolchain'")
        return v

    def applies_to(self, platform: str) -> bool:
        """Return True when the artifact should be installed on platform."""
        return any(platform.startswith(p) for p in self.platforms)


def _default_artifacts() -> list[ArtifactSettings]:
    return [
        ArtifactSettings(
            name="7zr",
            url="https://www.7-zip.org/a/7zr.exe",
            file_name="7zr.exe",
            format=ArchiveFormat.BINARY,
            area="tools",
            role=ArtifactRole.ARCHIVER,
        ),
        ArtifactSettings(
            name="aria2",
            url=(
                "https://github.com/aria2/aria2/releases/download/"
                "release-1.37.0/aria2-1.37.0-win-64bit-build1.zip"
            ),
            file_name="aria2-1.37.0-win-64bit-build1.zip",
            format=ArchiveFormat.ZIP,
            area="tools",
            directory_name="aria2",
            directory_pattern="aria2-*",
            role=ArtifactRole.DOWNLOADER,
        ),
        ArtifactSettings(
            name="llvm-mingw",
            url=(
                "https://github.com/mstorsjo/llvm-mingw/releases/download/"
                "20240619/llvm-mingw-20240619-ucrt-x86_64.tar.xz"
            ),
            file_name="llvm-mingw-20240619-ucrt-x86_64.tar.xz",
            format=ArchiveFormat.TAR_XZ,
            area="toolchain",
            directory_name="llvm-mingw",
            directory_pattern="llvm-mingw-*",
            bin_subdir="bin",
            role=ArtifactRole.TOOLCHAIN,
        ),
        ArtifactSettings(
            name="PortableGit",
            url=(
                "https://github.com/git-for-windows/git/releases/download/"
                "v2.45.2.windows.1/PortableGit-2.45.2-64-bit.7z.exe"
            ),
            file_name="PortableGit-2.45.2-64-bit.7z.exe",
            format=ArchiveFormat.SFX,
            area="toolchain",
            directory_name="PortableGit",
            bin_subdir="cmd",
            role=ArtifactRole.VCS,
            skip_if_on_path="git",
        ),
    ]


class PathSettings(BaseSettings):
    """Filesystem layout settings. All areas are siblings under root_dir."""

    model_config = SettingsConfigDict(
        env_prefix="SKIABOOT_PATHS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    root_dir: Path | None = Field(
        default=None,
        description="Invocation root (None = current directory)",
    )
    downloads_dir: str = Field(default="downloads")
    tools_dir: str = Field(default="tools")
    toolchain_dir: str = Field(default="toolchain")

    @field_validator("root_dir", mode="before")
    @classmethod
    def validate_root_dir(cls, v: str | None) -> Path | None:
        """Validate and convert root_dir to Path."""
        if v is None or v == "":
            return None
        return Path(v)

    def resolve_root(self) -> Path:
        """Return the absolute invocation root."""
        return (self.root_dir or Path.cwd()).resolve()


class DownloaderSettings(BaseSettings):
    """Accelerated downloader settings."""

    model_config = SettingsConfigDict(
        env_prefix="SKIABOOT_DOWNLOADER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    accelerated: bool = Field(
        default=True,
        description="Use the multi-connection downloader when it resolves",
    )
    tool_name: str = Field(default="aria2c")
    connections: int = Field(default=16, ge=1, le=16)
    splits: int = Field(default=16, ge=1)
    user_agent: str = Field(default="skiaboot/0.1.0")


class ArchiveSettings(BaseSettings):
    """Minimal archive tool settings."""

    model_config = SettingsConfigDict(
        env_prefix="SKIABOOT_ARCHIVE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    tool_names: list[str] = Field(
        default_factory=lambda: ["7zr", "7za", "7z", "7zz"],
        description="Archive tool names, in lookup order",
    )


class RepoSettings(BaseSettings):
    """Source tree settings."""

    model_config = SettingsConfigDict(
        env_prefix="SKIABOOT_REPOS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    depot_tools_url: str = Field(
        default="https://chromium.googlesource.com/chromium/tools/depot_tools.git"
    )
    depot_tools_dir: str = Field(default="depot_tools")
    skia_url: str = Field(default="https://github.com/google/skia.git")
    skia_dir: str = Field(default="skia")
    clone_depth: int = Field(
        default=0,
        ge=0,
        description="Clone depth (0 = full)",
    )
    sync_script: str = Field(default="tools/git-sync-deps")
    fetch_gn_script: str = Field(default="bin/fetch-gn")
    interpreters: list[str] = Field(
        default_factory=lambda: ["python3", "python"],
        description="Interpreters tried in order before executing scripts directly",
    )


class PackageSettings(BaseSettings):
    """System package installation settings (Linux only)."""

    model_config = SettingsConfigDict(
        env_prefix="SKIABOOT_PACKAGES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    enabled: bool = Field(default=True)
    use_sudo: bool = Field(default=True)
    required_tools: list[str] = Field(
        default_factory=lambda: ["git", "curl", "python3", "clang"],
    )
    apt_packages: list[str] = Field(
        default_factory=lambda: [
            "git",
            "curl",
            "python3",
            "python3-pip",
            "build-essential",
            "clang",
            "libgl1-mesa-dev",
            "libglu1-mesa-dev",
            "libfontconfig-dev",
        ],
    )
    dnf_packages: list[str] = Field(
        default_factory=lambda: [
            "git",
            "curl",
            "python3",
            "python3-pip",
            "@development-tools",
            "clang",
            "mesa-libGL-devel",
            "mesa-libGLU-devel",
            "fontconfig-devel",
        ],
    )


class BuildSettings(BaseSettings):
    """Build generator and executor settings."""

    model_config = SettingsConfigDict(
        env_prefix="SKIABOOT_BUILD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    output_dir: str = Field(
        default="out/Release",
        description="Output directory, relative to the Skia checkout",
    )
    args: dict[str, GnValue] = Field(default_factory=lambda: dict(DEFAULT_GN_ARGS))
    extra_args: dict[str, GnValue] = Field(
        default_factory=dict,
        description="Merged over args; lets a config file add or override keys",
    )
    gn_local_paths: list[str] = Field(default_factory=lambda: ["bin/gn"])
    ninja_local_paths: list[str] = Field(
        default_factory=lambda: ["third_party/ninja/ninja"],
    )
    toolchain_flag_name: str = Field(default="DEPOT_TOOLS_WIN_TOOLCHAIN")
    toolchain_flag_value: str = Field(default="0")

    @field_validator("args", "extra_args")
    @classmethod
    def validate_gn_args(cls, v: dict[str, GnValue]) -> dict[str, GnValue]:
        """Validate that every argument can be written to args.gn."""
        from skiaboot.bootstrap.gn_args import serialize_gn_args

        try:
            serialize_gn_args(v)
        except TypeError as e:
            raise ValueError(str(e)) from e
        return v

    def merged_args(self) -> dict[str, GnValue]:
        """Return args with extra_args applied on top."""
        merged = dict(self.args)
        merged.update(self.extra_args)
        return merged


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="SKIABOOT_LOGGING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: str = Field(
        default="INFO",
        description="Log level",
    )
    format: str = Field(
        default="[%(name)s] %(message)s",
        description="Log format string",
    )
    file: Path | None = Field(
        default=None,
        description="Log file path",
    )
    use_rich: bool = Field(
        default=True,
        description="Use Rich console for output",
    )

    @field_validator("level", mode="before")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("file", mode="before")
    @classmethod
    def validate_file(cls, v: str | None) -> Path | None:
        """Validate and convert file to Path."""
        if v is None or v == "":
            return None
        return Path(v)


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="SKIABOOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    paths: PathSettings = Field(default_factory=PathSettings)
    downloader: DownloaderSettings = Field(default_factory=DownloaderSettings)
    archive: ArchiveSettings = Field(default_factory=ArchiveSettings)
    repos: RepoSettings = Field(default_factory=RepoSettings)
    packages: PackageSettings = Field(default_factory=PackageSettings)
    build: BuildSettings = Field(default_factory=BuildSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    artifacts: list[ArtifactSettings] = Field(default_factory=_default_artifacts)

    def artifacts_for(self, platform: str | None = None) -> list[ArtifactSettings]:
        """Return the artifacts that apply to platform (default: this one)."""
        platform = platform or sys.platform
        return [a for a in self.artifacts if a.applies_to(platform)]

    @classmethod
    def from_yaml(cls, path: Path) -> "Settings":
        """Load settings from YAML file.

        Args:
            path: Path to YAML configuration file.

        Returns:
            Settings instance with values from YAML.
        """
        loader = ConfigLoader(path)
        config = loader.load()

        kwargs = {
            "paths": PathSettings(**loader.get_section("paths")),
            "downloader": DownloaderSettings(**loader.get_section("downloader")),
            "archive": ArchiveSettings(**loader.get_section("archive")),
            "repos": RepoSettings(**loader.get_section("repos")),
            "packages": PackageSettings(**loader.get_section("packages")),
            "build": BuildSettings(**loader.get_section("build")),
            "logging": LoggingSettings(**loader.get_section("logging")),
        }
        if "artifacts" in config:
            kwargs["artifacts"] = [
                ArtifactSettings(**item) for item in config.get("artifacts") or []
            ]

        return cls(**kwargs)

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """Load settings from an explicit file or the default locations.

        Priority: config file > environment variables > .env > defaults. Keys
        left out of the file fall through to the environment.

        Returns:
            Settings instance.
        """
        if path is not None:
            return cls.from_yaml(path)

        if DEFAULT_CONFIG_PATH.exists():
            return cls.from_yaml(DEFAULT_CONFIG_PATH)

        return cls()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings singleton.
    """
    return Settings.load()
