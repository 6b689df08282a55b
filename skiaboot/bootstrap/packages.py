"""System package installation through apt-get or dnf."""

import shutil
from collections.abc import Sequence

from skiaboot.bootstrap.process import CommandRunner
from skiaboot.core.exceptions.errors import PackageInstallError
from skiaboot.core.logger.logger import get_logger

logger = get_logger(__name__)


class SystemPackages:
    """Installs the host packages the build needs when tools are missing."""

    def __init__(
        self,
        runner: CommandRunner,
        required_tools: Sequence[str],
        apt_packages: Sequence[str],
        dnf_packages: Sequence[str],
        use_sudo: bool = True,
    ) -> None:
        self.runner = runner
        self.required_tools = list(required_tools)
        self.apt_packages = list(apt_packages)
        self.dnf_packages = list(dnf_packages)
        self.use_sudo = use_sudo

    def missing_tools(self) -> list[str]:
        """Return required tools that do not resolve on the composed PATH."""
        path = self.runner.search_path
        return [t for t in self.required_tools if shutil.which(t, path=path) is None]

    def is_satisfied(self) -> bool:
        """Return True when every required tool resolves."""
        return not self.missing_tools()

    def detect_manager(self) -> str | None:
        """Return 'apt-get', 'dnf' or None."""
        path = self.runner.search_path
        for manager in ("apt-get", "dnf"):
            if shutil.which(manager, path=path):
                return manager
        return None

    def install(self) -> None:
        """Install packages with the detected manager.

        Without a known package manager this only warns; the tools that are
        still missing surface later as tool failures.

        Raises:
            PackageInstallError: If a package manager command exits non-zero.
        """
        missing = self.missing_tools()
        logger.info(f"Missing tools: {', '.join(missing)}")

        manager = self.detect_manager()
        if manager is None:
            logger.warning(
                "Package manager not found (apt/dnf). Please install manually: "
                + ", ".join(self.required_tools)
            )
            return

        prefix = ["sudo"] if self.use_sudo else []
        if manager == "apt-get":
            commands = [
                prefix + ["apt-get", "update"],
                prefix + ["apt-get", "install", "-y", *self.apt_packages],
            ]
        else:
            commands = [prefix + ["dnf", "install", "-y", *self.dnf_packages]]

        logger.info(f"Installing dependencies with {manager}")
        for argv in commands:
            result = self.runner.run(argv)
            if not result.success:
                raise PackageInstallError(
                    f"Package installation failed: {' '.join(argv)}",
                    tool=manager,
                    exit_code=result.return_code,
                )
