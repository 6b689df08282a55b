"""Remote resource retrieval via an accelerated downloader or a direct stream."""

from collections.abc import Callable
from pathlib import Path

import httpx

from skiaboot.bootstrap.process import CommandRunner
from skiaboot.bootstrap.tools import is_nonempty_file
from skiaboot.core.exceptions.errors import FetchError
from skiaboot.core.logger.logger import get_logger
from skiaboot.models.fetcher import DownloadSpec
from skiaboot.models.tools import ToolLocation

logger = get_logger(__name__)


class Fetcher:
    """Downloads files into the download cache.

    The multi-connection downloader is used whenever it resolves; otherwise the
    file is streamed with httpx. Transfers land in ``<file>.part`` and are only
    renamed once complete, so a present, non-empty destination is trustworthy.
    """

    def __init__(
        self,
        runner: CommandRunner,
        locate_accelerator: Callable[[], ToolLocation] | None = None,
        connections: int = 16,
        splits: int = 16,
        http_client: httpx.Client | None = None,
        user_agent: str = "skiaboot",
    ) -> None:
        """Initialize the fetcher.

        Args:
            runner: Command runner used for the accelerated downloader.
            locate_accelerator: Resolves the accelerated downloader. Called until
                it reports a tool, then the location is kept for the run.
            connections: Connections per server for the accelerated downloader.
            splits: Segments per download for the accelerated downloader.
            http_client: Client for direct downloads (created per fetch if None).
            user_agent: User-Agent header for direct downloads.
        """
        self.runner = runner
        self.locate_accelerator = locate_accelerator
        self.connections = connections
        self.splits = splits
        self.http_client = http_client
        self.user_agent = user_agent
        self._accelerator: ToolLocation | None = None

    @staticmethod
    def is_fetched(path: Path) -> bool:
        """Return True when path holds a completed download."""
        return is_nonempty_file(path)

    @property
    def accelerator(self) -> ToolLocation | None:
        """Return the accelerated downloader, resolving it if not yet found."""
        if self._accelerator is None and self.locate_accelerator is not None:
            location = self.locate_accelerator()
            if location.found:
                logger.debug(f"Accelerated downloader: {location.path}")
                self._accelerator = location
        return self._accelerator

    def fetch(self, spec: DownloadSpec, direct: bool = False) -> Path:
        """Download spec.url to spec.destination.

        Args:
            spec: What to download and where.
            direct: Skip the accelerated downloader even if available.

        Returns:
            Path to the downloaded file.

        Raises:
            FetchError: If the transfer fails or produces an empty file.
        """
        if not spec.destination_dir.is_dir():
            raise FetchError(
                f"Download directory does not exist: {spec.destination_dir}",
                url=spec.url,
            )

        partial = spec.partial_destination
        self._discard_partial(spec)

        accelerator = None if direct else self.accelerator
        logger.info(f"Downloading {spec.url} -> {spec.destination}")
        try:
            if accelerator is not None:
                self._fetch_accelerated(spec, accelerator)
            else:
                self._fetch_direct(spec)
        except FetchError:
            self._discard_partial(spec)
            raise

        if not is_nonempty_file(partial):
            self._discard_partial(spec)
            raise FetchError(
                f"Download produced no data: {spec.url}",
                url=spec.url,
                tool=accelerator.name if accelerator else "httpx",
            )

        partial.replace(spec.destination)
        self._discard_partial(spec)
        logger.info(f"Downloaded {spec.destination.name}")
        return spec.destination

    @staticmethod
    def _discard_partial(spec: DownloadSpec) -> None:
        partial = spec.partial_destination
        partial.unlink(missing_ok=True)
        # control file the accelerated downloader keeps for resuming
        partial.with_name(f"{partial.name}.aria2").unlink(missing_ok=True)

    def _fetch_accelerated(self, spec: DownloadSpec, accelerator: ToolLocation) -> None:
        result = self.runner.run(
            [
                accelerator.path,
                "-x",
                str(self.connections),
                "-s",
                str(self.splits),
                "--allow-overwrite=true",
                "--auto-file-renaming=false",
                "-d",
                spec.destination_dir,
                "-o",
                spec.partial_destination.name,
                spec.url,
            ]
        )
        if not result.success:
            raise FetchError(
                f"Download failed: {spec.url}",
                url=spec.url,
                tool=accelerator.name,
                exit_code=result.return_code,
            )

    def _fetch_direct(self, spec: DownloadSpec) -> None:
        client = self.http_client or httpx.Client(
            follow_redirects=True,
            timeout=None,
            headers={"User-Agent": self.user_agent},
        )
        try:
            with client.stream("GET", spec.url) as response:
                response.raise_for_status()
                with open(spec.partial_destination, "wb") as f:
                    for chunk in response.iter_bytes():
                        f.write(chunk)
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"Download failed: {spec.url}",
                url=spec.url,
                tool="httpx",
                details={"status_code": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(
                f"Download failed: {spec.url}",
                url=spec.url,
                tool="httpx",
                details={"error": str(e)},
            ) from e
        finally:
            if self.http_client is None:
                client.close()
