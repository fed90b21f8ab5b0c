"""On-demand package download into a local cache directory."""

from __future__ import annotations

import gzip
import io
import logging
import shutil
import tarfile
import threading
import zlib
from pathlib import Path

import httpx

from typmark.errors.exceptions import MalformedArchiveError, NetworkFailedError
from typmark.world.files import PackageSpec

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_URL = "https://packages.typst.org"


class PackageStore:
    """Packages unpacked under ``root/<namespace>/<name>/<version>``.

    The directory's existence is the only "cached" marker. Archives are
    unpacked into a hidden staging directory that is renamed into place
    once complete, so a failed fetch never leaves one behind. Each
    package gets its own lock so concurrent compiles importing the same
    missing package trigger a single download while other packages stay
    unaffected.
    """

    def __init__(
        self,
        root: Path,
        registry_url: str = DEFAULT_REGISTRY_URL,
        client: httpx.Client | None = None,
    ) -> None:
        self._root = Path(root)
        self._registry_url = registry_url.rstrip("/")
        self._client = client
        self._owns_client = client is None
        self._locks: dict[PackageSpec, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._downloads = 0

    @property
    def root(self) -> Path:
        return self._root

    @property
    def downloads(self) -> int:
        """Number of archives fetched by this store."""
        return self._downloads

    def package_dir(self, spec: PackageSpec) -> Path:
        return self._root.joinpath(*spec.subdir.parts)

    def package_url(self, spec: PackageSpec) -> str:
        return f"{self._registry_url}/{spec.namespace}/{spec.name}-{spec.version}.tar.gz"

    def ensure_package(self, spec: PackageSpec) -> Path:
        """Return the package directory, downloading it first if absent."""
        path = self.package_dir(spec)
        if path.exists():
            return path

        with self._lock_for(spec):
            # Another thread may have finished the download while we waited.
            if path.exists():
                return path
            self._download(spec, path)
        return path

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def _download(self, spec: PackageSpec, path: Path) -> None:
        url = self.package_url(spec)
        logger.info("Downloading package %s from %s", spec, url)

        try:
            response = self._get_client().get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NetworkFailedError(
                f"Failed to download package {spec}: HTTP {e.response.status_code}",
                package=str(spec),
                http_status=e.response.status_code,
                original=e,
            ) from e
        except httpx.HTTPError as e:
            raise NetworkFailedError(
                f"Failed to download package {spec}: {e}", package=str(spec), original=e
            ) from e
        with self._locks_guard:
            self._downloads += 1

        try:
            archive = gzip.decompress(response.content)
        except (OSError, EOFError, zlib.error) as e:
            raise MalformedArchiveError(
                f"Failed to decompress package {spec}: {e}", package=str(spec), original=e
            ) from e

        staging = path.with_name(f".{path.name}.partial")
        try:
            shutil.rmtree(staging, ignore_errors=True)
            staging.mkdir(parents=True)
            with tarfile.open(fileobj=io.BytesIO(archive), mode="r:") as tar:
                tar.extractall(staging, filter="data")
            staging.rename(path)
        except (tarfile.TarError, OSError) as e:
            shutil.rmtree(staging, ignore_errors=True)
            raise MalformedArchiveError(
                f"Failed to unpack package {spec}: {e}", package=str(spec), original=e
            ) from e

        logger.info("Unpacked %s into %s", spec, path)

    def _lock_for(self, spec: PackageSpec) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(spec)
            if lock is None:
                lock = self._locks[spec] = threading.Lock()
            return lock

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(follow_redirects=True)
        return self._client
