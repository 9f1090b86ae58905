"""Upstream release download and extraction.

This module turns an upstream release identifier into a pristine source
tree mounted at the fixed tree path. Download and extraction happen in a
staging directory under the project root; only a complete extraction is
renamed into place.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath
import tarfile
import tempfile
from typing import Protocol

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from core.config import IntegrationConfig
from core.constants import (
    DOWNLOAD_ARCHIVE_FILE_NAME,
    DOWNLOAD_CHUNK_SIZE,
    DOWNLOAD_URL_PLACEHOLDER,
    RETRY_STATUS_CODES,
    STAGING_DIR_PREFIX,
)
from core.errors import FetchError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class ArchiveDownloader(Protocol):
    """Transport contract used to retrieve one release archive."""

    def download(self, url: str, destination: Path) -> None: ...


class HttpArchiveDownloader:
    """Streams release archives over HTTP with retry on transient errors."""

    def __init__(self, timeout_seconds: int, retries: int) -> None:
        self._timeout_seconds = timeout_seconds
        self._retries = retries

    def download(self, url: str, destination: Path) -> None:
        """Download ``url`` into ``destination``.

        The session lives only for this download and is closed afterwards.

        Raises:
            FetchError: On HTTP, network or local write failures.
        """
        try:
            with new_session(self._retries) as session, session.get(
                url, stream=True, timeout=self._timeout_seconds
            ) as response:
                response.raise_for_status()
                with destination.open("wb") as archive_file:
                    for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                        if chunk:
                            archive_file.write(chunk)
        except requests.HTTPError as error:
            status_code = error.response.status_code if error.response is not None else "?"
            raise FetchError(
                f"Download failed for {url}: HTTP {status_code}. "
                "Check that the upstream release tag exists."
            ) from error
        except requests.RequestException as error:
            raise FetchError(
                f"Download failed for {url}: {error}. Check network access and retry."
            ) from error
        except OSError as error:
            raise FetchError(f"Failed to write archive to {destination}: {error}.") from error


def new_session(retries: int) -> requests.Session:
    """Create a requests session with a retry strategy."""
    retry_strategy = Retry(
        total=retries,
        backoff_factor=2,
        status_forcelist=list(RETRY_STATUS_CODES),
        allowed_methods=["GET"],
    )
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({"User-Agent": "surrealx-integration/0.1"})
    return session


def build_download_url(url_template: str, upstream_version: str) -> str:
    """Derive the deterministic archive locator for a release."""
    return url_template.replace(DOWNLOAD_URL_PLACEHOLDER, upstream_version)


def archive_top_level_name(archive_prefix: str, upstream_version: str) -> str:
    """Name of the single top-level directory inside a release archive."""
    return f"{archive_prefix}-{upstream_version}"


class UpstreamFetcher:
    """Fetches one upstream release and mounts it at the fixed tree path."""

    def __init__(
        self,
        config: IntegrationConfig,
        downloader: ArchiveDownloader | None = None,
    ) -> None:
        self._config = config
        self._downloader = downloader or HttpArchiveDownloader(
            timeout_seconds=config.download_timeout_seconds,
            retries=config.download_retries,
        )

    def fetch(self, upstream_version: str) -> Path:
        """Download, extract and rename a release into ``tree_root``.

        Returns:
            The mounted source tree path.

        Raises:
            FetchError: If any step fails. Nothing is left at ``tree_root``.
        """
        url = build_download_url(self._config.download_url_template, upstream_version)
        expected_top_level = archive_top_level_name(self._config.archive_prefix, upstream_version)
        tree_root = self._config.tree_root
        if tree_root.exists():
            raise FetchError(
                f"Refusing to extract over existing source tree at {tree_root}. "
                "Re-run with --force to replace it."
            )
        try:
            self._config.project_root.mkdir(parents=True, exist_ok=True)
            tree_root.parent.mkdir(parents=True, exist_ok=True)
            staging = tempfile.TemporaryDirectory(
                prefix=STAGING_DIR_PREFIX,
                dir=self._config.project_root,
            )
        except OSError as error:
            raise FetchError(
                f"Cannot prepare staging area under {self._config.project_root}: {error}. "
                "Check that the project root is a writable directory."
            ) from error
        with staging as staging_dir:
            staging_root = Path(staging_dir)
            archive_path = staging_root / DOWNLOAD_ARCHIVE_FILE_NAME
            _LOGGER.info("upstream_download_started", url=url, upstream_version=upstream_version)
            self._downloader.download(url, archive_path)
            _LOGGER.info(
                "upstream_downloaded",
                url=url,
                archive_bytes=archive_path.stat().st_size,
            )
            extracted_root = extract_release_archive(archive_path, staging_root, expected_top_level)
            try:
                extracted_root.rename(tree_root)
            except OSError as error:
                raise FetchError(
                    f"Failed to move extracted tree {extracted_root} to {tree_root}: {error}."
                ) from error
        _LOGGER.info("upstream_extracted", tree_root=str(tree_root))
        return tree_root


def extract_release_archive(archive_path: Path, extract_root: Path, expected_top_level: str) -> Path:
    """Extract a gzip tar archive whose entries share one top-level directory.

    Args:
        archive_path: Downloaded archive file.
        extract_root: Directory receiving the extraction.
        expected_top_level: Required ``<project>-<version>`` top-level name.

    Returns:
        Path of the extracted top-level directory.

    Raises:
        FetchError: If the archive is corrupt or has an unexpected layout.
    """
    try:
        with tarfile.open(archive_path, mode="r:gz") as archive:
            members = archive.getmembers()
            _validate_archive_members(members, expected_top_level, archive_path)
            archive.extractall(extract_root, filter="data")
    except (tarfile.TarError, EOFError, OSError) as error:
        raise FetchError(
            f"Failed to extract archive {archive_path}: {error}. "
            "The download may be corrupt; retry the integration."
        ) from error
    extracted_root = extract_root / expected_top_level
    if not extracted_root.is_dir():
        raise FetchError(
            f"Archive {archive_path} did not contain directory '{expected_top_level}'."
        )
    return extracted_root


def _validate_archive_members(
    members: list[tarfile.TarInfo],
    expected_top_level: str,
    archive_path: Path,
) -> None:
    if not members:
        raise FetchError(f"Archive {archive_path} is empty.")
    for member in members:
        parts = PurePosixPath(member.name).parts
        if not parts or parts[0] != expected_top_level:
            raise FetchError(
                f"Unexpected entry '{member.name}' in {archive_path}: "
                f"every entry must live under '{expected_top_level}/'."
            )
