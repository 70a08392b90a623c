"""
Binary provisioning.

BinaryProvisioner guarantees that the pinned release binary exists in the
cache directory and is executable. Provisioning runs through these steps:

    check -> resolve -> prepare -> fetch -> extract -> verify -> authorize

The check step is the fast path: once the binary exists it is trusted and
nothing else runs. Every failure after it is terminal for the current
invocation and nothing is remembered, so the next invocation starts over.

Usage:
    from binwrapper.core.provisioner import BinaryProvisioner

    provisioner = BinaryProvisioner(descriptor, cache_dir)
    binary = provisioner.ensure_binary()
"""

import logging
from pathlib import Path
from typing import Optional

from binwrapper.core.download import DEFAULT_TIMEOUT, fetch_archive
from binwrapper.core.exceptions import BinaryNotFoundError, CacheDirectoryError
from binwrapper.core.filesystem import (
    ensure_directory,
    extract_archive,
    make_executable,
    safe_rmtree,
)
from binwrapper.core.platform import HostTarget, detect_host_target
from binwrapper.core.release import ReleaseDescriptor

logger = logging.getLogger(__name__)


class BinaryProvisioner:
    """
    Download, unpack and authorize a release binary on first use.

    Attributes:
        descriptor: Release to provision
        cache_dir: Directory owned by the provisioner
        host: Host the binary is provisioned for
    """

    def __init__(
        self,
        descriptor: ReleaseDescriptor,
        cache_dir: Path,
        host: Optional[HostTarget] = None,
        timeout: int = DEFAULT_TIMEOUT,
    ):
        """
        Initialize provisioner.

        Args:
            descriptor: Release to provision
            cache_dir: Cache directory for the archive and the binary
            host: Host target (auto-detected with the descriptor's OS table if None)
            timeout: Download request timeout in seconds
        """
        self.descriptor = descriptor
        self.cache_dir = Path(cache_dir)
        self.host = host or detect_host_target(descriptor.platform_mapping)
        self.timeout = timeout

    @property
    def binary_path(self) -> Path:
        """Deterministic location of the provisioned binary."""
        return self.cache_dir / self.host.executable_name(self.descriptor.name)

    def is_provisioned(self) -> bool:
        return self.binary_path.exists()

    def ensure_binary(self) -> Path:
        """
        Make sure the binary exists and is executable.

        Returns:
            Path to the provisioned binary

        Raises:
            ConfigurationError: If the release URL cannot be built
            CacheDirectoryError: If the cache directory cannot be created
            DownloadError: If the archive cannot be fetched
            ArchiveExtractionError: If the archive cannot be unpacked
            BinaryNotFoundError: If the archive lacks the expected binary
            BinaryPermissionError: If the binary cannot be made executable
        """
        binary_path = self.binary_path

        # Check
        if binary_path.exists():
            logger.debug(f"Using cached binary {binary_path}")
            return binary_path

        # Resolve
        url = self.descriptor.url_for(self.host)

        # Prepare
        try:
            ensure_directory(self.cache_dir)
        except OSError as e:
            raise CacheDirectoryError(
                f"Cannot create cache directory {self.cache_dir}: {e}", self.cache_dir
            ) from e

        # Fetch
        logger.info(f"Downloading {url}")
        archive_path = fetch_archive(url, self.cache_dir, timeout=self.timeout)

        # Extract
        logger.info(f"Extracting {archive_path} to {self.cache_dir}")
        extract_archive(archive_path, self.cache_dir)

        # Verify
        if not binary_path.exists():
            raise BinaryNotFoundError(binary_path, archive_path)

        # Authorize
        make_executable(binary_path)

        logger.info(
            f"{self.descriptor.name} {self.descriptor.version} ready at {binary_path}"
        )
        return binary_path

    def clear_cache(self) -> bool:
        """
        Delete the cache directory and everything in it.

        Returns:
            True if the directory existed and was removed
        """
        removed = safe_rmtree(self.cache_dir)
        if removed:
            logger.info(f"Removed cache directory {self.cache_dir}")
        return removed
