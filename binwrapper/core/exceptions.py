"""
Centralized exception hierarchy for binwrapper.

Every failure that happens before the wrapped binary is started derives
from BinWrapperError, so entry points can map it to the setup-failure
exit code without touching child-reported exit codes.
"""

from pathlib import Path
from typing import Optional, Union


# ============================================================================
# Base Exceptions
# ============================================================================


class BinWrapperError(Exception):
    """Base exception for all binwrapper errors."""

    pass


class ConfigurationError(BinWrapperError):
    """Malformed release descriptor, URL template or configuration file."""

    pass


# ============================================================================
# Provisioning Exceptions
# ============================================================================


class ProvisioningError(BinWrapperError):
    """Base exception for failures while provisioning the binary."""

    pass


class CacheDirectoryError(ProvisioningError):
    """Raised when the cache directory cannot be created."""

    def __init__(self, message: str, cache_dir: Path):
        self.cache_dir = cache_dir
        super().__init__(message)


class DownloadError(ProvisioningError):
    """Raised when the release archive cannot be fetched."""

    def __init__(self, message: str, url: str, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class ArchiveExtractionError(ProvisioningError):
    """Raised when the release archive cannot be unpacked."""

    def __init__(
        self,
        message: str,
        archive_path: Union[str, Path, None] = None,
        destination: Union[str, Path, None] = None,
    ):
        self.archive_path = Path(archive_path) if archive_path else None
        self.destination = Path(destination) if destination else None
        super().__init__(message)


class UnsupportedArchiveFormat(ArchiveExtractionError):
    """Archive format is not supported."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


class BinaryNotFoundError(ProvisioningError):
    """The extracted release does not contain the expected binary."""

    def __init__(self, binary_path: Path, archive_path: Optional[Path] = None):
        self.binary_path = binary_path
        self.archive_path = archive_path
        source = f" after extracting {archive_path}" if archive_path else ""
        super().__init__(
            f"Binary not found at {binary_path}{source}. "
            "There might be a problem with the release files."
        )


class BinaryPermissionError(ProvisioningError):
    """The provisioned binary could not be marked executable."""

    pass


# ============================================================================
# Launch Exceptions
# ============================================================================


class LaunchError(BinWrapperError):
    """Raised when the provisioned binary cannot be started."""

    def __init__(self, message: str, binary_path: Path):
        self.binary_path = binary_path
        super().__init__(message)
