"""
Core functionality for binwrapper.

This package contains platform resolution, release URL templating, archive
download and extraction, binary provisioning and process launching.
"""

from .platform import (
    HostTarget,
    resolve,
    detect_host_target,
    clear_platform_cache,
)

from .release import (
    ReleaseDescriptor,
    build_url,
)

from .download import fetch_archive

from .filesystem import (
    extract_archive,
    make_executable,
)

from .provisioner import BinaryProvisioner

from .launcher import run

from .exceptions import (
    BinWrapperError,
    ConfigurationError,
    ProvisioningError,
    CacheDirectoryError,
    DownloadError,
    ArchiveExtractionError,
    UnsupportedArchiveFormat,
    InsecureArchiveError,
    BinaryNotFoundError,
    BinaryPermissionError,
    LaunchError,
)

__all__ = [
    "HostTarget",
    "resolve",
    "detect_host_target",
    "clear_platform_cache",
    "ReleaseDescriptor",
    "build_url",
    "fetch_archive",
    "extract_archive",
    "make_executable",
    "BinaryProvisioner",
    "run",
    "BinWrapperError",
    "ConfigurationError",
    "ProvisioningError",
    "CacheDirectoryError",
    "DownloadError",
    "ArchiveExtractionError",
    "UnsupportedArchiveFormat",
    "InsecureArchiveError",
    "BinaryNotFoundError",
    "BinaryPermissionError",
    "LaunchError",
]
