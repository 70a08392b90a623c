"""
File system utilities for binwrapper.

This module provides the archive and permission handling used while
provisioning a binary:
- Archive extraction (.tar.gz/.tgz streamed, .zip member by member)
- Path validation against directory traversal
- Executable permission management
- Cache directory creation and removal
"""

import os
import shutil
import stat
import tarfile
import zipfile
from pathlib import Path
from typing import Union

from binwrapper.core.exceptions import (
    ArchiveExtractionError,
    BinaryPermissionError,
    InsecureArchiveError,
    UnsupportedArchiveFormat,
)

# Platform detection
IS_WINDOWS = os.name == "nt"

EXECUTABLE_MODE = 0o755

TAR_GZ_SUFFIXES = (".tar.gz", ".tgz")
ZIP_SUFFIXES = (".zip",)


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to (under) parent directory.

    Example:
        >>> is_relative_to(Path("/home/user/project/file.txt"), Path("/home/user"))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists (idempotent).

    Args:
        path: Directory path

    Returns:
        Path object (resolved)
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path.resolve()


def safe_rmtree(path: Union[str, Path]) -> bool:
    """
    Remove a directory tree, clearing read-only bits on Windows.

    Args:
        path: Directory to remove

    Returns:
        True if something was removed, False if the path did not exist

    Raises:
        NotADirectoryError: If path exists but is not a directory
    """
    path = Path(path)

    if not path.exists():
        return False

    if not path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {path}")

    if IS_WINDOWS:

        def handle_remove_readonly(func, target, exc):
            """Error handler for Windows read-only files."""
            if not os.access(target, os.W_OK):
                os.chmod(target, stat.S_IWRITE)
                func(target)
            else:
                raise

        shutil.rmtree(path, onerror=handle_remove_readonly)
    else:
        shutil.rmtree(path)

    return True


def make_executable(path: Union[str, Path], mode: int = EXECUTABLE_MODE) -> None:
    """
    Set a file's permission bits (0755 by default).

    Raises:
        BinaryPermissionError: If the mode cannot be changed
    """
    try:
        os.chmod(path, mode)
    except OSError as e:
        raise BinaryPermissionError(f"Failed to make {path} executable: {e}") from e


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Args:
        path: Member path from archive
        destination: Extraction destination (resolved)

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked.",
        )


def extract_archive(
    archive_path: Union[str, Path], destination: Union[str, Path]
) -> None:
    """
    Extract a release archive into a destination directory.

    The format is chosen from the archive's extension. Gzip-compressed tar
    archives are read as a stream, decompressing and unpacking one member at
    a time. A failed extraction is not rolled back.

    Supported formats:
    - .tar.gz, .tgz
    - .zip

    Args:
        archive_path: Path to the archive file
        destination: Directory to extract to (created if missing)

    Raises:
        UnsupportedArchiveFormat: If archive format is not recognized
        InsecureArchiveError: If archive contains malicious paths
        ArchiveExtractionError: If the archive is missing, corrupt or truncated

    Example:
        >>> extract_archive('.bin/tool_1.0_linux_amd64.tar.gz', '.bin')
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise ArchiveExtractionError(
            f"Archive not found: {archive_path}",
            archive_path=archive_path,
            destination=destination,
        )

    destination = ensure_directory(destination)
    archive_name = archive_path.name.lower()

    try:
        if archive_name.endswith(TAR_GZ_SUFFIXES):
            _extract_tar_gz(archive_path, destination)
        elif archive_name.endswith(ZIP_SUFFIXES):
            _extract_zip(archive_path, destination)
        else:
            raise UnsupportedArchiveFormat(
                f"Unsupported archive format: {archive_path.name}. "
                "Supported: .tar.gz, .tgz, .zip"
            )
    except ArchiveExtractionError as e:
        raise type(e)(
            f"Failed to extract {archive_path} to {destination}: {e}",
            archive_path=archive_path,
            destination=destination,
        ) from e
    except (tarfile.TarError, zipfile.BadZipFile, EOFError, OSError) as e:
        raise ArchiveExtractionError(
            f"Failed to extract {archive_path} to {destination}: {e}",
            archive_path=archive_path,
            destination=destination,
        ) from e


def _extract_tar_gz(archive_path: Path, destination: Path) -> None:
    """Stream-extract a .tar.gz archive."""
    with tarfile.open(archive_path, "r|gz") as tar:
        for member in tar:
            _validate_archive_path(member.name, destination)

            # Extraction filters exist in 3.12+ and in 3.9.17+/3.10.12+/3.11.4+
            if hasattr(tarfile, "data_filter"):
                tar.extract(member, destination, filter="data")
            else:
                tar.extract(member, destination)


def _extract_zip(archive_path: Path, destination: Path) -> None:
    """Extract a ZIP archive."""
    with zipfile.ZipFile(archive_path, "r") as zf:
        members = zf.namelist()

        # Validate all paths first
        for member in members:
            _validate_archive_path(member, destination)

        for member in members:
            zf.extract(member, destination)
