"""
Host platform resolution for binwrapper.

This module detects the operating system and CPU architecture of the running
interpreter and maps them onto the tokens used in release artifact names.

Raw identifiers use a fixed vocabulary ('darwin', 'linux', 'win32' for the
OS; 'x64', 'arm64', 'ia32', 'arm' for the CPU). They are then translated
through two tables:

- an OS table, chosen per release descriptor (e.g. 'win32' -> 'windows')
- the fixed architecture table below (e.g. 'x64' -> 'amd64')

Values missing from either table pass through unchanged, so new targets
work as soon as a matching artifact is published.

Usage:
    from binwrapper.core.platform import detect_host_target

    host = detect_host_target({"win32": "windows"})
    print(f"{host.os}_{host.arch}")  # linux_amd64
"""

import functools
import platform
import re
import sys
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

ARCH_MAPPING = {
    "ia32": "386",
    "x64": "amd64",
    "arm": "arm",
    "arm64": "arm64",
}

DEFAULT_PLATFORM_MAPPING = {
    "win32": "windows",
}


@dataclass(frozen=True)
class HostTarget:
    """
    Raw and canonical identifiers of the machine running the wrapper.

    Attributes:
        raw_os: OS as reported by the runtime ('linux', 'darwin', 'win32')
        raw_arch: Architecture as reported by the runtime ('x64', 'arm64')
        os: OS token used in release artifact names
        arch: Architecture token used in release artifact names
    """

    raw_os: str
    raw_arch: str
    os: str
    arch: str

    @property
    def is_windows(self) -> bool:
        return self.raw_os == "win32"

    def executable_name(self, base_name: str) -> str:
        """
        Get the on-disk file name of an executable for this host.

        Example:
            >>> HostTarget("win32", "x64", "windows", "amd64").executable_name("tool")
            'tool.exe'
        """
        return f"{base_name}.exe" if self.is_windows else base_name

    def __str__(self) -> str:
        return f"{self.os}-{self.arch} ({self.raw_os}-{self.raw_arch})"


def resolve(
    raw_os: str,
    raw_arch: str,
    platform_mapping: Optional[Mapping[str, str]] = None,
) -> Tuple[str, str]:
    """
    Map raw runtime identifiers to release artifact tokens.

    Resolution is total: identifiers absent from the tables are returned
    verbatim.

    Args:
        raw_os: Raw operating system identifier
        raw_arch: Raw architecture identifier
        platform_mapping: OS translation table (no translation if None)

    Returns:
        Tuple of (os, arch)

    Example:
        >>> resolve("linux", "x64")
        ('linux', 'amd64')
        >>> resolve("win32", "ia32", {"win32": "windows"})
        ('windows', '386')
    """
    mapping = platform_mapping or {}
    return mapping.get(raw_os, raw_os), ARCH_MAPPING.get(raw_arch, raw_arch)


@functools.lru_cache(maxsize=1)
def detect_raw_target() -> Tuple[str, str]:
    """
    Detect raw (os, arch) identifiers of the current process.

    This function is cached - it only runs detection once per process.
    """
    return _detect_os(), _detect_architecture()


def detect_host_target(
    platform_mapping: Optional[Mapping[str, str]] = None,
) -> HostTarget:
    """
    Detect the current host and resolve its artifact tokens.

    Args:
        platform_mapping: OS translation table for the release being fetched

    Returns:
        HostTarget for the running interpreter
    """
    raw_os, raw_arch = detect_raw_target()
    os_name, arch = resolve(raw_os, raw_arch, platform_mapping)
    return HostTarget(raw_os=raw_os, raw_arch=raw_arch, os=os_name, arch=arch)


def _detect_os() -> str:
    """
    Detect operating system.

    Returns:
        'linux', 'darwin', 'win32' or the platform name without release digits
    """
    system = sys.platform.lower()

    if system.startswith("linux"):
        return "linux"
    elif system == "darwin":
        return "darwin"
    elif system in ("win32", "cygwin", "msys"):
        return "win32"
    else:
        # e.g. 'freebsd13' -> 'freebsd'
        return re.sub(r"\d+$", "", system)


def _detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        'x64', 'arm64', 'ia32', 'arm' or the lower-cased machine name
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "ia32"
    elif machine.startswith("arm"):
        return "arm"
    else:
        return machine


def clear_platform_cache():
    """
    Clear the platform detection cache.

    This forces the next call to detect_raw_target() to re-detect.
    """
    detect_raw_target.cache_clear()


__all__ = [
    "ARCH_MAPPING",
    "DEFAULT_PLATFORM_MAPPING",
    "HostTarget",
    "resolve",
    "detect_raw_target",
    "detect_host_target",
    "clear_platform_cache",
]
