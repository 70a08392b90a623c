"""
Pytest configuration and shared fixtures for binwrapper tests.
"""

import io
import tarfile
import zipfile
from typing import Callable, Dict

import pytest

from binwrapper.core.platform import HostTarget, clear_platform_cache
from binwrapper.core.release import ReleaseDescriptor

TEMPLATE = "https://example/pkg_{{version}}_{{platform}}_{{arch}}.tar.gz"


@pytest.fixture(autouse=True)
def _reset_platform_cache():
    """Make every test see fresh host detection."""
    clear_platform_cache()
    yield
    clear_platform_cache()


@pytest.fixture
def linux_host() -> HostTarget:
    return HostTarget(raw_os="linux", raw_arch="x64", os="linux", arch="amd64")


@pytest.fixture
def windows_host() -> HostTarget:
    return HostTarget(raw_os="win32", raw_arch="x64", os="windows", arch="amd64")


@pytest.fixture
def descriptor() -> ReleaseDescriptor:
    """Release descriptor used across provisioning tests."""
    return ReleaseDescriptor(name="pkg", version="1.2.3", url_template=TEMPLATE)


@pytest.fixture
def make_tar_gz() -> Callable[[Dict[str, bytes]], bytes]:
    """Factory building an in-memory .tar.gz from {member_name: content}."""

    def _make(members: Dict[str, bytes]) -> bytes:
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
            for name, content in members.items():
                info = tarfile.TarInfo(name)
                info.size = len(content)
                info.mode = 0o644
                tar.addfile(info, io.BytesIO(content))
        return buffer.getvalue()

    return _make


@pytest.fixture
def make_zip() -> Callable[[Dict[str, bytes]], bytes]:
    """Factory building an in-memory .zip from {member_name: content}."""

    def _make(members: Dict[str, bytes]) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
            for name, content in members.items():
                zf.writestr(name, content)
        return buffer.getvalue()

    return _make
