"""
Release archive fetcher.

Downloads a release archive into the cache directory:
- Existence cache: an archive already present is reused without network access
- Manual redirect following (relative Location headers included)
- Streaming to disk; the body is never held in memory
- Atomic placement: the archive appears under its final name only once complete

There is no retry. Network failures surface as DownloadError and the caller
decides whether to abort.
"""

import logging
import os
import posixpath
import tempfile
from pathlib import Path
from typing import Union
from urllib.parse import urljoin, urlparse

import requests
from requests.exceptions import RequestException

from binwrapper.core.exceptions import DownloadError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
MAX_REDIRECTS = 20
CHUNK_SIZE = 8192


def archive_name_from_url(url: str) -> str:
    """
    Get the archive file name from a URL path.

    Percent-escapes are kept as they appear in the URL.

    Raises:
        ValueError: If the URL path has no file name component

    Example:
        >>> archive_name_from_url("https://host/v1/tool_1.0_linux_amd64.tar.gz?x=1")
        'tool_1.0_linux_amd64.tar.gz'
    """
    name = posixpath.basename(urlparse(url).path)
    if not name:
        raise ValueError(f"URL has no file name: {url}")
    return name


def fetch_archive(
    url: str,
    dest_dir: Union[str, Path],
    timeout: int = DEFAULT_TIMEOUT,
    max_redirects: int = MAX_REDIRECTS,
) -> Path:
    """
    Download a release archive into a directory.

    If a file named after the URL's basename already exists in dest_dir, its
    path is returned immediately and no request is made.

    Args:
        url: Archive URL
        dest_dir: Directory to store the archive in
        timeout: Request timeout in seconds
        max_redirects: Maximum number of redirects to follow

    Returns:
        Path to the local archive

    Raises:
        DownloadError: On a URL without a file name, network errors, non-200
            responses or a broken redirect chain. The error carries the
            original URL and, when a response was received, its status code.
        ValueError: If URL is empty

    Example:
        >>> fetch_archive("https://example.com/tool_1.0_linux_amd64.tar.gz", Path(".bin"))
        PosixPath('.bin/tool_1.0_linux_amd64.tar.gz')
    """
    if not url:
        raise ValueError("URL cannot be empty")

    try:
        archive_name = archive_name_from_url(url)
    except ValueError as e:
        raise DownloadError(f"Failed to download '{url}': {e}", url=url) from e

    dest_dir = Path(dest_dir)
    output_path = dest_dir / archive_name

    if output_path.exists():
        logger.debug(f"Archive already cached: {output_path}")
        return output_path

    current_url = url
    for _ in range(max_redirects + 1):
        try:
            response = requests.get(
                current_url, stream=True, allow_redirects=False, timeout=timeout
            )
        except RequestException as e:
            raise DownloadError(
                f"Failed to download '{url}': {e}", url=url
            ) from e

        with response:
            location = response.headers.get("location")
            if 300 <= response.status_code < 400 and location:
                next_url = urljoin(current_url, location)
                logger.debug(
                    f"Redirect {response.status_code}: {current_url} -> {next_url}"
                )
                current_url = next_url
                continue

            if response.status_code != 200:
                raise DownloadError(
                    f"Failed to download '{url}' ({response.status_code})",
                    url=url,
                    status_code=response.status_code,
                )

            return _stream_to_file(response, output_path, url)

    raise DownloadError(
        f"Failed to download '{url}': broken redirect chain "
        f"(more than {max_redirects} redirects)",
        url=url,
    )


def _stream_to_file(
    response: requests.Response, output_path: Path, url: str
) -> Path:
    """
    Write a response body to output_path through a temporary .part file.

    Each call writes to its own uniquely named .part file in the same
    directory, so concurrent downloads of the same archive never share a
    partial file. The partial file is removed if the transfer fails.
    """
    partial_path = None
    downloaded = 0

    try:
        with tempfile.NamedTemporaryFile(
            dir=output_path.parent,
            prefix=f"{output_path.name}.",
            suffix=".part",
            delete=False,
        ) as f:
            partial_path = Path(f.name)
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    f.write(chunk)
                    downloaded += len(chunk)
        os.replace(partial_path, output_path)
    except (RequestException, OSError) as e:
        logger.error(f"Error during download: {e}")
        if partial_path is not None:
            partial_path.unlink(missing_ok=True)
        raise DownloadError(
            f"Failed to download '{url}': {e}",
            url=url,
            status_code=response.status_code,
        ) from e

    logger.debug(f"Download complete: {output_path} ({downloaded} bytes)")
    return output_path
