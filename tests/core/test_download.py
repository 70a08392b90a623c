"""
Unit tests for download module.

Tests archive fetching with mocked network requests.
"""

import pytest
import requests
import responses

from binwrapper.core.download import (
    archive_name_from_url,
    fetch_archive,
)
from binwrapper.core.exceptions import DownloadError

URL = "https://example.com/releases/tool_1.0_linux_amd64.tar.gz"


class TestArchiveNameFromUrl:
    """Test archive_name_from_url function."""

    def test_basename(self):
        """Test basename is taken from the URL path."""
        assert archive_name_from_url(URL) == "tool_1.0_linux_amd64.tar.gz"

    def test_query_string_ignored(self):
        """Test query string is not part of the file name."""
        assert archive_name_from_url(URL + "?token=abc") == (
            "tool_1.0_linux_amd64.tar.gz"
        )

    def test_percent_escapes_kept(self):
        """Test percent-escapes are not decoded in the file name."""
        assert archive_name_from_url("https://h/a%20b.zip") == "a%20b.zip"

    def test_no_file_name(self):
        """Test URL ending in a slash has no archive name."""
        with pytest.raises(ValueError, match="no file name"):
            archive_name_from_url("https://example.com/releases/")


class TestFetchArchive:
    """Test fetch_archive function."""

    @responses.activate
    def test_simple_download(self, tmp_path):
        """Test a 200 response is written to the cache directory."""
        content = b"archive content"
        responses.add(responses.GET, URL, body=content, status=200)

        result = fetch_archive(URL, tmp_path)

        assert result == tmp_path / "tool_1.0_linux_amd64.tar.gz"
        assert result.read_bytes() == content
        assert list(tmp_path.glob("*.part")) == []

    @responses.activate
    def test_existing_archive_skips_network(self, tmp_path):
        """Test cached archive is returned without any request."""
        cached = tmp_path / "tool_1.0_linux_amd64.tar.gz"
        cached.write_bytes(b"cached")

        result = fetch_archive(URL, tmp_path)

        assert result == cached
        assert result.read_bytes() == b"cached"
        assert len(responses.calls) == 0

    @responses.activate
    def test_relative_redirect(self, tmp_path):
        """Test a relative Location is resolved against the request URL."""
        old_url = "https://host/old/path.tar.gz"
        new_url = "https://host/new/path.tar.gz"
        responses.add(
            responses.GET,
            old_url,
            status=302,
            headers={"Location": "/new/path.tar.gz"},
        )
        responses.add(responses.GET, new_url, body=b"moved", status=200)

        result = fetch_archive(old_url, tmp_path)

        assert [call.request.url for call in responses.calls] == [old_url, new_url]
        # Name comes from the original URL, not the redirect target
        assert result == tmp_path / "path.tar.gz"
        assert result.read_bytes() == b"moved"

    @responses.activate
    def test_redirect_chain(self, tmp_path):
        """Test a chain of N redirects is followed to the terminal response."""
        hops = [
            "https://github.example/releases/download/v1/tool.tar.gz",
            "https://objects.example/a/tool.tar.gz",
            "https://cdn.example/b/tool.tar.gz",
            "https://cdn.example/c/tool.tar.gz",
        ]
        for status, (current, target) in zip(
            (301, 302, 307), zip(hops, hops[1:])
        ):
            responses.add(
                responses.GET, current, status=status, headers={"Location": target}
            )
        responses.add(responses.GET, hops[-1], body=b"final body", status=200)

        result = fetch_archive(hops[0], tmp_path)

        assert len(responses.calls) == 4
        assert result.read_bytes() == b"final body"

    @responses.activate
    def test_redirect_loop_is_broken_chain(self, tmp_path):
        """Test redirect loops stop with a DownloadError."""
        responses.add(
            responses.GET, URL, status=302, headers={"Location": URL}
        )

        with pytest.raises(DownloadError, match="broken redirect chain") as exc_info:
            fetch_archive(URL, tmp_path, max_redirects=3)

        assert exc_info.value.url == URL
        assert len(responses.calls) == 4

    @responses.activate
    def test_redirect_without_location_fails(self, tmp_path):
        """Test a 3xx without Location is a terminal failure."""
        responses.add(responses.GET, URL, status=302)

        with pytest.raises(DownloadError) as exc_info:
            fetch_archive(URL, tmp_path)

        assert exc_info.value.status_code == 302

    @pytest.mark.parametrize("status", [404, 403, 500, 204])
    @responses.activate
    def test_non_200_status_fails(self, tmp_path, status):
        """Test any non-200 terminal status carries URL and status code."""
        responses.add(responses.GET, URL, status=status)

        with pytest.raises(DownloadError) as exc_info:
            fetch_archive(URL, tmp_path)

        assert exc_info.value.url == URL
        assert exc_info.value.status_code == status
        assert URL in str(exc_info.value)
        assert str(status) in str(exc_info.value)
        assert not (tmp_path / "tool_1.0_linux_amd64.tar.gz").exists()

    @responses.activate
    def test_error_after_redirect_reports_original_url(self, tmp_path):
        """Test failures behind a redirect name the URL that was requested."""
        target = "https://cdn.example/tool.tar.gz"
        responses.add(responses.GET, URL, status=302, headers={"Location": target})
        responses.add(responses.GET, target, status=404)

        with pytest.raises(DownloadError) as exc_info:
            fetch_archive(URL, tmp_path)

        assert exc_info.value.url == URL
        assert exc_info.value.status_code == 404

    @responses.activate
    def test_network_error(self, tmp_path):
        """Test connection failures surface as DownloadError without retry."""
        responses.add(
            responses.GET, URL, body=requests.exceptions.ConnectionError("reset")
        )

        with pytest.raises(DownloadError, match="reset") as exc_info:
            fetch_archive(URL, tmp_path)

        assert exc_info.value.url == URL
        assert exc_info.value.status_code is None
        assert len(responses.calls) == 1

    @responses.activate
    def test_url_without_file_name(self, tmp_path):
        """Test a URL ending in a slash fails as a download error."""
        url = "https://example.com/1.2.3/linux/amd64/"

        with pytest.raises(DownloadError, match="no file name") as exc_info:
            fetch_archive(url, tmp_path)

        assert exc_info.value.url == url
        assert len(responses.calls) == 0

    @responses.activate
    def test_concurrent_partial_file_untouched(self, tmp_path):
        """Test a download does not reuse another writer's partial file."""
        foreign = tmp_path / "tool_1.0_linux_amd64.tar.gz.part"
        foreign.write_bytes(b"another process is writing")
        responses.add(responses.GET, URL, body=b"archive content", status=200)

        result = fetch_archive(URL, tmp_path)

        assert result.read_bytes() == b"archive content"
        assert foreign.read_bytes() == b"another process is writing"

    @responses.activate
    def test_percent_escaped_archive_name(self, tmp_path):
        """Test the cached archive keeps the URL's percent-escapes."""
        url = "https://example.com/releases/tool%2B1.0.tar.gz"
        responses.add(responses.GET, url, body=b"data", status=200)

        result = fetch_archive(url, tmp_path)

        assert result == tmp_path / "tool%2B1.0.tar.gz"

    def test_empty_url(self, tmp_path):
        """Test empty URL raises ValueError."""
        with pytest.raises(ValueError, match="URL cannot be empty"):
            fetch_archive("", tmp_path)
