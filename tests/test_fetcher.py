"""Tests for downloading images over HTTP."""

from unittest.mock import Mock, patch

import pytest
import requests

from exifreader._version import __version__
from exifreader.exceptions import ImageDownloadError, MissingImageUrlError
from exifreader.source.fetcher import ImageFetcher, file_name_from_url

URL = "https://example.com/photos/beach.jpg"


@pytest.mark.parametrize("url, expected", [
    (URL, "beach.jpg"),
    ("https://example.com/photos/beach.jpg?size=large", "beach.jpg"),
    ("https://example.com/photos/", "downloaded_image"),
    ("https://example.com", "downloaded_image"),
])
def test_file_name_from_url(url, expected):
    assert file_name_from_url(url) == expected


@patch("exifreader.source.fetcher.requests.request")
def test_fetch_returns_body(mock_request):
    mock_request.return_value = Mock(ok=True, status_code=200, content=b"jpeg-bytes")

    fetcher = ImageFetcher(timeout=5, user_agent="tests/1.0")
    assert fetcher.fetch(URL) == b"jpeg-bytes"

    mock_request.assert_called_once_with(
        method="GET",
        url=URL,
        headers={"User-Agent": "tests/1.0"},
        timeout=5,
    )


def test_fetch_requires_url():
    with pytest.raises(MissingImageUrlError):
        ImageFetcher().fetch("")


@patch("exifreader.source.fetcher.requests.request")
def test_fetch_error_status(mock_request):
    mock_request.return_value = Mock(ok=False, status_code=404, content=b"")

    with pytest.raises(ImageDownloadError) as exc_info:
        ImageFetcher().fetch(URL)

    assert exc_info.value.status_code == 404
    assert exc_info.value.url == URL
    assert "404" in str(exc_info.value)


@patch("exifreader.source.fetcher.requests.request")
def test_fetch_timeout(mock_request):
    mock_request.side_effect = requests.exceptions.Timeout("slow")

    with pytest.raises(ImageDownloadError, match="timeout after 7 seconds"):
        ImageFetcher(timeout=7).fetch(URL)


@patch("exifreader.source.fetcher.requests.request")
def test_fetch_connection_error(mock_request):
    mock_request.side_effect = requests.exceptions.ConnectionError("refused")

    with pytest.raises(ImageDownloadError) as exc_info:
        ImageFetcher().fetch(URL)

    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, requests.exceptions.ConnectionError)


def test_default_user_agent_carries_version():
    assert ImageFetcher().user_agent == f"exifreader/{__version__}"
