"""Download images over HTTP."""

import logging
from urllib.parse import urlparse

import requests

from exifreader._version import __version__
from exifreader.exceptions import ImageDownloadError, MissingImageUrlError

logger = logging.getLogger(__name__)

DEFAULT_FILE_NAME = "downloaded_image"
DEFAULT_USER_AGENT = f"exifreader/{__version__}"


def file_name_from_url(url: str) -> str:
    """Return the last path segment of a URL, used as the image file name.

    Args:
        url: Image URL

    Returns:
        File name, or "downloaded_image" if the URL ends with a slash

    Examples:
        >>> file_name_from_url("https://example.com/photos/beach.jpg")
        'beach.jpg'
    """
    return urlparse(url).path.split("/")[-1] or DEFAULT_FILE_NAME


class ImageFetcher:
    """Fetches image bytes from a URL with a single GET request.

    Attributes:
        timeout: Request timeout in seconds
        user_agent: User-Agent header sent with each request
    """

    def __init__(self, timeout: int = 30, user_agent: str = DEFAULT_USER_AGENT) -> None:
        """Initialize image fetcher.

        Args:
            timeout: Request timeout in seconds
            user_agent: User-Agent header value
        """
        self.timeout = timeout
        self.user_agent = user_agent

    def fetch(self, url: str) -> bytes:
        """Download an image.

        Args:
            url: Image URL

        Returns:
            Response body as bytes

        Raises:
            MissingImageUrlError: If no URL was given
            ImageDownloadError: If the request fails or returns an error status
        """
        if not url:
            raise MissingImageUrlError()

        logger.debug(f"GET {url}")

        try:
            response = requests.request(
                method="GET",
                url=url,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise ImageDownloadError(
                f"Request timeout after {self.timeout} seconds: {url}",
                url=url,
            ) from e
        except requests.exceptions.RequestException as e:
            raise ImageDownloadError(f"Request failed: {e}", url=url) from e

        logger.debug(f"  Response: {response.status_code}")

        if not response.ok:
            raise ImageDownloadError(
                f"Could not download {url}",
                url=url,
                status_code=response.status_code,
            )

        logger.info(f"Downloaded {len(response.content)} bytes from {url}")
        return response.content
