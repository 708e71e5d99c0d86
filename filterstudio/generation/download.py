"""
Download of generated images from temporary URLs.
"""
import logging
from urllib.parse import urlparse

import requests

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = ("http", "https")


class DownloadError(RuntimeError):
    """Raised when a temporary image URL cannot be fetched."""


def download_bytes(url: str, timeout: float = 60) -> bytes:
    """
    Fetch the full body of a URL into memory.

    Plain HTTP or TLS is chosen from the URL scheme. Any status other than 200
    is a failure; there is no range resumption.

    Args:
        url: Temporary URL returned by the image API
        timeout: Seconds to wait for connect/read

    Returns:
        Response body bytes

    Raises:
        DownloadError: On unsupported scheme, transport error or non-200 status
    """
    scheme = urlparse(url).scheme.lower()
    if scheme not in SUPPORTED_SCHEMES:
        raise DownloadError(f"Unsupported URL scheme: '{scheme}'")

    logger.info(f"Downloading generated image from {url}...")
    try:
        response = requests.get(url, timeout=timeout)
    except requests.exceptions.RequestException as e:
        logger.error(f"Download failed for {url}: {e}")
        raise DownloadError(f"Download failed: {e}") from e

    if response.status_code != 200:
        logger.error(f"Download returned HTTP {response.status_code} for {url}")
        raise DownloadError(f"HTTP error: {response.status_code}")

    data = response.content
    logger.info(f"Downloaded {len(data)} bytes")
    return data
