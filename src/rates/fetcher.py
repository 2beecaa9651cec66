"""Bulletin page fetcher."""

import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)

# Request timeout (connect, read) in seconds
REQUEST_TIMEOUT = (10, 30)

DEFAULT_HEADERS = {
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.9',
}

# No retry adapter is mounted: retries belong to the scheduler that triggers the scrape.
_session = requests.Session()


class FetchError(Exception):
    """Raised when the bulletin page cannot be fetched."""
    def __init__(self, url: str, message: str, status_code: Optional[int] = None,
                 original_error: Optional[Exception] = None):
        self.url = url
        self.status_code = status_code
        self.message = message
        self.original_error = original_error
        status = f" ({status_code})" if status_code is not None else ""
        super().__init__(f"Failed to fetch {url}{status}: {message}")


def fetch_bulletin(url: str, user_agent: str, timeout=REQUEST_TIMEOUT) -> str:
    """
    GET the bulletin page and return its body.

    Args:
        url: Bulletin URL
        user_agent: Descriptive client identifier sent as User-Agent
        timeout: Seconds, or a (connect, read) tuple

    Returns:
        Response body as text

    Raises:
        FetchError: On transport errors or any non-2xx status
    """
    headers = dict(DEFAULT_HEADERS, **{'User-Agent': user_agent})
    try:
        response = _session.get(url, headers=headers, timeout=timeout)
    except requests.RequestException as e:
        raise FetchError(url, str(e), original_error=e) from e

    if not response.ok:
        raise FetchError(url, response.reason or "non-success status", status_code=response.status_code)

    logger.info(f"Fetched {url}: {len(response.text)} chars")
    return response.text
