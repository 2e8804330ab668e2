"""HTTP request wrapper shared by every reMarkable Cloud API call.

All requests carry the same User-Agent and fail uniformly with RequestError
on any non-2xx response, so callers never need to inspect status codes.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..version import __version__

logger = logging.getLogger(__name__)

USER_AGENT = f"digli/ctc-puzzle-import v{__version__}"

# HTTP client settings
DEFAULT_TIMEOUT = 30.0
UPLOAD_TIMEOUT = 300.0  # 5 minutes for blob uploads


class RemarkableError(Exception):
    """Base exception for reMarkable Cloud client errors."""

    pass


class RequestError(RemarkableError):
    """Raised when a request fails or returns a non-2xx status.

    Attributes:
        status_code: HTTP status, or None if no response was received.
        url: The requested URL.
        body: Response body text (or the transport error message).
    """

    def __init__(self, status_code: int | None, url: str, body: str) -> None:
        self.status_code = status_code
        self.url = url
        self.body = body
        if status_code is None:
            message = f"Request to {url} failed: {body}"
        else:
            message = f"Got a {status_code} response at {url}: {body}"
        super().__init__(message)


def request(
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    json: Any = None,
    content: bytes | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> httpx.Response:
    """Issue a single HTTP request.

    Args:
        method: HTTP method (GET, POST, PUT, ...).
        url: Absolute URL.
        headers: Extra headers, merged over the default User-Agent.
        json: JSON-serializable body.
        content: Raw body bytes.
        timeout: Timeout in seconds.

    Returns:
        The fully read response.

    Raises:
        RequestError: On transport failure or a non-2xx status.
    """
    merged_headers = {"User-Agent": USER_AGENT, **(headers or {})}
    logger.debug("%s %s", method, url)

    try:
        with httpx.Client(timeout=timeout) as client:
            response = client.request(
                method,
                url,
                headers=merged_headers,
                json=json,
                content=content,
            )
    except httpx.HTTPError as e:
        raise RequestError(None, url, str(e)) from e

    if not response.is_success:
        raise RequestError(response.status_code, url, response.text)

    return response
