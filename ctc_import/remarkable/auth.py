"""Authentication for reMarkable Cloud API.

Authentication Flow:
1. User obtains a one-time code from https://my.remarkable.com/device/desktop/connect
2. Client exchanges code for a device token (long-lived, stored in the config)
3. Client exchanges device token for an auth token at the start of every run
"""

from __future__ import annotations

import logging
import uuid

from .http import RemarkableError, request
from .models import DeviceRegistrationRequest

logger = logging.getLogger(__name__)

# reMarkable Cloud API endpoints
AUTH_API = "https://webapp-production-dot-remarkable-production.appspot.com"
DEVICE_TOKEN_URL = f"{AUTH_API}/token/json/2/device/new"
USER_TOKEN_URL = f"{AUTH_API}/token/json/2/user/new"

CONNECT_URL = "https://my.remarkable.com/device/connect/desktop"
ONE_TIME_CODE_LENGTH = 8


class AuthError(RemarkableError):
    """Base exception for authentication errors."""

    pass


class DeviceRegistrationError(AuthError):
    """Raised when device registration fails."""

    pass


class TokenRefreshError(AuthError):
    """Raised when the auth token cannot be obtained."""

    pass


class InvalidOneTimeCodeError(AuthError):
    """Raised when a one-time code has the wrong shape."""

    pass


def validate_one_time_code(code: str) -> str:
    """Normalize a one-time code and check its length.

    Only the length is checked locally; the server decides whether the
    code is actually valid.

    Raises:
        InvalidOneTimeCodeError: If the code is not exactly 8 characters.
    """
    code = code.strip()
    if len(code) != ONE_TIME_CODE_LENGTH:
        raise InvalidOneTimeCodeError(
            f"One-time code must be {ONE_TIME_CODE_LENGTH} characters, got {len(code)}"
        )
    return code


def get_device_token(one_time_code: str) -> str:
    """Register a new device with the reMarkable Cloud.

    A fresh device id is generated for every registration.

    Args:
        one_time_code: Code from my.remarkable.com/device/connect/desktop

    Returns:
        The new device token.

    Raises:
        RequestError: If the server rejects the code.
        DeviceRegistrationError: If the server returns an empty token.
    """
    payload = DeviceRegistrationRequest(
        code=one_time_code,
        device_id=str(uuid.uuid4()),
    )

    logger.debug("Registering device %s", payload.device_id)
    response = request(
        "POST",
        DEVICE_TOKEN_URL,
        json=payload.model_dump(by_alias=True),
    )

    device_token = response.text.strip()
    if not device_token:
        raise DeviceRegistrationError("Received empty device token")

    return device_token


def get_auth_token(device_token: str) -> str:
    """Exchange the device token for a short-lived auth token.

    Raises:
        RequestError: If the server rejects the device token.
        TokenRefreshError: If the server returns an empty token.
    """
    response = request(
        "POST",
        USER_TOKEN_URL,
        headers={"Authorization": f"Bearer {device_token}"},
    )

    auth_token = response.text.strip()
    if not auth_token:
        raise TokenRefreshError("Received empty auth token")

    return auth_token
