"""Authentication against the reMarkable cloud.

Authentication Flow:
1. User obtains a one-time code from https://my.remarkable.com/device/desktop/connect
2. Client exchanges the code for a device token (long-lived)
3. Client exchanges the device token for a user token (short-lived)

The device registration endpoint answers with plain text: either the bare
token or an error sentence. Errors are recognised by their literal prefixes.
"""

from __future__ import annotations

import logging

import httpx

from .models import DeviceCredential, DeviceRegistrationRequest
from .transport import base_headers, new_id, open_client

logger = logging.getLogger(__name__)

# reMarkable Cloud API endpoints
DEVICE_TOKEN_URL = "https://my.remarkable.com/token/json/2/device/new"
USER_TOKEN_URL = "https://my.remarkable.com/token/json/2/user/new"

# Error sentences returned in place of a device token
INVALID_CODE_PREFIX = "Invalid One-time-code"
UNKNOWN_DEVICE_PREFIX = "Unknown device type (desc)"
SIGNED_OUT_PREFIX = (
    "You have been signed out. Please update your app to log in again."
)


class AuthError(Exception):
    """Base exception for authentication errors."""

    pass


class DeviceRegistrationError(AuthError):
    """Raised when device registration fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidOneTimeCode(DeviceRegistrationError):
    """The pairing code was rejected."""

    pass


class UnknownDeviceType(DeviceRegistrationError):
    """The device description was not recognised."""

    pass


class WrongApiVersion(DeviceRegistrationError):
    """The service signed the client out and asks for an app update."""

    pass


class UserAuthError(AuthError):
    """Raised when exchanging a device token for a user token fails."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"User authentication failure: {status_code}")
        self.status_code = status_code


class ConfigError(AuthError):
    """Raised when the credential file cannot be loaded or saved."""

    pass


def _check_registration_reply(response: httpx.Response) -> str:
    text = response.text

    if text.startswith(INVALID_CODE_PREFIX):
        raise InvalidOneTimeCode("Invalid one-time code", response.status_code)
    if text.startswith(UNKNOWN_DEVICE_PREFIX):
        raise UnknownDeviceType("Unknown device type", response.status_code)
    if text.startswith(SIGNED_OUT_PREFIX):
        raise WrongApiVersion("Using wrong API version", response.status_code)

    if response.is_error:
        raise DeviceRegistrationError(
            f"Registration failed: {response.status_code} - {text}",
            response.status_code,
        )
    if not text:
        raise DeviceRegistrationError("Received empty device token")

    return text


async def authenticate_device(
    code: str, *, client: httpx.AsyncClient | None = None
) -> DeviceCredential:
    """Register a new device with the reMarkable cloud.

    Args:
        code: One-time code from my.remarkable.com/device/desktop/connect
        client: Optional HTTP client to send the request with.

    Returns:
        DeviceCredential holding the generated device id and its token.

    Raises:
        InvalidOneTimeCode: If the code was rejected.
        UnknownDeviceType: If the device description was rejected.
        WrongApiVersion: If the service demands a newer client.
        DeviceRegistrationError: On any other failed registration.
    """
    device_id = new_id()
    request = DeviceRegistrationRequest(code=code, device_id=device_id)

    headers = base_headers()
    headers["Content-Type"] = "application/json"
    # The endpoint expects this placeholder rather than a real credential
    headers["Authentication"] = "Bearer"

    logger.debug(f"Registering device {device_id}")

    async with open_client(client) as http:
        response = await http.post(
            DEVICE_TOKEN_URL,
            headers=headers,
            json=request.model_dump(by_alias=True),
        )

    token = _check_registration_reply(response)
    logger.info(f"Registered device {device_id}")

    return DeviceCredential(device_id=device_id, token=token)


async def authenticate_user(
    device_token: str, *, client: httpx.AsyncClient | None = None
) -> str:
    """Exchange a device token for a short-lived user token.

    Raises:
        UserAuthError: If the service answers with anything but 200.
    """
    async with open_client(client) as http:
        response = await http.post(USER_TOKEN_URL, headers=base_headers(device_token))

    if response.status_code != 200:
        logger.debug(f"User token request answered {response.status_code}")
        raise UserAuthError(response.status_code)

    return response.text
