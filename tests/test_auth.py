"""Tests for device and user authentication."""

from __future__ import annotations

import json
import uuid

import httpx
import pytest
from pytest_httpx import HTTPXMock

from rmcloud import (
    AuthError,
    DeviceCredential,
    DeviceRegistrationError,
    InvalidOneTimeCode,
    UnknownDeviceType,
    UserAuthError,
    WrongApiVersion,
    authenticate_device,
    authenticate_user,
)
from rmcloud.auth import (
    DEVICE_TOKEN_URL,
    SIGNED_OUT_PREFIX,
    USER_TOKEN_URL,
)


@pytest.mark.asyncio
class TestAuthenticateDevice:
    """Tests for device registration."""

    async def test_success(self, httpx_mock: HTTPXMock) -> None:
        """Test successful device registration."""
        httpx_mock.add_response(
            url=DEVICE_TOKEN_URL,
            method="POST",
            text="new_device_token_12345",
        )

        credential = await authenticate_device("one-time-code")

        assert isinstance(credential, DeviceCredential)
        assert credential.token == "new_device_token_12345"
        assert uuid.UUID(credential.device_id).version == 4

    async def test_request_body_and_headers(self, httpx_mock: HTTPXMock) -> None:
        """Test what is sent to the registration endpoint."""
        httpx_mock.add_response(url=DEVICE_TOKEN_URL, method="POST", text="tok")

        credential = await authenticate_device("abcdefgh")

        request = httpx_mock.get_request()
        assert request is not None
        assert json.loads(request.content) == {
            "code": "abcdefgh",
            "deviceDesc": "desktop-linux",
            "deviceID": credential.device_id,
        }
        assert request.headers["User-Agent"] == "remarkable-tablet-api"
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["Authentication"] == "Bearer"

    async def test_fresh_device_id_each_call(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=DEVICE_TOKEN_URL, method="POST", text="a")
        httpx_mock.add_response(url=DEVICE_TOKEN_URL, method="POST", text="b")

        first = await authenticate_device("code")
        second = await authenticate_device("code")

        assert first.device_id != second.device_id

    async def test_invalid_code(self, httpx_mock: HTTPXMock) -> None:
        """Test the invalid code sentence, whatever follows it."""
        httpx_mock.add_response(
            url=DEVICE_TOKEN_URL,
            method="POST",
            text="Invalid One-time-code: something else entirely",
        )

        with pytest.raises(InvalidOneTimeCode):
            await authenticate_device("bad")

    async def test_invalid_code_with_error_status(
        self, httpx_mock: HTTPXMock
    ) -> None:
        """Test that the prefix wins over the status code."""
        httpx_mock.add_response(
            url=DEVICE_TOKEN_URL,
            method="POST",
            status_code=400,
            text="Invalid One-time-code",
        )

        with pytest.raises(InvalidOneTimeCode) as exc_info:
            await authenticate_device("bad")

        assert exc_info.value.status_code == 400

    async def test_unknown_device_type(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            url=DEVICE_TOKEN_URL,
            method="POST",
            text="Unknown device type (desc) desktop-linux",
        )

        with pytest.raises(UnknownDeviceType):
            await authenticate_device("code")

    async def test_signed_out(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            url=DEVICE_TOKEN_URL,
            method="POST",
            text=SIGNED_OUT_PREFIX + " Thanks.",
        )

        with pytest.raises(WrongApiVersion, match="wrong API version"):
            await authenticate_device("code")

    async def test_errors_share_base(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            url=DEVICE_TOKEN_URL, method="POST", text="Invalid One-time-code"
        )

        with pytest.raises(AuthError):
            await authenticate_device("code")

    async def test_unrecognised_error_status(self, httpx_mock: HTTPXMock) -> None:
        """Test that an error status without a known sentence still fails."""
        httpx_mock.add_response(
            url=DEVICE_TOKEN_URL,
            method="POST",
            status_code=500,
            text="Internal Server Error",
        )

        with pytest.raises(DeviceRegistrationError, match="500") as exc_info:
            await authenticate_device("code")

        assert exc_info.value.status_code == 500

    async def test_empty_response(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=DEVICE_TOKEN_URL, method="POST", text="")

        with pytest.raises(DeviceRegistrationError, match="empty device token"):
            await authenticate_device("code")

    async def test_network_error_propagates(self, httpx_mock: HTTPXMock) -> None:
        """Test that transport errors are not wrapped."""
        httpx_mock.add_exception(httpx.ConnectError("Network error"))

        with pytest.raises(httpx.ConnectError):
            await authenticate_device("code")

    async def test_uses_given_client(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=DEVICE_TOKEN_URL, method="POST", text="tok")

        async with httpx.AsyncClient() as client:
            credential = await authenticate_device("code", client=client)
            assert not client.is_closed

        assert credential.token == "tok"


@pytest.mark.asyncio
class TestAuthenticateUser:
    """Tests for user token exchange."""

    async def test_success(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=USER_TOKEN_URL, method="POST", text="abc123")

        assert await authenticate_user("dev123") == "abc123"

    async def test_sends_device_token(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=USER_TOKEN_URL, method="POST", text="abc123")

        await authenticate_user("dev123")

        request = httpx_mock.get_request()
        assert request is not None
        assert request.headers["Authorization"] == "Bearer dev123"
        assert request.headers["User-Agent"] == "remarkable-tablet-api"

    async def test_body_returned_raw(self, httpx_mock: HTTPXMock) -> None:
        """Test that the token body is not parsed or trimmed."""
        httpx_mock.add_response(
            url=USER_TOKEN_URL, method="POST", text='{"not": "json"} '
        )

        assert await authenticate_user("dev123") == '{"not": "json"} '

    async def test_unauthorized(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            url=USER_TOKEN_URL,
            method="POST",
            status_code=401,
            text="Invalid token",
        )

        with pytest.raises(UserAuthError, match="401") as exc_info:
            await authenticate_user("dev123")

        assert exc_info.value.status_code == 401

    async def test_other_success_status_rejected(
        self, httpx_mock: HTTPXMock
    ) -> None:
        """Test that only 200 counts as success."""
        httpx_mock.add_response(
            url=USER_TOKEN_URL, method="POST", status_code=204, text=""
        )

        with pytest.raises(UserAuthError) as exc_info:
            await authenticate_user("dev123")

        assert exc_info.value.status_code == 204
