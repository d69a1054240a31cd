"""HTTP plumbing shared by the auth and storage modules."""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from urllib.parse import quote

import httpx

# Client identifier sent with every request
USER_AGENT = "remarkable-tablet-api"

# HTTP client settings
DEFAULT_TIMEOUT = 30.0

# Characters encodeURIComponent leaves untouched, beyond [A-Za-z0-9_.-~]
_COMPONENT_SAFE = "!*'()"


def _encode_component(value: object) -> str:
    if isinstance(value, bool):
        value = "true" if value else "false"
    return quote(str(value), safe=_COMPONENT_SAFE)


def query_string(params: Mapping[str, object]) -> str:
    """Build a URL query string from a flat mapping.

    Keys and values are percent-encoded the way ``encodeURIComponent`` does,
    booleans are rendered as ``true``/``false`` and ``None`` values are
    skipped. Pairs keep the mapping's iteration order.
    """
    return "&".join(
        f"{_encode_component(key)}={_encode_component(value)}"
        for key, value in params.items()
        if value is not None
    )


def new_id() -> str:
    """Generate a random identifier for a device or document."""
    return str(uuid.uuid4())


def base_headers(token: str | None = None) -> dict[str, str]:
    """Headers for a request, with a bearer token when one is given."""
    headers = {"User-Agent": USER_AGENT}
    if token is not None:
        headers["Authorization"] = f"Bearer {token}"
    return headers


@asynccontextmanager
async def open_client(
    client: httpx.AsyncClient | None = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the caller's client, or a one-off client closed on exit."""
    if client is not None:
        yield client
        return

    async with httpx.AsyncClient(timeout=DEFAULT_TIMEOUT) as owned:
        yield owned
