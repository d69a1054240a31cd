"""Document storage operations for the reMarkable cloud.

Storage Operations:
- Discover the storage host for the account
- List documents, or fetch one by id
- Request an upload slot for a new document
- Update a document's metadata
- Delete a document

Every operation is a single request against the storage host and takes the
host and a user token explicitly.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from .models import (
    DeleteItem,
    DocumentMetadata,
    ItemType,
    ServiceDiscoveryResponse,
    UploadRequestItem,
    UploadSlot,
)
from .transport import base_headers, new_id, open_client, query_string

logger = logging.getLogger(__name__)

# Service Discovery
SERVICE_DISCOVERY_URL = (
    "https://service-manager-production-dot-remarkable-production.appspot.com"
    "/service/json/1/document-storage"
)
DISCOVERY_PARAMS: dict[str, object] = {
    "environment": "production",
    "group": "auth0|5a68dc51cb30df3877a1d7c4",
    "apiVer": 2,
}

# API endpoints (relative to storage host)
LIST_DOCS_ENDPOINT = "/document-storage/json/2/docs"
UPLOAD_REQUEST_ENDPOINT = "/document-storage/json/2/upload/request"
UPDATE_STATUS_ENDPOINT = "/document-storage/json/2/upload/update-status"
DELETE_ENDPOINT = "/document-storage/json/2/delete"


class CloudError(Exception):
    """Base exception for cloud storage errors."""

    pass


class ServiceDiscoveryError(CloudError):
    """Raised when service discovery fails."""

    pass


class UnexpectedStorageStatus(ServiceDiscoveryError):
    """The discovery service answered with a status other than OK."""

    def __init__(self, status: str) -> None:
        super().__init__(f'Unexpected status in response: "{status}"')
        self.status = status


class UploadRequestError(CloudError):
    """Raised when an upload slot cannot be obtained."""

    pass


class UploadRequestFailed(UploadRequestError):
    """The service refused an item of the upload request."""

    def __init__(self, message: str) -> None:
        super().__init__(f'Upload request failed: "{message}"')
        self.message = message


class UnexpectedUploadUrlCount(UploadRequestError):
    """The upload request did not yield exactly one upload URL."""

    def __init__(self, count: int) -> None:
        super().__init__("Unexpected number of upload URLs returned")
        self.count = count


async def get_storage_host(*, client: httpx.AsyncClient | None = None) -> str:
    """Discover the document storage host for the account.

    Returns:
        Base URL of the storage host, e.g. ``https://host.example``.

    Raises:
        UnexpectedStorageStatus: If discovery does not report OK.
        ServiceDiscoveryError: If the reply is not a JSON object.
    """
    url = f"{SERVICE_DISCOVERY_URL}?{query_string(DISCOVERY_PARAMS)}"

    async with open_client(client) as http:
        response = await http.get(url, headers=base_headers())

    data = response.json()
    if not isinstance(data, dict):
        raise ServiceDiscoveryError(f"Unexpected discovery response: {data!r}")

    discovery = ServiceDiscoveryResponse.model_validate(data)

    if discovery.status != "OK":
        raise UnexpectedStorageStatus(str(discovery.status))

    logger.debug(f"Discovered storage host {discovery.host}")
    return f"https://{discovery.host}"


async def docs(
    storage_host: str,
    token: str,
    doc_id: str | None = None,
    with_blob: bool | None = None,
    *,
    client: httpx.AsyncClient | None = None,
) -> Any:
    """List documents, or fetch a single one.

    With no filter every item is listed. When ``doc_id`` or ``with_blob`` is
    given, the query carries ``doc`` and a ``withBlob`` flag.

    Returns:
        The decoded JSON response, unvalidated.
    """
    url = f"{storage_host}{LIST_DOCS_ENDPOINT}"
    if doc_id is not None or with_blob is not None:
        url += "?" + query_string({"doc": doc_id, "withBlob": bool(with_blob)})

    async with open_client(client) as http:
        response = await http.get(url, headers=base_headers(token))

    return response.json()


async def upload_request(
    storage_host: str, token: str, *, client: httpx.AsyncClient | None = None
) -> UploadSlot:
    """Reserve a new document id and an upload URL for its blob.

    The caller must PUT the document blob to ``upload_url`` and then publish
    its metadata with :func:`update_status`.

    Raises:
        UploadRequestFailed: If the service refused the request.
        UnexpectedUploadUrlCount: If not exactly one URL came back.
        UploadRequestError: If the response is not a JSON array of items, or
            the item carries no upload URL.
    """
    doc_id = new_id()
    item = UploadRequestItem(id=doc_id, item_type=ItemType.DOCUMENT, version=1)

    async with open_client(client) as http:
        response = await http.put(
            f"{storage_host}{UPLOAD_REQUEST_ENDPOINT}",
            headers=base_headers(token),
            json=[item.model_dump(by_alias=True, mode="json")],
        )

    data = response.json()
    if not isinstance(data, list):
        raise UploadRequestError(f"Unexpected upload response: {data!r}")

    for datum in data:
        if not isinstance(datum, dict):
            raise UploadRequestError(f"Unexpected upload item: {datum!r}")
        if datum.get("Success") is not True:
            raise UploadRequestFailed(datum.get("Message", ""))

    upload_urls = [datum.get("BlobURLPut") for datum in data]

    if len(upload_urls) != 1:
        raise UnexpectedUploadUrlCount(len(upload_urls))

    upload_url = upload_urls[0]
    if not isinstance(upload_url, str) or not upload_url:
        raise UploadRequestError("No upload URL received")

    logger.debug(f"Reserved upload slot for {doc_id}")
    return UploadSlot(doc_id=doc_id, upload_url=upload_url)


async def update_status(
    storage_host: str,
    token: str,
    metadata: DocumentMetadata | Mapping[str, Any],
    *,
    client: httpx.AsyncClient | None = None,
) -> httpx.Response:
    """Publish a document's metadata.

    Only the fields the caller set are sent; the service keeps its values
    for the rest. The response is returned as-is for the caller to inspect.
    """
    if not isinstance(metadata, DocumentMetadata):
        metadata = DocumentMetadata.model_validate(metadata)

    # Listing-only fields of a StoredDocument are never sent back
    body = metadata.model_dump(
        by_alias=True,
        mode="json",
        exclude_unset=True,
        include=set(DocumentMetadata.model_fields),
    )

    logger.debug(f"Updating status of {metadata.id} to version {metadata.version}")

    async with open_client(client) as http:
        return await http.put(
            f"{storage_host}{UPDATE_STATUS_ENDPOINT}",
            headers=base_headers(token),
            json=[body],
        )


async def delete_item(
    storage_host: str,
    token: str,
    doc_id: str,
    version: int,
    *,
    client: httpx.AsyncClient | None = None,
) -> httpx.Response:
    """Delete a document at the given version. The response is returned as-is."""
    item = DeleteItem(id=doc_id, version=version)

    logger.debug(f"Deleting {doc_id} at version {version}")

    async with open_client(client) as http:
        return await http.put(
            f"{storage_host}{DELETE_ENDPOINT}",
            headers=base_headers(token),
            json=[item.model_dump(by_alias=True)],
        )
