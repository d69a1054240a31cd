"""Pydantic models for reMarkable cloud payloads."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, Field

# Device description sent on registration
DEFAULT_DEVICE_DESC = "desktop-linux"


class ItemType(str, Enum):
    """Type of item in the reMarkable cloud storage."""

    DOCUMENT = "DocumentType"
    COLLECTION = "CollectionType"


class DeviceRegistrationRequest(BaseModel):
    """Request body for device registration."""

    code: str = Field(..., description="One-time pairing code")
    device_desc: str = Field(
        default=DEFAULT_DEVICE_DESC,
        alias="deviceDesc",
        description="Device description",
    )
    device_id: str = Field(
        ...,
        alias="deviceID",
        description="Unique device identifier (UUID)",
    )

    model_config = {"populate_by_name": True}


class DeviceCredential(BaseModel):
    """A paired device: its identifier and long-lived bearer token."""

    device_id: str = Field(..., alias="deviceID")
    token: str = Field(..., description="Long-lived device token")

    model_config = {"populate_by_name": True}


class ServiceDiscoveryResponse(BaseModel):
    """Response from the service discovery endpoint."""

    status: str | None = Field(default=None, alias="Status")
    host: str = Field(default="", alias="Host")

    model_config = {"populate_by_name": True}


class DocumentMetadata(BaseModel):
    """Metadata of one item in the document store.

    Field order matches the body of an update-status request. Fields accept
    the upstream names, the Python names, or their camelCase spellings
    (``dateModified``, ``type``, ``visibleName``, ``currentPage``). Unknown
    keys are rejected.
    """

    id: str = Field(..., alias="ID", description="UUID of the item")
    version: int = Field(..., alias="Version", description="Version number for sync")
    date_modified: str = Field(
        default="",
        alias="ModifiedClient",
        validation_alias=AliasChoices(
            "ModifiedClient", "dateModified", "date_modified"
        ),
        description="Last modification timestamp from client",
    )
    item_type: ItemType = Field(
        default=ItemType.DOCUMENT,
        alias="Type",
        validation_alias=AliasChoices("Type", "type", "item_type"),
        description="Type of item (DocumentType or CollectionType)",
    )
    visible_name: str = Field(
        default="",
        alias="VissibleName",  # Note: API uses this spelling
        validation_alias=AliasChoices(
            "VissibleName", "visibleName", "visible_name"
        ),
        description="Display name of the item",
    )
    current_page: int = Field(
        default=0,
        alias="CurrentPage",
        validation_alias=AliasChoices("CurrentPage", "currentPage", "current_page"),
    )
    bookmarked: bool = Field(default=False, alias="Bookmarked")
    parent: str = Field(
        default="",
        alias="Parent",
        description="UUID of parent folder (empty for root items)",
    )

    model_config = {"populate_by_name": True, "extra": "forbid"}

    @property
    def is_folder(self) -> bool:
        """Check if this item is a folder/collection."""
        return self.item_type == ItemType.COLLECTION

    @classmethod
    def now_timestamp(cls) -> str:
        """Get current UTC timestamp in the format expected by the API."""
        return datetime.now(tz=UTC).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


class StoredDocument(DocumentMetadata):
    """An item as returned by a docs listing."""

    message: str = Field(default="", alias="Message")
    success: bool = Field(default=True, alias="Success")
    blob_url_get: str = Field(
        default="",
        alias="BlobURLGet",
        description="Signed URL for downloading content",
    )
    blob_url_get_expires: str = Field(default="", alias="BlobURLGetExpires")

    # Listings may grow fields this client does not know about
    model_config = {"populate_by_name": True, "extra": "ignore"}


class UploadRequestItem(BaseModel):
    """Request item for initiating an upload."""

    id: str = Field(..., alias="ID")
    item_type: ItemType = Field(default=ItemType.DOCUMENT, alias="Type")
    version: int = Field(default=1, alias="Version")

    model_config = {"populate_by_name": True}


class UploadSlot(BaseModel):
    """A newly reserved document id and the URL its blob must be PUT to."""

    doc_id: str
    upload_url: str


class DeleteItem(BaseModel):
    """Request item for deleting an item."""

    id: str = Field(..., alias="ID", description="UUID of the item to delete")
    version: int = Field(..., alias="Version", description="Current version of item")

    model_config = {"populate_by_name": True}


def parse_documents(data: Any) -> list[StoredDocument]:
    """Turn a raw docs payload into models. An empty payload gives []."""
    if not data:
        return []
    return [StoredDocument.model_validate(item) for item in data]
