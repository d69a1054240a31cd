"""Async client for the reMarkable cloud document storage."""

from .auth import (
    AuthError,
    ConfigError,
    DeviceRegistrationError,
    InvalidOneTimeCode,
    UnknownDeviceType,
    UserAuthError,
    WrongApiVersion,
    authenticate_device,
    authenticate_user,
)
from .config import load_credential, save_credential
from .models import (
    DeviceCredential,
    DocumentMetadata,
    ItemType,
    StoredDocument,
    UploadSlot,
    parse_documents,
)
from .storage import (
    CloudError,
    ServiceDiscoveryError,
    UnexpectedStorageStatus,
    UnexpectedUploadUrlCount,
    UploadRequestError,
    UploadRequestFailed,
    delete_item,
    docs,
    get_storage_host,
    update_status,
    upload_request,
)
from .transport import new_id, query_string

__all__ = [
    # Auth
    "AuthError",
    "ConfigError",
    "DeviceRegistrationError",
    "InvalidOneTimeCode",
    "UnknownDeviceType",
    "UserAuthError",
    "WrongApiVersion",
    "authenticate_device",
    "authenticate_user",
    # Credentials
    "load_credential",
    "save_credential",
    # Models
    "DeviceCredential",
    "DocumentMetadata",
    "ItemType",
    "StoredDocument",
    "UploadSlot",
    "parse_documents",
    # Storage
    "CloudError",
    "ServiceDiscoveryError",
    "UnexpectedStorageStatus",
    "UnexpectedUploadUrlCount",
    "UploadRequestError",
    "UploadRequestFailed",
    "delete_item",
    "docs",
    "get_storage_host",
    "update_status",
    "upload_request",
    # Transport
    "new_id",
    "query_string",
]
