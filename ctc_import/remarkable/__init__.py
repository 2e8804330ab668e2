"""Native Python client for the reMarkable Cloud API."""

from .archive import build_upload_package
from .auth import (
    AuthError,
    DeviceRegistrationError,
    InvalidOneTimeCodeError,
    TokenRefreshError,
    get_auth_token,
    get_device_token,
    validate_one_time_code,
)
from .cloud import (
    CloudClient,
    CloudError,
    HierarchyError,
    ListItemsError,
    PartialUploadError,
    ServiceDiscoveryError,
    UploadError,
    discover_storage_host,
    get_directory_hierarchy,
)
from .http import RemarkableError, RequestError, request
from .models import (
    ROOT_DIRECTORY,
    ContentDescriptor,
    DeviceRegistrationRequest,
    Directory,
    DocumentMetadata,
    ItemType,
    RemoteEntry,
    ServiceDiscoveryResponse,
)

__all__ = [
    # HTTP
    "RemarkableError",
    "RequestError",
    "request",
    # Auth
    "AuthError",
    "DeviceRegistrationError",
    "DeviceRegistrationRequest",
    "InvalidOneTimeCodeError",
    "TokenRefreshError",
    "get_auth_token",
    "get_device_token",
    "validate_one_time_code",
    # Cloud
    "CloudClient",
    "CloudError",
    "ContentDescriptor",
    "Directory",
    "DocumentMetadata",
    "HierarchyError",
    "ItemType",
    "ListItemsError",
    "PartialUploadError",
    "ROOT_DIRECTORY",
    "RemoteEntry",
    "ServiceDiscoveryError",
    "ServiceDiscoveryResponse",
    "UploadError",
    "build_upload_package",
    "discover_storage_host",
    "get_directory_hierarchy",
]
