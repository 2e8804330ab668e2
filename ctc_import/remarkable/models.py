"""Pydantic models for reMarkable Cloud API."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

# Default device description sent during registration
DEVICE_DESC = "desktop-windows"


def now_timestamp() -> str:
    """Get current UTC timestamp in the format expected by the API."""
    return datetime.now(tz=UTC).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


class DeviceRegistrationRequest(BaseModel):
    """Request body for device registration."""

    code: str = Field(..., description="One-time registration code")
    device_desc: str = Field(
        default=DEVICE_DESC,
        alias="deviceDesc",
        description="Device description",
    )
    device_id: str = Field(
        ...,
        alias="deviceID",
        description="Unique device identifier (UUID)",
    )

    model_config = {"populate_by_name": True}


# =============================================================================
# Cloud Storage API Models
# =============================================================================


class ItemType(str, Enum):
    """Type of item in the reMarkable cloud storage."""

    DOCUMENT = "DocumentType"
    COLLECTION = "CollectionType"


class ServiceDiscoveryResponse(BaseModel):
    """Response from the service discovery endpoint."""

    status: str = Field(default="", alias="Status")
    host: str = Field(..., alias="Host")

    model_config = {"populate_by_name": True}


class RemoteEntry(BaseModel):
    """A node in the cloud storage listing.

    Documents and collections (folders) share this shape. Entries link to
    their folder through ``parent``; an empty or null parent means the root.
    """

    id: str = Field(..., alias="ID", description="UUID of the item")
    item_type: ItemType = Field(
        ...,
        alias="Type",
        description="Type of item (DocumentType or CollectionType)",
    )
    parent: str | None = Field(
        default=None,
        alias="Parent",
        description="UUID of parent folder (empty for root items)",
    )
    visible_name: str = Field(
        default="",
        alias="VissibleName",  # Note: API uses this spelling
        description="Display name of the item",
    )

    model_config = {"populate_by_name": True}

    @property
    def is_folder(self) -> bool:
        """Check if this item is a folder/collection."""
        return self.item_type == ItemType.COLLECTION


class Directory(BaseModel):
    """A collection with its materialized path, e.g. ``/Puzzles/Sudoku/``.

    The implicit root has no id and the path ``/``.
    """

    id: str | None = None
    path: str = "/"

    @property
    def is_root(self) -> bool:
        return self.id is None


ROOT_DIRECTORY = Directory(id=None, path="/")


class UploadRequestItem(BaseModel):
    """Request item for reserving an upload slot."""

    id: str = Field(..., alias="ID", description="UUID for the new item")
    item_type: ItemType = Field(
        default=ItemType.DOCUMENT, alias="Type", description="Type of item"
    )
    version: int = Field(default=1, alias="Version", description="1 for new items")

    model_config = {"populate_by_name": True}


class StatusResponse(BaseModel):
    """Per-item status returned by the upload request and update endpoints."""

    message: str = Field(default="", alias="Message", description="Status message")
    success: bool = Field(..., alias="Success", description="Operation status")

    model_config = {"populate_by_name": True}


class UploadRequestResponse(StatusResponse):
    """Response from upload request endpoint."""

    blob_url_put: str = Field(
        default="",
        alias="BlobURLPut",
        description="Signed URL for uploading content",
    )


class DocumentMetadata(BaseModel):
    """Metadata committed through the update-status endpoint.

    Field aliases mirror the mixed casing the storage service expects.
    """

    id: str = Field(..., alias="ID")
    visible_name: str = Field(..., alias="VissibleName")
    deleted: bool = False
    last_modified: str = Field(default_factory=now_timestamp, alias="lastModified")
    modified_client: str = Field(default_factory=now_timestamp, alias="ModifiedClient")
    metadata_modified: bool = Field(default=False, alias="metadatamodified")
    modified: bool = False
    parent: str = Field(default="", description="UUID of parent folder")
    pinned: bool = False
    synced: bool = True
    item_type: ItemType = Field(default=ItemType.DOCUMENT, alias="type")
    version: int = 1

    model_config = {"populate_by_name": True}


class ContentDescriptor(BaseModel):
    """The ``<id>.content`` entry of an upload package."""

    extra_metadata: dict[str, Any] = Field(default_factory=dict, alias="extraMetadata")
    file_type: str = Field(default="pdf", alias="fileType")
    last_opened_page: int = Field(default=0, alias="lastOpenedPage")
    line_height: int = Field(default=-1, alias="lineHeight")
    margins: int = 180
    page_count: int = Field(default=0, alias="pageCount")
    text_scale: int = Field(default=1, alias="textScale")
    transform: dict[str, Any] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}
