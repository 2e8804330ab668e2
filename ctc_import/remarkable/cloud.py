"""Cloud storage client for reMarkable Cloud API.

Storage Operations:
- Discover the document-storage host
- List documents and folders
- Resolve folder paths
- Upload documents (PDFs)
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, TypeVar

from pydantic import ValidationError

from .archive import build_upload_package
from .auth import get_auth_token
from .http import UPLOAD_TIMEOUT, RemarkableError, RequestError, request
from .models import (
    ROOT_DIRECTORY,
    Directory,
    DocumentMetadata,
    RemoteEntry,
    ServiceDiscoveryResponse,
    StatusResponse,
    UploadRequestItem,
    UploadRequestResponse,
)

if TYPE_CHECKING:
    from typing import Self

    import httpx

logger = logging.getLogger(__name__)

StatusT = TypeVar("StatusT", bound=StatusResponse)

# Service Discovery URL
SERVICE_DISCOVERY_URL = (
    "https://service-manager-production-dot-remarkable-production.appspot.com"
    "/service/json/1/document-storage?environment=production"
    "&group=auth0%7C5a68dc51cb30df3877a1d7c4&apiVer=2"
)

# API endpoints (relative to storage host)
LIST_DOCS_ENDPOINT = "/document-storage/json/2/docs"
UPLOAD_REQUEST_ENDPOINT = "/document-storage/json/2/upload/request"
UPDATE_STATUS_ENDPOINT = "/document-storage/json/2/upload/update-status"

# Root folder constant (empty string means root)
ROOT_FOLDER = ""


class CloudError(RemarkableError):
    """Base exception for cloud storage errors."""

    pass


class ServiceDiscoveryError(CloudError):
    """Raised when service discovery fails."""

    pass


class ListItemsError(CloudError):
    """Raised when the listing cannot be parsed."""

    pass


class HierarchyError(CloudError):
    """Raised when folder parent links are dangling or circular."""

    pass


class UploadError(CloudError):
    """Raised when upload fails."""

    pass


class PartialUploadError(UploadError):
    """Raised when the blob was transferred but the metadata commit failed.

    The blob stays orphaned on the server under ``doc_id``.
    """

    def __init__(self, doc_id: str, message: str) -> None:
        self.doc_id = doc_id
        super().__init__(f"Document {doc_id} uploaded but not committed: {message}")


def discover_storage_host() -> str:
    """Discover the storage host from the service manager.

    Returns:
        The storage host name.

    Raises:
        RequestError: If the service manager returns an error.
        ServiceDiscoveryError: If the response is unusable.
    """
    response = request("GET", SERVICE_DISCOVERY_URL)

    try:
        discovery = ServiceDiscoveryResponse.model_validate(response.json())
    except (ValueError, ValidationError) as e:
        raise ServiceDiscoveryError(f"Malformed discovery response: {e}") from e

    if discovery.status and discovery.status != "OK":
        raise ServiceDiscoveryError(f"Discovery returned status {discovery.status}")
    if not discovery.host:
        raise ServiceDiscoveryError("Discovery returned no host")

    return discovery.host


def _resolve_path(
    directory: RemoteEntry, collections: dict[str, RemoteEntry]
) -> str:
    names: list[str] = []
    visited: set[str] = set()
    current = directory

    while True:
        if current.id in visited:
            raise HierarchyError(f"Circular parent chain at folder {current.id}")
        visited.add(current.id)
        names.append(current.visible_name)

        if not current.parent:
            break

        parent = collections.get(current.parent)
        if parent is None:
            raise HierarchyError(
                f"Parent {current.parent} of folder {current.id} is not in the listing"
            )
        current = parent

    return "/" + "".join(f"{name}/" for name in reversed(names))


def get_directory_hierarchy(entries: list[RemoteEntry]) -> list[Directory]:
    """Build full paths for every folder in a listing.

    Args:
        entries: Flat listing of documents and folders.

    Returns:
        One Directory per folder, in no particular order. The root is not
        included.

    Raises:
        HierarchyError: If a parent is missing or the links form a cycle.
    """
    collections = {entry.id: entry for entry in entries if entry.is_folder}

    return [
        Directory(id=entry.id, path=_resolve_path(entry, collections))
        for entry in collections.values()
    ]


def _first_status(
    response: httpx.Response, model: type[StatusT], phase: str
) -> StatusT:
    """Parse the first item of an array response and check its Success flag."""
    try:
        data = response.json()
    except ValueError as e:
        raise UploadError(f"Malformed response from {phase}: {e}") from e

    if not isinstance(data, list) or not data:
        raise UploadError(f"Empty response from {phase}")

    try:
        status = model.model_validate(data[0])
    except ValidationError as e:
        raise UploadError(f"Malformed response from {phase}: {e}") from e

    if not status.success:
        raise UploadError(f"Request unsuccessful: {status.message}")

    return status


class CloudClient:
    """Cloud storage client for reMarkable Cloud API.

    Holds the auth token and storage host for the duration of one run.

    Example:
        >>> cloud = CloudClient.connect(device_token)
        >>> directories = cloud.list_directories()
        >>> cloud.upload_pdf(pdf_bytes, "My Document", directories[0].id)

    Attributes:
        auth_token: Bearer token for storage calls.
        storage_host: The discovered storage host name.
    """

    def __init__(self, auth_token: str, storage_host: str) -> None:
        self.auth_token = auth_token
        self.storage_host = storage_host

    @classmethod
    def connect(cls, device_token: str) -> Self:
        """Fetch an auth token and discover the storage host.

        Args:
            device_token: Long-lived device token from registration.

        Returns:
            CloudClient ready for storage calls.
        """
        logger.info("Fetching auth token...")
        auth_token = get_auth_token(device_token)

        logger.info("Discovering storage API host name...")
        storage_host = discover_storage_host()
        logger.debug("Storage host is %s", storage_host)

        return cls(auth_token, storage_host)

    def _get_storage_url(self, endpoint: str) -> str:
        """Build full URL for a storage endpoint."""
        return f"https://{self.storage_host}{endpoint}"

    def _get_auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.auth_token}"}

    def list_all_files(self) -> list[RemoteEntry]:
        """List all items in the cloud storage.

        Returns:
            Every document and folder in the account.

        Raises:
            RequestError: If the request fails.
            ListItemsError: If the listing cannot be parsed.
        """
        response = request(
            "GET",
            self._get_storage_url(LIST_DOCS_ENDPOINT),
            headers=self._get_auth_headers(),
        )

        try:
            data = response.json()
            # Handle empty response
            if not data:
                return []
            return [RemoteEntry.model_validate(item) for item in data]
        except (ValueError, TypeError, ValidationError) as e:
            raise ListItemsError(f"Malformed listing: {e}") from e

    def list_directories(self) -> list[Directory]:
        """List every folder plus the root, sorted by path."""
        directories = get_directory_hierarchy(self.list_all_files())
        directories.append(ROOT_DIRECTORY)
        directories.sort(key=lambda directory: directory.path)
        return directories

    def reserve_upload(self, doc_id: str) -> str:
        """Create the metadata placeholder for a new document.

        Returns:
            The pre-signed URL to PUT the document archive to.

        Raises:
            RequestError: If the request fails.
            UploadError: If the server reports failure or gives no URL.
        """
        upload_request = UploadRequestItem(id=doc_id)

        response = request(
            "PUT",
            self._get_storage_url(UPLOAD_REQUEST_ENDPOINT),
            headers=self._get_auth_headers(),
            json=[upload_request.model_dump(by_alias=True, mode="json")],
        )

        status = _first_status(response, UploadRequestResponse, "upload request")
        if not status.blob_url_put:
            raise UploadError("No upload URL in response")

        return status.blob_url_put

    def transfer_blob(self, blob_url: str, archive: bytes) -> None:
        """PUT the archive to the pre-signed URL (no auth header)."""
        request("PUT", blob_url, content=archive, timeout=UPLOAD_TIMEOUT)

    def commit_metadata(self, metadata: DocumentMetadata) -> None:
        """Commit document metadata through the update-status endpoint.

        Raises:
            RequestError: If the request fails.
            UploadError: If the server reports failure.
        """
        response = request(
            "PUT",
            self._get_storage_url(UPDATE_STATUS_ENDPOINT),
            headers=self._get_auth_headers(),
            json=[metadata.model_dump(by_alias=True, mode="json")],
        )
        _first_status(response, StatusResponse, "update status")

    def upload_pdf(
        self,
        pdf_bytes: bytes,
        name: str,
        parent_id: str | None = None,
    ) -> DocumentMetadata:
        """Upload a PDF to the cloud.

        Reserves a slot, transfers the packaged archive and commits the
        metadata, in that order. No step is retried.

        Args:
            pdf_bytes: The PDF payload.
            name: Display name of the document.
            parent_id: UUID of parent folder (None for root).

        Returns:
            The committed metadata.

        Raises:
            RequestError: If reserve or transfer fails at the HTTP level.
            UploadError: If the server rejects the reservation.
            PartialUploadError: If the commit fails after the transfer.
        """
        doc_id = str(uuid.uuid4())

        logger.info("Creating metadata placeholder...")
        blob_url = self.reserve_upload(doc_id)

        logger.info("Uploading file...")
        self.transfer_blob(blob_url, build_upload_package(doc_id, pdf_bytes))

        logger.info("Updating document metadata...")
        metadata = DocumentMetadata(
            id=doc_id,
            visible_name=name,
            parent=parent_id or ROOT_FOLDER,
        )
        try:
            self.commit_metadata(metadata)
        except (RequestError, UploadError) as e:
            raise PartialUploadError(doc_id, str(e)) from e

        return metadata
