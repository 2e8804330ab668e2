"""Packaging of PDFs into the archive format the storage service accepts."""

from __future__ import annotations

import io
import zipfile

from .models import ContentDescriptor


def build_upload_package(doc_id: str, pdf_bytes: bytes) -> bytes:
    """Create a ZIP archive for document upload.

    The reMarkable API expects documents as ZIP files containing:
    - {uuid}.content - JSON metadata
    - {uuid}.pagedata - empty for PDFs
    - {uuid}.pdf - The actual PDF file

    Args:
        doc_id: UUID of the document; used for every entry name.
        pdf_bytes: The PDF payload.

    Returns:
        ZIP archive as bytes.
    """
    buffer = io.BytesIO()
    content_json = ContentDescriptor().model_dump_json(by_alias=True)

    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(f"{doc_id}.content", content_json)
        zf.writestr(f"{doc_id}.pagedata", b"")
        zf.writestr(f"{doc_id}.pdf", pdf_bytes)

    return buffer.getvalue()
