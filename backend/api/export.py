"""Export endpoint and download route for exported files."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from document.exporter import CONTENT_TYPES, export_document, resolve_upload
from document.store import DocumentStore, get_store
from schemas import CamelModel, Document, Envelope, ExportEntry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["export"])


class ExportRequest(CamelModel):
    # Left as a plain string so unsupported values reach the exporter's message.
    format: str = "markdown"


class ExportResponse(CamelModel):
    export: ExportEntry
    document: Document


@router.post(
    "/api/export/{document_id}",
    response_model=Envelope[ExportResponse],
    response_model_by_alias=True,
)
async def export(
    document_id: str,
    body: ExportRequest | None = None,
    store: DocumentStore = Depends(get_store),
):
    """Render the document to a file under the upload dir and record the export."""
    fmt = body.format if body else "markdown"
    entry, document = await export_document(store, document_id, fmt)
    return Envelope(data=ExportResponse(export=entry, document=document))


@router.get("/uploads/{filename}")
async def download(filename: str):
    path = resolve_upload(filename)
    return FileResponse(
        path,
        media_type=CONTENT_TYPES.get(path.suffix, "application/octet-stream"),
        filename=path.name,
    )
