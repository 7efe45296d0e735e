"""Document library endpoints: listing, dashboard stats, lookup and deletion."""

import logging

from fastapi import APIRouter, Depends, Query

from document.store import DocumentStore, get_store
from schemas import Document, DocumentPage, DocumentStatus, Envelope, StatsOverview

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/docs", tags=["docs"])

MAX_PAGE_SIZE = 100


@router.get("", response_model=Envelope[DocumentPage], response_model_by_alias=True)
async def list_documents(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=MAX_PAGE_SIZE),
    search: str | None = None,
    status: DocumentStatus | None = None,
    store: DocumentStore = Depends(get_store),
):
    """Newest first; ``search`` matches title or description, case-insensitively."""
    result = await store.list(page=page, page_size=limit, search=search or None, status=status)
    return Envelope(data=result)


# Registered before /{document_id} so "stats" is not taken for an id.
@router.get("/stats/overview", response_model=Envelope[StatsOverview], response_model_by_alias=True)
async def stats_overview(store: DocumentStore = Depends(get_store)):
    return Envelope(data=await store.stats())


@router.get("/{document_id}", response_model=Envelope[Document], response_model_by_alias=True)
async def get_document(document_id: str, store: DocumentStore = Depends(get_store)):
    return Envelope(data=await store.get(document_id))


@router.delete("/{document_id}", response_model=Envelope[dict[str, str]])
async def delete_document(document_id: str, store: DocumentStore = Depends(get_store)):
    await store.delete(document_id)
    logger.info(f"Deleted document {document_id}")
    return Envelope(data={"id": document_id})
