"""Documentation generation and model catalog endpoints."""

import logging
import time

from fastapi import APIRouter, Depends
from pydantic import Field

from document.store import DocumentStore, build_draft, get_store
from errors import InvalidInput
from generation.openrouter import generate_documentation, list_models
from schemas import (
    CamelModel,
    Document,
    Envelope,
    GenerationOptions,
    GenerationResult,
    ModelInfo,
    RepoAnalysis,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])


class GenerateRequest(CamelModel):
    repo_data: RepoAnalysis
    options: GenerationOptions = Field(default_factory=GenerationOptions)


class GenerateResponse(CamelModel):
    document: Document
    ai_result: GenerationResult


@router.post("/generate", response_model=Envelope[GenerateResponse], response_model_by_alias=True)
async def generate(body: GenerateRequest, store: DocumentStore = Depends(get_store)):
    """Generate documentation and store it. Nothing is stored when generation fails."""
    if not body.repo_data.metadata.url:
        raise InvalidInput("Repository URL missing from repository data")

    started = time.monotonic()
    result = await generate_documentation(body.repo_data, body.options)
    processing_ms = int((time.monotonic() - started) * 1000)

    document = await store.create(build_draft(body.repo_data, result, processing_ms))
    logger.info(f"Stored document {document.id} ({store.mode}) in {processing_ms}ms")
    return Envelope(data=GenerateResponse(document=document, ai_result=result))


@router.get("/models", response_model=Envelope[list[ModelInfo]], response_model_by_alias=True)
async def models():
    return Envelope(data=await list_models())
