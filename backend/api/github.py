"""Repository analysis endpoint."""

from fastapi import APIRouter
from pydantic import Field

from repository.analyzer import analyze_repository
from schemas import CamelModel, Envelope, RepoAnalysis

router = APIRouter(prefix="/api/github", tags=["github"])


class AnalyzeRequest(CamelModel):
    repo_url: str = Field(min_length=1)


@router.post("/analyze", response_model=Envelope[RepoAnalysis], response_model_by_alias=True)
async def analyze(body: AnalyzeRequest):
    """Fetch metadata, file tree, README and manifest for a public repository."""
    return Envelope(data=await analyze_repository(body.repo_url))
