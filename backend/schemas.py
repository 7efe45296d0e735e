"""Pydantic models shared by the analyzer, generator, store and API.

Fields are snake_case in Python and camelCase on the wire, which is what
the frontend reads and sends back.
"""

from datetime import datetime
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DocumentFormat = Literal["markdown", "pdf", "docx"]
DocumentStatus = Literal["processing", "completed", "failed"]

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Repository analysis ──────────────────────────────────────────────


class FileEntry(CamelModel):
    name: str
    path: str
    size: int | None = None
    language: str = "Unknown"


class RepoMetadata(CamelModel):
    """Descriptive fields captured at analysis time.

    Extra keys sent back by the client are kept so that a document stores
    whatever the analyzer produced.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    repo_name: str = ""
    repo_owner: str = ""
    branch: str | None = None
    url: str | None = None
    language: str = "Unknown"
    framework: str = "Unknown"
    file_count: int = 0
    total_lines: int = 0
    description: str = ""
    topics: list[str] = Field(default_factory=list)
    stars: int = 0
    forks: int = 0
    last_updated: str | None = None
    created_at: str | None = None
    homepage: str | None = None
    license: str | None = None


class RepoInfo(CamelModel):
    name: str
    description: str | None = None
    language: str | None = None
    stars: int = 0
    forks: int = 0
    issues: int = 0
    last_commit: str | None = None
    topics: list[str] = Field(default_factory=list)


class RepoInsights(CamelModel):
    project_type: str = "Web Application"
    architecture: str = "Unknown"
    main_features: list[str] = Field(default_factory=list)
    key_components: list[str] = Field(default_factory=list)
    dependencies: dict[str, dict[str, Any]] | None = None
    file_structure: dict[str, list[str]] = Field(default_factory=dict)
    file_types: dict[str, int] = Field(default_factory=dict)
    has_tests: bool = False
    has_docs: bool = False
    has_docker: bool = False
    has_ci: bool = Field(default=False, alias="hasCI")


class RepoAnalysis(CamelModel):
    """Analyzer output: everything the prompt builder needs."""

    metadata: RepoMetadata = Field(default_factory=RepoMetadata)
    files: list[FileEntry] = Field(default_factory=list)
    readme: str | None = None
    package_json: dict[str, Any] | None = None
    repo_info: RepoInfo | None = None
    analysis: RepoInsights | None = None


# ── Generation ───────────────────────────────────────────────────────


class GenerationOptions(CamelModel):
    model: str | None = None
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, ge=1)
    style: str = "professional"
    format: str = "markdown"
    detail: Literal["minimal", "extended"] = "minimal"


class GenerationResult(CamelModel):
    content: str
    model: str
    usage: dict[str, Any] | None = None
    finish_reason: str | None = None


class ModelInfo(CamelModel):
    id: str
    name: str


# ── Documents ────────────────────────────────────────────────────────


class ExportEntry(CamelModel):
    format: DocumentFormat
    url: str
    file_path: str
    size: int
    created_at: datetime
    note: str | None = None


class DocumentDraft(CamelModel):
    """A document before the store assigns an id and timestamps."""

    title: str
    description: str = ""
    github_url: str = Field(min_length=1)
    content: str = Field(min_length=1)
    format: DocumentFormat = "markdown"
    metadata: RepoMetadata = Field(default_factory=RepoMetadata)
    ai_model: str = "openrouter"
    status: DocumentStatus = "completed"
    processing_time: int = 0
    exports: list[ExportEntry] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class Document(DocumentDraft):
    id: str
    created_at: datetime
    updated_at: datetime


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_documents: int
    has_next_page: bool
    has_prev_page: bool


class DocumentPage(CamelModel):
    documents: list[Document]
    pagination: Pagination


class LabelCount(CamelModel):
    name: str | None = Field(default=None, alias="_id")
    count: int


class StatsOverview(CamelModel):
    total_documents: int = 0
    completed_documents: int = 0
    processing_documents: int = 0
    failed_documents: int = 0
    avg_processing_time: float = 0.0
    language_stats: list[LabelCount] = Field(default_factory=list)
    framework_stats: list[LabelCount] = Field(default_factory=list)


class Envelope(BaseModel, Generic[T]):
    """Success envelope every endpoint responds with."""

    success: bool = True
    data: T
