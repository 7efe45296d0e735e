"""Document persistence: one interface, a database and an in-memory backend.

The backend is chosen once at startup by ``select_store`` and handed to the
request handlers; it never changes while the process runs. The in-memory
backend loses everything on restart.
"""

import asyncio
import logging
import math
import uuid
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Iterable, Protocol

from fastapi import Request
from sqlalchemy import delete, func, or_, select, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from errors import InvalidInput, NotFound
from models import Base, DocumentRecord, create_session_factory
from schemas import (
    Document,
    DocumentDraft,
    DocumentPage,
    ExportEntry,
    GenerationResult,
    LabelCount,
    Pagination,
    RepoAnalysis,
    StatsOverview,
)

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT_SECONDS = 5
TOP_STATS = 5
_UNKNOWN_LABELS = {"", "unknown"}


class DocumentStore(Protocol):
    mode: str  # "database" or "memory"

    async def create(self, draft: DocumentDraft) -> Document: ...

    async def get(self, document_id: str) -> Document: ...

    async def list(
        self,
        page: int = 1,
        page_size: int = 12,
        search: str | None = None,
        status: str | None = None,
    ) -> DocumentPage: ...

    async def append_export(self, document_id: str, entry: ExportEntry) -> Document: ...

    async def delete(self, document_id: str) -> None: ...

    async def stats(self) -> StatsOverview: ...


def build_draft(
    repo_data: RepoAnalysis, result: GenerationResult, processing_ms: int
) -> DocumentDraft:
    """Document fields for a successful generation.

    Raises:
        InvalidInput: The analysis carries no repository URL.
    """
    meta = repo_data.metadata
    if not meta.url:
        raise InvalidInput("Repository URL missing from repository data")
    name = meta.repo_name or "Repository"
    tags = []
    for label in (meta.language, meta.framework):
        if label and label.lower() not in _UNKNOWN_LABELS and label not in tags:
            tags.append(label)
    return DocumentDraft(
        title=f"{name} Documentation",
        description=f"AI-generated documentation for {name}",
        github_url=meta.url,
        content=result.content,
        format="markdown",
        metadata=meta,
        ai_model=result.model,
        status="completed",
        processing_time=processing_ms,
        tags=tags,
    )


def paginate(total: int, page: int, page_size: int) -> Pagination:
    total_pages = math.ceil(total / page_size) if total else 0
    return Pagination(
        current_page=page,
        total_pages=total_pages,
        total_documents=total,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )


def summarize(rows: Iterable[tuple[str, int, dict[str, Any]]]) -> StatsOverview:
    """Dashboard numbers from ``(status, processing_time, metadata)`` rows."""
    statuses: Counter = Counter()
    languages: Counter = Counter()
    frameworks: Counter = Counter()
    total_time = 0
    for status, processing_time, metadata in rows:
        statuses[status] += 1
        total_time += processing_time or 0
        metadata = metadata or {}
        languages[metadata.get("language") or "Unknown"] += 1
        frameworks[metadata.get("framework") or "Unknown"] += 1
    total = sum(statuses.values())
    return StatsOverview(
        total_documents=total,
        completed_documents=statuses["completed"],
        processing_documents=statuses["processing"],
        failed_documents=statuses["failed"],
        avg_processing_time=total_time / total if total else 0.0,
        language_stats=[LabelCount(name=k, count=v) for k, v in languages.most_common(TOP_STATS)],
        framework_stats=[LabelCount(name=k, count=v) for k, v in frameworks.most_common(TOP_STATS)],
    )


class InMemoryDocumentStore:
    """Process-local list of documents with ``mem_<n>`` ids."""

    mode = "memory"

    def __init__(self):
        self._documents: list[Document] = []
        self._counter = 1
        self._lock = asyncio.Lock()

    async def create(self, draft: DocumentDraft) -> Document:
        now = datetime.now(timezone.utc)
        async with self._lock:
            document = Document(
                **draft.model_dump(),
                id=f"mem_{self._counter}",
                created_at=now,
                updated_at=now,
            )
            self._counter += 1
            self._documents.append(document)
        return document.model_copy(deep=True)

    def _find(self, document_id: str) -> Document:
        for document in self._documents:
            if document.id == document_id:
                return document
        raise NotFound("Document not found")

    async def get(self, document_id: str) -> Document:
        return self._find(document_id).model_copy(deep=True)

    async def list(
        self,
        page: int = 1,
        page_size: int = 12,
        search: str | None = None,
        status: str | None = None,
    ) -> DocumentPage:
        needle = search.lower() if search else None
        matches = [
            d
            for d in reversed(self._documents)
            if (not needle or needle in d.title.lower() or needle in d.description.lower())
            and (not status or d.status == status)
        ]
        # Stable sort over newest-inserted-first keeps equal timestamps newest first.
        matches.sort(key=lambda d: d.created_at, reverse=True)
        offset = (page - 1) * page_size
        return DocumentPage(
            documents=[d.model_copy(deep=True) for d in matches[offset : offset + page_size]],
            pagination=paginate(len(matches), page, page_size),
        )

    async def append_export(self, document_id: str, entry: ExportEntry) -> Document:
        async with self._lock:
            document = self._find(document_id)
            document.exports.append(entry)
            document.updated_at = datetime.now(timezone.utc)
            return document.model_copy(deep=True)

    async def delete(self, document_id: str) -> None:
        async with self._lock:
            self._documents.remove(self._find(document_id))

    async def stats(self) -> StatsOverview:
        return summarize(
            (d.status, d.processing_time, d.metadata.model_dump()) for d in self._documents
        )


class SqlDocumentStore:
    """Documents in the ``documents`` table via SQLAlchemy async sessions."""

    mode = "database"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], engine: AsyncEngine | None = None):
        self._session_factory = session_factory
        self._engine = engine
        # Serialises read-modify-write of the exports column within this process;
        # FOR UPDATE covers other processes on databases that support it.
        self._append_lock = asyncio.Lock()

    async def create(self, draft: DocumentDraft) -> Document:
        now = datetime.now(timezone.utc)
        data = draft.model_dump(mode="json")
        record = DocumentRecord(
            id=str(uuid.uuid4()),
            title=data["title"],
            description=data["description"],
            github_url=data["github_url"],
            content=data["content"],
            format=data["format"],
            repo_metadata=data["metadata"],
            ai_model=data["ai_model"],
            status=data["status"],
            processing_time=data["processing_time"],
            exports=data["exports"],
            tags=data["tags"],
            created_at=now,
            updated_at=now,
        )
        async with self._session_factory() as session:
            session.add(record)
            await session.commit()
        return _to_document(record)

    async def _load(
        self, session: AsyncSession, document_id: str, for_update: bool = False
    ) -> DocumentRecord:
        query = select(DocumentRecord).where(DocumentRecord.id == document_id)
        if for_update:
            query = query.with_for_update()
        result = await session.execute(query)
        record = result.scalar_one_or_none()
        if record is None:
            raise NotFound("Document not found")
        return record

    async def get(self, document_id: str) -> Document:
        async with self._session_factory() as session:
            return _to_document(await self._load(session, document_id))

    async def list(
        self,
        page: int = 1,
        page_size: int = 12,
        search: str | None = None,
        status: str | None = None,
    ) -> DocumentPage:
        conditions = []
        if search:
            pattern = f"%{_escape_like(search)}%"
            conditions.append(
                or_(
                    DocumentRecord.title.ilike(pattern, escape="\\"),
                    DocumentRecord.description.ilike(pattern, escape="\\"),
                )
            )
        if status:
            conditions.append(DocumentRecord.status == status)

        async with self._session_factory() as session:
            count_result = await session.execute(
                select(func.count()).select_from(DocumentRecord).where(*conditions)
            )
            total = count_result.scalar() or 0

            result = await session.execute(
                select(DocumentRecord)
                .where(*conditions)
                .order_by(DocumentRecord.created_at.desc())
                .offset((page - 1) * page_size)
                .limit(page_size)
            )
            records = result.scalars().all()

        return DocumentPage(
            documents=[_to_document(r) for r in records],
            pagination=paginate(total, page, page_size),
        )

    async def append_export(self, document_id: str, entry: ExportEntry) -> Document:
        async with self._append_lock, self._session_factory() as session:
            record = await self._load(session, document_id, for_update=True)
            # Reassign so the JSON column is flagged dirty.
            record.exports = [*(record.exports or []), entry.model_dump(mode="json")]
            record.updated_at = datetime.now(timezone.utc)
            await session.commit()
            return _to_document(record)

    async def delete(self, document_id: str) -> None:
        async with self._session_factory() as session:
            await self._load(session, document_id)
            await session.execute(delete(DocumentRecord).where(DocumentRecord.id == document_id))
            await session.commit()

    async def stats(self) -> StatsOverview:
        async with self._session_factory() as session:
            result = await session.execute(
                select(
                    DocumentRecord.status,
                    DocumentRecord.processing_time,
                    DocumentRecord.repo_metadata,
                )
            )
            rows = result.all()
        return summarize((r[0], r[1], r[2]) for r in rows)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()


def _to_document(record: DocumentRecord) -> Document:
    return Document(
        id=record.id,
        title=record.title,
        description=record.description or "",
        github_url=record.github_url,
        content=record.content,
        format=record.format,
        metadata=record.repo_metadata or {},
        ai_model=record.ai_model,
        status=record.status,
        processing_time=record.processing_time or 0,
        exports=record.exports or [],
        tags=record.tags or [],
        created_at=_aware(record.created_at),
        updated_at=_aware(record.updated_at),
    )


def _aware(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything is stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def _init_database(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.execute(text("SELECT 1"))


async def select_store(database_url: str | None) -> DocumentStore:
    """Pick the backend for the lifetime of the process.

    A reachable database wins; no URL or any connection failure falls back
    to memory.
    """
    if not database_url:
        logger.warning("No DATABASE_URL provided - using in-memory storage")
        return InMemoryDocumentStore()

    engine = None
    try:
        engine, session_factory = create_session_factory(database_url)
        await asyncio.wait_for(_init_database(engine), timeout=CONNECT_TIMEOUT_SECONDS)
    except Exception as e:
        logger.error(f"Database connection error: {e}")
        logger.warning("Continuing without database - using in-memory storage")
        if engine is not None:
            await engine.dispose()
        return InMemoryDocumentStore()

    logger.info("Connected to database - using persistent storage")
    return SqlDocumentStore(session_factory, engine=engine)


def get_store(request: Request) -> DocumentStore:
    """FastAPI dependency: the store selected at startup."""
    return request.app.state.store
