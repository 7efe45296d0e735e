"""Generated documentation records."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class DocumentRecord(Base):
    __tablename__ = "documents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    github_url: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    format: Mapped[str] = mapped_column(String(20), nullable=False, default="markdown")
    # "metadata" is reserved on declarative classes
    repo_metadata: Mapped[dict] = mapped_column("metadata", JSON, nullable=False, default=dict)
    ai_model: Mapped[str] = mapped_column(String(200), nullable=False, default="openrouter")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="completed", index=True)
    processing_time: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    exports: Mapped[list] = mapped_column(JSON, nullable=False, default=list)  # append-only
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
