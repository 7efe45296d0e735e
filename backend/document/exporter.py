"""Render stored documents to downloadable files and keep the upload dir tidy."""

import html as html_mod
import io
import logging
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from docx import Document as DocxDocument
from docx.shared import Inches, Pt

from config import settings
from errors import ExportFailed, InvalidInput, NotFound
from schemas import Document, ExportEntry

from .markdown import parse_markdown
from .store import DocumentStore

logger = logging.getLogger(__name__)

PDF_NOTE = "HTML file generated. Use browser print to PDF or a PDF service."

CONTENT_TYPES = {
    ".md": "text/markdown",
    ".html": "text/html",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}

_HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <title>{title}</title>
  <style>
    body {{
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
      line-height: 1.6;
      color: #333;
      max-width: 800px;
      margin: 0 auto;
      padding: 20px;
    }}
    h1, h2, h3, h4, h5, h6 {{ color: #2c3e50; margin-top: 1.5em; margin-bottom: 0.5em; }}
    h1 {{ font-size: 2em; border-bottom: 2px solid #eee; padding-bottom: 0.3em; }}
    h2 {{ font-size: 1.5em; border-bottom: 1px solid #eee; padding-bottom: 0.3em; }}
    h3 {{ font-size: 1.25em; }}
    pre {{ background-color: #f6f8fa; padding: 16px; border-radius: 6px; overflow-x: auto; }}
    code {{ font-family: 'SFMono-Regular', Consolas, 'Liberation Mono', Menlo, monospace; font-size: 0.9em; }}
    blockquote {{ border-left: 4px solid #ddd; margin: 0; padding-left: 1em; color: #666; }}
  </style>
</head>
<body>
{body}
</body>
</html>
"""


def render_markdown(content: str) -> bytes:
    """Markdown file: the stored text, unchanged."""
    return content.encode("utf-8")


def render_html(content: str) -> str:
    """Standalone HTML page for the Markdown subset."""
    parts = []
    title = "Documentation"
    for node in parse_markdown(content):
        text = html_mod.escape(node.text)
        if node.kind == "heading":
            if title == "Documentation":
                title = node.text
            parts.append(f"<h{node.level}>{text}</h{node.level}>")
        elif node.kind == "code":
            parts.append(f"<pre><code>{text}</code></pre>")
        elif node.kind == "blockquote":
            parts.append(f"<blockquote><p>{text}</p></blockquote>")
        elif node.kind == "paragraph":
            parts.append(f"<p>{text}</p>")
    return _HTML_TEMPLATE.format(title=html_mod.escape(title), body="\n".join(parts))


def render_docx(content: str) -> bytes:
    """Word document, one paragraph or heading per Markdown node."""
    doc = DocxDocument()
    for node in parse_markdown(content):
        if node.kind == "heading":
            paragraph = doc.add_heading(node.text, level=node.level)
        elif node.kind == "code":
            paragraph = doc.add_paragraph()
            run = paragraph.add_run(node.text)
            run.font.name = "Courier New"
            run.font.size = Pt(10)
        elif node.kind == "blockquote":
            paragraph = doc.add_paragraph(node.text)
            paragraph.paragraph_format.left_indent = Inches(0.5)
        elif node.kind == "blank":
            paragraph = doc.add_paragraph()
        else:
            paragraph = doc.add_paragraph(node.text)
        paragraph.paragraph_format.space_before = Pt(10)
        if node.kind != "blank":
            paragraph.paragraph_format.space_after = Pt(10)
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


# format → (file extension, renderer)
EXPORTERS: dict[str, tuple[str, Callable[[str], bytes]]] = {
    "markdown": (".md", render_markdown),
    "pdf": (".html", lambda content: render_html(content).encode("utf-8")),
    "docx": (".docx", render_docx),
}


async def export_document(
    store: DocumentStore,
    document_id: str,
    fmt: str,
    upload_dir: str | Path | None = None,
) -> tuple[ExportEntry, Document]:
    """Render a document, write it under ``upload_dir`` and record the export.

    The document is resolved before anything is written, so an unknown id
    leaves no file behind.

    Raises:
        InvalidInput: Unsupported format.
        NotFound: Unknown document id.
        ExportFailed: Rendering or writing failed.
    """
    if fmt not in EXPORTERS:
        raise InvalidInput(
            f"Unsupported export format: {fmt}. Supported: {', '.join(EXPORTERS)}"
        )
    document = await store.get(document_id)

    ext, render = EXPORTERS[fmt]
    directory = Path(upload_dir or settings.upload_dir)
    filename = f"doc-{_safe_name(document.id)}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}{ext}"
    path = directory / filename

    try:
        data = render(document.content)
        directory.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except Exception as e:
        logger.exception(f"Export of document {document.id} to {fmt} failed: {e}")
        raise ExportFailed(f"Failed to export to {fmt.upper()}.") from e

    entry = ExportEntry(
        format=fmt,
        url=f"/uploads/{filename}",
        file_path=str(path),
        size=path.stat().st_size,
        created_at=datetime.now(timezone.utc),
        note=PDF_NOTE if fmt == "pdf" else None,
    )
    updated = await store.append_export(document.id, entry)
    logger.info(f"Exported document {document.id} as {fmt} ({entry.size} bytes) to {path}")
    return entry, updated


def resolve_upload(filename: str, upload_dir: str | Path | None = None) -> Path:
    """Path of an exported file inside the upload dir.

    Raises:
        NotFound: If the name escapes the directory or the file does not exist.
    """
    directory = Path(upload_dir or settings.upload_dir).resolve()
    path = (directory / filename).resolve()
    if path.parent != directory or not path.is_file():
        raise NotFound("File not found")
    return path


def cleanup_old_files(upload_dir: str | Path | None = None, max_age_hours: float | None = None) -> int:
    """Delete files older than the retention window. Returns how many were removed.

    Document records are left alone; their export entries may then point at
    files that no longer exist.
    """
    directory = Path(upload_dir or settings.upload_dir)
    if max_age_hours is None:
        max_age_hours = settings.export_retention_hours
    if not directory.is_dir():
        return 0

    cutoff = time.time() - max_age_hours * 3600
    removed = 0
    for path in directory.iterdir():
        try:
            if path.is_file() and path.stat().st_mtime < cutoff:
                path.unlink()
                removed += 1
        except OSError as e:
            logger.error(f"Failed to remove old export {path}: {e}")
    if removed:
        logger.info(f"Removed {removed} exports older than {max_age_hours}h from {directory}")
    return removed


def _safe_name(value: str) -> str:
    return "".join(c if c.isalnum() or c in "-_" else "_" for c in value)
