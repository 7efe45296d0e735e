"""Master test fixtures.

Environment variables are set BEFORE any application imports so that
``config.Settings()`` initialises with test-safe values and never
touches Docker secrets, a real database or the real upload directory.
"""

import os
import tempfile

# ── Set test env vars before any app import ──────────────────────────
_UPLOAD_ROOT = tempfile.mkdtemp(prefix="doc-creator-tests-")
os.environ.update({
    "APP_ENV": "development",
    "DATABASE_URL": "",
    "OPENROUTER_API_KEY": "test-openrouter-key",
    "GITHUB_TOKEN": "",
    "UPLOAD_DIR": os.path.join(_UPLOAD_ROOT, "uploads"),
    "TEMP_DIR": os.path.join(_UPLOAD_ROOT, "temp"),
})

import pytest

from httpx import ASGITransport, AsyncClient

# Now safe to import application code
from config import settings
from document.store import InMemoryDocumentStore, get_store
from schemas import GenerationResult, RepoAnalysis, RepoMetadata


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    """Point exports at a fresh per-test directory."""
    directory = tmp_path / "uploads"
    directory.mkdir()
    monkeypatch.setattr(settings, "upload_dir", str(directory))
    return directory


@pytest.fixture
def memory_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
async def test_client(memory_store: InMemoryDocumentStore, upload_dir):
    """HTTPX async client wired to the FastAPI app, with store override.

    The startup event is NOT run, so no store selection or retention sweep
    happens; ``app.state.store`` is set for the health endpoint.
    """
    from main import app

    app.dependency_overrides[get_store] = lambda: memory_store
    app.state.store = memory_store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def repo_data() -> RepoAnalysis:
    """Analyzer output for a small React + Express project."""
    return RepoAnalysis(
        metadata=RepoMetadata(
            repo_name="demo-app",
            repo_owner="acme",
            branch="main",
            url="https://github.com/acme/demo-app",
            language="JavaScript",
            framework="React",
            file_count=3,
            description="Demo application",
        ),
        files=[
            {"name": "package.json", "path": "package.json", "size": 512, "language": "JSON"},
            {"name": "App.js", "path": "src/App.js", "size": 2048, "language": "JavaScript"},
            {"name": "server.js", "path": "src/server.js", "size": 1024, "language": "JavaScript"},
        ],
        readme="# Demo\n\nA demo app.",
        package_json={
            "name": "demo-app",
            "description": "Demo application",
            "scripts": {"start": "node src/server.js", "test": "jest"},
            "dependencies": {"react": "^18.0.0", "express": "^4.18.0"},
        },
    )


@pytest.fixture
def generation_result() -> GenerationResult:
    return GenerationResult(
        content="# demo-app\n\nGenerated docs.",
        model="openai/gpt-3.5-turbo",
        usage={"prompt_tokens": 100, "completion_tokens": 20, "total_tokens": 120},
        finish_reason="stop",
    )
