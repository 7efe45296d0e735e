"""Tests for POST /api/export/{documentId} and GET /uploads/{filename}."""

import pytest

from document.store import build_draft


@pytest.fixture
async def document(memory_store, repo_data, generation_result):
    return await memory_store.create(build_draft(repo_data, generation_result, 500))


class TestExport:
    async def test_default_markdown(self, test_client, document, upload_dir):
        resp = await test_client.post(f"/api/export/{document.id}", json={})
        assert resp.status_code == 200
        data = resp.json()["data"]
        export = data["export"]
        assert export["format"] == "markdown"
        assert export["url"].startswith(f"/uploads/doc-{document.id}-")
        assert export["filePath"].endswith(".md")
        assert export["size"] > 0
        assert "createdAt" in export
        assert data["document"]["exports"] == [export]

    async def test_no_body(self, test_client, document, upload_dir):
        resp = await test_client.post(f"/api/export/{document.id}")
        assert resp.status_code == 200
        assert resp.json()["data"]["export"]["format"] == "markdown"

    async def test_pdf_note(self, test_client, document, upload_dir):
        resp = await test_client.post(f"/api/export/{document.id}", json={"format": "pdf"})
        export = resp.json()["data"]["export"]
        assert export["url"].endswith(".html")
        assert "browser print" in export["note"]

    async def test_twice_appends(self, test_client, document, upload_dir):
        await test_client.post(f"/api/export/{document.id}", json={"format": "markdown"})
        resp = await test_client.post(f"/api/export/{document.id}", json={"format": "docx"})
        formats = [e["format"] for e in resp.json()["data"]["document"]["exports"]]
        assert formats == ["markdown", "docx"]

    async def test_unknown_document(self, test_client, upload_dir):
        resp = await test_client.post("/api/export/mem_404", json={"format": "markdown"})
        assert resp.status_code == 404
        assert resp.json()["success"] is False
        assert list(upload_dir.iterdir()) == []

    async def test_unsupported_format(self, test_client, document, upload_dir):
        resp = await test_client.post(f"/api/export/{document.id}", json={"format": "rtf"})
        assert resp.status_code == 400
        assert "Unsupported export format" in resp.json()["error"]


class TestDownload:
    async def test_downloads_export(self, test_client, document, upload_dir):
        resp = await test_client.post(f"/api/export/{document.id}", json={"format": "markdown"})
        url = resp.json()["data"]["export"]["url"]

        download = await test_client.get(url)
        assert download.status_code == 200
        assert download.headers["content-type"].startswith("text/markdown")
        assert download.text == document.content

    async def test_docx_content_type(self, test_client, document, upload_dir):
        resp = await test_client.post(f"/api/export/{document.id}", json={"format": "docx"})
        download = await test_client.get(resp.json()["data"]["export"]["url"])
        assert download.headers["content-type"] == (
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
        )

    async def test_missing_file(self, test_client, upload_dir):
        resp = await test_client.get("/uploads/nothing-here.md")
        assert resp.status_code == 404
        assert resp.json()["success"] is False

    async def test_traversal(self, test_client, upload_dir):
        (upload_dir.parent / "secret.txt").write_text("secret")
        resp = await test_client.get("/uploads/..%2Fsecret.txt")
        assert resp.status_code == 404
