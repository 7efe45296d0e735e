"""Tests for /api/ai/generate and /api/ai/models."""

from unittest.mock import AsyncMock, patch

import pytest

from errors import GenerationTimeout, QuotaExceeded
from schemas import ModelInfo


def _payload(repo_data, **options) -> dict:
    return {"repoData": repo_data.model_dump(by_alias=True), "options": options}


class TestGenerate:
    @pytest.fixture(autouse=True)
    def _patch_generation(self, generation_result):
        with patch(
            "api.ai.generate_documentation", new_callable=AsyncMock, return_value=generation_result
        ) as gd:
            self.generate = gd
            yield

    async def test_creates_document(self, test_client, repo_data, memory_store):
        resp = await test_client.post("/api/ai/generate", json=_payload(repo_data))
        assert resp.status_code == 200
        data = resp.json()["data"]
        document = data["document"]
        assert document["id"] == "mem_1"
        assert document["title"] == "demo-app Documentation"
        assert document["githubUrl"] == "https://github.com/acme/demo-app"
        assert document["status"] == "completed"
        assert document["processingTime"] >= 0
        assert document["tags"] == ["JavaScript", "React"]
        assert data["aiResult"]["content"] == "# demo-app\n\nGenerated docs."
        assert data["aiResult"]["finishReason"] == "stop"
        assert (await memory_store.list()).pagination.total_documents == 1

    async def test_options_passed_through(self, test_client, repo_data):
        await test_client.post(
            "/api/ai/generate",
            json=_payload(repo_data, model="google/gemini-pro", maxTokens=500, detail="extended"),
        )
        options = self.generate.call_args.args[1]
        assert options.model == "google/gemini-pro"
        assert options.max_tokens == 500
        assert options.detail == "extended"

    async def test_metadata_extras_kept(self, test_client, repo_data, memory_store):
        payload = _payload(repo_data)
        payload["repoData"]["metadata"]["customField"] = "kept"
        await test_client.post("/api/ai/generate", json=payload)
        document = (await memory_store.list()).documents[0]
        assert document.metadata.model_dump(by_alias=True)["customField"] == "kept"

    async def test_missing_url(self, test_client, repo_data, memory_store):
        repo_data.metadata.url = None
        resp = await test_client.post("/api/ai/generate", json=_payload(repo_data))
        assert resp.status_code == 400
        assert resp.json()["success"] is False
        assert (await memory_store.list()).pagination.total_documents == 0
        self.generate.assert_not_awaited()

    async def test_timeout_creates_nothing(self, test_client, repo_data, memory_store):
        self.generate.side_effect = GenerationTimeout()
        resp = await test_client.post("/api/ai/generate", json=_payload(repo_data))
        assert resp.status_code == 504
        assert resp.json() == {"success": False, "error": GenerationTimeout.default_message}
        assert (await memory_store.list()).pagination.total_documents == 0

    async def test_quota(self, test_client, repo_data):
        self.generate.side_effect = QuotaExceeded()
        resp = await test_client.post("/api/ai/generate", json=_payload(repo_data))
        assert resp.status_code == 402

    async def test_invalid_temperature(self, test_client, repo_data):
        resp = await test_client.post("/api/ai/generate", json=_payload(repo_data, temperature=5))
        assert resp.status_code == 400
        self.generate.assert_not_awaited()


class TestModels:
    async def test_lists_models(self, test_client):
        models = [ModelInfo(id="openai/gpt-4o", name="GPT-4o")]
        with patch("api.ai.list_models", new_callable=AsyncMock, return_value=models):
            resp = await test_client.get("/api/ai/models")
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "data": [{"id": "openai/gpt-4o", "name": "GPT-4o"}]}
