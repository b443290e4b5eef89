"""
Meal Planner Backend - API Integration Tests
============================================

What:  Full request/response cycle through middleware, routing, and handlers.
How:   HTTPX AsyncClient over ASGITransport, a SQLite document store, a temp
       blob bucket, and FakeLLM in place of Gemini (see conftest.py).
"""

import logging
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from mealplanner.config import settings
from mealplanner.database import get_db_session
from mealplanner.main import app
from mealplanner.middleware.body_size import MULTIPART_OVERHEAD, BodySizeLimitMiddleware
from mealplanner.services.gemini_service import gemini_service


GENERATE_BODY = {
    "cookbook": "Ottolenghi Simple",
    "dietaryNeeds": "vegetarian",
    "specialRequests": "batch cooking",
    "template": "# Week\n- Mon:\n- Tue:",
}


class TestFavoritesEndpoints:

    @pytest.mark.asyncio
    async def test_save_then_list(self, test_client):
        response = await test_client.post("/favorites", json={"mealPlanMarkdown": "# Plan A"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        favorite_id = body["id"]

        response = await test_client.get("/favorites")
        assert response.status_code == 200
        favorites = response.json()["favorites"]
        assert [f["id"] for f in favorites] == [favorite_id]
        assert favorites[0]["content"] == "# Plan A"
        assert "createdAt" in favorites[0]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{"mealPlanMarkdown": ""}, {}, {"mealPlanMarkdown": None}])
    async def test_missing_content_returns_400(self, test_client, payload):
        response = await test_client.post("/favorites", json=payload)

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "No meal plan content provided."}

        listed = await test_client.get("/favorites")
        assert listed.json()["favorites"] == []

    @pytest.mark.asyncio
    async def test_list_failure_returns_generic_500(self, test_client):
        broken = AsyncMock()
        broken.execute.side_effect = OperationalError("SELECT", {}, Exception("connection refused"))

        async def broken_session():
            yield broken

        app.dependency_overrides[get_db_session] = broken_session

        response = await test_client.get("/favorites")

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Failed to fetch favorites."}


class TestGeneratePlanEndpoint:

    @pytest.mark.asyncio
    async def test_generate_returns_plan(self, test_client, fake_llm):
        response = await test_client.post("/generate-plan", json=GENERATE_BODY)

        assert response.status_code == 200
        assert response.json() == {"success": True, "mealPlan": fake_llm.reply}
        assert len(fake_llm.prompts) == 1
        assert "Ottolenghi Simple" in fake_llm.prompts[0]

    @pytest.mark.asyncio
    async def test_empty_strings_are_forwarded(self, test_client, fake_llm):
        body = {key: "" for key in GENERATE_BODY}

        response = await test_client.post("/generate-plan", json=body)

        assert response.status_code == 200
        assert response.json()["mealPlan"] == fake_llm.reply
        assert len(fake_llm.prompts) == 1

    @pytest.mark.asyncio
    async def test_missing_field_returns_400(self, test_client, fake_llm):
        body = dict(GENERATE_BODY)
        del body["template"]

        response = await test_client.post("/generate-plan", json=body)

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert "template" in response.json()["message"]
        assert fake_llm.prompts == []

    @pytest.mark.asyncio
    async def test_provider_failure_returns_500(self, test_client, fake_llm, generation_error):
        fake_llm.error = generation_error

        response = await test_client.post("/generate-plan", json=GENERATE_BODY)

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Failed to generate meal plan."}

    @pytest.mark.asyncio
    async def test_empty_reply_is_a_successful_plan(self, test_client, fake_llm):
        fake_llm.reply = ""
        body = {key: "" for key in GENERATE_BODY}

        response = await test_client.post("/generate-plan", json=body)

        assert response.status_code == 200
        assert response.json() == {"success": True, "mealPlan": ""}

    @pytest.mark.asyncio
    async def test_reply_whitespace_is_preserved(self, test_client, fake_llm):
        fake_llm.reply = "\n# Plan\n\n"

        response = await test_client.post("/generate-plan", json=GENERATE_BODY)

        assert response.json()["mealPlan"] == "\n# Plan\n\n"

    @pytest.mark.asyncio
    async def test_malformed_json_returns_generic_400(self, test_client, fake_llm):
        response = await test_client.post(
            "/generate-plan",
            content=b'{"cookbook": "Jerusalem", ',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Invalid request body."}
        assert fake_llm.prompts == []


class TestCookbookEndpoints:

    @pytest.mark.asyncio
    async def test_upload_then_list(self, test_client, test_blob_store):
        response = await test_client.post(
            "/upload-cookbook",
            files={"cookbookFile": ("Family Recipes.pdf", b"%PDF-1.4 recipes", "application/pdf")},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Cookbook uploaded successfully."}

        blobs = await test_blob_store.list_blobs("cookbooks/")
        assert len(blobs) == 1
        assert blobs[0].key.endswith("_Family_Recipes.pdf")

        listed = (await test_client.get("/cookbooks")).json()["cookbooks"]
        assert len(listed) == 1
        assert listed[0]["name"] == "Family Recipes.pdf"
        assert listed[0]["storagePath"] == blobs[0].key
        assert listed[0]["sizeBytes"] == len(b"%PDF-1.4 recipes")

    @pytest.mark.asyncio
    async def test_upload_without_file_returns_400(self, test_client, test_blob_store):
        response = await test_client.post(
            "/upload-cookbook",
            files={"somethingElse": ("x.txt", b"abc", "text/plain")},
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "No file uploaded."}
        assert await test_blob_store.list_blobs() == []

    @pytest.mark.asyncio
    async def test_oversized_file_returns_413(self, test_client, test_blob_store, monkeypatch):
        monkeypatch.setattr(settings, "max_upload_size", 10)

        response = await test_client.post(
            "/upload-cookbook",
            files={"cookbookFile": ("big.bin", b"x" * 64, "application/octet-stream")},
        )

        assert response.status_code == 413
        assert response.json()["success"] is False
        assert await test_blob_store.list_blobs() == []

    @pytest.mark.asyncio
    async def test_declared_body_over_the_real_cap_is_refused(self, test_client, test_blob_store):
        over_cap = settings.max_upload_size + MULTIPART_OVERHEAD + 1

        response = await test_client.post(
            "/upload-cookbook",
            content=b"--x--",
            headers={
                "Content-Type": "multipart/form-data; boundary=x",
                "Content-Length": str(over_cap),
            },
        )

        assert response.status_code == 413
        assert response.json() == {
            "success": False,
            "message": "File exceeds the maximum upload size of 100MB.",
        }
        assert await test_blob_store.list_blobs() == []

    @pytest.mark.asyncio
    async def test_identical_uploads_get_distinct_paths(self, test_client, test_blob_store):
        for _ in range(2):
            response = await test_client.post(
                "/upload-cookbook",
                files={"cookbookFile": ("same.txt", b"abc", "text/plain")},
            )
            assert response.status_code == 200

        listed = (await test_client.get("/cookbooks")).json()["cookbooks"]
        assert len({c["storagePath"] for c in listed}) == 2
        assert len(await test_blob_store.list_blobs("cookbooks/")) == 2


class TestBodySizeLimit:

    @pytest.mark.asyncio
    async def test_declared_oversize_body_is_refused_before_the_handler(self):
        small_app = FastAPI()
        calls = []

        @small_app.post("/echo")
        async def echo():
            calls.append(1)
            return {"ok": True}

        small_app.add_middleware(BodySizeLimitMiddleware, max_body_size=1024)

        transport = ASGITransport(app=small_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post("/echo", content=b"x" * 4096)
            assert response.status_code == 413
            assert response.json()["success"] is False
            assert calls == []

            response = await client.post("/echo", content=b"x" * 10)
            assert response.status_code == 200
            assert calls == [1]


class TestCrossCutting:

    @pytest.mark.asyncio
    async def test_cors_preflight_allows_any_origin(self, test_client):
        response = await test_client.options(
            "/favorites",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    @pytest.mark.asyncio
    async def test_unknown_route_uses_failure_envelope(self, test_client):
        response = await test_client.get("/does-not-exist")

        assert response.status_code == 404
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/favorites", headers={"X-Request-ID": "abc12345"})
        assert response.headers["x-request-id"] == "abc12345"

    @pytest.mark.asyncio
    async def test_access_log_records_declared_body_size(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger="mealplanner.access")

        await test_client.post(
            "/favorites",
            json={"mealPlanMarkdown": "# Plan A"},
            headers={"X-Request-ID": "log12345"},
        )
        await test_client.post("/favorites", json={})

        lines = [r for r in caplog.records if r.name == "mealplanner.access"]
        assert len(lines) == 2
        assert lines[0].levelno == logging.INFO
        assert "POST /favorites 200" in lines[0].getMessage()
        assert "[log12345]" in lines[0].getMessage()
        assert " in=" in lines[0].getMessage()
        assert lines[1].levelno == logging.WARNING

    @pytest.mark.asyncio
    async def test_health_is_not_access_logged(self, test_client, caplog, monkeypatch):
        monkeypatch.setattr(gemini_service, "health_check", AsyncMock(return_value=True))
        caplog.set_level(logging.INFO, logger="mealplanner.access")

        await test_client.get("/health")
        await test_client.get("/cookbooks")

        messages = [r.getMessage() for r in caplog.records if r.name == "mealplanner.access"]
        assert len(messages) == 1
        assert messages[0].startswith("GET /cookbooks 200")
        assert " in=" not in messages[0]

    @pytest.mark.asyncio
    async def test_health_reports_components(self, test_client, monkeypatch):
        monkeypatch.setattr(gemini_service, "health_check", AsyncMock(return_value=True))

        response = await test_client.get("/health")

        body = response.json()
        assert body["gemini"] == "available"
        assert body["status"] in ("healthy", "degraded")
        assert "database" in body and "storage" in body and "gemini" in body
