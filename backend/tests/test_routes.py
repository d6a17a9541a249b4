"""
Mistake Book Backend: API Endpoint Tests
=========================================

What:  Tests for /api/push, /api/stats/{subject} and /api/health over ASGI.
How:   test_client fixture wires the app to an InMemoryFileStore.
"""

import logging

import pytest
from httpx import ASGITransport, AsyncClient

from mistakebook.exceptions import AuthError, RepoNotFoundError, TransientProviderError
from mistakebook.main import create_app
from mistakebook.services.formatter import utf16_length
from mistakebook.services.memory_store import InMemoryFileStore

MATH_FILE = "数学错题本.md"


class FailingStore(InMemoryFileStore):
    """Fetch finds an existing book; every update raises the configured error."""

    def __init__(self, error, existing_book):
        super().__init__({MATH_FILE: existing_book})
        self.error = error
        self.update_calls = 0

    async def update(self, path, message, content, sha):
        self.update_calls += 1
        raise self.error


class FailingFetchStore(InMemoryFileStore):
    """Every read raises the configured error."""

    def __init__(self, error):
        super().__init__()
        self.error = error

    async def fetch(self, path):
        raise self.error


async def client_for(app):
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


class TestPushEndpoint:

    @pytest.mark.asyncio
    async def test_push_creates_then_appends(self, test_client, memory_store):
        first = await test_client.post("/api/push", json={"content": "极限", "subject": "math"})
        assert first.status_code == 200
        assert first.json() == {
            "success": True,
            "message": "创建数学错题本成功 - 题目 #1",
            "fileName": MATH_FILE,
            "action": "created",
            "questionNumber": 1,
            "totalLength": utf16_length(memory_store.content_of(MATH_FILE)),
        }

        second = await test_client.post("/api/push", json={"content": "导数", "subject": "math"})
        body = second.json()
        assert second.status_code == 200
        assert body["action"] == "appended"
        assert body["questionNumber"] == 2
        assert body["message"] == "追加数学错题成功 - 题目 #2"

    @pytest.mark.parametrize("content", ["", "   "])
    @pytest.mark.asyncio
    async def test_empty_content_is_400(self, test_client, memory_store, content):
        response = await test_client.post("/api/push", json={"content": content, "subject": "math"})
        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.json()["message"] == "内容不能为空"
        assert memory_store.commits == []

    @pytest.mark.asyncio
    async def test_invalid_subject_is_400(self, test_client, memory_store):
        response = await test_client.post("/api/push", json={"content": "x", "subject": "physics"})
        assert response.status_code == 400
        assert response.json()["message"] == "无效的科目"
        assert memory_store.commits == []

    @pytest.mark.asyncio
    async def test_missing_fields_are_400(self, test_client):
        response = await test_client.post("/api/push", json={})
        assert response.status_code == 400
        assert response.json()["message"] == "内容不能为空"

    @pytest.mark.asyncio
    async def test_malformed_body_is_400(self, test_client):
        response = await test_client.post(
            "/api/push",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_unconfigured_server_is_500(self, test_settings):
        settings = test_settings.model_copy(update={"git_token": ""})
        app = create_app(settings, store=InMemoryFileStore())
        async with await client_for(app) as client:
            response = await client.post("/api/push", json={"content": "x", "subject": "math"})
        assert response.status_code == 500
        assert response.json()["message"] == "服务器配置不完整，请检查 .env 文件"

    @pytest.mark.asyncio
    async def test_auth_failure_relays_status_without_retry(self, test_settings, existing_book):
        store = FailingStore(AuthError("Token认证失败，请检查 .env 中的 GIT_TOKEN", status=401), existing_book)
        app = create_app(test_settings, store=store)
        async with await client_for(app) as client:
            response = await client.post("/api/push", json={"content": "x", "subject": "math"})
        assert response.status_code == 401
        assert response.json()["message"] == "Token认证失败，请检查 .env 中的 GIT_TOKEN"
        assert store.update_calls == 1

    @pytest.mark.asyncio
    async def test_repo_not_found_on_write(self, test_settings, existing_book):
        store = FailingStore(RepoNotFoundError("仓库未找到，请检查 REPO_OWNER 和 REPO_NAME", status=404), existing_book)
        app = create_app(test_settings, store=store)
        async with await client_for(app) as client:
            response = await client.post("/api/push", json={"content": "x", "subject": "math"})
        assert response.status_code == 404
        assert response.json()["message"] == "仓库未找到，请检查 REPO_OWNER 和 REPO_NAME"

    @pytest.mark.asyncio
    async def test_server_error_retried_then_relayed(self, test_settings, existing_book):
        store = FailingStore(TransientProviderError("Service Unavailable", status=503), existing_book)
        app = create_app(test_settings, store=store)
        async with await client_for(app) as client:
            response = await client.post("/api/push", json={"content": "x", "subject": "math"})
        body = response.json()
        assert response.status_code == 503
        assert body["success"] is False
        assert body["message"] == "Service Unavailable"
        assert store.update_calls == test_settings.retry_max_attempts


class TestStatsEndpoint:

    @pytest.mark.asyncio
    async def test_missing_book(self, test_client):
        response = await test_client.get("/api/stats/math")
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "exists": False,
            "questionCount": 0,
            "message": "文件尚不存在",
        }

    @pytest.mark.asyncio
    async def test_existing_book(self, test_settings, existing_book):
        app = create_app(test_settings, store=InMemoryFileStore({MATH_FILE: existing_book}))
        async with await client_for(app) as client:
            response = await client.get("/api/stats/math")
        body = response.json()
        assert response.status_code == 200
        assert body["exists"] is True
        assert body["questionCount"] == 3
        assert body["totalLength"] == utf16_length(existing_book)
        assert "lastUpdate" in body
        assert "message" not in body

    @pytest.mark.asyncio
    async def test_invalid_subject(self, test_client):
        response = await test_client.get("/api/stats/physics")
        assert response.status_code == 400
        assert response.json()["message"] == "无效的科目"

    @pytest.mark.asyncio
    async def test_store_error_relays_provider_status(self, test_settings):
        store = FailingFetchStore(TransientProviderError("Bad Gateway", status=502))
        app = create_app(test_settings, store=store)
        async with await client_for(app) as client:
            response = await client.get("/api/stats/math")
        assert response.status_code == 502
        assert response.json()["success"] is False
        assert response.json()["message"] == "Bad Gateway"

    @pytest.mark.asyncio
    async def test_auth_error_on_read(self, test_settings):
        store = FailingFetchStore(AuthError("Token认证失败，请检查 .env 中的 GIT_TOKEN", status=401))
        app = create_app(test_settings, store=store)
        async with await client_for(app) as client:
            response = await client.get("/api/stats/ds")
        assert response.status_code == 401
        assert response.json()["message"] == "Token认证失败，请检查 .env 中的 GIT_TOKEN"


class TestHealthEndpoint:

    @pytest.mark.asyncio
    async def test_configured(self, test_client):
        response = await test_client.get("/api/health")
        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "healthy"
        assert body["configured"] is True
        assert body["files"] == {"math": "数学错题本.md", "ds": "数据结构错题本.md"}
        assert body["features"] == ["auto-numbering", "timestamps", "statistics"]

    @pytest.mark.asyncio
    async def test_unconfigured(self, test_settings):
        settings = test_settings.model_copy(update={"git_token": ""})
        app = create_app(settings, store=InMemoryFileStore())
        async with await client_for(app) as client:
            response = await client.get("/api/health")
        assert response.json()["status"] == "unconfigured"
        assert response.json()["configured"] is False


class TestCrossCutting:

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, test_client):
        response = await test_client.get("/api/health", headers={"X-Request-ID": "abc12345"})
        assert response.headers["X-Request-ID"] == "abc12345"

    @pytest.mark.asyncio
    async def test_cors_preflight(self, test_client):
        response = await test_client.options(
            "/api/stats/math",
            headers={
                "Origin": "http://example.com",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    @pytest.mark.asyncio
    async def test_oversized_body_is_413(self, test_settings, memory_store):
        settings = test_settings.model_copy(update={"max_body_bytes": 256})
        app = create_app(settings, store=memory_store)
        async with await client_for(app) as client:
            response = await client.post("/api/push", json={"content": "题" * 200, "subject": "math"})
        body = response.json()
        assert response.status_code == 413
        assert body["success"] is False
        assert body["message"] == "请求内容过大"
        assert memory_store.commits == []

    @pytest.mark.asyncio
    async def test_body_under_limit_is_accepted(self, test_settings, memory_store):
        settings = test_settings.model_copy(update={"max_body_bytes": 256})
        app = create_app(settings, store=memory_store)
        async with await client_for(app) as client:
            response = await client.post("/api/push", json={"content": "短", "subject": "math"})
        assert response.status_code == 200

    def test_default_body_limit_is_five_megabytes(self, test_settings):
        assert test_settings.max_body_bytes == 5 * 1024 * 1024

    @pytest.mark.asyncio
    async def test_access_log_tags_push_outcome(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger="mistakebook.access")
        await test_client.post("/api/push", json={"content": "极限", "subject": "math"})
        await test_client.post("/api/push", json={"content": "导数", "subject": "math"})

        lines = [r.getMessage() for r in caplog.records if r.name == "mistakebook.access"]
        assert len(lines) == 2
        assert lines[0].startswith("POST /api/push 200 ")
        assert lines[0].endswith("math #1 created")
        assert lines[1].endswith("math #2 appended")

    @pytest.mark.asyncio
    async def test_access_log_skips_health(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger="mistakebook.access")
        await test_client.get("/api/health")
        assert [r for r in caplog.records if r.name == "mistakebook.access"] == []
