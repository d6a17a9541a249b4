"""
Mistake Book Backend: Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixtures (function-scoped, fresh for each test):
    ├── test_settings: Settings with a fake token and no retry backoff
    ├── memory_store: Empty InMemoryFileStore
    ├── book_service: MistakeBookService over memory_store
    ├── existing_book: Markdown text of a book holding three entries
    └── test_client: HTTPX AsyncClient bound to an app using memory_store
"""

import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Keep the developer's .env and real token out of the tests
os.environ["GIT_TOKEN"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

from mistakebook.config import Settings  # noqa: E402
from mistakebook.services.book_service import MistakeBookService  # noqa: E402
from mistakebook.services.memory_store import InMemoryFileStore  # noqa: E402


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        git_token="test-token-not-real",
        repo_owner="tester",
        repo_name="mistakes",
        retry_max_attempts=2,
        retry_backoff_seconds=0,
        log_level="WARNING",
    )


@pytest.fixture
def memory_store():
    return InMemoryFileStore()


@pytest.fixture
def book_service(memory_store, test_settings):
    return MistakeBookService(store=memory_store, settings=test_settings)


@pytest.fixture
def existing_book():
    """A math book as the service would have written it after three pushes."""
    return (
        "# 数学 错题本\n"
        "\n"
        "> 📚 创建日期：2026/10/1  \n"
        "> 🎯 学科：数学  \n"
        "> 📖 用途：考研错题整理与复习  \n"
        "> 🔢 题目总数：3 道\n"
        "\n"
        "---\n"
        "\n"
        "\n## 题目 #1 | 2026-10-01 08:00\n\n求极限\n\n---\n"
        "\n## 题目 #2 | 2026-10-02 09:30\n\n泰勒展开\n\n---\n"
        "\n## 题目 #3 | 2026-10-03 22:15\n\n定积分换元\n\n---\n"
    )


@pytest_asyncio.fixture
async def test_client(memory_store, test_settings):
    """
    HTTPX AsyncClient talking to a fresh app over ASGITransport.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/api/health")
            assert response.status_code == 200
    """
    from mistakebook.main import create_app

    app = create_app(test_settings, store=memory_store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
