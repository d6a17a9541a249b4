"""
Mistake Book Backend: Store and Service Wiring
===============================================

What:  Builds the FileStore and MistakeBookService for an app instance and
       exposes them to route handlers through FastAPI's Depends().
How:   create_app() calls build_store() once and keeps the service on
       app.state; get_book_service() reads it back per request.

Example usage in a route:
    @router.get("/stats/{subject}")
    async def stats(subject: str, service: MistakeBookService = Depends(get_book_service)):
        return await service.stats(subject)
"""

import logging

from fastapi import Request

from mistakebook.config import Settings
from mistakebook.services.book_service import MistakeBookService
from mistakebook.services.gitee_store import GiteeFileStore
from mistakebook.services.memory_store import InMemoryFileStore
from mistakebook.services.store_base import FileStore

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> FileStore:
    """FileStore selected by STORE_BACKEND."""
    if settings.store_backend == "memory":
        logger.warning("Using the in-memory store: books are lost on restart")
        return InMemoryFileStore()
    return GiteeFileStore(settings)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_book_service(request: Request) -> MistakeBookService:
    return request.app.state.book_service
