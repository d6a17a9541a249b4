"""
Mistake Book Backend: In-Memory File Store
===========================================

What:  FileStore kept in a process-local dict.
Who:   STORE_BACKEND=memory for local development without a Gitee token;
       the test suite.

Behaves like the remote store where it matters:
    - create() on an existing path fails (400, like Gitee)
    - update() on a missing path fails (404)
    - update() with a stale sha fails with ConflictError (409)
    - every successful write gets a fresh sha derived from the content
"""

import hashlib
import logging
from typing import Dict, List, Optional, Tuple

from mistakebook.exceptions import classify_status
from mistakebook.models.book import RemoteFile
from mistakebook.services.store_base import FileStore

logger = logging.getLogger(__name__)


def content_sha(content: str, revision: int) -> str:
    digest = hashlib.sha1(f"{revision}\0{content}".encode("utf-8"))
    return digest.hexdigest()


class InMemoryFileStore(FileStore):
    """Dict-backed store; `commits` records (action, path, message) in order."""

    def __init__(self, files: Optional[Dict[str, str]] = None):
        self._files: Dict[str, RemoteFile] = {}
        self._revision = 0
        self.commits: List[Tuple[str, str, str]] = []
        for path, content in (files or {}).items():
            self._store(path, content)

    def _store(self, path: str, content: str) -> None:
        self._revision += 1
        self._files[path] = RemoteFile(sha=content_sha(content, self._revision), content=content)

    def content_of(self, path: str) -> Optional[str]:
        remote = self._files.get(path)
        return remote.content if remote else None

    async def fetch(self, path: str) -> Optional[RemoteFile]:
        return self._files.get(path)

    async def create(self, path: str, message: str, content: str) -> None:
        if path in self._files:
            raise classify_status(400, {"message": f"文件 {path} 已存在"})
        self._store(path, content)
        self.commits.append(("create", path, message))
        logger.debug("Created %s (%d chars)", path, len(content))

    async def update(self, path: str, message: str, content: str, sha: str) -> None:
        current = self._files.get(path)
        if current is None:
            raise classify_status(404, {"message": "Not Found"})
        if current.sha != sha:
            raise classify_status(409, {"message": f"{path} 的 sha 已过期"})
        self._store(path, content)
        self.commits.append(("update", path, message))
        logger.debug("Updated %s (%d chars)", path, len(content))
