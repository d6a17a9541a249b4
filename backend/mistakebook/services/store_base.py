"""
Mistake Book Backend: Abstract File Store Interface
====================================================

What:  The three remote operations a mistake book needs: read a file, create
       a file, update a file under an optimistic-concurrency precondition.
How:   Concrete stores inherit from FileStore:
         - GiteeFileStore: Gitee v5 contents API over httpx (production)
         - InMemoryFileStore: process-local dict (local development, tests)
Who:   MistakeBookService; the retry wrapper wraps create() and update().

Contract shared by every implementation:
    - Paths are repository-relative ("数学错题本.md", "notes/数学错题本.md").
    - Content crosses this interface as decoded text; any transfer encoding
      (Gitee wants base64) is the implementation's business.
    - Failures raise StoreError subclasses (see exceptions.py); a missing
      file on read is `None`, never an exception.
"""

from abc import ABC, abstractmethod
from typing import Optional

from mistakebook.models.book import RemoteFile


class FileStore(ABC):
    """Remote text file store with sha-guarded updates."""

    @abstractmethod
    async def fetch(self, path: str) -> Optional[RemoteFile]:
        """
        Read the current version of `path`.

        Returns:
            RemoteFile with sha and content, or None if the file does not exist.

        Raises:
            StoreError: any failure other than "file not found".
        """
        ...

    @abstractmethod
    async def create(self, path: str, message: str, content: str) -> None:
        """
        Commit a new file at `path`.

        Raises:
            StoreError: including when `path` already exists.
        """
        ...

    @abstractmethod
    async def update(self, path: str, message: str, content: str, sha: str) -> None:
        """
        Replace the content of `path`, only if its current sha equals `sha`.

        Raises:
            ConflictError: `sha` is stale.
            StoreError: any other failure.
        """
        ...

    async def close(self) -> None:
        """Release network resources. Called once at application shutdown."""
        return None
