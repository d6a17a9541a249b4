"""
Mistake Book Backend: Gitee Contents API Store
===============================================

What:  FileStore backed by the Gitee v5 repository contents API.
How:   One shared httpx.AsyncClient (base URL + fixed timeout). Every call
       carries the token as `access_token`; content travels base64-encoded.
Who:   Built once by create_app() from Settings; closed in the lifespan shutdown.

Wire contract:
    GET  /repos/{owner}/{repo}/contents/{path}?access_token=…&ref={branch}
         200 → {"sha", "content"} (or a one-element list of it), 404 → absent
    POST same URL, JSON {access_token, content, message, branch}        (create)
    PUT  same URL, JSON {access_token, content, message, sha, branch}   (update)

Error translation:
    Non-2xx statuses go through classify_status(); transport failures
    (connect errors, timeouts) become TransientProviderError with no status.
"""

import base64
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from mistakebook.config import Settings
from mistakebook.exceptions import (
    NETWORK_ERROR_MESSAGE,
    TransientProviderError,
    classify_status,
)
from mistakebook.models.book import RemoteFile
from mistakebook.services.store_base import FileStore

logger = logging.getLogger(__name__)


def encode_content(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_content(encoded: str) -> str:
    # Gitee wraps base64 at 60 columns; b64decode drops the newlines
    return base64.b64decode(encoded).decode("utf-8")


def _error_payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {"message": response.text} if response.text else None


class GiteeFileStore(FileStore):
    """
    FileStore talking to one Gitee repository on one branch.

    Args:
        settings:  Supplies token, owner, repo, branch, base URL and timeout.
        client:    Optional preconfigured httpx.AsyncClient (tests pass one
                   built on httpx.MockTransport).
    """

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        self._token = settings.git_token
        self._owner = settings.repo_owner
        self._repo = settings.repo_name
        self._branch = settings.git_branch
        self._client = client or httpx.AsyncClient(
            base_url=settings.gitee_api_base,
            timeout=settings.request_timeout,
        )

    def _contents_url(self, path: str) -> str:
        return f"/repos/{self._owner}/{self._repo}/contents/{quote(path, safe='/')}"

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(method, self._contents_url(path), **kwargs)
        except httpx.TransportError as e:
            logger.warning("Gitee %s %s failed: %s", method, path, type(e).__name__)
            raise TransientProviderError(
                NETWORK_ERROR_MESSAGE,
                context={"error_type": type(e).__name__, "path": path},
            ) from e

    async def fetch(self, path: str) -> Optional[RemoteFile]:
        logger.info("Checking file: %s", path)
        response = await self._send(
            "GET",
            path,
            params={"access_token": self._token, "ref": self._branch},
        )

        if response.status_code == 404:
            logger.info("File %s does not exist yet", path)
            return None
        if response.status_code != 200:
            raise classify_status(response.status_code, _error_payload(response))

        data = response.json()
        # The contents endpoint answers with a list for directories and
        # sometimes for single files; the file is the first element
        file_data: Optional[Dict[str, Any]] = data[0] if isinstance(data, list) and data else data
        if not isinstance(file_data, dict) or not file_data.get("sha") or not file_data.get("content"):
            return None

        content = decode_content(file_data["content"])
        logger.info("File %s exists, current length: %d chars", path, len(content))
        return RemoteFile(sha=file_data["sha"], content=content)

    async def _write(self, method: str, path: str, body: Dict[str, Any]) -> None:
        response = await self._send(method, path, json=body)
        if not response.is_success:
            raise classify_status(response.status_code, _error_payload(response))

    async def create(self, path: str, message: str, content: str) -> None:
        logger.info("Creating file: %s", path)
        await self._write(
            "POST",
            path,
            {
                "access_token": self._token,
                "content": encode_content(content),
                "message": message,
                "branch": self._branch,
            },
        )

    async def update(self, path: str, message: str, content: str, sha: str) -> None:
        logger.info("Updating file: %s", path)
        await self._write(
            "PUT",
            path,
            {
                "access_token": self._token,
                "content": encode_content(content),
                "message": message,
                "sha": sha,
                "branch": self._branch,
            },
        )

    async def close(self) -> None:
        await self._client.aclose()
