"""
Mistake Book Backend: Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for every failure a push or a stats
       lookup can end in.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) map them to a
       status code and a `{"success": false, "message": ...}` body.
Who:   Raised by the store clients, the retry wrapper and the service.

Exception Hierarchy:
    MistakeBookError (base)
    ├── ValidationError            → 400 (empty content, unknown subject)
    ├── ConfigurationError         → 500 (GIT_TOKEN / REPO_OWNER / REPO_NAME missing)
    └── StoreError                 → provider status, or 500 without one
        ├── AuthError              → 401 / 403
        ├── RepoNotFoundError      → 404 on a write
        ├── ConflictError          → 409 (stale sha on update)
        ├── TransientProviderError → 5xx, 429, network failures (retried)
        └── UnknownStoreError      → any other provider status

A 404 on a read is not an error at all: FileStore.fetch() returns None and
the service takes the "create" branch.
"""

from typing import Any, Dict, Optional


class MistakeBookError(Exception):
    """
    Base exception for all Mistake Book application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "操作失败",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(MistakeBookError):
    """
    Raised when client input fails validation.

    When:    Empty or whitespace-only content, subject outside {math, ds}.
    HTTP:    400 Bad Request. Never retried; no remote call is made.
    """

    def __init__(
        self,
        message: str = "请求参数无效",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class ConfigurationError(MistakeBookError):
    """
    Raised when the server lacks the settings a push needs.

    HTTP:    500 Internal Server Error. The message names the .env file so the
             operator knows where to look; the missing names go to the log.
    """

    def __init__(
        self,
        missing: Optional[list] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["missing"] = list(missing or [])
        super().__init__(message="服务器配置不完整，请检查 .env 文件", context=ctx)
        self.missing = ctx["missing"]


class StoreError(MistakeBookError):
    """
    Raised when the remote file store rejects or fails a call.

    Attributes:
        status:   HTTP status returned by the provider (None for network errors)
        payload:  Decoded provider error body, kept for the server log

    Use classify_status() to build the right subclass from a response.
    """

    def __init__(
        self,
        message: str = "未知错误",
        status: Optional[int] = None,
        payload: Any = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status is not None:
            ctx["status"] = status
        super().__init__(message=message, context=ctx)
        self.status = status
        self.payload = payload

    @property
    def http_status(self) -> int:
        """Status code relayed to our own client."""
        return self.status or 500


class AuthError(StoreError):
    """401 (bad token) or 403 (token lacks permission). Never retried."""


class RepoNotFoundError(StoreError):
    """404 on a write: the owner/repo pair does not exist. Never retried."""


class ConflictError(StoreError):
    """
    The update's sha no longer matches the file's current version.

    Another writer committed between our fetch and our update. The push is
    rejected; it is not re-fetched or merged.
    """


class TransientProviderError(StoreError):
    """5xx, rate limiting or a network failure. Retried by with_retry()."""


class UnknownStoreError(StoreError):
    """Any other provider status."""


AUTH_MESSAGES = {
    401: "Token认证失败，请检查 .env 中的 GIT_TOKEN",
    403: "权限不足，请检查 Token 权限",
}
REPO_NOT_FOUND_MESSAGE = "仓库未找到，请检查 REPO_OWNER 和 REPO_NAME"
NETWORK_ERROR_MESSAGE = "操作失败"


def _provider_message(payload: Any) -> str:
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return "未知错误"


def classify_status(status: int, payload: Any = None) -> StoreError:
    """
    Build the typed StoreError for a failed provider response.

    Args:
        status:  HTTP status of the provider response.
        payload: Decoded JSON body (Gitee sends {"message": "..."}), or None.

    Returns:
        An exception instance; the caller raises it.
    """
    if status in AUTH_MESSAGES:
        return AuthError(AUTH_MESSAGES[status], status=status, payload=payload)
    if status == 404:
        return RepoNotFoundError(REPO_NOT_FOUND_MESSAGE, status=status, payload=payload)
    if status == 409:
        return ConflictError(_provider_message(payload), status=status, payload=payload)
    if status == 429 or status >= 500:
        return TransientProviderError(_provider_message(payload), status=status, payload=payload)
    return UnknownStoreError(_provider_message(payload), status=status, payload=payload)
