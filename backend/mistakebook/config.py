"""
Mistake Book Backend: Application Configuration
================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a `Settings` object that is built
       once at startup and handed to the store client and the service.
Who:   create_app() in main.py; tests build their own instances.

Required for pushes: GIT_TOKEN, REPO_OWNER, REPO_NAME.
Everything else has a working default.
"""

from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes are grouped by concern. The token is never logged.
    """

    # ── Gitee Repository ──────────────────────────────────────────────────
    # What: Personal access token sent as `access_token` on every API call
    git_token: str = Field(default="", description="Gitee personal access token")
    repo_owner: str = Field(default="sycg", description="Owner (user or org) of the repository")
    repo_name: str = Field(default="my-mistakes", description="Repository holding the books")
    git_branch: str = Field(default="master", description="Branch read from and committed to")

    # What: Optional folder inside the repository the books live under
    sub_folder: str = Field(default="")

    gitee_api_base: str = Field(default="https://gitee.com/api/v5")

    # What: Which FileStore implementation backs the service
    # Options: gitee (remote contents API), memory (process-local, for development)
    store_backend: str = Field(default="gitee")

    # What: Fixed connect/response timeout for each store call, in seconds
    request_timeout: float = Field(default=30.0, gt=0, le=300)

    # What: Largest accepted request body; bigger bodies get 413
    max_body_bytes: int = Field(default=5 * 1024 * 1024, ge=1)

    # ── Retry Configuration ───────────────────────────────────────────────
    # What: Write attempts and linear backoff step (attempt N waits N * step)
    retry_max_attempts: int = Field(default=2, ge=1, le=10)
    retry_backoff_seconds: float = Field(default=1.0, ge=0, le=60)

    # ── Entry Timestamps ──────────────────────────────────────────────────
    # What: IANA zone used for entry timestamps; empty means server local time
    # Example: Asia/Shanghai on hosts that run in UTC
    display_timezone: str = Field(default="")

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs, or * for any origin
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=3000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("store_backend")
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        lower = v.lower()
        if lower not in {"gitee", "memory"}:
            raise ValueError(f"Invalid store_backend '{v}'. Must be 'gitee' or 'memory'")
        return lower

    @field_validator("display_timezone")
    @classmethod
    def validate_display_timezone(cls, v: str) -> str:
        if v:
            try:
                ZoneInfo(v)
            except (ZoneInfoNotFoundError, ValueError):
                raise ValueError(f"Unknown display_timezone '{v}'")
        return v

    @field_validator("sub_folder")
    @classmethod
    def strip_sub_folder(cls, v: str) -> str:
        return v.strip("/")

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # GIT_TOKEN and git_token both work
        "extra": "ignore",
    }

    @property
    def tzinfo(self) -> Optional[ZoneInfo]:
        """Zone for entry timestamps, or None for the server's local time."""
        return ZoneInfo(self.display_timezone) if self.display_timezone else None

    @property
    def has_token(self) -> bool:
        return bool(self.git_token)

    def missing_required(self) -> List[str]:
        """
        What:  Names of the environment variables a push cannot run without.
        When:  Checked on every push (config errors are reported per request,
               not at import time, so health and stats stay reachable).
        """
        missing = []
        if not self.git_token:
            missing.append("GIT_TOKEN")
        if not self.repo_owner:
            missing.append("REPO_OWNER")
        if not self.repo_name:
            missing.append("REPO_NAME")
        return missing

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that critical settings are configured.
        When:  Called during app startup (lifespan); the caller logs the error.
        How:   Raises ValueError listing every missing variable.
        """
        missing = self.missing_required()
        if missing:
            raise ValueError(
                "Configuration validation failed:\n"
                + "\n".join(f"  - {name} is not set" for name in missing)
            )


settings = Settings()
