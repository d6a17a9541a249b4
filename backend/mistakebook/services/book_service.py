"""
Mistake Book Backend: Book Service (Push Orchestrator)
=======================================================

What:  Validates a submission, reads the subject's book, appends a numbered
       entry (creating the book first when needed) and writes it back.
       Also answers stats lookups.
How:   Composes a FileStore, the Markdown formatter and the retry wrapper.
Who:   Called by the push and stats route handlers.

Push state machine:
    Idle → Fetching → Creating  ┐
                    → Appending ┴→ Writing → Done | Failed

    Creating:  ordinal 1, document = header + entry, count field = 1
    Appending: ordinal = headings in fetched snapshot + 1,
               document = snapshot + entry, count field = ordinal
    Writing:   create() or update(sha), each wrapped in with_retry()

Concurrency:
    There is no lock per subject. Two pushes that read the same snapshot
    compute the same ordinal; the second update carries a stale sha and the
    store rejects it with ConflictError. The rejection propagates as-is.
"""

import logging
from datetime import datetime
from typing import Optional

from mistakebook.config import Settings
from mistakebook.exceptions import ConfigurationError, ValidationError
from mistakebook.models.book import (
    ACTION_APPENDED,
    ACTION_CREATED,
    BookStats,
    PushResult,
    Subject,
    get_subject,
)
from mistakebook.services.formatter import (
    count_questions,
    render_entry,
    render_header,
    update_count,
    utf16_length,
)
from mistakebook.services.retry import with_retry
from mistakebook.services.store_base import FileStore

logger = logging.getLogger(__name__)


class MistakeBookService:
    """
    Business logic for the two mistake books.

    Args:
        store:     Where the books live.
        settings:  Required-config check, sub-folder, retry policy, time zone.
    """

    def __init__(self, store: FileStore, settings: Settings):
        self.store = store
        self.settings = settings

    def _now(self) -> datetime:
        return datetime.now(self.settings.tzinfo)

    def resolve_subject(self, key: Optional[str]) -> Subject:
        subject = get_subject(key)
        if subject is None:
            raise ValidationError(message="无效的科目", field="subject", context={"subject": key})
        return subject

    def _validate_push(self, content: Optional[str], subject_key: Optional[str]) -> Subject:
        if not content or not content.strip():
            raise ValidationError(message="内容不能为空", field="content")
        subject = self.resolve_subject(subject_key)
        missing = self.settings.missing_required()
        if missing:
            logger.error("Push rejected, missing configuration: %s", ", ".join(missing))
            raise ConfigurationError(missing=missing)
        return subject

    async def push(self, content: Optional[str], subject_key: Optional[str]) -> PushResult:
        """
        Append one entry to the subject's book.

        Args:
            content:      Raw entry text (trimmed before rendering).
            subject_key:  "math" or "ds".

        Returns:
            PushResult with the ordinal, created/appended and document length.

        Raises:
            ValidationError:    empty content or unknown subject (nothing fetched)
            ConfigurationError: token/owner/repo missing (nothing fetched)
            StoreError:         fetch failed, or the write failed after retries
        """
        subject = self._validate_push(content, subject_key)
        path = subject.file_path(self.settings.sub_folder)
        logger.info("Target file: %s", subject.file_name)

        # ── Fetching ──────────────────────────────────────────────────────
        existing = await self.store.fetch(path)
        now = self._now()

        # ── Creating / Appending ──────────────────────────────────────────
        if existing is None:
            ordinal = 1
            document = render_header(subject.label, now) + render_entry(content, subject.label, ordinal, now)
            commit_message = f"创建{subject.label}错题本 - 题目 #1"
            action = ACTION_CREATED
        else:
            ordinal = count_questions(existing.content) + 1
            document = existing.content + render_entry(content, subject.label, ordinal, now)
            commit_message = f"追加{subject.label}错题 #{ordinal}"
            action = ACTION_APPENDED
        document = update_count(document, ordinal)
        logger.info("%s mode, question #%d", action, ordinal)

        # ── Writing ───────────────────────────────────────────────────────
        if existing is None:
            await with_retry(
                lambda: self.store.create(path, commit_message, document),
                max_attempts=self.settings.retry_max_attempts,
                backoff_seconds=self.settings.retry_backoff_seconds,
            )
        else:
            sha = existing.sha
            await with_retry(
                lambda: self.store.update(path, commit_message, document, sha),
                max_attempts=self.settings.retry_max_attempts,
                backoff_seconds=self.settings.retry_backoff_seconds,
            )

        total_length = utf16_length(document)
        logger.info("Push to %s completed: question #%d, %d chars", subject.file_name, ordinal, total_length)
        return PushResult(
            subject=subject,
            ordinal=ordinal,
            action=action,
            total_length=total_length,
        )

    async def stats(self, subject_key: Optional[str]) -> BookStats:
        """
        Count the entries in a subject's book.

        Raises:
            ValidationError: unknown subject
            StoreError:      the read failed (a missing book is not a failure)
        """
        subject = self.resolve_subject(subject_key)
        remote = await self.store.fetch(subject.file_path(self.settings.sub_folder))
        if remote is None:
            return BookStats(subject=subject, exists=False, question_count=0)

        question_count = count_questions(remote.content)
        logger.info("%s currently holds %d questions", subject.file_name, question_count)
        return BookStats(
            subject=subject,
            exists=True,
            question_count=question_count,
            total_length=utf16_length(remote.content),
        )
