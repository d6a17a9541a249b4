"""
Mistake Book Backend: Domain Models
====================================

What:  Plain value objects passed between the store, the formatter and the
       service. They are not API contracts (see schemas/book.py for those).

Subjects are fixed at import time:
    math → 数学错题本.md     (label 数学)
    ds   → 数据结构错题本.md  (label 数据结构)
"""

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class Subject:
    """One mistake book: its key, the Markdown file it lives in, its display label."""

    key: str
    file_name: str
    label: str

    def file_path(self, sub_folder: str = "") -> str:
        """Repository path of the book, under `sub_folder` when one is set."""
        return f"{sub_folder}/{self.file_name}" if sub_folder else self.file_name


SUBJECTS: Dict[str, Subject] = {
    "math": Subject(key="math", file_name="数学错题本.md", label="数学"),
    "ds": Subject(key="ds", file_name="数据结构错题本.md", label="数据结构"),
}


def get_subject(key: Optional[str]) -> Optional[Subject]:
    return SUBJECTS.get(key) if key else None


@dataclass(frozen=True)
class RemoteFile:
    """
    Current state of a tracked file in the store.

    Attributes:
        sha:     Opaque version token; an update must present it unchanged.
        content: Full decoded UTF-8 text.
    """

    sha: str
    content: str


ACTION_CREATED = "created"
ACTION_APPENDED = "appended"


@dataclass(frozen=True)
class PushResult:
    """Outcome of one successful push."""

    subject: Subject
    ordinal: int
    action: str
    total_length: int

    @property
    def created(self) -> bool:
        return self.action == ACTION_CREATED

    @property
    def message(self) -> str:
        if self.created:
            return f"创建{self.subject.label}错题本成功 - 题目 #{self.ordinal}"
        return f"追加{self.subject.label}错题成功 - 题目 #{self.ordinal}"


@dataclass(frozen=True)
class BookStats:
    """Snapshot numbers for one book. total_length is None when the book is absent."""

    subject: Subject
    exists: bool
    question_count: int
    total_length: Optional[int] = None
