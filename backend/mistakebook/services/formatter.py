"""
Mistake Book Backend: Markdown Formatter
=========================================

What:  Pure text functions that build and inspect a mistake book document.
Who:   MistakeBookService (push and stats).

Document layout:
    # 数学 错题本

    > 📚 创建日期：2026/10/17
    > 🎯 学科：数学
    > 📖 用途：考研错题整理与复习
    > 🔢 题目总数：2 道

    ---

    ## 题目 #1 | 2026-10-17 09:05

    <entry text>

    ---

    ## 题目 #2 | 2026-10-17 21:40
    ...

The `> 🔢 题目总数：N 道` line is a semi-structured field: update_count()
rewrites it and readers of the repository may parse it. It must always equal
the number of `## 题目 #N` headings after a successful write.
"""

import re
from datetime import datetime
from typing import Optional

QUESTION_HEADING_PATTERN = re.compile(r"^## 题目 #\d+", re.MULTILINE)
COUNT_FIELD_PATTERN = re.compile(r"^> 🔢 题目总数：\d+ 道", re.MULTILINE)

USAGE_DESCRIPTION = "考研错题整理与复习"


def count_questions(content: Optional[str]) -> int:
    """Number of lines starting with `## 题目 #<digits>`; 0 for empty content."""
    if not content:
        return 0
    return len(QUESTION_HEADING_PATTERN.findall(content))


def format_header_date(now: datetime) -> str:
    # Year/month/day without zero padding, e.g. 2026/1/5
    return f"{now.year}/{now.month}/{now.day}"


def render_header(subject_label: str, now: Optional[datetime] = None) -> str:
    """
    Header block written once, when a book is created.

    The count field starts at 0; the caller sets the real total with
    update_count() after appending the first entry. Lines end with two spaces
    (Markdown hard line breaks) except the count line, which update_count()
    matches exactly.
    """
    now = now or datetime.now()
    return (
        f"# {subject_label} 错题本\n"
        "\n"
        f"> 📚 创建日期：{format_header_date(now)}  \n"
        f"> 🎯 学科：{subject_label}  \n"
        f"> 📖 用途：{USAGE_DESCRIPTION}  \n"
        "> 🔢 题目总数：0 道\n"
        "\n"
        "---\n"
        "\n"
    )


def render_entry(
    raw_text: str,
    subject_label: str,
    ordinal: int,
    now: Optional[datetime] = None,
) -> str:
    """
    One numbered, timestamped entry followed by a separator.

    Heading: `## 题目 #<ordinal> | YYYY-MM-DD HH:MM` (24-hour clock).
    The subject label is accepted for symmetry with render_header() but the
    entry itself does not repeat it.
    """
    now = now or datetime.now()
    stamp = now.strftime("%Y-%m-%d %H:%M")
    return f"\n## 题目 #{ordinal} | {stamp}\n\n{raw_text.strip()}\n\n---\n"


def update_count(document: str, total_count: int) -> str:
    """Rewrite the first count field to `total_count`; no-op if there is none."""
    return COUNT_FIELD_PATTERN.sub(f"> 🔢 题目总数：{total_count} 道", document, count=1)


def utf16_length(text: Optional[str]) -> int:
    """Length in UTF-16 code units, the unit web clients count characters in (📚 counts 2)."""
    if not text:
        return 0
    return len(text.encode("utf-16-le")) // 2
