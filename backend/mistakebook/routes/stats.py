"""
Mistake Book Backend: Stats Route Handler
==========================================

What:  GET /api/stats/{subject} reports whether a book exists and how many
       questions it holds. The book is read fresh on every call.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from mistakebook.dependencies import get_book_service
from mistakebook.schemas.book import ErrorResponse, StatsResponse
from mistakebook.services.book_service import MistakeBookService

router = APIRouter(prefix="/api", tags=["Stats"])


@router.get(
    "/stats/{subject}",
    response_model=StatsResponse,
    response_model_exclude_none=True,
    responses={400: {"description": "Invalid subject", "model": ErrorResponse}},
    summary="Question count of one book",
)
async def book_stats(
    subject: str,
    service: MistakeBookService = Depends(get_book_service),
) -> StatsResponse:
    stats = await service.stats(subject)
    if not stats.exists:
        return StatsResponse(exists=False, question_count=0, message="文件尚不存在")

    return StatsResponse(
        exists=True,
        question_count=stats.question_count,
        total_length=stats.total_length,
        last_update=datetime.now(timezone.utc).isoformat(),
    )
