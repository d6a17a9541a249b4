"""
Mistake Book Backend: Push Route Handler
=========================================

What:  POST /api/push appends one mistake entry to the math or ds book.

Request Flow:
    1. FastAPI parses the JSON body into PushRequest
    2. MistakeBookService.push() validates, fetches, renders and writes
    3. 200 with PushResponse on success

Error responses (handled by global exception handlers):
    HTTP 400: empty content / invalid subject / malformed body
    HTTP 401, 403, 404, 409, 5xx: relayed from Gitee with a readable message
    HTTP 500: missing server configuration or unexpected error
"""

import logging

from fastapi import APIRouter, Depends, Request

from mistakebook.dependencies import get_book_service
from mistakebook.schemas.book import ErrorResponse, PushRequest, PushResponse
from mistakebook.services.book_service import MistakeBookService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Push"])


@router.post(
    "/push",
    response_model=PushResponse,
    responses={
        400: {"description": "Empty content or invalid subject", "model": ErrorResponse},
        500: {"description": "Server configuration incomplete", "model": ErrorResponse},
    },
    summary="Append a mistake entry",
)
async def push_entry(
    body: PushRequest,
    request: Request,
    service: MistakeBookService = Depends(get_book_service),
) -> PushResponse:
    """Append `content` to the `subject` book, creating the book on first use."""
    result = await service.push(body.content, body.subject)
    # Tag for the access log line, e.g. "math #4 appended"
    request.state.push_outcome = f"{result.subject.key} #{result.ordinal} {result.action}"
    return PushResponse(
        message=result.message,
        file_name=result.subject.file_name,
        action=result.action,
        question_number=result.ordinal,
        total_length=result.total_length,
    )
