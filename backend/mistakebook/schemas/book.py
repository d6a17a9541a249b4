"""
Mistake Book Backend: Pydantic Request/Response Schemas
========================================================

What:  The JSON contract with the browser front-end.
How:   Field names are snake_case in Python and camelCase on the wire
       (alias generator); FastAPI serializes response models by alias.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════

class PushRequest(CamelModel):
    """
    Body of POST /api/push.

    Both fields are optional at the schema level so that an empty or unknown
    value reaches the service and gets its 400 message, instead of FastAPI's
    generic 422.
    """

    content: Optional[str] = Field(default=None, description="Mistake entry text (Markdown)")
    subject: Optional[str] = Field(default=None, description="Book to append to: math or ds")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════

class PushResponse(CamelModel):
    success: bool = True
    message: str = Field(description="Human-readable result, e.g. 追加数学错题成功 - 题目 #3")
    file_name: str = Field(description="Book file the entry went to")
    action: str = Field(description="created or appended")
    question_number: int = Field(description="Ordinal assigned to the entry")
    total_length: int = Field(description="Length of the written document in characters")


class StatsResponse(CamelModel):
    """
    Returned by GET /api/stats/{subject}.

    total_length and last_update are present only when the book exists;
    message only when it does not.
    """

    success: bool = True
    exists: bool
    question_count: int
    total_length: Optional[int] = None
    last_update: Optional[str] = None
    message: Optional[str] = None


class HealthResponse(CamelModel):
    status: str = Field(description="healthy when a token is configured, otherwise unconfigured")
    configured: bool
    files: Dict[str, str] = Field(description="Subject key → book file name")
    features: List[str]
    version: str


class ErrorResponse(CamelModel):
    """Error body for every failed request."""

    success: bool = False
    message: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")
