"""
Mistake Book Backend: Health Check Route
=========================================

What:  GET /api/health tells the front-end and probes whether pushes can work.
How:   Reports configuration only; it makes no call to Gitee.

Status levels:
    - healthy:       GIT_TOKEN is set
    - unconfigured:  GIT_TOKEN is missing (stats may work, pushes will not)
"""

from fastapi import APIRouter, Depends

from mistakebook import __version__
from mistakebook.config import Settings
from mistakebook.dependencies import get_settings
from mistakebook.models.book import SUBJECTS
from mistakebook.schemas.book import HealthResponse

router = APIRouter(prefix="/api", tags=["Health"])

FEATURES = ["auto-numbering", "timestamps", "statistics"]


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    configured = settings.has_token
    return HealthResponse(
        status="healthy" if configured else "unconfigured",
        configured=configured,
        files={key: subject.file_name for key, subject in SUBJECTS.items()},
        features=FEATURES,
        version=__version__,
    )
