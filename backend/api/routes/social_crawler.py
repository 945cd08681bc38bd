"""
Social crawler routes.

Crawling runs in a separate service; both methods answer 501.
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from api.schemas.common import ErrorResponse

router = APIRouter(prefix="/social-crawler", tags=["Social Crawler"])

MOVED_MESSAGE = "Social crawler functionality has moved to a separate service"


def _moved() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_501_NOT_IMPLEMENTED,
        content=ErrorResponse(error=MOVED_MESSAGE).model_dump(),
    )


@router.get("", responses={501: {"model": ErrorResponse}})
async def social_crawler_get():
    return _moved()


@router.post("", responses={501: {"model": ErrorResponse}})
async def social_crawler_post():
    return _moved()
