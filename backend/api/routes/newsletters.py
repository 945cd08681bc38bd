"""
Newsletter API routes.

The tracking endpoints are hit from email clients and require no
authentication.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import StaffUser
from api.middleware.rate_limit import get_rate_limit, limiter
from api.schemas.common import MessageResponse, SuccessResponse
from api.schemas.newsletter import (
    NewsletterCreateRequest,
    NewsletterMetrics,
    NewsletterResponse,
    NewsletterUpdateRequest,
)
from api.utils import get_or_404
from infrastructure.database.connection import get_db
from infrastructure.database.models import Newsletter
from services.newsletters import NewsletterService, compute_metrics

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/newsletters", tags=["Newsletters"])


def _to_response(newsletter: Newsletter) -> NewsletterResponse:
    response = NewsletterResponse.model_validate(newsletter)
    response.metrics = compute_metrics(newsletter)
    return response


@router.get("", response_model=SuccessResponse[list[NewsletterResponse]])
async def list_newsletters(
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    """List newsletters, newest first, with engagement metrics."""
    newsletters = (
        await db.execute(select(Newsletter).order_by(Newsletter.created_at.desc()))
    ).scalars().all()
    logger.debug("Found %d newsletters", len(newsletters))
    return SuccessResponse(data=[_to_response(n) for n in newsletters])


@router.post(
    "",
    response_model=SuccessResponse[NewsletterResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_newsletter(
    body: NewsletterCreateRequest,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    """Create a newsletter. New newsletters default to DRAFT."""
    newsletter = Newsletter(**body.model_dump(), created_by=current_user.id)
    db.add(newsletter)
    await db.commit()
    await db.refresh(newsletter)

    logger.info("Newsletter %s created by user %s", newsletter.id, current_user.id)
    return SuccessResponse(data=_to_response(newsletter))


@router.get("/{newsletter_id}", response_model=SuccessResponse[NewsletterResponse])
async def get_newsletter(
    newsletter_id: str,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    newsletter = await get_or_404(db, Newsletter, newsletter_id, "Newsletter")
    return SuccessResponse(data=_to_response(newsletter))


@router.put("/{newsletter_id}", response_model=SuccessResponse[NewsletterResponse])
async def update_newsletter(
    newsletter_id: str,
    body: NewsletterUpdateRequest,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    newsletter = await get_or_404(db, Newsletter, newsletter_id, "Newsletter")

    for field, value in body.model_dump(exclude_unset=True).items():
        if value is None and field != "scheduled_at":
            continue
        setattr(newsletter, field, value)

    await db.commit()
    await db.refresh(newsletter)

    return SuccessResponse(data=_to_response(newsletter))


@router.delete("/{newsletter_id}", response_model=MessageResponse)
async def delete_newsletter(
    newsletter_id: str,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    newsletter = await get_or_404(db, Newsletter, newsletter_id, "Newsletter")
    await db.delete(newsletter)
    await db.commit()

    logger.info("Newsletter %s deleted by user %s", newsletter_id, current_user.id)
    return MessageResponse(message="Newsletter deleted successfully")


@router.post("/{newsletter_id}/send", response_model=SuccessResponse[NewsletterResponse])
async def send_newsletter(
    newsletter_id: str,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    """Mark a newsletter as sent and return the updated record."""
    newsletter = await get_or_404(db, Newsletter, newsletter_id, "Newsletter")
    newsletter = await NewsletterService(db).send(newsletter)
    return SuccessResponse(data=_to_response(newsletter))


async def _track(db: AsyncSession, newsletter_id: str, kind: str) -> NewsletterMetrics:
    service = NewsletterService(db)
    recorded = (
        await service.record_open(newsletter_id)
        if kind == "open"
        else await service.record_click(newsletter_id)
    )
    if not recorded:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Newsletter not found",
        )

    newsletter = await get_or_404(db, Newsletter, newsletter_id, "Newsletter")
    await db.refresh(newsletter)
    return compute_metrics(newsletter)


@router.get("/{newsletter_id}/track/open", response_model=SuccessResponse[NewsletterMetrics])
@limiter.limit(get_rate_limit("tracking"))
async def track_open(
    request: Request,
    newsletter_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Record an open."""
    return SuccessResponse(data=await _track(db, newsletter_id, "open"))


@router.get("/{newsletter_id}/track/click", response_model=SuccessResponse[NewsletterMetrics])
@limiter.limit(get_rate_limit("tracking"))
async def track_click(
    request: Request,
    newsletter_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Record a click."""
    return SuccessResponse(data=await _track(db, newsletter_id, "click"))
