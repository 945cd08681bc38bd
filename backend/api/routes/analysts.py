"""
Analyst API routes.

Analysts are archived (status ARCHIVED) rather than deleted, so their
briefing and publication history stays intact.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import StaffUser
from api.routes.auth import get_current_user
from api.schemas.analyst import (
    AnalystArchiveResponse,
    AnalystBriefingSummary,
    AnalystCreateRequest,
    AnalystDetailResponse,
    AnalystQuoteCreateRequest,
    AnalystQuoteResponse,
    AnalystResponse,
    AnalystUpdateRequest,
)
from api.schemas.briefing import BriefingResponse
from api.schemas.common import ListResponse, SuccessResponse
from api.schemas.publication import PublicationResponse
from api.schemas.testimonial import TestimonialResponse
from api.utils import escape_like, get_or_404
from infrastructure.database.connection import get_db
from infrastructure.database.models import (
    Analyst,
    AnalystCoveredTopic,
    AnalystQuote,
    AnalystStatus,
    Briefing,
    BriefingAnalyst,
    Publication,
    Testimonial,
    User,
    UserRole,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analysts", tags=["Analysts"])

RECENT_BRIEFINGS_LIMIT = 5
ANALYST_BRIEFINGS_LIMIT = 20
ANALYST_PUBLICATIONS_LIMIT = 20
PUBLICATION_LOOKBACK = timedelta(days=730)


async def _ensure_email_available(
    db: AsyncSession, email: str, exclude_id: Optional[str] = None
) -> None:
    query = select(Analyst.id).where(Analyst.email == email)
    if exclude_id:
        query = query.where(Analyst.id != exclude_id)
    if (await db.execute(query)).scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An analyst with this email already exists",
        )


def _briefings_for_analyst(analyst_id: str):
    return (
        select(Briefing)
        .join(BriefingAnalyst, BriefingAnalyst.briefing_id == Briefing.id)
        .where(BriefingAnalyst.analyst_id == analyst_id)
        .order_by(Briefing.scheduled_at.desc())
    )


@router.get("", response_model=ListResponse[AnalystResponse])
async def list_analysts(
    current_user: StaffUser,
    search: Optional[str] = Query(None, max_length=200),
    include_archived: bool = Query(False, alias="includeArchived"),
    db: AsyncSession = Depends(get_db),
):
    """List analysts ordered by last name."""
    query = select(Analyst)

    if not include_archived:
        query = query.where(Analyst.status != AnalystStatus.ARCHIVED.value)

    if search and search.strip():
        pattern = f"%{escape_like(search.strip())}%"
        query = query.where(
            or_(
                Analyst.first_name.ilike(pattern, escape="\\"),
                Analyst.last_name.ilike(pattern, escape="\\"),
                Analyst.email.ilike(pattern, escape="\\"),
                Analyst.company.ilike(pattern, escape="\\"),
            )
        )

    query = query.order_by(Analyst.last_name.asc(), Analyst.first_name.asc())
    analysts = (await db.execute(query)).scalars().all()

    return ListResponse(
        data=[AnalystResponse.model_validate(a) for a in analysts],
        total=len(analysts),
    )


@router.post(
    "",
    response_model=SuccessResponse[AnalystResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_analyst(
    body: AnalystCreateRequest,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    """Create an analyst with optional covered topics."""
    await _ensure_email_available(db, body.email)

    fields = body.model_dump(exclude={"covered_topics"})
    analyst = Analyst(**fields)
    analyst.covered_topics = [AnalystCoveredTopic(topic=t) for t in body.covered_topics]
    db.add(analyst)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An analyst with this email already exists",
        )
    await db.refresh(analyst)

    logger.info("Analyst %s created by user %s", analyst.id, current_user.id)
    return SuccessResponse(data=AnalystResponse.model_validate(analyst))


@router.get("/by-email/{email}", response_model=SuccessResponse[AnalystResponse])
async def get_analyst_by_email(
    email: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    """
    Look an analyst up by email.

    Portal accounts may only look up their own address; staff may look up any.
    """
    email = email.strip().lower()
    if current_user.role == UserRole.ANALYST.value and current_user.email.lower() != email:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Permission denied",
        )

    analyst = (
        await db.execute(select(Analyst).where(func.lower(Analyst.email) == email))
    ).scalar_one_or_none()
    if analyst is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Analyst not found",
        )
    return SuccessResponse(data=AnalystResponse.model_validate(analyst))


@router.get("/{analyst_id}", response_model=SuccessResponse[AnalystDetailResponse])
async def get_analyst(
    analyst_id: str,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    """Get an analyst with recent briefings and quotes."""
    analyst = await get_or_404(db, Analyst, analyst_id, "Analyst")

    recent = (
        await db.execute(_briefings_for_analyst(analyst_id).limit(RECENT_BRIEFINGS_LIMIT))
    ).scalars().all()

    detail = AnalystDetailResponse(
        **AnalystResponse.model_validate(analyst).model_dump(),
        recent_briefings=[AnalystBriefingSummary.model_validate(b) for b in recent],
        quotes=[AnalystQuoteResponse.model_validate(q) for q in analyst.quotes],
    )
    return SuccessResponse(data=detail)


@router.put("/{analyst_id}", response_model=SuccessResponse[AnalystResponse])
async def update_analyst(
    analyst_id: str,
    body: AnalystUpdateRequest,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    """Partially update an analyst. ``coveredTopics`` replaces the topic set."""
    analyst = await get_or_404(db, Analyst, analyst_id, "Analyst")

    updates = body.model_dump(exclude_unset=True, exclude={"covered_topics"})
    if updates.get("email") and updates["email"] != analyst.email:
        await _ensure_email_available(db, updates["email"], exclude_id=analyst.id)

    for field, value in updates.items():
        if value is None and field in ("first_name", "last_name", "email"):
            continue
        setattr(analyst, field, value)

    if body.covered_topics is not None:
        analyst.covered_topics.clear()
        await db.flush()
        analyst.covered_topics.extend(
            AnalystCoveredTopic(topic=t) for t in body.covered_topics
        )

    await db.commit()
    await db.refresh(analyst)

    return SuccessResponse(data=AnalystResponse.model_validate(analyst))


@router.delete("/{analyst_id}", response_model=SuccessResponse[AnalystArchiveResponse])
async def archive_analyst(
    analyst_id: str,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    """Archive an analyst."""
    analyst = await get_or_404(db, Analyst, analyst_id, "Analyst")

    if analyst.status == AnalystStatus.ARCHIVED.value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Analyst is already archived",
        )

    analyst.status = AnalystStatus.ARCHIVED.value
    await db.commit()

    logger.info("Analyst %s archived by user %s", analyst.id, current_user.id)
    return SuccessResponse(
        data=AnalystArchiveResponse(
            id=analyst.id,
            name=analyst.full_name,
            status=analyst.status,
        )
    )


@router.get("/{analyst_id}/briefings", response_model=ListResponse[BriefingResponse])
async def list_analyst_briefings(
    analyst_id: str,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    """Briefings the analyst attends, newest first."""
    await get_or_404(db, Analyst, analyst_id, "Analyst")

    briefings = (
        await db.execute(_briefings_for_analyst(analyst_id).limit(ANALYST_BRIEFINGS_LIMIT))
    ).scalars().all()

    return ListResponse(
        data=[BriefingResponse.model_validate(b) for b in briefings],
        total=len(briefings),
    )


@router.get("/{analyst_id}/publications", response_model=ListResponse[PublicationResponse])
async def list_analyst_publications(
    analyst_id: str,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    """Tracked publications from the last two years, newest first."""
    await get_or_404(db, Analyst, analyst_id, "Analyst")

    since = datetime.now(timezone.utc) - PUBLICATION_LOOKBACK
    publications = (
        await db.execute(
            select(Publication)
            .where(
                Publication.analyst_id == analyst_id,
                Publication.is_tracked.is_(True),
                Publication.published_at >= since,
            )
            .order_by(Publication.published_at.desc())
            .limit(ANALYST_PUBLICATIONS_LIMIT)
        )
    ).scalars().all()

    return ListResponse(
        data=[PublicationResponse.model_validate(p) for p in publications],
        total=len(publications),
    )


@router.get("/{analyst_id}/testimonials", response_model=ListResponse[TestimonialResponse])
async def list_analyst_testimonials(
    analyst_id: str,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    await get_or_404(db, Analyst, analyst_id, "Analyst")

    testimonials = (
        await db.execute(
            select(Testimonial)
            .where(Testimonial.analyst_id == analyst_id)
            .order_by(Testimonial.display_order.asc(), Testimonial.created_at.desc())
        )
    ).scalars().all()

    return ListResponse(
        data=[TestimonialResponse.model_validate(t) for t in testimonials],
        total=len(testimonials),
    )


@router.get("/{analyst_id}/quotes", response_model=ListResponse[AnalystQuoteResponse])
async def list_analyst_quotes(
    analyst_id: str,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    """Quotes for an analyst, featured first."""
    await get_or_404(db, Analyst, analyst_id, "Analyst")

    quotes = (
        await db.execute(
            select(AnalystQuote)
            .where(AnalystQuote.analyst_id == analyst_id)
            .order_by(AnalystQuote.is_featured.desc(), AnalystQuote.created_at.desc())
        )
    ).scalars().all()

    return ListResponse(
        data=[AnalystQuoteResponse.model_validate(q) for q in quotes],
        total=len(quotes),
    )


@router.post(
    "/{analyst_id}/quotes",
    response_model=SuccessResponse[AnalystQuoteResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_analyst_quote(
    analyst_id: str,
    body: AnalystQuoteCreateRequest,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    """Add a quote. A new featured quote un-features the previous one."""
    await get_or_404(db, Analyst, analyst_id, "Analyst")

    if body.is_featured:
        featured = (
            await db.execute(
                select(AnalystQuote).where(
                    AnalystQuote.analyst_id == analyst_id,
                    AnalystQuote.is_featured.is_(True),
                )
            )
        ).scalars().all()
        for quote in featured:
            quote.is_featured = False

    quote = AnalystQuote(analyst_id=analyst_id, **body.model_dump())
    db.add(quote)
    await db.commit()
    await db.refresh(quote)

    return SuccessResponse(data=AnalystQuoteResponse.model_validate(quote))
