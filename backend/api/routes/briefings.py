"""
Briefing API routes.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import StaffUser
from api.schemas.briefing import BriefingCreateRequest, BriefingResponse, BriefingUpdateRequest
from api.schemas.common import ListResponse, MessageResponse, SuccessResponse
from api.utils import get_or_404
from infrastructure.database.connection import get_db
from infrastructure.database.models import Analyst, Briefing, BriefingAnalyst, BriefingStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/briefings", tags=["Briefings"])

DEFAULT_LIST_LIMIT = 1000


async def _load_attendees(db: AsyncSession, analyst_ids: list[str]) -> list[Analyst]:
    """Load the analysts for ``analyst_ids``; unknown ids are a 400."""
    unique_ids = list(dict.fromkeys(analyst_ids))
    if not unique_ids:
        return []

    analysts = (
        await db.execute(select(Analyst).where(Analyst.id.in_(unique_ids)))
    ).scalars().all()
    by_id = {a.id: a for a in analysts}

    missing = [i for i in unique_ids if i not in by_id]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown analyst id(s): {', '.join(missing)}",
        )
    return [by_id[i] for i in unique_ids]


def _stamp_completion(briefing: Briefing) -> None:
    """Record when a briefing became COMPLETED; clear it when it is reopened."""
    if briefing.status == BriefingStatus.COMPLETED.value:
        if briefing.completed_at is None:
            briefing.completed_at = datetime.now(timezone.utc)
    else:
        briefing.completed_at = None


@router.get("", response_model=ListResponse[BriefingResponse])
async def list_briefings(
    current_user: StaffUser,
    status_filter: Optional[str] = Query(None, alias="status"),
    upcoming: bool = Query(False),
    analyst_id: Optional[str] = Query(None, alias="analystId"),
    limit: int = Query(DEFAULT_LIST_LIMIT, ge=1, le=DEFAULT_LIST_LIMIT),
    db: AsyncSession = Depends(get_db),
):
    """
    List briefings.

    ``upcoming`` returns future briefings soonest first; otherwise the list
    is newest first.
    """
    query = select(Briefing)

    if status_filter:
        normalized = status_filter.strip().upper()
        if normalized not in BriefingStatus.__members__:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid status: {status_filter}",
            )
        query = query.where(Briefing.status == normalized)

    if analyst_id:
        query = query.where(
            Briefing.id.in_(
                select(BriefingAnalyst.briefing_id).where(BriefingAnalyst.analyst_id == analyst_id)
            )
        )

    if upcoming:
        query = query.where(Briefing.scheduled_at >= datetime.now(timezone.utc))
        query = query.order_by(Briefing.scheduled_at.asc())
    else:
        query = query.order_by(Briefing.scheduled_at.desc())

    briefings = (await db.execute(query.limit(limit))).scalars().all()

    return ListResponse(
        data=[BriefingResponse.model_validate(b) for b in briefings],
        total=len(briefings),
    )


@router.get("/next", response_model=SuccessResponse[Optional[BriefingResponse]])
async def get_next_briefing(
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    """The soonest upcoming scheduled or rescheduled briefing, or null."""
    briefing = (
        await db.execute(
            select(Briefing)
            .where(
                Briefing.status.in_(
                    [BriefingStatus.SCHEDULED.value, BriefingStatus.RESCHEDULED.value]
                ),
                Briefing.scheduled_at >= datetime.now(timezone.utc),
            )
            .order_by(Briefing.scheduled_at.asc())
            .limit(1)
        )
    ).scalar_one_or_none()

    return SuccessResponse(
        data=BriefingResponse.model_validate(briefing) if briefing else None
    )


@router.get("/last", response_model=SuccessResponse[Optional[BriefingResponse]])
async def get_last_briefing(
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    """The most recently completed briefing, or null."""
    briefing = (
        await db.execute(
            select(Briefing)
            .where(Briefing.status == BriefingStatus.COMPLETED.value)
            .order_by(func.coalesce(Briefing.completed_at, Briefing.scheduled_at).desc())
            .limit(1)
        )
    ).scalar_one_or_none()

    return SuccessResponse(
        data=BriefingResponse.model_validate(briefing) if briefing else None
    )


@router.post(
    "",
    response_model=SuccessResponse[BriefingResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_briefing(
    body: BriefingCreateRequest,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    """Create a briefing and link its analysts."""
    attendees = await _load_attendees(db, body.analyst_ids)

    briefing = Briefing(**body.model_dump(exclude={"analyst_ids"}))
    briefing.analyst_links = [BriefingAnalyst(analyst=a) for a in attendees]
    _stamp_completion(briefing)
    db.add(briefing)
    await db.commit()
    await db.refresh(briefing)

    logger.info(
        "Briefing %s created with %d analyst(s) by user %s",
        briefing.id,
        len(attendees),
        current_user.id,
    )
    return SuccessResponse(data=BriefingResponse.model_validate(briefing))


@router.get("/{briefing_id}", response_model=SuccessResponse[BriefingResponse])
async def get_briefing(
    briefing_id: str,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    briefing = await get_or_404(db, Briefing, briefing_id, "Briefing")
    return SuccessResponse(data=BriefingResponse.model_validate(briefing))


@router.put("/{briefing_id}", response_model=SuccessResponse[BriefingResponse])
async def update_briefing(
    briefing_id: str,
    body: BriefingUpdateRequest,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    """Partially update a briefing. ``analystIds`` replaces the attendees."""
    briefing = await get_or_404(db, Briefing, briefing_id, "Briefing")

    updates = body.model_dump(exclude_unset=True, exclude={"analyst_ids"})
    for field, value in updates.items():
        if value is None and field in ("title", "scheduled_at", "duration", "status", "is_confirmed"):
            continue
        setattr(briefing, field, value)

    if body.analyst_ids is not None:
        attendees = await _load_attendees(db, body.analyst_ids)
        briefing.analyst_links.clear()
        await db.flush()
        briefing.analyst_links.extend(BriefingAnalyst(analyst=a) for a in attendees)

    _stamp_completion(briefing)
    await db.commit()
    await db.refresh(briefing)

    return SuccessResponse(data=BriefingResponse.model_validate(briefing))


@router.delete("/{briefing_id}", response_model=MessageResponse)
async def delete_briefing(
    briefing_id: str,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    briefing = await get_or_404(db, Briefing, briefing_id, "Briefing")
    await db.delete(briefing)
    await db.commit()

    logger.info("Briefing %s deleted by user %s", briefing_id, current_user.id)
    return MessageResponse(message="Briefing deleted successfully")
