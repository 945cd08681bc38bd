"""
Organization settings API routes.

Covers the general settings, the predefined topic catalogue, influence
tiers and the analyst portal welcome content. Staff can read everything;
changes need an admin.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import AdminUser, StaffUser
from api.routes.auth import get_current_user
from api.schemas.common import ListResponse, MessageResponse, SuccessResponse
from api.schemas.settings import (
    AnalystPortalSettingsResponse,
    AnalystPortalSettingsUpdateRequest,
    GeneralSettingsResponse,
    GeneralSettingsUpdateRequest,
    InfluenceTierResponse,
    InfluenceTiersSaveRequest,
    TopicRequest,
    TopicResponse,
)
from api.utils import get_or_404
from infrastructure.database.connection import get_db
from infrastructure.database.models import AnalystCoveredTopic, PredefinedTopic, User
from services.general_settings import (
    get_or_create_general_settings,
    get_or_create_portal_settings,
    list_influence_tiers,
    replace_influence_tiers,
    update_general_settings,
    update_portal_settings,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["Settings"])

DUPLICATE_TOPIC = "A topic with this name already exists"


@router.get("/general", response_model=SuccessResponse[GeneralSettingsResponse])
async def get_general_settings(
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    """Get the organization settings, creating the defaults on first read."""
    general = await get_or_create_general_settings(db)
    return SuccessResponse(data=GeneralSettingsResponse.model_validate(general))


@router.put("/general", response_model=SuccessResponse[GeneralSettingsResponse])
async def put_general_settings(
    body: GeneralSettingsUpdateRequest,
    current_user: AdminUser,
    db: AsyncSession = Depends(get_db),
):
    """Update the organization settings (admin only)."""
    general = await update_general_settings(db, body)
    logger.info("General settings updated by user %s", current_user.id)
    return SuccessResponse(data=GeneralSettingsResponse.model_validate(general))


# ---------------------------------------------------------------------------
# Predefined topics
# ---------------------------------------------------------------------------


async def _ensure_topic_name_available(
    db: AsyncSession, name: str, exclude_id: str | None = None
) -> None:
    query = select(PredefinedTopic.id).where(PredefinedTopic.name == name)
    if exclude_id:
        query = query.where(PredefinedTopic.id != exclude_id)
    if (await db.execute(query)).scalar_one_or_none():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_TOPIC)


async def _commit_topic(db: AsyncSession, topic: PredefinedTopic) -> None:
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_TOPIC)
    await db.refresh(topic)


@router.get("/topics", response_model=ListResponse[TopicResponse])
async def list_topics(
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    topics = (
        await db.execute(
            select(PredefinedTopic)
            .order_by(PredefinedTopic.order.asc(), PredefinedTopic.name.asc())
        )
    ).scalars().all()
    return ListResponse(
        data=[TopicResponse.model_validate(t) for t in topics],
        total=len(topics),
    )


@router.post(
    "/topics",
    response_model=SuccessResponse[TopicResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_topic(
    body: TopicRequest,
    current_user: AdminUser,
    db: AsyncSession = Depends(get_db),
):
    await _ensure_topic_name_available(db, body.name)

    topic = PredefinedTopic(**body.model_dump())
    db.add(topic)
    await _commit_topic(db, topic)

    logger.info("Topic %r created by user %s", topic.name, current_user.id)
    return SuccessResponse(data=TopicResponse.model_validate(topic))


@router.put("/topics/{topic_id}", response_model=SuccessResponse[TopicResponse])
async def update_topic(
    topic_id: str,
    body: TopicRequest,
    current_user: AdminUser,
    db: AsyncSession = Depends(get_db),
):
    """Replace a topic's name, category, description and order."""
    topic = await get_or_404(db, PredefinedTopic, topic_id, "Topic")
    await _ensure_topic_name_available(db, body.name, exclude_id=topic.id)

    for field, value in body.model_dump().items():
        setattr(topic, field, value)
    await _commit_topic(db, topic)

    return SuccessResponse(data=TopicResponse.model_validate(topic))


@router.delete("/topics/{topic_id}", response_model=MessageResponse)
async def delete_topic(
    topic_id: str,
    current_user: AdminUser,
    db: AsyncSession = Depends(get_db),
):
    """Delete a topic that no analyst covers."""
    topic = await get_or_404(db, PredefinedTopic, topic_id, "Topic")

    in_use = (
        await db.execute(
            select(AnalystCoveredTopic.id).where(AnalystCoveredTopic.topic == topic.name).limit(1)
        )
    ).scalar_one_or_none()
    if in_use:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Cannot delete topic that is currently assigned to analysts",
        )

    await db.delete(topic)
    await db.commit()

    logger.info("Topic %r deleted by user %s", topic.name, current_user.id)
    return MessageResponse(message="Topic deleted")


# ---------------------------------------------------------------------------
# Influence tiers
# ---------------------------------------------------------------------------


@router.get("/influence-tiers", response_model=ListResponse[InfluenceTierResponse])
async def get_influence_tiers(
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    tiers = await list_influence_tiers(db)
    return ListResponse(
        data=[InfluenceTierResponse.from_tier(t) for t in tiers],
        total=len(tiers),
    )


@router.post("/influence-tiers", response_model=ListResponse[InfluenceTierResponse])
async def save_influence_tiers(
    body: InfluenceTiersSaveRequest,
    current_user: AdminUser,
    db: AsyncSession = Depends(get_db),
):
    """Replace the tier list. Frequencies of -1 mean never."""
    tiers = await replace_influence_tiers(db, body.tiers)
    logger.info("Influence tiers replaced by user %s", current_user.id)
    return ListResponse(
        data=[InfluenceTierResponse.from_tier(t) for t in tiers],
        total=len(tiers),
    )


# ---------------------------------------------------------------------------
# Analyst portal welcome content
# ---------------------------------------------------------------------------


@router.get(
    "/analyst-portal", response_model=SuccessResponse[AnalystPortalSettingsResponse]
)
async def get_analyst_portal_settings(
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    """Any signed-in user, portal accounts included."""
    portal = await get_or_create_portal_settings(db)
    return SuccessResponse(data=AnalystPortalSettingsResponse.model_validate(portal))


@router.put(
    "/analyst-portal", response_model=SuccessResponse[AnalystPortalSettingsResponse]
)
async def put_analyst_portal_settings(
    body: AnalystPortalSettingsUpdateRequest,
    current_user: AdminUser,
    db: AsyncSession = Depends(get_db),
):
    portal = await update_portal_settings(db, body)
    logger.info("Analyst portal settings updated by user %s", current_user.id)
    return SuccessResponse(data=AnalystPortalSettingsResponse.model_validate(portal))
