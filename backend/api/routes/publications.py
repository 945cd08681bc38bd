"""
Publication API routes.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import StaffUser
from api.schemas.common import ListResponse, MessageResponse, SuccessResponse
from api.schemas.publication import (
    PublicationCreateRequest,
    PublicationResponse,
    PublicationUpdateRequest,
    normalize_publication_type,
)
from api.utils import get_or_404
from infrastructure.database.connection import get_db
from infrastructure.database.models import Analyst, Publication, PublicationType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/publications", tags=["Publications"])


@router.get("", response_model=ListResponse[PublicationResponse])
async def list_publications(
    current_user: StaffUser,
    analyst_id: Optional[str] = Query(None, alias="analystId"),
    type_filter: Optional[str] = Query(None, alias="type"),
    is_tracked: Optional[bool] = Query(None, alias="isTracked"),
    db: AsyncSession = Depends(get_db),
):
    """List publications, most recently published first."""
    query = select(Publication)

    if analyst_id:
        query = query.where(Publication.analyst_id == analyst_id)

    if type_filter:
        normalized = normalize_publication_type(type_filter)
        if normalized not in PublicationType.__members__:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid publication type: {type_filter}",
            )
        query = query.where(Publication.type == normalized)

    if is_tracked is not None:
        query = query.where(Publication.is_tracked.is_(is_tracked))

    query = query.order_by(
        Publication.published_at.desc().nulls_last(),
        Publication.created_at.desc(),
    )
    publications = (await db.execute(query)).scalars().all()

    return ListResponse(
        data=[PublicationResponse.model_validate(p) for p in publications],
        total=len(publications),
    )


@router.post(
    "",
    response_model=SuccessResponse[PublicationResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_publication(
    body: PublicationCreateRequest,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    """Create a publication for an existing analyst."""
    await get_or_404(db, Analyst, body.analyst_id, "Analyst")

    publication = Publication(**body.model_dump())
    db.add(publication)
    await db.commit()
    await db.refresh(publication)

    logger.info("Publication %s created for analyst %s", publication.id, body.analyst_id)
    return SuccessResponse(data=PublicationResponse.model_validate(publication))


@router.get("/{publication_id}", response_model=SuccessResponse[PublicationResponse])
async def get_publication(
    publication_id: str,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    publication = await get_or_404(db, Publication, publication_id, "Publication")
    return SuccessResponse(data=PublicationResponse.model_validate(publication))


@router.put("/{publication_id}", response_model=SuccessResponse[PublicationResponse])
async def update_publication(
    publication_id: str,
    body: PublicationUpdateRequest,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    publication = await get_or_404(db, Publication, publication_id, "Publication")

    for field, value in body.model_dump(exclude_unset=True).items():
        if value is None and field in ("title", "type", "status", "is_tracked", "is_validated"):
            continue
        setattr(publication, field, value)

    await db.commit()
    await db.refresh(publication)

    return SuccessResponse(data=PublicationResponse.model_validate(publication))


@router.delete("/{publication_id}", response_model=MessageResponse)
async def delete_publication(
    publication_id: str,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    publication = await get_or_404(db, Publication, publication_id, "Publication")
    await db.delete(publication)
    await db.commit()

    logger.info("Publication %s deleted by user %s", publication_id, current_user.id)
    return MessageResponse(message="Publication deleted successfully")
