"""
Testimonial API routes.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import StaffUser
from api.schemas.common import ListResponse, MessageResponse, SuccessResponse
from api.schemas.testimonial import (
    TestimonialCreateRequest,
    TestimonialResponse,
    TestimonialUpdateRequest,
)
from api.utils import get_or_404
from infrastructure.database.connection import get_db
from infrastructure.database.models import Analyst, Testimonial

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/testimonials", tags=["Testimonials"])


@router.get("", response_model=ListResponse[TestimonialResponse])
async def list_testimonials(
    current_user: StaffUser,
    analyst_id: Optional[str] = Query(None, alias="analystId"),
    published: Optional[bool] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    query = select(Testimonial)
    if analyst_id:
        query = query.where(Testimonial.analyst_id == analyst_id)
    if published is not None:
        query = query.where(Testimonial.is_published.is_(published))

    query = query.order_by(Testimonial.display_order.asc(), Testimonial.date.desc())
    testimonials = (await db.execute(query)).scalars().all()

    return ListResponse(
        data=[TestimonialResponse.model_validate(t) for t in testimonials],
        total=len(testimonials),
    )


@router.post(
    "",
    response_model=SuccessResponse[TestimonialResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_testimonial(
    body: TestimonialCreateRequest,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    await get_or_404(db, Analyst, body.analyst_id, "Analyst")

    fields = body.model_dump(exclude_none=True)
    testimonial = Testimonial(**fields)
    db.add(testimonial)
    await db.commit()
    await db.refresh(testimonial)

    return SuccessResponse(data=TestimonialResponse.model_validate(testimonial))


@router.get("/{testimonial_id}", response_model=SuccessResponse[TestimonialResponse])
async def get_testimonial(
    testimonial_id: str,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    testimonial = await get_or_404(db, Testimonial, testimonial_id, "Testimonial")
    return SuccessResponse(data=TestimonialResponse.model_validate(testimonial))


@router.put("/{testimonial_id}", response_model=SuccessResponse[TestimonialResponse])
async def update_testimonial(
    testimonial_id: str,
    body: TestimonialUpdateRequest,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    testimonial = await get_or_404(db, Testimonial, testimonial_id, "Testimonial")

    # None means "unchanged"; every column here is non-nullable
    for field, value in body.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(testimonial, field, value)

    await db.commit()
    await db.refresh(testimonial)

    return SuccessResponse(data=TestimonialResponse.model_validate(testimonial))


@router.delete("/{testimonial_id}", response_model=MessageResponse)
async def delete_testimonial(
    testimonial_id: str,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    testimonial = await get_or_404(db, Testimonial, testimonial_id, "Testimonial")
    await db.delete(testimonial)
    await db.commit()

    logger.info("Testimonial %s deleted by user %s", testimonial_id, current_user.id)
    return MessageResponse(message="Testimonial deleted successfully")
