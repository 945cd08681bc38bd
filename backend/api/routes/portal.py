"""
Analyst portal API routes.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.routes.auth import get_current_user
from api.schemas.common import SuccessResponse
from api.schemas.portal import AnalystPortalResponse
from api.utils import get_or_404
from infrastructure.database.connection import get_db
from infrastructure.database.models import Analyst, AnalystStatus, User, UserRole
from services.analyst_portal import AnalystPortalService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/portal", tags=["Analyst Portal"])


@router.get("/{analyst_id}", response_model=SuccessResponse[AnalystPortalResponse])
async def get_analyst_portal(
    analyst_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    """
    Portal data for one analyst.

    Staff can open any analyst's portal; portal accounts only their own,
    matched by email.
    """
    analyst = await get_or_404(db, Analyst, analyst_id, "Analyst")

    if current_user.role == UserRole.ANALYST.value and (
        current_user.email.lower() != analyst.email.lower()
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to view this portal",
        )

    if analyst.status == AnalystStatus.ARCHIVED.value:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Analyst not found",
        )

    portal = await AnalystPortalService(db).build(analyst)
    return SuccessResponse(data=portal)
