"""
Shared API utility functions.
"""

from typing import TypeVar

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

ModelT = TypeVar("ModelT")


def escape_like(value: str) -> str:
    """Escape LIKE wildcards for safe use in SQL LIKE/ILIKE patterns."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def get_or_404(db: AsyncSession, model: type[ModelT], obj_id: str, label: str) -> ModelT:
    """Load ``model`` by primary key or raise 404 "<label> not found"."""
    obj = await db.get(model, obj_id)
    if obj is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{label} not found",
        )
    return obj
