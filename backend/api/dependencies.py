"""
API dependencies for authorization.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, status

from api.routes.auth import get_current_user
from infrastructure.database.models.user import User, UserRole


async def get_current_staff_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """
    Dependency for the admin CRUD routes.

    Portal-only accounts (role ANALYST) are rejected.
    """
    if current_user.role not in (UserRole.ADMIN.value, UserRole.EDITOR.value):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Staff access required",
        )
    return current_user


async def get_current_admin_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Dependency requiring the ADMIN role."""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


StaffUser = Annotated[User, Depends(get_current_staff_user)]
AdminUser = Annotated[User, Depends(get_current_admin_user)]
