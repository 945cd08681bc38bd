"""
Authentication API routes.
"""

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.middleware.rate_limit import get_rate_limit, limiter
from api.schemas.auth import LoginRequest, TokenResponse, UserResponse
from api.schemas.common import MessageResponse, SuccessResponse
from core.security.password import password_hasher
from core.security.tokens import TokenService
from infrastructure.config.settings import settings
from infrastructure.database.connection import get_db
from infrastructure.database.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

token_service = TokenService(
    secret_key=settings.jwt_secret_key,
    algorithm=settings.jwt_algorithm,
    access_token_expire_minutes=settings.jwt_access_token_expire_minutes,
)

# Verified against when the email is unknown so both paths cost one bcrypt check
_DUMMY_HASH = "$2b$12$WmDNGEj9s7YLV5sV/N7aBOpWL0.T5.R5ZQOeKHNlLB.d7WN4HFXIC"


def _cookie_kwargs() -> dict:
    """Cookie flags: cross-site when the web app is not on localhost."""
    is_local = any(h in settings.app_url for h in ("localhost", "127.0.0.1", "0.0.0.0"))
    cross_site = settings.is_production or not is_local
    return dict(
        httponly=True,
        secure=cross_site,
        samesite="none" if cross_site else "lax",
        path="/",
    )


async def get_current_user(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Dependency returning the authenticated user.

    Reads a Bearer token from the Authorization header, then falls back to
    the HttpOnly ``access_token`` cookie set by login.
    """
    token = None
    if authorization and authorization.startswith("Bearer "):
        token = authorization.split(" ", 1)[1].strip() or None

    if not token:
        token = request.cookies.get("access_token")

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = token_service.verify_access_token(token)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    result = await db.execute(select(User).where(User.id == payload.sub))
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is not active",
        )

    return user


@router.post("/login", response_model=SuccessResponse[TokenResponse])
@limiter.limit(get_rate_limit("login"))
async def login(
    request: Request,
    login_data: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """
    Authenticate a user and return an access token.

    The token is returned in the body and also set as an HttpOnly cookie.
    """
    result = await db.execute(select(User).where(User.email == login_data.email.lower()))
    user = result.scalar_one_or_none()

    password_ok = password_hasher.verify(
        login_data.password,
        user.password_hash if user else _DUMMY_HASH,
    )
    if not user or not password_ok:
        logger.info("Failed login attempt for %s", login_data.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    user.last_login = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(user)

    access_token = token_service.create_access_token(
        user_id=user.id,
        email=user.email,
        role=user.role,
    )

    token = TokenResponse(
        access_token=access_token,
        expires_in=token_service.access_token_expire_seconds,
        user=UserResponse.model_validate(user),
    )
    body = SuccessResponse[TokenResponse](data=token)
    response = JSONResponse(content=body.model_dump(mode="json", by_alias=True))
    response.set_cookie(
        "access_token",
        access_token,
        max_age=token_service.access_token_expire_seconds,
        **_cookie_kwargs(),
    )
    logger.info("User %s logged in", user.id)
    return response


@router.get("/me", response_model=SuccessResponse[UserResponse])
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> SuccessResponse[UserResponse]:
    """Get the current user's profile."""
    return SuccessResponse(data=UserResponse.model_validate(current_user))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    current_user: Annotated[User, Depends(get_current_user)],
) -> JSONResponse:
    """
    Log out the current user.

    Tokens are stateless; the client discards its copy and the auth cookie
    is cleared here.
    """
    response = JSONResponse(
        content=MessageResponse(message="Logged out successfully").model_dump()
    )
    response.delete_cookie("access_token", **_cookie_kwargs())
    return response
