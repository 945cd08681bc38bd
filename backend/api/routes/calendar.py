"""
Google calendar connection routes.

Connecting a calendar is a two-step flow: the settings page asks for an
authorization URL, the user consents at Google, and Google redirects back
to ``/api/auth/google/callback`` which stores the (encrypted) tokens and
redirects to the settings page with a ``success`` or ``error`` parameter.
"""

import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import RedirectResponse
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from adapters.google import (
    GoogleOAuthAdapter,
    GoogleOAuthConfigError,
    GoogleOAuthError,
    get_google_oauth_adapter,
)
from api.dependencies import StaffUser
from api.oauth_helpers import (
    InvalidOAuthStateError,
    OAuthState,
    decode_state,
    encode_state,
    store_oauth_state,
    verify_oauth_state,
)
from api.schemas.common import ListResponse, MessageResponse, SuccessResponse
from api.schemas.settings import (
    CalendarAuthUrlResponse,
    CalendarConnectionResponse,
    CalendarConnectionUpdateRequest,
    CalendarConnectRequest,
)
from core.security.encryption import TokenEncryption
from infrastructure.config.settings import settings
from infrastructure.database.connection import get_db
from infrastructure.database.models import CalendarConnection, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings/calendar-connections", tags=["Calendar"])
callback_router = APIRouter(prefix="/auth/google", tags=["Calendar"])

DEFAULT_CALENDAR_NAME = "Google Calendar"


def _token_cipher() -> TokenEncryption:
    return TokenEncryption(settings.encryption_key)


def settings_redirect(**params: str) -> RedirectResponse:
    """Redirect to the web app's settings page with query parameters."""
    query = urlencode(params)
    return RedirectResponse(
        url=f"{settings.app_url.rstrip('/')}/settings?{query}",
        status_code=status.HTTP_302_FOUND,
    )


async def _get_own_connection(
    db: AsyncSession, connection_id: str, user: User
) -> CalendarConnection:
    result = await db.execute(
        select(CalendarConnection).where(
            CalendarConnection.id == connection_id,
            CalendarConnection.user_id == user.id,
        )
    )
    connection = result.scalar_one_or_none()
    if not connection:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Calendar connection not found",
        )
    return connection


@router.get("", response_model=ListResponse[CalendarConnectionResponse])
async def list_calendar_connections(
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    """List the current user's calendar connections."""
    connections = (
        await db.execute(
            select(CalendarConnection)
            .where(CalendarConnection.user_id == current_user.id)
            .order_by(CalendarConnection.created_at.desc())
        )
    ).scalars().all()

    return ListResponse(
        data=[CalendarConnectionResponse.model_validate(c) for c in connections],
        total=len(connections),
    )


@router.post("", response_model=SuccessResponse[CalendarAuthUrlResponse])
async def start_calendar_connection(
    current_user: StaffUser,
    body: Optional[CalendarConnectRequest] = None,
    adapter: GoogleOAuthAdapter = Depends(get_google_oauth_adapter),
):
    """Return the Google consent URL for connecting a new calendar."""
    body = body or CalendarConnectRequest()
    state = OAuthState.new(
        connect_first=True,
        user_id=current_user.id,
        title=body.title,
        return_url=body.return_url,
    )

    try:
        auth_url = adapter.get_authorization_url(state=encode_state(state))
    except GoogleOAuthConfigError as e:
        logger.error("Cannot start calendar connection: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Google Calendar integration is not configured",
        )

    await store_oauth_state(state.nonce, current_user.id)
    return SuccessResponse(data=CalendarAuthUrlResponse(auth_url=auth_url))


@router.put("/{connection_id}", response_model=SuccessResponse[CalendarConnectionResponse])
async def update_calendar_connection(
    connection_id: str,
    body: CalendarConnectionUpdateRequest,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    """Rename or (de)activate a connection."""
    connection = await _get_own_connection(db, connection_id, current_user)

    for field, value in body.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(connection, field, value)

    await db.commit()
    await db.refresh(connection)
    return SuccessResponse(data=CalendarConnectionResponse.model_validate(connection))


@router.delete("/{connection_id}", response_model=MessageResponse)
async def delete_calendar_connection(
    connection_id: str,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
):
    connection = await _get_own_connection(db, connection_id, current_user)
    await db.delete(connection)
    await db.commit()

    logger.info("Calendar connection %s removed by user %s", connection_id, current_user.id)
    return MessageResponse(message="Calendar connection removed")


@callback_router.get("/callback", include_in_schema=False)
async def google_oauth_callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    adapter: GoogleOAuthAdapter = Depends(get_google_oauth_adapter),
) -> RedirectResponse:
    """
    Finish the Google OAuth flow.

    Every outcome is a redirect to the settings page; failures carry an
    ``error`` code the page turns into a message.
    """
    if error:
        logger.info("Google OAuth denied: %s", error)
        return settings_redirect(error="google_auth_denied")

    if not code or not state:
        return settings_redirect(error="missing_auth_params")

    try:
        oauth_state = decode_state(state)
    except InvalidOAuthStateError:
        return settings_redirect(error="invalid_state")

    if oauth_state.is_expired() or not oauth_state.user_id or not oauth_state.nonce:
        logger.warning("Rejected expired or anonymous OAuth state")
        return settings_redirect(error="invalid_state")

    # The nonce is single use and must have been issued to the same user
    issued_to = await verify_oauth_state(oauth_state.nonce)
    if issued_to is None or issued_to != oauth_state.user_id:
        logger.warning("Rejected OAuth state not issued by this server")
        return settings_redirect(error="invalid_state")

    user = await db.get(User, oauth_state.user_id)
    if user is None or not user.is_active:
        return settings_redirect(error="invalid_state")

    try:
        tokens = await adapter.exchange_code(code)
    except GoogleOAuthError as e:
        logger.error("Google token exchange failed: %s", e)
        return settings_redirect(error="token_exchange_failed")

    try:
        user_info = await adapter.get_user_info(tokens.access_token)
    except GoogleOAuthError as e:
        logger.error("Google user info request failed: %s", e)
        return settings_redirect(error="user_info_failed")

    if not user_info.email:
        return settings_redirect(error="no_user_email")

    calendar_name = (
        await adapter.get_primary_calendar_name(tokens)
        or user_info.name
        or user_info.email
        or DEFAULT_CALENDAR_NAME
    )

    cipher = _token_cipher()
    try:
        result = await db.execute(
            select(CalendarConnection).where(
                CalendarConnection.user_id == user.id,
                CalendarConnection.google_account_id == user_info.id,
            )
        )
        connection = result.scalar_one_or_none()
        if connection is None:
            connection = CalendarConnection(
                user_id=user.id,
                google_account_id=user_info.id,
            )
            db.add(connection)

        connection.email = user_info.email
        connection.title = oauth_state.title or calendar_name
        connection.access_token = cipher.encrypt(tokens.access_token)
        # Google omits the refresh token on re-consent; keep the stored one
        if tokens.refresh_token:
            connection.refresh_token = cipher.encrypt(tokens.refresh_token)
        connection.token_expiry = tokens.expires_at
        connection.is_active = True

        await db.commit()
        await db.refresh(connection)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Failed to store calendar connection: %s", e)
        return settings_redirect(error="database_connection_failed")

    logger.info("Calendar %s connected for user %s", connection.email, user.id)

    if oauth_state.connect_first:
        return settings_redirect(
            success="calendar_connected",
            connectionId=connection.id,
            email=connection.email,
            calendarName=calendar_name,
        )
    return settings_redirect(success="calendar_connected")
