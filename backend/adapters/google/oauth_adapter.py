"""
Google OAuth adapter for connecting calendars.

Builds the authorization URL for the calendar consent screen, exchanges
authorization codes for tokens and reads the connected account's profile.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Optional
from urllib.parse import urlencode

import httpx
from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from infrastructure.config.settings import settings

logger = logging.getLogger(__name__)


class GoogleOAuthError(Exception):
    """Raised when a call to Google's OAuth endpoints fails."""
    pass


class GoogleOAuthConfigError(GoogleOAuthError):
    """Raised when the Google OAuth client is not configured."""
    pass


@dataclass
class GoogleTokens:
    """Tokens returned by the authorization-code exchange."""

    access_token: str
    refresh_token: Optional[str]
    expires_at: Optional[datetime]
    scope: str = ""


@dataclass
class GoogleUserInfo:
    """Subset of the OpenID userinfo response."""

    id: str
    email: Optional[str]
    name: Optional[str] = None
    picture: Optional[str] = None


class GoogleOAuthAdapter:
    """
    Google OAuth 2.0 client for the calendar integration.

    Requests offline access with a forced consent prompt so a refresh
    token is always returned.
    """

    SCOPES = [
        "https://www.googleapis.com/auth/userinfo.email",
        "https://www.googleapis.com/auth/userinfo.profile",
        "https://www.googleapis.com/auth/calendar.readonly",
        "openid",
    ]
    OAUTH_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    OAUTH_TOKEN_URL = "https://oauth2.googleapis.com/token"
    USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        redirect_uri: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 15.0,
    ):
        """
        Args:
            client_id: Google OAuth client ID (defaults to settings)
            client_secret: Google OAuth client secret (defaults to settings)
            redirect_uri: OAuth redirect URI (defaults to settings)
            transport: Optional httpx transport, used by tests
            timeout: HTTP timeout in seconds
        """
        self.client_id = client_id or settings.google_client_id
        self.client_secret = client_secret or settings.google_client_secret
        self.redirect_uri = redirect_uri or settings.google_redirect_uri
        self._transport = transport
        self._timeout = timeout

        if not all([self.client_id, self.client_secret]):
            logger.warning(
                "Google OAuth credentials not configured. "
                "Set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET."
            )

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret and self.redirect_uri)

    def _require_config(self) -> None:
        if not self.is_configured:
            raise GoogleOAuthConfigError("Missing required Google OAuth environment variables")

    def get_authorization_url(self, state: Optional[str] = None) -> str:
        """
        Build the Google consent-screen URL.

        Args:
            state: Opaque state echoed back to the callback

        Raises:
            GoogleOAuthConfigError: If client credentials are not configured
        """
        self._require_config()

        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.SCOPES),
            "access_type": "offline",
            "prompt": "consent",
        }
        if state:
            params["state"] = state

        return f"{self.OAUTH_AUTH_URL}?{urlencode(params)}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self._timeout)

    async def exchange_code(self, code: str) -> GoogleTokens:
        """
        Exchange an authorization code for tokens.

        Raises:
            GoogleOAuthError: If the exchange fails or returns no access token
        """
        self._require_config()

        data = {
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "grant_type": "authorization_code",
        }

        try:
            async with self._client() as client:
                response = await client.post(self.OAUTH_TOKEN_URL, data=data)
                response.raise_for_status()
                tokens = response.json()
        except httpx.HTTPError as e:
            logger.error("HTTP error during Google token exchange: %s", e)
            raise GoogleOAuthError(f"Failed to exchange authorization code: {e}") from e

        access_token = tokens.get("access_token")
        if not access_token:
            raise GoogleOAuthError("Token response did not include an access token")

        expires_in = tokens.get("expires_in")
        expires_at = (
            datetime.now(UTC) + timedelta(seconds=int(expires_in)) if expires_in else None
        )

        logger.info("Exchanged Google authorization code for tokens")
        return GoogleTokens(
            access_token=access_token,
            refresh_token=tokens.get("refresh_token"),
            expires_at=expires_at,
            scope=tokens.get("scope", ""),
        )

    async def get_user_info(self, access_token: str) -> GoogleUserInfo:
        """
        Fetch the profile of the account that granted access.

        Raises:
            GoogleOAuthError: If the request fails
        """
        try:
            async with self._client() as client:
                response = await client.get(
                    self.USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.error("HTTP error fetching Google user info: %s", e)
            raise GoogleOAuthError(f"Failed to fetch user info: {e}") from e

        if not data.get("id"):
            raise GoogleOAuthError("User info response did not include an account id")

        return GoogleUserInfo(
            id=str(data["id"]),
            email=data.get("email"),
            name=data.get("name"),
            picture=data.get("picture"),
        )

    def _fetch_primary_calendar_summary(self, tokens: GoogleTokens) -> Optional[str]:
        credentials = Credentials(
            token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            token_uri=self.OAUTH_TOKEN_URL,
            client_id=self.client_id,
            client_secret=self.client_secret,
        )
        service = build("calendar", "v3", credentials=credentials, cache_discovery=False)
        calendar = service.calendars().get(calendarId="primary").execute()
        return calendar.get("summary")

    async def get_primary_calendar_name(self, tokens: GoogleTokens) -> Optional[str]:
        """
        Return the summary of the account's primary calendar.

        Returns None when the calendar cannot be read; callers fall back to
        the account name.
        """
        try:
            return await asyncio.to_thread(self._fetch_primary_calendar_summary, tokens)
        except (HttpError, GoogleAuthError, OSError) as e:
            logger.warning("Could not read primary calendar name: %s", e)
            return None


def create_google_oauth_adapter(
    client_id: Optional[str] = None,
    client_secret: Optional[str] = None,
    redirect_uri: Optional[str] = None,
) -> GoogleOAuthAdapter:
    """Create a Google OAuth adapter (defaults to settings)."""
    return GoogleOAuthAdapter(
        client_id=client_id,
        client_secret=client_secret,
        redirect_uri=redirect_uri,
    )


def get_google_oauth_adapter() -> GoogleOAuthAdapter:
    """FastAPI dependency returning a configured adapter."""
    return create_google_oauth_adapter()
