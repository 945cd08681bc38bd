"""
Google integrations.
"""

from .oauth_adapter import (
    GoogleOAuthAdapter,
    GoogleOAuthConfigError,
    GoogleOAuthError,
    GoogleTokens,
    GoogleUserInfo,
    create_google_oauth_adapter,
    get_google_oauth_adapter,
)

__all__ = [
    "GoogleOAuthAdapter",
    "GoogleOAuthConfigError",
    "GoogleOAuthError",
    "GoogleTokens",
    "GoogleUserInfo",
    "create_google_oauth_adapter",
    "get_google_oauth_adapter",
]
