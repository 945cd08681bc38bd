"""
Security utilities for authentication, authorization and token storage.
"""

from .encryption import TokenEncryption
from .password import PasswordHasher, password_hasher
from .tokens import TokenPayload, TokenService

__all__ = [
    "PasswordHasher",
    "password_hasher",
    "TokenService",
    "TokenPayload",
    "TokenEncryption",
]
