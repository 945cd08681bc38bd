"""
OAuth state helpers.

The ``state`` parameter round-trips through Google's authorization flow and
carries a small JSON object (base64-encoded) that tells the callback what
the user was doing when the flow started.

The payload is readable by anyone, so the callback never trusts it on its
own: every state carries a server-issued ``nonce`` that is stored with the
user id when the flow starts (Redis with a 10-minute TTL, or an in-memory
dict when ``REDIS_URL`` is unset or Redis is unreachable) and consumed by
the callback.
"""

import asyncio
import base64
import binascii
import json
import logging
import secrets
import time
from typing import Optional

import redis.asyncio as aioredis
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from redis.exceptions import RedisError

from infrastructure.config.settings import settings

logger = logging.getLogger(__name__)

# States older than this are rejected by the callback (10 minutes)
OAUTH_STATE_TTL_SECONDS = 600
_OAUTH_MAX_STATES = 1000  # Max in-memory entries before pruning

_oauth_states: dict[str, dict] = {}
_oauth_states_lock = asyncio.Lock()


class InvalidOAuthStateError(ValueError):
    """Raised when an OAuth state parameter cannot be decoded."""

    def __init__(self, message: str = "Invalid state parameter"):
        super().__init__(message)


def _now_ms() -> int:
    return int(time.time() * 1000)


class OAuthState(BaseModel):
    """
    Payload carried in the OAuth ``state`` parameter.

    Unknown keys are dropped on decode, so only the fields below survive a
    round trip.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    connect_first: Optional[bool] = Field(default=None, alias="connectFirst")
    timestamp: int  # epoch milliseconds
    return_url: Optional[str] = Field(default=None, alias="returnUrl")
    title: Optional[str] = None
    user_id: Optional[str] = Field(default=None, alias="userId")
    nonce: Optional[str] = None

    @classmethod
    def new(cls, **fields) -> "OAuthState":
        """Build a state stamped with the current time and a fresh nonce."""
        fields.setdefault("nonce", secrets.token_urlsafe(24))
        return cls(timestamp=_now_ms(), **fields)

    def is_expired(self, max_age_seconds: int = OAUTH_STATE_TTL_SECONDS) -> bool:
        """True when the state is older than ``max_age_seconds``."""
        return _now_ms() - self.timestamp > max_age_seconds * 1000


def encode_state(state: OAuthState) -> str:
    """Serialize ``state`` to compact JSON and base64-encode it."""
    payload = state.model_dump(by_alias=True, exclude_none=True)
    raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def decode_state(state_param: str) -> OAuthState:
    """
    Decode a state produced by :func:`encode_state`.

    Accepts standard or URL-safe base64, with or without padding, and
    tolerates ``+`` having been turned into a space by query-string decoding.

    Raises:
        InvalidOAuthStateError: If the value is not base64-encoded JSON object
            with a ``timestamp``
    """
    try:
        normalized = (
            state_param.strip().replace(" ", "+").replace("-", "+").replace("_", "/")
        )
        normalized += "=" * (-len(normalized) % 4)
        decoded = base64.b64decode(normalized, validate=True).decode("utf-8")
        payload = json.loads(decoded)
        if not isinstance(payload, dict):
            raise InvalidOAuthStateError()
        return OAuthState.model_validate(payload)
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
        logger.error("Failed to decode OAuth state: %s", e)
        raise InvalidOAuthStateError() from e
    except AttributeError as e:
        # Non-string input
        logger.error("Failed to decode OAuth state: %s", e)
        raise InvalidOAuthStateError() from e


def _prune_expired_states() -> None:
    """Must be called while holding ``_oauth_states_lock``."""
    now = time.time()
    expired = [
        k for k, v in _oauth_states.items() if now - v["created_at"] > OAUTH_STATE_TTL_SECONDS
    ]
    for k in expired:
        del _oauth_states[k]


async def _store_in_memory(nonce: str, user_id: str) -> None:
    async with _oauth_states_lock:
        _prune_expired_states()
        if len(_oauth_states) >= _OAUTH_MAX_STATES:
            oldest = sorted(_oauth_states, key=lambda k: _oauth_states[k]["created_at"])
            for k in oldest[: len(_oauth_states) - _OAUTH_MAX_STATES + 1]:
                del _oauth_states[k]
        _oauth_states[nonce] = {"user_id": str(user_id), "created_at": time.time()}


async def _pop_from_memory(nonce: str) -> Optional[str]:
    async with _oauth_states_lock:
        entry = _oauth_states.pop(nonce, None)
    if not entry:
        return None
    if time.time() - entry["created_at"] > OAUTH_STATE_TTL_SECONDS:
        return None
    return entry["user_id"]


async def store_oauth_state(nonce: str, user_id: str) -> None:
    """Remember that ``nonce`` was issued to ``user_id`` for the next 10 minutes."""
    if not settings.redis_url:
        await _store_in_memory(nonce, user_id)
        return

    data = json.dumps({"user_id": str(user_id)})
    r = aioredis.from_url(settings.redis_url)
    try:
        await r.setex(f"oauth_state:{nonce}", OAUTH_STATE_TTL_SECONDS, data)
    except (RedisError, OSError) as e:
        logger.warning("Redis unavailable for OAuth state, using memory: %s", e)
        await _store_in_memory(nonce, user_id)
    finally:
        await r.aclose()


async def verify_oauth_state(nonce: str) -> Optional[str]:
    """Consume ``nonce`` and return the user id it was issued to, or None."""
    if not settings.redis_url:
        return await _pop_from_memory(nonce)

    r = aioredis.from_url(settings.redis_url)
    try:
        raw = await r.getdel(f"oauth_state:{nonce}")
    except (RedisError, OSError) as e:
        logger.warning("Redis unavailable for OAuth state, using memory: %s", e)
        return await _pop_from_memory(nonce)
    finally:
        await r.aclose()

    if raw is None:
        return None
    try:
        return json.loads(raw).get("user_id")
    except (json.JSONDecodeError, AttributeError):
        return None
