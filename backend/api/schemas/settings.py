"""
Organization and calendar settings schemas.
"""

import re
from datetime import datetime
from typing import Optional
from urllib.parse import urlparse

from pydantic import Field, field_validator

from .common import CamelModel

DOMAIN_PATTERN = re.compile(
    r"^[a-zA-Z0-9][a-zA-Z0-9-]*[a-zA-Z0-9]*\.([a-zA-Z]{2,}|[a-zA-Z]{2,3}\.[a-zA-Z]{2,3})$"
)


def is_valid_domain(value: str) -> bool:
    return bool(DOMAIN_PATTERN.match(value))


def is_valid_logo_url(value: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class GeneralSettingsUpdateRequest(CamelModel):
    """Update request for the organization settings."""

    company_name: str = Field(..., max_length=255)
    protected_domain: str = Field(..., max_length=255)
    logo_url: Optional[str] = Field(None, max_length=1000)
    industry_name: str = Field(..., max_length=255)

    @field_validator("company_name", "industry_name")
    @classmethod
    def require_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Company name, protected domain, and industry name are required")
        return v

    @field_validator("protected_domain")
    @classmethod
    def validate_domain(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("Company name, protected domain, and industry name are required")
        if not is_valid_domain(v):
            raise ValueError("Invalid domain format")
        return v

    @field_validator("logo_url")
    @classmethod
    def validate_logo_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if v and not is_valid_logo_url(v):
            raise ValueError("Invalid logo URL format")
        return v


class GeneralSettingsResponse(CamelModel):
    id: str
    company_name: str
    protected_domain: str
    logo_url: str
    industry_name: str
    updated_at: datetime


class CalendarConnectRequest(CamelModel):
    """Start connecting a Google calendar."""

    title: Optional[str] = Field(None, max_length=255)
    return_url: Optional[str] = Field(None, max_length=1000)


class CalendarConnectionUpdateRequest(CamelModel):
    """Rename or (de)activate a connected calendar."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    is_active: Optional[bool] = None


class CalendarAuthUrlResponse(CamelModel):
    auth_url: str


class CalendarConnectionResponse(CamelModel):
    """Connected calendar. Tokens are never returned."""

    id: str
    title: str
    email: str
    is_active: bool
    token_expiry: Optional[datetime] = None
    last_sync_at: Optional[datetime] = None
    created_at: datetime


TOPIC_CATEGORIES = ("CORE", "ADDITIONAL")
# Frequencies of -1 mean "never" and are stored as NULL
NEVER = -1


class TopicRequest(CamelModel):
    """Create or replace a predefined topic."""

    name: str = Field(..., max_length=255)
    category: str
    description: Optional[str] = None
    order: int = 0

    @field_validator("name")
    @classmethod
    def require_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name and category are required")
        return v

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        if not v:
            raise ValueError("Name and category are required")
        if v not in TOPIC_CATEGORIES:
            raise ValueError("Category must be CORE or ADDITIONAL")
        return v

    @field_validator("description")
    @classmethod
    def blank_description_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip() or None


class TopicResponse(CamelModel):
    id: str
    name: str
    category: str
    description: Optional[str] = None
    order: int
    created_at: datetime
    updated_at: datetime


def _check_frequency(value: int, label: str) -> int:
    if value != NEVER and value < 1:
        raise ValueError(f'{label} frequency must be at least 1 day or -1 for "Never"')
    return value


class InfluenceTierInput(CamelModel):
    """One tier in a save request. Any ``id`` sent by the client is ignored."""

    name: str = Field(..., max_length=100)
    briefing_frequency: int = NEVER
    touchpoint_frequency: int = NEVER
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def require_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Each tier must have a name")
        return v

    @field_validator("briefing_frequency")
    @classmethod
    def validate_briefing_frequency(cls, v: int) -> int:
        return _check_frequency(v, "Briefing")

    @field_validator("touchpoint_frequency")
    @classmethod
    def validate_touchpoint_frequency(cls, v: int) -> int:
        return _check_frequency(v, "Touchpoint")


class InfluenceTiersSaveRequest(CamelModel):
    """Replace every influence tier, in display order."""

    tiers: list[InfluenceTierInput]


class InfluenceTierResponse(CamelModel):
    """Tier as shown in settings; a ``-1`` frequency means never."""

    id: str
    name: str
    color: str
    briefing_frequency: int
    touchpoint_frequency: int
    order: int
    is_active: bool

    @classmethod
    def from_tier(cls, tier) -> "InfluenceTierResponse":
        return cls(
            id=tier.id,
            name=tier.name,
            color=tier.color,
            briefing_frequency=(
                NEVER if tier.briefing_frequency is None else tier.briefing_frequency
            ),
            touchpoint_frequency=(
                NEVER if tier.touchpoint_frequency is None else tier.touchpoint_frequency
            ),
            order=tier.order,
            is_active=tier.is_active,
        )


class AnalystPortalSettingsUpdateRequest(CamelModel):
    """Welcome content for the analyst portal."""

    welcome_quote: str
    quote_author: str = Field(..., max_length=255)
    author_image_url: Optional[str] = Field(None, max_length=1000)

    @field_validator("welcome_quote", "quote_author")
    @classmethod
    def require_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Welcome quote and author are required")
        return v

    @field_validator("author_image_url")
    @classmethod
    def validate_author_image_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if v and not is_valid_logo_url(v):
            raise ValueError("Please enter a valid author image URL")
        return v


class AnalystPortalSettingsResponse(CamelModel):
    id: str
    welcome_quote: str
    quote_author: str
    author_image_url: str
    updated_at: datetime
