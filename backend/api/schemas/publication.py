"""
Publication request and response schemas.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, field_validator

from .common import CamelModel

PublicationTypeValue = Literal[
    "RESEARCH_REPORT",
    "ARTICLE",
    "WHITEPAPER",
    "BLOG_POST",
    "WEBINAR",
    "PODCAST",
    "OTHER",
]
PublicationStatusValue = Literal["DRAFT", "PLANNED", "IN_PROGRESS", "PUBLISHED", "CANCELLED"]

# Lower-case spellings accepted from forms and imports
PUBLICATION_TYPE_ALIASES = {
    "report": "RESEARCH_REPORT",
    "research_report": "RESEARCH_REPORT",
    "research report": "RESEARCH_REPORT",
    "article": "ARTICLE",
    "whitepaper": "WHITEPAPER",
    "white_paper": "WHITEPAPER",
    "blog": "BLOG_POST",
    "blog_post": "BLOG_POST",
    "webinar": "WEBINAR",
    "podcast": "PODCAST",
    "other": "OTHER",
}


def normalize_publication_type(value: object) -> object:
    """Map an alias to its enum value; anything else is upper-cased."""
    if not isinstance(value, str):
        return value
    cleaned = value.strip()
    return PUBLICATION_TYPE_ALIASES.get(cleaned.lower(), cleaned.upper())


class PublicationCreateRequest(CamelModel):
    """Create publication request."""

    analyst_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=500)
    type: PublicationTypeValue
    status: PublicationStatusValue = "PUBLISHED"
    url: Optional[str] = Field(None, max_length=1000)
    summary: Optional[str] = None
    notes: Optional[str] = None
    expected_date: Optional[datetime] = None
    published_at: Optional[datetime] = None
    is_tracked: bool = True
    is_validated: bool = False

    @field_validator("type", mode="before")
    @classmethod
    def map_type_alias(cls, v: object) -> object:
        return normalize_publication_type(v)


class PublicationUpdateRequest(CamelModel):
    """Partial publication update."""

    title: Optional[str] = Field(None, min_length=1, max_length=500)
    type: Optional[PublicationTypeValue] = None
    status: Optional[PublicationStatusValue] = None
    url: Optional[str] = Field(None, max_length=1000)
    summary: Optional[str] = None
    notes: Optional[str] = None
    expected_date: Optional[datetime] = None
    published_at: Optional[datetime] = None
    is_tracked: Optional[bool] = None
    is_validated: Optional[bool] = None

    @field_validator("type", mode="before")
    @classmethod
    def map_type_alias(cls, v: object) -> object:
        return normalize_publication_type(v)


class PublicationResponse(CamelModel):
    id: str
    analyst_id: str
    title: str
    type: str
    status: str
    url: Optional[str] = None
    summary: Optional[str] = None
    notes: Optional[str] = None
    expected_date: Optional[datetime] = None
    published_at: Optional[datetime] = None
    is_tracked: bool
    is_validated: bool
    created_at: datetime
    updated_at: datetime
