"""
Analyst request and response schemas.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import EmailStr, Field, field_validator

from .common import CamelModel

AnalystTypeValue = Literal["Analyst", "Press", "Investor", "Practitioner", "Influencer"]
InfluenceValue = Literal["LOW", "MEDIUM", "HIGH", "VERY_HIGH"]
AnalystStatusValue = Literal["ACTIVE", "INACTIVE", "ARCHIVED"]
RelationshipHealthValue = Literal["EXCELLENT", "GOOD", "FAIR", "POOR", "CRITICAL"]


def _clean_topics(topics: Optional[list[str]]) -> Optional[list[str]]:
    """Strip whitespace, drop blanks and duplicates, keep first-seen order."""
    if topics is None:
        return None
    seen: list[str] = []
    for topic in topics:
        topic = topic.strip()
        if topic and topic not in seen:
            seen.append(topic)
    return seen


class AnalystCreateRequest(CamelModel):
    """Create analyst request."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    company: Optional[str] = Field(None, max_length=255)
    title: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    linkedin: Optional[str] = Field(None, max_length=500)
    twitter: Optional[str] = Field(None, max_length=100)
    website: Optional[str] = Field(None, max_length=500)
    bio: Optional[str] = None
    profile_image_url: Optional[str] = Field(None, max_length=1000)
    type: AnalystTypeValue = "Analyst"
    influence: InfluenceValue = "MEDIUM"
    status: AnalystStatusValue = "ACTIVE"
    relationship_health: RelationshipHealthValue = "GOOD"
    eligible_newsletters: Optional[str] = None
    covered_topics: list[str] = Field(default_factory=list)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("First name and last name are required")
        return v

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("covered_topics")
    @classmethod
    def clean_topics(cls, v: list[str]) -> list[str]:
        return _clean_topics(v)


class AnalystUpdateRequest(CamelModel):
    """Partial analyst update. Only fields present in the body are applied."""

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    company: Optional[str] = Field(None, max_length=255)
    title: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    linkedin: Optional[str] = Field(None, max_length=500)
    twitter: Optional[str] = Field(None, max_length=100)
    website: Optional[str] = Field(None, max_length=500)
    bio: Optional[str] = None
    profile_image_url: Optional[str] = Field(None, max_length=1000)
    type: Optional[AnalystTypeValue] = None
    influence: Optional[InfluenceValue] = None
    status: Optional[AnalystStatusValue] = None
    relationship_health: Optional[RelationshipHealthValue] = None
    eligible_newsletters: Optional[str] = None
    covered_topics: Optional[list[str]] = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else v

    @field_validator("covered_topics")
    @classmethod
    def clean_topics(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return _clean_topics(v)


class CoveredTopicResponse(CamelModel):
    id: str
    topic: str


class AnalystQuoteCreateRequest(CamelModel):
    """Create quote request."""

    text: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1, max_length=255)
    role: Optional[str] = Field(None, max_length=255)
    is_featured: bool = False


class AnalystQuoteResponse(CamelModel):
    id: str
    analyst_id: str
    text: str
    author: str
    role: Optional[str] = None
    is_featured: bool
    created_at: datetime


class AnalystResponse(CamelModel):
    """Analyst with covered topics."""

    id: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    company: Optional[str] = None
    title: Optional[str] = None
    phone: Optional[str] = None
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    website: Optional[str] = None
    bio: Optional[str] = None
    profile_image_url: Optional[str] = None
    type: str
    influence: str
    status: str
    relationship_health: str
    eligible_newsletters: Optional[str] = None
    covered_topics: list[CoveredTopicResponse] = []
    created_at: datetime
    updated_at: datetime


class AnalystBriefingSummary(CamelModel):
    """Briefing as listed on an analyst's detail page."""

    id: str
    title: str
    scheduled_at: datetime
    duration: int
    status: str
    is_confirmed: bool


class AnalystDetailResponse(AnalystResponse):
    """Analyst with recent briefings and quotes."""

    recent_briefings: list[AnalystBriefingSummary] = []
    quotes: list[AnalystQuoteResponse] = []


class AnalystArchiveResponse(CamelModel):
    id: str
    name: str
    status: str
