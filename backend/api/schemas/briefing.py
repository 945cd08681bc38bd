"""
Briefing request and response schemas.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from .common import CamelModel

BriefingStatusValue = Literal["SCHEDULED", "COMPLETED", "CANCELLED", "RESCHEDULED"]


class BriefingCreateRequest(CamelModel):
    """Create briefing request."""

    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    scheduled_at: datetime
    duration: int = Field(default=60, ge=1, le=24 * 60)
    status: BriefingStatusValue = "SCHEDULED"
    is_confirmed: bool = False
    location: Optional[str] = Field(None, max_length=500)
    meeting_url: Optional[str] = Field(None, max_length=1000)
    agenda: Optional[list[str]] = None
    notes: Optional[str] = None
    proposed_topics: Optional[list[str]] = None
    recording_url: Optional[str] = Field(None, max_length=1000)
    transcript_url: Optional[str] = Field(None, max_length=1000)
    summary_url: Optional[str] = Field(None, max_length=1000)
    analyst_ids: list[str] = Field(default_factory=list)


class BriefingUpdateRequest(CamelModel):
    """Partial briefing update. ``analystIds`` replaces the attendee list."""

    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    duration: Optional[int] = Field(None, ge=1, le=24 * 60)
    status: Optional[BriefingStatusValue] = None
    is_confirmed: Optional[bool] = None
    location: Optional[str] = Field(None, max_length=500)
    meeting_url: Optional[str] = Field(None, max_length=1000)
    agenda: Optional[list[str]] = None
    notes: Optional[str] = None
    proposed_topics: Optional[list[str]] = None
    recording_url: Optional[str] = Field(None, max_length=1000)
    transcript_url: Optional[str] = Field(None, max_length=1000)
    summary_url: Optional[str] = Field(None, max_length=1000)
    analyst_ids: Optional[list[str]] = None


class BriefingAnalystSummary(CamelModel):
    """Attendee shown alongside a briefing."""

    id: str
    first_name: str
    last_name: str
    email: str
    company: Optional[str] = None
    title: Optional[str] = None
    profile_image_url: Optional[str] = None


class BriefingResponse(CamelModel):
    """Briefing with its attending analysts."""

    id: str
    title: str
    description: Optional[str] = None
    scheduled_at: datetime
    duration: int
    status: str
    is_confirmed: bool
    completed_at: Optional[datetime] = None
    location: Optional[str] = None
    meeting_url: Optional[str] = None
    agenda: Optional[list[str]] = None
    notes: Optional[str] = None
    proposed_topics: Optional[list[str]] = None
    recording_url: Optional[str] = None
    transcript_url: Optional[str] = None
    summary_url: Optional[str] = None
    analysts: list[BriefingAnalystSummary] = []
    created_at: datetime
    updated_at: datetime
