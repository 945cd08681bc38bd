"""
Analyst portal schemas.

These are the shapes consumed by the analyst-facing portal pages.
"""

from datetime import datetime
from typing import Optional

from .analyst import AnalystResponse
from .publication import PublicationStatusValue
from .common import CamelModel


class PortalQuote(CamelModel):
    text: str
    author: str
    role: Optional[str] = None


class AnalystBriefing(CamelModel):
    id: str
    scheduled_at: datetime
    is_confirmed: bool
    proposed_topics: list[str] = []
    recording_url: Optional[str] = None
    transcript_url: Optional[str] = None
    summary_url: Optional[str] = None
    notes: Optional[str] = None


class AnalystTestimonial(CamelModel):
    id: str
    text: str
    author: str
    company: str
    rating: int
    date: datetime


class AnalystPublication(CamelModel):
    id: str
    title: str
    status: PublicationStatusValue
    expected_date: Optional[datetime] = None
    published_date: Optional[datetime] = None
    url: Optional[str] = None
    notes: Optional[str] = None
    is_validated: bool


class AnalystPortalResponse(CamelModel):
    """Everything the portal renders for one analyst."""

    analyst: AnalystResponse
    quote: Optional[PortalQuote] = None
    briefings: list[AnalystBriefing] = []
    testimonials: list[AnalystTestimonial] = []
    publications: list[AnalystPublication] = []
