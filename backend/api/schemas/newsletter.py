"""
Newsletter request and response schemas.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, field_validator

from .common import CamelModel

NewsletterStatusValue = Literal["DRAFT", "SCHEDULED", "SENT", "CANCELLED"]


class NewsletterCreateRequest(CamelModel):
    """Create newsletter request."""

    title: str = Field(..., max_length=500)
    subject: str = Field(default="", max_length=500)
    content: str = ""
    html_content: str = ""
    status: NewsletterStatusValue = "DRAFT"
    scheduled_at: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def require_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v


class NewsletterUpdateRequest(CamelModel):
    """Partial newsletter update."""

    title: Optional[str] = Field(None, min_length=1, max_length=500)
    subject: Optional[str] = Field(None, max_length=500)
    content: Optional[str] = None
    html_content: Optional[str] = None
    status: Optional[NewsletterStatusValue] = None
    scheduled_at: Optional[datetime] = None


class NewsletterMetrics(CamelModel):
    """Engagement metrics. Rates are percentages of recipients."""

    total_recipients: int = 0
    open_rate: float = 0.0
    click_rate: float = 0.0
    opened_count: int = 0
    clicked_count: int = 0


class NewsletterResponse(CamelModel):
    id: str
    title: str
    subject: str
    content: str
    html_content: str
    status: str
    scheduled_at: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    metrics: NewsletterMetrics = Field(default_factory=NewsletterMetrics)
