"""
Testimonial request and response schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .common import CamelModel


class TestimonialCreateRequest(CamelModel):
    """Create testimonial request."""

    analyst_id: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1, max_length=255)
    company: str = Field(default="", max_length=255)
    rating: int = Field(default=5, ge=1, le=5)
    date: Optional[datetime] = None
    is_published: bool = False
    display_order: int = Field(default=0, ge=0)


class TestimonialUpdateRequest(CamelModel):
    """Partial testimonial update."""

    text: Optional[str] = Field(None, min_length=1)
    author: Optional[str] = Field(None, min_length=1, max_length=255)
    company: Optional[str] = Field(None, max_length=255)
    rating: Optional[int] = Field(None, ge=1, le=5)
    date: Optional[datetime] = None
    is_published: Optional[bool] = None
    display_order: Optional[int] = Field(None, ge=0)


class TestimonialResponse(CamelModel):
    id: str
    analyst_id: str
    text: str
    author: str
    company: str
    rating: int
    date: datetime
    is_published: bool
    display_order: int
    created_at: datetime
