"""
Publication database model.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, id_column

if TYPE_CHECKING:
    from .analyst import Analyst


class PublicationType(str, Enum):
    """Publication type enumeration."""

    RESEARCH_REPORT = "RESEARCH_REPORT"
    ARTICLE = "ARTICLE"
    WHITEPAPER = "WHITEPAPER"
    BLOG_POST = "BLOG_POST"
    WEBINAR = "WEBINAR"
    PODCAST = "PODCAST"
    OTHER = "OTHER"


class PublicationStatus(str, Enum):
    """Publication lifecycle status."""

    DRAFT = "DRAFT"
    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    PUBLISHED = "PUBLISHED"
    CANCELLED = "CANCELLED"


class Publication(Base, TimestampMixin):
    """Research or content published (or planned) by an analyst."""

    __tablename__ = "publications"
    __table_args__ = (
        Index("ix_publications_analyst_published", "analyst_id", "published_at"),
    )

    id: Mapped[str] = id_column()
    analyst_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("analysts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    type: Mapped[str] = mapped_column(
        String(50), default=PublicationType.OTHER.value, nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(50), default=PublicationStatus.PUBLISHED.value, nullable=False
    )
    url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    expected_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    published_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    is_tracked: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_validated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    analyst: Mapped["Analyst"] = relationship(back_populates="publications")

    def __repr__(self) -> str:
        return f"<Publication(id={self.id}, title={self.title}, status={self.status})>"
