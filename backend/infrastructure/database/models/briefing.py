"""
Briefing database models.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, id_column

if TYPE_CHECKING:
    from .analyst import Analyst


class BriefingStatus(str, Enum):
    """Briefing status enumeration."""

    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    RESCHEDULED = "RESCHEDULED"


class Briefing(Base, TimestampMixin):
    """Analyst briefing (a scheduled meeting with one or more analysts)."""

    __tablename__ = "briefings"

    id: Mapped[str] = id_column()

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    scheduled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    duration: Mapped[int] = mapped_column(Integer, default=60, nullable=False)
    status: Mapped[str] = mapped_column(
        String(50), default=BriefingStatus.SCHEDULED.value, nullable=False, index=True
    )
    is_confirmed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    location: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    meeting_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    agenda: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    proposed_topics: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    # Post-briefing assets
    recording_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    transcript_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    summary_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    analyst_links: Mapped[List["BriefingAnalyst"]] = relationship(
        back_populates="briefing",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Briefing(id={self.id}, title={self.title}, status={self.status})>"

    @property
    def analysts(self) -> list["Analyst"]:
        return [link.analyst for link in self.analyst_links if link.analyst is not None]


class BriefingAnalyst(Base):
    """Association between a briefing and an attending analyst."""

    __tablename__ = "briefing_analysts"
    __table_args__ = (
        UniqueConstraint("briefing_id", "analyst_id", name="uq_briefing_analyst"),
    )

    id: Mapped[str] = id_column()
    briefing_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("briefings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    analyst_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("analysts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    briefing: Mapped["Briefing"] = relationship(back_populates="analyst_links")
    analyst: Mapped["Analyst"] = relationship(back_populates="briefing_links", lazy="selectin")
