"""
Analyst database models.
"""

from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, id_column

if TYPE_CHECKING:
    from .briefing import BriefingAnalyst
    from .publication import Publication
    from .testimonial import Testimonial


class AnalystType(str, Enum):
    """Kind of contact tracked as an analyst."""

    ANALYST = "Analyst"
    PRESS = "Press"
    INVESTOR = "Investor"
    PRACTITIONER = "Practitioner"
    INFLUENCER = "Influencer"


class Influence(str, Enum):
    """Analyst influence tier."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    VERY_HIGH = "VERY_HIGH"


class AnalystStatus(str, Enum):
    """Analyst lifecycle status. ARCHIVED is the soft-delete state."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    ARCHIVED = "ARCHIVED"


class RelationshipHealth(str, Enum):
    """Relationship health rating."""

    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"
    CRITICAL = "CRITICAL"


class Analyst(Base, TimestampMixin):
    """Industry analyst contact."""

    __tablename__ = "analysts"

    id: Mapped[str] = id_column()

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)

    company: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    linkedin: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    twitter: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    profile_image_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    type: Mapped[str] = mapped_column(String(50), default=AnalystType.ANALYST.value, nullable=False)
    influence: Mapped[str] = mapped_column(String(50), default=Influence.MEDIUM.value, nullable=False)
    status: Mapped[str] = mapped_column(
        String(50), default=AnalystStatus.ACTIVE.value, nullable=False, index=True
    )
    relationship_health: Mapped[str] = mapped_column(
        String(50), default=RelationshipHealth.GOOD.value, nullable=False
    )
    eligible_newsletters: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    covered_topics: Mapped[List["AnalystCoveredTopic"]] = relationship(
        back_populates="analyst",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="AnalystCoveredTopic.topic",
    )
    quotes: Mapped[List["AnalystQuote"]] = relationship(
        back_populates="analyst",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    briefing_links: Mapped[List["BriefingAnalyst"]] = relationship(
        back_populates="analyst",
        cascade="all, delete-orphan",
    )
    publications: Mapped[List["Publication"]] = relationship(
        back_populates="analyst",
        cascade="all, delete-orphan",
    )
    testimonials: Mapped[List["Testimonial"]] = relationship(
        back_populates="analyst",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Analyst(id={self.id}, email={self.email}, status={self.status})>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class AnalystCoveredTopic(Base, TimestampMixin):
    """Topic an analyst covers."""

    __tablename__ = "analyst_covered_topics"
    __table_args__ = (
        UniqueConstraint("analyst_id", "topic", name="uq_analyst_covered_topic"),
    )

    id: Mapped[str] = id_column()
    analyst_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("analysts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    topic: Mapped[str] = mapped_column(String(255), nullable=False)

    analyst: Mapped["Analyst"] = relationship(back_populates="covered_topics")


class AnalystQuote(Base, TimestampMixin):
    """Quote attributed to an analyst, shown on the analyst portal."""

    __tablename__ = "analyst_quotes"
    __table_args__ = (
        Index("ix_analyst_quotes_analyst_featured", "analyst_id", "is_featured"),
    )

    id: Mapped[str] = id_column()
    analyst_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("analysts.id", ondelete="CASCADE"),
        nullable=False,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    analyst: Mapped["Analyst"] = relationship(back_populates="quotes")
