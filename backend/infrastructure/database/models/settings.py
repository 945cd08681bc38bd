"""
Organization settings database models.
"""

from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, id_column

DEFAULT_INDUSTRY_NAME = "HR Technology"
DEFAULT_TIER_COLOR = "#6b7280"


class GeneralSettings(Base, TimestampMixin):
    """Organization-wide settings. The table holds a single row."""

    __tablename__ = "general_settings"

    id: Mapped[str] = id_column()
    company_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    protected_domain: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    logo_url: Mapped[str] = mapped_column(String(1000), default="", nullable=False)
    industry_name: Mapped[str] = mapped_column(
        String(255), default=DEFAULT_INDUSTRY_NAME, nullable=False
    )


class TopicCategory(str, Enum):
    """Predefined topic grouping."""

    CORE = "CORE"
    ADDITIONAL = "ADDITIONAL"


class PredefinedTopic(Base, TimestampMixin):
    """Topic offered when tagging analysts' coverage areas."""

    __tablename__ = "predefined_topics"

    id: Mapped[str] = id_column()
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    category: Mapped[str] = mapped_column(
        String(20), default=TopicCategory.CORE.value, nullable=False
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class InfluenceTier(Base, TimestampMixin):
    """
    Engagement cadence for a tier of analysts.

    Frequencies are in days; NULL means "never".
    """

    __tablename__ = "influence_tiers"

    id: Mapped[str] = id_column()
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    color: Mapped[str] = mapped_column(String(20), default=DEFAULT_TIER_COLOR, nullable=False)
    briefing_frequency: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    touchpoint_frequency: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class AnalystPortalSettings(Base, TimestampMixin):
    """Welcome content shown on the analyst portal. The table holds a single row."""

    __tablename__ = "analyst_portal_settings"

    id: Mapped[str] = id_column()
    welcome_quote: Mapped[str] = mapped_column(Text, default="", nullable=False)
    quote_author: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    author_image_url: Mapped[str] = mapped_column(String(1000), default="", nullable=False)
