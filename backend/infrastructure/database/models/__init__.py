"""
SQLAlchemy database models.
"""

from .analyst import (
    Analyst,
    AnalystCoveredTopic,
    AnalystQuote,
    AnalystStatus,
    AnalystType,
    Influence,
    RelationshipHealth,
)
from .base import Base, TimestampMixin
from .briefing import Briefing, BriefingAnalyst, BriefingStatus
from .calendar import CalendarConnection
from .newsletter import Newsletter, NewsletterStatus
from .publication import Publication, PublicationStatus, PublicationType
from .settings import (
    AnalystPortalSettings,
    GeneralSettings,
    InfluenceTier,
    PredefinedTopic,
    TopicCategory,
)
from .testimonial import Testimonial
from .user import User, UserRole

__all__ = [
    "Base",
    "TimestampMixin",
    "User",
    "UserRole",
    "Analyst",
    "AnalystCoveredTopic",
    "AnalystQuote",
    "AnalystStatus",
    "AnalystType",
    "Influence",
    "RelationshipHealth",
    "Briefing",
    "BriefingAnalyst",
    "BriefingStatus",
    "Publication",
    "PublicationStatus",
    "PublicationType",
    "Testimonial",
    "Newsletter",
    "NewsletterStatus",
    "GeneralSettings",
    "AnalystPortalSettings",
    "InfluenceTier",
    "PredefinedTopic",
    "TopicCategory",
    "CalendarConnection",
]
