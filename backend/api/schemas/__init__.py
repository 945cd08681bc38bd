"""
API request and response schemas.
"""

from .analyst import (
    AnalystArchiveResponse,
    AnalystCreateRequest,
    AnalystDetailResponse,
    AnalystQuoteCreateRequest,
    AnalystQuoteResponse,
    AnalystResponse,
    AnalystUpdateRequest,
)
from .auth import LoginRequest, TokenResponse, UserResponse
from .briefing import BriefingCreateRequest, BriefingResponse, BriefingUpdateRequest
from .common import CamelModel, ErrorResponse, ListResponse, MessageResponse, SuccessResponse
from .newsletter import (
    NewsletterCreateRequest,
    NewsletterMetrics,
    NewsletterResponse,
    NewsletterUpdateRequest,
)
from .portal import AnalystPortalResponse
from .publication import (
    PublicationCreateRequest,
    PublicationResponse,
    PublicationUpdateRequest,
)
from .settings import (
    AnalystPortalSettingsResponse,
    AnalystPortalSettingsUpdateRequest,
    CalendarAuthUrlResponse,
    CalendarConnectionResponse,
    CalendarConnectionUpdateRequest,
    CalendarConnectRequest,
    GeneralSettingsResponse,
    GeneralSettingsUpdateRequest,
    InfluenceTierInput,
    InfluenceTierResponse,
    InfluenceTiersSaveRequest,
    TopicRequest,
    TopicResponse,
)
from .testimonial import (
    TestimonialCreateRequest,
    TestimonialResponse,
    TestimonialUpdateRequest,
)

__all__ = [
    "CamelModel",
    "SuccessResponse",
    "ListResponse",
    "MessageResponse",
    "ErrorResponse",
    "LoginRequest",
    "TokenResponse",
    "UserResponse",
    "AnalystCreateRequest",
    "AnalystUpdateRequest",
    "AnalystResponse",
    "AnalystDetailResponse",
    "AnalystArchiveResponse",
    "AnalystQuoteCreateRequest",
    "AnalystQuoteResponse",
    "BriefingCreateRequest",
    "BriefingUpdateRequest",
    "BriefingResponse",
    "PublicationCreateRequest",
    "PublicationUpdateRequest",
    "PublicationResponse",
    "TestimonialCreateRequest",
    "TestimonialUpdateRequest",
    "TestimonialResponse",
    "NewsletterCreateRequest",
    "NewsletterUpdateRequest",
    "NewsletterResponse",
    "NewsletterMetrics",
    "GeneralSettingsUpdateRequest",
    "GeneralSettingsResponse",
    "TopicRequest",
    "TopicResponse",
    "InfluenceTierInput",
    "InfluenceTiersSaveRequest",
    "InfluenceTierResponse",
    "AnalystPortalSettingsUpdateRequest",
    "AnalystPortalSettingsResponse",
    "CalendarConnectRequest",
    "CalendarAuthUrlResponse",
    "CalendarConnectionResponse",
    "CalendarConnectionUpdateRequest",
    "AnalystPortalResponse",
]
