"""
Analyst portal service.

Assembles the data behind the analyst-facing portal: profile, featured
quote, upcoming briefings, published testimonials and publications.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.analyst import AnalystResponse
from api.schemas.portal import (
    AnalystBriefing,
    AnalystPortalResponse,
    AnalystPublication,
    AnalystTestimonial,
    PortalQuote,
)
from infrastructure.database.models import (
    Analyst,
    AnalystQuote,
    Briefing,
    BriefingAnalyst,
    Publication,
    Testimonial,
)

logger = logging.getLogger(__name__)

PORTAL_BRIEFINGS_LIMIT = 10
PORTAL_PUBLICATIONS_LIMIT = 20


class AnalystPortalService:
    """Read-only queries for one analyst's portal."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def featured_quote(self, analyst_id: str) -> Optional[PortalQuote]:
        """The featured quote, or the most recent one when none is featured."""
        result = await self.db.execute(
            select(AnalystQuote)
            .where(AnalystQuote.analyst_id == analyst_id)
            .order_by(AnalystQuote.is_featured.desc(), AnalystQuote.created_at.desc())
            .limit(1)
        )
        quote = result.scalar_one_or_none()
        return PortalQuote.model_validate(quote) if quote else None

    async def upcoming_briefings(self, analyst_id: str) -> list[AnalystBriefing]:
        result = await self.db.execute(
            select(Briefing)
            .join(BriefingAnalyst, BriefingAnalyst.briefing_id == Briefing.id)
            .where(
                BriefingAnalyst.analyst_id == analyst_id,
                Briefing.scheduled_at >= datetime.now(timezone.utc),
            )
            .order_by(Briefing.scheduled_at.asc())
            .limit(PORTAL_BRIEFINGS_LIMIT)
        )
        return [
            AnalystBriefing(
                id=b.id,
                scheduled_at=b.scheduled_at,
                is_confirmed=b.is_confirmed,
                proposed_topics=b.proposed_topics or [],
                recording_url=b.recording_url,
                transcript_url=b.transcript_url,
                summary_url=b.summary_url,
                notes=b.notes,
            )
            for b in result.scalars().all()
        ]

    async def published_testimonials(self, analyst_id: str) -> list[AnalystTestimonial]:
        result = await self.db.execute(
            select(Testimonial)
            .where(
                Testimonial.analyst_id == analyst_id,
                Testimonial.is_published.is_(True),
            )
            .order_by(Testimonial.display_order.asc(), Testimonial.date.desc())
        )
        return [AnalystTestimonial.model_validate(t) for t in result.scalars().all()]

    async def publications(self, analyst_id: str) -> list[AnalystPublication]:
        result = await self.db.execute(
            select(Publication)
            .where(Publication.analyst_id == analyst_id)
            .order_by(
                Publication.published_at.desc().nulls_first(),
                Publication.expected_date.asc(),
            )
            .limit(PORTAL_PUBLICATIONS_LIMIT)
        )
        return [
            AnalystPublication(
                id=p.id,
                title=p.title,
                status=p.status,
                expected_date=p.expected_date,
                published_date=p.published_at,
                url=p.url,
                notes=p.notes,
                is_validated=p.is_validated,
            )
            for p in result.scalars().all()
        ]

    async def build(self, analyst: Analyst) -> AnalystPortalResponse:
        """Collect the full portal payload for ``analyst``."""
        return AnalystPortalResponse(
            analyst=AnalystResponse.model_validate(analyst),
            quote=await self.featured_quote(analyst.id),
            briefings=await self.upcoming_briefings(analyst.id),
            testimonials=await self.published_testimonials(analyst.id),
            publications=await self.publications(analyst.id),
        )
