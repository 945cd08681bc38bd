"""
Newsletter service.

Handles the send transition and engagement tracking. Delivery itself is not
performed; sending records the audience size and marks the newsletter SENT.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.newsletter import NewsletterMetrics
from infrastructure.database.models import (
    Analyst,
    AnalystStatus,
    Newsletter,
    NewsletterStatus,
)

logger = logging.getLogger(__name__)


def _rate(count: int, total: int) -> float:
    """Percentage of ``total``, one decimal place. 0 when there is no audience."""
    if total <= 0:
        return 0.0
    return round(count / total * 100, 1)


def compute_metrics(newsletter: Newsletter) -> NewsletterMetrics:
    """Build the metrics block for a newsletter."""
    total = newsletter.recipient_count or 0
    opened = newsletter.open_count or 0
    clicked = newsletter.click_count or 0
    return NewsletterMetrics(
        total_recipients=total,
        open_rate=_rate(opened, total),
        click_rate=_rate(clicked, total),
        opened_count=opened,
        clicked_count=clicked,
    )


class NewsletterService:
    """Newsletter state transitions and counters."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def count_recipients(self) -> int:
        """Active analysts are the newsletter audience."""
        result = await self.db.execute(
            select(func.count(Analyst.id)).where(Analyst.status == AnalystStatus.ACTIVE.value)
        )
        return result.scalar_one()

    async def send(self, newsletter: Newsletter) -> Newsletter:
        """
        Mark ``newsletter`` as sent.

        Sets status SENT and ``sent_at`` to now, and records the audience
        size. Re-sending refreshes ``sent_at``.
        """
        newsletter.recipient_count = await self.count_recipients()
        newsletter.status = NewsletterStatus.SENT.value
        newsletter.sent_at = datetime.now(timezone.utc)
        await self.db.commit()
        await self.db.refresh(newsletter)

        logger.info(
            "Newsletter %s marked as sent to %d recipient(s)",
            newsletter.id,
            newsletter.recipient_count,
        )
        return newsletter

    async def _increment(self, newsletter_id: str, column) -> bool:
        result = await self.db.execute(
            update(Newsletter)
            .where(Newsletter.id == newsletter_id)
            .values({column: column + 1})
        )
        await self.db.commit()
        return result.rowcount > 0

    async def record_open(self, newsletter_id: str) -> bool:
        """Increment the open counter. Returns False for an unknown id."""
        return await self._increment(newsletter_id, Newsletter.open_count)

    async def record_click(self, newsletter_id: str) -> bool:
        """Increment the click counter. Returns False for an unknown id."""
        return await self._increment(newsletter_id, Newsletter.click_count)
