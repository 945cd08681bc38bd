"""
Organization settings service.

The ``general_settings`` and ``analyst_portal_settings`` tables each hold a
single row, created with defaults the first time it is read.
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.settings import (
    NEVER,
    AnalystPortalSettingsUpdateRequest,
    GeneralSettingsUpdateRequest,
    InfluenceTierInput,
)
from infrastructure.database.models.settings import (
    DEFAULT_INDUSTRY_NAME,
    AnalystPortalSettings,
    GeneralSettings,
    InfluenceTier,
)

logger = logging.getLogger(__name__)


async def get_or_create_general_settings(db: AsyncSession) -> GeneralSettings:
    """Return the settings row, inserting the defaults when the table is empty."""
    result = await db.execute(
        select(GeneralSettings).order_by(GeneralSettings.created_at.asc()).limit(1)
    )
    general = result.scalar_one_or_none()
    if general is not None:
        return general

    general = GeneralSettings(
        company_name="",
        protected_domain="",
        logo_url="",
        industry_name=DEFAULT_INDUSTRY_NAME,
    )
    db.add(general)
    await db.commit()
    await db.refresh(general)
    logger.info("Created default general settings")
    return general


async def update_general_settings(
    db: AsyncSession, body: GeneralSettingsUpdateRequest
) -> GeneralSettings:
    """Apply validated values to the settings row."""
    general = await get_or_create_general_settings(db)

    general.company_name = body.company_name
    general.protected_domain = body.protected_domain
    general.logo_url = body.logo_url or ""
    general.industry_name = body.industry_name

    await db.commit()
    await db.refresh(general)
    logger.info("General settings updated (domain=%s)", general.protected_domain)
    return general


async def get_or_create_portal_settings(db: AsyncSession) -> AnalystPortalSettings:
    """Return the portal settings row, inserting an empty one when missing."""
    result = await db.execute(
        select(AnalystPortalSettings).order_by(AnalystPortalSettings.created_at.asc()).limit(1)
    )
    portal = result.scalar_one_or_none()
    if portal is not None:
        return portal

    portal = AnalystPortalSettings(welcome_quote="", quote_author="", author_image_url="")
    db.add(portal)
    await db.commit()
    await db.refresh(portal)
    return portal


async def update_portal_settings(
    db: AsyncSession, body: AnalystPortalSettingsUpdateRequest
) -> AnalystPortalSettings:
    portal = await get_or_create_portal_settings(db)

    portal.welcome_quote = body.welcome_quote
    portal.quote_author = body.quote_author
    portal.author_image_url = body.author_image_url or ""

    await db.commit()
    await db.refresh(portal)
    return portal


async def list_influence_tiers(db: AsyncSession) -> list[InfluenceTier]:
    result = await db.execute(select(InfluenceTier).order_by(InfluenceTier.order.asc()))
    return list(result.scalars().all())


def _frequency_column(value: int) -> int | None:
    return None if value == NEVER else value


async def replace_influence_tiers(
    db: AsyncSession, tiers: list[InfluenceTierInput]
) -> list[InfluenceTier]:
    """Swap the whole tier list for ``tiers``; list position becomes ``order``."""
    await db.execute(delete(InfluenceTier))

    created = [
        InfluenceTier(
            name=tier.name,
            briefing_frequency=_frequency_column(tier.briefing_frequency),
            touchpoint_frequency=_frequency_column(tier.touchpoint_frequency),
            order=position,
            is_active=tier.is_active,
        )
        for position, tier in enumerate(tiers, start=1)
    ]
    db.add_all(created)
    await db.commit()

    logger.info("Saved %d influence tier(s)", len(created))
    return await list_influence_tiers(db)
