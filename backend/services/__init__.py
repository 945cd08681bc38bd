"""
Service layer for business logic shared by the API routes.
"""

from .analyst_portal import AnalystPortalService
from .general_settings import get_or_create_general_settings, update_general_settings
from .newsletters import NewsletterService, compute_metrics

__all__ = [
    "AnalystPortalService",
    "NewsletterService",
    "compute_metrics",
    "get_or_create_general_settings",
    "update_general_settings",
]
