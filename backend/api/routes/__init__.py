"""API Routes."""

from fastapi import APIRouter

from .analysts import router as analysts_router
from .auth import router as auth_router
from .briefings import router as briefings_router
from .calendar import callback_router as google_callback_router
from .calendar import router as calendar_router
from .health import router as health_router
from .newsletters import router as newsletters_router
from .portal import router as portal_router
from .publications import router as publications_router
from .scheduling_agent import router as scheduling_agent_router
from .settings import router as settings_router
from .social_crawler import router as social_crawler_router
from .testimonials import router as testimonials_router

# Create main API router
api_router = APIRouter()

api_router.include_router(health_router, tags=["Health"])
api_router.include_router(auth_router)
api_router.include_router(google_callback_router)
api_router.include_router(analysts_router)
api_router.include_router(briefings_router)
api_router.include_router(publications_router)
api_router.include_router(testimonials_router)
api_router.include_router(newsletters_router)
api_router.include_router(settings_router)
api_router.include_router(calendar_router)
api_router.include_router(portal_router)
api_router.include_router(scheduling_agent_router)
api_router.include_router(social_crawler_router)
