"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.events import router as events_router

router = APIRouter()
router.include_router(events_router)
