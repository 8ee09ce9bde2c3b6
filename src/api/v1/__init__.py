"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.digests import router as digests_router
from api.v1.routes.escalations import router as escalations_router
from api.v1.routes.notifications import recipient_notifications_router
from api.v1.routes.notifications import router as notifications_router
from api.v1.routes.preferences import router as preferences_router
from api.v1.routes.stats import router as stats_router

router = APIRouter()
router.include_router(notifications_router)
router.include_router(recipient_notifications_router)
router.include_router(escalations_router)
router.include_router(digests_router)
router.include_router(preferences_router)
router.include_router(stats_router)
