from fastapi import APIRouter

from clstr.api.v1 import mentorship, notifications, realtime

router = APIRouter(prefix="/api/v1")

router.include_router(mentorship.router)
router.include_router(notifications.router)
router.include_router(realtime.router)
