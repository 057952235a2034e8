from fastapi import APIRouter

from listbot.api.v1.endpoints.health import router as health_router
from listbot.api.v1.endpoints.telegram import router as telegram_router


router = APIRouter(prefix="/v1")
router.include_router(health_router, tags=["health"])
router.include_router(telegram_router, tags=["telegram"])
