from fastapi import APIRouter, Depends

from listbot.api.deps import get_settings
from listbot.core.config import Settings

router = APIRouter()


@router.get("/health")
async def health(settings: Settings = Depends(get_settings)):
    return {"status": "ok", "telegram_configured": settings.telegram_configured}
