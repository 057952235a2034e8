import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from listbot.api.deps import Services, build_services
from listbot.api.v1.router import router as v1_router
from listbot.core.config import Settings, settings as default_settings
from listbot.core.telemetry import setup_telemetry


log = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, *, services: Services | None = None) -> FastAPI:
    settings = settings or default_settings

    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not settings.telegram_configured:
            log.warning("startup: TELEGRAM_BOT_TOKEN or TELEGRAM_CHANNEL_ID missing, channel posts will be skipped")
        yield
        await app.state.services.aclose()

    app = FastAPI(title="Listbot API", version="0.1.0", lifespan=lifespan)

    # before building services so the shared httpx client gets instrumented
    setup_telemetry(app, settings)

    app.state.services = services or build_services(settings)
    app.include_router(v1_router)
    return app


app = create_app()
