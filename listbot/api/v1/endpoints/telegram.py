import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from listbot.api.deps import get_callback_handler, get_channel_connector, require_webhook_secret
from listbot.destinations.telegram.connector import TelegramChannelConnector
from listbot.destinations.telegram.types import Update
from listbot.schemas.listing import ListingRecord, PostListingOut
from listbot.services.callback_handler import CallbackHandler
from listbot.services.redaction import redact_payload, summarize_photos


log = logging.getLogger(__name__)
router = APIRouter()

REQUIRED_LISTING_FIELDS = ("description", "location", "monthly_rent")


def _error(status_code: int, out: PostListingOut) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=out.model_dump(exclude_none=True))


@router.post("/telegram/post-listing", response_model=PostListingOut, response_model_exclude_none=True)
async def post_listing(
    body: Any = Body(...),
    connector: TelegramChannelConnector = Depends(get_channel_connector),
):
    """
    Called by the listing form right after the backend created the listing.
    Posts it to the channel; an unconfigured bot is a skip, not an error.
    """
    if not isinstance(body, dict) or any(not body.get(k) for k in REQUIRED_LISTING_FIELDS):
        return _error(400, PostListingOut(success=False, error="Missing required fields"))

    try:
        listing = ListingRecord.model_validate(body)
    except ValidationError as e:
        first = e.errors()[0]
        loc = ".".join(str(p) for p in first.get("loc", ()))
        return _error(400, PostListingOut(success=False, error=f"{loc}: {first.get('msg')}"))

    if not connector.is_configured:
        log.warning("post-listing: Telegram not configured, skipping channel post")
        return PostListingOut(success=False, skipped=True, error="Telegram not configured")

    log.info(
        "post-listing: listing=%s photos=%s payload=%s",
        listing.listing_id,
        summarize_photos(listing.photos),
        redact_payload({k: v for k, v in body.items() if k != "photos"}),
    )

    result = await connector.publish_listing(listing)

    if result.success:
        return PostListingOut(success=True, messageId=result.message_id)
    if result.skipped:
        return PostListingOut(success=False, skipped=True, error=result.error)

    log.error("post-listing: Telegram posting failed: %s", result.error)
    return _error(500, PostListingOut(success=False, error=result.error))


@router.post("/telegram/webhook", dependencies=[Depends(require_webhook_secret)])
async def telegram_webhook(
    request: Request,
    handler: CallbackHandler = Depends(get_callback_handler),
):
    try:
        body = await request.json()
    except ValueError:
        log.exception("webhook: request body is not JSON")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    try:
        update = Update.model_validate(body)
    except ValidationError:
        # Not an update shape we model; acknowledge so Telegram does not redeliver
        log.info("webhook: ignoring unparseable update")
        return {"ok": True}

    try:
        outcome = await handler.handle_update(update)
    except Exception:
        log.exception("webhook: error handling update %s", update.update_id)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    log.info("webhook: update %s -> %s", update.update_id, outcome.value)
    return {"ok": True}


@router.get("/telegram/webhook")
async def telegram_webhook_status():
    return {"status": "ok", "message": "Telegram webhook endpoint is active"}
