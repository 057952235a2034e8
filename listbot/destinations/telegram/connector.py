from __future__ import annotations

import logging

from listbot.core.config import Settings
from listbot.destinations.base import DeliveryResult
from listbot.destinations.capabilities import TELEGRAM_CHANNEL, DestinationCapabilities
from listbot.destinations.telegram.client import TelegramBotClient
from listbot.destinations.telegram.projection import (
    MEDIA_GROUP_FOLLOWUP_TEXT,
    build_listing_keyboard,
    format_listing_message,
)
from listbot.destinations.telegram.types import (
    ApiErr,
    ApiOk,
    ApiResult,
    InlineKeyboardMarkup,
    InputMediaPhoto,
)
from listbot.schemas.listing import ListingRecord
from listbot.services.photo_urls import normalize_photo_urls


log = logging.getLogger(__name__)


def _message_id(result: object) -> int | None:
    if isinstance(result, dict) and isinstance(result.get("message_id"), int):
        return result["message_id"]
    return None


class TelegramChannelConnector:
    """
    Posts listings to the configured Telegram channel.

    Shape of the post depends on how many photos survive normalization:
    - none: one text message, keyboard attached
    - one: one photo with the text as caption, keyboard attached
    - two or more: a media group (caption on the first item only), then a
      separate text message carrying the keyboard, since media groups cannot
      have buttons. The follow-up is best effort; the post counts as sent once
      the group is accepted.

    Never raises; every outcome is a DeliveryResult.
    """

    destination = "telegram_channel"

    def __init__(self, *, settings: Settings, client: TelegramBotClient):
        self._settings = settings
        self._client = client
        self._channel_id = settings.telegram_channel_id

    def capabilities(self) -> DestinationCapabilities:
        return TELEGRAM_CHANNEL

    @property
    def is_configured(self) -> bool:
        return self._settings.telegram_configured

    async def publish_listing(self, listing: ListingRecord) -> DeliveryResult:
        if not self.is_configured:
            log.warning("telegram: not configured, skipping channel post for listing %s", listing.listing_id)
            return DeliveryResult.not_configured()

        try:
            text = format_listing_message(listing)
            keyboard = build_listing_keyboard(
                listing.listing_id,
                listing.phone_number,
                mini_app_url=self._settings.mini_app_url,
            )
        except Exception as e:
            log.exception("telegram: could not format listing %s", listing.listing_id)
            return DeliveryResult.failed(str(e) or type(e).__name__)

        return await self.send_to_channel(text, listing.photos, keyboard)

    async def send_to_channel(
        self,
        text: str,
        photos: list[str],
        reply_markup: InlineKeyboardMarkup | None = None,
    ) -> DeliveryResult:
        if not self.is_configured:
            log.warning("telegram: not configured, skipping channel post")
            return DeliveryResult.not_configured()

        if reply_markup is not None and reply_markup.is_empty():
            reply_markup = None

        try:
            urls = normalize_photo_urls(photos or [], self._settings.backend_api_url)
            log.info("telegram: posting to %s with %d/%d usable photos", self._channel_id, len(urls), len(photos or []))

            caps = self.capabilities()
            if not urls:
                if caps.max_text_chars and len(text) > caps.max_text_chars:
                    log.warning("telegram: message is %d chars, over the %d limit", len(text), caps.max_text_chars)
                return self._to_delivery(await self._send_text(text, reply_markup), "Failed to send message")

            if caps.max_caption_chars and len(text) > caps.max_caption_chars:
                log.warning("telegram: caption is %d chars, over the %d limit", len(text), caps.max_caption_chars)

            if len(urls) == 1:
                res = await self._client.send_photo(
                    chat_id=self._channel_id,
                    photo=urls[0],
                    caption=text,
                    parse_mode="HTML",
                    reply_markup=reply_markup,
                )
                return self._to_delivery(res, "Failed to send photo")

            return await self._send_media_group(text, urls[: caps.max_media_per_post], reply_markup)
        except Exception as e:
            log.exception("telegram: channel post crashed")
            return DeliveryResult.failed(str(e) or type(e).__name__)

    async def _send_text(self, text: str, reply_markup: InlineKeyboardMarkup | None) -> ApiResult:
        return await self._client.send_message(
            chat_id=self._channel_id,
            text=text,
            parse_mode="HTML",
            reply_markup=reply_markup,
        )

    async def _send_media_group(
        self,
        caption: str,
        urls: list[str],
        reply_markup: InlineKeyboardMarkup | None,
    ) -> DeliveryResult:
        media = [
            InputMediaPhoto(media=url, caption=caption, parse_mode="HTML") if i == 0 else InputMediaPhoto(media=url)
            for i, url in enumerate(urls)
        ]
        res = await self._client.send_media_group(chat_id=self._channel_id, media=media)

        if isinstance(res, ApiErr):
            return DeliveryResult.failed(res.description or "Failed to send media group")

        messages = res.result if isinstance(res.result, list) else []
        if not messages:
            return DeliveryResult.failed("Failed to send media group")

        if reply_markup is not None and not self.capabilities().buttons_on_media_group:
            followup = await self._client.send_message(
                chat_id=self._channel_id,
                text=MEDIA_GROUP_FOLLOWUP_TEXT,
                reply_markup=reply_markup,
            )
            if isinstance(followup, ApiErr):
                # Group is already live; no compensation, the post just has no buttons
                log.warning("telegram: media group sent but keyboard follow-up failed: %s", followup.description)

        return DeliveryResult.sent(_message_id(messages[0]))

    @staticmethod
    def _to_delivery(res: ApiResult, default_error: str) -> DeliveryResult:
        if isinstance(res, ApiOk):
            return DeliveryResult.sent(_message_id(res.result))
        return DeliveryResult.failed(res.description or default_error)
