from __future__ import annotations

import logging
from typing import Any

from listbot.destinations.telegram.types import (
    ApiErr,
    ApiResult,
    InlineKeyboardMarkup,
    InputMediaPhoto,
    ParseMode,
    decode_api_response,
)
from listbot.services.http_client import HttpClient


log = logging.getLogger(__name__)


def _markup(reply_markup: InlineKeyboardMarkup | None) -> dict[str, Any] | None:
    if reply_markup is None:
        return None
    return reply_markup.model_dump(exclude_none=True)


def _body(**fields: Any) -> dict[str, Any]:
    # Bot API treats missing and null differently for some fields; never send nulls
    return {k: v for k, v in fields.items() if v is not None}


class TelegramBotClient:
    """
    Transport for the Telegram Bot API.

    Every method POSTs JSON to `{api_base}/bot<token>/<method>` and returns an
    ApiOk | ApiErr. Nothing here raises on network or API failure.
    """

    def __init__(self, *, http: HttpClient, bot_token: str, api_base: str = "https://api.telegram.org"):
        self._http = http
        self._token = bot_token
        self._api_base = api_base.rstrip("/")

    def method_url(self, method: str) -> str:
        return f"{self._api_base}/bot{self._token}/{method}"

    async def call(self, method: str, body: dict[str, Any] | None = None) -> ApiResult:
        res = await self._http.post_json(url=self.method_url(method), json_body=body or {})

        # Telegram answers errors with a JSON envelope too (400/403/429...)
        if res.status_code is None:
            log.warning("telegram: %s transport error: %s", method, res.error_message)
            return ApiErr(description=res.error_message or "Request failed")

        decoded = decode_api_response(res.detail)
        if isinstance(decoded, ApiErr):
            if decoded.error_code is None and not res.ok:
                decoded = ApiErr(description=decoded.description, error_code=res.status_code)
            log.warning("telegram: %s failed (%s): %s", method, decoded.error_code, decoded.description)
        return decoded

    async def get_me(self) -> ApiResult:
        return await self.call("getMe")

    async def send_message(
        self,
        *,
        chat_id: int | str,
        text: str,
        parse_mode: ParseMode | None = None,
        reply_markup: InlineKeyboardMarkup | None = None,
    ) -> ApiResult:
        return await self.call(
            "sendMessage",
            _body(chat_id=chat_id, text=text, parse_mode=parse_mode, reply_markup=_markup(reply_markup)),
        )

    async def send_photo(
        self,
        *,
        chat_id: int | str,
        photo: str,
        caption: str | None = None,
        parse_mode: ParseMode | None = None,
        reply_markup: InlineKeyboardMarkup | None = None,
    ) -> ApiResult:
        return await self.call(
            "sendPhoto",
            _body(
                chat_id=chat_id,
                photo=photo,
                caption=caption,
                parse_mode=parse_mode,
                reply_markup=_markup(reply_markup),
            ),
        )

    async def send_media_group(self, *, chat_id: int | str, media: list[InputMediaPhoto]) -> ApiResult:
        return await self.call(
            "sendMediaGroup",
            {"chat_id": chat_id, "media": [m.model_dump(exclude_none=True) for m in media]},
        )

    async def answer_callback_query(
        self,
        callback_query_id: str,
        *,
        text: str | None = None,
        show_alert: bool = False,
    ) -> ApiResult:
        return await self.call(
            "answerCallbackQuery",
            _body(callback_query_id=callback_query_id, text=text, show_alert=show_alert or None),
        )

    async def set_webhook(self, url: str, *, secret_token: str | None = None) -> ApiResult:
        return await self.call(
            "setWebhook",
            _body(url=url, secret_token=secret_token or None, allowed_updates=["message", "callback_query"]),
        )
