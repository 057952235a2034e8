from __future__ import annotations

import logging
from enum import Enum

from listbot.destinations.telegram.client import TelegramBotClient
from listbot.destinations.telegram.deeplinks import CONTACT_PREFIX, parse_token
from listbot.destinations.telegram.projection import format_contact_message
from listbot.destinations.telegram.types import ApiErr, CallbackQuery, Update
from listbot.schemas.listing import ListingRecord
from listbot.services.listings_backend import BackendError, ListingsBackend


log = logging.getLogger(__name__)

CONTACT_SENT_TEXT = "Contact info sent to your private messages! 📱"
LOOKUP_FAILED_TEXT = "Sorry, could not retrieve contact information."
UNDELIVERABLE_TEXT = "Please open a chat with the bot and press Start, then try again."


class CallbackOutcome(str, Enum):
    ignored = "ignored"                  # not a callback query
    unrecognized = "unrecognized"        # callback with a payload we do not handle
    contact_sent = "contact_sent"
    contact_undeliverable = "contact_undeliverable"
    lookup_failed = "lookup_failed"


class CallbackHandler:
    """
    Handles inline-button presses under channel posts.

    Only `contact-<id>` is acted on: the listing's phone number is sent to
    the presser privately. Every callback query gets answered exactly once,
    whatever happens while resolving it.
    """

    def __init__(self, *, client: TelegramBotClient, backend: ListingsBackend):
        self._client = client
        self._backend = backend

    async def handle_update(self, update: Update) -> CallbackOutcome:
        cq = update.callback_query
        if cq is None:
            return CallbackOutcome.ignored

        data = (cq.data or "").strip()
        if not data.startswith(CONTACT_PREFIX):
            log.info("callback: unrecognized payload %r from user %s", cq.data, cq.from_.id)
            await self._answer(cq, text=None)
            return CallbackOutcome.unrecognized

        token = parse_token(data)
        if token is None or not token.listing_id:
            log.warning("callback: malformed contact token %r", data)
            await self._answer(cq, text=LOOKUP_FAILED_TEXT, show_alert=True)
            return CallbackOutcome.lookup_failed

        return await self._send_contact(cq, token.listing_id)

    async def _send_contact(self, cq: CallbackQuery, listing_id: str) -> CallbackOutcome:
        try:
            listing = await self._backend.get_listing(listing_id)
            text = self._contact_text(listing)
        except BackendError as e:
            log.warning("callback: contact lookup for listing %s failed: %s", listing_id, e)
            await self._answer(cq, text=LOOKUP_FAILED_TEXT, show_alert=True)
            return CallbackOutcome.lookup_failed
        except Exception:
            log.exception("callback: contact lookup for listing %s crashed", listing_id)
            await self._answer(cq, text=LOOKUP_FAILED_TEXT, show_alert=True)
            return CallbackOutcome.lookup_failed

        try:
            sent = await self._client.send_message(chat_id=cq.from_.id, text=text, parse_mode="HTML")
        except Exception:
            log.exception("callback: private message to user %s crashed", cq.from_.id)
            sent = ApiErr(description="private message crashed")

        if isinstance(sent, ApiErr):
            # Typically 403: the user never started a chat with the bot
            log.info("callback: could not message user %s: %s", cq.from_.id, sent.description)
            await self._answer(cq, text=UNDELIVERABLE_TEXT, show_alert=True)
            return CallbackOutcome.contact_undeliverable

        await self._answer(cq, text=CONTACT_SENT_TEXT)
        log.info("callback: sent contact for listing %s to user %s", listing_id, cq.from_.id)
        return CallbackOutcome.contact_sent

    @staticmethod
    def _contact_text(listing: ListingRecord) -> str:
        if not listing.phone_number or not listing.phone_number.strip():
            raise BackendError(f"listing {listing.listing_id} has no phone number")
        description = listing.description.strip() or listing.property_type_label
        return format_contact_message(listing.phone_number.strip(), description)

    async def _answer(self, cq: CallbackQuery, *, text: str | None, show_alert: bool = False) -> None:
        try:
            res = await self._client.answer_callback_query(cq.id, text=text, show_alert=show_alert)
        except Exception:
            log.exception("callback: answering %s crashed", cq.id)
            return
        if isinstance(res, ApiErr):
            log.warning("callback: answering %s failed: %s", cq.id, res.description)
