"""
Listing -> Telegram channel post.

Pure functions: message text (HTML parse mode), the inline keyboard under the
post, and the private contact reply. No I/O here.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from html import escape

from listbot.destinations.telegram.deeplinks import (
    CREATE_LISTING_TOKEN,
    InvalidListingId,
    contact_token,
    listing_token,
    mini_app_link,
)
from listbot.destinations.telegram.types import InlineKeyboardButton, InlineKeyboardMarkup
from listbot.schemas.listing import ListingRecord


log = logging.getLogger(__name__)

AMENITY_EMOJIS: dict[str, str] = {
    "water": "💧",
    "electricity": "⚡",
    "security": "🔒",
    "internet": "📡",
    "wifi": "📡",
    "parking": "🅿️",
    "gym": "🏋️",
    "pool": "🏊",
    "garden": "🌳",
    "balcony": "🏞️",
    "elevator": "🛗",
    "generator": "🔌",
}
DEFAULT_AMENITY_EMOJI = "✓"

NEGOTIABLE_MARKER = "<i>(Negotiable)</i>"
MEDIA_GROUP_FOLLOWUP_TEXT = "👆 Interested in this property?"


def format_amount(amount: str) -> str:
    """'1500' -> '1,500'; fractional part is dropped."""
    return f"{int(Decimal(amount)):,}"


def format_listing_message(listing: ListingRecord) -> str:
    property_type = escape(listing.property_type_label)
    title = escape(listing.description.strip()) if listing.description.strip() else property_type
    currency = listing.currency

    lines = [
        f"🏠 <b>{title}</b>",
        "",
        f"📍 <b>Location:</b> {escape(listing.location)}",
        f"🛏️ <b>Bedrooms:</b> {listing.bedrooms} | 🚿 <b>Bathrooms:</b> {listing.bathrooms}",
    ]

    price = f"💰 <b>Price:</b> {currency} {format_amount(listing.monthly_rent)}/month"
    if listing.negotiable:
        price += f" {NEGOTIABLE_MARKER}"
    lines.append(price)

    if listing.initial_deposit is not None:
        lines.append(f"💵 <b>Deposit:</b> {currency} {format_amount(listing.initial_deposit)}")

    if listing.amenities:
        lines += ["", "✨ <b>Amenities:</b>"]
        for amenity in listing.amenities:
            emoji = AMENITY_EMOJIS.get(amenity.strip().lower(), DEFAULT_AMENITY_EMOJI)
            lines.append(f"{emoji} {escape(amenity.replace('_', ' '))}")

    lines += ["", f"🏷️ <b>Type:</b> {property_type}"]
    return "\n".join(lines)


def build_listing_keyboard(
    listing_id: str | int | None,
    phone_number: str | None,
    *,
    mini_app_url: str,
) -> InlineKeyboardMarkup:
    """
    Rows, in order:
    - Contact Info: callback `contact-<id>`, answered by the webhook (needs phone + id)
    - View Details: mini app link `listing-<id>` (needs id)
    - Post Your Own Listing: mini app link `create-listing` (always)
    """
    rows: list[list[InlineKeyboardButton]] = []

    if listing_id is not None and listing_id != "":
        try:
            contact = contact_token(listing_id)
            details = listing_token(listing_id)
        except InvalidListingId as e:
            log.warning("keyboard: %s; omitting listing buttons", e)
        else:
            if phone_number and phone_number.strip():
                rows.append([InlineKeyboardButton(text="📞 Contact Info", callback_data=contact)])
            rows.append([InlineKeyboardButton(text="🔍 View Details", url=mini_app_link(mini_app_url, details))])

    rows.append([
        InlineKeyboardButton(
            text="➕ Post Your Own Listing",
            url=mini_app_link(mini_app_url, CREATE_LISTING_TOKEN),
        )
    ])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def format_contact_message(phone_number: str, property_description: str) -> str:
    return (
        "📱 <b>Contact Information</b>\n\n"
        f"Property: {escape(property_description)}\n"
        f"Phone: <code>{escape(phone_number)}</code>\n\n"
        "<i>Click the phone number to copy it.</i>"
    )


def format_photo_caption(listing: ListingRecord, photo_index: int, total_photos: int) -> str:
    if photo_index == 0:
        return format_listing_message(listing)
    return f"Photo {photo_index + 1}/{total_photos}"
