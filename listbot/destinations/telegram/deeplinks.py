from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal
from urllib.parse import urlencode


TokenKind = Literal["listing", "contact", "create-listing"]

CREATE_LISTING_TOKEN = "create-listing"
LISTING_PREFIX = "listing-"
CONTACT_PREFIX = "contact-"

# Telegram limits: startapp / callback_data accept [A-Za-z0-9_-], callback_data <= 64 bytes
_TOKEN_CHARS_RE = re.compile(r"^[A-Za-z0-9_-]+$")
MAX_TOKEN_LEN = 64


class InvalidListingId(ValueError):
    pass


@dataclass(frozen=True)
class DeepLinkToken:
    kind: TokenKind
    listing_id: str | None = None

    def __str__(self) -> str:
        if self.kind == "create-listing":
            return CREATE_LISTING_TOKEN
        return f"{self.kind}-{self.listing_id}"


def _checked_token(prefix: str, listing_id: object) -> str:
    lid = "" if listing_id is None else str(listing_id)
    if not lid or not _TOKEN_CHARS_RE.match(lid):
        raise InvalidListingId(f"listing id {lid!r} cannot be used in a deep link")
    token = prefix + lid
    if len(token) > MAX_TOKEN_LEN:
        raise InvalidListingId(f"listing id {lid!r} is too long for a deep link")
    return token


def listing_token(listing_id: object) -> str:
    return _checked_token(LISTING_PREFIX, listing_id)


def contact_token(listing_id: object) -> str:
    return _checked_token(CONTACT_PREFIX, listing_id)


def parse_token(token: str | None) -> DeepLinkToken | None:
    """Decode a callback payload / startapp parameter. Unknown tokens -> None."""
    if not token:
        return None
    t = token.strip()
    if t == CREATE_LISTING_TOKEN:
        return DeepLinkToken(kind="create-listing")
    for prefix, kind in ((CONTACT_PREFIX, "contact"), (LISTING_PREFIX, "listing")):
        if t.startswith(prefix):
            lid = t[len(prefix):]
            if lid and _TOKEN_CHARS_RE.match(lid):
                return DeepLinkToken(kind=kind, listing_id=lid)
            return None
    return None


def mini_app_link(mini_app_url: str, token: str) -> str:
    """Entry link that opens the mini app on the route encoded by `token`."""
    base = mini_app_url.strip().rstrip("/")
    sep = "&" if "?" in base else "?"
    return f"{base}{sep}{urlencode({'startapp': token})}"
