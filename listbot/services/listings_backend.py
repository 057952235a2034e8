from __future__ import annotations

import logging
from urllib.parse import quote

from pydantic import ValidationError

from listbot.schemas.listing import ListingRecord
from listbot.services.http_client import HttpClient


log = logging.getLogger(__name__)


class BackendError(Exception):
    pass


class ListingNotFound(BackendError):
    pass


class MalformedListing(BackendError):
    pass


class ListingsBackend:
    """
    Read-only client for the listings backend REST API.

    GET {base}/rent-listings/{id}/ answers either the listing itself or
    `{"data": {...listing...}}`.
    """

    def __init__(self, *, http: HttpClient, base_url: str):
        self._http = http
        self._base_url = base_url.rstrip("/")

    def listing_url(self, listing_id: str) -> str:
        return f"{self._base_url}/rent-listings/{quote(str(listing_id), safe='')}/"

    async def get_listing(self, listing_id: str) -> ListingRecord:
        url = self.listing_url(listing_id)
        res = await self._http.get_json(url=url)

        if res.status_code == 404:
            raise ListingNotFound(f"listing {listing_id} not found")
        if not res.ok:
            raise BackendError(f"backend lookup for listing {listing_id} failed: {res.error_message}")

        payload = res.detail.get("data", res.detail)
        if not isinstance(payload, dict):
            raise MalformedListing(f"backend returned a non-object listing for {listing_id}")

        try:
            listing = ListingRecord.model_validate(payload)
        except ValidationError as e:
            raise MalformedListing(f"backend listing {listing_id} is invalid: {e.error_count()} error(s)") from e

        log.info("backend: fetched listing %s in %sms", listing_id, res.elapsed_ms)
        return listing
