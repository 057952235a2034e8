import httpx
import pytest

from listbot.services.listings_backend import BackendError, ListingNotFound, MalformedListing


@pytest.mark.asyncio
async def test_get_listing_unwraps_data_envelope(services, upstream, listing_payload):
    upstream.listings["42"] = {"success": True, "data": listing_payload}

    listing = await services.backend.get_listing("42")

    assert listing.listing_id == "42"
    assert listing.phone_number == "+251911000000"
    assert listing.monthly_rent == "1500"


@pytest.mark.asyncio
async def test_get_listing_accepts_bare_body_and_ignores_extra_fields(services, upstream, listing_payload):
    upstream.listings["7"] = {**listing_payload, "id": 7, "owner": {"id": 1}, "created_at": "2024-01-01"}
    listing = await services.backend.get_listing("7")
    assert listing.id == 7


@pytest.mark.asyncio
async def test_not_found(services):
    with pytest.raises(ListingNotFound):
        await services.backend.get_listing("404")


@pytest.mark.asyncio
async def test_malformed(services, upstream):
    upstream.listings["1"] = {"data": ["not", "a", "listing"]}
    with pytest.raises(MalformedListing):
        await services.backend.get_listing("1")


@pytest.mark.asyncio
async def test_transport_error(services, upstream):
    upstream.backend_error = httpx.ConnectError("connection refused")
    with pytest.raises(BackendError):
        await services.backend.get_listing("1")


@pytest.mark.asyncio
async def test_listing_url_escapes_id(services):
    assert services.backend.listing_url("a/b") == "https://backend.example.com/api/rent-listings/a%2Fb/"
