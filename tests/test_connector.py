import httpx
import pytest

from listbot.api.deps import build_services
from listbot.destinations.telegram.projection import MEDIA_GROUP_FOLLOWUP_TEXT, build_listing_keyboard
from listbot.schemas.listing import ListingRecord

from conftest import CHANNEL_ID, make_settings


def _kb():
    return build_listing_keyboard(42, "+251911000000", mini_app_url="https://app.example.com")


@pytest.mark.asyncio
async def test_no_photos_sends_one_text_message(services, upstream):
    kb = _kb()
    result = await services.connector.send_to_channel("<b>hello</b>", [], kb)

    assert result.success and result.status == "sent"
    assert result.message_id == 101
    assert upstream.methods() == ["sendMessage"]
    body = upstream.bodies("sendMessage")[0]
    assert body["chat_id"] == CHANNEL_ID
    assert body["text"] == "<b>hello</b>"
    assert body["parse_mode"] == "HTML"
    assert body["reply_markup"] == kb.model_dump(exclude_none=True)


@pytest.mark.asyncio
async def test_only_invalid_photos_falls_back_to_text(services, upstream):
    result = await services.connector.send_to_channel("t", ["data:image/png;base64,AAAA", "http://localhost/a.jpg"], _kb())

    assert result.success
    assert upstream.methods() == ["sendMessage"]


@pytest.mark.asyncio
async def test_one_photo_sends_photo_with_keyboard(services, upstream):
    kb = _kb()
    result = await services.connector.send_to_channel("caption", ["https://example.com/a.jpg"], kb)

    assert result.success
    assert upstream.methods() == ["sendPhoto"]
    assert upstream.bodies("sendPhoto")[0] == {
        "chat_id": CHANNEL_ID,
        "photo": "https://example.com/a.jpg",
        "caption": "caption",
        "parse_mode": "HTML",
        "reply_markup": kb.model_dump(exclude_none=True),
    }


@pytest.mark.asyncio
async def test_many_photos_send_media_group_then_keyboard(services, upstream):
    photos = [f"https://example.com/{i}.jpg" for i in range(12)]
    kb = _kb()
    result = await services.connector.send_to_channel("caption", photos, kb)

    assert result.success
    assert upstream.methods() == ["sendMediaGroup", "sendMessage"]

    media = upstream.bodies("sendMediaGroup")[0]["media"]
    assert len(media) == 10
    assert [m["media"] for m in media] == photos[:10]
    assert media[0]["caption"] == "caption" and media[0]["parse_mode"] == "HTML"
    assert all("caption" not in m for m in media[1:])

    followup = upstream.bodies("sendMessage")[0]
    assert followup["text"] == MEDIA_GROUP_FOLLOWUP_TEXT
    assert followup["reply_markup"] == kb.model_dump(exclude_none=True)

    # id of the first message in the group
    assert result.message_id == 101


@pytest.mark.asyncio
async def test_media_group_without_keyboard_has_no_followup(services, upstream):
    result = await services.connector.send_to_channel("c", ["https://example.com/a.jpg", "https://example.com/b.jpg"], None)

    assert result.success
    assert upstream.methods() == ["sendMediaGroup"]


@pytest.mark.asyncio
async def test_failed_followup_does_not_fail_the_post(services, upstream):
    upstream.responses["sendMessage"] = {"ok": False, "error_code": 400, "description": "Bad Request"}
    result = await services.connector.send_to_channel("c", ["https://example.com/a.jpg", "https://example.com/b.jpg"], _kb())

    assert result.success
    assert upstream.methods() == ["sendMediaGroup", "sendMessage"]


@pytest.mark.asyncio
async def test_failed_media_group_skips_followup(services, upstream):
    upstream.responses["sendMediaGroup"] = {"ok": False, "error_code": 400, "description": "Bad Request: wrong file identifier"}
    result = await services.connector.send_to_channel("c", ["https://example.com/a.jpg", "https://example.com/b.jpg"], _kb())

    assert result.status == "failed"
    assert result.error == "Bad Request: wrong file identifier"
    assert upstream.methods() == ["sendMediaGroup"]


@pytest.mark.asyncio
async def test_api_error_becomes_failed_result(services, upstream):
    upstream.responses["sendPhoto"] = {"ok": False, "error_code": 400, "description": "Bad Request: failed to get HTTP URL content"}
    result = await services.connector.send_to_channel("c", ["https://example.com/a.jpg"], None)

    assert not result.success
    assert result.status == "failed"
    assert result.error == "Bad Request: failed to get HTTP URL content"


@pytest.mark.asyncio
async def test_transport_error_becomes_failed_result(services, upstream):
    upstream.responses["sendMessage"] = httpx.ReadTimeout("timed out")
    result = await services.connector.send_to_channel("c", [], None)

    assert result.status == "failed"
    assert result.error == "timed out"


@pytest.mark.asyncio
async def test_unconfigured_connector_skips_without_calls(upstream):
    svc = build_services(make_settings(telegram_channel_id=""), transport=httpx.MockTransport(upstream.handler))
    try:
        result = await svc.connector.send_to_channel("c", ["https://example.com/a.jpg"], _kb())
        listing_result = await svc.connector.publish_listing(
            ListingRecord.model_validate({"description": "d", "location": "l", "monthly_rent": "1"})
        )
    finally:
        await svc.aclose()

    assert result.skipped and not result.success
    assert listing_result.skipped
    assert upstream.calls == []


@pytest.mark.asyncio
async def test_publish_listing_scenario_with_mixed_photos(services, upstream, listing_payload):
    listing_payload["photos"] = [
        "data:image/png;base64,iVBORw0KGgo=",
        "https://example.com/a.jpg",
        "https://example.com/b.jpg",
    ]
    result = await services.connector.publish_listing(ListingRecord.model_validate(listing_payload))

    assert result.success
    assert upstream.methods() == ["sendMediaGroup", "sendMessage"]
    media = upstream.bodies("sendMediaGroup")[0]["media"]
    assert [m["media"] for m in media] == ["https://example.com/a.jpg", "https://example.com/b.jpg"]
    assert "Nice flat" in media[0]["caption"]

    keyboard = upstream.bodies("sendMessage")[0]["reply_markup"]["inline_keyboard"]
    assert keyboard[0][0]["callback_data"] == "contact-42"


@pytest.mark.asyncio
async def test_publish_listing_without_photos_is_single_text_post(services, upstream, listing_payload):
    result = await services.connector.publish_listing(ListingRecord.model_validate(listing_payload))

    assert result.success
    assert upstream.methods() == ["sendMessage"]
    text = upstream.bodies("sendMessage")[0]["text"]
    for expected in ("Nice flat", "Bole", "1,500", "(Negotiable)", "💧 water", "📡 internet"):
        assert expected in text
