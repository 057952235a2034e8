import pytest

from listbot.destinations.telegram.deeplinks import (
    DeepLinkToken,
    InvalidListingId,
    contact_token,
    listing_token,
    mini_app_link,
    parse_token,
)


def test_tokens_for_numeric_and_slug_ids():
    assert listing_token(42) == "listing-42"
    assert contact_token("abc_DEF-9") == "contact-abc_DEF-9"


@pytest.mark.parametrize("bad", ["", None, "4 2", "42?x=1", "../42", "ñ", "x" * 60])
def test_invalid_ids_are_rejected(bad):
    with pytest.raises(InvalidListingId):
        contact_token(bad)


def test_parse_token_round_trip():
    assert parse_token("contact-42") == DeepLinkToken(kind="contact", listing_id="42")
    assert parse_token("listing-7") == DeepLinkToken(kind="listing", listing_id="7")
    assert parse_token("create-listing") == DeepLinkToken(kind="create-listing")
    assert str(parse_token("listing-7")) == "listing-7"


@pytest.mark.parametrize("raw", [None, "", "foo", "contact-", "contact_42", "listing-4 2"])
def test_parse_token_unrecognized(raw):
    assert parse_token(raw) is None


def test_mini_app_link():
    assert mini_app_link("https://t.me/mela_bot/app/", "listing-1") == "https://t.me/mela_bot/app?startapp=listing-1"
    assert mini_app_link("https://app.example.com/?mode=compact", "create-listing") == (
        "https://app.example.com/?mode=compact&startapp=create-listing"
    )
