from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from listbot.api.deps import Services, build_services
from listbot.core.config import Settings
from listbot.destinations.telegram.types import ApiErr, ApiOk
from listbot.services.listings_backend import BackendError


TEST_MESSAGE = "🧪 Test message from Mela Homes\n\nIf you see this, the integration is working!"


async def cmd_check(services: Services, *, send_test: bool) -> int:
    s = services.settings
    print("1. Environment Variables:")
    print(f"   TELEGRAM_BOT_TOKEN: {'set' if s.telegram_bot_token.get_secret_value() else 'NOT SET'}")
    print(f"   TELEGRAM_CHANNEL_ID: {s.telegram_channel_id or 'NOT SET'}")
    if not s.telegram_bot_token.get_secret_value():
        print("Missing TELEGRAM_BOT_TOKEN", file=sys.stderr)
        return 2

    print("2. Testing Bot Token...")
    me = await services.telegram.get_me()
    if isinstance(me, ApiErr):
        print(f"   Bot token is invalid: {me.description}", file=sys.stderr)
        return 1
    bot = me.result if isinstance(me.result, dict) else {}
    print(f"   Bot: @{bot.get('username')} (id {bot.get('id')})")

    if not send_test:
        return 0
    if not s.telegram_channel_id:
        print("Missing TELEGRAM_CHANNEL_ID", file=sys.stderr)
        return 2

    print("3. Testing Channel Access...")
    res = await services.telegram.send_message(chat_id=s.telegram_channel_id, text=TEST_MESSAGE, parse_mode="HTML")
    if isinstance(res, ApiErr):
        print(f"   Could not post to channel: {res.description}", file=sys.stderr)
        print("   Make sure the bot is an administrator of the channel.", file=sys.stderr)
        return 1
    print("   Successfully posted to channel!")
    return 0


async def cmd_set_webhook(services: Services, *, url: str) -> int:
    secret = services.settings.telegram_webhook_secret.get_secret_value() or None
    res = await services.telegram.set_webhook(url, secret_token=secret)
    if isinstance(res, ApiOk):
        print(f"Webhook set to {url}")
        return 0
    print(f"setWebhook failed: {res.description}", file=sys.stderr)
    return 1


async def cmd_repost(services: Services, *, listing_id: str) -> int:
    try:
        listing = await services.backend.get_listing(listing_id)
    except BackendError as e:
        print(f"Failed to fetch listing: {e}", file=sys.stderr)
        return 1

    result = await services.connector.publish_listing(listing)
    print(json.dumps({"status": result.status, "messageId": result.message_id, "error": result.error}, indent=2))
    return 0 if result.success else 1


async def _run(args: argparse.Namespace) -> int:
    services = build_services(Settings())
    try:
        if args.command == "check":
            return await cmd_check(services, send_test=args.send_test)
        if args.command == "set-webhook":
            return await cmd_set_webhook(services, url=args.url)
        if args.command == "repost":
            return await cmd_repost(services, listing_id=args.listing_id)
    finally:
        await services.aclose()
    print(f"Unknown command: {args.command}", file=sys.stderr)
    return 2


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Telegram channel integration ops.")
    sub = p.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="verify bot token (and channel access with --send-test)")
    check.add_argument("--send-test", action="store_true", help="post a test message to the channel")

    hook = sub.add_parser("set-webhook", help="register the webhook url with Telegram")
    hook.add_argument("--url", required=True, help="public https url of /v1/telegram/webhook")

    repost = sub.add_parser("repost", help="fetch a listing from the backend and post it to the channel")
    repost.add_argument("listing_id")

    args = p.parse_args(argv)
    logging.basicConfig(level=logging.INFO)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
