from __future__ import annotations

from dataclasses import dataclass

import httpx
from fastapi import Depends, Header, HTTPException, Request

from listbot.core.config import Settings
from listbot.destinations.telegram.client import TelegramBotClient
from listbot.destinations.telegram.connector import TelegramChannelConnector
from listbot.services.callback_handler import CallbackHandler
from listbot.services.http_client import HttpClient
from listbot.services.listings_backend import ListingsBackend


@dataclass(frozen=True)
class Services:
    """Everything request handlers need, built once per process from Settings."""
    settings: Settings
    http: HttpClient
    telegram: TelegramBotClient
    backend: ListingsBackend
    connector: TelegramChannelConnector
    callbacks: CallbackHandler

    async def aclose(self) -> None:
        await self.http.aclose()


def build_services(settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None) -> Services:
    token = settings.telegram_bot_token.get_secret_value()
    http = HttpClient(
        timeout_seconds=settings.http_timeout_seconds,
        redact=token,
        transport=transport,
    )
    telegram = TelegramBotClient(http=http, bot_token=token, api_base=settings.telegram_api_base)
    backend = ListingsBackend(http=http, base_url=settings.backend_api_url)
    return Services(
        settings=settings,
        http=http,
        telegram=telegram,
        backend=backend,
        connector=TelegramChannelConnector(settings=settings, client=telegram),
        callbacks=CallbackHandler(client=telegram, backend=backend),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_settings(services: Services = Depends(get_services)) -> Settings:
    return services.settings


def get_channel_connector(services: Services = Depends(get_services)) -> TelegramChannelConnector:
    return services.connector


def get_callback_handler(services: Services = Depends(get_services)) -> CallbackHandler:
    return services.callbacks


async def require_webhook_secret(
    x_telegram_bot_api_secret_token: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    expected = settings.telegram_webhook_secret.get_secret_value()
    if not expected:
        return
    if x_telegram_bot_api_secret_token != expected:
        raise HTTPException(status_code=403, detail="Invalid webhook secret")
