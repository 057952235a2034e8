from pathlib import Path
from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


ENV_PATH = Path(__file__).resolve().parents[2] / ".env"

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=ENV_PATH, env_file_encoding="utf-8", extra="ignore", frozen=True)

    # App
    env: str = "dev"
    service_name: str = "listbot"
    log_level: str = "INFO"

    # Telegram
    telegram_bot_token: SecretStr = SecretStr("")
    telegram_channel_id: str = ""
    telegram_api_base: str = "https://api.telegram.org"
    telegram_webhook_secret: SecretStr = SecretStr("")

    # Listings backend (may end with /api)
    backend_api_url: str = "http://localhost:8000/api"

    # Mini app entry point for deep links
    mini_app_url: str = "https://mela-homes.vercel.app"

    # Outbound HTTP
    http_timeout_seconds: float = 10.0

    # Telemetry
    telemetry_enabled: bool = False
    otlp_endpoint: str = "http://localhost:4318"  # Jaeger OTLP HTTP

    @property
    def telegram_configured(self) -> bool:
        return bool(self.telegram_bot_token.get_secret_value() and self.telegram_channel_id)


settings = Settings()
