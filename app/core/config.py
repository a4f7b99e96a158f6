# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    APP_NAME: str = "Storefront Support API"
    APP_DESC: str = "Collects support tickets and forwards them to a human"
    APP_VERSION: str = "1.0.0"

    HOST: str = "0.0.0.0"
    PORT: int = Field(default=8000)
    LOG_LEVEL: str = "INFO"

    # CORS origins, comma separated
    CORS_ORIGINS: str | None = "*"

    MAX_BODY_BYTES: int = 1_000_000
    DEBUG_TICKETS_LIMIT: int = 50
    ENABLE_DEBUG_ROUTES: bool = True
    PROVIDER_TIMEOUT_SECONDS: float = 10.0

    # Resend (email)
    RESEND_API_URL: str = "https://api.resend.com/emails"
    RESEND_API_KEY: str | None = None
    RESEND_FROM: str | None = None
    SUPPORT_EMAIL_TO: str | None = None

    # Interakt (WhatsApp)
    INTERAKT_API_URL: str | None = None
    INTERAKT_API_KEY: str | None = None
    INTERAKT_SENDER_ID: str | None = None
    INTERAKT_TEMPLATE_NAME: str = "support_alert"
    INTERAKT_LANGUAGE_CODE: str = "en"
    INTERAKT_DEFAULT_COUNTRY_CODE: str = "+91"
    SUPPORT_WHATSAPP_TO: str | None = None

    # Pydantic v2 style config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def cors_origin_list(self) -> list[str]:
        if not self.CORS_ORIGINS:
            return []
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def email_configured(self) -> bool:
        return bool(self.RESEND_API_KEY and self.RESEND_FROM)

    @property
    def whatsapp_configured(self) -> bool:
        return bool(self.INTERAKT_API_URL and self.INTERAKT_API_KEY)


@lru_cache
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
