"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_image_model: str = "dall-e-3"
    image_size: str = "1024x1024"
    image_quality: str = "standard"
    stripe_secret_key: str
    stripe_webhook_secret: str | None = None
    printful_api_key: str
    printful_base_url: str = "https://api.printful.com"
    printful_store_id: str | None = None
    printful_variant_id: int = 10309
    admin_token: str
    product_name: str = "PICASO Custom Artwork Print"
    product_description_suffix: str = "12x12 Matte Canvas with Stretcher Bar"
    product_price_cents: int = 4999
    currency: str = "usd"
    public_base_url: str | None = None
    support_email: str = "picaso@terranova.com"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    request_timeout_seconds: float = 30.0
    idempotency_ttl_seconds: int = 86400
    cors_allow_origins: str = "*"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def outbox_enabled(self) -> bool:
        """Return true when Supabase credentials for the outbox are set."""
        return bool(self.supabase_url and self.supabase_service_key)


def parse_allowed_origins(raw: str | None) -> list[str]:
    """Parse CORS origins from env."""
    if raw is None:
        return ["*"]
    cleaned = raw.strip()
    if cleaned in {"", "*"}:
        return ["*"]
    origins: list[str] = []
    for chunk in cleaned.split(","):
        value = chunk.strip().rstrip("/")
        if value:
            origins.append(value)
    return origins or ["*"]
