"""Tests for container wiring and settings."""

import asyncio

from picaso.config import parse_allowed_origins
from picaso.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)
    assert container.generation_service is not None
    assert container.fulfillment_service.repository is None
    assert container.fulfillment_service.variant_id == 10309
    asyncio.run(container.close_resources())


def test_outbox_requires_supabase_credentials(settings) -> None:
    assert not settings.outbox_enabled
    settings.supabase_url = "https://db.supabase.test"
    assert not settings.outbox_enabled
    settings.supabase_service_key = "service-key"
    assert settings.outbox_enabled


def test_parse_allowed_origins() -> None:
    assert parse_allowed_origins(None) == ["*"]
    assert parse_allowed_origins(" * ") == ["*"]
    assert parse_allowed_origins("https://a.test/, https://b.test") == [
        "https://a.test",
        "https://b.test",
    ]
