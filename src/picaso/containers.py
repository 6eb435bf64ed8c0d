"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from picaso.adapters.openai_image_client import OpenAIImageClient
from picaso.adapters.printful_client import HttpxPrintfulClient
from picaso.adapters.stripe_payment_client import StripePaymentClient
from picaso.adapters.supabase_fulfillment_repository import (
    SupabaseFulfillmentRepository,
)
from picaso.config import Settings
from picaso.services.checkout import CheckoutService
from picaso.services.fulfillment import FulfillmentRepository, FulfillmentService
from picaso.services.generation import GenerationService
from picaso.services.idempotency import IdempotencyService, InMemoryResponseCache


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    generation_service: GenerationService
    checkout_service: CheckoutService
    fulfillment_service: FulfillmentService
    idempotency_service: IdempotencyService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    timeout = resolved_settings.request_timeout_seconds
    image_client = OpenAIImageClient.create(resolved_settings.openai_api_key, timeout)
    payment_client = StripePaymentClient.create(
        resolved_settings.stripe_secret_key, timeout
    )
    printful_client = HttpxPrintfulClient.create(
        api_key=resolved_settings.printful_api_key,
        base_url=resolved_settings.printful_base_url,
        store_id=resolved_settings.printful_store_id,
        timeout_seconds=timeout,
    )
    repository: FulfillmentRepository | None = None
    if resolved_settings.outbox_enabled:
        supabase_client = create_client(
            resolved_settings.supabase_url, resolved_settings.supabase_service_key
        )
        repository = SupabaseFulfillmentRepository(supabase_client)

    generation_service = GenerationService(
        client=image_client,
        model=resolved_settings.openai_image_model,
        size=resolved_settings.image_size,
        quality=resolved_settings.image_quality,
    )
    checkout_service = CheckoutService(
        client=payment_client,
        product_name=resolved_settings.product_name,
        description_suffix=resolved_settings.product_description_suffix,
        unit_amount=resolved_settings.product_price_cents,
        currency=resolved_settings.currency,
    )
    fulfillment_service = FulfillmentService(
        payment_client=payment_client,
        fulfillment_client=printful_client,
        variant_id=resolved_settings.printful_variant_id,
        repository=repository,
    )
    idempotency_service = IdempotencyService(
        InMemoryResponseCache(ttl_seconds=resolved_settings.idempotency_ttl_seconds)
    )

    async def close_resources() -> None:
        await image_client.close()
        await printful_client.close()

    return AppContainer(
        settings=resolved_settings,
        generation_service=generation_service,
        checkout_service=checkout_service,
        fulfillment_service=fulfillment_service,
        idempotency_service=idempotency_service,
        close_resources=close_resources,
    )
