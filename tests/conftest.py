"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field

import pytest

from picaso.config import Settings
from picaso.containers import AppContainer
from picaso.domain.errors import UpstreamGenericFailure
from picaso.domain.orders import (
    INTENT_FAILED,
    INTENT_FULFILLED,
    CustomerInfo,
    FulfillmentIntent,
    LineItem,
    PaymentSession,
    Recipient,
)
from picaso.services.checkout import CheckoutService, PaymentClient
from picaso.services.fulfillment import (
    FulfillmentClient,
    FulfillmentRepository,
    FulfillmentService,
)
from picaso.services.generation import GenerationService, ImageClient
from picaso.services.idempotency import IdempotencyService, InMemoryResponseCache


@dataclass
class FakeImageClient(ImageClient):
    """Fake image client that records prompts."""

    image_url: str = "https://images.test/generated.png"
    error: Exception | None = None
    calls: list[dict[str, str]] = field(default_factory=list)

    async def generate(
        self, *, model: str, prompt: str, size: str, quality: str
    ) -> str:
        self.calls.append(
            {"model": model, "prompt": prompt, "size": size, "quality": quality}
        )
        if self.error is not None:
            raise self.error
        return self.image_url


@dataclass
class FakePaymentClient(PaymentClient):
    """In-memory payment provider keeping sessions by id."""

    sessions: dict[str, PaymentSession] = field(default_factory=dict)
    customers: dict[str, CustomerInfo] = field(default_factory=dict)
    created: list[dict[str, object]] = field(default_factory=list)
    customer_lookups: list[str] = field(default_factory=list)
    error: Exception | None = None

    async def create_checkout_session(  # noqa: PLR0913
        self,
        *,
        line_item: LineItem,
        metadata: dict[str, str],
        success_url: str,
        cancel_url: str,
        idempotency_key: str | None = None,
    ) -> PaymentSession:
        if self.error is not None:
            raise self.error
        session_id = f"cs_test_{len(self.sessions) + 1}"
        self.created.append(
            {
                "line_item": line_item,
                "metadata": metadata,
                "success_url": success_url,
                "cancel_url": cancel_url,
                "idempotency_key": idempotency_key,
            }
        )
        session = PaymentSession(
            session_id=session_id,
            url=f"https://checkout.test/pay/{session_id}",
            metadata=dict(metadata),
        )
        self.sessions[session_id] = session
        return session

    async def retrieve_session(self, session_id: str) -> PaymentSession:
        session = self.sessions.get(session_id)
        if session is None:
            raise UpstreamGenericFailure(f"No such checkout.session: {session_id}")
        return session

    async def retrieve_customer(self, customer_id: str) -> CustomerInfo | None:
        self.customer_lookups.append(customer_id)
        return self.customers.get(customer_id)


@dataclass
class FakeFulfillmentClient(FulfillmentClient):
    """Fake print provider that records calls in order."""

    calls: list[str] = field(default_factory=list)
    orders: list[dict[str, object]] = field(default_factory=list)
    upload_error: Exception | None = None
    order_error: Exception | None = None
    upload_delay: float = 0

    async def upload_file(self, url: str) -> int | str:
        self.calls.append("upload")
        if self.upload_delay:
            await asyncio.sleep(self.upload_delay)
        if self.upload_error is not None:
            raise self.upload_error
        return 555

    async def create_order(
        self,
        *,
        recipient: Recipient,
        variant_id: int,
        file_id: int | str,
        external_id: str,
    ) -> dict[str, object]:
        self.calls.append("order")
        if self.order_error is not None:
            raise self.order_error
        self.orders.append(
            {
                "recipient": recipient,
                "variant_id": variant_id,
                "file_id": file_id,
                "external_id": external_id,
            }
        )
        return {"id": 9001, "status": "draft"}

    async def get_store(self) -> dict[str, object]:
        return {"id": 1, "name": "PICASO Test Store"}


@dataclass
class InMemoryFulfillmentRepository(FulfillmentRepository):
    """In-memory fulfillment outbox for tests."""

    intents: dict[str, FulfillmentIntent] = field(default_factory=dict)

    def get_intent(self, session_id: str) -> FulfillmentIntent | None:
        return self.intents.get(session_id)

    def save_intent(self, intent: FulfillmentIntent) -> None:
        self.intents[intent.session_id] = intent

    def claim_intent(self, intent: FulfillmentIntent) -> bool:
        existing = self.intents.get(intent.session_id)
        if existing is not None and existing.status != INTENT_FAILED:
            return False
        self.intents[intent.session_id] = intent
        return True

    def mark_fulfilled(self, session_id: str, order_id: str) -> None:
        current = self.intents[session_id]
        self.intents[session_id] = FulfillmentIntent(
            session_id=current.session_id,
            image_url=current.image_url,
            prompt=current.prompt,
            recipient=current.recipient,
            status=INTENT_FULFILLED,
            order_id=order_id,
        )

    def mark_failed(self, session_id: str, error: str) -> None:
        current = self.intents[session_id]
        self.intents[session_id] = FulfillmentIntent(
            session_id=current.session_id,
            image_url=current.image_url,
            prompt=current.prompt,
            recipient=current.recipient,
            status=INTENT_FAILED,
            error=error,
        )

    def list_intents(self, status: str | None, limit: int) -> list[FulfillmentIntent]:
        intents = [
            intent
            for intent in self.intents.values()
            if status is None or intent.status == status
        ]
        return intents[:limit]


def first_modifier(modifiers) -> str:  # type: ignore[no-untyped-def]
    """Deterministic modifier selector."""
    return modifiers[0]


def completed_event(
    session_id: str = "cs_test_paid",
    metadata: dict[str, str] | None = None,
    **session_fields: object,
) -> dict[str, object]:
    """Build a checkout.session.completed webhook payload."""
    session: dict[str, object] = {
        "id": session_id,
        "object": "checkout.session",
        "metadata": (
            metadata
            if metadata is not None
            else {"prompt": "a red fox in snow", "imageUrl": "https://x/img.png"}
        ),
        "customer": None,
        "customer_details": None,
    }
    session.update(session_fields)
    return {
        "id": "evt_test_1",
        "object": "event",
        "type": "checkout.session.completed",
        "data": {"object": session},
    }


@pytest.fixture
def settings() -> Settings:
    return Settings(
        openai_api_key="openai-key",
        stripe_secret_key="sk_test_key",
        printful_api_key="printful-key",
        admin_token="admin-token",
        public_base_url="https://shop.test",
    )


@pytest.fixture
def image_client() -> FakeImageClient:
    return FakeImageClient()


@pytest.fixture
def payment_client() -> FakePaymentClient:
    return FakePaymentClient()


@pytest.fixture
def fulfillment_client() -> FakeFulfillmentClient:
    return FakeFulfillmentClient()


@pytest.fixture
def fulfillment_repository() -> InMemoryFulfillmentRepository:
    return InMemoryFulfillmentRepository()


@pytest.fixture
def container(
    settings: Settings,
    image_client: FakeImageClient,
    payment_client: FakePaymentClient,
    fulfillment_client: FakeFulfillmentClient,
    fulfillment_repository: InMemoryFulfillmentRepository,
) -> AppContainer:
    generation_service = GenerationService(
        client=image_client,
        model=settings.openai_image_model,
        size=settings.image_size,
        quality=settings.image_quality,
        choose_modifier=first_modifier,
    )
    checkout_service = CheckoutService(
        client=payment_client,
        product_name=settings.product_name,
        description_suffix=settings.product_description_suffix,
        unit_amount=settings.product_price_cents,
        currency=settings.currency,
    )
    fulfillment_service = FulfillmentService(
        payment_client=payment_client,
        fulfillment_client=fulfillment_client,
        variant_id=settings.printful_variant_id,
        repository=fulfillment_repository,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        generation_service=generation_service,
        checkout_service=checkout_service,
        fulfillment_service=fulfillment_service,
        idempotency_service=IdempotencyService(InMemoryResponseCache()),
        close_resources=close_resources,
    )
