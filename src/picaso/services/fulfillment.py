"""Fulfillment coordinator: turns completed payments into print orders."""

import logging
from dataclasses import dataclass, field, replace
from typing import Protocol

from picaso.domain.errors import ValidationError
from picaso.domain.orders import (
    INTENT_FULFILLED,
    INTENT_PENDING,
    TEST_RECIPIENT,
    CompletedSession,
    CustomerInfo,
    FulfillmentIntent,
    FulfillmentOrder,
    FulfillmentResult,
    PaymentNotification,
    Recipient,
    build_recipient,
    external_order_id,
)
from picaso.services.checkout import PaymentClient, order_metadata

CHECKOUT_COMPLETED = "checkout.session.completed"

_logger = logging.getLogger(__name__)


class FulfillmentClient(Protocol):
    """Interface for the print-on-demand provider."""

    async def upload_file(self, url: str) -> int | str:
        """Ingest a file by URL and return the provider file id."""

    async def create_order(
        self,
        *,
        recipient: Recipient,
        variant_id: int,
        file_id: int | str,
        external_id: str,
    ) -> dict[str, object]:
        """Create an order and return the provider order payload."""

    async def get_store(self) -> dict[str, object]:
        """Return store information for connectivity checks."""


class FulfillmentRepository(Protocol):
    """Persistence interface for the fulfillment outbox."""

    def get_intent(self, session_id: str) -> FulfillmentIntent | None:
        """Return the intent for a payment session, if present."""

    def claim_intent(self, intent: FulfillmentIntent) -> bool:
        """Atomically record a PENDING intent for its payment session.

        Returns True when no intent existed or the existing one had FAILED,
        False when another delivery already owns or completed the session.
        """

    def mark_fulfilled(self, session_id: str, order_id: str) -> None:
        """Record a successful print order."""

    def mark_failed(self, session_id: str, error: str) -> None:
        """Record a failed fulfillment attempt."""

    def list_intents(self, status: str | None, limit: int) -> list[FulfillmentIntent]:
        """Return recent intents, optionally filtered by status."""


@dataclass
class FulfillmentService:
    """Relays paid checkout sessions to the print provider."""

    payment_client: PaymentClient
    fulfillment_client: FulfillmentClient
    variant_id: int = 10309
    repository: FulfillmentRepository | None = None
    _in_flight: set[str] = field(default_factory=set, init=False, repr=False)

    async def on_payment_completed(
        self, notification: PaymentNotification
    ) -> FulfillmentResult | None:
        """Handle a payment notification.

        Never raises for fulfillment problems: the payment already went
        through, so the notification must still be acknowledged.
        """
        if notification.event_type != CHECKOUT_COMPLETED:
            _logger.info("Ignoring payment event type %s", notification.event_type)
            return None
        session = notification.session
        if session is None:
            _logger.error(
                "Completed event without a session",
                extra={"event_id": notification.event_id},
            )
            return None
        _logger.info("Payment completed for session: %s", session.session_id)
        try:
            metadata = order_metadata(session.metadata)
        except ValidationError:
            _logger.exception(
                "Session metadata missing, cannot fulfill",
                extra={"session_id": session.session_id},
            )
            return None

        if session.session_id in self._in_flight:
            _logger.info("Session %s is already being fulfilled", session.session_id)
            return None
        self._in_flight.add(session.session_id)
        try:
            return await self._fulfill(session, metadata)
        finally:
            self._in_flight.discard(session.session_id)

    async def resolve_customer(self, session: CompletedSession) -> CustomerInfo:
        """Merge shipping details, event customer details and the customer record."""
        shipping = session.shipping_details or CustomerInfo()
        details = session.customer_details or CustomerInfo()
        address_source = shipping if shipping.address1 else details
        name = shipping.name or details.name
        email = details.email
        if session.customer_id and not (name and email):
            record = await self._retrieve_customer(session.customer_id)
            if record is not None:
                name = name or record.name
                email = email or record.email
        return replace(address_source, name=name, email=email)

    async def create_fulfillment_order(
        self, order: FulfillmentOrder
    ) -> FulfillmentResult:
        """Upload the artwork, then create the print order."""
        _logger.info("Creating print order for: %s", order.prompt)
        file_id = await self.fulfillment_client.upload_file(order.image_url)
        _logger.info("Image uploaded, file id: %s", file_id)
        payload = await self.fulfillment_client.create_order(
            recipient=order.recipient,
            variant_id=self.variant_id,
            file_id=file_id,
            external_id=external_order_id(order.session_id),
        )
        return FulfillmentResult(
            order_id=payload["id"],  # type: ignore[arg-type]
            file_id=file_id,
            status=payload.get("status"),  # type: ignore[arg-type]
        )

    async def create_manual_order(self, session_id: str | None) -> FulfillmentResult:
        """Create a print order for a session id using test recipient data."""
        if not session_id:
            raise ValidationError("Session id is required")
        session = await self.payment_client.retrieve_session(session_id)
        metadata = order_metadata(session.metadata)
        order = FulfillmentOrder(
            session_id=session.session_id,
            image_url=metadata["image_url"],
            prompt=metadata["prompt"],
            recipient=TEST_RECIPIENT,
        )
        result = await self.create_fulfillment_order(order)
        _logger.info("Manual print order created: %s", result.order_id)
        return result

    def list_intents(
        self, status: str | None = None, limit: int = 50
    ) -> list[FulfillmentIntent]:
        """Return outbox entries, newest first."""
        if self.repository is None:
            return []
        return self.repository.list_intents(status, limit)

    async def retry_intent(self, session_id: str) -> FulfillmentResult:
        """Re-run a recorded fulfillment that has not completed."""
        if self.repository is None:
            raise ValidationError("Fulfillment outbox is not configured")
        intent = self.repository.get_intent(session_id)
        if intent is None:
            raise ValidationError(f"No fulfillment recorded for {session_id}")
        if intent.status == INTENT_FULFILLED:
            raise ValidationError(f"Session {session_id} is already fulfilled")
        if session_id in self._in_flight:
            raise ValidationError(f"Session {session_id} is already being fulfilled")
        order = FulfillmentOrder(
            session_id=intent.session_id,
            image_url=intent.image_url,
            prompt=intent.prompt,
            recipient=intent.recipient,
        )
        self._in_flight.add(session_id)
        try:
            result = await self.create_fulfillment_order(order)
        except Exception as exc:
            self._record_failure(session_id, exc)
            raise
        finally:
            self._in_flight.discard(session_id)
        self._record_success(session_id, result)
        return result

    async def _fulfill(
        self, session: CompletedSession, metadata: dict[str, str]
    ) -> FulfillmentResult | None:
        customer = await self.resolve_customer(session)
        order = FulfillmentOrder(
            session_id=session.session_id,
            image_url=metadata["image_url"],
            prompt=metadata["prompt"],
            recipient=build_recipient(customer),
        )
        if not self._claim(order):
            _logger.info(
                "Session %s already claimed by another delivery", session.session_id
            )
            return None
        try:
            result = await self.create_fulfillment_order(order)
        except Exception as exc:
            _logger.exception(
                "Failed to create print order",
                extra={"session_id": session.session_id},
            )
            self._record_failure(session.session_id, exc)
            return None
        _logger.info("Print order created successfully: %s", result.order_id)
        self._record_success(session.session_id, result)
        return result

    async def _retrieve_customer(self, customer_id: str) -> CustomerInfo | None:
        try:
            return await self.payment_client.retrieve_customer(customer_id)
        except Exception:
            _logger.exception(
                "Failed to retrieve customer", extra={"customer_id": customer_id}
            )
            return None

    def _claim(self, order: FulfillmentOrder) -> bool:
        if self.repository is None:
            return True
        try:
            return self.repository.claim_intent(
                FulfillmentIntent(
                    session_id=order.session_id,
                    image_url=order.image_url,
                    prompt=order.prompt,
                    recipient=order.recipient,
                    status=INTENT_PENDING,
                )
            )
        except Exception:
            _logger.exception(
                "Failed to record fulfillment intent",
                extra={"session_id": order.session_id},
            )
            return True

    def _record_success(self, session_id: str, result: FulfillmentResult) -> None:
        if self.repository is None:
            return
        try:
            self.repository.mark_fulfilled(session_id, str(result.order_id))
        except Exception:
            _logger.exception(
                "Failed to mark intent fulfilled", extra={"session_id": session_id}
            )

    def _record_failure(self, session_id: str, exc: Exception) -> None:
        if self.repository is None:
            return
        try:
            self.repository.mark_failed(session_id, f"{type(exc).__name__}: {exc}")
        except Exception:
            _logger.exception(
                "Failed to mark intent failed", extra={"session_id": session_id}
            )
