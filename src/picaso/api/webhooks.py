"""Stripe webhook verification and conversion into domain notifications."""

import stripe
from pydantic import ValidationError as PydanticValidationError

from picaso.api.stripe_models import (
    StripeAddress,
    StripeCheckoutSession,
    StripeEvent,
)
from picaso.domain.errors import NotificationParseError
from picaso.domain.orders import CompletedSession, CustomerInfo, PaymentNotification
from picaso.services.fulfillment import CHECKOUT_COMPLETED

_SESSION_OBJECT = "checkout.session"


def parse_stripe_event(
    payload: bytes, signature: str | None, secret: str | None
) -> PaymentNotification:
    """Verify (when a secret is configured) and parse a webhook body."""
    if secret:
        try:
            stripe.WebhookSignature.verify_header(
                payload.decode("utf-8"), signature or "", secret
            )
        except (stripe.SignatureVerificationError, UnicodeDecodeError) as exc:
            raise NotificationParseError(f"Webhook Error: {exc}") from exc
    try:
        event = StripeEvent.model_validate_json(payload)
    except PydanticValidationError as exc:
        raise NotificationParseError(f"Webhook Error: {exc}") from exc

    session = None
    if (
        event.type == CHECKOUT_COMPLETED
        or event.data.object.get("object") == _SESSION_OBJECT
    ):
        try:
            raw = StripeCheckoutSession.model_validate(event.data.object)
        except PydanticValidationError as exc:
            raise NotificationParseError(f"Webhook Error: {exc}") from exc
        session = _to_completed_session(raw)
    return PaymentNotification(
        event_id=event.id, event_type=event.type, session=session
    )


def _to_completed_session(raw: StripeCheckoutSession) -> CompletedSession:
    customer_details = None
    if raw.customer_details is not None:
        customer_details = _customer_info(
            raw.customer_details.name,
            raw.customer_details.email,
            raw.customer_details.address,
        )
    shipping = raw.shipping_details
    if raw.collected_information is not None:
        shipping = raw.collected_information.shipping_details or shipping
    shipping_details = None
    if shipping is not None:
        shipping_details = _customer_info(shipping.name, None, shipping.address)
    return CompletedSession(
        session_id=raw.id,
        metadata=raw.metadata,
        customer_id=raw.customer,
        customer_details=customer_details,
        shipping_details=shipping_details,
    )


def _customer_info(
    name: str | None, email: str | None, address: StripeAddress | None
) -> CustomerInfo:
    address = address or StripeAddress()
    return CustomerInfo(
        name=name,
        email=email,
        address1=address.line1,
        address2=address.line2,
        city=address.city,
        state=address.state,
        country=address.country,
        zip=address.postal_code,
    )
