"""Checkout coordinator and session recovery."""

import logging
from dataclasses import dataclass
from typing import Protocol

from picaso.domain.errors import (
    StorefrontError,
    UpstreamGenericFailure,
    ValidationError,
)
from picaso.domain.orders import (
    CheckoutSession,
    CustomerInfo,
    LineItem,
    OrderConfirmation,
    PaymentSession,
)

METADATA_PROMPT = "prompt"
METADATA_IMAGE_URL = "imageUrl"
SESSION_ID_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"

_logger = logging.getLogger(__name__)


class PaymentClient(Protocol):
    """Interface for the hosted payment provider."""

    async def create_checkout_session(  # noqa: PLR0913
        self,
        *,
        line_item: LineItem,
        metadata: dict[str, str],
        success_url: str,
        cancel_url: str,
        idempotency_key: str | None = None,
    ) -> PaymentSession:
        """Create a hosted checkout session in payment mode."""

    async def retrieve_session(self, session_id: str) -> PaymentSession:
        """Fetch a checkout session by id."""

    async def retrieve_customer(self, customer_id: str) -> CustomerInfo | None:
        """Fetch customer contact details by id."""


@dataclass
class CheckoutService:
    """Creates payment sessions that carry the image and prompt as metadata."""

    client: PaymentClient
    product_name: str = "PICASO Custom Artwork Print"
    description_suffix: str = "12x12 Matte Canvas with Stretcher Bar"
    unit_amount: int = 4999
    currency: str = "usd"

    async def create_checkout_session(
        self,
        image_url: str | None,
        prompt: str | None,
        *,
        base_url: str,
        idempotency_key: str | None = None,
    ) -> CheckoutSession:
        """Create a hosted checkout session for one canvas print."""
        if not image_url or not image_url.strip():
            raise ValidationError("Image URL is required")
        if not prompt or not prompt.strip():
            raise ValidationError("Prompt is required")
        _logger.info("Creating checkout session for: %s", prompt)
        root = base_url.rstrip("/")
        line_item = LineItem(
            name=self.product_name,
            description=f'"{prompt}" - {self.description_suffix}',
            unit_amount=self.unit_amount,
            currency=self.currency,
            image_url=image_url,
        )
        try:
            session = await self.client.create_checkout_session(
                line_item=line_item,
                metadata={METADATA_PROMPT: prompt, METADATA_IMAGE_URL: image_url},
                success_url=f"{root}/success?session_id={SESSION_ID_PLACEHOLDER}",
                cancel_url=f"{root}/",
                idempotency_key=idempotency_key,
            )
        except StorefrontError as exc:
            _logger.warning("Checkout session creation failed: %s", exc)
            raise exc.with_message("Failed to create checkout session") from exc
        except Exception as exc:
            _logger.exception("Checkout session creation failed")
            raise UpstreamGenericFailure("Failed to create checkout session") from exc
        if not session.url:
            raise UpstreamGenericFailure("Failed to create checkout session")
        return CheckoutSession(
            session_id=session.session_id,
            image_url=image_url,
            prompt=prompt,
            redirect_url=session.url,
        )

    async def get_order_confirmation(self, session_id: str | None) -> OrderConfirmation:
        """Recover the prompt and image for a paid session."""
        if not session_id:
            raise ValidationError("Session id is required")
        session = await self.client.retrieve_session(session_id)
        return OrderConfirmation(
            session_id=session.session_id,
            **order_metadata(session.metadata),
        )


def order_metadata(metadata: dict[str, str] | None) -> dict[str, str]:
    """Extract prompt and image_url from session metadata."""
    metadata = metadata or {}
    prompt = metadata.get(METADATA_PROMPT)
    image_url = metadata.get(METADATA_IMAGE_URL)
    if not prompt or not image_url:
        raise ValidationError("Session metadata is missing the prompt or image URL")
    return {"prompt": prompt, "image_url": image_url}
