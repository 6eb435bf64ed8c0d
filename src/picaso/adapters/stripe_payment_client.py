"""Stripe Checkout client adapter."""

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TypeVar

import stripe

from picaso.domain.errors import (
    UpstreamGenericFailure,
    UpstreamInvalidInput,
    UpstreamRateLimited,
    UpstreamTimeout,
)
from picaso.domain.orders import CustomerInfo, LineItem, PaymentSession
from picaso.services.checkout import PaymentClient

_T = TypeVar("_T")


@dataclass
class StripePaymentClient(PaymentClient):
    """Payment client backed by a per-process ``stripe.StripeClient``."""

    client: stripe.StripeClient
    timeout_seconds: float = 30.0

    @classmethod
    def create(cls, api_key: str, timeout_seconds: float) -> "StripePaymentClient":
        """Create a Stripe client using the async httpx transport."""
        return cls(
            client=stripe.StripeClient(
                api_key,
                http_client=stripe.HTTPXClient(timeout=timeout_seconds),
                max_network_retries=0,
            ),
            timeout_seconds=timeout_seconds,
        )

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
        params: dict[str, object] = {
            "payment_method_types": ["card"],
            "line_items": [
                {
                    "price_data": {
                        "currency": line_item.currency,
                        "product_data": {
                            "name": line_item.name,
                            "description": line_item.description,
                            "images": [line_item.image_url],
                        },
                        "unit_amount": line_item.unit_amount,
                    },
                    "quantity": line_item.quantity,
                }
            ],
            "mode": "payment",
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": metadata,
        }
        options: dict[str, object] = {}
        if idempotency_key:
            options["idempotency_key"] = idempotency_key
        session = await self._call(
            self.client.checkout.sessions.create_async(params=params, options=options)
        )
        return _to_payment_session(session)

    async def retrieve_session(self, session_id: str) -> PaymentSession:
        """Fetch a checkout session by id."""
        session = await self._call(
            self.client.checkout.sessions.retrieve_async(session_id)
        )
        return _to_payment_session(session)

    async def retrieve_customer(self, customer_id: str) -> CustomerInfo | None:
        """Fetch a customer's name and email."""
        customer = await self._call(self.client.customers.retrieve_async(customer_id))
        if getattr(customer, "deleted", False):
            return None
        return CustomerInfo(
            name=getattr(customer, "name", None),
            email=getattr(customer, "email", None),
        )

    async def _call(self, awaitable: Awaitable[_T]) -> _T:
        try:
            async with asyncio.timeout(self.timeout_seconds):
                return await awaitable
        except TimeoutError as exc:
            raise UpstreamTimeout() from exc
        except stripe.RateLimitError as exc:
            raise UpstreamRateLimited() from exc
        except stripe.InvalidRequestError as exc:
            raise UpstreamInvalidInput(exc.user_message or str(exc)) from exc
        except stripe.StripeError as exc:
            raise UpstreamGenericFailure(exc.user_message or str(exc)) from exc


def _to_payment_session(session: object) -> PaymentSession:
    metadata = getattr(session, "metadata", None) or {}
    return PaymentSession(
        session_id=session.id,  # type: ignore[attr-defined]
        url=getattr(session, "url", None),
        metadata={str(key): str(value) for key, value in dict(metadata).items()},
        customer_id=getattr(session, "customer", None),
        payment_status=getattr(session, "payment_status", None),
    )
