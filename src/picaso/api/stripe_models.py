"""Pydantic models for Stripe webhook payloads."""

from pydantic import BaseModel, ConfigDict, Field


class _StripeModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class StripeAddress(_StripeModel):
    """Postal address payload."""

    line1: str | None = None
    line2: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    postal_code: str | None = None


class StripeCustomerDetails(_StripeModel):
    """Customer details collected during checkout."""

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: StripeAddress | None = None


class StripeShippingDetails(_StripeModel):
    """Shipping details collected during checkout."""

    name: str | None = None
    address: StripeAddress | None = None


class StripeCollectedInformation(_StripeModel):
    """Details collected during checkout on newer API versions."""

    shipping_details: StripeShippingDetails | None = None


class StripeCheckoutSession(_StripeModel):
    """Checkout session object embedded in an event."""

    id: str
    object: str = "checkout.session"
    customer: str | None = None
    customer_details: StripeCustomerDetails | None = None
    shipping_details: StripeShippingDetails | None = None
    collected_information: StripeCollectedInformation | None = None
    metadata: dict[str, str] = Field(default_factory=dict)
    payment_status: str | None = None


class StripeEventData(_StripeModel):
    """Event data wrapper."""

    object: dict[str, object]


class StripeEvent(_StripeModel):
    """Stripe webhook event envelope."""

    id: str | None = None
    type: str
    data: StripeEventData
