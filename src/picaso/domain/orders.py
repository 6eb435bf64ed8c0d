"""Domain models for the generate -> checkout -> fulfill lifecycle."""

import hashlib
from dataclasses import dataclass, field


@dataclass(frozen=True)
class GenerationResult:
    """A generated image and the prompt that produced it."""

    image_url: str
    prompt: str


@dataclass(frozen=True)
class LineItem:
    """Single product line sent to the payment provider."""

    name: str
    description: str
    unit_amount: int
    currency: str
    image_url: str
    quantity: int = 1


@dataclass(frozen=True)
class PaymentSession:
    """Hosted payment session as reported by the payment provider."""

    session_id: str
    url: str | None
    metadata: dict[str, str] = field(default_factory=dict)
    customer_id: str | None = None
    payment_status: str | None = None


@dataclass(frozen=True)
class CheckoutSession:
    """A checkout attempt for one generated image."""

    session_id: str
    image_url: str
    prompt: str
    redirect_url: str


@dataclass(frozen=True)
class OrderConfirmation:
    """Order details recovered from payment session metadata."""

    session_id: str
    prompt: str
    image_url: str


@dataclass(frozen=True)
class CustomerInfo:
    """Customer contact and shipping details; any field may be missing."""

    name: str | None = None
    email: str | None = None
    address1: str | None = None
    address2: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    zip: str | None = None


@dataclass(frozen=True)
class Recipient:
    """Fully populated shipping recipient for a print order."""

    name: str
    address1: str
    city: str
    state_code: str
    country_code: str
    zip: str
    address2: str | None = None
    email: str | None = None

    def to_payload(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dict."""
        payload: dict[str, object] = {
            "name": self.name,
            "address1": self.address1,
            "city": self.city,
            "state_code": self.state_code,
            "country_code": self.country_code,
            "zip": self.zip,
        }
        if self.address2:
            payload["address2"] = self.address2
        if self.email:
            payload["email"] = self.email
        return payload

    @classmethod
    def from_payload(cls, payload: dict[str, object]) -> "Recipient":
        """Build a recipient from a dict produced by ``to_payload``."""
        return cls(
            name=str(payload["name"]),
            address1=str(payload["address1"]),
            city=str(payload["city"]),
            state_code=str(payload["state_code"]),
            country_code=str(payload["country_code"]),
            zip=str(payload["zip"]),
            address2=payload.get("address2"),  # type: ignore[arg-type]
            email=payload.get("email"),  # type: ignore[arg-type]
        )


DEFAULT_RECIPIENT = Recipient(
    name="PICASO Customer",
    address1="123 Main St",
    city="New York",
    state_code="NY",
    country_code="US",
    zip="10001",
)

TEST_RECIPIENT = Recipient(
    name="Test Customer",
    address1="123 Test Street",
    city="Test City",
    state_code="NY",
    country_code="US",
    zip="10001",
)


def build_recipient(
    customer: CustomerInfo | None, defaults: Recipient = DEFAULT_RECIPIENT
) -> Recipient:
    """Merge customer details over placeholder values, field by field."""
    if customer is None:
        return defaults
    return Recipient(
        name=customer.name or defaults.name,
        address1=customer.address1 or defaults.address1,
        city=customer.city or defaults.city,
        state_code=customer.state or defaults.state_code,
        country_code=customer.country or defaults.country_code,
        zip=customer.zip or defaults.zip,
        address2=customer.address2 or defaults.address2,
        email=customer.email or defaults.email,
    )


@dataclass(frozen=True)
class FulfillmentOrder:
    """Print order to submit after a completed payment."""

    session_id: str
    image_url: str
    prompt: str
    recipient: Recipient


@dataclass(frozen=True)
class FulfillmentResult:
    """Outcome of a submitted print order."""

    order_id: int | str
    file_id: int | str
    status: str | None = None


@dataclass(frozen=True)
class CompletedSession:
    """Checkout session embedded in a payment notification."""

    session_id: str
    metadata: dict[str, str] = field(default_factory=dict)
    customer_id: str | None = None
    customer_details: CustomerInfo | None = None
    shipping_details: CustomerInfo | None = None


@dataclass(frozen=True)
class PaymentNotification:
    """Payment provider event relevant to fulfillment."""

    event_id: str | None
    event_type: str
    session: CompletedSession | None = None


INTENT_PENDING = "PENDING"
INTENT_FULFILLED = "FULFILLED"
INTENT_FAILED = "FAILED"


@dataclass(frozen=True)
class FulfillmentIntent:
    """Outbox record of a fulfillment owed for a paid session."""

    session_id: str
    image_url: str
    prompt: str
    recipient: Recipient
    status: str
    order_id: str | None = None
    error: str | None = None


EXTERNAL_ID_MAX_LENGTH = 32


def external_order_id(session_id: str) -> str:
    """Return the print provider's order reference for a payment session.

    Printful caps ``external_id`` at 32 characters. Session ids that fit are
    used as-is, longer ones are replaced by a stable SHA-256 prefix.
    """
    if len(session_id) <= EXTERNAL_ID_MAX_LENGTH:
        return session_id
    digest = hashlib.sha256(session_id.encode("utf-8")).hexdigest()
    return digest[:EXTERNAL_ID_MAX_LENGTH]
