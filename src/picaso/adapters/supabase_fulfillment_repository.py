"""Supabase-backed fulfillment outbox."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from picaso.domain.orders import (
    INTENT_FAILED,
    INTENT_FULFILLED,
    INTENT_PENDING,
    FulfillmentIntent,
    Recipient,
)
from picaso.services.fulfillment import FulfillmentRepository

_TABLE = "fulfillment_intents"
_COLUMNS = "session_id, image_url, prompt, recipient_json, status, order_id, error"


@dataclass
class SupabaseFulfillmentRepository(FulfillmentRepository):
    """Supabase implementation of the fulfillment outbox."""

    client: Client

    def get_intent(self, session_id: str) -> FulfillmentIntent | None:
        """Return the intent for a payment session, if present."""
        response = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("session_id", session_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_intent(response.data[0])

    def claim_intent(self, intent: FulfillmentIntent) -> bool:
        """Insert a PENDING intent, or take over a FAILED one.

        Both writes are single conditional statements, so only one
        concurrent delivery gets rows back.
        """
        inserted = (
            self.client.table(_TABLE)
            .upsert(
                {
                    "session_id": intent.session_id,
                    "image_url": intent.image_url,
                    "prompt": intent.prompt,
                    "recipient_json": intent.recipient.to_payload(),
                    "status": INTENT_PENDING,
                    "order_id": None,
                    "error": None,
                    "updated_at": _now(),
                },
                on_conflict="session_id",
                ignore_duplicates=True,
            )
            .execute()
        )
        if inserted.data:
            return True
        reclaimed = (
            self.client.table(_TABLE)
            .update(
                {
                    "recipient_json": intent.recipient.to_payload(),
                    "status": INTENT_PENDING,
                    "error": None,
                    "updated_at": _now(),
                }
            )
            .eq("session_id", intent.session_id)
            .eq("status", INTENT_FAILED)
            .execute()
        )
        return bool(reclaimed.data)

    def mark_fulfilled(self, session_id: str, order_id: str) -> None:
        """Record the provider order id."""
        self.client.table(_TABLE).update(
            {
                "status": INTENT_FULFILLED,
                "order_id": order_id,
                "error": None,
                "updated_at": _now(),
            }
        ).eq("session_id", session_id).execute()

    def mark_failed(self, session_id: str, error: str) -> None:
        """Record the last failure."""
        self.client.table(_TABLE).update(
            {"status": INTENT_FAILED, "error": error, "updated_at": _now()}
        ).eq("session_id", session_id).execute()

    def list_intents(self, status: str | None, limit: int) -> list[FulfillmentIntent]:
        """Return recent intents, optionally filtered by status."""
        query = self.client.table(_TABLE).select(_COLUMNS)
        if status:
            query = query.eq("status", status)
        response = query.order("updated_at", desc=True).limit(limit).execute()
        return [_to_intent(row) for row in response.data or []]


def _to_intent(row: dict[str, object]) -> FulfillmentIntent:
    return FulfillmentIntent(
        session_id=str(row["session_id"]),
        image_url=str(row["image_url"]),
        prompt=str(row["prompt"]),
        recipient=Recipient.from_payload(
            row["recipient_json"]  # type: ignore[arg-type]
        ),
        status=str(row["status"]),
        order_id=row.get("order_id"),  # type: ignore[arg-type]
        error=row.get("error"),  # type: ignore[arg-type]
    )


def _now() -> str:
    return datetime.now(tz=UTC).isoformat()
