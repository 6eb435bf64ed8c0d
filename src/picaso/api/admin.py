"""Operator API endpoints with simple token auth."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from picaso.containers import AppContainer
    from picaso.domain.orders import FulfillmentIntent

router = APIRouter(prefix="/admin", tags=["admin"])

_logger = logging.getLogger(__name__)


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/printful/store", dependencies=[Depends(require_admin)])
async def printful_store(request: Request) -> dict[str, object]:
    """Check connectivity to the print provider."""
    container: AppContainer = request.app.state.container
    client = container.fulfillment_service.fulfillment_client
    store = await client.get_store()
    return {
        "success": True,
        "store": store,
        "message": "Printful connection successful!",
    }


@router.get("/fulfillments", dependencies=[Depends(require_admin)])
async def list_fulfillments(
    request: Request, status: str | None = None, limit: int = 50
) -> dict[str, object]:
    """Return recorded fulfillment intents."""
    container: AppContainer = request.app.state.container
    service = container.fulfillment_service
    intents = service.list_intents(status.upper() if status else None, limit)
    return {
        "enabled": service.repository is not None,
        "fulfillments": [_serialize_intent(intent) for intent in intents],
    }


@router.post(
    "/fulfillments/{session_id}/retry", dependencies=[Depends(require_admin)]
)
async def retry_fulfillment(session_id: str, request: Request) -> dict[str, object]:
    """Re-run a pending or failed fulfillment."""
    container: AppContainer = request.app.state.container
    result = await container.fulfillment_service.retry_intent(session_id)
    _logger.info("Retried fulfillment for %s: order %s", session_id, result.order_id)
    return {"success": True, "orderId": result.order_id}


def _serialize_intent(intent: FulfillmentIntent) -> dict[str, object]:
    return {
        "session_id": intent.session_id,
        "image_url": intent.image_url,
        "prompt": intent.prompt,
        "recipient": intent.recipient.to_payload(),
        "status": intent.status,
        "order_id": intent.order_id,
        "error": intent.error,
    }
