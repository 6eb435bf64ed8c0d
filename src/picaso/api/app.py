"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from picaso.api.admin import require_admin
from picaso.api.admin import router as admin_router
from picaso.api.pages import STOREFRONT_HTML, format_amount, render_confirmation
from picaso.api.storefront_models import (
    CheckoutRequest,
    GenerateImageRequest,
    GenerateVariationRequest,
    ManualOrderRequest,
)
from picaso.api.webhooks import parse_stripe_event
from picaso.app_logging import configure_logging
from picaso.config import parse_allowed_origins
from picaso.containers import AppContainer
from picaso.domain.errors import StorefrontError, UpstreamGenericFailure
from picaso.domain.orders import GenerationResult
from picaso.services.idempotency import request_fingerprint


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Storefront ready (environment=%s)",
            app.state.container.settings.environment,
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_allowed_origins(container.settings.cors_allow_origins),
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Idempotency-Key"],
    )
    app.include_router(admin_router)

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(
        request: Request, exc: StorefrontError
    ) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/", response_class=HTMLResponse)
    async def index() -> HTMLResponse:
        """Storefront landing page."""
        return HTMLResponse(STOREFRONT_HTML)

    @app.post("/api/generate-image")
    async def generate_image(
        body: GenerateImageRequest,
        request: Request,
        idempotency_key: str | None = Header(default=None),
    ) -> dict[str, object]:
        """Generate an image from a prompt."""
        state_container: AppContainer = request.app.state.container

        async def run() -> dict[str, object]:
            result = await state_container.generation_service.generate(body.prompt)
            return _generation_response(result)

        return await state_container.idempotency_service.run(
            "generate-image",
            idempotency_key,
            run,
            fingerprint=request_fingerprint(body.model_dump()),
        )

    @app.post("/api/generate-variation")
    async def generate_variation(
        body: GenerateVariationRequest,
        request: Request,
        idempotency_key: str | None = Header(default=None),
    ) -> dict[str, object]:
        """Generate a variation of an existing prompt."""
        state_container: AppContainer = request.app.state.container

        async def run() -> dict[str, object]:
            result = await state_container.generation_service.generate_variation(
                body.basePrompt
            )
            return _generation_response(result)

        return await state_container.idempotency_service.run(
            "generate-variation",
            idempotency_key,
            run,
            fingerprint=request_fingerprint(body.model_dump()),
        )

    @app.post("/api/create-checkout-session")
    async def create_checkout_session(
        body: CheckoutRequest,
        request: Request,
        idempotency_key: str | None = Header(default=None),
    ) -> dict[str, object]:
        """Create a hosted checkout session and return its URL."""
        state_container: AppContainer = request.app.state.container
        base_url = state_container.settings.public_base_url or str(request.base_url)

        async def run() -> dict[str, object]:
            session = await state_container.checkout_service.create_checkout_session(
                body.imageUrl,
                body.prompt,
                base_url=base_url,
                idempotency_key=idempotency_key,
            )
            return {"url": session.redirect_url}

        return await state_container.idempotency_service.run(
            "create-checkout-session",
            idempotency_key,
            run,
            fingerprint=request_fingerprint(body.model_dump()),
        )

    @app.get("/success", response_model=None)
    async def success(
        request: Request, session_id: str | None = None
    ) -> HTMLResponse | RedirectResponse:
        """Render the order confirmation or send the visitor home."""
        state_container: AppContainer = request.app.state.container
        try:
            confirmation = (
                await state_container.checkout_service.get_order_confirmation(
                    session_id
                )
            )
        except Exception:
            logger.exception(
                "Failed to retrieve session", extra={"session_id": session_id}
            )
            return RedirectResponse("/", status_code=303)
        settings = state_container.settings
        return HTMLResponse(
            render_confirmation(
                confirmation,
                amount=format_amount(settings.product_price_cents, settings.currency),
                contact_email=settings.support_email,
            )
        )

    @app.post("/webhook/stripe")
    async def stripe_webhook(request: Request) -> dict[str, bool]:
        """Handle Stripe payment notifications."""
        state_container: AppContainer = request.app.state.container
        payload = await request.body()
        try:
            notification = parse_stripe_event(
                payload,
                request.headers.get("stripe-signature"),
                state_container.settings.stripe_webhook_secret,
            )
        except StorefrontError as exc:
            logger.warning("Webhook error: %s", exc.message)
            raise
        await state_container.fulfillment_service.on_payment_completed(notification)
        return {"received": True}

    @app.post("/api/create-printful-order", dependencies=[Depends(require_admin)])
    async def create_printful_order(
        body: ManualOrderRequest, request: Request
    ) -> dict[str, object]:
        """Create a print order for a paid session without a webhook."""
        state_container: AppContainer = request.app.state.container
        try:
            result = await state_container.fulfillment_service.create_manual_order(
                body.sessionId
            )
        except StorefrontError:
            logger.exception(
                "Error creating manual print order",
                extra={"session_id": body.sessionId},
            )
            raise
        except Exception as exc:
            logger.exception(
                "Error creating manual print order",
                extra={"session_id": body.sessionId},
            )
            raise UpstreamGenericFailure(str(exc)) from exc
        return {"success": True, "orderId": result.order_id}

    return app


def _generation_response(result: GenerationResult) -> dict[str, object]:
    return {"success": True, "imageUrl": result.image_url, "prompt": result.prompt}
