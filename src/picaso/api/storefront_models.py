"""Pydantic models for storefront API request bodies.

Fields are optional so that missing values reach the services and come back
as ``{"error": ...}`` responses instead of FastAPI's 422 payloads.
"""

from pydantic import BaseModel, ConfigDict


class _RequestModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class GenerateImageRequest(_RequestModel):
    """Body for image generation."""

    prompt: str | None = None


class GenerateVariationRequest(_RequestModel):
    """Body for a prompt variation."""

    basePrompt: str | None = None  # noqa: N815


class CheckoutRequest(_RequestModel):
    """Body for creating a checkout session."""

    imageUrl: str | None = None  # noqa: N815
    prompt: str | None = None


class ManualOrderRequest(_RequestModel):
    """Body for the manual fulfillment trigger."""

    sessionId: str | None = None  # noqa: N815
