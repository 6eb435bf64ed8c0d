"""Image generation coordinator."""

import logging
import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

from picaso.domain.errors import (
    StorefrontError,
    UpstreamGenericFailure,
    UpstreamInvalidInput,
    ValidationError,
)
from picaso.domain.orders import GenerationResult

VARIATION_MODIFIERS: tuple[str, ...] = (
    "with different lighting",
    "from a different angle",
    "with more detail",
    "in a different composition",
    "with varied colors",
    "with different mood",
)

ModifierSelector = Callable[[Sequence[str]], str]

_logger = logging.getLogger(__name__)


class ImageClient(Protocol):
    """Interface for the image synthesis provider."""

    async def generate(
        self, *, model: str, prompt: str, size: str, quality: str
    ) -> str:
        """Generate one image and return its URL."""


@dataclass
class GenerationService:
    """Validates prompts and delegates image synthesis to the provider."""

    client: ImageClient
    model: str = "dall-e-3"
    size: str = "1024x1024"
    quality: str = "standard"
    choose_modifier: ModifierSelector = random.choice
    modifiers: Sequence[str] = VARIATION_MODIFIERS

    async def generate(self, prompt: str | None) -> GenerationResult:
        """Generate an image for the prompt as written."""
        if not prompt or not prompt.strip():
            raise ValidationError("Prompt is required")
        _logger.info("Generating image for prompt: %s", prompt)
        try:
            image_url = await self._call(prompt)
        except UpstreamInvalidInput as exc:
            raise exc.with_message(
                "Invalid prompt. Please try a different description."
            ) from exc
        except UpstreamGenericFailure as exc:
            raise exc.with_message(
                "Failed to generate image. Please try again."
            ) from exc
        return GenerationResult(image_url=image_url, prompt=prompt)

    async def generate_variation(self, base_prompt: str | None) -> GenerationResult:
        """Generate an image for the base prompt plus one random modifier."""
        if not base_prompt or not base_prompt.strip():
            raise ValidationError("Base prompt is required")
        modifier = self.choose_modifier(self.modifiers)
        enhanced_prompt = f"{base_prompt}, {modifier}"
        _logger.info("Generating variation for prompt: %s", enhanced_prompt)
        try:
            image_url = await self._call(enhanced_prompt)
        except (UpstreamInvalidInput, UpstreamGenericFailure) as exc:
            raise exc.with_message("Failed to generate variation") from exc
        return GenerationResult(image_url=image_url, prompt=enhanced_prompt)

    async def _call(self, prompt: str) -> str:
        try:
            return await self.client.generate(
                model=self.model,
                prompt=prompt,
                size=self.size,
                quality=self.quality,
            )
        except StorefrontError:
            raise
        except Exception as exc:
            _logger.exception("Image generation failed")
            raise UpstreamGenericFailure() from exc
