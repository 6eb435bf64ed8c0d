"""OpenAI Images API client."""

from dataclasses import dataclass

import openai
from openai import AsyncOpenAI

from picaso.domain.errors import (
    UpstreamGenericFailure,
    UpstreamInvalidInput,
    UpstreamRateLimited,
    UpstreamTimeout,
)
from picaso.services.generation import ImageClient


@dataclass
class OpenAIImageClient(ImageClient):
    """Image client backed by the OpenAI Images API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str, timeout_seconds: float) -> "OpenAIImageClient":
        """Create an OpenAI image client with SDK retries disabled."""
        return cls(
            client=AsyncOpenAI(
                api_key=api_key, timeout=timeout_seconds, max_retries=0
            )
        )

    async def generate(
        self, *, model: str, prompt: str, size: str, quality: str
    ) -> str:
        """Request a single image and return its URL."""
        try:
            response = await self.client.images.generate(
                model=model,
                prompt=prompt,
                n=1,
                size=size,
                quality=quality,
            )
        except openai.APITimeoutError as exc:
            raise UpstreamTimeout() from exc
        except openai.RateLimitError as exc:
            raise UpstreamRateLimited() from exc
        except openai.BadRequestError as exc:
            raise UpstreamInvalidInput(str(exc)) from exc
        except openai.OpenAIError as exc:
            raise UpstreamGenericFailure(str(exc)) from exc
        if not response.data or not response.data[0].url:
            raise UpstreamGenericFailure("OpenAI returned no image URL")
        return response.data[0].url

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.close()
