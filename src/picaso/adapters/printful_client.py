"""Printful API client."""

from dataclasses import dataclass

import httpx

from picaso.domain.errors import (
    UpstreamGenericFailure,
    UpstreamInvalidInput,
    UpstreamRateLimited,
    UpstreamTimeout,
)
from picaso.domain.orders import Recipient
from picaso.services.fulfillment import FulfillmentClient


@dataclass
class HttpxPrintfulClient(FulfillmentClient):
    """HTTPX-backed Printful client."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    store_id: str | None = None
    timeout_seconds: float = 30.0

    @classmethod
    def create(
        cls,
        api_key: str,
        base_url: str,
        store_id: str | None = None,
        timeout_seconds: float = 30.0,
    ) -> "HttpxPrintfulClient":
        """Create a Printful client with a managed httpx session."""
        return cls(
            api_key=api_key,
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            store_id=store_id,
            timeout_seconds=timeout_seconds,
        )

    async def upload_file(self, url: str) -> int | str:
        """Ingest an image by URL into the file library."""
        result = await self._request("POST", "/files", {"type": "default", "url": url})
        return result["id"]  # type: ignore[return-value]

    async def create_order(
        self,
        *,
        recipient: Recipient,
        variant_id: int,
        file_id: int | str,
        external_id: str,
    ) -> dict[str, object]:
        """Create an order for one item printed with the uploaded file."""
        payload: dict[str, object] = {
            "recipient": recipient.to_payload(),
            "items": [
                {
                    "variant_id": variant_id,
                    "quantity": 1,
                    "files": [{"id": file_id, "type": "default"}],
                }
            ],
            "external_id": external_id,
        }
        return await self._request("POST", "/orders", payload)

    async def get_store(self) -> dict[str, object]:
        """Return the store linked to the API token."""
        return await self._request("GET", "/store")

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _request(
        self, method: str, path: str, payload: dict[str, object] | None = None
    ) -> dict[str, object]:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        if self.store_id:
            headers["X-PF-Store-Id"] = self.store_id
        try:
            response = await self.http_client.request(
                method,
                f"{self.base_url}{path}",
                headers=headers,
                json=payload,
                timeout=self.timeout_seconds,
            )
        except httpx.TimeoutException as exc:
            raise UpstreamTimeout() from exc
        except httpx.HTTPError as exc:
            raise UpstreamGenericFailure(f"Printful request failed: {exc}") from exc
        _raise_for_status(response)
        result = response.json().get("result")
        if not isinstance(result, dict):
            raise UpstreamGenericFailure(f"Printful {path} returned no result")
        return result


def _raise_for_status(response: httpx.Response) -> None:
    """Translate Printful error responses into storefront errors."""
    if response.is_success:
        return
    detail = _error_detail(response)
    if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
        raise UpstreamRateLimited()
    if response.is_client_error:
        raise UpstreamInvalidInput(f"Printful rejected the request: {detail}")
    raise UpstreamGenericFailure(f"Printful error {response.status_code}: {detail}")


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(body, dict) and body.get("result"):
        return str(body["result"])
    return response.text
