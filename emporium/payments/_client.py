"""
Gateway client: HTTP+JSON call to the payment function.

    settings = GatewaySettings.from_env()
    async with HttpGatewayClient(settings) as client:
        result = await client.initiate(request)

POST {functions_url}/process-payment with a bearer token.
Response body: {success, redirect_url?, error?, transaction_id?}
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from emporium._errors import GatewayError, NetworkError
from emporium.payments._types import PaymentRequest, PaymentResult, error_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GatewaySettings:
    functions_url: str
    access_token: str = ""
    api_key: str = ""
    path: str = "process-payment"

    @property
    def endpoint(self) -> str:
        return f"{self.functions_url.rstrip('/')}/{self.path}"

    @classmethod
    def from_env(cls) -> GatewaySettings:
        return cls(
            functions_url=os.getenv("EMPORIUM_FUNCTIONS_URL", "http://localhost:54321/functions/v1"),
            access_token=os.getenv("EMPORIUM_ACCESS_TOKEN", ""),
            api_key=os.getenv("EMPORIUM_API_KEY", ""),
        )


class GatewayClient(Protocol):
    """
    One payment initiation.

    Returns a PaymentResult for any answer the gateway gives (including an
    explicit decline). Raises NetworkError when the gateway cannot be
    reached and GatewayError when the call itself is rejected.
    """

    async def initiate(self, request: PaymentRequest) -> PaymentResult:
        ...


class HttpGatewayClient:
    def __init__(
        self,
        settings: GatewaySettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._client = client or httpx.AsyncClient()
        self._owns_client = client is None

    async def __aenter__(self) -> HttpGatewayClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        if not self._settings.access_token:
            raise GatewayError("User not authenticated")
        headers = {
            "Authorization": f"Bearer {self._settings.access_token}",
            "Content-Type": "application/json",
        }
        if self._settings.api_key:
            headers["apikey"] = self._settings.api_key
        return headers

    async def initiate(self, request: PaymentRequest) -> PaymentResult:
        headers = self._headers()
        logger.info(
            "Initiating %s payment for order %s (%s %s)",
            request.gateway_type,
            request.order_id,
            request.amount,
            request.currency,
        )
        try:
            response = await self._client.post(
                self._settings.endpoint,
                json=request.to_json(),
                headers=headers,
            )
        except httpx.TransportError as e:
            logger.warning("Gateway unreachable for order %s: %s", request.order_id, e)
            raise NetworkError(f"Failed to fetch: {e}") from e

        if response.is_error:
            message = _error_text(response)
            logger.warning("Gateway returned %s for order %s: %s", response.status_code, request.order_id, message)
            raise GatewayError(message)

        try:
            body = response.json()
        except ValueError as e:
            raise GatewayError("Invalid response from payment gateway") from e
        if not isinstance(body, dict):
            raise GatewayError("Invalid response from payment gateway")
        return PaymentResult.from_response(body)


def _error_text(response: httpx.Response) -> str:
    fallback = f"Payment initiation failed with status {response.status_code}"
    try:
        body: Any = response.json()
    except ValueError:
        return response.text or fallback
    if isinstance(body, dict):
        return error_text(body.get("error") or body.get("message")) or fallback
    return response.text or fallback


__all__ = ("GatewaySettings", "GatewayClient", "HttpGatewayClient")
