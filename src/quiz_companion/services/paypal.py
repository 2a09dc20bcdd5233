"""
PayPal Orders v2 client.

Talks to the PayPal REST API over httpx:

  - POST /v1/oauth2/token                    client-credentials access token
  - POST /v2/checkout/orders                 create an order
  - POST /v2/checkout/orders/{id}/capture    capture an approved order

A token is fetched for every call, and a fresh `httpx.AsyncClient` is
opened per call; nothing is shared between requests. Failures of any kind
are raised as ProviderError carrying PayPal's own message when it sent one.
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from quiz_companion.errors import ProviderError

logger = logging.getLogger(__name__)


def _provider_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for field in ("message", "error_description", "error", "name"):
            if body.get(field):
                return str(body[field])
    return f"{response.status_code} {response.reason_phrase}".strip()


class PayPalClient:
    def __init__(
        self,
        client_id: str | None,
        client_secret: str | None,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._base_url = base_url
        self._timeout = timeout
        # Injected by tests (httpx.MockTransport)
        self._transport = transport

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout, transport=self._transport)

    async def _access_token(self, http: httpx.AsyncClient) -> str:
        if not self._client_id or not self._client_secret:
            raise ProviderError("PayPal client credentials are not configured")
        response = await http.post(
            "/v1/oauth2/token",
            data={"grant_type": "client_credentials"},
            auth=(self._client_id, self._client_secret),
            headers={"Accept": "application/json"},
        )
        if response.is_error:
            raise ProviderError(_provider_message(response))
        return response.json()["access_token"]

    async def _post(self, path: str, body: dict[str, Any], headers: dict[str, str] | None = None) -> dict[str, Any]:
        try:
            async with self._http() as http:
                # Token and API call share one connection pool, closed on exit.
                token = await self._access_token(http)
                response = await http.post(
                    path,
                    json=body,
                    headers={"Authorization": f"Bearer {token}", **(headers or {})},
                )
                logger.debug("PayPal POST %s -> %s", path, response.status_code)
                if response.is_error:
                    raise ProviderError(_provider_message(response))
                return response.json()
        except httpx.HTTPError as exc:  # timeouts, DNS, refused connections
            raise ProviderError(str(exc) or type(exc).__name__) from exc
        except (KeyError, ValueError) as exc:  # non-JSON body, token reply without access_token
            raise ProviderError(f"Malformed PayPal response: {exc}") from exc

    async def create_order(self, body: dict[str, Any]) -> dict[str, Any]:
        """Create an order and return PayPal's full representation of it."""
        return await self._post("/v2/checkout/orders", body, headers={"Prefer": "return=representation"})

    async def capture_order(self, order_id: str) -> dict[str, Any]:
        return await self._post(f"/v2/checkout/orders/{quote(order_id, safe='')}/capture", {})
