"""
PayPal checkout: thin orchestration over the PayPal client.

`PaymentService` validates input, builds the Orders v2 request body and
returns the few fields the frontend needs. PayPal is the system of record:
nothing is stored locally, and repeated captures rely on PayPal's own
idempotency.
"""

import logging
from typing import Any, Protocol

from quiz_companion.domain.models import OrderCaptured, OrderCreated
from quiz_companion.errors import InvalidRequest, ProviderError

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "USD"


class PaymentGateway(Protocol):
    async def create_order(self, body: dict[str, Any]) -> dict[str, Any]: ...

    async def capture_order(self, order_id: str) -> dict[str, Any]: ...


def format_amount(amount: str | int | float) -> str:
    """Render an amount the way PayPal expects it in `value` (10 → "10", 10.5 → "10.5")."""
    if isinstance(amount, float) and amount.is_integer():
        return str(int(amount))
    return str(amount)


def build_order_body(amount: str | int | float, currency: str) -> dict[str, Any]:
    return {
        "intent": "CAPTURE",
        "purchase_units": [
            {
                "amount": {
                    "currency_code": currency,
                    "value": format_amount(amount),
                }
            }
        ],
    }


class PaymentService:
    def __init__(self, gateway: PaymentGateway) -> None:
        self.gateway = gateway

    async def create_order(self, amount: str | int | float | None, currency: str | None = None) -> OrderCreated:
        if not amount:
            logger.warning("PayPal Create Order Failed: Missing Amount")
            raise InvalidRequest("Amount is required")

        currency = currency or DEFAULT_CURRENCY
        # PayPal echoes the full order back (Prefer: return=representation);
        # only its id goes to the frontend, which hands it to the PayPal buttons.
        result = await self.gateway.create_order(build_order_body(amount, currency))
        if not result.get("id"):
            raise ProviderError("PayPal response did not include an order id")

        logger.info("PayPal Order Created: %s (%s %s)", result["id"], amount, currency)
        return OrderCreated(id=result["id"])

    async def capture_order(self, order_id: str | None) -> OrderCaptured:
        if not order_id:
            logger.warning("PayPal Capture Failed: Missing OrderID")
            raise InvalidRequest("Order ID is required")

        # No local bookkeeping: a repeated capture is answered by PayPal itself.
        result = await self.gateway.capture_order(order_id)
        # Log line only; the payer object is returned untouched.
        payer = result.get("payer") or {}
        given_name = (payer.get("name") or {}).get("given_name", "unknown payer")
        logger.info("PayPal Payment Captured: %s by %s", result.get("id"), given_name)

        return OrderCaptured(status=result.get("status"), id=result.get("id"), payer=result.get("payer"))
