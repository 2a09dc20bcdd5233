import asyncio
import json

import httpx
import pytest

from quiz_companion.errors import InvalidRequest, ProviderError
from quiz_companion.payments import PaymentService, build_order_body, format_amount
from quiz_companion.services.paypal import PayPalClient

BASE_URL = "https://api-m.sandbox.paypal.com"

PAYER = {"name": {"given_name": "Ada", "surname": "Lovelace"}, "email_address": "ada@example.com"}


class FakePayPal:
    """Records every request and answers like the Orders v2 API."""

    def __init__(self, order_status=201, capture_status=201, error_body=None):
        self.requests = []
        self.order_status = order_status
        self.capture_status = capture_status
        self.error_body = error_body or {"name": "UNPROCESSABLE_ENTITY", "message": "Order already captured"}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/v1/oauth2/token":
            return httpx.Response(200, json={"access_token": "A21AA-token", "expires_in": 32400})
        if path == "/v2/checkout/orders":
            if self.order_status >= 400:
                return httpx.Response(self.order_status, json=self.error_body)
            return httpx.Response(self.order_status, json={"id": "5O190127TN364715T", "status": "CREATED"})
        if path.endswith("/capture"):
            if self.capture_status >= 400:
                return httpx.Response(self.capture_status, json=self.error_body)
            order_id = path.split("/")[-2]
            return httpx.Response(self.capture_status, json={"id": order_id, "status": "COMPLETED", "payer": PAYER})
        return httpx.Response(404, json={"message": "not found"})

    def api_requests(self):
        return [r for r in self.requests if r.url.path != "/v1/oauth2/token"]


def make_service(fake, client_id="client-id", secret="client-secret"):
    client = PayPalClient(client_id, secret, base_url=BASE_URL, transport=httpx.MockTransport(fake))
    return PaymentService(client)


def run(coro):
    return asyncio.run(coro)


def test_create_order_defaults_currency_to_usd():
    fake = FakePayPal()
    result = run(make_service(fake).create_order("10.00"))

    assert result.id == "5O190127TN364715T"
    (order_request,) = fake.api_requests()
    assert order_request.method == "POST"
    assert order_request.headers["Prefer"] == "return=representation"
    assert order_request.headers["Authorization"] == "Bearer A21AA-token"
    assert json.loads(order_request.content) == {
        "intent": "CAPTURE",
        "purchase_units": [{"amount": {"currency_code": "USD", "value": "10.00"}}],
    }


def test_create_order_uses_given_currency():
    fake = FakePayPal()
    run(make_service(fake).create_order(25, "EUR"))

    body = json.loads(fake.api_requests()[0].content)
    assert body["purchase_units"][0]["amount"] == {"currency_code": "EUR", "value": "25"}


def test_token_request_uses_basic_auth():
    fake = FakePayPal()
    run(make_service(fake).create_order("1.00"))

    token_request = fake.requests[0]
    assert token_request.url.path == "/v1/oauth2/token"
    assert token_request.headers["Authorization"].startswith("Basic ")
    assert token_request.content == b"grant_type=client_credentials"


@pytest.mark.parametrize("amount", [None, "", 0])
def test_create_order_without_amount_never_calls_paypal(amount):
    fake = FakePayPal()
    with pytest.raises(InvalidRequest, match="Amount is required"):
        run(make_service(fake).create_order(amount))
    assert fake.requests == []


def test_capture_order_passes_provider_fields_through():
    fake = FakePayPal()
    result = run(make_service(fake).capture_order("ORDER123"))

    assert result.status == "COMPLETED"
    assert result.id == "ORDER123"
    assert result.payer == PAYER
    (capture_request,) = fake.api_requests()
    assert capture_request.url.path == "/v2/checkout/orders/ORDER123/capture"
    assert json.loads(capture_request.content) == {}


def test_capture_order_requires_order_id():
    fake = FakePayPal()
    with pytest.raises(InvalidRequest, match="Order ID is required"):
        run(make_service(fake).capture_order(None))
    assert fake.requests == []


def test_provider_error_carries_paypal_message():
    fake = FakePayPal(capture_status=422)
    with pytest.raises(ProviderError, match="Order already captured"):
        run(make_service(fake).capture_order("ORDER123"))


def test_transport_failure_becomes_provider_error():
    def broken(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ProviderError, match="connection refused"):
        run(make_service(broken).create_order("5.00"))


def test_missing_credentials_fail_without_network():
    fake = FakePayPal()
    with pytest.raises(ProviderError, match="not configured"):
        run(make_service(fake, client_id=None, secret=None).create_order("5.00"))
    assert fake.requests == []


@pytest.mark.parametrize(
    "amount, expected",
    [("10.00", "10.00"), (10, "10"), (10.0, "10"), (10.5, "10.5")],
)
def test_format_amount(amount, expected):
    assert format_amount(amount) == expected


def test_build_order_body_shape():
    assert build_order_body("3.50", "GBP") == {
        "intent": "CAPTURE",
        "purchase_units": [{"amount": {"currency_code": "GBP", "value": "3.50"}}],
    }
