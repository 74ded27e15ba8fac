from __future__ import annotations

import json
from decimal import Decimal

import httpx
import pytest

from core.errors import AppException, ErrorCode
from core.payments.mercadopago_provider import MercadoPagoGateway
from core.payments.types import Payer, PaymentRequest, PreferenceItem, PreferenceRequest


def _payment_request() -> PaymentRequest:
    return PaymentRequest(
        transaction_amount=Decimal("30.00"),
        description="Pedido Açaí em Casa - Ana: Açaí 500ml (2x)",
        payment_method_id="pix",
        payer=Payer(email="a@b.com", first_name="Ana"),
        external_reference="acai-1700000000000-abc123xyz",
        notification_url="https://backend.example.com/mercadopago-webhook",
    )


def _gateway(handler) -> MercadoPagoGateway:
    return MercadoPagoGateway(
        access_token="TEST-token",
        base_url="https://api.mercadopago.test",
        timeout_seconds=2.0,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_create_payment_posts_payload_with_auth_and_idempotency_headers():
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["path"] = request.url.path
        captured["headers"] = request.headers
        captured["body"] = json.loads(request.content)
        return httpx.Response(
            201,
            json={
                "id": 987654321,
                "status": "pending",
                "status_detail": "pending_waiting_transfer",
                "external_reference": "acai-1700000000000-abc123xyz",
            },
        )

    gateway = _gateway(handler)
    try:
        payment = await gateway.create_payment(_payment_request())
    finally:
        await gateway.aclose()

    assert captured["method"] == "POST"
    assert captured["path"] == "/v1/payments"
    assert captured["headers"]["Authorization"] == "Bearer TEST-token"
    assert captured["headers"]["X-Idempotency-Key"] == "acai-1700000000000-abc123xyz"
    assert captured["body"]["transaction_amount"] == 30.0
    assert captured["body"]["payment_method_id"] == "pix"
    assert payment.id == "987654321"
    assert payment.status == "pending"
    assert payment.status_detail == "pending_waiting_transfer"


@pytest.mark.asyncio
async def test_gateway_error_payload_is_passed_through():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={"message": "Invalid transaction_amount", "error": "bad_request", "status": 400},
        )

    gateway = _gateway(handler)
    try:
        with pytest.raises(AppException) as exc_info:
            await gateway.create_payment(_payment_request())
    finally:
        await gateway.aclose()

    assert exc_info.value.status_code == 500
    assert exc_info.value.detail["code"] == ErrorCode.PAYMENT_GATEWAY_ERROR.value  # type: ignore
    details = exc_info.value.detail["details"]  # type: ignore
    assert details["statusCode"] == 400
    assert details["gatewayError"]["message"] == "Invalid transaction_amount"


@pytest.mark.asyncio
async def test_gateway_timeout_is_a_server_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    gateway = _gateway(handler)
    try:
        with pytest.raises(AppException) as exc_info:
            await gateway.fetch_payment(payment_id="123")
    finally:
        await gateway.aclose()

    assert exc_info.value.status_code == 500
    assert exc_info.value.detail["message"] == "Payment gateway timed out"  # type: ignore
    assert exc_info.value.detail["details"] == {"timeoutSeconds": 2.0}  # type: ignore
    assert isinstance(exc_info.value.__cause__, httpx.ReadTimeout)


@pytest.mark.asyncio
async def test_connection_failure_is_a_server_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    gateway = _gateway(handler)
    try:
        with pytest.raises(AppException) as exc_info:
            await gateway.fetch_payment(payment_id="123")
    finally:
        await gateway.aclose()

    assert exc_info.value.detail["code"] == ErrorCode.PAYMENT_GATEWAY_ERROR.value  # type: ignore
    assert exc_info.value.detail["details"] == "connection refused"  # type: ignore


@pytest.mark.asyncio
async def test_success_without_payment_id_violates_contract():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(201, json={"status": "pending"})

    gateway = _gateway(handler)
    try:
        with pytest.raises(AppException) as exc_info:
            await gateway.create_payment(_payment_request())
    finally:
        await gateway.aclose()

    assert exc_info.value.detail["code"] == ErrorCode.PAYMENT_GATEWAY_CONTRACT.value  # type: ignore
    assert exc_info.value.detail["details"] == {"gatewayResponse": {"status": "pending"}}  # type: ignore


@pytest.mark.asyncio
async def test_fetch_payment_reads_status_and_external_reference():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.url.path == "/v1/payments/123"
        return httpx.Response(
            200,
            json={"id": 123, "status": "approved", "external_reference": "acai-1-xyz"},
        )

    gateway = _gateway(handler)
    try:
        payment = await gateway.fetch_payment(payment_id="123")
    finally:
        await gateway.aclose()

    assert payment.id == "123"
    assert payment.status == "approved"
    assert payment.external_reference == "acai-1-xyz"


@pytest.mark.asyncio
async def test_create_preference_returns_checkout_links():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/checkout/preferences"
        body = json.loads(request.content)
        assert body["items"][0]["unit_price"] == 15.0
        return httpx.Response(
            201,
            json={
                "id": "123-pref",
                "init_point": "https://www.mercadopago.com.br/checkout/v1/redirect?pref_id=123-pref",
                "sandbox_init_point": "https://sandbox.mercadopago.com.br/checkout/v1/redirect?pref_id=123-pref",
            },
        )

    preference_request = PreferenceRequest(
        items=(PreferenceItem(title="Açaí 500ml", quantity=2, unit_price=Decimal("15.00")),),
        payer={"name": "Ana", "email": "a@b.com"},
        back_urls={"success": "https://shop.example.com/checkout/success"},
        external_reference="acai-1-xyz",
        notification_url="https://backend.example.com/mercadopago-webhook",
    )

    gateway = _gateway(handler)
    try:
        preference = await gateway.create_preference(preference_request)
    finally:
        await gateway.aclose()

    assert preference.id == "123-pref"
    assert preference.init_point is not None
    assert preference.init_point.endswith("pref_id=123-pref")
