from __future__ import annotations

from typing import Any

import httpx

from core.errors import gateway_contract_violation, gateway_request_failed
from core.logging_config import get_logger
from core.payments.provider import PaymentGateway
from core.payments.types import (
    CardPaymentRequest,
    GatewayPayment,
    GatewayPreference,
    PaymentRequest,
    PreferenceRequest,
)

log = get_logger(__name__)


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


class MercadoPagoGateway(PaymentGateway):
    """
    Async REST client for the Mercado Pago payments and checkout APIs.

    One instance is shared by all requests; the underlying
    `httpx.AsyncClient` keeps its connection pool between calls and must be
    closed with `aclose()` on shutdown.
    """

    provider_name = "mercadopago"

    def __init__(
        self,
        *,
        access_token: str,
        base_url: str = "https://api.mercadopago.com",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout_seconds),
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            },
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, json=json, headers=headers)
        except httpx.TimeoutException as err:
            log.error(f"Mercado Pago {method} {path} timed out after {self._timeout_seconds}s")
            raise gateway_request_failed(
                "Payment gateway timed out",
                {"timeoutSeconds": self._timeout_seconds},
            ) from err
        except httpx.HTTPError as err:
            log.error(f"Mercado Pago {method} {path} failed: {err}")
            raise gateway_request_failed("Payment gateway request failed", str(err)) from err

        if response.status_code >= 400:
            try:
                gateway_error: Any = response.json()
            except ValueError:
                gateway_error = response.text
            log.error(f"Mercado Pago {method} {path} returned {response.status_code}: {gateway_error}")
            raise gateway_request_failed(
                f"Payment gateway rejected the request ({response.status_code})",
                {"statusCode": response.status_code, "gatewayError": gateway_error},
            )

        try:
            data = response.json()
        except ValueError as err:
            raise gateway_contract_violation("Payment gateway returned invalid JSON", response.text) from err

        if not isinstance(data, dict):
            raise gateway_contract_violation("Payment gateway returned an unexpected payload", data)
        return data

    @staticmethod
    def _to_payment(data: dict[str, Any]) -> GatewayPayment:
        payment_id = data.get("id")
        if payment_id is None:
            raise gateway_contract_violation("Payment gateway response has no payment id", data)
        return GatewayPayment(
            id=str(payment_id),
            status=_optional_str(data.get("status")),
            status_detail=_optional_str(data.get("status_detail")),
            external_reference=_optional_str(data.get("external_reference")),
            raw=data,
        )

    async def create_payment(self, payload: PaymentRequest | CardPaymentRequest) -> GatewayPayment:
        data = await self._request(
            "POST",
            "/v1/payments",
            json=payload.to_gateway(),
            headers={"X-Idempotency-Key": payload.external_reference},
        )
        return self._to_payment(data)

    async def create_preference(self, payload: PreferenceRequest) -> GatewayPreference:
        data = await self._request("POST", "/checkout/preferences", json=payload.to_gateway())
        preference_id = data.get("id")
        if preference_id is None:
            raise gateway_contract_violation("Payment gateway response has no preference id", data)
        return GatewayPreference(
            id=str(preference_id),
            init_point=_optional_str(data.get("init_point")),
            sandbox_init_point=_optional_str(data.get("sandbox_init_point")),
            raw=data,
        )

    async def fetch_payment(self, *, payment_id: str) -> GatewayPayment:
        data = await self._request("GET", f"/v1/payments/{payment_id}")
        return self._to_payment(data)
