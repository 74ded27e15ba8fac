from __future__ import annotations

from typing import Protocol

from core.payments.types import (
    CardPaymentRequest,
    GatewayPayment,
    GatewayPreference,
    PaymentRequest,
    PreferenceRequest,
)


class PaymentGateway(Protocol):
    provider_name: str

    async def create_payment(
        self, payload: PaymentRequest | CardPaymentRequest
    ) -> GatewayPayment:
        ...

    async def create_preference(self, payload: PreferenceRequest) -> GatewayPreference:
        ...

    async def fetch_payment(self, *, payment_id: str) -> GatewayPayment:
        ...

    async def aclose(self) -> None:
        ...
