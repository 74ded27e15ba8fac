from __future__ import annotations

from fastapi import Request

from core.errors import configuration_missing
from core.payments.mercadopago_provider import MercadoPagoGateway
from core.payments.provider import PaymentGateway
from core.settings import Settings


class PaymentManager:
    """Pairs the immutable settings with the gateway client built from them."""

    def __init__(self, *, settings: Settings, gateway: PaymentGateway) -> None:
        self._settings = settings
        self._gateway = gateway

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def gateway(self) -> PaymentGateway:
        return self._gateway

    @classmethod
    def from_settings(cls, settings: Settings) -> "PaymentManager":
        if not settings.mercadopago_access_token:
            raise RuntimeError("MERCADOPAGO_ACCESS_TOKEN must be configured before payments can be created")

        gateway = MercadoPagoGateway(
            access_token=settings.mercadopago_access_token,
            base_url=settings.mercadopago_api_url,
            timeout_seconds=settings.mercadopago_timeout_seconds,
        )
        return cls(settings=settings, gateway=gateway)

    async def aclose(self) -> None:
        await self._gateway.aclose()


def get_payment_manager(request: Request) -> PaymentManager:
    manager = getattr(request.app.state, "payment_manager", None)
    if manager is None:
        raise configuration_missing(
            "MERCADOPAGO_ACCESS_TOKEN",
            "Payment gateway is not configured",
        )
    return manager
