from core.payments.manager import PaymentManager, get_payment_manager
from core.payments.mercadopago_provider import MercadoPagoGateway
from core.payments.types import (
    CardPaymentRequest,
    GatewayPayment,
    GatewayPreference,
    Payer,
    PaymentMethod,
    PaymentRequest,
    PaymentStatusOutcome,
    PreferenceItem,
    PreferenceRequest,
)

__all__ = [
    "CardPaymentRequest",
    "GatewayPayment",
    "GatewayPreference",
    "MercadoPagoGateway",
    "Payer",
    "PaymentManager",
    "PaymentMethod",
    "PaymentRequest",
    "PaymentStatusOutcome",
    "PreferenceItem",
    "PreferenceRequest",
    "get_payment_manager",
]
