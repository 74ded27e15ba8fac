from __future__ import annotations

import secrets
import string
import time
from decimal import ROUND_HALF_UP, Decimal

from core.errors import configuration_missing
from core.payments.types import (
    CardPaymentRequest,
    Payer,
    PaymentMethod,
    PaymentRequest,
    PreferenceItem,
    PreferenceRequest,
)
from core.settings import Settings
from schemas.order_schema import LineItem, OrderRequest
from schemas.payment_schema import CardPaymentIn

DESCRIPTION_MAX_LENGTH = 255
STATEMENT_DESCRIPTOR_MAX_LENGTH = 22
WEBHOOK_PATH = "/mercadopago-webhook"
BACK_URL_PATHS = {
    "success": "/checkout/success",
    "failure": "/checkout/failure",
    "pending": "/checkout/pending",
}

_REFERENCE_ALPHABET = string.digits + string.ascii_lowercase
_CENT = Decimal("0.01")


def round_amount(value: float | Decimal) -> Decimal:
    return Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)


def generate_external_reference(prefix: str) -> str:
    suffix = "".join(secrets.choice(_REFERENCE_ALPHABET) for _ in range(9))
    return f"{prefix}-{int(time.time() * 1000)}-{suffix}"


def describe_item(item: LineItem) -> str:
    text = f"{item.title} ({item.quantity}x)"
    if item.complements:
        text += " (" + ", ".join(complement.name for complement in item.complements) + ")"
    return text


def build_description(order_label: str, customer_name: str, items: list[LineItem]) -> str:
    items_description = ", ".join(describe_item(item) for item in items)
    return f"{order_label} - {customer_name}: {items_description}"[:DESCRIPTION_MAX_LENGTH]


class PaymentRequestBuilder:
    """
    Turns validated client payloads into gateway requests.

    Each build generates a fresh external reference; everything else is a
    pure function of the payload and the settings. A missing BACKEND_URL
    aborts every build, so no request ever leaves without a callback URL.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def notification_url(self) -> str:
        if not self._settings.backend_url:
            raise configuration_missing(
                "BACKEND_URL",
                "BACKEND_URL is not configured; cannot build the payment notification URL",
            )
        return f"{self._settings.backend_url}{WEBHOOK_PATH}"

    def back_urls(self) -> dict[str, str]:
        if not self._settings.frontend_url:
            raise configuration_missing(
                "FRONTEND_URL",
                "FRONTEND_URL is not configured; cannot build the checkout return URLs",
            )
        return {key: f"{self._settings.frontend_url}{path}" for key, path in BACK_URL_PATHS.items()}

    def external_reference(self) -> str:
        return generate_external_reference(self._settings.external_reference_prefix)

    def build_pix_payment(self, order: OrderRequest) -> PaymentRequest:
        notification_url = self.notification_url()
        customer_name = order.customer_name.strip()
        return PaymentRequest(
            transaction_amount=round_amount(order.total),
            description=build_description(self._settings.order_label, customer_name, order.items),
            payment_method_id=PaymentMethod.PIX.value,
            payer=Payer(email=order.customer_email.strip(), first_name=customer_name),
            external_reference=self.external_reference(),
            notification_url=notification_url,
        )

    def build_card_payment(self, card: CardPaymentIn) -> CardPaymentRequest:
        notification_url = self.notification_url()
        description = card.description[:DESCRIPTION_MAX_LENGTH] if card.description else None
        return CardPaymentRequest(
            token=card.token,
            transaction_amount=round_amount(card.transaction_amount),
            installments=card.installments,
            payer=card.payer.model_dump(),
            external_reference=card.external_reference or self.external_reference(),
            notification_url=notification_url,
            description=description,
            issuer_id=str(card.issuer_id) if card.issuer_id is not None else None,
            payment_method_id=card.payment_method_id,
        )

    def build_preference(self, order: OrderRequest) -> PreferenceRequest:
        notification_url = self.notification_url()
        back_urls = self.back_urls()
        items = tuple(
            PreferenceItem(
                title=item.title,
                quantity=item.quantity,
                unit_price=round_amount(item.unit_price),
                description=", ".join(c.name for c in item.complements)[:DESCRIPTION_MAX_LENGTH] or None,
            )
            for item in order.items
        )
        return PreferenceRequest(
            items=items,
            payer={"name": order.customer_name.strip(), "email": order.customer_email.strip()},
            back_urls=back_urls,
            external_reference=self.external_reference(),
            notification_url=notification_url,
            statement_descriptor=self._settings.order_label[:STATEMENT_DESCRIPTOR_MAX_LENGTH],
        )
