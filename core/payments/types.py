from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any


class PaymentMethod(str, Enum):
    PIX = "pix"


class PaymentStatusOutcome(str, Enum):
    APPROVED = "approved"
    PENDING = "pending"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    OTHER = "other"


@dataclass(frozen=True)
class Payer:
    email: str
    first_name: str | None = None

    def to_gateway(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"email": self.email}
        if self.first_name:
            payload["first_name"] = self.first_name
        return payload


@dataclass(frozen=True)
class PaymentRequest:
    transaction_amount: Decimal
    description: str
    payment_method_id: str
    payer: Payer
    external_reference: str
    notification_url: str

    def to_gateway(self) -> dict[str, Any]:
        return {
            "transaction_amount": float(self.transaction_amount),
            "description": self.description,
            "payment_method_id": self.payment_method_id,
            "payer": self.payer.to_gateway(),
            "external_reference": self.external_reference,
            "notification_url": self.notification_url,
        }


@dataclass(frozen=True)
class CardPaymentRequest:
    token: str
    transaction_amount: Decimal
    installments: int
    payer: dict[str, Any]
    external_reference: str
    notification_url: str
    description: str | None = None
    issuer_id: str | None = None
    payment_method_id: str | None = None

    def to_gateway(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "token": self.token,
            "transaction_amount": float(self.transaction_amount),
            "installments": self.installments,
            "payer": self.payer,
            "external_reference": self.external_reference,
            "notification_url": self.notification_url,
        }
        if self.description:
            payload["description"] = self.description
        if self.issuer_id is not None:
            payload["issuer_id"] = self.issuer_id
        if self.payment_method_id:
            payload["payment_method_id"] = self.payment_method_id
        return payload


@dataclass(frozen=True)
class PreferenceItem:
    title: str
    quantity: int
    unit_price: Decimal
    description: str | None = None
    currency_id: str = "BRL"

    def to_gateway(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "title": self.title,
            "quantity": self.quantity,
            "unit_price": float(self.unit_price),
            "currency_id": self.currency_id,
        }
        if self.description:
            payload["description"] = self.description
        return payload


@dataclass(frozen=True)
class PreferenceRequest:
    items: tuple[PreferenceItem, ...]
    payer: dict[str, Any]
    back_urls: dict[str, str]
    external_reference: str
    notification_url: str
    statement_descriptor: str | None = None
    auto_return: str = "approved"

    def to_gateway(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "items": [item.to_gateway() for item in self.items],
            "payer": self.payer,
            "back_urls": self.back_urls,
            "auto_return": self.auto_return,
            "external_reference": self.external_reference,
            "notification_url": self.notification_url,
        }
        if self.statement_descriptor:
            payload["statement_descriptor"] = self.statement_descriptor
        return payload


@dataclass(frozen=True)
class GatewayPayment:
    id: str
    status: str | None
    status_detail: str | None
    external_reference: str | None
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class GatewayPreference:
    id: str
    init_point: str | None
    sandbox_init_point: str | None
    raw: dict[str, Any] = field(default_factory=dict)
