from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CardPayer(BaseModel):
    model_config = ConfigDict(extra="allow")

    email: str = Field(strict=True)

    @field_validator("email")
    @classmethod
    def email_has_at(cls, value: str) -> str:
        value = value.strip()
        if "@" not in value:
            raise ValueError("payer.email must be a valid email address")
        return value


class CardPaymentIn(BaseModel):
    token: str = Field(strict=True, min_length=1)
    transaction_amount: float = Field(strict=True, gt=0, allow_inf_nan=False)
    installments: int = Field(strict=True, gt=0)
    payer: CardPayer
    issuer_id: str | int | None = None
    payment_method_id: str | None = None
    external_reference: str | None = None
    description: str | None = None


class PixPaymentOut(BaseModel):
    paymentId: str
    qrCodeImage: str
    pixCopiaECola: str
    status: str | None = None
    externalReference: str


class CardPaymentOut(BaseModel):
    id: str
    status: str | None = None
    status_detail: str | None = None
    externalReference: str


class PreferenceOut(BaseModel):
    preferenceId: str
    initPoint: str
    sandboxInitPoint: str | None = None
    externalReference: str


class WebhookAck(BaseModel):
    received: bool = True
    actionable: bool
    topic: str | None = None
    paymentId: str | None = None
    source: str | None = None
    details: dict[str, Any] | None = None
