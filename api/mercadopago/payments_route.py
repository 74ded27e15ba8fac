from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, status

from core.payments import PaymentManager, get_payment_manager
from schemas.payment_schema import CardPaymentOut, PixPaymentOut, PreferenceOut
from services.payment_service import (
    create_card_payment,
    create_checkout_preference,
    create_pix_payment,
)

router = APIRouter(tags=["Payments"])

_ERROR_RESPONSES = {
    400: {"description": "Invalid or incomplete payload"},
    500: {"description": "Configuration or payment gateway error"},
}


@router.post(
    "/create-mercadopago-pix",
    response_model=PixPaymentOut,
    responses=_ERROR_RESPONSES,
)
async def create_pix(
    payload: Any = Body(default=None),
    manager: PaymentManager = Depends(get_payment_manager),
):
    """
    Create a PIX payment for an order.

    Expects `customerName`, `customerEmail`, `items` and `total`; answers
    with the QR code image (data URI) and the copy-paste PIX code.
    """
    return await create_pix_payment(manager=manager, payload=payload)


@router.post(
    "/create-mercadopago-card",
    response_model=CardPaymentOut,
    status_code=status.HTTP_201_CREATED,
    responses=_ERROR_RESPONSES,
)
async def create_card(
    payload: Any = Body(default=None),
    manager: PaymentManager = Depends(get_payment_manager),
):
    """Charge a card tokenized by the Mercado Pago frontend SDK."""
    return await create_card_payment(manager=manager, payload=payload)


@router.post(
    "/create-mercadopago-preference",
    response_model=PreferenceOut,
    responses=_ERROR_RESPONSES,
)
async def create_preference(
    payload: Any = Body(default=None),
    manager: PaymentManager = Depends(get_payment_manager),
):
    return await create_checkout_preference(manager=manager, payload=payload)
