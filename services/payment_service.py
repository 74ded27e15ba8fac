from __future__ import annotations

from typing import Any

from core.errors import gateway_contract_violation
from core.logging_config import get_logger
from core.payments import GatewayPayment, PaymentManager
from schemas.payment_schema import CardPaymentOut, PixPaymentOut, PreferenceOut
from services.order_validation import (
    validate_card_payment,
    validate_order_request,
    validation_exception,
)
from services.payment_builder import PaymentRequestBuilder

log = get_logger(__name__)


def _pix_transaction_data(payment: GatewayPayment) -> tuple[str, str]:
    point_of_interaction = payment.raw.get("point_of_interaction")
    transaction_data = (
        point_of_interaction.get("transaction_data") if isinstance(point_of_interaction, dict) else None
    )
    if not isinstance(transaction_data, dict):
        raise gateway_contract_violation("PIX transaction data missing from gateway response", payment.raw)

    qr_code_base64 = transaction_data.get("qr_code_base64")
    qr_code = transaction_data.get("qr_code")
    if not qr_code_base64 or not qr_code:
        raise gateway_contract_violation("PIX QR code missing from gateway response", payment.raw)
    return str(qr_code_base64), str(qr_code)


async def create_pix_payment(*, manager: PaymentManager, payload: Any) -> PixPaymentOut:
    result = validate_order_request(payload, enforce_total=manager.settings.enforce_order_total)
    if not result.ok:
        log.warning(f"PIX order rejected: {result.errors}")
        raise validation_exception(result, payload)

    payment_request = PaymentRequestBuilder(manager.settings).build_pix_payment(result.value)
    log.info(
        f"[Ref: {payment_request.external_reference}] Creating PIX payment of "
        f"{payment_request.transaction_amount} - {payment_request.description}"
    )

    payment = await manager.gateway.create_payment(payment_request)
    qr_code_base64, qr_code = _pix_transaction_data(payment)

    log.info(f"[Ref: {payment_request.external_reference}] PIX payment {payment.id} created ({payment.status})")
    return PixPaymentOut(
        paymentId=payment.id,
        qrCodeImage=f"data:image/png;base64,{qr_code_base64}",
        pixCopiaECola=qr_code,
        status=payment.status,
        externalReference=payment_request.external_reference,
    )


async def create_card_payment(*, manager: PaymentManager, payload: Any) -> CardPaymentOut:
    result = validate_card_payment(payload)
    if not result.ok:
        log.warning(f"Card payment rejected: {result.errors}")
        raise validation_exception(result, payload)

    payment_request = PaymentRequestBuilder(manager.settings).build_card_payment(result.value)
    log.info(
        f"[Ref: {payment_request.external_reference}] Creating card payment of "
        f"{payment_request.transaction_amount} in {payment_request.installments} installment(s)"
    )

    payment = await manager.gateway.create_payment(payment_request)

    log.info(
        f"[Ref: {payment_request.external_reference}] Card payment {payment.id} "
        f"{payment.status} ({payment.status_detail})"
    )
    return CardPaymentOut(
        id=payment.id,
        status=payment.status,
        status_detail=payment.status_detail,
        externalReference=payment_request.external_reference,
    )


async def create_checkout_preference(*, manager: PaymentManager, payload: Any) -> PreferenceOut:
    result = validate_order_request(payload, enforce_total=manager.settings.enforce_order_total)
    if not result.ok:
        log.warning(f"Checkout preference rejected: {result.errors}")
        raise validation_exception(result, payload)

    preference_request = PaymentRequestBuilder(manager.settings).build_preference(result.value)
    log.info(
        f"[Ref: {preference_request.external_reference}] Creating checkout preference "
        f"with {len(preference_request.items)} item(s)"
    )

    preference = await manager.gateway.create_preference(preference_request)
    if not preference.init_point:
        raise gateway_contract_violation("Checkout init_point missing from gateway response", preference.raw)

    log.info(f"[Ref: {preference_request.external_reference}] Checkout preference {preference.id} created")
    return PreferenceOut(
        preferenceId=preference.id,
        initPoint=preference.init_point,
        sandboxInitPoint=preference.sandbox_init_point,
        externalReference=preference_request.external_reference,
    )
