from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from core.logging_config import get_logger
from core.payments import PaymentManager, get_payment_manager
from schemas.payment_schema import WebhookAck
from services.webhook_reconciler import OutcomeHandler, WebhookReconciler, log_payment_outcome

log = get_logger(__name__)

router = APIRouter(tags=["Webhooks"])


def get_outcome_handler(request: Request) -> OutcomeHandler:
    return getattr(request.app.state, "payment_outcome_handler", None) or log_payment_outcome


async def _read_json_body(request: Request) -> dict[str, Any]:
    raw = await request.body()
    if not raw:
        return {}
    try:
        body = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError):
        log.warning(f"Webhook body is not JSON: {raw[:200]!r}")
        return {}
    return body if isinstance(body, dict) else {}


@router.post(
    "/mercadopago-webhook",
    response_model=WebhookAck,
    responses={500: {"description": "Payment lookup failed; the gateway should retry"}},
)
async def mercadopago_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    manager: PaymentManager = Depends(get_payment_manager),
    outcome_handler: OutcomeHandler = Depends(get_outcome_handler),
):
    """
    Receive Mercado Pago notifications.

    Every parseable notification is acknowledged with 200. Only payment
    notifications trigger a lookup; its result is handed to the outcome
    handler after the response has been sent.
    """
    query = dict(request.query_params)
    body = await _read_json_body(request)
    log.info(f"Webhook received - query={query} body={body}")

    reconciler = WebhookReconciler(manager.gateway)
    match = reconciler.extract(query, body)
    if match is None or not match.actionable:
        log.info(f"Webhook not actionable: {match}")
        return WebhookAck(
            actionable=False,
            topic=match.topic if match else None,
            paymentId=match.payment_id if match else None,
            source=match.source if match else None,
        )

    log.info(f"Payment webhook for {match.payment_id} (from {match.source})")
    result = await reconciler.reconcile(match)
    background_tasks.add_task(outcome_handler, result)

    return WebhookAck(
        actionable=True,
        topic=match.topic,
        paymentId=match.payment_id,
        source=match.source,
        details={
            "status": result.status,
            "outcome": result.outcome.value,
            "externalReference": result.external_reference,
        },
    )
