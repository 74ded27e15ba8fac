from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional

from core.logging_config import get_logger
from core.payments.provider import PaymentGateway
from core.payments.types import PaymentStatusOutcome

log = get_logger(__name__)

PAYMENT_TOPIC = "payment"


@dataclass(frozen=True)
class NotificationMatch:
    topic: str
    payment_id: str
    source: str

    @property
    def actionable(self) -> bool:
        return self.topic == PAYMENT_TOPIC


@dataclass(frozen=True)
class ReconciliationResult:
    payment_id: str
    status: str | None
    status_detail: str | None
    outcome: PaymentStatusOutcome
    external_reference: str | None


ExtractionStrategy = Callable[[Mapping[str, Any], Mapping[str, Any]], Optional[NotificationMatch]]
OutcomeHandler = Callable[[ReconciliationResult], Awaitable[None]]


def _text(value: Any) -> str | None:
    if value is None or isinstance(value, (bool, dict, list)):
        return None
    text = str(value).strip()
    return text or None


def resolve_topic(query: Mapping[str, Any], body: Mapping[str, Any]) -> str | None:
    """Topic declared anywhere in the notification: query topic/type, then body type, then body topic."""
    return (
        _text(query.get("topic"))
        or _text(query.get("type"))
        or _text(body.get("type"))
        or _text(body.get("topic"))
    )


def from_query_params(query: Mapping[str, Any], body: Mapping[str, Any]) -> NotificationMatch | None:
    payment_id = _text(query.get("id")) or _text(query.get("data.id"))
    topic = resolve_topic(query, body)
    if topic and payment_id:
        return NotificationMatch(topic=topic, payment_id=payment_id, source="query")
    return None


def from_body_data_id(query: Mapping[str, Any], body: Mapping[str, Any]) -> NotificationMatch | None:
    data = body.get("data")
    payment_id = _text(data.get("id")) if isinstance(data, Mapping) else None
    topic = _text(body.get("type")) or resolve_topic(query, body)
    if topic and payment_id:
        return NotificationMatch(topic=topic, payment_id=payment_id, source="data.id")
    return None


def from_body_resource(query: Mapping[str, Any], body: Mapping[str, Any]) -> NotificationMatch | None:
    resource = _text(body.get("resource"))
    topic = _text(body.get("topic")) or resolve_topic(query, body)
    if not resource or not topic:
        return None
    # resource is either the bare id or a URL ending in it
    payment_id = resource.rstrip("/").rsplit("/", 1)[-1]
    if not payment_id:
        return None
    return NotificationMatch(topic=topic, payment_id=payment_id, source="resource")


EXTRACTION_STRATEGIES: tuple[ExtractionStrategy, ...] = (
    from_query_params,
    from_body_data_id,
    from_body_resource,
)


def extract_notification(
    query: Mapping[str, Any],
    body: Mapping[str, Any],
    strategies: tuple[ExtractionStrategy, ...] = EXTRACTION_STRATEGIES,
) -> NotificationMatch | None:
    """First payment match wins; otherwise the first match of any other topic."""
    fallback: NotificationMatch | None = None
    for strategy in strategies:
        match = strategy(query, body)
        if match is None:
            continue
        if match.actionable:
            return match
        if fallback is None:
            fallback = match
    return fallback


STATUS_OUTCOMES: dict[str, PaymentStatusOutcome] = {
    "approved": PaymentStatusOutcome.APPROVED,
    "pending": PaymentStatusOutcome.PENDING,
    "in_process": PaymentStatusOutcome.PENDING,
    "authorized": PaymentStatusOutcome.PENDING,
    "rejected": PaymentStatusOutcome.REJECTED,
    "cancelled": PaymentStatusOutcome.CANCELLED,
    "refunded": PaymentStatusOutcome.REFUNDED,
    "charged_back": PaymentStatusOutcome.REFUNDED,
}


def classify_status(status: str | None) -> PaymentStatusOutcome:
    if not status:
        return PaymentStatusOutcome.OTHER
    return STATUS_OUTCOMES.get(status.strip().lower(), PaymentStatusOutcome.OTHER)


async def log_payment_outcome(result: ReconciliationResult) -> None:
    log.info(
        f"[Ref: {result.external_reference}] Payment {result.payment_id} is "
        f"{result.status} -> {result.outcome.value}"
    )


class WebhookReconciler:
    def __init__(
        self,
        gateway: PaymentGateway,
        strategies: tuple[ExtractionStrategy, ...] = EXTRACTION_STRATEGIES,
    ) -> None:
        self._gateway = gateway
        self._strategies = strategies

    def extract(self, query: Mapping[str, Any], body: Mapping[str, Any]) -> NotificationMatch | None:
        return extract_notification(query, body, self._strategies)

    async def reconcile(self, match: NotificationMatch) -> ReconciliationResult:
        payment = await self._gateway.fetch_payment(payment_id=match.payment_id)
        return ReconciliationResult(
            payment_id=payment.id,
            status=payment.status,
            status_detail=payment.status_detail,
            outcome=classify_status(payment.status),
            external_reference=payment.external_reference,
        )
