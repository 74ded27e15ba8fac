from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ValidationError

from core.errors import AppException, order_validation_failed
from core.validation_errors import format_validation_error_details
from schemas.order_schema import OrderRequest
from schemas.payment_schema import CardPaymentIn
from services.payment_builder import round_amount


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating an untrusted payload; `value` is set only when `errors` is empty."""

    value: Any = None
    errors: list[str] = field(default_factory=list)
    field_errors: list[dict[str, str]] = field(default_factory=list)
    summary: str | None = None

    @property
    def ok(self) -> bool:
        return not self.errors


def _validate_model(model: type[BaseModel], payload: Any) -> ValidationResult:
    try:
        value = model.model_validate(payload)
    except ValidationError as err:
        details = format_validation_error_details(
            err.errors(include_url=False, include_context=False, include_input=False)
        )
        return ValidationResult(
            errors=details["messages"],
            field_errors=details["fieldErrors"],
            summary=details["summary"],
        )
    return ValidationResult(value=value)


def items_total(order: OrderRequest) -> Decimal:
    return sum(
        (Decimal(str(item.unit_price)) * item.quantity for item in order.items),
        Decimal("0"),
    )


def validate_order_request(payload: Any, *, enforce_total: bool = False) -> ValidationResult:
    result = _validate_model(OrderRequest, payload)
    if not result.ok or not enforce_total:
        return result

    order: OrderRequest = result.value
    expected = round_amount(items_total(order))
    if round_amount(order.total) != expected:
        message = f"total does not match the sum of the items (expected {expected})"
        return ValidationResult(
            errors=[f"total: {message}"],
            field_errors=[
                {"path": "total", "location": "body", "message": message, "errorType": "total_mismatch"}
            ],
            summary="Validation failed for 1 field.",
        )
    return result


def validate_card_payment(payload: Any) -> ValidationResult:
    return _validate_model(CardPaymentIn, payload)


def validation_exception(result: ValidationResult, received_data: Any) -> AppException:
    return order_validation_failed(
        result.errors,
        received_data=received_data,
        field_errors=result.field_errors,
        summary=result.summary,
    )
