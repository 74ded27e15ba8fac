from __future__ import annotations

from enum import Enum
from typing import Any

from fastapi import HTTPException, status


class ErrorCode(str, Enum):
    VALIDATION_FAILED = "VALIDATION_FAILED"
    CONFIGURATION_MISSING = "CONFIGURATION_MISSING"
    PAYMENT_GATEWAY_CONTRACT = "PAYMENT_GATEWAY_CONTRACT"
    PAYMENT_GATEWAY_ERROR = "PAYMENT_GATEWAY_ERROR"
    ORIGIN_NOT_ALLOWED = "ORIGIN_NOT_ALLOWED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AppException(HTTPException):
    def __init__(
        self,
        *,
        status_code: int,
        code: ErrorCode,
        message: str,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        detail = {
            "message": message,
            "code": code.value,
            "details": details,
        }
        self.code = code
        self.message = message
        self.details = details
        super().__init__(status_code=status_code, detail=detail, headers=headers)


def order_validation_failed(
    errors: list[str],
    *,
    received_data: Any = None,
    field_errors: list[dict[str, str]] | None = None,
    summary: str | None = None,
) -> AppException:
    return AppException(
        status_code=status.HTTP_400_BAD_REQUEST,
        code=ErrorCode.VALIDATION_FAILED,
        message="Order data is incomplete or invalid.",
        details={
            "summary": summary,
            "errors": errors,
            "fieldErrors": field_errors or [],
            "receivedData": received_data,
        },
    )


def configuration_missing(setting: str, message: str) -> AppException:
    return AppException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code=ErrorCode.CONFIGURATION_MISSING,
        message=message,
        details={"setting": setting},
    )


def gateway_contract_violation(message: str, raw_response: Any) -> AppException:
    return AppException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code=ErrorCode.PAYMENT_GATEWAY_CONTRACT,
        message=message,
        details={"gatewayResponse": raw_response},
    )


def gateway_request_failed(message: str, details: Any | None = None) -> AppException:
    return AppException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code=ErrorCode.PAYMENT_GATEWAY_ERROR,
        message=message,
        details=details,
    )


def origin_not_allowed(origin: str) -> AppException:
    return AppException(
        status_code=status.HTTP_403_FORBIDDEN,
        code=ErrorCode.ORIGIN_NOT_ALLOWED,
        message="Origin not allowed by CORS",
        details={"origin": origin},
    )
