from __future__ import annotations

import traceback
from datetime import datetime, timezone
from typing import Any

from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def error_payload(
    message: str,
    *,
    code: str = "HTTP_EXCEPTION",
    details: Any = None,
    request_id: str | None = None,
    debug: dict[str, Any] | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "success": False,
        "message": message,
        "code": code,
        "details": details,
        "timestamp": utc_timestamp(),
    }
    if request_id:
        payload["requestId"] = request_id
    if debug:
        payload["debug"] = debug
    return payload


def error_response(
    *,
    status_code: int,
    message: str,
    code: str = "HTTP_EXCEPTION",
    details: Any = None,
    headers: dict[str, str] | None = None,
    request_id: str | None = None,
    debug: dict[str, Any] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        headers=headers,
        content=jsonable_encoder(
            error_payload(
                message=message,
                code=code,
                details=details,
                request_id=request_id,
                debug=debug,
            )
        ),
    )


def exception_debug_info(exc: BaseException) -> dict[str, Any]:
    cause = exc.__cause__ or exc.__context__
    return {
        "type": type(exc).__name__,
        "stack": traceback.format_exception(type(exc), exc, exc.__traceback__),
        "cause": repr(cause) if cause is not None else None,
    }


def _parse_http_exception_detail(detail: Any) -> tuple[str, str, Any]:
    if isinstance(detail, str):
        return detail, "HTTP_EXCEPTION", None

    if isinstance(detail, dict):
        message = detail.get("message")
        if isinstance(message, str) and message.strip():
            code = detail.get("code", "HTTP_EXCEPTION")
            details = detail.get("details")
            remaining = {k: v for k, v in detail.items() if k not in {"message", "code", "details"}}
            if remaining:
                details = {"extra": remaining, "details": details}
            return message, code, details

        nested_detail = detail.get("detail")
        if isinstance(nested_detail, str) and nested_detail.strip():
            return nested_detail, "HTTP_EXCEPTION", detail

        return "Request failed", "HTTP_EXCEPTION", detail

    if detail is None:
        return "Request failed", "HTTP_EXCEPTION", None

    return str(detail), "HTTP_EXCEPTION", None


def request_id_from_request(request: Request | None) -> str | None:
    if request is None:
        return None
    return getattr(request.state, "request_id", None)


def http_exception_response(
    exc: HTTPException,
    request: Request | None = None,
    *,
    include_debug: bool = False,
) -> JSONResponse:
    message, code, details = _parse_http_exception_detail(exc.detail)
    debug = exception_debug_info(exc) if include_debug and exc.__cause__ is not None else None
    return error_response(
        status_code=exc.status_code,
        message=message,
        code=code,
        details=details,
        request_id=request_id_from_request(request),
        headers=exc.headers,
        debug=debug,
    )
