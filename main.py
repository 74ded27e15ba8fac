from __future__ import annotations

import sys
import time
import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from api.mercadopago.payments_route import router as mercadopago_payments_router
from api.mercadopago.webhook_route import router as mercadopago_webhook_router
from core.errors import ErrorCode, origin_not_allowed
from core.logging_config import get_logger, setup_logging
from core.payments import PaymentManager
from core.response_envelope import (
    error_response,
    exception_debug_info,
    http_exception_response,
    request_id_from_request,
    utc_timestamp,
)
from core.settings import Settings, get_settings
from core.validation_errors import format_validation_error_details

setup_logging()
log = get_logger(__name__)

STARTED_AT = time.monotonic()
_MUTATING_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class RequestTimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        elapsed = time.time() - start_time
        response.headers["X-Process-Time"] = str(elapsed)
        log.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed * 1000:.1f} ms)")
        return response


class OriginAllowListMiddleware(BaseHTTPMiddleware):
    """Rejects mutating calls from browser origins outside the allow-list; requests without Origin pass."""

    def __init__(self, app, allowed_origins: tuple[str, ...]) -> None:
        super().__init__(app)
        self._allowed_origins = set(allowed_origins)

    async def dispatch(self, request: Request, call_next):
        origin = request.headers.get("origin")
        if origin and request.method in _MUTATING_METHODS and origin not in self._allowed_origins:
            log.warning(f"Blocked {request.method} {request.url.path} from origin {origin}")
            return http_exception_response(origin_not_allowed(origin), request)
        return await call_next(request)


def _memory_usage() -> dict[str, int]:
    # getrusage is POSIX only
    if sys.platform == "win32":
        return {}
    import resource

    usage = resource.getrusage(resource.RUSAGE_SELF)
    return {"maxRssKb": usage.ru_maxrss}


def create_app(settings: Settings | None = None, manager: PaymentManager | None = None) -> FastAPI:
    settings = settings or get_settings()
    manager = manager or PaymentManager.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info(f"Mercado Pago token configured: {settings.masked_access_token}")
        log.info(f"Environment: {settings.env} - port {settings.port}")
        log.info(f"Backend URL: {settings.backend_url or 'not configured'}")
        log.info(f"Allowed origins: {', '.join(settings.allowed_origins)}")
        if not settings.backend_url:
            log.warning("BACKEND_URL is not set; payment creation will fail until it is configured")
        try:
            yield
        finally:
            await manager.aclose()

    app = FastAPI(lifespan=lifespan, title="Mercado Pago Payments API")
    app.state.settings = settings
    app.state.payment_manager = manager

    app.add_middleware(OriginAllowListMiddleware, allowed_origins=settings.allowed_origins)
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(HTTPException)
    async def custom_http_exception_handler(request: Request, exc: HTTPException):
        if exc.status_code >= 500:
            log.error(f"{request.method} {request.url.path} failed: {exc.detail}")
        return http_exception_response(exc=exc, request=request, include_debug=settings.include_error_details)

    @app.exception_handler(RequestValidationError)
    async def custom_validation_exception_handler(request: Request, exc: RequestValidationError):
        details = format_validation_error_details(list(exc.errors()))
        return error_response(
            status_code=400,
            message="Request body is invalid",
            code=ErrorCode.VALIDATION_FAILED.value,
            details={
                "summary": details["summary"],
                "errors": details["messages"],
                "fieldErrors": details["fieldErrors"],
            },
            request_id=request_id_from_request(request),
        )

    @app.exception_handler(Exception)
    async def custom_exception_handler(request: Request, exc: Exception):
        log.exception(f"Unhandled error on {request.method} {request.url.path}")
        return error_response(
            status_code=500,
            message="Internal Server Error",
            code=ErrorCode.INTERNAL_ERROR.value,
            details=str(exc) if settings.include_error_details else None,
            request_id=request_id_from_request(request),
            debug=exception_debug_info(exc) if settings.include_error_details else None,
        )

    @app.get("/", tags=["Health"])
    def read_root():
        return {
            "message": "Mercado Pago Payments API",
            "status": "Online",
            "timestamp": utc_timestamp(),
            "environment": settings.env,
            "mercadoPagoConfigured": bool(settings.mercadopago_access_token),
        }

    @app.get("/health", tags=["Health"])
    def health_check():
        return {
            "status": "OK",
            "uptime": round(time.monotonic() - STARTED_AT, 3),
            "timestamp": utc_timestamp(),
            "memory": _memory_usage(),
        }

    @app.get("/debug", tags=["Health"])
    def debug_info():
        return {
            "environment": settings.env,
            "port": settings.port,
            "mercadoPagoToken": "configured" if settings.mercadopago_access_token else "not configured",
            "backendUrl": settings.backend_url or "not configured",
            "frontendUrl": settings.frontend_url or "not configured",
            "allowedOrigins": list(settings.allowed_origins),
        }

    app.include_router(mercadopago_payments_router)
    app.include_router(mercadopago_webhook_router)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=get_settings().port)
