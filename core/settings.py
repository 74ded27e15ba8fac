from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

DEFAULT_CORS_ORIGINS = (
    "https://acaiemcasasite.onrender.com",
    "https://edienayteste.onrender.com",
    "http://localhost:3000",
    "http://127.0.0.1:5500",
)
DEFAULT_MERCADOPAGO_API_URL = "https://api.mercadopago.com"
DEFAULT_ORDER_LABEL = "Pedido Açaí em Casa"


def _split_csv(value: str | None) -> tuple[str, ...]:
    if not value:
        return tuple()
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _env(name: str) -> str | None:
    raw_value = os.getenv(name)
    if raw_value is None:
        return None
    normalized = raw_value.strip()
    return normalized or None


def _flag(name: str, default: str) -> bool:
    return (_env(name) or default).lower() in {"1", "true", "yes"}


def _strip_url(value: str | None) -> str | None:
    if value is None:
        return None
    return value.rstrip("/") or None


def collect_missing_required_env_vars() -> list[str]:
    missing: list[str] = []

    always_required = ("MERCADOPAGO_ACCESS_TOKEN",)
    for var_name in always_required:
        if _env(var_name) is None:
            missing.append(var_name)

    return sorted(set(missing))


def collect_invalid_env_values() -> list[str]:
    invalid_values: list[str] = []

    port = _env("PORT")
    if port is not None:
        try:
            parsed_port = int(port)
            if parsed_port <= 0:
                raise ValueError("must be positive")
        except ValueError:
            invalid_values.append("PORT must be a positive integer")

    timeout = _env("MERCADOPAGO_TIMEOUT_SECONDS")
    if timeout is not None:
        try:
            parsed_timeout = float(timeout)
            if parsed_timeout <= 0:
                raise ValueError("must be positive")
        except ValueError:
            invalid_values.append("MERCADOPAGO_TIMEOUT_SECONDS must be a positive number")

    for url_var in ("BACKEND_URL", "FRONTEND_URL", "MERCADOPAGO_API_URL"):
        value = _env(url_var)
        if value is not None and not value.startswith(("http://", "https://")):
            invalid_values.append(f"{url_var} must start with http:// or https://")

    return invalid_values


def validate_required_environment() -> None:
    missing_vars = collect_missing_required_env_vars()
    invalid_values = collect_invalid_env_values()
    if not missing_vars and not invalid_values:
        return

    message_lines = ["Application startup blocked by invalid environment configuration."]
    if missing_vars:
        message_lines.append("")
        message_lines.append("Missing required environment variables:")
        message_lines.extend(f"- {name}" for name in missing_vars)
    if invalid_values:
        message_lines.append("")
        message_lines.append("Invalid environment values:")
        message_lines.extend(f"- {message}" for message in invalid_values)
    raise RuntimeError("\n".join(message_lines))


@dataclass(frozen=True)
class Settings:
    env: str
    port: int
    mercadopago_access_token: str
    mercadopago_api_url: str
    mercadopago_timeout_seconds: float
    backend_url: str | None
    frontend_url: str | None
    cors_origins: tuple[str, ...]
    debug_include_error_details: bool
    order_label: str
    external_reference_prefix: str
    enforce_order_total: bool

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"

    @property
    def include_error_details(self) -> bool:
        return self.debug_include_error_details and not self.is_production

    @property
    def masked_access_token(self) -> str:
        return f"{self.mercadopago_access_token[:10]}..."

    @property
    def allowed_origins(self) -> tuple[str, ...]:
        origins = list(self.cors_origins)
        if self.frontend_url and self.frontend_url not in origins:
            origins.append(self.frontend_url)
        return tuple(origins)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    validate_required_environment()

    cors_origins = _split_csv(os.getenv("CORS_ORIGINS")) or DEFAULT_CORS_ORIGINS

    return Settings(
        env=_env("ENV") or "development",
        port=int(_env("PORT") or "3000"),
        mercadopago_access_token=_env("MERCADOPAGO_ACCESS_TOKEN") or "",
        mercadopago_api_url=_strip_url(_env("MERCADOPAGO_API_URL")) or DEFAULT_MERCADOPAGO_API_URL,
        mercadopago_timeout_seconds=float(_env("MERCADOPAGO_TIMEOUT_SECONDS") or "10"),
        backend_url=_strip_url(_env("BACKEND_URL")),
        frontend_url=_strip_url(_env("FRONTEND_URL")),
        cors_origins=cors_origins,
        debug_include_error_details=_flag("DEBUG_INCLUDE_ERROR_DETAILS", "true"),
        order_label=_env("ORDER_LABEL") or DEFAULT_ORDER_LABEL,
        external_reference_prefix=_env("EXTERNAL_REFERENCE_PREFIX") or "acai",
        enforce_order_total=_flag("ENFORCE_ORDER_TOTAL", "false"),
    )
