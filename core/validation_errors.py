from __future__ import annotations

from typing import Any, Iterable, Mapping

_REQUEST_LOCATIONS = frozenset({"body", "query", "path", "header", "cookie"})
_VALIDATOR_PREFIXES = ("Value error, ", "Assertion failed, ")


def _split_location(loc: Any) -> tuple[str, str]:
    if isinstance(loc, (str, int)):
        loc = (loc,)
    parts = [str(part) for part in loc or ()]
    location = parts.pop(0) if parts and parts[0] in _REQUEST_LOCATIONS else "body"
    return location, ".".join(parts) or "(root)"


def _clean_message(message: str) -> str:
    # pydantic prefixes messages raised from custom validators
    for prefix in _VALIDATOR_PREFIXES:
        if message.startswith(prefix):
            return message[len(prefix):]
    return message


def _summary(missing_fields: list[str], error_count: int) -> str:
    if missing_fields:
        noun = "field" if len(missing_fields) == 1 else "fields"
        return f"Validation failed: missing required {noun}: {', '.join(missing_fields)}."
    noun = "field" if error_count == 1 else "fields"
    return f"Validation failed for {error_count} {noun}."


def format_validation_error_details(errors: Iterable[Mapping[str, Any]]) -> dict[str, Any]:
    """Flatten pydantic errors into the order API's error details."""
    field_errors: list[dict[str, str]] = []
    missing_fields: list[str] = []

    for error in errors:
        location, path = _split_location(error.get("loc"))
        error_type = str(error.get("type", "validation_error"))
        field_errors.append(
            {
                "path": path,
                "location": location,
                "message": _clean_message(str(error.get("msg", "Invalid value"))),
                "errorType": error_type,
            }
        )
        if error_type == "missing" and path not in missing_fields:
            missing_fields.append(path)

    return {
        "summary": _summary(missing_fields, len(field_errors)),
        "missingFields": missing_fields,
        "fieldErrors": field_errors,
        "messages": [f"{item['path']}: {item['message']}" for item in field_errors],
    }
