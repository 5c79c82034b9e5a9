from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any

from flask import request

from .time_utils import parse_iso_date


# Maximum money amount: $9,999,999.99 (999,999,999 cents)
MAX_PRICE_CENTS = 999_999_999


class ValidationError(ValueError):
    """400-level input problem."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class NotFoundError(LookupError):
    """404-level missing record (product, user, invoice, ...)."""


def json_body() -> dict:
    """Request JSON object; {} when there is no body, ValidationError for any other JSON value."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    return data


@dataclass(frozen=True)
class RecordValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for create
    - int_fields / cents_fields / optional_fields: how each value is coerced
    """
    writable_fields: set[str]
    required_on_create: set[str] = frozenset()
    int_fields: set[str] = frozenset()
    cents_fields: set[str] = frozenset()
    optional_fields: set[str] = frozenset()


def coerce_int(value: Any, field: str, *, minimum: int | None = None) -> int:
    """
    Strict integer coercion: rejects bools, floats, decimals and scientific notation.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer")
        if "e" in stripped.lower():
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
        if "." in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)")
        try:
            result = int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    elif isinstance(value, float):
        raise ValidationError(f"{field} must be an integer, not a decimal")
    else:
        raise ValidationError(f"{field} must be an integer")

    if minimum is not None and result < minimum:
        raise ValidationError(f"{field} must be at least {minimum}")
    return result


def coerce_cents(value: Any, field: str) -> int:
    cents = coerce_int(value, field, minimum=0)
    if cents > MAX_PRICE_CENTS:
        raise ValidationError(f"{field} exceeds maximum of {MAX_PRICE_CENTS}")
    return cents


def coerce_text(value: Any, field: str, *, required: bool = True) -> str | None:
    if value is None:
        if required:
            raise ValidationError(f"{field} is required")
        return None
    text = str(value).strip()
    if required and not text:
        raise ValidationError(f"{field} is required")
    return text


def coerce_date(value: Any, field: str) -> str:
    """Normalize to an ISO calendar date string (YYYY-MM-DD)."""
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be an ISO-8601 date")
    try:
        parsed = parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{field} must be an ISO-8601 date")
    if parsed is None:
        raise ValidationError(f"{field} must be an ISO-8601 date")
    return parsed.isoformat()


def validate_payload(
    *,
    record_type: type,
    payload: dict | None,
    policy: RecordValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against a record dataclass and a policy.
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    known = {f.name for f in fields(record_type)}

    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in known:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}
    for k, raw in payload.items():
        if k in policy.cents_fields:
            patch[k] = coerce_cents(raw, k)
        elif k in policy.int_fields:
            patch[k] = coerce_int(raw, k)
        else:
            text = coerce_text(raw, k, required=k in policy.required_on_create)
            if k in policy.optional_fields:
                patch[k] = text or None
            else:
                patch[k] = text or ""

    return patch
