# Overview: Input validation for staff-entered values and admin JSON payloads.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Boolean, Integer, String


class ValidationError(ValueError):
    """Bad input; the API answers 400 and nothing is written."""


class ConflictError(ValueError):
    """Input was well formed but a business rule refused it (409)."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Which keys of a JSON body may reach a model.

    writable_fields is the allowlist; anything else is rejected outright.
    required_on_create only applies when validating a create (partial=False).
    """
    writable_fields: set[str]
    required_on_create: set[str] = field(default_factory=set)


def coerce_int(value: Any, *, field: str = "value", message: str | None = None) -> int:
    """
    Whole number from JSON or a form field.

    ints and digit strings (optionally signed) pass; bools, floats, "2.5"
    and "1e3" do not, so a typo never silently truncates to a quantity.
    """
    error = message or f"{field} must be an integer"

    if isinstance(value, bool):
        raise ValidationError(error)
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        raise ValidationError(error)

    text = value.strip()
    digits = text[1:] if text[:1] in "+-" else text
    if not digits.isascii() or not digits.isdigit():
        raise ValidationError(error)
    return int(text)


def _clean_column_value(column, value: Any) -> Any:
    if isinstance(column.type, Boolean):
        if not isinstance(value, bool):
            raise ValidationError(f"{column.key} must be true or false")
        return value

    if isinstance(column.type, Integer):
        return coerce_int(value, field=column.key)

    if isinstance(column.type, String):
        text = str(value).strip()
        if not text and not column.nullable:
            raise ValidationError(f"{column.key} cannot be blank")
        if column.type.length and len(text) > column.type.length:
            raise ValidationError(f"{column.key} exceeds max length {column.type.length}")
        return text

    return value


def validate_payload(
    *,
    model,
    payload: Any,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Check a JSON body against a policy and the model's column metadata.

    Returns only the allowed keys, with column values normalized. Keys that
    are writable but not columns (the plaintext password) pass through
    untouched for the service layer to handle.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(policy.required_on_create - set(payload))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    unknown = sorted(set(payload) - policy.writable_fields)
    if unknown:
        raise ValidationError(f"Field not allowed: {unknown[0]}")

    columns = {column.key: column for column in model.__mapper__.columns}
    cleaned: dict = {}

    for key, value in payload.items():
        column = columns.get(key)
        if column is None:
            cleaned[key] = value
        elif value is None:
            if not column.nullable:
                raise ValidationError(f"{key} cannot be null")
            cleaned[key] = None
        else:
            cleaned[key] = _clean_column_value(column, value)

    return cleaned
