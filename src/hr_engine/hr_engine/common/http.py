"""Helpers shared by the JSON controllers."""

from __future__ import annotations

from dataclasses import fields, is_dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from flask import request

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from .caller import CallerContext
from .datetime_utils import parse_iso_date


def caller_from_request() -> CallerContext:
    """Caller context forwarded by the upstream identity layer.

    Authentication happens before this service; the headers are trusted.
    """

    raw_role = (request.headers.get("X-Role") or "").strip().upper()
    try:
        role = Role(raw_role)
    except ValueError:
        raise AuthorizationError("Missing or unknown caller role")

    raw_id = (request.headers.get("X-Employee-Id") or "").strip()
    employee_id: Optional[int] = None
    if raw_id:
        try:
            employee_id = int(raw_id)
        except ValueError:
            raise ValidationError("X-Employee-Id must be an integer")
    return CallerContext(employee_id=employee_id, role=role)


def own_employee_id(caller: CallerContext) -> int:
    if caller.employee_id is None:
        raise AuthorizationError("Employee profile not linked")
    return int(caller.employee_id)


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("JSON object expected")
    return data


def date_value(value: Any, field_name: str, *, default: Optional[date] = None) -> date:
    if value in (None, ""):
        if default is not None:
            return default
        raise ValidationError(f"{field_name} is required")
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD")


def int_value(value: Any, field_name: str, *, default: Optional[int] = None) -> Optional[int]:
    if value in (None, ""):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def bool_value(value: Any, field_name: str, *, default: bool = False) -> bool:
    """Only a JSON boolean is accepted; strings such as "false" are rejected."""
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be true or false")
    return value


def to_json(value: Any) -> Any:
    """Dataclasses, enums, dates and decimals to plain JSON values."""
    if is_dataclass(value) and not isinstance(value, type):
        out = {f.name: to_json(getattr(value, f.name)) for f in fields(value)}
        for prop in ("days", "overdrawn", "accrued_available", "is_published"):
            attr = getattr(type(value), prop, None)
            if isinstance(attr, property):
                out[prop] = to_json(getattr(value, prop))
        return out
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, dict):
        return {str(to_json(k)): to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_json(v) for v in value]
    return value
