from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_date_range(start: date, end: date) -> None:
    if start is None or end is None:
        raise ValidationError("fromDate and toDate are required")
    if end < start:
        raise ValidationError("toDate must be on or after fromDate")


def require_month(month: int, year: int) -> tuple[int, int]:
    try:
        month, year = int(month), int(year)
    except (TypeError, ValueError):
        raise ValidationError("month and year must be integers")
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")
    if year < 1900:
        raise ValidationError("year is out of range")
    return month, year


def require_non_negative_int(value, field_name: str, *, nullable: bool = False):
    if value is None:
        if nullable:
            return None
        raise ValidationError(f"{field_name} is required")
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if value < 0:
        raise ValidationError(f"{field_name} must be >= 0")
    return value


def require_decimal(value, field_name: str, *, nullable: bool = False) -> Decimal | None:
    if value is None:
        if nullable:
            return None
        raise ValidationError(f"{field_name} is required")
    try:
        out = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if out < 0:
        raise ValidationError(f"{field_name} must be >= 0")
    return out


def parse_enum(enum_cls: Type[E], value, field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        pass
    try:
        return enum_cls(str(value).strip())
    except ValueError:
        raise ValidationError(f"Invalid {field_name}: {value!r}")
