"""Local input checks; failures raise ValidationError before any request is made."""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any

from pydantic import Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError

# same bounds as the backend's Numeric(10, 2) price and cost columns
Money = Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)]

_number = TypeAdapter(Decimal)
_money = TypeAdapter(Money)


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_text(value: Any, message: str) -> str:
    if is_blank(value):
        raise ValidationError(message)
    return str(value).strip()


def _clean(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def parse_int(value: Any, message: str) -> int:
    """Accept ints and whole-number strings/floats; bools are not numbers here."""
    if isinstance(value, bool) or is_blank(value):
        raise ValidationError(message)
    if isinstance(value, int):
        return value
    try:
        number = _number.validate_python(_clean(value))
    except PydanticValidationError:
        raise ValidationError(message) from None
    if number != number.to_integral_value():
        raise ValidationError(message)
    return int(number)


def parse_positive_int(value: Any, message: str) -> int:
    number = parse_int(value, message)
    if number <= 0:
        raise ValidationError(message)
    return number


def parse_non_negative_int(value: Any, message: str) -> int:
    number = parse_int(value, message)
    if number < 0:
        raise ValidationError(message)
    return number


def parse_amount(value: Any, message: str) -> float:
    """Non-negative money amount with at most two decimal places."""
    if isinstance(value, bool) or is_blank(value):
        raise ValidationError(message)
    try:
        return float(_money.validate_python(_clean(value)))
    except PydanticValidationError:
        raise ValidationError(message) from None
