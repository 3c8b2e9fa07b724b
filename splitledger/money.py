from decimal import Decimal, InvalidOperation
from typing import Union

from .errors import ValidationError

AmountInput = Union[str, int, float, Decimal]


def is_blank(raw) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def to_decimal(raw: AmountInput) -> Decimal:
    """Parse user input into a finite Decimal; raises InvalidOperation otherwise."""
    if isinstance(raw, bool):
        raise InvalidOperation(f"{raw!r} is not an amount")
    if isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, (int, float)):
        value = Decimal(str(raw))
    else:
        value = Decimal(str(raw).strip())
    if not value.is_finite():
        raise InvalidOperation(f"{raw!r} is not a finite amount")
    return value


def parse_amount(raw: AmountInput, label: str = "Amount") -> Decimal:
    try:
        return to_decimal(raw)
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{label} must be a number, got {raw!r}")


def format_amount(value: Decimal) -> str:
    return f"{value:.2f}"
