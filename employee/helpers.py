from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Tuple, Union

from core.errors import bad_request

TWO_PLACES = Decimal("0.01")
MAX_LEAVE_DAYS = Decimal("365")
# largest value a Numeric(12, 2) money column holds
MAX_AMOUNT = Decimal("9999999999.99")

Number = Union[int, float, str, Decimal]


def normalize_email(value: str) -> str:
    return (value or "").strip().lower()


def normalize_employee_code(value: Optional[str]) -> str:
    return (value or "").strip().upper()


def split_full_name(full_name: Optional[str]) -> Tuple[str, str]:
    """'Ada King Lovelace' -> ('Ada King', 'Lovelace'); a single word is a first name only."""
    parts = (full_name or "").split()
    if not parts:
        raise bad_request("Full name is required.")
    if len(parts) == 1:
        return parts[0], ""
    return " ".join(parts[:-1]), parts[-1]


def parse_start_date(value: Union[str, date, None]) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        raise bad_request("Invalid start date.")


def _to_decimal(value: Number) -> Decimal:
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise bad_request("Numeric value expected.")
    if number.is_nan():
        raise bad_request("Numeric value expected.")
    return number


def _clamp(value: Number, upper: Decimal) -> Decimal:
    # bounded before quantize, which overflows on very wide values
    number = min(max(_to_decimal(value), Decimal("0")), upper)
    return number.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def clamp_leave_days(value: Number) -> Decimal:
    return _clamp(value, MAX_LEAVE_DAYS)


def clamp_amount(value: Number) -> Decimal:
    return _clamp(value, MAX_AMOUNT)


def clean_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None
