"""
Input validation helpers for the inventory core.
All of them raise ValidationError before any store access.
"""

from datetime import date, datetime
from typing import Optional, Union

from .errors import ValidationError

DayLike = Union[date, str]


def parse_day(value: Optional[DayLike], field_name: str) -> date:
    """
    Accept a date or a YYYY-MM-DD string; datetimes lose their time part.

    Args:
        value: Date-ish input
        field_name: Name used in the error message

    Returns:
        A plain date
    """
    if value is None or value == "":
        raise ValidationError(f"{field_name} is required", field=field_name)
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip()[:10], "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"{field_name} must be a YYYY-MM-DD date", field=field_name, value=value)


def parse_optional_day(value: Optional[DayLike], field_name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    return parse_day(value, field_name)


def validate_date_range(from_date: date, to_date: date, max_span_days: Optional[int] = None) -> None:
    """Reject non-chronological or overly long spans"""
    if from_date > to_date:
        raise ValidationError(
            "from_date must not be after to_date",
            from_date=from_date.isoformat(),
            to_date=to_date.isoformat(),
        )
    if max_span_days is not None and (to_date - from_date).days + 1 > max_span_days:
        raise ValidationError(f"Date range may span at most {max_span_days} days")


def require_amount(value, field_name: str, minimum: int = 0) -> int:
    """Integer amount in the smallest currency unit (or a count), >= minimum"""
    if value is None:
        raise ValidationError(f"{field_name} is required", field=field_name)
    return optional_amount(value, field_name, minimum)


def optional_amount(value, field_name: str, minimum: int = 0) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field_name} must be an integer", field=field_name, value=value)
    if value < minimum:
        raise ValidationError(f"{field_name} must be >= {minimum}", field=field_name, value=value)
    return value


def require_text(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required", field=field_name)
    return str(value).strip()
