"""Month indicator parsing and month range resolution."""

from datetime import datetime, timezone
from typing import Union

from transactions_api.errors import ValidationError
from transactions_api.models import MonthRange


def parse_month(month: Union[str, int, None]) -> int:
    """Parse a month indicator ("3", " 03 ", 3) into an integer 1-12.

    Raises:
        ValidationError: If the value is missing, not an integer or out of range.
    """
    if month is None:
        raise ValidationError("Query parameter 'month' is required")

    if isinstance(month, bool):
        raise ValidationError(f"Invalid month: {month!r}")

    if isinstance(month, int):
        value = month
    else:
        text = str(month).strip()
        if not text.isdecimal():
            raise ValidationError(f"Invalid month: {month!r}. Expected an integer from 1 to 12.")
        value = int(text)

    if not 1 <= value <= 12:
        raise ValidationError(f"Invalid month: {month!r}. Expected an integer from 1 to 12.")
    return value


def resolve_month_range(month: Union[str, int, None], year: int) -> MonthRange:
    """
    Map a month indicator to the half-open UTC interval covering that month.

    December ends at the first instant of January of the following year.

    Args:
        month: Month indicator, as received from the caller.
        year: Reference year the month belongs to.

    Returns:
        MonthRange with start < end.

    Raises:
        ValidationError: If the month indicator is invalid.
    """
    value = parse_month(month)
    start = datetime(year, value, 1, tzinfo=timezone.utc)
    if value == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, value + 1, 1, tzinfo=timezone.utc)
    return MonthRange(start=start, end=end)
