"""Typed request parameters, validated before they reach the query layer."""

from dataclasses import dataclass
from typing import Optional, Union

from transactions_api.config import QueryConfig
from transactions_api.errors import ValidationError
from transactions_api.services.month_range import parse_month


def parse_positive_int(name: str, value: Union[str, int, None], default: int) -> int:
    """Parse a pagination value; missing or blank values fall back to the default."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return default

    text = str(value).strip()
    if not text.isdecimal() or int(text) < 1:
        raise ValidationError(f"Invalid {name}: {value!r}. Expected a positive integer.")
    return int(text)


@dataclass(frozen=True)
class MonthParams:
    """Parameters of the monthly aggregate endpoints."""

    month: int

    @classmethod
    def parse(cls, month: Optional[str]) -> "MonthParams":
        return cls(month=parse_month(month))


@dataclass(frozen=True)
class ListTransactionsParams:
    """Parameters of the transaction listing endpoint."""

    month: int
    search: str = ""
    page: int = 1
    per_page: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    @classmethod
    def parse(
        cls,
        month: Optional[str],
        search: Optional[str] = None,
        page: Optional[str] = None,
        per_page: Optional[str] = None,
        query_config: Optional[QueryConfig] = None,
    ) -> "ListTransactionsParams":
        """
        Validate raw query-string values.

        Raises:
            ValidationError: For a bad month, non-positive or non-numeric
                pagination values, or a page size above the configured maximum.
        """
        default_per_page = query_config.default_per_page if query_config else 10
        parsed_per_page = parse_positive_int("perPage", per_page, default_per_page)

        if query_config is not None and parsed_per_page > query_config.max_per_page:
            raise ValidationError(
                f"Invalid perPage: {parsed_per_page}. Maximum is {query_config.max_per_page}."
            )

        return cls(
            month=parse_month(month),
            search=search or "",
            page=parse_positive_int("page", page, 1),
            per_page=parsed_per_page,
        )
