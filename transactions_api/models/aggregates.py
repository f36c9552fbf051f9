"""Result models for the monthly aggregate queries."""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class MonthRange:
    """Half-open interval [start, end) covering one calendar month."""

    start: datetime
    end: datetime


@dataclass(frozen=True)
class SalesStatistics:
    """Sold/unsold counts and revenue for one month."""

    total_sold_items: int
    total_not_sold_items: int
    total_sale_amount: float


@dataclass(frozen=True)
class PriceBucket:
    """Number of records whose price falls in one histogram bucket."""

    bucket: str  # "100-200" for [100, 200), "1000-above" for the overflow bucket
    count: int


@dataclass(frozen=True)
class CategoryCount:
    """Number of records in one category; category is None when missing."""

    category: Optional[str]
    count: int


@dataclass(frozen=True)
class CombinedReport:
    """Statistics, bar chart and pie chart for the same month."""

    statistics: SalesStatistics
    bar_chart: List[PriceBucket]
    pie_chart: List[CategoryCount]


@dataclass(frozen=True)
class LoadResult:
    """Outcome of a catalog load."""

    inserted: int
