"""Data models module."""

from transactions_api.models.aggregates import (
    CategoryCount,
    CombinedReport,
    LoadResult,
    MonthRange,
    PriceBucket,
    SalesStatistics,
)
from transactions_api.models.sale_record import SaleRecord, format_store_timestamp

__all__ = [
    "CategoryCount",
    "CombinedReport",
    "LoadResult",
    "MonthRange",
    "PriceBucket",
    "SaleRecord",
    "SalesStatistics",
    "format_store_timestamp",
]
