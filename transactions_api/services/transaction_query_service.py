"""Monthly listing and aggregate queries over the sale record store.

Each operation resolves the month range, issues Cosmos DB SQL against the
store and shapes the raw rows into result models:
- list_transactions: filtered, paginated records
- statistics: sold/unsold counts and revenue
- price_histogram: fixed-boundary price buckets, counted from projected prices
- category_breakdown: record count per category, counted from projected categories
"""

import asyncio
import logging
from typing import Any, List, Optional, Protocol, Tuple, Union

import pydantic

from transactions_api.errors import StoreError
from transactions_api.models import (
    CategoryCount,
    CombinedReport,
    MonthRange,
    PriceBucket,
    SaleRecord,
    SalesStatistics,
    format_store_timestamp,
)
from transactions_api.services.month_range import resolve_month_range
from transactions_api.services.request_params import ListTransactionsParams

logger = logging.getLogger(__name__)

BUCKET_WIDTH = 100
BUCKET_COUNT = 10
OVERFLOW_BUCKET_LABEL = f"{BUCKET_WIDTH * BUCKET_COUNT}-above"

RECORD_FIELDS = "c.id, c.title, c.description, c.price, c.category, c.dateOfSale, c.sold"
MONTH_PREDICATE = "c.dateOfSale >= @start AND c.dateOfSale < @end"

Query = Tuple[str, List[dict]]


class RecordStore(Protocol):
    """The part of CosmosDBClient the query layer depends on."""

    async def query_items(
        self,
        query: str,
        parameters: Optional[list[dict[str, Any]]] = None,
        partition_key: Optional[str] = None,
    ) -> list[Any]:
        ...


def _month_parameters(month_range: MonthRange) -> List[dict]:
    return [
        {"name": "@start", "value": format_store_timestamp(month_range.start)},
        {"name": "@end", "value": format_store_timestamp(month_range.end)},
    ]


def build_listing_query(month_range: MonthRange, params: ListTransactionsParams) -> Query:
    """Build the paginated listing query.

    A non-empty search term matches title or description case-insensitively,
    or the price rendered as text.
    """
    parameters = _month_parameters(month_range)
    where = MONTH_PREDICATE

    if params.search:
        where += (
            " AND (CONTAINS(c.title, @search, true)"
            " OR CONTAINS(c.description, @search, true)"
            " OR CONTAINS(ToString(c.price), @search))"
        )
        parameters.append({"name": "@search", "value": params.search})

    parameters.append({"name": "@offset", "value": params.offset})
    parameters.append({"name": "@limit", "value": params.per_page})

    query = f"SELECT {RECORD_FIELDS} FROM c WHERE {where} OFFSET @offset LIMIT @limit"
    return query, parameters


def build_count_query(month_range: MonthRange, sold: bool) -> Query:
    parameters = _month_parameters(month_range)
    parameters.append({"name": "@sold", "value": sold})
    query = f"SELECT VALUE COUNT(1) FROM c WHERE {MONTH_PREDICATE} AND c.sold = @sold"
    return query, parameters


def build_sale_amount_query(month_range: MonthRange) -> Query:
    query = (
        f"SELECT VALUE SUM(c.price) FROM c WHERE {MONTH_PREDICATE}"
        " AND c.sold = true AND IS_NUMBER(c.price)"
    )
    return query, _month_parameters(month_range)


def build_price_query(month_range: MonthRange) -> Query:
    """Select the numeric, non-negative prices of in-range records."""
    query = (
        "SELECT VALUE c.price FROM c"
        f" WHERE {MONTH_PREDICATE} AND IS_NUMBER(c.price) AND c.price >= 0"
    )
    return query, _month_parameters(month_range)


def build_category_query(month_range: MonthRange) -> Query:
    # Records without a category come back as empty rows
    query = f"SELECT c.category FROM c WHERE {MONTH_PREDICATE}"
    return query, _month_parameters(month_range)


def bucket_index(price: float) -> int:
    return min(int(price // BUCKET_WIDTH), BUCKET_COUNT)


def bucket_label(index: int) -> str:
    if index >= BUCKET_COUNT:
        return OVERFLOW_BUCKET_LABEL
    return f"{index * BUCKET_WIDTH}-{(index + 1) * BUCKET_WIDTH}"


def shape_histogram(prices: List[Any]) -> List[PriceBucket]:
    """Count prices per bucket, ordered by lower bound with the overflow bucket last.

    Prices >= BUCKET_WIDTH * BUCKET_COUNT fall into the overflow bucket.
    Missing, non-numeric and negative values are skipped.
    """
    counts: dict[int, int] = {}
    for price in prices:
        if isinstance(price, bool) or not isinstance(price, (int, float)) or price < 0:
            continue
        index = bucket_index(price)
        counts[index] = counts.get(index, 0) + 1

    return [
        PriceBucket(bucket=bucket_label(index), count=count)
        for index, count in sorted(counts.items())
    ]


def shape_categories(rows: List[dict]) -> List[CategoryCount]:
    """Count rows per category, ordered by label with the missing-category group first."""
    counts: dict[Optional[str], int] = {}
    for row in rows:
        category = row.get("category")
        counts[category] = counts.get(category, 0) + 1

    ordered = sorted(counts.items(), key=lambda item: (item[0] is not None, item[0] or ""))
    return [CategoryCount(category=category, count=count) for category, count in ordered]


def _to_sale_record(row: dict) -> SaleRecord:
    try:
        return SaleRecord.model_validate(row)
    except pydantic.ValidationError as e:
        raise StoreError(f"Stored record {row.get('id')} is malformed: {e}") from e


def _first_scalar(rows: List[Any]) -> Any:
    return rows[0] if rows else None


class TransactionQueryService:
    """Answers listing and aggregate queries for one month of the reference year."""

    def __init__(self, store: RecordStore, reference_year: int):
        """Initialize the query service.

        Args:
            store: Connected record store client.
            reference_year: Year every month indicator refers to.
        """
        self._store = store
        self._reference_year = reference_year

    def month_range(self, month: Union[str, int]) -> MonthRange:
        return resolve_month_range(month, self._reference_year)

    async def list_transactions(self, params: ListTransactionsParams) -> List[SaleRecord]:
        """Return one page of in-range records matching the search term."""
        query, parameters = build_listing_query(self.month_range(params.month), params)
        rows = await self._store.query_items(query, parameters=parameters)
        logger.debug(f"Listing month={params.month} page={params.page} returned {len(rows)} records")
        return [_to_sale_record(row) for row in rows]

    async def _count(self, month_range: MonthRange, sold: bool) -> int:
        query, parameters = build_count_query(month_range, sold)
        return int(_first_scalar(await self._store.query_items(query, parameters=parameters)) or 0)

    async def _sale_amount(self, month_range: MonthRange) -> float:
        query, parameters = build_sale_amount_query(month_range)
        total = _first_scalar(await self._store.query_items(query, parameters=parameters))
        return float(total) if total is not None else 0.0

    async def _statistics(self, month_range: MonthRange) -> SalesStatistics:
        sold, not_sold, amount = await asyncio.gather(
            self._count(month_range, True),
            self._count(month_range, False),
            self._sale_amount(month_range),
        )
        return SalesStatistics(
            total_sold_items=sold,
            total_not_sold_items=not_sold,
            total_sale_amount=amount,
        )

    async def _price_histogram(self, month_range: MonthRange) -> List[PriceBucket]:
        query, parameters = build_price_query(month_range)
        return shape_histogram(await self._store.query_items(query, parameters=parameters))

    async def _category_breakdown(self, month_range: MonthRange) -> List[CategoryCount]:
        query, parameters = build_category_query(month_range)
        return shape_categories(await self._store.query_items(query, parameters=parameters))

    async def statistics(self, month: Union[str, int]) -> SalesStatistics:
        """Sold and unsold counts plus revenue of sold records; revenue is 0 when nothing sold."""
        return await self._statistics(self.month_range(month))

    async def price_histogram(self, month: Union[str, int]) -> List[PriceBucket]:
        """Non-empty price buckets ordered by lower bound, overflow bucket last."""
        return await self._price_histogram(self.month_range(month))

    async def category_breakdown(self, month: Union[str, int]) -> List[CategoryCount]:
        return await self._category_breakdown(self.month_range(month))

    async def combined(self, month: Union[str, int]) -> CombinedReport:
        """Statistics, bar chart and pie chart for one month, queried concurrently."""
        month_range = self.month_range(month)
        statistics, bar_chart, pie_chart = await asyncio.gather(
            self._statistics(month_range),
            self._price_histogram(month_range),
            self._category_breakdown(month_range),
        )
        return CombinedReport(statistics=statistics, bar_chart=bar_chart, pie_chart=pie_chart)
