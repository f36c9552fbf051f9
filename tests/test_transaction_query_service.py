"""Tests for TransactionQueryService.

These tests verify:
- The Cosmos SQL issued for each operation (month bounds, search, pagination)
- Bucketing and counting of projected prices and categories
- Consistency of listing pages and aggregates over an in-memory month
- Zero revenue when nothing was sold
"""

import pytest

from transactions_api.errors import StoreError, ValidationError
from transactions_api.models import CategoryCount, PriceBucket, SalesStatistics
from transactions_api.services import ListTransactionsParams, TransactionQueryService
from transactions_api.services.transaction_query_service import (
    OVERFLOW_BUCKET_LABEL,
    bucket_index,
    bucket_label,
    shape_categories,
    shape_histogram,
)

MARCH_START = "2023-03-01T00:00:00.000000Z"
APRIL_START = "2023-04-01T00:00:00.000000Z"


def statistics_responder(sold_count, not_sold_count, amount_rows):
    def respond(query, params):
        if "SUM(c.price)" in query:
            return amount_rows
        if "COUNT(1) FROM c" in query:
            return [sold_count] if params["@sold"] else [not_sold_count]
        return []

    return respond


class TestListTransactions:
    """Test the listing query."""

    @pytest.mark.asyncio
    async def test_month_bounds_and_pagination(self, fake_store_factory):
        store = fake_store_factory()
        service = TransactionQueryService(store, reference_year=2023)

        await service.list_transactions(ListTransactionsParams(month=3, page=3, per_page=5))

        query, params = store.queries[0]
        assert "c.dateOfSale >= @start AND c.dateOfSale < @end" in query
        assert query.endswith("OFFSET @offset LIMIT @limit")
        assert params["@start"] == MARCH_START
        assert params["@end"] == APRIL_START
        assert params["@offset"] == 10
        assert params["@limit"] == 5

    @pytest.mark.asyncio
    async def test_empty_search_has_no_text_predicate(self, fake_store_factory):
        store = fake_store_factory()
        service = TransactionQueryService(store, reference_year=2023)

        await service.list_transactions(ListTransactionsParams(month=3))

        query, params = store.queries[0]
        assert "CONTAINS" not in query
        assert "@search" not in params

    @pytest.mark.asyncio
    async def test_search_matches_title_description_and_price(self, fake_store_factory):
        store = fake_store_factory()
        service = TransactionQueryService(store, reference_year=2023)

        await service.list_transactions(ListTransactionsParams(month=3, search="pack"))

        query, params = store.queries[0]
        assert "CONTAINS(c.title, @search, true)" in query
        assert "CONTAINS(c.description, @search, true)" in query
        assert "CONTAINS(ToString(c.price), @search)" in query
        assert params["@search"] == "pack"

    @pytest.mark.asyncio
    async def test_rows_become_sale_records(self, fake_store_factory):
        row = {
            "id": "abc",
            "title": "Backpack",
            "description": "Everyday pack",
            "price": 150.0,
            "category": "A",
            "dateOfSale": "2023-03-15T05:00:00.000000Z",
            "sold": True,
        }
        store = fake_store_factory(lambda query, params: [row])
        service = TransactionQueryService(store, reference_year=2023)

        records = await service.list_transactions(ListTransactionsParams(month=3))

        assert len(records) == 1
        assert records[0].title == "Backpack"
        assert records[0].price == 150.0
        assert records[0].date_of_sale.month == 3

    @pytest.mark.asyncio
    async def test_december_uses_next_year_as_end(self, fake_store_factory):
        store = fake_store_factory()
        service = TransactionQueryService(store, reference_year=2023)

        await service.list_transactions(ListTransactionsParams(month=12))

        _, params = store.queries[0]
        assert params["@start"] == "2023-12-01T00:00:00.000000Z"
        assert params["@end"] == "2024-01-01T00:00:00.000000Z"


class TestStatistics:
    """Test the statistics aggregates."""

    @pytest.mark.asyncio
    async def test_counts_and_amount(self, fake_store_factory):
        store = fake_store_factory(statistics_responder(4, 2, [612.5]))
        service = TransactionQueryService(store, reference_year=2023)

        result = await service.statistics("3")

        assert result == SalesStatistics(
            total_sold_items=4, total_not_sold_items=2, total_sale_amount=612.5
        )
        assert len(store.queries) == 3
        for _, params in store.queries:
            assert params["@start"] == MARCH_START
            assert params["@end"] == APRIL_START

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount_rows", [[], [None], [0]])
    async def test_amount_is_zero_when_nothing_sold(self, fake_store_factory, amount_rows):
        store = fake_store_factory(statistics_responder(0, 3, amount_rows))
        service = TransactionQueryService(store, reference_year=2023)

        result = await service.statistics(3)

        assert result.total_sale_amount == 0
        assert result.total_sale_amount is not None
        assert result.total_not_sold_items == 3

    @pytest.mark.asyncio
    async def test_amount_only_sums_sold_numeric_prices(self, fake_store_factory):
        store = fake_store_factory(statistics_responder(0, 0, []))
        service = TransactionQueryService(store, reference_year=2023)

        await service.statistics(3)

        sum_query = next(query for query, _ in store.queries if "SUM(" in query)
        assert "c.sold = true" in sum_query
        assert "IS_NUMBER(c.price)" in sum_query

    @pytest.mark.asyncio
    async def test_invalid_month_issues_no_query(self, fake_store_factory):
        store = fake_store_factory()
        service = TransactionQueryService(store, reference_year=2023)

        with pytest.raises(ValidationError):
            await service.statistics("abc")

        assert store.queries == []


class TestPriceHistogram:
    """Test bucket shaping and the price query."""

    def test_bucket_labels(self):
        assert bucket_label(0) == "0-100"
        assert bucket_label(9) == "900-1000"
        assert bucket_label(10) == OVERFLOW_BUCKET_LABEL
        assert bucket_label(42) == OVERFLOW_BUCKET_LABEL

    def test_bucket_boundaries(self):
        assert bucket_index(0) == 0
        assert bucket_index(99.99) == 0
        assert bucket_index(100) == 1
        assert bucket_index(999.99) == 9
        assert bucket_index(1000) == 10
        assert bucket_index(25000) == 10

    def test_prices_are_counted_with_overflow_last(self):
        prices = [1695, 150, 22.3, 999.99, 1000, 56.99, 120]

        result = shape_histogram(prices)

        assert result == [
            PriceBucket(bucket="0-100", count=2),
            PriceBucket(bucket="100-200", count=2),
            PriceBucket(bucket="900-1000", count=1),
            PriceBucket(bucket=OVERFLOW_BUCKET_LABEL, count=2),
        ]
        assert sum(bucket.count for bucket in result) == len(prices)

    def test_non_numeric_and_negative_prices_are_skipped(self):
        assert shape_histogram([None, "150", True, -5, {"price": 10}]) == []

    @pytest.mark.asyncio
    async def test_query_projects_numeric_prices(self, fake_store_factory):
        store = fake_store_factory(lambda query, params: [150.0])
        service = TransactionQueryService(store, reference_year=2023)

        result = await service.price_histogram("3")

        query, params = store.queries[0]
        assert query.startswith("SELECT VALUE c.price FROM c")
        assert "IS_NUMBER(c.price) AND c.price >= 0" in query
        assert "GROUP BY" not in query
        assert params["@start"] == MARCH_START
        assert result == [PriceBucket(bucket="100-200", count=1)]


class TestCategoryBreakdown:
    """Test category shaping and the pie chart query."""

    def test_missing_and_null_categories_form_one_group(self):
        rows = [
            {"category": "men's clothing"},
            {},
            {"category": "electronics"},
            {"category": None},
            {"category": "men's clothing"},
            {"category": "electronics"},
        ]

        result = shape_categories(rows)

        assert result == [
            CategoryCount(category=None, count=2),
            CategoryCount(category="electronics", count=2),
            CategoryCount(category="men's clothing", count=2),
        ]
        assert sum(category.count for category in result) == len(rows)

    @pytest.mark.asyncio
    async def test_query_projects_category(self, fake_store_factory):
        store = fake_store_factory(lambda query, params: [{"category": "A"}, {}])
        service = TransactionQueryService(store, reference_year=2023)

        result = await service.category_breakdown(3)

        query, _ = store.queries[0]
        assert query.startswith("SELECT c.category FROM c")
        assert "GROUP BY" not in query
        assert result == [CategoryCount(category=None, count=1), CategoryCount(category="A", count=1)]


class TestCombined:
    @pytest.mark.asyncio
    async def test_runs_all_three_aggregates(self, fake_store_factory):
        def respond(query, params):
            if query.startswith("SELECT VALUE c.price"):
                return [150.0]
            if query.startswith("SELECT c.category"):
                return [{"category": "A"}]
            return statistics_responder(1, 0, [150])(query, params)

        store = fake_store_factory(respond)
        service = TransactionQueryService(store, reference_year=2023)

        report = await service.combined("3")

        assert report.statistics == SalesStatistics(1, 0, 150.0)
        assert report.bar_chart == [PriceBucket(bucket="100-200", count=1)]
        assert report.pie_chart == [CategoryCount(category="A", count=1)]
        assert len(store.queries) == 5

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, fake_store_factory):
        def respond(query, params):
            raise StoreError("connection lost")

        service = TransactionQueryService(fake_store_factory(respond), reference_year=2023)

        with pytest.raises(StoreError, match="connection lost"):
            await service.combined(3)


class TestMalformedStoredRecords:
    @pytest.mark.asyncio
    async def test_unparsable_row_raises_store_error(self, fake_store_factory):
        store = fake_store_factory(lambda query, params: [{"id": "x", "price": "abc"}])
        service = TransactionQueryService(store, reference_year=2023)

        with pytest.raises(StoreError, match="Stored record x is malformed"):
            await service.list_transactions(ListTransactionsParams(month=3))


def month_documents():
    """One month of stored documents, including ones without price or category."""
    documents = [
        {"id": f"rec-{n}", "title": f"Item {n}", "price": price, "category": category, "sold": sold}
        for n, (price, category, sold) in enumerate(
            [
                (150, "A", True),
                (22.3, "men's clothing", False),
                (1695, "jewelery", True),
                (999.99, "electronics", False),
                (56.99, "men's clothing", True),
                (1000, "electronics", True),
                (0, None, False),
            ]
        )
    ]
    documents.append({"id": "rec-no-price", "title": "No price", "sold": False})
    for document in documents:
        document["dateOfSale"] = "2023-03-10T00:00:00.000000Z"
    return documents


def in_memory_responder(documents):
    """Evaluate each issued query over in-range documents, honouring @offset/@limit and @sold."""

    def respond(query, params):
        if query.startswith("SELECT VALUE COUNT(1)"):
            return [sum(1 for d in documents if d.get("sold") is params["@sold"])]
        if query.startswith("SELECT VALUE SUM(c.price)"):
            prices = [d["price"] for d in documents if d.get("sold") is True and "price" in d]
            return [sum(prices)] if prices else []
        if query.startswith("SELECT VALUE c.price"):
            return [d["price"] for d in documents if d.get("price") is not None]
        if query.startswith("SELECT c.category"):
            return [{"category": d["category"]} if "category" in d else {} for d in documents]
        return documents[params["@offset"] : params["@offset"] + params["@limit"]]

    return respond


class TestMonthConsistency:
    """Aggregates over one month agree with the records the listing returns."""

    @pytest.fixture
    def service(self, fake_store_factory):
        store = fake_store_factory(in_memory_responder(month_documents()))
        return TransactionQueryService(store, reference_year=2023)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("per_page", [1, 3, 5, 8, 20])
    async def test_pagination_covers_month_without_gaps(self, service, per_page):
        seen = []
        page = 1
        while True:
            records = await service.list_transactions(
                ListTransactionsParams(month=3, page=page, per_page=per_page)
            )
            if not records:
                break
            assert len(records) <= per_page
            seen.extend(record.id for record in records)
            page += 1

        assert seen == [document["id"] for document in month_documents()]

    @pytest.mark.asyncio
    async def test_histogram_counts_every_priced_record(self, service):
        buckets = await service.price_histogram(3)

        priced = [d for d in month_documents() if d.get("price") is not None]
        assert sum(bucket.count for bucket in buckets) == len(priced)
        overflow = {bucket.bucket: bucket.count for bucket in buckets}[OVERFLOW_BUCKET_LABEL]
        assert overflow == sum(1 for d in priced if d["price"] >= 1000)
        assert buckets[-1].bucket == OVERFLOW_BUCKET_LABEL

    @pytest.mark.asyncio
    async def test_categories_count_every_record(self, service):
        categories = await service.category_breakdown(3)

        assert sum(category.count for category in categories) == len(month_documents())
        assert categories[0] == CategoryCount(category=None, count=2)

    @pytest.mark.asyncio
    async def test_sold_and_unsold_cover_the_month(self, service):
        statistics = await service.statistics(3)
        records = await service.list_transactions(ListTransactionsParams(month=3, per_page=100))

        assert statistics.total_sold_items + statistics.total_not_sold_items == len(records)
        assert statistics.total_sale_amount == pytest.approx(
            sum(record.price for record in records if record.sold)
        )
