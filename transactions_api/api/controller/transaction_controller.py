"""HTTP controller for catalog loading and monthly transaction queries."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from transactions_api.clients import CatalogClient
from transactions_api.config import QueryConfig
from transactions_api.models import CategoryCount, PriceBucket, SaleRecord, SalesStatistics
from transactions_api.services import (
    CatalogLoaderService,
    ListTransactionsParams,
    MonthParams,
    TransactionQueryService,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["transactions"])


class StatisticsResponse(BaseModel):
    """Monthly sold/unsold counts and revenue."""

    totalSoldItems: int
    totalNotSoldItems: int
    totalSaleAmount: float

    @classmethod
    def from_result(cls, result: SalesStatistics) -> "StatisticsResponse":
        return cls(
            totalSoldItems=result.total_sold_items,
            totalNotSoldItems=result.total_not_sold_items,
            totalSaleAmount=result.total_sale_amount,
        )


class PriceBucketResponse(BaseModel):
    bucket: str
    count: int

    @classmethod
    def from_result(cls, result: PriceBucket) -> "PriceBucketResponse":
        return cls(bucket=result.bucket, count=result.count)


class CategoryCountResponse(BaseModel):
    category: Optional[str]
    count: int

    @classmethod
    def from_result(cls, result: CategoryCount) -> "CategoryCountResponse":
        return cls(category=result.category, count=result.count)


class CombinedResponse(BaseModel):
    """Statistics, bar chart and pie chart of the same month."""

    statistics: StatisticsResponse
    barChart: List[PriceBucketResponse]
    pieChart: List[CategoryCountResponse]


def get_query_config(request: Request) -> QueryConfig:
    return request.app.state.config.query


def get_query_service(request: Request) -> TransactionQueryService:
    """Build a query service on the store client opened by the app lifespan."""
    state = request.app.state
    return TransactionQueryService(state.store, state.config.query.reference_year)


def get_catalog_loader(request: Request) -> CatalogLoaderService:
    state = request.app.state
    return CatalogLoaderService(CatalogClient.from_config(state.config.catalog), state.store)


@router.get("/initialize", response_class=PlainTextResponse)
async def initialize(loader: CatalogLoaderService = Depends(get_catalog_loader)) -> str:
    """Fetch the external catalog and insert it into the store."""
    result = await loader.initialize()
    return f"Database initialized successfully ({result.inserted} records)"


@router.get("/transactions", response_model=List[SaleRecord])
async def list_transactions(
    month: Optional[str] = None,
    search: Optional[str] = None,
    page: Optional[str] = None,
    per_page: Optional[str] = Query(None, alias="perPage"),
    service: TransactionQueryService = Depends(get_query_service),
    query_config: QueryConfig = Depends(get_query_config),
) -> List[SaleRecord]:
    """List one page of the month's transactions matching ``search``."""
    params = ListTransactionsParams.parse(
        month=month,
        search=search,
        page=page,
        per_page=per_page,
        query_config=query_config,
    )
    return await service.list_transactions(params)


@router.get("/statistics", response_model=StatisticsResponse)
async def statistics(
    month: Optional[str] = None,
    service: TransactionQueryService = Depends(get_query_service),
) -> StatisticsResponse:
    params = MonthParams.parse(month)
    return StatisticsResponse.from_result(await service.statistics(params.month))


@router.get("/barchart", response_model=List[PriceBucketResponse])
async def barchart(
    month: Optional[str] = None,
    service: TransactionQueryService = Depends(get_query_service),
) -> List[PriceBucketResponse]:
    params = MonthParams.parse(month)
    buckets = await service.price_histogram(params.month)
    return [PriceBucketResponse.from_result(bucket) for bucket in buckets]


@router.get("/piechart", response_model=List[CategoryCountResponse])
async def piechart(
    month: Optional[str] = None,
    service: TransactionQueryService = Depends(get_query_service),
) -> List[CategoryCountResponse]:
    params = MonthParams.parse(month)
    categories = await service.category_breakdown(params.month)
    return [CategoryCountResponse.from_result(category) for category in categories]


@router.get("/combined", response_model=CombinedResponse)
async def combined(
    month: Optional[str] = None,
    service: TransactionQueryService = Depends(get_query_service),
) -> CombinedResponse:
    """Statistics, bar chart and pie chart in one response."""
    params = MonthParams.parse(month)
    report = await service.combined(params.month)
    return CombinedResponse(
        statistics=StatisticsResponse.from_result(report.statistics),
        barChart=[PriceBucketResponse.from_result(bucket) for bucket in report.bar_chart],
        pieChart=[CategoryCountResponse.from_result(category) for category in report.pie_chart],
    )
