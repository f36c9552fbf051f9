"""Query and loading services."""

from transactions_api.services.catalog_loader_service import CatalogLoaderService, validate_catalog
from transactions_api.services.month_range import parse_month, resolve_month_range
from transactions_api.services.request_params import ListTransactionsParams, MonthParams
from transactions_api.services.transaction_query_service import TransactionQueryService

__all__ = [
    "CatalogLoaderService",
    "ListTransactionsParams",
    "MonthParams",
    "TransactionQueryService",
    "parse_month",
    "resolve_month_range",
    "validate_catalog",
]
