"""Client modules for external services."""

from transactions_api.clients.catalog_client import CatalogClient
from transactions_api.clients.cosmosdb_client import CosmosDBClient

__all__ = [
    "CatalogClient",
    "CosmosDBClient",
]
