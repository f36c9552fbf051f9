"""Shared fixtures for the transactions API tests.

Provides:
- A fake record store that answers queries through a test-supplied responder
- A ready-made AppConfig that needs no YAML file or environment
"""

from typing import Any, Callable, List, Optional

import pytest

from transactions_api.config import (
    AppConfig,
    CatalogConfig,
    CosmosDBConfig,
    LoggingConfig,
    QueryConfig,
    ServerConfig,
)


class FakeStore:
    """Stands in for CosmosDBClient; records every query and insert."""

    def __init__(self, responder: Optional[Callable[[str, dict], List[Any]]] = None):
        self._responder = responder or (lambda query, params: [])
        self.queries: List[tuple] = []
        self.created: List[dict] = []

    async def query_items(self, query, parameters=None, partition_key=None):
        params = {p["name"]: p["value"] for p in parameters or []}
        self.queries.append((query, params))
        return self._responder(query, params)

    async def create_items(self, items):
        items = list(items)
        self.created.extend(items)
        return len(items)


@pytest.fixture
def fake_store_factory():
    """Build a FakeStore around a responder function."""
    return FakeStore


@pytest.fixture
def app_config() -> AppConfig:
    """Configuration used by unit tests."""
    return AppConfig(
        server=ServerConfig(host="127.0.0.1", port=5000),
        catalog=CatalogConfig(source_url="https://catalog.test/products.json", timeout_seconds=5.0),
        cosmosdb=CosmosDBConfig(
            endpoint="https://localhost:8081/",
            key="test-key",
            database_name="transactionsDB",
            container_name="transactions",
            partition_key_path="/id",
        ),
        query=QueryConfig(reference_year=2023, default_per_page=10, max_per_page=100),
        logging=LoggingConfig(level="DEBUG"),
    )


@pytest.fixture
def march_record() -> dict:
    """A catalog entry sold in March of the reference year."""
    return {
        "id": 1,
        "title": "Fjallraven Backpack",
        "description": "Your perfect pack for everyday use",
        "price": 150,
        "category": "A",
        "image": "https://catalog.test/img/1.jpg",
        "sold": True,
        "dateOfSale": "2023-03-15T10:30:00+05:30",
    }
