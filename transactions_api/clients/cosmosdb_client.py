"""Azure Cosmos DB client for sale record storage."""

import logging
import uuid
from typing import Any, Iterable, Optional

from azure.core.exceptions import AzureError
from azure.cosmos.aio import CosmosClient
from azure.cosmos.aio._container import ContainerProxy
from azure.cosmos.aio._database import DatabaseProxy
from azure.cosmos.exceptions import CosmosResourceNotFoundError

from transactions_api.config import CosmosDBConfig
from transactions_api.errors import StoreError

logger = logging.getLogger(__name__)


class CosmosDBClient:
    """Async Cosmos DB client with connection management.

    Uses the NoSQL API for storing and querying sale records.
    Supports async context manager pattern for proper resource cleanup.
    Every SDK failure is re-raised as StoreError.
    """

    def __init__(
        self,
        endpoint: str,
        key: str,
        database_name: str,
        container_name: str,
        partition_key_path: str = "/id",
    ):
        """Initialize the Cosmos DB client.

        Args:
            endpoint: Cosmos DB account endpoint URL
            key: Cosmos DB account key
            database_name: Name of the database to use
            container_name: Name of the container to use
            partition_key_path: Path to the partition key field (default: /id)
        """
        self._endpoint = endpoint
        self._key = key
        self._database_name = database_name
        self._container_name = container_name
        self._partition_key_path = partition_key_path

        self._client: Optional[CosmosClient] = None
        self._database: Optional[DatabaseProxy] = None
        self._container: Optional[ContainerProxy] = None

    @classmethod
    def from_config(cls, config: CosmosDBConfig) -> "CosmosDBClient":
        """Build a client from the cosmosdb configuration section."""
        return cls(
            endpoint=config.endpoint,
            key=config.key,
            database_name=config.database_name,
            container_name=config.container_name,
            partition_key_path=config.partition_key_path,
        )

    @property
    def is_connected(self) -> bool:
        return self._container is not None

    async def connect(self) -> None:
        """Establish connection and ensure database/container exist."""
        try:
            self._client = CosmosClient(url=self._endpoint, credential=self._key)
            await self._client.__aenter__()

            # Get or create database
            try:
                self._database = self._client.get_database_client(self._database_name)
                # Verify database exists by reading it
                await self._database.read()
            except CosmosResourceNotFoundError:
                self._database = await self._client.create_database(self._database_name)

            # Get or create container
            try:
                self._container = self._database.get_container_client(self._container_name)
                # Verify container exists by reading it
                await self._container.read()
            except CosmosResourceNotFoundError:
                self._container = await self._database.create_container(
                    id=self._container_name,
                    partition_key={"paths": [self._partition_key_path], "kind": "Hash"},
                )
        except AzureError as e:
            await self.close()
            raise StoreError(f"Failed to connect to Cosmos DB: {e}") from e

        logger.info(f"Connected to Cosmos DB container {self._database_name}/{self._container_name}")

    async def close(self) -> None:
        """Close the Cosmos DB connection."""
        if self._client:
            await self._client.close()
            self._client = None
            self._database = None
            self._container = None

    async def __aenter__(self) -> "CosmosDBClient":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        """Async context manager exit with cleanup."""
        await self.close()
        return False

    def _require_container(self) -> ContainerProxy:
        if self._container is None:
            raise StoreError("CosmosDB client not connected. Call connect() first.")
        return self._container

    async def create_item(self, item: dict[str, Any]) -> dict[str, Any]:
        """Insert a new item into the container.

        Args:
            item: Dictionary containing the item data. An 'id' is generated
                  when missing.

        Returns:
            The created item with any system-generated fields.

        Raises:
            StoreError: If the client is not connected or the insert fails.
        """
        container = self._require_container()

        if "id" not in item:
            item["id"] = str(uuid.uuid4())

        try:
            result = await container.create_item(body=item)
        except AzureError as e:
            raise StoreError(f"Failed to insert item {item['id']}: {e}") from e
        return dict(result)

    async def create_items(self, items: Iterable[dict[str, Any]]) -> int:
        """Insert items one by one and return how many were inserted.

        Raises:
            StoreError: On the first failed insert; earlier inserts are kept.
        """
        inserted = 0
        for item in items:
            await self.create_item(item)
            inserted += 1
        return inserted

    async def query_items(
        self,
        query: str,
        parameters: Optional[list[dict[str, Any]]] = None,
        partition_key: Optional[str] = None,
    ) -> list[Any]:
        """Query items from the container.

        Args:
            query: SQL query string
            parameters: Optional query parameters as list of {"name": "@param", "value": value}
            partition_key: Optional partition key to scope the query

        Returns:
            List of results; documents for SELECT queries, scalars for
            SELECT VALUE aggregates.

        Raises:
            StoreError: If the client is not connected or the query fails.
        """
        container = self._require_container()

        query_options = {}
        if partition_key is not None:
            query_options["partition_key"] = partition_key

        logger.debug(f"Cosmos query: {query} params={parameters}")

        items = []
        try:
            async for item in container.query_items(
                query=query,
                parameters=parameters,
                **query_options,
            ):
                items.append(dict(item) if isinstance(item, dict) else item)
        except AzureError as e:
            raise StoreError(f"Query failed: {e}") from e

        return items
