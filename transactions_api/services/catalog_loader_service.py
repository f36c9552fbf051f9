"""Catalog loader: fetches the external catalog and bulk-inserts it.

Loading is additive. Every call inserts the whole catalog again with fresh
ids, so repeated loads duplicate records.
"""

import logging
from typing import Any, List, Protocol

import pydantic

from transactions_api.clients import CatalogClient
from transactions_api.errors import ValidationError
from transactions_api.models import LoadResult, SaleRecord

logger = logging.getLogger(__name__)


class RecordSink(Protocol):
    async def create_items(self, items: Any) -> int:
        ...


def validate_catalog(entries: List[dict[str, Any]]) -> List[SaleRecord]:
    """Validate every catalog entry before anything is written.

    Raises:
        ValidationError: On the first entry that does not match the record shape.
    """
    records: List[SaleRecord] = []
    for index, entry in enumerate(entries):
        try:
            records.append(SaleRecord.from_catalog_item(entry))
        except pydantic.ValidationError as e:
            raise ValidationError(f"Catalog entry {index} is invalid: {e}") from e
    return records


class CatalogLoaderService:
    """Service that initializes the record store from the catalog source."""

    def __init__(self, catalog_client: CatalogClient, store: RecordSink):
        self._catalog_client = catalog_client
        self._store = store

    async def initialize(self) -> LoadResult:
        """
        Fetch the catalog and insert all of its records.

        Returns:
            LoadResult with the number of inserted records.

        Raises:
            FetchError: If the catalog source cannot be fetched.
            ValidationError: If the payload is malformed; nothing is inserted.
            StoreError: If an insert fails.
        """
        entries = await self._catalog_client.fetch_catalog()
        records = validate_catalog(entries)

        inserted = await self._store.create_items(record.to_document() for record in records)

        logger.info(f"Inserted {inserted} records from {self._catalog_client.source_url}")
        return LoadResult(inserted=inserted)
