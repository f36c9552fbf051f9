"""Sale record model for catalog ingestion and listing responses."""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

STORE_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def format_store_timestamp(value: datetime) -> str:
    """Render a datetime as the UTC string stored in the record store.

    Fixed-width UTC strings compare lexicographically in chronological
    order, which is what the month range predicates rely on. Naive
    datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(STORE_TIMESTAMP_FORMAT)


class SaleRecord(BaseModel):
    """One product transaction from the catalog."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    date_of_sale: Optional[datetime] = Field(default=None, alias="dateOfSale")
    sold: Optional[bool] = None

    @classmethod
    def from_catalog_item(cls, item: dict[str, Any]) -> "SaleRecord":
        """Validate a catalog entry and assign it a fresh store id.

        The source's own ``id`` is not unique across loads, so it is dropped.
        """
        fields = {key: value for key, value in item.items() if key != "id"}
        record = cls.model_validate(fields)
        return record.model_copy(update={"id": str(uuid.uuid4())})

    def to_document(self) -> dict[str, Any]:
        """Convert to a store document, leaving absent fields out."""
        document = self.model_dump(by_alias=True, exclude_none=True)
        if self.date_of_sale is not None:
            document["dateOfSale"] = format_store_timestamp(self.date_of_sale)
        return document
