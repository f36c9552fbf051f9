"""HTTP client for the external product catalog source."""

import logging
from typing import Any, Optional

import httpx

from transactions_api.config import CatalogConfig
from transactions_api.errors import FetchError, ValidationError

logger = logging.getLogger(__name__)


class CatalogClient:
    """Fetches the catalog JSON array from a fixed URL."""

    def __init__(
        self,
        source_url: str,
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the catalog client.

        Args:
            source_url: URL returning a JSON array of sale records
            timeout_seconds: Total request timeout
            transport: Optional httpx transport, used to stub the source in tests
        """
        self._source_url = source_url
        self._timeout = httpx.Timeout(timeout_seconds)
        self._transport = transport

    @classmethod
    def from_config(cls, config: CatalogConfig) -> "CatalogClient":
        return cls(source_url=config.source_url, timeout_seconds=config.timeout_seconds)

    @property
    def source_url(self) -> str:
        return self._source_url

    async def fetch_catalog(self) -> list[dict[str, Any]]:
        """
        Download the catalog and return its entries.

        Returns:
            The decoded JSON array.

        Raises:
            FetchError: If the source is unreachable or answers with a non-2xx status.
            ValidationError: If the body is not a JSON array of objects.
        """
        logger.info(f"Fetching catalog from {self._source_url}")

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(self._source_url)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"Catalog source returned status {e.response.status_code}: {self._source_url}"
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(f"Failed to fetch catalog from {self._source_url}: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise ValidationError(f"Catalog payload is not valid JSON: {e}") from e

        if not isinstance(payload, list):
            raise ValidationError(
                f"Catalog payload must be a JSON array, got {type(payload).__name__}"
            )

        for index, item in enumerate(payload):
            if not isinstance(item, dict):
                raise ValidationError(
                    f"Catalog entry {index} must be an object, got {type(item).__name__}"
                )

        logger.info(f"Fetched {len(payload)} catalog entries")
        return payload
