"""Error taxonomy shared by the clients, services and API layer."""


class TransactionsApiError(Exception):
    """Base class for errors surfaced to API callers."""
    pass


class ValidationError(TransactionsApiError):
    """Raised when request parameters or catalog payloads are malformed."""
    pass


class FetchError(TransactionsApiError):
    """Raised when the external catalog source is unreachable or fails."""
    pass


class StoreError(TransactionsApiError):
    """Raised when the record store rejects a query or insert."""
    pass
