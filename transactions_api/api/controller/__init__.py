"""API controllers."""

from transactions_api.api.controller.transaction_controller import router as transactions_router

__all__ = ["transactions_router"]
