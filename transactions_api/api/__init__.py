"""FastAPI application setup."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from transactions_api.api.controller import transactions_router
from transactions_api.clients import CosmosDBClient
from transactions_api.config import AppConfig, get_config
from transactions_api.errors import TransactionsApiError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the store client at startup and close it at shutdown."""
    config: AppConfig = app.state.config or get_config()
    app.state.config = config
    logging.basicConfig(level=config.logging.level)

    store = CosmosDBClient.from_config(config.cosmosdb)
    await store.connect()
    app.state.store = store
    try:
        yield
    finally:
        await store.close()
        logger.info("Store connection closed")


async def handle_api_error(request: Request, exc: TransactionsApiError) -> PlainTextResponse:
    """Surface validation, fetch and store failures as a 500 with the message as body."""
    logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
    return PlainTextResponse(str(exc), status_code=500)


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Configuration is loaded lazily in the lifespan when not given.
    """
    app = FastAPI(
        title="Product Transactions API",
        description="Monthly listing and statistics over product sale records",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TransactionsApiError, handle_api_error)

    # Include routers
    app.include_router(transactions_router)

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
