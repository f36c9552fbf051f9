"""Configuration module."""

from transactions_api.config.configuration import (
    AppConfig,
    CatalogConfig,
    ConfigurationError,
    CosmosDBConfig,
    LoggingConfig,
    QueryConfig,
    ServerConfig,
    get_config,
    load_config,
    reset_config,
)

__all__ = [
    "AppConfig",
    "CatalogConfig",
    "ConfigurationError",
    "CosmosDBConfig",
    "LoggingConfig",
    "QueryConfig",
    "ServerConfig",
    "get_config",
    "load_config",
    "reset_config",
]
