"""Configuration module for the transactions API.

Loads settings from environment-specific config files:
- APP_ENV=dev  → config_dev.yaml (local Cosmos DB emulator)
- APP_ENV=test → config_test.yaml (production-like testing)
- Default      → config.yaml

Cosmos DB credentials are loaded from the environment or a .env file.
Fails fast with clear error messages if required configuration is missing.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv


DEFAULT_CATALOG_SOURCE_URL = "https://s3.amazonaws.com/roxiler.com/product_transaction.json"


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def _get_project_root() -> Path:
    """Get the project root directory (where config.yaml lives)."""
    # Navigate from transactions_api/config/ up to project root
    return Path(__file__).parent.parent.parent


def _get_config_filename() -> str:
    """Get config filename based on APP_ENV environment variable.

    Returns:
        Config filename:
        - APP_ENV=dev  → config_dev.yaml
        - APP_ENV=test → config_test.yaml
        - Default      → config.yaml
    """
    app_env = os.environ.get("APP_ENV", "").lower()

    if app_env == "dev":
        return "config_dev.yaml"
    elif app_env == "test":
        return "config_test.yaml"
    else:
        return "config.yaml"


def _load_yaml_config() -> dict:
    """Load configuration from environment-specific config file."""
    config_filename = _get_config_filename()
    config_path = _get_project_root() / config_filename

    if not config_path.exists():
        raise ConfigurationError(
            f"Configuration file not found: {config_path}. "
            f"Set APP_ENV to 'dev' or 'test', or create {config_filename}."
        )

    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}


def _get_required_env(key: str) -> str:
    """Get required environment variable or raise ConfigurationError."""
    value = os.environ.get(key)
    if not value:
        raise ConfigurationError(
            f"Required environment variable '{key}' is not set. "
            f"Please add it to your .env file."
        )
    return value


def _get_optional_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get optional environment variable with default."""
    return os.environ.get(key, default)


def _as_int(section: str, key: str, value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"'{section}.{key}' must be an integer, got {value!r}") from e


@dataclass(frozen=True)
class ServerConfig:
    """HTTP server configuration."""
    host: str
    port: int


@dataclass(frozen=True)
class CatalogConfig:
    """External catalog source configuration."""
    source_url: str
    timeout_seconds: float


@dataclass(frozen=True)
class CosmosDBConfig:
    """Azure Cosmos DB configuration for the sale record store."""
    endpoint: str
    key: str
    database_name: str
    container_name: str
    partition_key_path: str


@dataclass(frozen=True)
class QueryConfig:
    """Query layer configuration."""
    reference_year: int
    default_per_page: int
    max_per_page: int


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""
    level: str


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration container."""
    server: ServerConfig
    catalog: CatalogConfig
    cosmosdb: CosmosDBConfig
    query: QueryConfig
    logging: LoggingConfig


def load_config() -> AppConfig:
    """
    Load and validate all application configuration.

    Loads from the YAML file for non-sensitive settings and .env for
    credentials. Fails fast if required configuration is missing.

    Returns:
        AppConfig: Validated application configuration.

    Raises:
        ConfigurationError: If required configuration is missing or invalid.
    """
    # Load environment variables from .env file
    load_dotenv()

    yaml_config = _load_yaml_config()

    # Build server config; PORT from the environment wins over the file
    server_section = yaml_config.get("server", {})

    server_config = ServerConfig(
        host=server_section.get("host", "0.0.0.0"),
        port=_as_int("server", "port", _get_optional_env("PORT", server_section.get("port", 5000))),
    )

    # Build catalog config
    catalog_section = yaml_config.get("catalog", {})

    catalog_config = CatalogConfig(
        source_url=_get_optional_env(
            "CATALOG_SOURCE_URL",
            catalog_section.get("source_url", DEFAULT_CATALOG_SOURCE_URL),
        ),
        timeout_seconds=float(catalog_section.get("timeout_seconds", 30.0)),
    )

    # Build CosmosDB config
    cosmosdb_section = yaml_config.get("cosmosdb", {})

    cosmosdb_config = CosmosDBConfig(
        endpoint=_get_required_env("COSMOSDB_ENDPOINT"),
        key=_get_required_env("COSMOSDB_KEY"),
        database_name=cosmosdb_section.get("database_name", "transactionsDB"),
        container_name=cosmosdb_section.get("container_name", "transactions"),
        partition_key_path=cosmosdb_section.get("partition_key_path", "/id"),
    )

    # Build query config
    query_section = yaml_config.get("query", {})

    query_config = QueryConfig(
        reference_year=_as_int("query", "reference_year", query_section.get("reference_year", 2023)),
        default_per_page=_as_int("query", "default_per_page", query_section.get("default_per_page", 10)),
        max_per_page=_as_int("query", "max_per_page", query_section.get("max_per_page", 100)),
    )

    if query_config.default_per_page < 1 or query_config.max_per_page < query_config.default_per_page:
        raise ConfigurationError(
            "'query.default_per_page' must be positive and not exceed 'query.max_per_page'"
        )

    # Build Logging config
    logging_section = yaml_config.get("logging", {})

    logging_config = LoggingConfig(
        level=logging_section.get("level", "INFO"),
    )

    return AppConfig(
        server=server_config,
        catalog=catalog_config,
        cosmosdb=cosmosdb_config,
        query=query_config,
        logging=logging_config,
    )


# Module-level singleton for convenience
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get the application configuration singleton.

    Lazy-loads configuration on first access.
    Config file is selected based on APP_ENV environment variable.

    Returns:
        AppConfig: Application configuration.

    Raises:
        ConfigurationError: If required configuration is missing.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset the config singleton. Useful for testing."""
    global _config
    _config = None
