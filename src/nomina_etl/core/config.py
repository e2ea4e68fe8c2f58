"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings


class MongoConfig(BaseSettings):
    """MongoDB document store configuration."""

    model_config = {"env_prefix": "NOMINA_ETL_MONGO_"}

    uri: str = "mongodb://localhost:27017"
    database: str = "eantion"
    server_selection_timeout_ms: int = 5000


class DynamoDBConfig(BaseSettings):
    """DynamoDB document store configuration."""

    model_config = {"env_prefix": "NOMINA_ETL_DYNAMO_"}

    table_prefix: str = "nomina-etl-"
    table_suffix: str = ""  # "-dev", "-uat", or "" for prod
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class LogConfig(BaseSettings):
    """Loguru sink configuration."""

    model_config = {"env_prefix": "NOMINA_ETL_LOG_"}

    colorize: bool = True
    file_level: str = "DEBUG"
    rotation: str = "10 MB"
    retention: str = "7 days"
    log_dir: Path | None = None  # no file sink when unset


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "NOMINA_ETL_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"

    input_dir: Path = Path("raw-data")
    catalog_path: Path | None = None
    backend: Literal["memory", "mongo", "dynamodb"] = "mongo"

    mongo: MongoConfig = MongoConfig()
    dynamodb: DynamoDBConfig = DynamoDBConfig()
    log: LogConfig = LogConfig()
