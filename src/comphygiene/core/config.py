"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class AnalyzerConfig(BaseSettings):
    """File analysis and column-type inference tuning."""

    model_config = {"env_prefix": "COMPHYGIENE_ANALYZER_"}

    sample_size: int = 50  # non-empty values sampled per column for inference
    inference_threshold: float = 0.8
    unique_field_types: list[str] = ["EMPLOYEE_ID"]
    max_rows: int | None = None


class ImportConfig(BaseSettings):
    """Import job handling: artifact layout, caching and async routing."""

    model_config = {"env_prefix": "COMPHYGIENE_IMPORT_"}

    large_file_row_threshold: int = 10_000
    artifact_prefix: str = "imports"
    report_cache_ttl: int = 3600  # 1 hour


class RedisConfig(BaseSettings):
    """Redis cache configuration."""

    model_config = {"env_prefix": "COMPHYGIENE_REDIS_"}

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    key_prefix: str = "comphygiene:"


class S3Config(BaseSettings):
    """S3 file storage configuration."""

    model_config = {"env_prefix": "COMPHYGIENE_S3_"}

    bucket: str = "comphygiene-imports"
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "COMPHYGIENE_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"

    analyzer: AnalyzerConfig = AnalyzerConfig()
    imports: ImportConfig = ImportConfig()
    redis: RedisConfig = RedisConfig()
    s3: S3Config = S3Config()
