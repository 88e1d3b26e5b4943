"""Pluggable persistence backends behind Protocol interfaces."""

from __future__ import annotations

from comphygiene.core.config import AppSettings
from comphygiene.persistence.protocols import ICacheBackend, IFileStore
from comphygiene.persistence.redis_backend import RedisCacheBackend
from comphygiene.persistence.s3_backend import S3FileStore


def create_persistence(settings: AppSettings | None = None) -> tuple[IFileStore, ICacheBackend]:
    """Create wired-up persistence backends from application settings.

    Returns:
        Tuple of (file_store, cache).
    """
    if settings is None:
        settings = AppSettings()

    cache = RedisCacheBackend.from_config(settings.redis)

    file_store = S3FileStore(
        bucket=settings.s3.bucket,
        region=settings.s3.region,
        endpoint_url=settings.s3.endpoint_url,
    )

    return file_store, cache
