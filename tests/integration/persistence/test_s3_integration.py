"""Integration tests for S3FileStore and the import service against LocalStack."""

from __future__ import annotations

import uuid

import pytest

from comphygiene.core.config import AppSettings, S3Config
from comphygiene.models.import_job import ImportStatus
from comphygiene.persistence.memory_backend import MemoryCacheBackend
from comphygiene.persistence.s3_backend import S3FileStore
from comphygiene.services.import_service import ImportHygieneService
from tests.integration.conftest import LOCALSTACK_URL, skip_no_localstack

CSV = b"Employee ID,Email\nE1,a@x.com\nE1,b@x.com\nE2,c@x.com\n"


@skip_no_localstack
class TestS3Integration:
    @pytest.fixture
    def store(self, artifact_bucket):
        return S3FileStore(
            bucket=artifact_bucket,
            region="us-east-1",
            endpoint_url=LOCALSTACK_URL,
        )

    def test_write_then_exists(self, store):
        key = f"inttest/{uuid.uuid4()}/raw"
        assert store.exists(key) is False
        store.write(key, b"id\n1\n")
        assert store.exists(key) is True
        assert store.read(key) == b"id\n1\n"

    def test_import_round_trip_writes_artifacts(self, store, artifact_bucket):
        settings = AppSettings(s3=S3Config(bucket=artifact_bucket, endpoint_url=LOCALSTACK_URL))
        service = ImportHygieneService(settings=settings, file_store=store, cache=MemoryCacheBackend())
        job_id = str(uuid.uuid4())

        job, report = service.upload("tenant-int", job_id, "employees.csv", CSV)
        assert job.status == ImportStatus.REVIEW
        assert report is not None

        outcome = service.clean(job)
        assert outcome.job.clean_rows == 1
        assert outcome.job.reject_rows == 2
        keys = store.list_files(f"imports/tenant-int/{job_id}/")
        assert sorted(k.rsplit("/", 1)[1] for k in keys) == ["cleaned.csv", "raw", "rejects.csv"]
