"""Tests for ImportHygieneService using in-memory backends."""

from __future__ import annotations

import logging

import pytest
from moto import mock_aws

from comphygiene.core.config import AppSettings, ImportConfig
from comphygiene.core.exceptions import ImportJobError
from comphygiene.models.analysis import AnalysisReport
from comphygiene.models.cleaning import CleaningConfig
from comphygiene.models.import_job import ImportJob, ImportStatus, IssueResolution
from comphygiene.persistence.redis_backend import RedisCacheBackend
from comphygiene.persistence.s3_backend import S3FileStore
from comphygiene.services.import_service import ImportHygieneService
from tests.fakes import MemoryCacheBackend, MemoryFileStore


@pytest.fixture
def file_store():
    return MemoryFileStore()


@pytest.fixture
def cache():
    return MemoryCacheBackend()


@pytest.fixture
def service(file_store, cache):
    return ImportHygieneService(settings=AppSettings(), file_store=file_store, cache=cache)


class TestUpload:
    def test_small_file_is_analyzed(self, service, file_store, cache, employee_csv):
        job, report = service.upload("t1", "j1", "employees.csv", employee_csv)
        assert job.status == ImportStatus.REVIEW
        assert job.total_rows == 3
        assert job.file_size == len(employee_csv)
        assert job.encoding == "UTF-8"
        assert isinstance(report, AnalysisReport)
        assert file_store.read("imports/t1/j1/raw") == employee_csv
        assert cache.get("report:t1:j1") == report.model_dump_json()
        assert cache.ttls["report:t1:j1"] == 3600

    def test_large_file_stays_pending(self, file_store, cache, employee_csv):
        settings = AppSettings(imports=ImportConfig(large_file_row_threshold=2))
        service = ImportHygieneService(settings=settings, file_store=file_store, cache=cache)
        job, report = service.upload("t1", "j2", "big.csv", employee_csv)
        assert job.status == ImportStatus.PENDING
        assert report is None
        assert cache.get("report:t1:j2") is None
        assert file_store.exists("imports/t1/j2/raw")

        service.analyze(job)
        assert cache.get("report:t1:j2") is not None


class TestGetReport:
    def test_cache_hit(self, service, cache, employee_csv):
        job, report = service.upload("t1", "j1", "employees.csv", employee_csv)
        assert service.get_report(job) == report

    def test_cache_miss_reanalyzes(self, service, cache, employee_csv):
        job, report = service.upload("t1", "j1", "employees.csv", employee_csv)
        cache.delete("report:t1:j1")
        assert service.get_report(job) == report
        assert cache.get("report:t1:j1") is not None


class TestClean:
    def test_writes_artifacts(self, service, file_store, employee_csv):
        job, report = service.upload("t1", "j1", "employees.csv", employee_csv)
        outcome = service.clean(job)

        assert outcome.cleaned_path == "imports/t1/j1/cleaned.csv"
        assert outcome.rejects_path == "imports/t1/j1/rejects.csv"
        assert outcome.job.status == ImportStatus.CLEANING
        assert outcome.job.clean_rows == 2
        assert outcome.job.reject_rows == 1
        assert outcome.summary.total_rows == 3

        cleaned = file_store.read(outcome.cleaned_path).decode("utf-8")
        assert cleaned.splitlines()[-1] == "E1003,kim@example.com,Kim Lee"
        rejects = file_store.read(outcome.rejects_path).decode("utf-8")
        assert rejects.splitlines()[1].startswith("2,E1002")

    def test_audit_records(self, service, employee_csv):
        job, report = service.upload("t1", "j1", "employees.csv", employee_csv)
        outcome = service.clean(job)
        auto_fixed = [r for r in outcome.audit_records if r.resolution == IssueResolution.AUTO_FIXED]
        assert len(outcome.audit_records) == len(report.issues) + 1
        assert len(auto_fixed) == 1
        assert all(r.import_job_id == "j1" for r in outcome.audit_records)

    def test_no_rejects_file_without_rejections(self, service, file_store, employee_csv):
        job, _ = service.upload("t1", "j1", "employees.csv", employee_csv)
        outcome = service.clean(job, CleaningConfig(key_fields=[]))
        assert outcome.rejects_path is None
        assert not file_store.exists("imports/t1/j1/rejects.csv")
        assert outcome.job.clean_rows == 3

    def test_clean_before_upload_raises(self, service):
        job = ImportJob(job_id="missing", tenant_id="t1", file_name="x.csv")
        with pytest.raises(ImportJobError):
            service.clean(job)

    def test_artifact_prefix_from_settings(self, file_store, cache, employee_csv):
        settings = AppSettings(imports=ImportConfig(artifact_prefix="hygiene/"))
        service = ImportHygieneService(settings=settings, file_store=file_store, cache=cache)
        job, _ = service.upload("t9", "j9", "employees.csv", employee_csv)
        outcome = service.clean(job)
        assert outcome.cleaned_path == "hygiene/t9/j9/cleaned.csv"
        assert sorted(file_store.list_files("hygiene/t9/j9/")) == [
            "hygiene/t9/j9/cleaned.csv",
            "hygiene/t9/j9/raw",
            "hygiene/t9/j9/rejects.csv",
        ]


class TestFromSettings:
    def test_wires_s3_and_redis(self):
        with mock_aws():
            service = ImportHygieneService.from_settings(AppSettings(log_level="DEBUG"))
        assert isinstance(service._files, S3FileStore)
        assert isinstance(service._cache, RedisCacheBackend)

    def test_leaves_host_logging_alone(self):
        root = logging.getLogger()
        handlers_before = list(root.handlers)
        level_before = root.level
        root.setLevel(logging.WARNING)
        try:
            with mock_aws():
                ImportHygieneService.from_settings(AppSettings(log_level="DEBUG"))
            assert root.level == logging.WARNING
            assert root.handlers == handlers_before
        finally:
            root.setLevel(level_before)


class TestJobLifecycle:
    def test_every_status_is_reachable(self, file_store, cache, employee_csv):
        settings = AppSettings(imports=ImportConfig(large_file_row_threshold=2))
        service = ImportHygieneService(settings=settings, file_store=file_store, cache=cache)
        pending, _ = service.upload("t1", "big", "big.csv", employee_csv)
        small, _ = ImportHygieneService(
            settings=AppSettings(), file_store=file_store, cache=cache,
        ).upload("t1", "small", "small.csv", employee_csv)
        cleaned = service.clean(pending).job

        seen = {pending.status, small.status, cleaned.status}
        assert seen == set(ImportStatus)
        assert set(ImportJob.model_fields) == {
            "job_id", "tenant_id", "file_name", "file_size", "status",
            "total_rows", "encoding", "clean_rows", "reject_rows",
        }
