"""ImportHygieneService: runs uploaded files through analysis and cleaning.

The service owns the I/O around the pure hygiene pipeline: raw bytes and
CSV artifacts go to the file store, analysis reports go to the cache.
Queueing, persistence of job rows and HTTP live in the host application.
"""

from __future__ import annotations

import logging

from comphygiene.core.config import AppSettings
from comphygiene.core.exceptions import ImportJobError
from comphygiene.core.protocols import ICacheBackend, IFileStore
from comphygiene.core.types import ImportJobId, TenantId
from comphygiene.hygiene.analyzer import analyze_file
from comphygiene.hygiene.cleaner import clean_data
from comphygiene.hygiene.csv_parser import parse_csv
from comphygiene.hygiene.encoding import decode_bytes, detect_encoding
from comphygiene.hygiene.export import (
    diff_audit_records,
    issue_audit_records,
    to_cleaned_csv,
    to_rejects_csv,
)
from comphygiene.models.analysis import AnalysisReport, AnalyzerOptions
from comphygiene.models.cleaning import CleaningConfig
from comphygiene.models.import_job import CleanOutcome, ImportJob, ImportStatus
from comphygiene.persistence import create_persistence

logger = logging.getLogger(__name__)

RAW_FILE = "raw"
CLEANED_FILE = "cleaned.csv"
REJECTS_FILE = "rejects.csv"
CSV_CONTENT_TYPE = "text/csv"


class ImportHygieneService:
    """Upload, analyze and clean import jobs for a tenant.

    Collaborators are injected at construction time so tests can pass
    in-memory backends and production wiring can pass S3 and Redis.
    """

    def __init__(
        self,
        *,
        settings: AppSettings,
        file_store: IFileStore,
        cache: ICacheBackend,
        options: AnalyzerOptions | None = None,
    ) -> None:
        self._settings = settings
        self._files = file_store
        self._cache = cache
        self._options = options or AnalyzerOptions()

    @classmethod
    def from_settings(cls, settings: AppSettings | None = None) -> ImportHygieneService:
        """Wire the service to S3 and Redis from application settings."""
        settings = settings or AppSettings()
        file_store, cache = create_persistence(settings)
        logger.info("Import service ready (environment=%s)", settings.environment)
        return cls(settings=settings, file_store=file_store, cache=cache)

    # -- paths and keys -------------------------------------------------

    def artifact_path(self, job: ImportJob, name: str) -> str:
        prefix = self._settings.imports.artifact_prefix.rstrip("/")
        return f"{prefix}/{job.tenant_id}/{job.job_id}/{name}"

    @staticmethod
    def report_key(job: ImportJob) -> str:
        return f"report:{job.tenant_id}:{job.job_id}"

    # -- operations -----------------------------------------------------

    def upload(
        self, tenant_id: TenantId, job_id: ImportJobId, file_name: str, data: bytes,
    ) -> tuple[ImportJob, AnalysisReport | None]:
        """Store a raw upload and analyze it unless it is large.

        Large files come back PENDING with no report; the host is expected
        to queue them and call :meth:`analyze` later.
        """
        encoding = detect_encoding(data)
        parsed = parse_csv(
            decode_bytes(data, encoding),
            delimiter=self._options.delimiter,
            has_headers=self._options.has_headers,
        )
        job = ImportJob(
            job_id=job_id,
            tenant_id=tenant_id,
            file_name=file_name,
            file_size=len(data),
            total_rows=len(parsed.rows),
            encoding=encoding.encoding,
        )
        self._files.write(self.artifact_path(job, RAW_FILE), data)
        logger.info(
            "Stored upload %s for tenant %s (%d bytes, %d rows)",
            job_id, tenant_id, len(data), job.total_rows,
        )

        if job.total_rows > self._settings.imports.large_file_row_threshold:
            logger.info(
                "Job %s exceeds %d rows; leaving PENDING for async analysis",
                job_id, self._settings.imports.large_file_row_threshold,
            )
            return job, None

        report = self.analyze(job)
        return job.model_copy(update={"status": ImportStatus.REVIEW}), report

    def analyze(self, job: ImportJob) -> AnalysisReport:
        """Analyze the stored upload for ``job`` and cache the report."""
        data = self._read_raw(job)
        report = analyze_file(data, self._options, self._settings.analyzer)
        self._cache.setex(
            self.report_key(job),
            self._settings.imports.report_cache_ttl,
            report.model_dump_json(),
        )
        return report

    def get_report(self, job: ImportJob) -> AnalysisReport:
        """Cached report for ``job``, re-analyzing when the cache has expired."""
        cached = self._cache.get(self.report_key(job))
        if cached is not None:
            return AnalysisReport.model_validate_json(cached)
        logger.debug("Report cache miss for job %s", job.job_id)
        return self.analyze(job)

    def clean(self, job: ImportJob, config: CleaningConfig | None = None) -> CleanOutcome:
        """Clean the stored upload and write the cleaned and rejects CSVs."""
        report = self.get_report(job)
        data = self._read_raw(job)
        parsed = parse_csv(
            decode_bytes(data, report.encoding),
            delimiter=self._options.delimiter,
            has_headers=self._options.has_headers,
        )
        max_rows = self._options.max_rows
        if max_rows is None:
            max_rows = self._settings.analyzer.max_rows
        rows = parsed.rows[:max_rows] if max_rows is not None else parsed.rows

        result = clean_data(rows, parsed.headers, report, config)

        cleaned_path = self._files.write(
            self.artifact_path(job, CLEANED_FILE),
            to_cleaned_csv(result).encode("utf-8"),
            content_type=CSV_CONTENT_TYPE,
        )
        rejects_path = None
        if result.rejected_rows:
            rejects_path = self._files.write(
                self.artifact_path(job, REJECTS_FILE),
                to_rejects_csv(result).encode("utf-8"),
                content_type=CSV_CONTENT_TYPE,
            )

        updated = job.model_copy(update={
            "status": ImportStatus.CLEANING,
            "clean_rows": len(result.cleaned_rows),
            "reject_rows": len(result.rejected_rows),
        })
        logger.info(
            "Job %s cleaned: %d kept, %d rejected",
            job.job_id, updated.clean_rows, updated.reject_rows,
        )
        return CleanOutcome(
            job=updated,
            summary=result.summary,
            cleaned_path=cleaned_path,
            rejects_path=rejects_path,
            audit_records=[
                *issue_audit_records(job.job_id, report),
                *diff_audit_records(job.job_id, result),
            ],
        )

    def _read_raw(self, job: ImportJob) -> bytes:
        path = self.artifact_path(job, RAW_FILE)
        if not self._files.exists(path):
            raise ImportJobError(job.job_id, f"no upload stored at {path}")
        return self._files.read(path)
