"""Import job state and audit records exchanged with the hosting service."""

from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field

from comphygiene.models.analysis import IssueSeverity, IssueType
from comphygiene.models.cleaning import CleaningSummary


class ImportStatus(StrEnum):
    PENDING = "PENDING"  # waiting on the external queue
    REVIEW = "REVIEW"
    CLEANING = "CLEANING"


class IssueResolution(StrEnum):
    OPEN = "OPEN"
    AUTO_FIXED = "AUTO_FIXED"


class ImportJob(BaseModel):
    """One uploaded file moving through analysis and cleaning."""

    job_id: str
    tenant_id: str
    file_name: str
    file_size: int = 0
    status: ImportStatus = ImportStatus.PENDING
    total_rows: int = 0
    encoding: str = ""
    clean_rows: int = 0
    reject_rows: int = 0


class AuditRecord(BaseModel):
    """An issue stored verbatim, keyed by (import_job_id, row, column)."""

    import_job_id: str
    row: int
    column: int
    field_name: str
    issue_type: IssueType
    severity: IssueSeverity
    original_value: str
    cleaned_value: Optional[str] = None
    resolution: IssueResolution = IssueResolution.OPEN


class CleanOutcome(BaseModel):
    """What the import service reports back after a cleaning run."""

    job: ImportJob
    summary: CleaningSummary
    cleaned_path: str
    rejects_path: Optional[str] = None
    audit_records: list[AuditRecord] = Field(default_factory=list)
