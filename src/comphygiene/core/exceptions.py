"""Data hygiene exception hierarchy.

Malformed data is never an exception here; it is reported as an Issue.
These types cover programmer errors and collaborator failures only.
"""

from __future__ import annotations


class HygieneError(Exception):
    """Base exception for all comphygiene errors."""


class UnknownFieldTypeError(HygieneError):
    """A field type outside the closed FieldType set was requested."""

    def __init__(self, field_type: object) -> None:
        self.field_type = field_type
        super().__init__(f"Unknown field type: {field_type!r}")


class ReportMismatchError(HygieneError):
    """Rows handed to cleaning do not belong to the supplied analysis report."""

    def __init__(self, expected: list[str], actual: list[str]) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Report headers {expected!r} do not match row headers {actual!r}")


class ImportJobError(HygieneError):
    """Import job is missing or in the wrong state for the requested step."""

    def __init__(self, job_id: str, message: str) -> None:
        self.job_id = job_id
        super().__init__(f"Import job {job_id}: {message}")


class ArtifactStoreError(HygieneError):
    """File store (S3) operation failed."""


class CacheError(HygieneError):
    """Redis cache operation failed."""
