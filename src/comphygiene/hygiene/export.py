"""CSV artifacts and audit records derived from analysis and cleaning results."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Sequence

from comphygiene.models.analysis import AnalysisReport, IssueSeverity, IssueType
from comphygiene.models.cleaning import CleaningResult
from comphygiene.models.import_job import AuditRecord, IssueResolution

REJECT_REASON_SEPARATOR = "; "
CRLF = "\r\n"


def rows_to_csv(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    """Render rows as RFC 4180 CSV.

    Fields holding a comma, quote, CR or LF are quoted; the writer quotes
    any character of its line terminator, so CRLF covers bare CRs too.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator=CRLF)
    writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue()


def to_cleaned_csv(result: CleaningResult) -> str:
    return rows_to_csv(result.headers, result.cleaned_rows)


def to_rejects_csv(result: CleaningResult) -> str:
    """Rejected rows as ``rowIndex, <headers>, rejectReasons``."""
    headers = ["rowIndex", *result.headers, "rejectReasons"]
    rows = (
        [str(r.row_index), *r.row, REJECT_REASON_SEPARATOR.join(r.reject_reasons)]
        for r in result.rejected_rows
    )
    return rows_to_csv(headers, rows)


def _column_name(headers: Sequence[str], column: int) -> str:
    return headers[column] if column < len(headers) else f"Column {column + 1}"


def issue_audit_records(job_id: str, report: AnalysisReport) -> list[AuditRecord]:
    """One open audit record per analysis issue, stored verbatim."""
    headers = report.file_info.headers
    return [
        AuditRecord(
            import_job_id=job_id,
            row=issue.row,
            column=issue.column,
            field_name=_column_name(headers, issue.column),
            issue_type=issue.type,
            severity=issue.severity,
            original_value=issue.original_value,
            cleaned_value=issue.suggested_fix or None,
        )
        for issue in report.issues
    ]


def diff_audit_records(job_id: str, result: CleaningResult) -> list[AuditRecord]:
    """One auto-fixed audit record per cell the cleaner changed."""
    return [
        AuditRecord(
            import_job_id=job_id,
            row=diff.row,
            column=diff.column,
            field_name=diff.column_name,
            issue_type=IssueType.CUSTOM,
            severity=IssueSeverity.INFO,
            original_value=diff.original_value,
            cleaned_value=diff.cleaned_value,
            resolution=IssueResolution.AUTO_FIXED,
        )
        for diff in result.diff_report
    ]
