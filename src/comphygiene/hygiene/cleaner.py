"""Data cleaning pipeline.

Takes parsed rows plus their AnalysisReport and produces cleaned output
with cell-level diffs, a row-level decision for every row, and the set of
rejected rows. Rejection is driven only by ERROR issues on key fields; cell
normalization never causes or prevents it.
"""

from __future__ import annotations

import logging
import re
from collections import Counter, defaultdict
from collections.abc import Sequence

from comphygiene.core.exceptions import ReportMismatchError
from comphygiene.hygiene.hidden_chars import replace_hidden_characters
from comphygiene.models.analysis import AnalysisReport, FieldType, Issue, IssueSeverity
from comphygiene.models.cleaning import (
    CellDiff,
    CleaningConfig,
    CleaningOperation,
    CleaningResult,
    CleaningSummary,
    RowDecision,
    RowResult,
)

logger = logging.getLogger(__name__)

BOM = "\ufeff"
KEY_FIELD_TYPES = frozenset({FieldType.EMPLOYEE_ID, FieldType.EMAIL})
REPORT_ROW_OFFSET = 2  # data row 0 is report row 2 (header is report row 1)

_WHITESPACE_RUN = re.compile(r"\s{2,}")


def build_error_index(issues: Sequence[Issue]) -> dict[tuple[int, int], list[Issue]]:
    """Index ERROR-severity issues by (report row, column)."""
    index: dict[tuple[int, int], list[Issue]] = defaultdict(list)
    for issue in issues:
        if issue.severity == IssueSeverity.ERROR:
            index[(issue.row, issue.column)].append(issue)
    return dict(index)


def _resolve_columns(headers: Sequence[str], names: Sequence[str]) -> list[int]:
    wanted = {n.strip().lower() for n in names}
    return [i for i, h in enumerate(headers) if h.strip().lower() in wanted]


def resolve_key_columns(
    headers: Sequence[str], report: AnalysisReport, config: CleaningConfig,
) -> list[int]:
    """Key-field column indices from config, or from the report's typed columns."""
    if config.key_fields is not None:
        return _resolve_columns(headers, config.key_fields)
    return [
        fr.column_index
        for fr in report.field_reports
        if fr.field_type in KEY_FIELD_TYPES and fr.column_index < len(headers)
    ]


def clean_cell(
    value: str, config: CleaningConfig, text_field: bool = False,
) -> tuple[str, list[CleaningOperation]]:
    """Normalize one value; return it with the operations that changed it.

    Order is fixed: BOM strip, hidden character replacement, trim, then
    whitespace collapsing for text fields.
    """
    cleaned = value
    operations: list[CleaningOperation] = []

    if config.strip_bom and cleaned.startswith(BOM):
        cleaned = cleaned[len(BOM):]
        operations.append(CleaningOperation.STRIP_BOM)

    if config.replace_hidden_chars:
        replaced = replace_hidden_characters(cleaned)
        if replaced != cleaned:
            cleaned = replaced
            operations.append(CleaningOperation.REPLACE_HIDDEN_CHARS)

    if config.trim_whitespace:
        trimmed = cleaned.strip()
        if trimmed != cleaned:
            cleaned = trimmed
            operations.append(CleaningOperation.TRIM_WHITESPACE)

    if text_field and config.collapse_whitespace:
        collapsed = _WHITESPACE_RUN.sub(" ", cleaned)
        if collapsed != cleaned:
            cleaned = collapsed
            operations.append(CleaningOperation.COLLAPSE_WHITESPACE)

    return cleaned, operations


def _check_headers(headers: Sequence[str], report: AnalysisReport) -> None:
    expected = report.file_info.headers
    if not expected:
        return
    if [h.strip().lower() for h in expected] != [h.strip().lower() for h in headers]:
        raise ReportMismatchError(list(expected), list(headers))


def clean_data(
    rows: Sequence[Sequence[str]],
    headers: Sequence[str],
    report: AnalysisReport,
    config: CleaningConfig | None = None,
) -> CleaningResult:
    """Clean parsed rows using their analysis report.

    Every input row ends up in exactly one of ``cleaned_rows`` or
    ``rejected_rows``. Rejected rows are still normalized so the rejects
    export carries clean text.
    """
    config = config or CleaningConfig()
    headers = list(headers)
    _check_headers(headers, report)

    error_index = build_error_index(report.issues)
    key_columns = resolve_key_columns(headers, report, config)
    text_columns = set(_resolve_columns(headers, config.text_fields))

    all_rows: list[RowResult] = []
    diff_report: list[CellDiff] = []
    cleaned_rows: list[list[str]] = []
    rejected_rows: list[RowResult] = []
    operation_counts: Counter[str] = Counter()

    for row_index, row in enumerate(rows):
        report_row = row_index + REPORT_ROW_OFFSET

        reject_reasons = [
            f'Key field "{headers[column]}" has error: {issue.description}'
            for column in key_columns
            for issue in error_index.get((report_row, column), ())
        ]

        cleaned_row: list[str] = []
        diffs: list[CellDiff] = []
        for column, original in enumerate(row):
            original = original or ""
            cleaned, operations = clean_cell(original, config, column in text_columns)
            cleaned_row.append(cleaned)
            if cleaned == original:
                continue
            diffs.append(CellDiff(
                row=row_index + 1,
                column=column,
                column_name=headers[column] if column < len(headers) else f"Column {column + 1}",
                original_value=original,
                cleaned_value=cleaned,
                operations=operations,
            ))
            operation_counts.update(op.value for op in operations)

        if reject_reasons:
            decision = RowDecision.REJECTED
        elif diffs:
            decision = RowDecision.CLEANED
        else:
            decision = RowDecision.UNCHANGED

        result = RowResult(
            row_index=row_index + 1,
            decision=decision,
            row=cleaned_row,
            diffs=diffs,
            reject_reasons=reject_reasons,
        )
        all_rows.append(result)
        diff_report.extend(diffs)
        if decision == RowDecision.REJECTED:
            rejected_rows.append(result)
        else:
            cleaned_rows.append(cleaned_row)

    summary = CleaningSummary(
        total_rows=len(all_rows),
        cleaned_rows=sum(1 for r in all_rows if r.decision == RowDecision.CLEANED),
        rejected_rows=len(rejected_rows),
        unchanged_rows=sum(1 for r in all_rows if r.decision == RowDecision.UNCHANGED),
        total_cells_modified=len(diff_report),
        operation_counts=dict(operation_counts),
    )
    logger.info(
        "Cleaned %d rows: %d cleaned, %d unchanged, %d rejected, %d cells modified",
        summary.total_rows,
        summary.cleaned_rows,
        summary.unchanged_rows,
        summary.rejected_rows,
        summary.total_cells_modified,
    )
    return CleaningResult(
        cleaned_rows=cleaned_rows,
        rejected_rows=rejected_rows,
        all_rows=all_rows,
        diff_report=diff_report,
        summary=summary,
        headers=headers,
    )
