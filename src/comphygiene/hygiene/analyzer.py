"""File analyzer.

Orchestrates encoding detection, CSV parsing, hidden character scanning,
field validation and duplicate detection into a single AnalysisReport.
The analysis is deterministic: identical bytes and options always give an
identical report.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Optional, TypeVar

from comphygiene.core.config import AnalyzerConfig
from comphygiene.hygiene.csv_parser import parse_csv
from comphygiene.hygiene.duplicates import find_duplicates
from comphygiene.hygiene.encoding import decode_bytes, detect_encoding
from comphygiene.hygiene.field_validators import validate_field
from comphygiene.hygiene.hidden_chars import detect_hidden_characters, issue_type_for
from comphygiene.models.analysis import (
    AnalysisReport,
    AnalysisSummary,
    AnalyzerOptions,
    EncodingResult,
    FieldReport,
    FieldType,
    FileInfo,
    Issue,
    IssueSeverity,
    IssueType,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

HEADER_ROW = 1  # report rows are 1-indexed and the header is row 1
LOW_CONFIDENCE = 0.8

# ---------------------------------------------------------------------------
# Column type inference
# ---------------------------------------------------------------------------

_SEP = r"[_\s-]?"

HEADER_PATTERNS: tuple[tuple[re.Pattern[str], FieldType], ...] = (
    (re.compile(
        rf"^(employee{_SEP}id|emp{_SEP}id|employee{_SEP}code|emp{_SEP}code|staff{_SEP}id)$", re.I,
    ), FieldType.EMPLOYEE_ID),
    (re.compile(rf"^(email|e{_SEP}mail|email{_SEP}address)$", re.I), FieldType.EMAIL),
    (re.compile(rf"^(currency|curr|currency{_SEP}code)$", re.I), FieldType.CURRENCY),
    (re.compile(
        rf"^(date|hire{_SEP}date|start{_SEP}date|end{_SEP}date|termination{_SEP}date|birth{_SEP}date|dob)$",
        re.I,
    ), FieldType.DATE),
    (re.compile(
        rf"^(salary|base{_SEP}salary|total{_SEP}comp|bonus|amount|pay|wage|compensation)$", re.I,
    ), FieldType.NUMBER),
)

# Types a column can be voted into from its values alone, in tie-break order.
# EMPLOYEE_ID is excluded: nearly any single word passes its pattern.
VALUE_INFERABLE_TYPES: tuple[FieldType, ...] = (
    FieldType.DATE,
    FieldType.EMAIL,
    FieldType.CURRENCY,
    FieldType.NUMBER,
)

_DUPLICATE_LABELS = {
    FieldType.EMPLOYEE_ID: "employee ID",
    FieldType.EMAIL: "email",
    FieldType.CURRENCY: "currency code",
}


def field_type_from_header(header: str) -> Optional[FieldType]:
    name = header.strip()
    for pattern, field_type in HEADER_PATTERNS:
        if pattern.match(name):
            return field_type
    return None


def infer_field_type(
    header: str,
    values: Sequence[str],
    sample_size: int = 50,
    threshold: float = LOW_CONFIDENCE,
) -> Optional[FieldType]:
    """Infer a column's field type from its header, then its values.

    Values are sampled (first ``sample_size`` non-empty) and each
    value-inferable type is scored by the share of the sample it accepts.
    The best score at or above ``threshold`` wins; otherwise TEXT. A column
    with no header hint and no values stays untyped.
    """
    from_header = field_type_from_header(header)
    if from_header is not None:
        return from_header

    sample = [v for v in values if v and v.strip()][:sample_size]
    if not sample:
        return None

    best, best_rate = FieldType.TEXT, 0.0
    for candidate in VALUE_INFERABLE_TYPES:
        passed = sum(1 for v in sample if validate_field(v, candidate).valid)
        rate = passed / len(sample)
        if rate >= threshold and rate > best_rate:
            best, best_rate = candidate, rate
    return best


def _lookup(mapping: Mapping[str, T], header: str) -> Optional[T]:
    if header in mapping:
        return mapping[header]
    folded = header.strip().lower()
    for key, value in mapping.items():
        if key.strip().lower() == folded:
            return value
    return None


def _cell(row: Sequence[str], column: int) -> str:
    return row[column] if column < len(row) else ""


def build_column_mapping(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    options: AnalyzerOptions,
    config: AnalyzerConfig,
) -> dict[int, Optional[FieldType]]:
    """Resolve a field type per column: explicit mapping first, else inference."""
    mapping: dict[int, Optional[FieldType]] = {}
    for index, header in enumerate(headers):
        explicit = _lookup(options.column_mapping, header)
        if explicit is not None:
            mapping[index] = FieldType(explicit)
            continue
        inferred = infer_field_type(
            header,
            [_cell(row, index) for row in rows],
            sample_size=config.sample_size,
            threshold=config.inference_threshold,
        )
        logger.debug("Inferred column %d (%r) as %s", index, header, inferred)
        mapping[index] = inferred
    return mapping


# ---------------------------------------------------------------------------
# Issue builders
# ---------------------------------------------------------------------------

def file_level_issues(encoding: EncodingResult) -> list[Issue]:
    """BOM and encoding notices, reported at row 0, column 0."""
    issues: list[Issue] = []
    if encoding.has_bom:
        issues.append(Issue(
            row=0,
            column=0,
            type=IssueType.BOM,
            severity=IssueSeverity.INFO,
            original_value=f"BOM: {encoding.bom_type}",
            suggested_fix="Remove BOM marker",
            description=f"File contains a {encoding.bom_type} Byte Order Mark",
        ))
    if encoding.encoding != "UTF-8" or encoding.confidence < LOW_CONFIDENCE:
        issues.append(Issue(
            row=0,
            column=0,
            type=IssueType.ENCODING,
            severity=IssueSeverity.INFO if encoding.encoding == "UTF-8" else IssueSeverity.WARNING,
            original_value=encoding.encoding,
            suggested_fix="Convert to UTF-8",
            description=(
                f"File encoding detected as {encoding.encoding} "
                f"(confidence: {encoding.confidence * 100:.0f}%)"
            ),
        ))
    return issues


@dataclass
class _ColumnTally:
    """Mutable per-column accumulator, frozen into a FieldReport at the end."""

    index: int
    name: str
    field_type: Optional[FieldType]
    empty: int = 0
    invalid: int = 0
    duplicates: int = 0
    issues: list[Issue] = field(default_factory=list)

    def freeze(self, total: int) -> FieldReport:
        return FieldReport(
            column_index=self.index,
            column_name=self.name,
            field_type=self.field_type,
            total_values=total,
            empty_values=self.empty,
            invalid_values=self.invalid,
            duplicate_values=self.duplicates,
            issues=list(self.issues),
        )


def _summarize(issues: Sequence[Issue]) -> AnalysisSummary:
    return AnalysisSummary(
        total_issues=len(issues),
        error_count=sum(1 for i in issues if i.severity == IssueSeverity.ERROR),
        warning_count=sum(1 for i in issues if i.severity == IssueSeverity.WARNING),
        info_count=sum(1 for i in issues if i.severity == IssueSeverity.INFO),
    )


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def analyze_rows(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    *,
    encoding: EncodingResult | None = None,
    size: int = 0,
    options: AnalyzerOptions | None = None,
    config: AnalyzerConfig | None = None,
) -> AnalysisReport:
    """Analyze already-parsed rows.

    ``encoding`` describes the source bytes when known; pre-decoded input
    is treated as certain UTF-8 with no BOM.
    """
    options = options or AnalyzerOptions()
    config = config or AnalyzerConfig()
    encoding = encoding or EncodingResult(encoding="UTF-8", confidence=1.0)
    headers = list(headers)

    max_rows = options.max_rows if options.max_rows is not None else config.max_rows
    if max_rows is not None:
        rows = rows[:max_rows]

    column_types = build_column_mapping(headers, rows, options, config)
    unique_types = {FieldType(t) for t in config.unique_field_types}
    tallies = [_ColumnTally(i, h, column_types[i]) for i, h in enumerate(headers)]
    issues = file_level_issues(encoding)

    for row_index, row in enumerate(rows):
        report_row = row_index + HEADER_ROW + 1
        for column in range(max(len(row), len(headers))):
            value = _cell(row, column)
            tally = tallies[column] if column < len(tallies) else None
            cell_issues: list[Issue] = []

            for hidden in detect_hidden_characters(value, report_row, column):
                cell_issues.append(Issue(
                    row=report_row,
                    column=column,
                    type=issue_type_for(hidden.char_type),
                    severity=IssueSeverity.WARNING,
                    original_value=value,
                    suggested_fix=hidden.suggested_replacement or "Remove character",
                    description=(
                        f'Hidden character "{hidden.char_type}" at position '
                        f"{hidden.position} (U+{hidden.code_point:04X})"
                    ),
                ))

            if tally is not None:
                if not value.strip():
                    tally.empty += 1
                if tally.field_type is not None:
                    rules = _lookup(options.column_rules, tally.name)
                    result = validate_field(value, tally.field_type, rules)
                    if result.errors:
                        tally.invalid += 1
                    for finding in (*result.errors, *result.warnings):
                        cell_issues.append(Issue(
                            row=report_row,
                            column=column,
                            type=finding.issue_type,
                            severity=finding.severity,
                            original_value=value,
                            description=finding.message,
                        ))
                tally.issues.extend(cell_issues)
            issues.extend(cell_issues)

    for tally in tallies:
        groups = find_duplicates([_cell(row, tally.index) for row in rows])
        tally.duplicates = sum(len(indices) for indices in groups.values())
        if tally.field_type not in unique_types:
            continue
        label = _DUPLICATE_LABELS.get(tally.field_type, "value")
        for key, indices in groups.items():
            report_rows = [i + HEADER_ROW + 1 for i in indices]
            listed = ", ".join(str(r) for r in report_rows)
            for report_row in report_rows:
                issue = Issue(
                    row=report_row,
                    column=tally.index,
                    type=IssueType.DUPLICATE,
                    severity=IssueSeverity.ERROR,
                    original_value=key,
                    suggested_fix=f"Ensure unique {label}s",
                    description=f'Duplicate {label} "{key}" found in rows: {listed}',
                )
                issues.append(issue)
                tally.issues.append(issue)

    report = AnalysisReport(
        file_info=FileInfo(
            size=size,
            total_rows=len(rows),
            total_columns=len(headers),
            headers=headers,
        ),
        encoding=encoding,
        issues=issues,
        summary=_summarize(issues),
        field_reports=[t.freeze(len(rows)) for t in tallies],
    )
    logger.info(
        "Analyzed %d rows x %d columns: %d issues (%d errors, %d warnings, %d info)",
        report.file_info.total_rows,
        report.file_info.total_columns,
        report.summary.total_issues,
        report.summary.error_count,
        report.summary.warning_count,
        report.summary.info_count,
    )
    return report


def analyze_file(
    data: bytes,
    options: AnalyzerOptions | None = None,
    config: AnalyzerConfig | None = None,
) -> AnalysisReport:
    """Analyze a raw CSV upload and produce an AnalysisReport."""
    options = options or AnalyzerOptions()
    encoding = detect_encoding(data)
    text = decode_bytes(data, encoding)
    parsed = parse_csv(text, delimiter=options.delimiter, has_headers=options.has_headers)
    logger.debug(
        "Parsed %d bytes as %s (delimiter=%r, rows=%d)",
        len(data), encoding.encoding, parsed.delimiter, len(parsed.rows),
    )
    return analyze_rows(
        parsed.headers,
        parsed.rows,
        encoding=encoding,
        size=len(data),
        options=options,
        config=config,
    )
