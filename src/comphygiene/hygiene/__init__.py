"""Data hygiene pipeline: analyze a messy HR/payroll CSV, then clean it.

The two call shapes used by the hosting service are :func:`analyze` and
:func:`clean`; everything else is exported for direct use and testing.
"""

from __future__ import annotations

from comphygiene.core.types import Row, Rows
from comphygiene.hygiene.analyzer import analyze_file, analyze_rows, infer_field_type
from comphygiene.hygiene.cleaner import clean_cell, clean_data
from comphygiene.hygiene.csv_parser import ParsedCSV, detect_delimiter, parse_csv
from comphygiene.hygiene.duplicates import find_duplicates
from comphygiene.hygiene.encoding import decode_bytes, detect_bom, detect_encoding
from comphygiene.hygiene.export import (
    diff_audit_records,
    issue_audit_records,
    to_cleaned_csv,
    to_rejects_csv,
)
from comphygiene.hygiene.field_validators import validate_field
from comphygiene.hygiene.hidden_chars import detect_hidden_characters, replace_hidden_characters
from comphygiene.models.analysis import AnalysisReport, AnalyzerOptions, FieldType
from comphygiene.models.cleaning import CleaningConfig, CleaningResult


def analyze(raw_bytes: bytes, column_mapping: dict[str, FieldType] | None = None) -> AnalysisReport:
    """Analyze raw file bytes, optionally pinning column field types."""
    return analyze_file(raw_bytes, AnalyzerOptions(column_mapping=column_mapping or {}))


def clean(
    rows: Rows,
    headers: Row,
    report: AnalysisReport,
    config: CleaningConfig | None = None,
) -> CleaningResult:
    """Clean parsed rows against the report produced for the same file."""
    return clean_data(rows, headers, report, config)


__all__ = [
    "ParsedCSV",
    "analyze",
    "analyze_file",
    "analyze_rows",
    "clean",
    "clean_cell",
    "clean_data",
    "decode_bytes",
    "detect_bom",
    "detect_delimiter",
    "detect_encoding",
    "detect_hidden_characters",
    "diff_audit_records",
    "find_duplicates",
    "infer_field_type",
    "issue_audit_records",
    "parse_csv",
    "replace_hidden_characters",
    "to_cleaned_csv",
    "to_rejects_csv",
    "validate_field",
]
