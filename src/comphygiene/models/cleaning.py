"""Cleaning pipeline models: configuration, cell diffs, row verdicts, results."""

from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field


class CleaningOperation(StrEnum):
    STRIP_BOM = "stripBOM"
    REPLACE_HIDDEN_CHARS = "replaceHiddenChars"
    TRIM_WHITESPACE = "trimWhitespace"
    COLLAPSE_WHITESPACE = "collapseWhitespace"


class RowDecision(StrEnum):
    CLEANED = "cleaned"
    UNCHANGED = "unchanged"
    REJECTED = "rejected"


class CleaningConfig(BaseModel):
    """Recognized cleaning options.

    ``key_fields=None`` derives the key fields from the analysis report
    (columns typed EMPLOYEE_ID or EMAIL); an empty list disables rejection.
    """

    strip_bom: bool = True
    replace_hidden_chars: bool = True
    trim_whitespace: bool = True
    collapse_whitespace: bool = True  # only applies to text_fields
    key_fields: Optional[list[str]] = None
    text_fields: list[str] = Field(default_factory=list)


class CellDiff(BaseModel):
    """One cell whose cleaned value differs from its original."""

    model_config = {"frozen": True}

    row: int  # 1-indexed data row
    column: int
    column_name: str
    original_value: str
    cleaned_value: str
    operations: list[CleaningOperation] = Field(default_factory=list)


class RowResult(BaseModel):
    model_config = {"frozen": True}

    row_index: int  # 1-indexed data row
    decision: RowDecision
    row: list[str] = Field(default_factory=list)
    diffs: list[CellDiff] = Field(default_factory=list)
    reject_reasons: list[str] = Field(default_factory=list)


class CleaningSummary(BaseModel):
    model_config = {"frozen": True}

    total_rows: int = 0
    cleaned_rows: int = 0
    rejected_rows: int = 0
    unchanged_rows: int = 0
    total_cells_modified: int = 0
    operation_counts: dict[str, int] = Field(default_factory=dict)


class CleaningResult(BaseModel):
    """Output of the cleaning pipeline, persisted downstream as two CSVs."""

    model_config = {"frozen": True}

    cleaned_rows: list[list[str]] = Field(default_factory=list)
    rejected_rows: list[RowResult] = Field(default_factory=list)
    all_rows: list[RowResult] = Field(default_factory=list)
    diff_report: list[CellDiff] = Field(default_factory=list)
    summary: CleaningSummary = CleaningSummary()
    headers: list[str] = Field(default_factory=list)
