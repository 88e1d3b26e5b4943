"""Analysis models: issues, validation results, field reports, the analysis report."""

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import Optional, Union

from pydantic import BaseModel, Field


class IssueType(StrEnum):
    BOM = "BOM"
    NBSP = "NBSP"
    ZERO_WIDTH = "ZERO_WIDTH"
    SMART_QUOTE = "SMART_QUOTE"
    ENCODING = "ENCODING"
    INVALID_FORMAT = "INVALID_FORMAT"
    DUPLICATE = "DUPLICATE"
    MISSING_REQUIRED = "MISSING_REQUIRED"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    CUSTOM = "CUSTOM"


class IssueSeverity(StrEnum):
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


class FieldType(StrEnum):
    EMPLOYEE_ID = "EMPLOYEE_ID"
    EMAIL = "EMAIL"
    CURRENCY = "CURRENCY"
    DATE = "DATE"
    NUMBER = "NUMBER"
    TEXT = "TEXT"


class BOMType(StrEnum):
    UTF8 = "UTF-8"
    UTF16_LE = "UTF-16 LE"
    UTF16_BE = "UTF-16 BE"
    NONE = "none"


# ---------------------------------------------------------------------------
# Encoding / hidden characters
# ---------------------------------------------------------------------------

class EncodingResult(BaseModel):
    """Detected character encoding of a raw byte buffer."""

    model_config = {"frozen": True}

    encoding: str
    confidence: float = Field(ge=0.0, le=1.0)
    has_bom: bool = False
    bom_type: BOMType = BOMType.NONE


class HiddenCharacterIssue(BaseModel):
    """One invisible or confusable code point found inside a cell."""

    model_config = {"frozen": True}

    row: int
    column: int
    char_type: str
    position: int  # code point offset within the cell value
    code_point: int
    suggested_replacement: str


# ---------------------------------------------------------------------------
# Field validation
# ---------------------------------------------------------------------------

class FieldValidationRules(BaseModel):
    """Optional constraints layered on top of a field type's own checks."""

    required: Optional[bool] = None  # None means "use the field type default"
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min: Optional[Decimal] = None
    max: Optional[Decimal] = None
    pattern: Optional[re.Pattern[str]] = None
    currency_codes: Optional[list[str]] = None


class ValidationError(BaseModel):
    """A single typed validation finding (error or warning)."""

    model_config = {"frozen": True}

    field: FieldType
    message: str
    issue_type: IssueType
    severity: IssueSeverity


class ValidationResult(BaseModel):
    """Outcome of validating one value; valid iff there are no errors."""

    model_config = {"frozen": True}

    valid: bool
    errors: list[ValidationError] = Field(default_factory=list)
    warnings: list[ValidationError] = Field(default_factory=list)
    value: Union[Decimal, date, str, None] = None


# ---------------------------------------------------------------------------
# Issues and reports
# ---------------------------------------------------------------------------

class Issue(BaseModel):
    """A detected problem at a specific cell.

    Rows are 1-indexed with the header counted as row 1, so the first data
    row is row 2. File-level issues (BOM, encoding) use row 0, column 0.
    """

    model_config = {"frozen": True}

    row: int
    column: int
    type: IssueType
    severity: IssueSeverity
    original_value: str
    suggested_fix: str = ""
    description: str


class FieldReport(BaseModel):
    """Per-column rollup of values and issues."""

    model_config = {"frozen": True}

    column_index: int
    column_name: str
    field_type: Optional[FieldType] = None
    total_values: int = 0
    empty_values: int = 0
    invalid_values: int = 0
    duplicate_values: int = 0
    issues: list[Issue] = Field(default_factory=list)


class FileInfo(BaseModel):
    model_config = {"frozen": True}

    size: int
    total_rows: int
    total_columns: int
    headers: list[str] = Field(default_factory=list)


class AnalysisSummary(BaseModel):
    model_config = {"frozen": True}

    total_issues: int = 0
    error_count: int = 0
    warning_count: int = 0
    info_count: int = 0


class AnalysisReport(BaseModel):
    """Full analysis artifact handed from analysis to cleaning."""

    model_config = {"frozen": True}

    file_info: FileInfo
    encoding: EncodingResult
    issues: list[Issue] = Field(default_factory=list)
    summary: AnalysisSummary = AnalysisSummary()
    field_reports: list[FieldReport] = Field(default_factory=list)


class AnalyzerOptions(BaseModel):
    """Caller-supplied analysis options."""

    column_mapping: dict[str, FieldType] = Field(default_factory=dict)
    column_rules: dict[str, FieldValidationRules] = Field(default_factory=dict)
    max_rows: Optional[int] = None
    has_headers: bool = True
    delimiter: Optional[str] = None
