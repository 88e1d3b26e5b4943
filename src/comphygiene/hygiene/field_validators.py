"""Field validators for the six field kinds.

Every validator returns a ValidationResult listing typed errors and
warnings. Malformed data never raises; only an unknown field type does.
"""

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Callable, NamedTuple, Optional, Union

from comphygiene.core.exceptions import UnknownFieldTypeError
from comphygiene.models.analysis import (
    FieldType,
    FieldValidationRules,
    IssueSeverity,
    IssueType,
    ValidationError,
    ValidationResult,
)

# ---------------------------------------------------------------------------
# ISO 4217 currency codes (active codes)
# ---------------------------------------------------------------------------

ISO_4217_CODES = frozenset({
    "AED", "AFN", "ALL", "AMD", "ANG", "AOA", "ARS", "AUD", "AWG", "AZN",
    "BAM", "BBD", "BDT", "BGN", "BHD", "BIF", "BMD", "BND", "BOB", "BRL",
    "BSD", "BTN", "BWP", "BYN", "BZD", "CAD", "CDF", "CHF", "CLP", "CNY",
    "COP", "CRC", "CUP", "CVE", "CZK", "DJF", "DKK", "DOP", "DZD", "EGP",
    "ERN", "ETB", "EUR", "FJD", "FKP", "GBP", "GEL", "GHS", "GIP", "GMD",
    "GNF", "GTQ", "GYD", "HKD", "HNL", "HRK", "HTG", "HUF", "IDR", "ILS",
    "INR", "IQD", "IRR", "ISK", "JMD", "JOD", "JPY", "KES", "KGS", "KHR",
    "KMF", "KPW", "KRW", "KWD", "KYD", "KZT", "LAK", "LBP", "LKR", "LRD",
    "LSL", "LYD", "MAD", "MDL", "MGA", "MKD", "MMK", "MNT", "MOP", "MRU",
    "MUR", "MVR", "MWK", "MXN", "MYR", "MZN", "NAD", "NGN", "NIO", "NOK",
    "NPR", "NZD", "OMR", "PAB", "PEN", "PGK", "PHP", "PKR", "PLN", "PYG",
    "QAR", "RON", "RSD", "RUB", "RWF", "SAR", "SBD", "SCR", "SDG", "SEK",
    "SGD", "SHP", "SLE", "SOS", "SRD", "SSP", "STN", "SVC", "SYP", "SZL",
    "THB", "TJS", "TMT", "TND", "TOP", "TRY", "TTD", "TWD", "TZS", "UAH",
    "UGX", "USD", "UYU", "UZS", "VES", "VND", "VUV", "WST", "XAF", "XCD",
    "XOF", "XPF", "YER", "ZAR", "ZMW", "ZWL",
})

# Practical RFC 5322 subset: one "@", DNS labels of at most 63 chars.
EMAIL_RE = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)

# Alphanumeric with internal hyphens only.
EMPLOYEE_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9-]*[A-Za-z0-9]$|^[A-Za-z0-9]$")

ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
MONTH_NAME_DATE_RE = re.compile(
    r"^(\d{1,2})[-/\s](jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[-/\s](\d{2,4})$",
    re.IGNORECASE,
)
NUMERIC_DATE_RE = re.compile(r"^(\d{1,2})[/.-](\d{1,2})[/.-](\d{2,4})$")

MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

EUROPEAN_NUMBER_RE = re.compile(r"^-?\d{1,3}(?:\.\d{3})*,\d+$")
US_NUMBER_RE = re.compile(r"^-?\d{1,3}(?:,\d{3})*\.\d+$")
US_THOUSANDS_RE = re.compile(r"^-?\d{1,3}(?:,\d{3})+$")
PLAIN_NUMBER_RE = re.compile(r"^-?\d+(?:\.\d+)?$")
LOOSE_NUMBER_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")

EUROPEAN_FORMAT_NOTICE = "European number format detected (comma as decimal separator)"


# ---------------------------------------------------------------------------
# Result builder
# ---------------------------------------------------------------------------

class ValidationResultBuilder:
    """Collects findings for one value, then freezes them into a result."""

    def __init__(self, field_type: FieldType) -> None:
        self._field_type = field_type
        self._errors: list[ValidationError] = []
        self._warnings: list[ValidationError] = []
        self._value: Union[Decimal, date, str, None] = None

    def error(self, message: str, issue_type: IssueType = IssueType.INVALID_FORMAT) -> ValidationResultBuilder:
        self._errors.append(ValidationError(
            field=self._field_type, message=message,
            issue_type=issue_type, severity=IssueSeverity.ERROR,
        ))
        return self

    def warning(
        self,
        message: str,
        issue_type: IssueType = IssueType.INVALID_FORMAT,
        severity: IssueSeverity = IssueSeverity.WARNING,
    ) -> ValidationResultBuilder:
        self._warnings.append(ValidationError(
            field=self._field_type, message=message,
            issue_type=issue_type, severity=severity,
        ))
        return self

    def value(self, value: Union[Decimal, date, str, None]) -> ValidationResultBuilder:
        self._value = value
        return self

    def build(self) -> ValidationResult:
        return ValidationResult(
            valid=not self._errors,
            errors=list(self._errors),
            warnings=list(self._warnings),
            value=self._value,
        )


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

class ParsedDate(NamedTuple):
    value: date
    ambiguous: bool
    format: str


def _expand_year(year: int) -> int:
    if year < 100:
        return year + (2000 if year < 50 else 1900)
    return year


def _calendar_date(year: int, month: int, day: int) -> Optional[date]:
    # date() rejects components that do not round-trip, e.g. 31 Feb.
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_date(value: str) -> Optional[ParsedDate]:
    """Parse ISO, DD-Mon-YY(YY) and A/B/YYYY dates; None if unparseable.

    For A/B/YYYY the MM/DD reading is tried first and DD/MM only if MM/DD
    is not a real calendar date. Both parts <= 12 (and different) makes
    the value ambiguous.
    """
    trimmed = value.strip()

    m = ISO_DATE_RE.match(trimmed)
    if m:
        parsed = _calendar_date(int(m[1]), int(m[2]), int(m[3]))
        return ParsedDate(parsed, False, "YYYY-MM-DD") if parsed else None

    m = MONTH_NAME_DATE_RE.match(trimmed)
    if m:
        year = _expand_year(int(m[3]))
        parsed = _calendar_date(year, MONTHS[m[2].lower()], int(m[1]))
        return ParsedDate(parsed, False, "DD-Mon-YY") if parsed else None

    m = NUMERIC_DATE_RE.match(trimmed)
    if m:
        a, b = int(m[1]), int(m[2])
        year = _expand_year(int(m[3]))
        ambiguous = a <= 12 and b <= 12 and a != b
        parsed = _calendar_date(year, a, b)
        if parsed:
            return ParsedDate(parsed, ambiguous, "MM/DD/YYYY")
        parsed = _calendar_date(year, b, a)
        if parsed:
            return ParsedDate(parsed, ambiguous, "DD/MM/YYYY")
    return None


class ParsedNumber(NamedTuple):
    value: Decimal
    locale_notice: Optional[str] = None


def parse_number(value: str) -> Optional[ParsedNumber]:
    """Parse European, US and plain notations to a Decimal; None if invalid."""
    trimmed = value.strip()
    if not trimmed:
        return None

    if EUROPEAN_NUMBER_RE.match(trimmed) and not US_THOUSANDS_RE.match(trimmed):
        normalized = trimmed.replace(".", "").replace(",", ".")
        return ParsedNumber(Decimal(normalized), EUROPEAN_FORMAT_NOTICE)

    if US_NUMBER_RE.match(trimmed) or US_THOUSANDS_RE.match(trimmed):
        return ParsedNumber(Decimal(trimmed.replace(",", "")))

    if PLAIN_NUMBER_RE.match(trimmed):
        return ParsedNumber(Decimal(trimmed))

    loose = trimmed.replace(",", "")
    if LOOSE_NUMBER_RE.match(loose):
        try:
            return ParsedNumber(Decimal(loose))
        except InvalidOperation:
            return None
    return None


def _is_blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


def _required(rules: FieldValidationRules, default: bool) -> bool:
    return default if rules.required is None else rules.required


# ---------------------------------------------------------------------------
# Individual validators
# ---------------------------------------------------------------------------

def validate_employee_id(value: str, rules: FieldValidationRules) -> ValidationResult:
    out = ValidationResultBuilder(FieldType.EMPLOYEE_ID)
    if _is_blank(value):
        if _required(rules, True):
            out.error("Employee ID is required", IssueType.MISSING_REQUIRED)
        return out.build()

    trimmed = value.strip()
    if EMPLOYEE_ID_RE.match(trimmed):
        out.value(trimmed)
    else:
        out.error("Employee ID must be alphanumeric (hyphens allowed)")
    return out.build()


def validate_email(value: str, rules: FieldValidationRules) -> ValidationResult:
    out = ValidationResultBuilder(FieldType.EMAIL)
    if _is_blank(value):
        if _required(rules, True):
            out.error("Email is required", IssueType.MISSING_REQUIRED)
        return out.build()

    trimmed = value.strip()
    if EMAIL_RE.match(trimmed):
        out.value(trimmed)
    else:
        out.error(f"Invalid email format: {value}")
    return out.build()


def validate_currency(value: str, rules: FieldValidationRules) -> ValidationResult:
    out = ValidationResultBuilder(FieldType.CURRENCY)
    if _is_blank(value):
        if _required(rules, True):
            out.error("Currency code is required", IssueType.MISSING_REQUIRED)
        return out.build()

    codes = (
        frozenset(c.upper() for c in rules.currency_codes)
        if rules.currency_codes is not None
        else ISO_4217_CODES
    )
    code = value.strip().upper()
    if code in codes:
        out.value(code)
    else:
        out.error(f"Invalid ISO 4217 currency code: {value}")
    return out.build()


def validate_date(value: str, rules: FieldValidationRules) -> ValidationResult:
    out = ValidationResultBuilder(FieldType.DATE)
    if _is_blank(value):
        if _required(rules, True):
            out.error("Date is required", IssueType.MISSING_REQUIRED)
        return out.build()

    parsed = parse_date(value)
    if parsed is None:
        out.error(f"Invalid date format: {value}")
        return out.build()

    out.value(parsed.value)
    if parsed.ambiguous:
        out.warning(f"Ambiguous date format (could be MM/DD or DD/MM): {value}")
    return out.build()


def validate_number(value: str, rules: FieldValidationRules) -> ValidationResult:
    out = ValidationResultBuilder(FieldType.NUMBER)
    if _is_blank(value):
        if _required(rules, True):
            out.error("Number is required", IssueType.MISSING_REQUIRED)
        return out.build()

    parsed = parse_number(value)
    if parsed is None:
        out.error(f"Invalid number format: {value}")
        return out.build()

    out.value(parsed.value)
    if parsed.locale_notice:
        out.warning(parsed.locale_notice, severity=IssueSeverity.INFO)
    if rules.min is not None and parsed.value < rules.min:
        out.error(f"Value {parsed.value} is below minimum {rules.min}", IssueType.OUT_OF_RANGE)
    if rules.max is not None and parsed.value > rules.max:
        out.error(f"Value {parsed.value} exceeds maximum {rules.max}", IssueType.OUT_OF_RANGE)
    return out.build()


def validate_text(value: str, rules: FieldValidationRules) -> ValidationResult:
    out = ValidationResultBuilder(FieldType.TEXT)
    if _is_blank(value):
        if _required(rules, False):
            out.error("Text field is required", IssueType.MISSING_REQUIRED)
        return out.build()

    out.value(value.strip())
    if rules.min_length is not None and len(value) < rules.min_length:
        out.error(f"Text length {len(value)} is below minimum {rules.min_length}")
    if rules.max_length is not None and len(value) > rules.max_length:
        out.error(f"Text length {len(value)} exceeds maximum {rules.max_length}")
    if rules.pattern is not None and not rules.pattern.search(value):
        out.error("Text does not match required pattern")
    return out.build()


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

Validator = Callable[[str, FieldValidationRules], ValidationResult]

VALIDATORS: dict[FieldType, Validator] = {
    FieldType.EMPLOYEE_ID: validate_employee_id,
    FieldType.EMAIL: validate_email,
    FieldType.CURRENCY: validate_currency,
    FieldType.DATE: validate_date,
    FieldType.NUMBER: validate_number,
    FieldType.TEXT: validate_text,
}


def validate_field(
    value: str,
    field_type: FieldType | str,
    rules: FieldValidationRules | None = None,
) -> ValidationResult:
    """Validate ``value`` as ``field_type``; raises only for an unknown type."""
    try:
        kind = FieldType(field_type)
    except ValueError:
        raise UnknownFieldTypeError(field_type) from None
    return VALIDATORS[kind](value, rules or FieldValidationRules())
