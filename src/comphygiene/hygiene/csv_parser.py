"""CSV parsing with delimiter auto-detection."""

from __future__ import annotations

import csv
import io
import sys
from typing import NamedTuple, Optional

CANDIDATE_DELIMITERS: tuple[str, ...] = (",", ";", "\t", "|")
SNIFF_LINES = 5


def _raise_field_size_limit() -> None:
    """Lift the csv module's per-field cap; an unclosed quote runs to end of input."""
    limit = sys.maxsize
    while True:
        try:
            csv.field_size_limit(limit)
            return
        except OverflowError:
            # C long is narrower than Py_ssize_t on some platforms.
            limit //= 2


class ParsedCSV(NamedTuple):
    headers: list[str]
    rows: list[list[str]]
    delimiter: str


def detect_delimiter(text: str) -> str:
    """Pick the candidate delimiter seen most often outside quotes.

    Only the first few lines are inspected; ties keep the earlier candidate
    and a file with none of them defaults to a comma.
    """
    sample = "\n".join(text.split("\n")[:SNIFF_LINES])
    best, best_count = ",", 0
    for delimiter in CANDIDATE_DELIMITERS:
        count = 0
        in_quotes = False
        for char in sample:
            if char == '"':
                in_quotes = not in_quotes
            elif char == delimiter and not in_quotes:
                count += 1
        if count > best_count:
            best, best_count = delimiter, count
    return best


def _is_blank_row(row: list[str]) -> bool:
    return not row or (len(row) == 1 and row[0] == "")


def parse_rows(text: str, delimiter: str) -> list[list[str]]:
    """Split ``text`` into rows of fields, dropping blank lines."""
    # csv rejects NUL on some interpreters; match the decoder's substitution.
    text = text.replace("\x00", "\ufffd")
    _raise_field_size_limit()
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter, quotechar='"')
    return [row for row in reader if not _is_blank_row(row)]


def parse_csv(text: str, delimiter: Optional[str] = None, has_headers: bool = True) -> ParsedCSV:
    """Parse CSV text into headers and data rows.

    Handles quoted fields, doubled quotes and multi-line quoted values.
    Without a header row, headers are synthesized as ``Column 1..N``.
    """
    delimiter = delimiter or detect_delimiter(text)
    rows = parse_rows(text, delimiter)
    if not rows:
        return ParsedCSV([], [], delimiter)

    if has_headers:
        return ParsedCSV(rows[0], rows[1:], delimiter)

    width = max(len(r) for r in rows)
    return ParsedCSV([f"Column {i + 1}" for i in range(width)], rows, delimiter)
