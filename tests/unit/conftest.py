"""Shared unit test fixtures: a small messy employee file."""

from __future__ import annotations

import pytest

HEADERS = ["Employee ID", "Email", "Name"]

# Row 2 is missing a required email; row 3 carries a trailing NBSP in a
# free-text column.
ROWS = [
    ["E1001", "jane@example.com", "Jane Doe"],
    ["E1002", "", "John Roe"],
    ["E1003", "kim@example.com", "Kim Lee\u00a0"],
]


def to_csv_bytes(headers: list[str], rows: list[list[str]], encoding: str = "utf-8") -> bytes:
    lines = [",".join(headers), *(",".join(r) for r in rows)]
    return ("\n".join(lines) + "\n").encode(encoding)


@pytest.fixture
def headers() -> list[str]:
    return list(HEADERS)


@pytest.fixture
def rows() -> list[list[str]]:
    return [list(r) for r in ROWS]


@pytest.fixture
def employee_csv() -> bytes:
    return to_csv_bytes(HEADERS, ROWS)
