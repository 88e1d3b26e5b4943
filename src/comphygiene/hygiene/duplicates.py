"""Duplicate value detection within a single column."""

from __future__ import annotations

from collections.abc import Sequence


def normalize_key(value: str) -> str:
    return value.strip().lower()


def find_duplicates(values: Sequence[str]) -> dict[str, list[int]]:
    """Group 0-based indices by trimmed, lower-cased value.

    Blank values are ignored and only groups with two or more indices are
    returned. Insertion order follows first occurrence.
    """
    seen: dict[str, list[int]] = {}
    for index, value in enumerate(values):
        key = normalize_key(value or "")
        if not key:
            continue
        seen.setdefault(key, []).append(index)
    return {key: indices for key, indices in seen.items() if len(indices) > 1}
