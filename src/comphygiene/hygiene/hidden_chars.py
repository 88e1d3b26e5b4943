"""Hidden and confusable character detection.

Covers NBSP, zero-width marks, smart quotes, dashes, the ellipsis, and TAB
anywhere except the first character of a value. Python strings index by
code point, so positions are code point offsets and astral characters are
never split.
"""

from __future__ import annotations

from typing import NamedTuple

from comphygiene.models.analysis import HiddenCharacterIssue, IssueType


class HiddenCharDef(NamedTuple):
    code_point: int
    char_type: str
    replacement: str
    issue_type: IssueType


HIDDEN_CHARS: tuple[HiddenCharDef, ...] = (
    HiddenCharDef(0x00A0, "NBSP", " ", IssueType.NBSP),
    HiddenCharDef(0x200B, "ZERO_WIDTH_SPACE", "", IssueType.ZERO_WIDTH),
    HiddenCharDef(0x200C, "ZERO_WIDTH_NON_JOINER", "", IssueType.ZERO_WIDTH),
    HiddenCharDef(0x200D, "ZERO_WIDTH_JOINER", "", IssueType.ZERO_WIDTH),
    HiddenCharDef(0xFEFF, "ZERO_WIDTH_NO_BREAK_SPACE", "", IssueType.ZERO_WIDTH),
    HiddenCharDef(0x201C, "LEFT_DOUBLE_QUOTE", '"', IssueType.SMART_QUOTE),
    HiddenCharDef(0x201D, "RIGHT_DOUBLE_QUOTE", '"', IssueType.SMART_QUOTE),
    HiddenCharDef(0x2018, "LEFT_SINGLE_QUOTE", "'", IssueType.SMART_QUOTE),
    HiddenCharDef(0x2019, "RIGHT_SINGLE_QUOTE", "'", IssueType.SMART_QUOTE),
    HiddenCharDef(0x2013, "EN_DASH", "-", IssueType.CUSTOM),
    HiddenCharDef(0x2014, "EM_DASH", "-", IssueType.CUSTOM),
    HiddenCharDef(0x2026, "ELLIPSIS", "...", IssueType.CUSTOM),
)

TAB = HiddenCharDef(0x0009, "TAB", " ", IssueType.CUSTOM)

_BY_CODE_POINT = {d.code_point: d for d in HIDDEN_CHARS}
_BY_CHAR_TYPE = {d.char_type: d for d in (*HIDDEN_CHARS, TAB)}

# str.translate tables: leading position keeps TAB, the rest replace it.
_LEADING_TABLE = {d.code_point: d.replacement for d in HIDDEN_CHARS}
_TRAILING_TABLE = {**_LEADING_TABLE, TAB.code_point: TAB.replacement}


def issue_type_for(char_type: str) -> IssueType:
    d = _BY_CHAR_TYPE.get(char_type)
    return d.issue_type if d else IssueType.CUSTOM


def detect_hidden_characters(text: str, row: int = 0, column: int = 0) -> list[HiddenCharacterIssue]:
    """Return one issue per hidden character in ``text``, in offset order."""
    issues: list[HiddenCharacterIssue] = []
    for position, char in enumerate(text):
        code_point = ord(char)
        d = _BY_CODE_POINT.get(code_point)
        if d is None and code_point == TAB.code_point and position > 0:
            d = TAB
        if d is None:
            continue
        issues.append(
            HiddenCharacterIssue(
                row=row,
                column=column,
                char_type=d.char_type,
                position=position,
                code_point=d.code_point,
                suggested_replacement=d.replacement,
            )
        )
    return issues


def replace_hidden_characters(text: str) -> str:
    """Apply every known replacement in a single left-to-right pass."""
    if not text:
        return text
    return text[:1].translate(_LEADING_TABLE) + text[1:].translate(_TRAILING_TABLE)
