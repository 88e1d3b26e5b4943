"""Encoding and byte-order-mark detection for raw upload bytes."""

from __future__ import annotations

import codecs
from typing import NamedTuple

import chardet

from comphygiene.models.analysis import BOMType, EncodingResult

# Checked in order; the UTF-8 signature is longest and goes first.
_BOM_SIGNATURES: tuple[tuple[bytes, BOMType], ...] = (
    (codecs.BOM_UTF8, BOMType.UTF8),
    (codecs.BOM_UTF16_LE, BOMType.UTF16_LE),
    (codecs.BOM_UTF16_BE, BOMType.UTF16_BE),
)

_BOM_ENCODING_NAMES = {
    BOMType.UTF8: "UTF-8",
    BOMType.UTF16_LE: "UTF-16-LE",
    BOMType.UTF16_BE: "UTF-16-BE",
}

# Python codec for each reported encoding name that differs from its codec.
_CODEC_NAMES = {
    "UTF-8": "utf-8",
    "UTF-16-LE": "utf-16-le",
    "UTF-16-BE": "utf-16-be",
}

ASCII_CONFIDENCE = 0.8
FALLBACK_CONFIDENCE = 0.1
MAX_GUESS_CONFIDENCE = 0.95


class BOMDetection(NamedTuple):
    has_bom: bool
    bom_type: BOMType
    bom_length: int


def detect_bom(data: bytes) -> BOMDetection:
    """Match the three standard BOM signatures against the start of ``data``."""
    for signature, bom_type in _BOM_SIGNATURES:
        if data.startswith(signature):
            return BOMDetection(True, bom_type, len(signature))
    return BOMDetection(False, BOMType.NONE, 0)


def _utf8_confidence(data: bytes) -> float | None:
    """Return a confidence if ``data`` is well-formed UTF-8, else None."""
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return None
    return ASCII_CONFIDENCE if data.isascii() else 1.0


def _normalize_guess(name: str) -> str:
    lowered = name.lower()
    if lowered in ("ascii", "utf-8", "utf8"):
        return "UTF-8"
    return name


def detect_encoding(data: bytes) -> EncodingResult:
    """Detect the encoding of ``data``.

    A BOM is authoritative (confidence 1.0). Without one, well-formed UTF-8
    wins; pure ASCII is reported as UTF-8 at reduced confidence because it
    decodes identically under most single-byte encodings. Anything else is
    a chardet guess capped below certainty. Never raises: an unrecognizable
    buffer degrades to low-confidence UTF-8.
    """
    bom = detect_bom(data)
    if bom.has_bom:
        return EncodingResult(
            encoding=_BOM_ENCODING_NAMES[bom.bom_type],
            confidence=1.0,
            has_bom=True,
            bom_type=bom.bom_type,
        )

    utf8 = _utf8_confidence(data)
    if utf8 is not None:
        return EncodingResult(encoding="UTF-8", confidence=utf8)

    guess = chardet.detect(data)
    name = guess.get("encoding")
    if not name:
        return EncodingResult(encoding="UTF-8", confidence=FALLBACK_CONFIDENCE)

    confidence = min(float(guess.get("confidence") or 0.0), MAX_GUESS_CONFIDENCE)
    return EncodingResult(encoding=_normalize_guess(name), confidence=confidence)


def codec_for(encoding: EncodingResult) -> str:
    """Python codec name for a detected encoding, falling back to UTF-8."""
    name = _CODEC_NAMES.get(encoding.encoding, encoding.encoding)
    try:
        return codecs.lookup(name).name
    except LookupError:
        return "utf-8"


def decode_bytes(data: bytes, encoding: EncodingResult | None = None) -> str:
    """Strip any BOM and decode, substituting undecodable bytes."""
    if encoding is None:
        encoding = detect_encoding(data)
    bom = detect_bom(data)
    return data[bom.bom_length:].decode(codec_for(encoding), errors="replace")
