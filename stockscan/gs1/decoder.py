"""Decode scanned barcode strings into GTIN, expiry, batch, serial and quantity.

Three input shapes are recognised, tried in this order:

  - Bracketed AIs:          (01)05012345678900(17)251231(10)ABC123
  - Raw concatenated GS1:   01050123456789001725123110ABC123
  - Plain EAN/UPC/GTIN:     5012345678900

Raw payloads without a group separator are split with a first-match
substring heuristic, so a batch that happens to contain e.g. "21" is cut
short. When a group separator (FNC1, ASCII 29) is present the payload is
walked AI by AI instead, with the separator terminating variable-length
values. An AI the walker does not know is skipped up to the next separator.
"""

from __future__ import annotations

import logging
import re

from .expiry import normalize_expiry
from .models import DecodedRecord

logger = logging.getLogger(__name__)

GS = "\x1d"  # Group Separator used as FNC1 in GS1-128 / DataMatrix
GTIN_LENGTH = 14
PLAIN_MIN_DIGITS = 8

# AIM symbology identifier at the very start, e.g. ]C1, ]d2, ]Q3
_AIM_PREFIX = re.compile(r"^\][A-Za-z][0-9A-Za-z]")
_RAW_GS1 = re.compile(r"^01[0-9]{14}")
_BRACKETED_AI = re.compile(r"\(([0-9]+)\)([^(]*)")
_GTIN14 = re.compile(r"[0-9]{14}")
_SIX_DIGITS = re.compile(r"[0-9]{6}")
_LEADING_DIGITS = re.compile(r"[0-9]+")
_NON_DIGITS = re.compile(r"[^0-9]")

# AIs that terminate a batch (10) / serial (21) value in unseparated payloads
_BATCH_TERMINATORS = ("21", "30", "37", "11", "13", "15", "16")
_SERIAL_TERMINATORS = ("10", "30", "37")

# Used only when walking separator-delimited payloads
_FIXED_LENGTH = {
    "00": 18,  # SSCC
    "01": 14,  # GTIN
    "02": 14,  # GTIN of contents
    "11": 6,   # Production date
    "12": 6,   # Due date
    "13": 6,   # Packaging date
    "15": 6,   # Best before
    "16": 6,   # Sell by
    "17": 6,   # Expiry
}
_VARIABLE_LENGTH = {"10", "21", "30", "37"}


# --- helpers ------------------------------------------------------------------


def digits_only(value: object) -> str:
    """Return only the ASCII digits of ``value``."""
    if value is None:
        return ""
    return _NON_DIGITS.sub("", str(value))


def pad_gtin14(digits: str) -> str:
    """Left-pad a digit string with zeros to 14 characters."""
    return digits.rjust(GTIN_LENGTH, "0")


def gtin13_from_gtin14(gtin14: str) -> str:
    """Strip exactly one leading zero, and only if there is one."""
    return gtin14[1:] if gtin14.startswith("0") else gtin14


def parse_quantity(value: object) -> int:
    """Parse a positive integer quantity, falling back to 1."""
    try:
        qty = int(value)
    except (TypeError, ValueError):
        return 1
    return qty if qty > 0 else 1


def _clean(raw: str) -> str:
    code = raw.strip().replace("\r", "").replace("\n", "")
    return _AIM_PREFIX.sub("", code)


def _set_gtin(record: DecodedRecord, gtin14: str) -> None:
    record.gtin14 = gtin14
    record.gtin13 = gtin13_from_gtin14(gtin14)


def _value_end(text: str, start: int, terminators: tuple[str, ...]) -> int:
    """Index of the earliest terminator AI at or after ``start``, else len."""
    hits = [pos for pos in (text.find(ai, start) for ai in terminators) if pos != -1]
    return min(hits, default=len(text))


def _apply_fields(record: DecodedRecord, fields: dict[str, str]) -> None:
    """Copy expiry / batch / serial / quantity AIs onto the record."""
    expiry = fields.get("17", "")[:6]
    if _SIX_DIGITS.fullmatch(expiry):
        record.expiry = normalize_expiry(expiry)

    if "10" in fields:
        record.batch = fields["10"].strip()
    if "21" in fields:
        record.serial = fields["21"].strip()

    m = _LEADING_DIGITS.match(fields.get("30", ""))
    if m:
        record.quantity = parse_quantity(m.group())


# --- modes --------------------------------------------------------------------


def _decode_bracketed(code: str, record: DecodedRecord) -> None:
    fields: dict[str, str] = {}
    for m in _BRACKETED_AI.finditer(code):
        # A group separator inside a value is an explicit terminator
        value = m.group(2).split(GS, 1)[0]
        fields.setdefault(m.group(1), value)

    gtin = fields.get("01", "")[:GTIN_LENGTH]
    if _GTIN14.fullmatch(gtin):
        _set_gtin(record, gtin)
        record.is_structured = True

    _apply_fields(record, fields)


def _walk_separated(rest: str) -> dict[str, str]:
    fields: dict[str, str] = {}
    i, n = 0, len(rest)
    while i < n:
        if rest[i] == GS:
            i += 1
            continue
        ai = rest[i:i + 2]
        i += 2
        if ai in _FIXED_LENGTH:
            length = _FIXED_LENGTH[ai]
            fields.setdefault(ai, rest[i:i + length])
            i += length
        elif ai in _VARIABLE_LENGTH:
            end = rest.find(GS, i)
            if end == -1:
                end = n
            fields.setdefault(ai, rest[i:end])
            i = end
        else:
            # Unknown length: resume after the next separator
            end = rest.find(GS, i)
            logger.debug("Skipping unknown AI %r in %r", ai, rest)
            if end == -1:
                break
            i = end
    return fields


def _scan_unseparated(rest: str, record: DecodedRecord) -> None:
    # Expiry first: its six digits may contain "10" and must not be read
    # as the start of a batch.
    idx = rest.find("17")
    if idx != -1:
        candidate = rest[idx + 2:idx + 8]
        if _SIX_DIGITS.fullmatch(candidate):
            record.expiry = normalize_expiry(candidate)
            rest = rest[:idx] + rest[idx + 8:]

    idx = rest.find("10")
    if idx != -1:
        start = idx + 2
        record.batch = rest[start:_value_end(rest, start, _BATCH_TERMINATORS)].strip()

    idx = rest.find("21")
    if idx != -1:
        start = idx + 2
        record.serial = rest[start:_value_end(rest, start, _SERIAL_TERMINATORS)].strip()

    idx = rest.find("30")
    if idx != -1:
        m = _LEADING_DIGITS.match(rest, idx + 2)
        if m:
            record.quantity = parse_quantity(m.group())


def _decode_concatenated(code: str, record: DecodedRecord) -> None:
    _set_gtin(record, code[2:16])
    record.is_structured = True

    rest = code[16:]
    if GS in rest:
        _apply_fields(record, _walk_separated(rest))
    else:
        _scan_unseparated(rest, record)


def _decode_plain(code: str, record: DecodedRecord) -> None:
    digits = digits_only(code)
    if PLAIN_MIN_DIGITS <= len(digits) <= GTIN_LENGTH:
        _set_gtin(record, pad_gtin14(digits))


# --- public API ---------------------------------------------------------------


def decode(raw: str) -> DecodedRecord:
    """Decode a scanned string into a :class:`DecodedRecord`.

    Never raises for malformed input; fields that could not be extracted
    are left empty and ``quantity`` stays 1.

    Example:
        decode("(01)05012345678900(17)251231(10)ABC123")
        -> gtin14="05012345678900", expiry.iso="2025-12-31", batch="ABC123"
    """
    if not isinstance(raw, str) or not raw:
        return DecodedRecord(raw=raw if isinstance(raw, str) else "")

    record = DecodedRecord(raw=raw)
    code = _clean(raw)

    if "(" in code:
        _decode_bracketed(code, record)
    elif _RAW_GS1.match(code):
        _decode_concatenated(code, record)
    else:
        _decode_plain(code, record)

    logger.debug(
        "Decoded %r -> gtin14=%s batch=%r expiry=%s qty=%d",
        raw,
        record.gtin14 or "-",
        record.batch,
        record.expiry.iso if record.expiry else "-",
        record.quantity,
    )
    return record
