"""GS1 Application Identifier decoding and expiry normalization."""

from .decoder import (
    decode,
    digits_only,
    gtin13_from_gtin14,
    pad_gtin14,
    parse_quantity,
)
from .expiry import (
    DEFAULT_SOON_DAYS,
    EXPIRED,
    EXPIRING,
    OK,
    UNKNOWN,
    expiry_status,
    normalize_expiry,
)
from .models import DecodedRecord, Expiry

__all__ = [
    "DecodedRecord",
    "Expiry",
    "decode",
    "digits_only",
    "pad_gtin14",
    "gtin13_from_gtin14",
    "parse_quantity",
    "normalize_expiry",
    "expiry_status",
    "DEFAULT_SOON_DAYS",
    "EXPIRED",
    "EXPIRING",
    "OK",
    "UNKNOWN",
]
