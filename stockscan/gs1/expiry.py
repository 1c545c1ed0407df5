"""GS1 YYMMDD expiry normalization and shelf status classification."""

from __future__ import annotations

import calendar
import re
from datetime import date

from .models import Expiry

DEFAULT_SOON_DAYS = 90

EXPIRED = "expired"
EXPIRING = "expiring"
OK = "ok"
UNKNOWN = "unknown"

_YYMMDD = re.compile(r"[0-9]{6}")


def normalize_expiry(yymmdd: str) -> Expiry:
    """Convert a 6-digit GS1 date code into an :class:`Expiry`.

    The year is always 2000 + YY. A day of ``00`` means "end of month" in
    GS1 and is replaced by the last calendar day of that month.

    Raises:
        ValueError: If the input is not exactly six ASCII digits.
    """
    if not isinstance(yymmdd, str) or not _YYMMDD.fullmatch(yymmdd):
        raise ValueError(f"expiry must be 6 digits (YYMMDD): {yymmdd!r}")

    yy = int(yymmdd[0:2])
    mm = int(yymmdd[2:4])
    dd = int(yymmdd[4:6])
    year = 2000 + yy

    # Out-of-range months have no last day to resolve against
    if dd == 0 and 1 <= mm <= 12:
        dd = calendar.monthrange(year, mm)[1]

    return Expiry(
        iso=f"{year:04d}-{mm:02d}-{dd:02d}",
        ddmmyy=f"{dd:02d}{mm:02d}{yy:02d}",
        display=f"{dd:02d}/{mm:02d}/{year:04d}",
    )


def expiry_status(
    iso: str,
    today: date | None = None,
    soon_days: int = DEFAULT_SOON_DAYS,
) -> str:
    """Classify an ISO expiry date relative to today.

    Returns one of ``expired``, ``expiring`` (within ``soon_days`` days,
    inclusive), ``ok`` or ``unknown`` (empty or not a calendar date).
    """
    if not iso:
        return UNKNOWN
    try:
        expiry = date.fromisoformat(iso)
    except ValueError:
        return UNKNOWN

    if today is None:
        today = date.today()

    days_left = (expiry - today).days
    if days_left < 0:
        return EXPIRED
    if days_left <= soon_days:
        return EXPIRING
    return OK
