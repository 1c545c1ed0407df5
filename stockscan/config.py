"""TOML configuration loader for stockscan."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from .catalog.matcher import AMBIGUOUS_POLICIES, FALLTHROUGH
from .db.schema import DEFAULT_DB_PATH
from .gs1.expiry import DEFAULT_SOON_DAYS
from .inventory import UNKNOWN_PRODUCT_NAME

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]


@dataclass
class DatabaseConfig:
    path: str = DEFAULT_DB_PATH


@dataclass
class ExpiryConfig:
    soon_days: int = DEFAULT_SOON_DAYS


@dataclass
class MatchingConfig:
    ambiguous_last8: str = FALLTHROUGH


@dataclass
class IntakeConfig:
    unknown_name: str = UNKNOWN_PRODUCT_NAME
    review_unknown: bool = True
    short_code_min_digits: int = 5


@dataclass
class ExportConfig:
    directory: str = "."


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class StockScanConfig:
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    expiry: ExpiryConfig = field(default_factory=ExpiryConfig)
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    intake: IntakeConfig = field(default_factory=IntakeConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | Path | None = None) -> StockScanConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    ``STOCKSCAN_DB_PATH`` and ``STOCKSCAN_LOG_LEVEL`` override values the
    file leaves unset.

    Raises:
        ValueError: If ``matching.ambiguous_last8`` is not a known policy.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    dbs = raw.get("database", {})
    exp = raw.get("expiry", {})
    mat = raw.get("matching", {})
    itk = raw.get("intake", {})
    out = raw.get("export", {})
    log = raw.get("logging", {})

    # Resolve: config file → environment variable → default
    db_path = dbs.get("path", "") or os.environ.get(
        "STOCKSCAN_DB_PATH", DEFAULT_DB_PATH
    )
    log_level = log.get("level", "") or os.environ.get(
        "STOCKSCAN_LOG_LEVEL", "INFO"
    )

    ambiguous = mat.get("ambiguous_last8", FALLTHROUGH)
    if ambiguous not in AMBIGUOUS_POLICIES:
        raise ValueError(
            f"matching.ambiguous_last8 must be one of "
            f"{', '.join(AMBIGUOUS_POLICIES)}: got {ambiguous!r}"
        )

    return StockScanConfig(
        database=DatabaseConfig(path=db_path),
        expiry=ExpiryConfig(
            soon_days=int(exp.get("soon_days", DEFAULT_SOON_DAYS)),
        ),
        matching=MatchingConfig(ambiguous_last8=ambiguous),
        intake=IntakeConfig(
            unknown_name=itk.get("unknown_name", UNKNOWN_PRODUCT_NAME),
            review_unknown=itk.get("review_unknown", True),
            short_code_min_digits=int(itk.get("short_code_min_digits", 5)),
        ),
        export=ExportConfig(
            directory=out.get("directory", "."),
        ),
        logging=LoggingConfig(level=str(log_level).upper()),
    )
