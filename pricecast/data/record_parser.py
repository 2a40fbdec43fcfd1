"""
Price Record Parser
===================

Turns raw delimited text into an ordered, validated sequence of
(date, price) observations.

INPUT CONTRACT:
    One optional header line, then rows of ``date<delim>price[<delim>...]``
    with the delimiter in {";", ",", "\\t"}. Nothing else is guaranteed.

FALLBACK ORDER (per dataset):
    1. The first line is tried as a data row; if it fails it is the header
    2. Delimiter = first of ";", ",", "\\t" present in the first data line
    3. A line that splits into < 2 fields is re-split on "," (that line only)
    4. Rows without a valid date AND price are skipped with a warning
    5. Stable sort by date, duplicates dropped (first occurrence kept)

Only an empty result is fatal (FormatError). Everything else is a warning.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from pricecast.config import ParserConfig

logger = logging.getLogger(__name__)


class FormatError(ValueError):
    """Raised when raw input contains no parseable price rows."""
    pass


# Candidate delimiters in priority order
DELIMITERS = (";", ",", "\t")
FALLBACK_DELIMITER = ","

# Accepted date layouts: (pattern, strptime format)
DATE_FORMATS = (
    (re.compile(r"^\d{1,2}\.\d{1,2}\.\d{4}$"), "%d.%m.%Y"),
    (re.compile(r"^\d{4}-\d{1,2}-\d{1,2}$"), "%Y-%m-%d"),
    (re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$"), "%m/%d/%Y"),
)

_PRICE_STRIP = re.compile(r"[^0-9.\-]")
_QUOTES = "\"'"


@dataclass(frozen=True)
class Observation:
    """A single daily price observation."""
    date: date
    price: float


@dataclass(frozen=True)
class ParseWarning:
    """A row that was skipped or dropped during parsing."""
    line_number: int  # 1-based, as in the raw text
    line: str
    reason: str


@dataclass
class ParseResult:
    """
    Output of parse_records.

    Attributes:
        observations: Ascending, unique-date observations
        warnings: Non-fatal problems (skipped rows, duplicate dates)
        delimiter: Delimiter detected on the first data line
        header_skipped: True if the first line was treated as a header
    """
    observations: Tuple[Observation, ...]
    warnings: List[ParseWarning] = field(default_factory=list)
    delimiter: str = FALLBACK_DELIMITER
    header_skipped: bool = False

    def __len__(self) -> int:
        return len(self.observations)

    @property
    def dates(self) -> List[date]:
        return [obs.date for obs in self.observations]

    @property
    def prices(self) -> np.ndarray:
        return np.array([obs.price for obs in self.observations], dtype=float)

    def to_frame(self) -> pd.DataFrame:
        """Observations as a DataFrame with 'date' and 'price' columns."""
        return pd.DataFrame({
            "date": pd.to_datetime(self.dates),
            "price": self.prices,
        })


# ============================================================================
# TOKEN PARSING
# ============================================================================

def parse_date_token(token: str) -> Optional[date]:
    """
    Parse a date token in one of DD.MM.YYYY, YYYY-MM-DD, MM/DD/YYYY.

    Returns:
        date, or None if the token matches no layout or is not a real date
    """
    token = token.strip().strip(_QUOTES).strip()
    for pattern, fmt in DATE_FORMATS:
        if pattern.match(token):
            try:
                return datetime.strptime(token, fmt).date()
            except ValueError:
                return None
    return None


def parse_price_token(
    token: str,
    config: Optional[ParserConfig] = None,
) -> Optional[float]:
    """
    Parse a price token after stripping everything but [0-9.-].

    Returns:
        Finite price strictly inside (min_price, max_price), else None
    """
    if config is None:
        config = ParserConfig()

    cleaned = _PRICE_STRIP.sub("", token)
    if not cleaned:
        return None
    try:
        price = float(cleaned)
    except ValueError:
        return None

    if not math.isfinite(price):
        return None
    if not config.min_price < price < config.max_price:
        return None
    return price


def detect_delimiter(line: str) -> str:
    """Return the first candidate delimiter present in line (',' if none)."""
    for delimiter in DELIMITERS:
        if delimiter in line:
            return delimiter
    return FALLBACK_DELIMITER


def split_fields(line: str, delimiter: str) -> List[str]:
    """Split on delimiter, retrying on ',' when fewer than 2 fields result."""
    fields = line.split(delimiter)
    if len(fields) < 2 and delimiter != FALLBACK_DELIMITER:
        fields = line.split(FALLBACK_DELIMITER)
    return fields


def _parse_row(
    line: str,
    delimiter: str,
    config: ParserConfig,
) -> Tuple[Optional[Observation], str]:
    """Parse one row. Returns (observation, "") or (None, reason)."""
    fields = split_fields(line, delimiter)
    if len(fields) < 2:
        return None, "fewer than 2 fields"

    parsed_date = parse_date_token(fields[0])
    if parsed_date is None:
        return None, f"invalid date {fields[0].strip()!r}"

    price = parse_price_token(fields[1], config)
    if price is None:
        return None, f"invalid price {fields[1].strip()!r}"

    return Observation(date=parsed_date, price=price), ""


# ============================================================================
# MAIN ENTRY POINTS
# ============================================================================

def _decode(raw: Union[str, bytes]) -> str:
    if isinstance(raw, bytes):
        try:
            return raw.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise FormatError(f"input is not valid UTF-8: {e}")
    return raw.lstrip("\ufeff")


def parse_records(
    raw: Union[str, bytes],
    config: Optional[ParserConfig] = None,
) -> ParseResult:
    """
    Parse raw delimited text into a ParseResult.

    Args:
        raw: Text (or UTF-8 bytes) as handed over by the fetch layer
        config: Price bounds (default: ParserConfig())

    Returns:
        ParseResult with ascending, unique-date observations

    Raises:
        FormatError if no valid row survives
    """
    if config is None:
        config = ParserConfig()

    text = _decode(raw)
    lines = [
        (number, line.strip())
        for number, line in enumerate(text.splitlines(), start=1)
        if line.strip()
    ]

    if not lines:
        raise FormatError("no valid rows")

    warnings: List[ParseWarning] = []
    rows: List[Tuple[int, str, Observation]] = []

    # Header detection: the first line is data only if it parses as a row
    first_number, first_line = lines[0]
    delimiter = detect_delimiter(first_line)
    first_obs, _ = _parse_row(first_line, delimiter, config)

    header_skipped = first_obs is None
    data_lines = lines[1:]
    if header_skipped:
        if data_lines:
            delimiter = detect_delimiter(data_lines[0][1])
        logger.debug(f"Line {first_number} treated as header: {first_line!r}")
    else:
        rows.append((first_number, first_line, first_obs))

    for number, line in data_lines:
        obs, reason = _parse_row(line, delimiter, config)
        if obs is None:
            warnings.append(ParseWarning(number, line, reason))
            logger.warning(f"Skipping line {number}: {reason}")
            continue
        rows.append((number, line, obs))

    # sorted() is stable: equal dates keep their input order
    rows = sorted(rows, key=lambda row: row[2].date)

    observations: List[Observation] = []
    seen = set()
    for number, line, obs in rows:
        if obs.date in seen:
            warnings.append(ParseWarning(number, line, "duplicate date dropped"))
            continue
        seen.add(obs.date)
        observations.append(obs)

    n_duplicates = len(rows) - len(observations)
    if n_duplicates > 0:
        logger.warning(f"Dropped {n_duplicates} rows with duplicate dates")

    if not observations:
        raise FormatError("no valid rows")

    logger.info(
        f"Parsed {len(observations)} observations "
        f"({observations[0].date} to {observations[-1].date}), "
        f"delimiter={delimiter!r}, {len(warnings)} warnings"
    )

    return ParseResult(
        observations=tuple(observations),
        warnings=warnings,
        delimiter=delimiter,
        header_skipped=header_skipped,
    )


def parse(
    raw: Union[str, bytes],
    config: Optional[ParserConfig] = None,
) -> Tuple[Observation, ...]:
    """Parse raw text and return only the ordered observations."""
    return parse_records(raw, config).observations
