"""
Data Module
===========

Ingestion of raw delimited price records into ordered Observations.

The network fetch that supplies raw text is not part of this package:
callers pass either the text (str or bytes) or handle the failure.
"""

from .record_parser import (
    FormatError,
    Observation,
    ParseWarning,
    ParseResult,
    parse,
    parse_records,
    parse_date_token,
    parse_price_token,
    detect_delimiter,
)

__all__ = [
    "FormatError",
    "Observation",
    "ParseWarning",
    "ParseResult",
    "parse",
    "parse_records",
    "parse_date_token",
    "parse_price_token",
    "detect_delimiter",
]
