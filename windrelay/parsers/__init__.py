"""Parsers turning raw upstream samples into canonical readings."""

from .html_table import parse_table_sample
from .navis import decode_navis_hex, parse_historical_pairs, parse_live_sample
from .pioupiou import parse_pioupiou_sample
from .weatherfile import parse_weatherfile_sample

__all__ = [
    "decode_navis_hex",
    "parse_historical_pairs",
    "parse_live_sample",
    "parse_pioupiou_sample",
    "parse_table_sample",
    "parse_weatherfile_sample",
]
