"""Parsers for bank responses and session captures."""

from .decoders import (
    ResponseDecoder,
    JsonResponseDecoder,
    RegexResponseDecoder,
    get_decoder,
)
from .listing import ListingParser, select_npp_pairs
from .session import SessionParser

__all__ = [
    "ResponseDecoder",
    "JsonResponseDecoder",
    "RegexResponseDecoder",
    "get_decoder",
    "ListingParser",
    "select_npp_pairs",
    "SessionParser",
]
