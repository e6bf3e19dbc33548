"""Utility modules."""

from .exceptions import (
    OfxEnricherError,
    ConfigurationError,
    PeriodError,
    SessionError,
    ListingParseError,
    BankRequestError,
    ExportError,
)
from .logging_config import setup_logging

__all__ = [
    "OfxEnricherError",
    "ConfigurationError",
    "PeriodError",
    "SessionError",
    "ListingParseError",
    "BankRequestError",
    "ExportError",
    "setup_logging",
]
