"""Custom exceptions for the OFX enricher."""


class OfxEnricherError(Exception):
    """Base exception for enrichment errors."""

    pass


class ConfigurationError(OfxEnricherError):
    """Error in configuration."""

    pass


class PeriodError(OfxEnricherError):
    """Invalid reporting period."""

    pass


class SessionError(OfxEnricherError):
    """Missing or unusable session credentials."""

    pass


class ListingParseError(OfxEnricherError):
    """Error parsing the transaction listing response."""

    pass


class BankRequestError(OfxEnricherError):
    """Transport failure on a mandatory bank request."""

    pass


class ExportError(OfxEnricherError):
    """Empty or undecodable OFX export body."""

    pass
