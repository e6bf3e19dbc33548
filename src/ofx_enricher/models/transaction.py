"""Data models for listing transactions, lookups and run results."""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional
import re

# Trailing fractional suffix carried by numeric ids in the listing feed ("42.0")
FRACTIONAL_SUFFIX = re.compile(r"\.0+$")


def normalize_transaction_id(transaction_id: str) -> str:
    """Strip a trailing fractional suffix so listing and OFX ids key-match."""
    return FRACTIONAL_SUFFIX.sub("", str(transaction_id).strip())


def safe_transaction_key(transaction_id: str) -> str:
    """Filesystem-safe form of a transaction id (digits only)."""
    return re.sub(r"[^0-9]", "", normalize_transaction_id(transaction_id))


@dataclass
class TransactionRecord:
    """
    A transaction as reported by the bank's transaction listing feed.

    Only the fields the enrichment needs are kept; the raw entry is
    retained for debugging.
    """

    # Identifier as sent by the listing feed, possibly "1234.0"
    transaction_id: str

    # Long-form description from the listing
    long_description: Optional[str] = None

    # Reference into the NPP/OSKO payment service, if this was an NPP payment
    npp_payment_id: Optional[str] = None

    raw_data: dict[str, Any] = field(default_factory=dict)

    @property
    def normalized_id(self) -> str:
        """Identifier with any fractional suffix removed."""
        return normalize_transaction_id(self.transaction_id)

    @property
    def is_npp(self) -> bool:
        """True when the transaction carries an NPP payment id."""
        return bool(self.npp_payment_id)


@dataclass(frozen=True)
class ReferenceLookupResult:
    """Outcome of one payment reference lookup. Empty description means nothing usable."""

    transaction_id: str
    payment_id: str
    raw_response: str = ""
    description: str = ""

    @property
    def has_description(self) -> bool:
        return bool(self.description)


@dataclass(frozen=True)
class ReconciliationResult:
    """Record counts from the listing feed and the OFX document."""

    listing_count: int
    ofx_count: int

    @property
    def is_mismatch(self) -> bool:
        return self.listing_count != self.ofx_count


@dataclass(frozen=True)
class TransformResult:
    """Rewritten OFX document plus the number of memo lines enriched."""

    document: str
    updated_count: int


@dataclass(frozen=True)
class ReportingPeriod:
    """A calendar month to export."""

    year: int
    month: int
    begin: date
    end: date

    @property
    def begin_timestamp(self) -> str:
        return f"{self.begin.isoformat()}T00:00:00.000"

    @property
    def end_timestamp(self) -> str:
        return f"{self.end.isoformat()}T00:00:00.000"


@dataclass(frozen=True)
class SessionCredentials:
    """Authentication values captured from a logged-in browser session."""

    cookie: str
    csrf_token: str = ""
    account_number: str = ""


@dataclass
class ExportSummary:
    """Summary of one enrichment run."""

    total_transactions: int = 0
    npp_transactions: int = 0
    descriptions_fetched: int = 0
    memos_updated: int = 0
    ofx_transactions: int = 0
    missing_descriptions: list[str] = field(default_factory=list)

    @property
    def count_mismatch(self) -> bool:
        """True when the listing and OFX transaction counts disagree."""
        return self.total_transactions != self.ofx_transactions


@dataclass(frozen=True)
class ExportOutcome:
    """Everything one run produces."""

    document: str
    original: str
    summary: ExportSummary
    reconciliation: ReconciliationResult
