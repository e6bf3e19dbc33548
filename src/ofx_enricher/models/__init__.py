"""Data models for the enrichment pipeline."""

from .transaction import (
    TransactionRecord,
    ReferenceLookupResult,
    ReconciliationResult,
    TransformResult,
    ReportingPeriod,
    SessionCredentials,
    ExportSummary,
    ExportOutcome,
    normalize_transaction_id,
    safe_transaction_key,
)

__all__ = [
    "TransactionRecord",
    "ReferenceLookupResult",
    "ReconciliationResult",
    "TransformResult",
    "ReportingPeriod",
    "SessionCredentials",
    "ExportSummary",
    "ExportOutcome",
    "normalize_transaction_id",
    "safe_transaction_key",
]
