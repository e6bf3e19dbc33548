"""Description index: normalized transaction id to payment reference."""

from collections.abc import Iterable, Iterator, Mapping
from typing import Optional
import logging

from ..models.transaction import (
    ReferenceLookupResult,
    TransactionRecord,
    normalize_transaction_id,
)
from .store import ResultStore

logger = logging.getLogger(__name__)


class DescriptionIndex(Mapping[str, str]):
    """
    Read-only mapping from normalized transaction id to description.

    Empty descriptions are never stored, so every key maps to a usable
    value.
    """

    def __init__(self, entries: Optional[Mapping[str, str]] = None):
        self._entries: dict[str, str] = {}
        for key, value in (entries or {}).items():
            if value:
                self._entries[normalize_transaction_id(key)] = value

    def __getitem__(self, transaction_id: str) -> str:
        return self._entries[normalize_transaction_id(transaction_id)]

    def __contains__(self, transaction_id: object) -> bool:
        if not isinstance(transaction_id, str):
            return False
        return normalize_transaction_id(transaction_id) in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"DescriptionIndex({len(self._entries)} entries)"


def build_description_index(
    records: Iterable[TransactionRecord],
    results: Mapping[str, ReferenceLookupResult],
) -> DescriptionIndex:
    """
    Build the index from the listing and the resolver results.

    A transaction is indexed only when its lookup produced a non-empty
    description; that description replaces the listing's long description
    outright. Everything else is left out and receives no enrichment.

    Args:
        records: Full transaction listing
        results: Resolver results keyed by transaction id

    Returns:
        The description index
    """
    by_key = {normalize_transaction_id(tid): r for tid, r in results.items()}
    entries: dict[str, str] = {}

    for record in records:
        result = by_key.get(record.normalized_id)
        if result is None or not result.description:
            continue
        entries[record.normalized_id] = result.description

    index = DescriptionIndex(entries)
    logger.info(f"Indexed {len(index)} payment descriptions")
    return index


def results_from_store(
    store: ResultStore, records: Iterable[TransactionRecord]
) -> dict[str, ReferenceLookupResult]:
    """Read back recorded lookup results for the given NPP transactions."""
    results: dict[str, ReferenceLookupResult] = {}
    for record in records:
        if not record.is_npp:
            continue
        result = store.load(record.transaction_id)
        if result is not None:
            results[record.transaction_id] = result
    return results


def missing_descriptions(
    pairs: Iterable[tuple[str, str]],
    results: Mapping[str, ReferenceLookupResult],
) -> list[str]:
    """Describe NPP transactions whose lookup produced nothing usable."""
    missing: list[str] = []
    for transaction_id, payment_id in pairs:
        result = results.get(transaction_id)
        if result is None:
            missing.append(
                f"Transaction ID {transaction_id} (PaymentId: {payment_id}) - no response saved"
            )
        elif not result.description:
            missing.append(
                f"Transaction ID {transaction_id} (PaymentId: {payment_id}) - empty description"
            )
            logger.debug(
                f"Saved response for {transaction_id}: {result.raw_response or '(empty)'}"
            )
    return missing
