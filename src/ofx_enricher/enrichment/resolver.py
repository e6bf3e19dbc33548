"""
Payment reference resolver.

Looks up the free-text reference of NPP/OSKO payments, which the bank
leaves out of its OFX export. Lookups run in concurrent waves; a failed
lookup is recorded with an empty description and never aborts the batch.
Nothing is retried: re-running the export is the remedy for transient
failures.
"""

from collections.abc import Callable, Sequence
from typing import Optional
import logging

from ..models.transaction import ReferenceLookupResult
from ..parsers.decoders import ResponseDecoder
from .store import InMemoryResultStore, ResultStore
from .waves import run_in_waves

logger = logging.getLogger(__name__)

DEFAULT_WAVE_SIZE = 10

# Fetches the raw payment response for a payment id
PaymentFetcher = Callable[[str], str]


class ReferenceResolver:
    """Resolves payment references for (transaction id, payment id) pairs."""

    def __init__(
        self,
        fetch_payment: PaymentFetcher,
        decoder: ResponseDecoder,
        store: Optional[ResultStore] = None,
        wave_size: int = DEFAULT_WAVE_SIZE,
    ):
        """
        Initialize the resolver.

        Args:
            fetch_payment: Callable returning the raw response for a payment id
            decoder: Decoder used to pull the description out of responses
            store: Where each lookup is recorded (in-memory by default)
            wave_size: Number of concurrent lookups per wave
        """
        self.fetch_payment = fetch_payment
        self.decoder = decoder
        self.store = store if store is not None else InMemoryResultStore()
        self.wave_size = wave_size

    def resolve(
        self, pairs: Sequence[tuple[str, str]]
    ) -> dict[str, ReferenceLookupResult]:
        """
        Resolve references for all pairs.

        Args:
            pairs: (transaction id, payment id) in listing order

        Returns:
            Results keyed by transaction id. A repeated transaction id keeps
            the result of its last pair.
        """
        if not pairs:
            return {}

        logger.info(
            f"Fetching payment references for {len(pairs)} NPP/OSKO transactions"
        )

        def _progress(wave_no: int, size: int) -> None:
            done = (wave_no - 1) * self.wave_size + size
            logger.debug(f"Processed {done} NPP transactions...")

        lookups = run_in_waves(
            pairs,
            self._lookup,
            wave_size=self.wave_size,
            on_wave_complete=_progress,
        )

        results = {result.transaction_id: result for result in lookups}
        fetched = sum(1 for result in results.values() if result.has_description)
        logger.info(
            f"Completed fetching NPP payment details: {fetched} of {len(results)} "
            f"have a description"
        )
        return results

    def _lookup(self, pair: tuple[str, str]) -> ReferenceLookupResult:
        """Fetch and decode one payment; failures become an empty description."""
        transaction_id, payment_id = pair
        raw = ""
        description = ""

        try:
            raw = self.fetch_payment(payment_id) or ""
            description = self.decoder.decode_description(raw)
        except Exception as e:  # noqa: BLE001 - any failure leaves the description empty
            logger.warning(
                f"Payment lookup failed for transaction {transaction_id} "
                f"(PaymentId {payment_id}): {e}"
            )

        if not description:
            logger.debug(f"No description for transaction {transaction_id}")

        result = ReferenceLookupResult(
            transaction_id=transaction_id,
            payment_id=payment_id,
            raw_response=raw,
            description=description,
        )
        self.store.record(result)
        logger.debug(f"Fetched: TxnID={transaction_id} -> Description='{description}'")
        return result
