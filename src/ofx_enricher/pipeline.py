"""
Export pipeline.
Sequences listing, reference lookups, indexing, OFX rewriting and the
count cross-check into one run.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Optional
import logging

from .config import EnricherConfig
from .enrichment.index import (
    build_description_index,
    missing_descriptions,
    results_from_store,
)
from .enrichment.resolver import PaymentFetcher, ReferenceResolver
from .enrichment.store import ResultStore
from .models.transaction import (
    ExportOutcome,
    ExportSummary,
    ReferenceLookupResult,
    TransactionRecord,
)
from .ofx.document import decode_export
from .ofx.reconciliation import ReconciliationCounter
from .ofx.transformer import OfxStreamTransformer
from .parsers.decoders import ResponseDecoder, get_decoder
from .parsers.listing import ListingParser, select_npp_pairs

logger = logging.getLogger(__name__)


class ExportPipeline:
    """
    Runs one enrichment of an OFX export.

    The pipeline never talks to the network itself; it is handed callables
    that return raw response bodies, so the same flow serves live exports
    and saved files.
    """

    def __init__(
        self,
        config: EnricherConfig,
        decoder: Optional[ResponseDecoder] = None,
        store: Optional[ResultStore] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            config: Application configuration
            decoder: Response decoder (chosen from config when omitted)
            store: Where lookup results are recorded (in-memory when omitted)
        """
        self.config = config
        self.decoder = decoder or get_decoder(config.enrichment.decoder)
        self.store = store
        self.listing_parser = ListingParser(self.decoder)
        self.counter = ReconciliationCounter()

    def run(
        self,
        fetch_listing: Callable[[], str],
        fetch_ofx: Callable[[], str],
        fetch_payment: Optional[PaymentFetcher] = None,
        replay_store: Optional[ResultStore] = None,
    ) -> ExportOutcome:
        """
        Run the pipeline.

        Payment references come from ``replay_store`` when given (no
        lookups are made), otherwise from ``fetch_payment``. With neither,
        memos are only cleaned.

        Args:
            fetch_listing: Returns the raw transaction history
            fetch_ofx: Returns the raw OFX export body
            fetch_payment: Returns the raw payment details for a payment id
            replay_store: Previously recorded lookup results

        Returns:
            Rewritten and original documents with a run summary

        Raises:
            ListingParseError: If the listing is empty or malformed
            ExportError: If the OFX body is empty or not OFX
        """
        start_time = datetime.now()

        records = self.listing_parser.parse(fetch_listing())
        pairs = select_npp_pairs(records)
        logger.info(f"Found {len(pairs)} NPP/OSKO transactions to fetch payment references for")

        # Fetched before any lookups so a dead session fails fast
        original = decode_export(fetch_ofx())
        logger.info(f"OFX file size: {len(original.encode('utf-8'))} bytes")

        results = self._resolve(pairs, records, fetch_payment, replay_store)
        index = build_description_index(records, results)

        transformer = OfxStreamTransformer(
            index,
            memo_prefix=self.config.enrichment.memo_prefix,
            separator=self.config.enrichment.separator,
        )
        transformed = transformer.transform(original)
        reconciliation = self.counter.reconcile(len(records), original)

        missing = missing_descriptions(pairs, results)
        for line in missing:
            logger.debug(f"NPP transaction missing description: {line}")

        summary = ExportSummary(
            total_transactions=len(records),
            npp_transactions=len(pairs),
            descriptions_fetched=len(index),
            memos_updated=transformed.updated_count,
            ofx_transactions=reconciliation.ofx_count,
            missing_descriptions=missing,
        )

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Export processed in {elapsed:.2f}s: {summary.descriptions_fetched} "
            f"descriptions, {summary.memos_updated} memos updated"
        )
        return ExportOutcome(
            document=transformed.document,
            original=original,
            summary=summary,
            reconciliation=reconciliation,
        )

    def _resolve(
        self,
        pairs: list[tuple[str, str]],
        records: list[TransactionRecord],
        fetch_payment: Optional[PaymentFetcher],
        replay_store: Optional[ResultStore],
    ) -> dict[str, ReferenceLookupResult]:
        if not pairs:
            return {}

        if replay_store is not None:
            results = results_from_store(replay_store, records)
            logger.info(f"Replayed {len(results)} recorded payment lookups")
            return results

        if fetch_payment is None:
            logger.warning("No payment source available; memos will not be enriched")
            return {}

        resolver = ReferenceResolver(
            fetch_payment,
            self.decoder,
            store=self.store,
            wave_size=self.config.enrichment.wave_size,
        )
        return resolver.resolve(pairs)
