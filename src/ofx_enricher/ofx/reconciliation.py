"""Cross-check of transaction counts between the listing and the OFX export."""

import logging

from ..models.transaction import ReconciliationResult

logger = logging.getLogger(__name__)

RECORD_MARKER = "<STMTTRN>"


class ReconciliationCounter:
    """
    Compares the listing's transaction count with the OFX record count.

    The two feeds are served by different endpoints and may legitimately
    disagree (pending versus posted transactions), so a mismatch is only
    reported, never raised.
    """

    def __init__(self, marker: str = RECORD_MARKER):
        self.marker = marker

    def count_records(self, document: str) -> int:
        """Number of transaction records in an OFX document."""
        return document.count(self.marker)

    def reconcile(self, listing_count: int, document: str) -> ReconciliationResult:
        """
        Compare counts and warn on a mismatch.

        Args:
            listing_count: Transactions returned by the listing feed
            document: OFX export text

        Returns:
            Both counts and the mismatch flag
        """
        result = ReconciliationResult(
            listing_count=listing_count,
            ofx_count=self.count_records(document),
        )
        logger.info(f"Transactions in OFX file: {result.ofx_count}")

        if result.is_mismatch:
            logger.warning(
                f"OFX has {result.ofx_count} transactions but we fetched "
                f"{result.listing_count} from the API; the export endpoint may be "
                f"filtering differently"
            )
        return result
