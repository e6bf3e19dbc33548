"""
Transaction listing parser.
Turns a transaction history response into TransactionRecord objects.
"""

from pathlib import Path
import logging

from ..models.transaction import TransactionRecord
from ..utils.exceptions import ListingParseError
from .decoders import ResponseDecoder

logger = logging.getLogger(__name__)


class ListingParser:
    """Parser for the bank's transaction history response."""

    def __init__(self, decoder: ResponseDecoder):
        """
        Initialize the parser.

        Args:
            decoder: Response decoder chosen at startup
        """
        self.decoder = decoder

    def parse_file(self, file_path: Path) -> list[TransactionRecord]:
        """
        Parse a saved transaction history response.

        Raises:
            ListingParseError: If the file cannot be read or decoded
        """
        logger.info(f"Parsing transaction listing: {file_path}")
        try:
            raw = file_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ListingParseError(f"Failed to read listing file: {e}") from e
        return self.parse(raw)

    def parse(self, raw: str) -> list[TransactionRecord]:
        """
        Parse transaction history response text.

        Args:
            raw: Response body

        Returns:
            Transactions in feed order

        Raises:
            ListingParseError: If the body is empty or not a listing
        """
        if not raw or not raw.strip():
            raise ListingParseError("Empty response from transaction history endpoint")

        records = self.decoder.decode_listing(raw)
        logger.info(f"Found {len(records)} transactions")
        return records


def select_npp_pairs(records: list[TransactionRecord]) -> list[tuple[str, str]]:
    """
    Pick the (transaction id, payment id) pairs that need a reference lookup.

    Order follows the listing. Transactions without a payment id are skipped.
    """
    return [
        (record.transaction_id, record.npp_payment_id)
        for record in records
        if record.transaction_id and record.npp_payment_id
    ]
