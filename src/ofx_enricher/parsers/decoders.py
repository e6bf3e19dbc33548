"""
Response decoders for the bank's JSON endpoints.

Two interchangeable implementations are provided: a structured decoder
backed by the json module, and a coarse regex decoder that scrapes the
fields it needs out of the raw text. One is selected at startup and the
rest of the pipeline only sees the ResponseDecoder interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional
import json
import logging
import re

from ..models.transaction import TransactionRecord
from ..utils.exceptions import ConfigurationError, ListingParseError

logger = logging.getLogger(__name__)

LISTING_KEY = "TransactionDetails"


class ResponseDecoder(ABC):
    """Abstract base class for response decoders."""

    name: str = ""

    @abstractmethod
    def decode_listing(self, raw: str) -> list[TransactionRecord]:
        """
        Decode a transaction history response.

        Args:
            raw: Response body text

        Returns:
            Transactions in feed order

        Raises:
            ListingParseError: If the body is not a transaction listing
        """
        pass

    @abstractmethod
    def decode_description(self, raw: str) -> str:
        """
        Extract the payment reference from a payment lookup response.

        Returns an empty string when the field is absent. Malformed bodies
        may raise ValueError.
        """
        pass


class JsonResponseDecoder(ResponseDecoder):
    """Decoder that parses responses as JSON documents."""

    name = "structured"

    def decode_listing(self, raw: str) -> list[TransactionRecord]:
        try:
            payload = json.loads(raw)
        except ValueError as e:
            raise ListingParseError(
                f"Transaction listing is not valid JSON (session expired?): {e}"
            ) from e

        if not isinstance(payload, dict) or LISTING_KEY not in payload:
            raise ListingParseError(f"Transaction listing has no {LISTING_KEY} field")

        details = payload[LISTING_KEY] or []
        if not isinstance(details, list):
            raise ListingParseError(f"{LISTING_KEY} is not a list")

        records: list[TransactionRecord] = []
        for idx, entry in enumerate(details):
            if not isinstance(entry, dict) or entry.get("TransactionId") is None:
                logger.warning(f"Skipping listing entry {idx}: no TransactionId")
                continue
            records.append(
                TransactionRecord(
                    transaction_id=str(entry["TransactionId"]),
                    long_description=_optional_text(entry.get("LongDescription")),
                    npp_payment_id=_optional_text(entry.get("NppPaymentId")),
                    raw_data=entry,
                )
            )
        return records

    def decode_description(self, raw: str) -> str:
        payload = json.loads(raw)
        if not isinstance(payload, dict):
            raise ValueError("payment response is not a JSON object")
        return _optional_text(payload.get("Description")) or ""


class RegexResponseDecoder(ResponseDecoder):
    """
    Decoder that scrapes fields with regular expressions.

    Coarser than the structured decoder: string escapes other than quotes
    and slashes are left as-is, and nested objects are not understood.
    """

    name = "regex"

    TRANSACTION_ID = re.compile(r'"TransactionId"\s*:\s*"?([0-9][0-9.]*)"?')
    STRING_FIELD = r'"{field}"\s*:\s*"((?:[^"\\]|\\.)*)"'

    def decode_listing(self, raw: str) -> list[TransactionRecord]:
        if f'"{LISTING_KEY}"' not in raw:
            raise ListingParseError(f"Transaction listing has no {LISTING_KEY} field")

        matches = list(self.TRANSACTION_ID.finditer(raw))
        records: list[TransactionRecord] = []

        for i, match in enumerate(matches):
            # Each entry spans from its opening brace to the next entry's
            end = (
                self._segment_start(raw, matches[i + 1].start())
                if i + 1 < len(matches)
                else len(raw)
            )
            segment = raw[self._segment_start(raw, match.start()) : end]
            records.append(
                TransactionRecord(
                    transaction_id=match.group(1),
                    long_description=self._string_field(segment, "LongDescription"),
                    npp_payment_id=self._string_field(segment, "NppPaymentId"),
                )
            )
        return records

    def decode_description(self, raw: str) -> str:
        return self._string_field(raw, "Description") or ""

    @staticmethod
    def _segment_start(raw: str, position: int) -> int:
        """Start of the JSON object enclosing ``position``."""
        brace = raw.rfind("{", 0, position)
        return brace if brace >= 0 else position

    def _string_field(self, text: str, field: str) -> Optional[str]:
        match = re.search(self.STRING_FIELD.format(field=field), text)
        if not match:
            return None
        return match.group(1).replace('\\"', '"').replace("\\/", "/")


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


_DECODERS: dict[str, type[ResponseDecoder]] = {
    JsonResponseDecoder.name: JsonResponseDecoder,
    RegexResponseDecoder.name: RegexResponseDecoder,
}


def get_decoder(name: str) -> ResponseDecoder:
    """
    Build the decoder registered under ``name``.

    Raises:
        ConfigurationError: If no decoder has that name
    """
    try:
        decoder_cls = _DECODERS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown decoder '{name}', expected one of: {', '.join(sorted(_DECODERS))}"
        ) from None
    logger.debug(f"Using {name} response decoder")
    return decoder_cls()
