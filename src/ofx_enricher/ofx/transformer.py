"""
Line-oriented OFX rewriter.

Walks the export one line at a time and rewrites four tags:

- ``<DTPOSTED>`` and ``<TRNAMT>`` pass through; their values are remembered.
- ``<FITID>`` becomes ``<raw id>.<posting date>.<amount digits>`` so the
  identifier stays unique across repeated exports.
- ``<MEMO>`` loses the OSKO boilerplate prefix and, when the payment
  reference for the current transaction is known, gets it appended.

All other lines are copied unchanged. The document is never validated;
only the four tags above are looked at.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Optional
import logging
import re

from ..models.transaction import TransformResult

logger = logging.getLogger(__name__)

DEFAULT_MEMO_PREFIX = "Osko Payment From "
DEFAULT_SEPARATOR = " - "

# Dispatch order matters: the first tag found on a line wins
DTPOSTED = "DTPOSTED"
TRNAMT = "TRNAMT"
FITID = "FITID"
MEMO = "MEMO"
TRACKED_TAGS = (DTPOSTED, TRNAMT, FITID, MEMO)

LINE_BREAK = re.compile(r"(?<=\n)")


def compose_fitid(raw_id: str, posted: str, amount: str) -> str:
    """Build the composite identifier ``raw_id.posted.amount``."""
    return f"{raw_id}.{posted}.{amount}"


def amount_digits(amount: str) -> str:
    """Absolute amount without sign or decimal point: ``-3.82`` -> ``382``."""
    return re.sub(r"[-+.]", "", amount.strip())


def split_lines(document: str) -> list[str]:
    """
    Split on newlines only, keeping line endings.

    Form feeds, NEL and the other characters ``str.splitlines`` treats as
    breaks stay inside the line.
    """
    return [line for line in LINE_BREAK.split(document) if line]


def raw_id_digits(fitid: str) -> str:
    """Digits of a raw FITID, as used to key the description index."""
    return re.sub(r"[^0-9]", "", fitid)


def strip_memo_prefix(memo: str, prefix: str = DEFAULT_MEMO_PREFIX) -> str:
    """Remove the vendor prefix (case-insensitive) from the start of a memo."""
    if not prefix:
        return memo
    return re.sub(rf"^{re.escape(prefix)}", "", memo, count=1, flags=re.IGNORECASE)


@dataclass
class TransformState:
    """Values carried forward between lines of one transaction."""

    posted: str = ""
    amount: str = ""
    current_id: str = ""
    updated_count: int = 0

    def start_record(self, raw_id: str) -> str:
        """
        Begin a new transaction at its FITID and return the composite id.

        Date and amount are consumed here so they cannot bleed into a later
        transaction that lacks them. A second FITID before a MEMO simply
        replaces the current id.
        """
        fitid = compose_fitid(raw_id, self.posted, self.amount)
        self.current_id = raw_id
        self.posted = ""
        self.amount = ""
        return fitid


@dataclass(frozen=True)
class _Field:
    """A tagged value split out of one line."""

    lead: str
    value: str
    tail: str
    ending: str

    def render(self, tag: str, value: str) -> str:
        return f"{self.lead}<{tag}>{value}{self.tail}{self.ending}"


def _split_field(line: str, tag: str) -> Optional[_Field]:
    """Split ``line`` around ``<tag>``, or return None if the tag is absent."""
    body = line.rstrip("\r\n")
    ending = line[len(body) :]

    open_tag = f"<{tag}>"
    start = body.find(open_tag)
    if start < 0:
        return None

    rest = body[start + len(open_tag) :]
    close = rest.find(f"</{tag}>")
    if close < 0:
        value, tail = rest, ""
    else:
        value, tail = rest[:close], rest[close:]

    return _Field(lead=body[:start], value=value, tail=tail, ending=ending)


class OfxStreamTransformer:
    """Single-pass rewriter for OFX export text."""

    def __init__(
        self,
        descriptions: Mapping[str, str],
        memo_prefix: str = DEFAULT_MEMO_PREFIX,
        separator: str = DEFAULT_SEPARATOR,
    ):
        """
        Initialize the transformer.

        Args:
            descriptions: Normalized transaction id -> payment reference
            memo_prefix: Boilerplate removed from the start of memos
            separator: Text placed between the memo and the reference
        """
        self.descriptions = descriptions
        self.memo_prefix = memo_prefix
        self.separator = separator

    def transform(self, document: str) -> TransformResult:
        """
        Rewrite a whole OFX document.

        Args:
            document: OFX export text

        Returns:
            The rewritten document and the number of memos enriched
        """
        state = TransformState()
        lines = self.transform_lines(split_lines(document), state)
        output = "".join(lines)

        logger.info(f"Updated {state.updated_count} MEMO tags with payment descriptions")
        return TransformResult(document=output, updated_count=state.updated_count)

    def transform_lines(
        self, lines: Iterable[str], state: Optional[TransformState] = None
    ) -> Iterator[str]:
        """
        Rewrite lines lazily, threading ``state`` through the stream.

        Lines keep their own line endings.
        """
        if state is None:
            state = TransformState()

        for line in lines:
            yield self._transform_line(line, state)

    def _transform_line(self, line: str, state: TransformState) -> str:
        for tag in TRACKED_TAGS:
            field = _split_field(line, tag)
            if field is None:
                continue

            if tag == DTPOSTED:
                state.posted = field.value.strip()
                return line

            if tag == TRNAMT:
                state.amount = amount_digits(field.value)
                return line

            if tag == FITID:
                fitid = state.start_record(raw_id_digits(field.value))
                return field.render(FITID, fitid)

            return field.render(MEMO, self._rewrite_memo(field.value, state))

        return line

    def _rewrite_memo(self, memo: str, state: TransformState) -> str:
        """Clean the memo, append the reference if known, and release the current id."""
        cleaned = strip_memo_prefix(memo, self.memo_prefix).rstrip()
        current_id = state.current_id
        state.current_id = ""

        if not current_id:
            return cleaned

        description = self.descriptions.get(current_id)
        if not description:
            return cleaned

        state.updated_count += 1
        return f"{cleaned}{self.separator}{description.rstrip()}"
