"""Shared fixtures: sample bank responses and a fake bank."""

from __future__ import annotations

import json
import logging
import threading
from typing import Any

import pytest

OFX_HEADER = """OFXHEADER:100
DATA:OFXSGML
VERSION:102
SECURITY:NONE
ENCODING:USASCII
CHARSET:1252
COMPRESSION:NONE
OLDFILEUID:NONE
NEWFILEUID:NONE

<OFX>
<BANKMSGSRSV1>
<STMTTRNRS>
<STMTRS>
<CURDEF>AUD
<BANKTRANLIST>
<DTSTART>20250901
<DTEND>20250930
"""

OFX_FOOTER = """</BANKTRANLIST>
<LEDGERBAL>
<BALAMT>1234.56
<DTASOF>20250930
</LEDGERBAL>
</STMTRS>
</STMTTRNRS>
</BANKMSGSRSV1>
</OFX>
"""


def stmttrn(fitid: str, posted: str, amount: str, memo: str, name: str = "PAYMENT") -> str:
    """One SGML transaction block."""
    return (
        "<STMTTRN>\n"
        f"<TRNTYPE>{'DEBIT' if amount.startswith('-') else 'CREDIT'}\n"
        f"<DTPOSTED>{posted}\n"
        f"<TRNAMT>{amount}\n"
        f"<FITID>{fitid}\n"
        f"<NAME>{name}\n"
        f"<MEMO>{memo}\n"
        "</STMTTRN>\n"
    )


def ofx_document(*blocks: str) -> str:
    return OFX_HEADER + "".join(blocks) + OFX_FOOTER


def listing_json(*entries: dict[str, Any]) -> str:
    """Transaction history response body."""
    details = []
    for entry in entries:
        details.append(
            {
                "TransactionId": entry["id"],
                "TransactionCategoryId": 1,
                "LongDescription": entry.get("long"),
                "NppPaymentId": entry.get("payment"),
            }
        )
    return json.dumps({"TransactionDetails": details})


class FakeBank:
    """Stands in for the bank endpoints; records payment lookups."""

    def __init__(self, listing: str, ofx: str, payments: dict[str, Any] | None = None):
        self.listing = listing
        self.ofx = ofx
        self.payments = payments or {}
        self.payment_calls: list[str] = []
        self._lock = threading.Lock()

    def fetch_listing(self) -> str:
        return self.listing

    def fetch_ofx(self) -> str:
        return self.ofx

    def fetch_payment(self, payment_id: str) -> str:
        with self._lock:
            self.payment_calls.append(payment_id)
        response = self.payments.get(payment_id)
        if isinstance(response, Exception):
            raise response
        if response is None:
            raise ConnectionError(f"no route to payment {payment_id}")
        if isinstance(response, str):
            return response
        return json.dumps(response)


@pytest.fixture
def sample_ofx() -> str:
    return ofx_document(
        stmttrn("7", "20250930", "-3.82", "Osko Payment From JOHN SMITH"),
        stmttrn("42", "20250929", "150.00", "Salary   "),
        stmttrn("43", "20250928", "-20.00", "osko payment from JANE DOE"),
    )


@pytest.fixture
def sample_listing() -> str:
    return listing_json(
        {"id": 7.0, "long": "Osko Payment From JOHN SMITH", "payment": "P-7"},
        {"id": 42.0, "long": "Salary"},
        {"id": 43.0, "long": "Osko Payment From JANE DOE", "payment": "P-43"},
    )


@pytest.fixture
def fake_bank(sample_listing: str, sample_ofx: str) -> FakeBank:
    return FakeBank(
        sample_listing,
        sample_ofx,
        payments={
            "P-7": {"PaymentId": "P-7", "Description": "Invoice 1234"},
            "P-43": {"PaymentId": "P-43", "Description": "Rent share  "},
        },
    )


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Drop handlers the CLI attaches so they don't outlive a test's streams."""
    yield
    logger = logging.getLogger("ofx_enricher")
    logger.handlers = []
    logger.setLevel(logging.NOTSET)
