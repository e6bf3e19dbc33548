from __future__ import annotations

import logging

from ofx_enricher.enrichment.index import (
    DescriptionIndex,
    build_description_index,
    missing_descriptions,
)
from ofx_enricher.models.transaction import ReferenceLookupResult, TransactionRecord


def _result(tid: str, description: str) -> ReferenceLookupResult:
    return ReferenceLookupResult(transaction_id=tid, payment_id=f"P-{tid}", description=description)


def test_fractional_suffix_normalised():
    records = [TransactionRecord("42.0", "Osko Payment From A", "P-42")]
    index = build_description_index(records, {"42.0": _result("42.0", "Invoice 9")})

    assert dict(index) == {"42": "Invoice 9"}
    assert "42" in index
    assert "42.0" in index
    assert index["42"] == "Invoice 9"


def test_resolved_description_replaces_long_description():
    records = [TransactionRecord("7", "LONG TEXT", "P-7")]
    index = build_description_index(records, {"7": _result("7", "Reference")})

    assert index["7"] == "Reference"


def test_empty_and_missing_results_excluded():
    records = [
        TransactionRecord("1", "one", "P-1"),
        TransactionRecord("2", "two", "P-2"),
        TransactionRecord("3", "three"),
    ]
    index = build_description_index(records, {"1": _result("1", "")})

    assert len(index) == 0
    assert "3" not in index


def test_every_key_has_a_value():
    records = [TransactionRecord(str(i), None, f"P-{i}") for i in range(6)]
    results = {str(i): _result(str(i), "ref" if i % 2 else "") for i in range(6)}

    index = build_description_index(records, results)

    assert sorted(index) == ["1", "3", "5"]
    assert all(index[key] for key in index)


def test_results_without_listing_entry_ignored():
    index = build_description_index([], {"9": _result("9", "orphan")})
    assert len(index) == 0


def test_index_constructor_drops_empty_values():
    index = DescriptionIndex({"1.0": "a", "2": ""})
    assert dict(index) == {"1": "a"}
    assert index.get("2") is None
    assert 1 not in index


def test_missing_descriptions_report():
    pairs = [("1", "P-1"), ("2", "P-2"), ("3", "P-3")]
    results = {"1": _result("1", "ok"), "2": _result("2", "")}

    missing = missing_descriptions(pairs, results)

    assert missing == [
        "Transaction ID 2 (PaymentId: P-2) - empty description",
        "Transaction ID 3 (PaymentId: P-3) - no response saved",
    ]


def test_missing_descriptions_logs_saved_payload(caplog):
    results = {
        "2": ReferenceLookupResult("2", "P-2", '{"Description": null}', ""),
        "3": ReferenceLookupResult("3", "P-3", "", ""),
    }
    with caplog.at_level(logging.DEBUG, logger="ofx_enricher"):
        missing = missing_descriptions([("2", "P-2"), ("3", "P-3")], results)

    assert len(missing) == 2
    assert 'Saved response for 2: {"Description": null}' in caplog.text
    assert "Saved response for 3: (empty)" in caplog.text
