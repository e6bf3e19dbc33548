from __future__ import annotations

import logging

import pytest
from conftest import listing_json

from ofx_enricher.parsers.decoders import (
    JsonResponseDecoder,
    RegexResponseDecoder,
    get_decoder,
)
from ofx_enricher.parsers.listing import ListingParser, select_npp_pairs
from ofx_enricher.parsers.session import SessionParser
from ofx_enricher.utils.exceptions import (
    ConfigurationError,
    ListingParseError,
    SessionError,
)

DECODERS = [JsonResponseDecoder(), RegexResponseDecoder()]

LISTING = listing_json(
    {"id": 42.0, "long": "Osko Payment From A B", "payment": "NPP-1"},
    {"id": 43.0, "long": "Card purchase"},
    {"id": 44, "long": None, "payment": "NPP-3"},
)


@pytest.mark.parametrize("decoder", DECODERS, ids=lambda d: d.name)
def test_listing_decoded(decoder):
    records = ListingParser(decoder).parse(LISTING)

    assert [r.transaction_id for r in records] == ["42.0", "43.0", "44"]
    assert [r.npp_payment_id for r in records] == ["NPP-1", None, "NPP-3"]
    assert records[0].long_description == "Osko Payment From A B"
    assert records[0].normalized_id == "42"


@pytest.mark.parametrize("decoder", DECODERS, ids=lambda d: d.name)
def test_npp_pairs_selected_in_order(decoder):
    records = ListingParser(decoder).parse(LISTING)
    assert select_npp_pairs(records) == [("42.0", "NPP-1"), ("44", "NPP-3")]


@pytest.mark.parametrize("decoder", DECODERS, ids=lambda d: d.name)
def test_empty_listing(decoder):
    assert ListingParser(decoder).parse('{"TransactionDetails": []}') == []


@pytest.mark.parametrize("decoder", DECODERS, ids=lambda d: d.name)
def test_unauthenticated_listing_is_fatal(decoder):
    with pytest.raises(ListingParseError):
        ListingParser(decoder).parse("<html><body>Please log in</body></html>")


@pytest.mark.parametrize("decoder", DECODERS, ids=lambda d: d.name)
def test_blank_listing_is_fatal(decoder):
    with pytest.raises(ListingParseError):
        ListingParser(decoder).parse("  \n")


@pytest.mark.parametrize("decoder", DECODERS, ids=lambda d: d.name)
def test_description_extracted(decoder):
    raw = '{"PaymentId": "NPP-1", "Description": "Invoice \\"1234\\"", "Amount": 5}'
    assert decoder.decode_description(raw) == 'Invoice "1234"'


@pytest.mark.parametrize("decoder", DECODERS, ids=lambda d: d.name)
def test_missing_description_is_empty(decoder):
    assert decoder.decode_description('{"PaymentId": "NPP-1"}') == ""
    assert decoder.decode_description('{"Description": null}') == ""


def test_structured_decoder_rejects_malformed_payment():
    with pytest.raises(ValueError):
        JsonResponseDecoder().decode_description("not json")


def test_regex_decoder_tolerates_malformed_payment():
    assert RegexResponseDecoder().decode_description("not json") == ""


def test_structured_decoder_skips_entries_without_id():
    raw = '{"TransactionDetails": [{"LongDescription": "x"}, {"TransactionId": 5}]}'
    records = JsonResponseDecoder().decode_listing(raw)
    assert [r.transaction_id for r in records] == ["5"]


def test_regex_decoder_keeps_fields_with_their_entry():
    raw = (
        '{"TransactionDetails": ['
        '{"TransactionId": 1, "LongDescription": "one"},'
        '{"NppPaymentId": "P2", "TransactionId": 2}'
        "]}"
    )
    records = RegexResponseDecoder().decode_listing(raw)

    assert [(r.transaction_id, r.npp_payment_id) for r in records] == [("1", None), ("2", "P2")]


def test_get_decoder():
    assert isinstance(get_decoder("structured"), JsonResponseDecoder)
    assert isinstance(get_decoder("regex"), RegexResponseDecoder)
    with pytest.raises(ConfigurationError):
        get_decoder("jq")


def test_listing_parse_file(tmp_path):
    path = tmp_path / "listing.json"
    path.write_text(LISTING, encoding="utf-8")
    assert len(ListingParser(JsonResponseDecoder()).parse_file(path)) == 3

    with pytest.raises(ListingParseError):
        ListingParser(JsonResponseDecoder()).parse_file(tmp_path / "missing.json")


CURL = (
    "curl 'https://digital.bankaust.com.au/platform.axd?u=account%2FGetAccount' "
    "--compressed -X POST "
    "-H 'Accept: application/json; charset=utf-8' "
    "-H 'Cookie: ASP.NET_SessionId=abc; __RequestVerificationToken=cookietok; other=1' "
    "--data-raw '{\"__RequestVerificationToken\":\"bodytok\",\"AccountNumber\":\"12345678\"}'"
)


def test_session_prefers_body_token():
    session = SessionParser().parse(CURL)

    assert session.cookie == "ASP.NET_SessionId=abc; __RequestVerificationToken=cookietok; other=1"
    assert session.csrf_token == "bodytok"
    assert session.account_number == "12345678"


def test_session_falls_back_to_cookie_token():
    capture = CURL.replace('"__RequestVerificationToken":"bodytok",', "")
    assert SessionParser().parse(capture).csrf_token == "cookietok"


def test_session_missing_token_and_account_warns(caplog):
    capture = "curl 'https://example' -H 'Cookie: a=1'"
    with caplog.at_level(logging.WARNING, logger="ofx_enricher"):
        session = SessionParser().parse(capture)

    assert session.cookie == "a=1"
    assert session.csrf_token == ""
    assert session.account_number == ""
    assert "__RequestVerificationToken" in caplog.text
    assert "AccountNumber" in caplog.text


def test_session_without_cookie_is_fatal():
    with pytest.raises(SessionError, match="Cookie"):
        SessionParser().parse("curl 'https://example' -H 'Accept: */*'")


def test_empty_session_is_fatal():
    with pytest.raises(SessionError):
        SessionParser().parse("")


def test_session_parse_file(tmp_path):
    path = tmp_path / "curl.txt"
    path.write_text(CURL, encoding="utf-8")
    assert SessionParser().parse_file(path).account_number == "12345678"
